"""
Tests for the task state machine and capability checks.
"""
import pytest

from neighborly.errors import InvalidState, ValidationError
from neighborly.models import (
    Category,
    TaskStatus,
    TRANSITIONS,
    can_transition,
    ensure_transition,
    parse_enum,
    parse_location,
    sources_of,
)
from neighborly.permissions import TaskAction, can_act, counterpart_of

TASK = {'taskId': 't1', 'seekerId': 'seeker', 'helperId': 'helper', 'status': 'assigned', 'applicants': ['helper']}


class TestTransitions:
    """Tests for the transition table."""

    def test_every_status_has_an_entry(self):
        assert set(TRANSITIONS) == set(TaskStatus)

    def test_terminal_statuses(self):
        assert TaskStatus.COMPLETED.is_terminal
        assert TaskStatus.CANCELLED.is_terminal
        assert not TaskStatus.OPEN.is_terminal

    def test_lifecycle_edges(self):
        assert can_transition(TaskStatus.OPEN, TaskStatus.ASSIGNED)
        assert can_transition(TaskStatus.OPEN, TaskStatus.CANCELLED)
        assert can_transition(TaskStatus.ASSIGNED, TaskStatus.COMPLETED)
        assert can_transition(TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED)
        assert not can_transition(TaskStatus.OPEN, TaskStatus.COMPLETED)
        assert not can_transition(TaskStatus.COMPLETED, TaskStatus.COMPLETED)
        assert not can_transition(TaskStatus.ASSIGNED, TaskStatus.OPEN)

    def test_completion_sources(self):
        assert sources_of(TaskStatus.COMPLETED) == {TaskStatus.ASSIGNED, TaskStatus.IN_PROGRESS}

    def test_helper_statuses(self):
        """A helper is set exactly in assigned, in_progress and completed."""
        with_helper = {s for s in TaskStatus if s.has_helper}
        assert with_helper == {TaskStatus.ASSIGNED, TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED}

    def test_ensure_transition_raises(self):
        with pytest.raises(InvalidState):
            ensure_transition({'status': 'completed'}, TaskStatus.COMPLETED)


class TestParsing:

    def test_parse_enum(self):
        assert parse_enum(Category, 'pets', 'category') is Category.PETS
        with pytest.raises(ValidationError, match='household'):
            parse_enum(Category, 'gardening', 'category')

    def test_parse_location(self):
        assert parse_location({'lat': '1.5', 'lng': 2, 'address': 'x'}) == {'lat': 1.5, 'lng': 2.0, 'address': 'x'}

    @pytest.mark.parametrize('value', [None, {}, {'lat': 1, 'lng': 2}, {'lat': 'a', 'lng': 2, 'address': 'x'},
                                       {'lat': 91, 'lng': 0, 'address': 'x'}])
    def test_parse_location_rejects(self, value):
        with pytest.raises(ValidationError):
            parse_location(value)


class TestCanAct:
    """Tests for relationship checks re-derived from the task."""

    def test_anonymous_can_do_nothing(self):
        assert not any(can_act(None, TASK, action) for action in TaskAction)

    def test_seeker(self):
        assert can_act('seeker', TASK, TaskAction.ASSIGN)
        assert can_act('seeker', TASK, TaskAction.COMPLETE)
        assert not can_act('seeker', TASK, TaskAction.APPLY)

    def test_helper(self):
        assert can_act('helper', TASK, TaskAction.COMPLETE)
        assert can_act('helper', TASK, TaskAction.SEND_MESSAGE)
        assert not can_act('helper', TASK, TaskAction.ASSIGN)

    def test_stranger(self):
        assert can_act('stranger', TASK, TaskAction.APPLY)
        assert not can_act('stranger', TASK, TaskAction.READ_MESSAGES)
        assert not can_act('stranger', TASK, TaskAction.REVIEW)

    def test_counterpart(self):
        assert counterpart_of('seeker', TASK) == 'helper'
        assert counterpart_of('helper', TASK) == 'seeker'
        assert counterpart_of('seeker', {**TASK, 'helperId': None}) is None
