"""
Data models and status constants for the neighborhood task exchange.
Based on the task lifecycle: open → assigned → (in_progress) → completed, open → cancelled
"""
from enum import Enum

from .errors import InvalidState, ValidationError


class TaskStatus(str, Enum):
    """Task lifecycle statuses."""
    OPEN = 'open'
    ASSIGNED = 'assigned'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self]

    @property
    def has_helper(self) -> bool:
        """Statuses in which a helper must be set on the task."""
        return self in HELPER_STATUSES


# Legal moves of the state machine. No operation produces CANCELLED or
# IN_PROGRESS yet; their edges are still listed so completion from
# in_progress is accepted.
TRANSITIONS = {
    TaskStatus.OPEN: frozenset({TaskStatus.ASSIGNED, TaskStatus.CANCELLED}),
    TaskStatus.ASSIGNED: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.COMPLETED}),
    TaskStatus.COMPLETED: frozenset(),
    TaskStatus.CANCELLED: frozenset(),
}

HELPER_STATUSES = frozenset({TaskStatus.ASSIGNED, TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED})


def status_of(task: dict) -> TaskStatus:
    return TaskStatus(task['status'])


def can_transition(current: TaskStatus, target: TaskStatus) -> bool:
    return target in TRANSITIONS[current]


def sources_of(target: TaskStatus) -> frozenset:
    """Statuses from which ``target`` can be reached."""
    return frozenset(s for s, targets in TRANSITIONS.items() if target in targets)


def ensure_transition(task: dict, target: TaskStatus) -> None:
    """Raise InvalidState unless the task may move to ``target``."""
    current = status_of(task)
    if not can_transition(current, target):
        raise InvalidState(f"Task cannot move from '{current.value}' to '{target.value}'")


def ensure_status(task: dict, expected: TaskStatus) -> None:
    if status_of(task) != expected:
        raise InvalidState(f'Task is not {expected.value}')


class Category(str, Enum):
    """Closed set of task categories."""
    HOUSEHOLD = 'household'
    PETS = 'pets'
    ELDERLY = 'elderly'
    DIGITAL = 'digital'
    ERRANDS = 'errands'
    OTHER = 'other'


class UserType(str, Enum):
    HELPER = 'helper'
    SEEKER = 'seeker'
    BOTH = 'both'


class MessageType(str, Enum):
    TEXT = 'text'
    SYSTEM = 'system'


class ReviewType(str, Enum):
    HELPER_TO_SEEKER = 'helper_to_seeker'
    SEEKER_TO_HELPER = 'seeker_to_helper'


class TaskListType(str, Enum):
    """Direction of the My-tasks listing."""
    POSTED = 'posted'
    HELPING = 'helping'


def parse_enum(enum_cls, value, field: str):
    """Coerce a client-supplied string into ``enum_cls`` or raise ValidationError."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ', '.join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field} '{value}' (expected one of: {allowed})")


def parse_location(value) -> dict:
    """Validate a {lat, lng, address} object coming from the client."""
    if not isinstance(value, dict):
        raise ValidationError('Location must be an object with lat, lng and address')
    try:
        lat = float(value['lat'])
        lng = float(value['lng'])
    except (KeyError, TypeError, ValueError):
        raise ValidationError('Location requires numeric lat and lng')
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise ValidationError('Location coordinates out of range')
    address = value.get('address')
    if not isinstance(address, str):
        raise ValidationError('Location requires an address string')
    return {'lat': lat, 'lng': lng, 'address': address}


# Text of the chat line emitted to a helper on assignment
ASSIGNMENT_NOTICE = 'Task has been assigned to you! You can now start working on it.'

# Reason recorded on points ledger entries
COMPLETION_REASON = 'Task completed'
