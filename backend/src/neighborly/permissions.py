"""
Capability checks re-derived from the stored task on every call.

Nothing here trusts a role claimed by the client: whether a caller is the
seeker or the helper of a task is read from the task record itself.
"""
from enum import Enum
from typing import Optional


class TaskAction(str, Enum):
    APPLY = 'apply'
    ASSIGN = 'assign'
    COMPLETE = 'complete'
    SEND_MESSAGE = 'send_message'
    READ_MESSAGES = 'read_messages'
    REVIEW = 'review'


def is_seeker(user_id: Optional[str], task: dict) -> bool:
    return bool(user_id) and task.get('seekerId') == user_id


def is_helper(user_id: Optional[str], task: dict) -> bool:
    return bool(user_id) and task.get('helperId') == user_id


def is_participant(user_id: Optional[str], task: dict) -> bool:
    return is_seeker(user_id, task) or is_helper(user_id, task)


def counterpart_of(user_id: str, task: dict) -> Optional[str]:
    """The other participant of the task, or None when no helper is assigned yet."""
    if is_seeker(user_id, task):
        return task.get('helperId')
    return task.get('seekerId')


def can_act(user_id: Optional[str], task: dict, action: TaskAction) -> bool:
    """
    Relationship check for ``action`` on ``task``.

    Status checks are the state machine's concern and are not repeated here.
    """
    if not user_id:
        return False
    if action == TaskAction.APPLY:
        return not is_seeker(user_id, task)
    if action == TaskAction.ASSIGN:
        return is_seeker(user_id, task)
    if action in (TaskAction.COMPLETE, TaskAction.SEND_MESSAGE,
                  TaskAction.READ_MESSAGES, TaskAction.REVIEW):
        return is_participant(user_id, task)
    raise ValueError(f'Unknown action: {action}')
