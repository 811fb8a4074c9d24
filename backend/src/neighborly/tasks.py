"""
Task lifecycle engine.

Mutations validate against the stored task (status through the state
machine in ``models``, relationships through ``permissions``) and then
commit through a conditional store write that re-asserts the same
preconditions. When the store refuses, the task is re-read and the checks
run again so the caller gets the error matching the state that won.
"""
import uuid
from typing import Any, Dict, List, Optional

from .config import config
from .errors import (
    ConditionFailed,
    DuplicateApplication,
    Forbidden,
    InvalidState,
    NotAnApplicant,
    NotFound,
    SelfApplication,
    Unauthenticated,
    ValidationError,
)
from .geo import bounding_box, format_distance, haversine_km, in_box
from .logging import logger
from .models import (
    ASSIGNMENT_NOTICE,
    Category,
    MessageType,
    TaskListType,
    TaskStatus,
    ensure_status,
    ensure_transition,
    parse_enum,
    parse_location,
)
from .permissions import TaskAction, can_act
from .reputation import build_points_award
from .users import applicant_summary, user_summary
from .utils import now_iso


def _require_user(user_id: Optional[str]) -> str:
    if not user_id:
        raise Unauthenticated()
    return user_id


def _load_task(store, task_id: str) -> dict:
    task = store.get_task(task_id)
    if not task:
        raise NotFound('Task not found')
    return task


# ----------------------------------------------------------------------
# Precondition checks (shared by the first attempt and the post-refusal re-read)
# ----------------------------------------------------------------------

def check_apply(task: dict, user_id: str) -> None:
    ensure_status(task, TaskStatus.OPEN)
    if not can_act(user_id, task, TaskAction.APPLY):
        raise SelfApplication()
    if user_id in task.get('applicants', []):
        raise DuplicateApplication()


def check_assign(task: dict, user_id: str, helper_id: str) -> None:
    if not can_act(user_id, task, TaskAction.ASSIGN):
        raise Forbidden('Only the task owner can assign a helper')
    ensure_transition(task, TaskStatus.ASSIGNED)
    if helper_id not in task.get('applicants', []):
        raise NotAnApplicant()


def check_complete(task: dict, user_id: str) -> None:
    if not can_act(user_id, task, TaskAction.COMPLETE):
        raise Forbidden('Only the seeker or the assigned helper can complete this task')
    ensure_transition(task, TaskStatus.COMPLETED)


# ----------------------------------------------------------------------
# Mutations
# ----------------------------------------------------------------------

def create_task(
    store,
    user_id: Optional[str],
    title: str,
    description: str,
    category: str,
    location: dict,
    reward_points: int,
    scheduled_time: Optional[int] = None
) -> str:
    """
    Post a new help request owned by the caller.

    The task starts open with no applicants.

    Returns:
        The new task id
    """
    seeker_id = _require_user(user_id)

    if not isinstance(title, str) or not title.strip():
        raise ValidationError('Title is required')
    if not isinstance(description, str):
        raise ValidationError('Description is required')
    if isinstance(reward_points, bool) or not isinstance(reward_points, int):
        raise ValidationError('rewardPoints must be an integer')
    if scheduled_time is not None and (
            isinstance(scheduled_time, bool) or not isinstance(scheduled_time, (int, float))):
        raise ValidationError('scheduledTime must be a timestamp')

    if not config.REWARD_POINTS_MIN <= reward_points <= config.REWARD_POINTS_MAX:
        # Web client offers 5-100; the backend does not enforce it
        logger.warning(
            f"Task reward {reward_points} outside {config.REWARD_POINTS_MIN}-{config.REWARD_POINTS_MAX} "
            f"(seeker {seeker_id})"
        )

    task_id = str(uuid.uuid4())
    task = {
        'taskId': task_id,
        'title': title.strip(),
        'description': description,
        'category': parse_enum(Category, category, 'category').value,
        'seekerId': seeker_id,
        'location': parse_location(location),
        'rewardPoints': reward_points,
        'status': TaskStatus.OPEN.value,
        'applicants': [],
        'createdAt': now_iso(),
    }
    if scheduled_time is not None:
        task['scheduledTime'] = scheduled_time

    store.put_task(task)
    logger.info(f"Task {task_id} created by {seeker_id} ({task['category']}, {reward_points} pts)")
    return task_id


def apply_for_task(store, user_id: Optional[str], task_id: str) -> bool:
    """Add the caller to the task's applicants (insertion order, no duplicates)."""
    user_id = _require_user(user_id)
    task = _load_task(store, task_id)
    check_apply(task, user_id)

    try:
        store.add_applicant(task_id, user_id)
    except ConditionFailed:
        check_apply(_load_task(store, task_id), user_id)
        raise InvalidState('Task changed while applying')

    logger.info(f"User {user_id} applied for task {task_id}")
    return True


def assign_task(store, user_id: Optional[str], task_id: str, helper_id: str) -> bool:
    """Seeker picks one applicant; the helper receives a system message."""
    user_id = _require_user(user_id)
    task = _load_task(store, task_id)
    check_assign(task, user_id, helper_id)

    message = {
        'messageId': str(uuid.uuid4()),
        'taskId': task_id,
        'senderId': user_id,
        'receiverId': helper_id,
        'content': ASSIGNMENT_NOTICE,
        'messageType': MessageType.SYSTEM.value,
        'isRead': False,
        'createdAt': now_iso(),
    }

    try:
        store.assign_helper(task_id, user_id, helper_id, message)
    except ConditionFailed:
        # Typically a concurrent assignment committed first
        check_assign(_load_task(store, task_id), user_id, helper_id)
        raise InvalidState('Task changed while assigning')

    logger.info(f"Task {task_id} assigned to {helper_id}")
    return True


def complete_task(store, user_id: Optional[str], task_id: str) -> bool:
    """Either participant marks the task done; the helper is credited the reward points."""
    user_id = _require_user(user_id)
    task = _load_task(store, task_id)
    check_complete(task, user_id)

    completed_at = now_iso()
    award = build_points_award(task, completed_at)
    credit_helper = bool(award) and store.get_user(award['userId']) is not None

    try:
        store.complete_task(task_id, user_id, completed_at, award=award, credit_helper=credit_helper)
    except ConditionFailed:
        check_complete(_load_task(store, task_id), user_id)
        raise InvalidState('Task changed while completing')

    if award:
        logger.info(f"Task {task_id} completed by {user_id}; {award['points']} pts to {award['userId']}")
    else:
        logger.info(f"Task {task_id} completed by {user_id}; no helper to award")
    return True


# ----------------------------------------------------------------------
# Queries
# ----------------------------------------------------------------------

def get_task_by_id(store, task_id: str) -> Optional[Dict[str, Any]]:
    """Task with seeker/helper summaries and resolved applicants; None if absent."""
    task = store.get_task(task_id)
    if not task:
        return None

    seeker = store.get_user(task['seekerId'])
    helper = store.get_user(task['helperId']) if task.get('helperId') else None
    applicants = [applicant_summary(store.get_user(a)) for a in task.get('applicants', [])]

    return {
        **task,
        'seeker': user_summary(seeker),
        'helper': user_summary(helper),
        # Applicants whose user record was removed are dropped
        'applicants': [a for a in applicants if a],
    }


def get_nearby_tasks(
    store,
    user_id: Optional[str],
    lat: float,
    lng: float,
    radius_km: float = None,
    category: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    Open tasks inside the search box, nearest first.

    Anonymous callers see every task; authenticated callers do not see
    their own. Each result carries the seeker summary and the exact
    haversine distance for display.
    """
    box = bounding_box(lat, lng, radius_km or config.DEFAULT_RADIUS_KM)
    if category:
        category = parse_enum(Category, category, 'category').value

    results = []
    for task in store.tasks_by_status(TaskStatus.OPEN.value):
        if not in_box(box, task.get('location')):
            continue
        if user_id and task.get('seekerId') == user_id:
            continue
        if category and task.get('category') != category:
            continue

        distance = haversine_km(lat, lng, float(task['location']['lat']), float(task['location']['lng']))
        results.append({
            **task,
            'seeker': user_summary(store.get_user(task['seekerId'])),
            'distanceKm': round(distance, 3),
            'distanceLabel': format_distance(distance),
        })

    results.sort(key=lambda t: t['distanceKm'])
    return results


def get_my_tasks(store, user_id: Optional[str], list_type: str) -> List[Dict[str, Any]]:
    """Caller's posted tasks (with helper summary) or helping tasks (with seeker summary)."""
    if not user_id:
        return []

    direction = parse_enum(TaskListType, list_type, 'type')
    if direction == TaskListType.POSTED:
        return [
            {**task, 'helper': user_summary(store.get_user(task['helperId'])) if task.get('helperId') else None}
            for task in store.tasks_by_seeker(user_id)
        ]
    return [
        {**task, 'seeker': user_summary(store.get_user(task['seekerId']))}
        for task in store.tasks_by_helper(user_id)
    ]
