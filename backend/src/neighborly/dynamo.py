"""
DynamoDB access for the marketplace tables.

Every mutation that must be atomic is expressed as a single conditional
write or a TransactWriteItems call, so the store provides the
compare-and-set semantics the lifecycle relies on. A refused condition
surfaces as ConditionFailed; callers re-read and decide which error to
report.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import boto3
from boto3.dynamodb.conditions import Key
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

from .config import (
    config,
    MESSAGES_TASK_INDEX,
    POINTS_USER_INDEX,
    REVIEWS_REVIEWEE_INDEX,
    REVIEWS_TASK_INDEX,
    TASKS_HELPER_INDEX,
    TASKS_SEEKER_INDEX,
    TASKS_STATUS_INDEX,
    USERS_TYPE_INDEX,
)
from .errors import ConditionFailed
from .logging import logger
from .models import TaskStatus, sources_of

dynamodb = boto3.resource('dynamodb', region_name=config.AWS_REGION)

CONDITION_ERRORS = ('ConditionalCheckFailedException', 'TransactionCanceledException')

_serializer = TypeSerializer()


def to_dynamo(value: Any) -> Any:
    """Recursively convert floats to Decimal (DynamoDB rejects float)."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_dynamo(v) for v in value]
    return value


def from_dynamo(value: Any) -> Any:
    """Recursively convert Decimal back to int (whole numbers) or float."""
    if isinstance(value, Decimal):
        if value % 1 == 0:
            return int(value)
        return float(value)
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamo(v) for v in value]
    return value


def serialize(item: Dict[str, Any]) -> Dict[str, Any]:
    """Low-level typed attribute map for client calls ({'S': ...}, {'N': ...})."""
    return {k: _serializer.serialize(to_dynamo(v)) for k, v in item.items()}


def set_expression(fields: Dict[str, Any]) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
    """
    Build a 'SET #f0 = :v0, ...' update for a partial patch.

    Returns:
        tuple: (update_expression, expression_names, expression_values)
    """
    parts, names, values = [], {}, {}
    for idx, (field, value) in enumerate(fields.items()):
        names[f'#f{idx}'] = field
        values[f':v{idx}'] = to_dynamo(value)
        parts.append(f'#f{idx} = :v{idx}')
    return 'SET ' + ', '.join(parts), names, values


def _refused(error: ClientError) -> bool:
    return error.response.get('Error', {}).get('Code') in CONDITION_ERRORS


class DynamoStore:
    """Users, tasks, messages, reviews and points tables behind one object."""

    def __init__(self, resource=None):
        self.resource = resource or dynamodb
        self.client = self.resource.meta.client
        self.users = self.resource.Table(config.USERS_TABLE)
        self.tasks = self.resource.Table(config.TASKS_TABLE)
        self.messages = self.resource.Table(config.MESSAGES_TABLE)
        self.reviews = self.resource.Table(config.REVIEWS_TABLE)
        self.points = self.resource.Table(config.POINTS_TABLE)

    # ------------------------------------------------------------------
    # Generic helpers
    # ------------------------------------------------------------------

    def _get(self, table, key: Dict[str, str]) -> Optional[Dict[str, Any]]:
        response = table.get_item(Key=key)
        item = response.get('Item')
        return from_dynamo(item) if item else None

    def _query(
        self,
        table,
        index_name: str,
        key_name: str,
        key_value: str,
        scan_forward: bool = True,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Query an index, following LastEvaluatedKey pagination."""
        params = {
            'IndexName': index_name,
            'KeyConditionExpression': Key(key_name).eq(key_value),
            'ScanIndexForward': scan_forward
        }
        if limit:
            params['Limit'] = limit

        items = []
        while True:
            response = table.query(**params)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key or (limit and len(items) >= limit):
                break
            params['ExclusiveStartKey'] = last_key

        if limit:
            items = items[:limit]
        return [from_dynamo(item) for item in items]

    def _conditional_update(self, table, key: Dict[str, str], **params) -> None:
        try:
            table.update_item(Key=key, **params)
        except ClientError as e:
            if _refused(e):
                raise ConditionFailed(str(e)) from e
            raise

    def _transact(self, items: List[Dict[str, Any]]) -> None:
        try:
            self.client.transact_write_items(TransactItems=items)
        except ClientError as e:
            if _refused(e):
                logger.info(f"Transaction refused: {e.response.get('CancellationReasons')}")
                raise ConditionFailed(str(e)) from e
            raise

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self._get(self.users, {'userId': user_id})

    def create_profile(self, user_id: str, fields: Dict[str, Any]) -> None:
        """Fill in the identity-linked record unless it already holds a completed profile."""
        expression, names, values = set_expression(fields)
        names['#name'] = 'name'
        self._conditional_update(
            self.users,
            {'userId': user_id},
            UpdateExpression=expression,
            ConditionExpression='attribute_not_exists(userId) OR attribute_not_exists(#name) '
                                'OR attribute_not_exists(email)',
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=values
        )

    def update_user(self, user_id: str, fields: Dict[str, Any]) -> None:
        expression, names, values = set_expression(fields)
        self._conditional_update(
            self.users,
            {'userId': user_id},
            UpdateExpression=expression,
            ConditionExpression='attribute_exists(userId)',
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=values
        )

    def users_by_type(self, user_type: str) -> List[Dict[str, Any]]:
        return self._query(self.users, USERS_TYPE_INDEX, 'userType', user_type)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def put_task(self, task: Dict[str, Any]) -> None:
        try:
            self.tasks.put_item(
                Item=to_dynamo(task),
                ConditionExpression='attribute_not_exists(taskId)'
            )
        except ClientError as e:
            if _refused(e):
                raise ConditionFailed(str(e)) from e
            raise

    def get_task(self, task_id: str) -> Optional[Dict[str, Any]]:
        return self._get(self.tasks, {'taskId': task_id})

    def tasks_by_status(self, status: str) -> List[Dict[str, Any]]:
        return self._query(self.tasks, TASKS_STATUS_INDEX, 'status', status)

    def tasks_by_seeker(self, seeker_id: str) -> List[Dict[str, Any]]:
        """Tasks posted by ``seeker_id``, newest first."""
        return self._query(self.tasks, TASKS_SEEKER_INDEX, 'seekerId', seeker_id, scan_forward=False)

    def tasks_by_helper(self, helper_id: str) -> List[Dict[str, Any]]:
        """Tasks assigned to ``helper_id``, newest first."""
        return self._query(self.tasks, TASKS_HELPER_INDEX, 'helperId', helper_id, scan_forward=False)

    def add_applicant(self, task_id: str, user_id: str) -> None:
        """Append ``user_id`` to applicants while the task is open and it is not already there."""
        self._conditional_update(
            self.tasks,
            {'taskId': task_id},
            UpdateExpression='SET applicants = list_append(applicants, :applicant)',
            ConditionExpression='#status = :open AND seekerId <> :uid AND NOT contains(applicants, :uid)',
            ExpressionAttributeNames={'#status': 'status'},
            ExpressionAttributeValues={
                ':applicant': [user_id],
                ':open': TaskStatus.OPEN.value,
                ':uid': user_id
            }
        )

    def assign_helper(self, task_id: str, seeker_id: str, helper_id: str, message: Dict[str, Any]) -> None:
        """
        Atomically assign the helper and insert the system notice.

        The condition re-checks open status, ownership and applicancy so
        only one of two racing assignments can commit.
        """
        self._transact([
            {
                'Update': {
                    'TableName': config.TASKS_TABLE,
                    'Key': serialize({'taskId': task_id}),
                    'UpdateExpression': 'SET helperId = :helper, #status = :assigned',
                    'ConditionExpression': '#status = :open AND seekerId = :seeker '
                                           'AND contains(applicants, :helper)',
                    'ExpressionAttributeNames': {'#status': 'status'},
                    'ExpressionAttributeValues': serialize({
                        ':helper': helper_id,
                        ':assigned': TaskStatus.ASSIGNED.value,
                        ':open': TaskStatus.OPEN.value,
                        ':seeker': seeker_id
                    })
                }
            },
            {
                'Put': {
                    'TableName': config.MESSAGES_TABLE,
                    'Item': serialize(message),
                    'ConditionExpression': 'attribute_not_exists(messageId)'
                }
            }
        ])

    def complete_task(
        self,
        task_id: str,
        caller_id: str,
        completed_at: str,
        award: Optional[Dict[str, Any]] = None,
        credit_helper: bool = False
    ) -> None:
        """
        Atomically complete the task, append the ledger entry and credit the helper.

        Args:
            task_id: Task to complete
            caller_id: Seeker or helper of the task
            completed_at: ISO timestamp stored as completedAt
            award: Points ledger entry, None when no helper is assigned
            credit_helper: Whether the helper's user record exists to receive the points
        """
        sources = sorted(s.value for s in sources_of(TaskStatus.COMPLETED))
        placeholders = {f':from{idx}': status for idx, status in enumerate(sources)}

        items = [
            {
                'Update': {
                    'TableName': config.TASKS_TABLE,
                    'Key': serialize({'taskId': task_id}),
                    'UpdateExpression': 'SET #status = :completed, completedAt = :completed_at',
                    'ConditionExpression': f"#status IN ({', '.join(placeholders)}) "
                                           'AND (seekerId = :caller OR helperId = :caller)',
                    'ExpressionAttributeNames': {'#status': 'status'},
                    'ExpressionAttributeValues': serialize({
                        ':completed': TaskStatus.COMPLETED.value,
                        ':completed_at': completed_at,
                        ':caller': caller_id,
                        **placeholders
                    })
                }
            }
        ]

        if award:
            items.append({
                'Put': {
                    'TableName': config.POINTS_TABLE,
                    'Item': serialize(award),
                    # Exactly one ledger entry per task
                    'ConditionExpression': 'attribute_not_exists(taskId)'
                }
            })
            if credit_helper:
                items.append({
                    'Update': {
                        'TableName': config.USERS_TABLE,
                        'Key': serialize({'userId': award['userId']}),
                        'UpdateExpression': 'ADD totalPoints :points',
                        'ExpressionAttributeValues': serialize({':points': award['points']})
                    }
                })

        self._transact(items)

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def put_message(self, message: Dict[str, Any]) -> None:
        self.messages.put_item(Item=to_dynamo(message))

    def messages_for_task(self, task_id: str) -> List[Dict[str, Any]]:
        """Messages of a task in ascending chronological order."""
        return self._query(self.messages, MESSAGES_TASK_INDEX, 'taskId', task_id)

    def mark_message_read(self, message_id: str) -> None:
        self.messages.update_item(
            Key={'messageId': message_id},
            UpdateExpression='SET isRead = :read',
            ExpressionAttributeValues={':read': True}
        )

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    def get_review(self, review_id: str) -> Optional[Dict[str, Any]]:
        return self._get(self.reviews, {'reviewId': review_id})

    def add_review(
        self,
        review: Dict[str, Any],
        expected_count: Optional[int] = None,
        rating: Optional[float] = None,
        review_count: Optional[int] = None
    ) -> None:
        """
        Insert the review and, when ``rating`` is given, the reviewee's new aggregate.

        The aggregate update only commits if reviewCount still equals
        ``expected_count``, i.e. nobody folded another review in meanwhile.
        """
        items = [
            {
                'Put': {
                    'TableName': config.REVIEWS_TABLE,
                    'Item': serialize(review),
                    'ConditionExpression': 'attribute_not_exists(reviewId)'
                }
            }
        ]

        if rating is not None:
            items.append({
                'Update': {
                    'TableName': config.USERS_TABLE,
                    'Key': serialize({'userId': review['revieweeId']}),
                    'UpdateExpression': 'SET rating = :rating, reviewCount = :count',
                    'ConditionExpression': 'attribute_exists(userId) AND '
                                           '(attribute_not_exists(reviewCount) OR reviewCount = :expected)',
                    'ExpressionAttributeValues': serialize({
                        ':rating': rating,
                        ':count': review_count,
                        ':expected': expected_count
                    })
                }
            })

        self._transact(items)

    def reviews_for_task(self, task_id: str) -> List[Dict[str, Any]]:
        return self._query(self.reviews, REVIEWS_TASK_INDEX, 'taskId', task_id)

    def reviews_for_reviewee(self, user_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Reviews received by ``user_id``, newest first."""
        return self._query(
            self.reviews, REVIEWS_REVIEWEE_INDEX, 'revieweeId', user_id,
            scan_forward=False, limit=limit
        )

    # ------------------------------------------------------------------
    # Points ledger
    # ------------------------------------------------------------------

    def points_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        """Ledger entries of ``user_id``, newest first."""
        return self._query(self.points, POINTS_USER_INDEX, 'userId', user_id, scan_forward=False)
