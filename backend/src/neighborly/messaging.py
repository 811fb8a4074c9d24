"""
Messaging gateway: chat between the two participants of a task.
"""
import uuid
from typing import Any, Dict, List, Optional

from .errors import Forbidden, NoRecipient, NotFound, Unauthenticated, ValidationError
from .logging import logger
from .models import MessageType
from .permissions import TaskAction, can_act, counterpart_of
from .utils import now_iso

UNKNOWN_SENDER = 'Unknown'


def get_task_messages(store, user_id: Optional[str], task_id: str) -> List[Dict[str, Any]]:
    """
    Chat history of a task, oldest first, with sender names.

    Anonymous callers, non-participants and unknown tasks all get an
    empty list rather than an error.
    """
    if not user_id:
        return []
    task = store.get_task(task_id)
    if not task or not can_act(user_id, task, TaskAction.READ_MESSAGES):
        return []

    names = {}
    messages = []
    for message in store.messages_for_task(task_id):
        sender_id = message['senderId']
        if sender_id not in names:
            sender = store.get_user(sender_id)
            names[sender_id] = (sender or {}).get('name') or UNKNOWN_SENDER
        messages.append({**message, 'senderName': names[sender_id]})
    return messages


def send_message(store, user_id: Optional[str], task_id: str, content: str) -> bool:
    """Post a text message to the other participant of the task."""
    if not user_id:
        raise Unauthenticated()
    if not isinstance(content, str) or not content.strip():
        raise ValidationError('Message content is required')

    task = store.get_task(task_id)
    if not task:
        raise NotFound('Task not found')
    if not can_act(user_id, task, TaskAction.SEND_MESSAGE):
        raise Forbidden('Not authorized to send messages for this task')

    receiver_id = counterpart_of(user_id, task)
    if not receiver_id:
        raise NoRecipient()

    store.put_message({
        'messageId': str(uuid.uuid4()),
        'taskId': task_id,
        'senderId': user_id,
        'receiverId': receiver_id,
        'content': content,
        'messageType': MessageType.TEXT.value,
        'isRead': False,
        'createdAt': now_iso(),
    })
    logger.info(f"Message on task {task_id} from {user_id} to {receiver_id}")
    return True


def mark_messages_as_read(store, user_id: Optional[str], task_id: str) -> bool:
    """Flag every unread message addressed to the caller on this task as read."""
    if not user_id:
        raise Unauthenticated()

    unread = [
        m for m in store.messages_for_task(task_id)
        if m.get('receiverId') == user_id and not m.get('isRead')
    ]
    for message in unread:
        store.mark_message_read(message['messageId'])

    if unread:
        logger.info(f"Marked {len(unread)} messages read on task {task_id} for {user_id}")
    return True
