"""Conversation Service - Private chat history and global chat messages."""

import logging
from typing import List

from friendchat.models.message import GlobalMessage, PrivateMessage
from friendchat.models.user import User
from friendchat.repositories.base import ConversationKey, MessageRepository
from friendchat.utils.timezone_utils import epoch_millis, format_local_time, utc_now

logger = logging.getLogger(__name__)

CONVERSATION_LABEL_SEPARATOR = "_"


def conversation_key(user_a: str, user_b: str) -> ConversationKey:
    """Order-independent key of the conversation between two users."""
    first, second = sorted((user_a, user_b))
    return first, second


def conversation_label(user_a: str, user_b: str) -> str:
    """Display form of a conversation key, e.g. "alice_carol". Not unique; never use as a key."""
    return CONVERSATION_LABEL_SEPARATOR.join(conversation_key(user_a, user_b))


class ConversationService:
    """
    Append-only message store.

    Private messages are grouped by conversation key so either participant
    gets the same history. Global messages are only kept in the bounded
    replay buffer.
    """

    def __init__(self, messages: MessageRepository):
        self.messages = messages

    def append_message(self, sender: User, to_user: str, text: str) -> PrivateMessage:
        now = utc_now()
        message = PrivateMessage(
            from_user=sender.username,
            from_avatar=sender.avatar,
            to_user=to_user,
            text=text,
            time=format_local_time(now),
            timestamp=epoch_millis(now),
        )
        self.messages.append(conversation_key(sender.username, to_user), message)
        logger.info(
            f"Private message: {sender.username} -> {to_user} "
            f"({conversation_label(sender.username, to_user)})"
        )
        return message

    def history(self, user_a: str, user_b: str) -> List[PrivateMessage]:
        """Full conversation in chronological order."""
        return self.messages.list(conversation_key(user_a, user_b))

    def append_global(self, sender: User, text: str) -> GlobalMessage:
        now = utc_now()
        message = GlobalMessage(
            from_user=sender.username,
            from_avatar=sender.avatar,
            text=text,
            time=format_local_time(now),
            timestamp=epoch_millis(now),
        )
        self.messages.append_global(message)
        logger.info(f"Global message from {sender.username}")
        return message

    def global_history(self) -> List[GlobalMessage]:
        return self.messages.list_global()
