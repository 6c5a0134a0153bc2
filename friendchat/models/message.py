"""Message Models - Private and global chat messages."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class GlobalMessage(BaseModel):
    """
    A message broadcast to every connection.

    Fields:
    - from: Sender username
    - fromAvatar: Sender avatar at time of message
    - text: Message body
    - time: Human-readable time of day (HH:MM:SS)
    - timestamp: Epoch milliseconds
    """
    from_user: str = Field(..., alias="from")
    from_avatar: str = Field(..., alias="fromAvatar")
    text: str
    time: str
    timestamp: int

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class PrivateMessage(GlobalMessage):
    """A message between two users, stored under their conversation key."""
    to_user: str = Field(..., alias="to")


class ChatHistory(BaseModel):
    """Payload of chat_history."""
    friend: str
    messages: List[PrivateMessage] = []
