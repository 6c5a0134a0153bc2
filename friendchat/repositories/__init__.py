"""friendchat Repositories Package"""

from friendchat.repositories.base import (
    UserRepository,
    FriendRequestRepository,
    FriendshipRepository,
    MessageRepository,
    SessionRepository,
)
from friendchat.repositories.memory import (
    InMemoryUserRepository,
    InMemoryFriendRequestRepository,
    InMemoryFriendshipRepository,
    InMemoryMessageRepository,
    InMemorySessionRepository,
)

__all__ = [
    "UserRepository",
    "FriendRequestRepository",
    "FriendshipRepository",
    "MessageRepository",
    "SessionRepository",
    "InMemoryUserRepository",
    "InMemoryFriendRequestRepository",
    "InMemoryFriendshipRepository",
    "InMemoryMessageRepository",
    "InMemorySessionRepository",
]
