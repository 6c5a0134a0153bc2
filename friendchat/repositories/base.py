"""Repository interfaces - storage seams behind the services.

Services only talk to these interfaces, so a persistent backend can replace
the in-memory defaults without touching handler logic. Implementations must be
synchronous: handlers rely on running to completion without yielding.
"""

from typing import Iterable, List, Optional, Tuple

from friendchat.models.friend import FriendRequest
from friendchat.models.message import GlobalMessage, PrivateMessage
from friendchat.models.user import User

# Sorted (username, username) pair
ConversationKey = Tuple[str, str]


class UserRepository:
    """Users keyed by username, iterable in insertion order."""

    def get(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def add(self, user: User) -> None:
        raise NotImplementedError

    def all(self) -> Iterable[User]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError


class FriendRequestRepository:
    """Pending requests, queued per recipient."""

    def pending_for(self, to_user: str) -> List[FriendRequest]:
        raise NotImplementedError

    def find(self, from_user: str, to_user: str) -> Optional[FriendRequest]:
        raise NotImplementedError

    def add(self, request: FriendRequest) -> None:
        raise NotImplementedError

    def remove(self, from_user: str, to_user: str) -> bool:
        raise NotImplementedError


class FriendshipRepository:
    """Symmetric friendships."""

    def friends_of(self, username: str) -> List[str]:
        raise NotImplementedError

    def add_pair(self, user_a: str, user_b: str) -> None:
        raise NotImplementedError

    def are_friends(self, user_a: str, user_b: str) -> bool:
        raise NotImplementedError


class MessageRepository:
    """Append-only private conversations plus the global replay buffer."""

    def append(self, key: ConversationKey, message: PrivateMessage) -> None:
        raise NotImplementedError

    def list(self, key: ConversationKey) -> List[PrivateMessage]:
        raise NotImplementedError

    def append_global(self, message: GlobalMessage) -> None:
        raise NotImplementedError

    def list_global(self) -> List[GlobalMessage]:
        raise NotImplementedError


class SessionRepository:
    """Username <-> live connection handle table."""

    def set(self, username: str, handle: str) -> None:
        raise NotImplementedError

    def handle_for(self, username: str) -> Optional[str]:
        raise NotImplementedError

    def username_for(self, handle: str) -> Optional[str]:
        raise NotImplementedError

    def clear(self, handle: str) -> Optional[str]:
        raise NotImplementedError

    def online_count(self) -> int:
        raise NotImplementedError
