"""In-memory repositories - dict-backed defaults, gone when the process exits."""

from collections import deque
from typing import Deque, Dict, Iterable, List, Optional

from friendchat.models.friend import FriendRequest
from friendchat.models.message import GlobalMessage, PrivateMessage
from friendchat.models.user import User
from friendchat.repositories.base import (
    ConversationKey,
    FriendRequestRepository,
    FriendshipRepository,
    MessageRepository,
    SessionRepository,
    UserRepository,
)


class InMemoryUserRepository(UserRepository):

    def __init__(self):
        # dicts keep insertion order, which search relies on
        self._users: Dict[str, User] = {}

    def get(self, username: str) -> Optional[User]:
        return self._users.get(username)

    def add(self, user: User) -> None:
        self._users[user.username] = user

    def all(self) -> Iterable[User]:
        return list(self._users.values())

    def count(self) -> int:
        return len(self._users)


class InMemoryFriendRequestRepository(FriendRequestRepository):

    def __init__(self):
        # to_user -> requests in arrival order
        self._requests: Dict[str, List[FriendRequest]] = {}

    def pending_for(self, to_user: str) -> List[FriendRequest]:
        return list(self._requests.get(to_user, []))

    def find(self, from_user: str, to_user: str) -> Optional[FriendRequest]:
        for request in self._requests.get(to_user, []):
            if request.from_user == from_user:
                return request
        return None

    def add(self, request: FriendRequest) -> None:
        self._requests.setdefault(request.to_user, []).append(request)

    def remove(self, from_user: str, to_user: str) -> bool:
        queue = self._requests.get(to_user, [])
        remaining = [r for r in queue if r.from_user != from_user]
        self._requests[to_user] = remaining
        return len(remaining) != len(queue)


class InMemoryFriendshipRepository(FriendshipRepository):

    def __init__(self):
        # Mirrored entries: a in _friends[b] iff b in _friends[a].
        # dict-as-ordered-set keeps the order friendships were made.
        self._friends: Dict[str, Dict[str, None]] = {}

    def friends_of(self, username: str) -> List[str]:
        return list(self._friends.get(username, {}))

    def add_pair(self, user_a: str, user_b: str) -> None:
        self._friends.setdefault(user_a, {})[user_b] = None
        self._friends.setdefault(user_b, {})[user_a] = None

    def are_friends(self, user_a: str, user_b: str) -> bool:
        return user_b in self._friends.get(user_a, {})


class InMemoryMessageRepository(MessageRepository):

    def __init__(self, global_history_size: int = 50):
        self._conversations: Dict[ConversationKey, List[PrivateMessage]] = {}
        self._global: Deque[GlobalMessage] = deque(maxlen=max(global_history_size, 0))

    def append(self, key: ConversationKey, message: PrivateMessage) -> None:
        self._conversations.setdefault(key, []).append(message)

    def list(self, key: ConversationKey) -> List[PrivateMessage]:
        return list(self._conversations.get(key, []))

    def append_global(self, message: GlobalMessage) -> None:
        # maxlen=0 deque silently drops everything
        self._global.append(message)

    def list_global(self) -> List[GlobalMessage]:
        return list(self._global)


class InMemorySessionRepository(SessionRepository):

    def __init__(self):
        self._by_username: Dict[str, str] = {}
        self._by_handle: Dict[str, str] = {}

    def set(self, username: str, handle: str) -> None:
        previous = self._by_username.get(username)
        if previous is not None:
            self._by_handle.pop(previous, None)
        self._by_username[username] = handle
        self._by_handle[handle] = username

    def handle_for(self, username: str) -> Optional[str]:
        return self._by_username.get(username)

    def username_for(self, handle: str) -> Optional[str]:
        return self._by_handle.get(handle)

    def clear(self, handle: str) -> Optional[str]:
        username = self._by_handle.pop(handle, None)
        if username is not None and self._by_username.get(username) == handle:
            del self._by_username[username]
        return username

    def online_count(self) -> int:
        return len(self._by_username)
