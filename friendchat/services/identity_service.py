"""Identity Service - User registration, login and lookup."""

import logging
import random
from typing import Collection, List, Optional

from friendchat.config import Settings
from friendchat.exceptions import InvalidCredentials, UsernameTaken, UsernameTooShort
from friendchat.models.user import User, UserPublic
from friendchat.repositories.base import UserRepository
from friendchat.services.presence_service import PresenceService

logger = logging.getLogger(__name__)


class IdentityService:
    """
    User registration and lookup service.

    Login auto-provisions unknown usernames instead of failing.
    """

    def __init__(self, users: UserRepository, presence: PresenceService, settings: Settings):
        self.users = users
        self.presence = presence
        self.settings = settings

    def _random_avatar(self) -> str:
        return random.choice(self.settings.avatars)

    def _create_user(self, username: str, password: str) -> User:
        if len(username) < self.settings.min_username_length:
            raise UsernameTooShort(
                f"Username must be at least {self.settings.min_username_length} characters"
            )
        user = User(username=username, avatar=self._random_avatar(), password=password)
        self.users.add(user)
        return user

    def register(self, username: str, password: str = "") -> User:
        """
        Create a new user.

        Raises:
            UsernameTaken: username already exists
            UsernameTooShort: below the configured minimum length
        """
        if self.users.get(username) is not None:
            raise UsernameTaken()
        user = self._create_user(username, password)
        logger.info(f"New user registered: {username}")
        return user

    def login(self, username: str, password: str = "") -> User:
        """
        Load a user, creating it when the username is unknown.

        With enforce_passwords on, a known user's password must match the one
        stored at creation.
        """
        user = self.users.get(username)
        if user is None:
            user = self._create_user(username, password)
            logger.info(f"Auto-provisioned user on login: {username}")
            return user

        if self.settings.enforce_passwords and user.password != password:
            logger.info(f"Rejected login for {username}: bad password")
            raise InvalidCredentials()

        return user

    def find_by_username(self, username: str) -> Optional[User]:
        return self.users.get(username)

    def exists(self, username: str) -> bool:
        return self.users.get(username) is not None

    def search(
        self, query: str, exclude_username: str, exclude: Collection[str] = ()
    ) -> List[User]:
        """Case-insensitive substring search in store order, capped at search_result_limit."""
        needle = query.lower()
        results = []
        for user in self.users.all():
            if len(results) >= self.settings.search_result_limit:
                break
            if user.username == exclude_username or user.username in exclude:
                continue
            if needle in user.username.lower():
                results.append(user)
        return results

    def to_public(self, user: User) -> UserPublic:
        """Join a user record with its live presence."""
        return UserPublic(
            username=user.username,
            avatar=user.avatar,
            online=self.presence.is_online(user.username),
        )

    def count(self) -> int:
        return self.users.count()
