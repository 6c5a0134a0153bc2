"""Presence Service - Tracks which users are online and on which connection."""

import logging
from typing import Optional

from friendchat.repositories.base import SessionRepository

logger = logging.getLogger(__name__)


class PresenceService:
    """
    Maps usernames to their current connection handle.

    A user has at most one live handle. A second login for the same username
    replaces the first handle, so the first connection stops receiving
    unicast events but is not closed.
    """

    def __init__(self, sessions: SessionRepository):
        self.sessions = sessions

    def mark_online(self, username: str, handle: str) -> None:
        previous = self.sessions.handle_for(username)
        if previous and previous != handle:
            logger.info(f"{username} logged in again, evicting handle {previous}")
        self.sessions.set(username, handle)

    def mark_offline(self, handle: str) -> Optional[str]:
        """
        Clear the handle on connection close.

        Returns the username that went offline, or None when the handle never
        logged in or was already superseded by a newer login.
        """
        username = self.sessions.clear(handle)
        if username is not None and self.sessions.handle_for(username) is not None:
            # A newer connection is still live for this user
            return None
        return username

    def handle_for(self, username: str) -> Optional[str]:
        return self.sessions.handle_for(username)

    def is_online(self, username: str) -> bool:
        return self.sessions.handle_for(username) is not None

    def online_count(self) -> int:
        return self.sessions.online_count()
