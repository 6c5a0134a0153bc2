"""User Model - Defines the user record and its public view."""

from datetime import datetime

from pydantic import BaseModel, Field

from friendchat.utils.timezone_utils import utc_now


class User(BaseModel):
    """
    User record held by the identity store.

    Fields:
    - username: Unique, immutable identity
    - avatar: Picked from the avatar palette at creation, immutable
    - password: As supplied at creation (stored verbatim, not hashed)
    - created_at: When the user was provisioned

    Presence (connection handle and online flag) is deliberately not part of
    the record; see PresenceService.
    """
    username: str = Field(..., description="Unique username")
    avatar: str = Field(..., description="Avatar emoji")
    password: str = Field(default="", repr=False)
    created_at: datetime = Field(default_factory=utc_now)

    model_config = {"frozen": True}


class UserProfile(BaseModel):
    """The caller's own identity as sent in register/login replies."""
    username: str
    avatar: str


class UserPublic(BaseModel):
    """User as seen by others: search results, friend lists, friend_added."""
    username: str
    avatar: str
    online: bool = False
