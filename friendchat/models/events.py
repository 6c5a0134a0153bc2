"""Event Models - Typed inbound payloads and outbound event records.

Inbound frames look like ``{"type": "<event>", "data": <payload>}``. Some
events carry an object payload, others a bare string (a username, a search
query, a chat line); the latter are wrapped into a single-field model so
every handler receives a validated object.
"""

from typing import Any, ClassVar, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from friendchat.exceptions import InvalidPayload


class EventPayload(BaseModel):
    """Base for inbound payloads."""

    # Name of the field a bare scalar payload is assigned to
    scalar_field: ClassVar[Optional[str]] = None

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def parse(cls, data: Any) -> "EventPayload":
        """Validate a raw payload, raising InvalidPayload on bad shape."""
        if cls.scalar_field and not isinstance(data, dict):
            data = {cls.scalar_field: data}
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidPayload(f"Malformed payload: {e.error_count()} error(s)") from e


class CredentialsPayload(EventPayload):
    """register / login"""
    username: StrictStr
    password: StrictStr = ""


class SearchPayload(EventPayload):
    scalar_field: ClassVar[Optional[str]] = "query"

    query: StrictStr


class UsernamePayload(EventPayload):
    """send/accept/decline friend request, load_chat_history"""
    scalar_field: ClassVar[Optional[str]] = "username"

    username: StrictStr


class PrivateMessagePayload(EventPayload):
    to: StrictStr
    text: StrictStr


class GlobalMessagePayload(EventPayload):
    scalar_field: ClassVar[Optional[str]] = "text"

    text: StrictStr


class EventName:
    """Wire names of every event, inbound and outbound."""

    # Inbound
    REGISTER = "register"
    LOGIN = "login"
    SEARCH_USERS = "search_users"
    SEND_FRIEND_REQUEST = "send_friend_request"
    ACCEPT_FRIEND_REQUEST = "accept_friend_request"
    DECLINE_FRIEND_REQUEST = "decline_friend_request"
    LOAD_CHAT_HISTORY = "load_chat_history"
    PRIVATE_MESSAGE = "private_message"
    GLOBAL_MESSAGE = "global_message"

    # Outbound
    REGISTER_SUCCESS = "register_success"
    REGISTER_ERROR = "register_error"
    LOGIN_SUCCESS = "login_success"
    LOGIN_ERROR = "login_error"
    SEARCH_RESULTS = "search_results"
    FRIEND_REQUEST_SENT = "friend_request_sent"
    NEW_FRIEND_REQUEST = "new_friend_request"
    FRIEND_ADDED = "friend_added"
    UPDATE_FRIENDS = "update_friends"
    FRIEND_REQUEST_DECLINED = "friend_request_declined"
    CHAT_HISTORY = "chat_history"
    NEW_PRIVATE_MESSAGE = "new_private_message"
    NEW_GLOBAL_MESSAGE = "new_global_message"
    ERROR = "error"


PAYLOAD_MODELS: Dict[str, Type[EventPayload]] = {
    EventName.REGISTER: CredentialsPayload,
    EventName.LOGIN: CredentialsPayload,
    EventName.SEARCH_USERS: SearchPayload,
    EventName.SEND_FRIEND_REQUEST: UsernamePayload,
    EventName.ACCEPT_FRIEND_REQUEST: UsernamePayload,
    EventName.DECLINE_FRIEND_REQUEST: UsernamePayload,
    EventName.LOAD_CHAT_HISTORY: UsernamePayload,
    EventName.PRIVATE_MESSAGE: PrivateMessagePayload,
    EventName.GLOBAL_MESSAGE: GlobalMessagePayload,
}


BROADCAST = "*"


class Outbound(BaseModel):
    """
    One event to emit after a handler finishes.

    target is a connection handle, or BROADCAST for every connection.
    """
    target: str
    event: str
    data: Any = None

    def frame(self) -> Dict[str, Any]:
        """Wire frame for this event."""
        return {"type": self.event, "data": _to_wire(self.data)}

    @property
    def is_broadcast(self) -> bool:
        return self.target == BROADCAST


def _to_wire(value: Any) -> Any:
    """Dump pydantic models (also nested in lists/dicts) using wire aliases."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (list, tuple)):
        return [_to_wire(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_wire(v) for k, v in value.items()}
    return value
