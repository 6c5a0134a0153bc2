"""
Event Router

Maps each inbound named event to a handler. Handlers are plain synchronous
functions: they read and mutate the stores and return the events to emit, so
one inbound event is fully applied before anything is sent.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from friendchat.config import Settings
from friendchat.exceptions import ChatError, InvalidPayload, UserNotFound
from friendchat.models.events import (
    BROADCAST,
    PAYLOAD_MODELS,
    CredentialsPayload,
    EventName,
    GlobalMessagePayload,
    Outbound,
    PrivateMessagePayload,
    SearchPayload,
    UsernamePayload,
)
from friendchat.models.friend import FriendRequestNotice
from friendchat.models.message import ChatHistory
from friendchat.models.user import User, UserProfile, UserPublic
from friendchat.repositories.memory import (
    InMemoryFriendRequestRepository,
    InMemoryFriendshipRepository,
    InMemoryMessageRepository,
    InMemorySessionRepository,
    InMemoryUserRepository,
)
from friendchat.services.conversation_service import ConversationService
from friendchat.services.identity_service import IdentityService
from friendchat.services.presence_service import PresenceService
from friendchat.services.relationship_service import RelationshipService

logger = logging.getLogger(__name__)


# =============================================================================
# State
# =============================================================================


@dataclass
class Connection:
    """One client session. username is set once register/login succeeds."""
    handle: str
    username: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.username is not None


@dataclass
class ChatState:
    """All stores and services for one server process."""
    settings: Settings
    presence: PresenceService
    identity: IdentityService
    relationships: RelationshipService
    conversations: ConversationService

    @classmethod
    def in_memory(cls, settings: Settings) -> "ChatState":
        presence = PresenceService(InMemorySessionRepository())
        identity = IdentityService(InMemoryUserRepository(), presence, settings)
        relationships = RelationshipService(
            InMemoryFriendRequestRepository(), InMemoryFriendshipRepository(), identity
        )
        conversations = ConversationService(
            InMemoryMessageRepository(settings.global_history_size)
        )
        return cls(
            settings=settings,
            presence=presence,
            identity=identity,
            relationships=relationships,
            conversations=conversations,
        )


Handler = Callable[[Connection, Any], List[Outbound]]


@dataclass
class Route:
    handler: Handler
    requires_auth: bool = True


# =============================================================================
# Router
# =============================================================================


class EventRouter:
    """
    Dispatches inbound events against a ChatState.

    Domain errors never escape: they become register_error, login_error or
    error events addressed to the calling connection.
    """

    def __init__(self, state: ChatState):
        self.state = state
        self.routes: Dict[str, Route] = {
            EventName.REGISTER: Route(self.on_register, requires_auth=False),
            EventName.LOGIN: Route(self.on_login, requires_auth=False),
            EventName.SEARCH_USERS: Route(self.on_search_users),
            EventName.SEND_FRIEND_REQUEST: Route(self.on_send_friend_request),
            EventName.ACCEPT_FRIEND_REQUEST: Route(self.on_accept_friend_request),
            EventName.DECLINE_FRIEND_REQUEST: Route(self.on_decline_friend_request),
            EventName.LOAD_CHAT_HISTORY: Route(self.on_load_chat_history),
            EventName.PRIVATE_MESSAGE: Route(self.on_private_message),
            EventName.GLOBAL_MESSAGE: Route(self.on_global_message),
        }

    def dispatch(self, conn: Connection, event: str, data: Any) -> List[Outbound]:
        """Run the handler for one inbound event and return what to emit."""
        route = self.routes.get(event) if isinstance(event, str) else None
        if route is None:
            logger.debug(f"Ignoring unknown event {event!r} from {conn.handle}")
            return []
        if route.requires_auth and not conn.is_authenticated:
            return []

        try:
            payload = PAYLOAD_MODELS[event].parse(data)
            return route.handler(conn, payload)
        except InvalidPayload as e:
            logger.warning(f"Invalid {event} payload from {conn.handle}: {e}")
            return []
        except ChatError as e:
            return [Outbound(target=conn.handle, event=self._error_event(event), data=e.message)]

    def disconnect(self, conn: Connection) -> None:
        self.release_handle(conn.handle)

    def release_handle(self, handle: str) -> None:
        """Mark whoever is on this handle offline. Safe to call more than once."""
        username = self.state.presence.mark_offline(handle)
        if username:
            logger.info(f"User disconnected: {username}")

    @staticmethod
    def _error_event(event: str) -> str:
        if event == EventName.REGISTER:
            return EventName.REGISTER_ERROR
        if event == EventName.LOGIN:
            return EventName.LOGIN_ERROR
        return EventName.ERROR

    # =========================================================================
    # Helpers
    # =========================================================================

    def _current_user(self, conn: Connection) -> User:
        return self.state.identity.find_by_username(conn.username)

    def _to(self, username: str, event: str, data: Any) -> List[Outbound]:
        """Unicast to a user if they are online, otherwise nothing."""
        handle = self.state.presence.handle_for(username)
        if handle is None:
            return []
        return [Outbound(target=handle, event=event, data=data)]

    def _authenticate(self, conn: Connection, user: User) -> None:
        if conn.username and conn.username != user.username:
            # Switching identity on the same connection releases the old one
            self.state.presence.mark_offline(conn.handle)
        conn.username = user.username
        self.state.presence.mark_online(user.username, conn.handle)

    # =========================================================================
    # Handlers
    # =========================================================================

    def on_register(self, conn: Connection, payload: CredentialsPayload) -> List[Outbound]:
        user = self.state.identity.register(payload.username, payload.password)
        self._authenticate(conn, user)
        return [
            Outbound(
                target=conn.handle,
                event=EventName.REGISTER_SUCCESS,
                data={
                    "user": UserProfile(username=user.username, avatar=user.avatar),
                    "globalMessages": self.state.conversations.global_history(),
                },
            )
        ]

    def on_login(self, conn: Connection, payload: CredentialsPayload) -> List[Outbound]:
        user = self.state.identity.login(payload.username, payload.password)
        self._authenticate(conn, user)
        logger.info(f"User logged in: {user.username}")
        return [
            Outbound(
                target=conn.handle,
                event=EventName.LOGIN_SUCCESS,
                data={
                    "user": UserProfile(username=user.username, avatar=user.avatar),
                    "friends": self.state.relationships.list_friends(user.username),
                    "friendRequests": self.state.relationships.list_pending_requests(
                        user.username
                    ),
                    "globalMessages": self.state.conversations.global_history(),
                },
            )
        ]

    def on_search_users(self, conn: Connection, payload: SearchPayload) -> List[Outbound]:
        identity = self.state.identity
        users = identity.search(
            payload.query,
            exclude_username=conn.username,
            exclude=set(self.state.relationships.friend_names(conn.username)),
        )
        results = [identity.to_public(u) for u in users]
        return [Outbound(target=conn.handle, event=EventName.SEARCH_RESULTS, data=results)]

    def on_send_friend_request(self, conn: Connection, payload: UsernamePayload) -> List[Outbound]:
        request = self.state.relationships.send_request(conn.username, payload.username)
        notice = FriendRequestNotice(from_user=request.from_user, from_avatar=request.from_avatar)

        out = self._to(payload.username, EventName.NEW_FRIEND_REQUEST, notice)
        out.append(
            Outbound(target=conn.handle, event=EventName.FRIEND_REQUEST_SENT, data=payload.username)
        )
        return out

    def on_accept_friend_request(self, conn: Connection, payload: UsernamePayload) -> List[Outbound]:
        relationships = self.state.relationships
        identity = self.state.identity
        requester = payload.username

        relationships.accept_request(conn.username, requester)

        requester_user = identity.find_by_username(requester)
        me = self._current_user(conn)

        out = [
            Outbound(
                target=conn.handle,
                event=EventName.FRIEND_ADDED,
                data=identity.to_public(requester_user),
            )
        ]
        out.extend(
            self._to(
                requester,
                EventName.FRIEND_ADDED,
                UserPublic(username=me.username, avatar=me.avatar, online=True),
            )
        )
        out.append(
            Outbound(
                target=conn.handle,
                event=EventName.UPDATE_FRIENDS,
                data=relationships.list_friends(conn.username),
            )
        )
        return out

    def on_decline_friend_request(self, conn: Connection, payload: UsernamePayload) -> List[Outbound]:
        self.state.relationships.decline_request(conn.username, payload.username)
        return [
            Outbound(
                target=conn.handle,
                event=EventName.FRIEND_REQUEST_DECLINED,
                data=payload.username,
            )
        ]

    def on_load_chat_history(self, conn: Connection, payload: UsernamePayload) -> List[Outbound]:
        history = ChatHistory(
            friend=payload.username,
            messages=self.state.conversations.history(conn.username, payload.username),
        )
        return [Outbound(target=conn.handle, event=EventName.CHAT_HISTORY, data=history)]

    def on_private_message(self, conn: Connection, payload: PrivateMessagePayload) -> List[Outbound]:
        if not self.state.identity.exists(payload.to):
            raise UserNotFound()

        message = self.state.conversations.append_message(
            self._current_user(conn), payload.to, payload.text
        )

        out = []
        if payload.to != conn.username:
            out.extend(self._to(payload.to, EventName.NEW_PRIVATE_MESSAGE, message))
        out.append(Outbound(target=conn.handle, event=EventName.NEW_PRIVATE_MESSAGE, data=message))
        return out

    def on_global_message(self, conn: Connection, payload: GlobalMessagePayload) -> List[Outbound]:
        message = self.state.conversations.append_global(self._current_user(conn), payload.text)
        return [Outbound(target=BROADCAST, event=EventName.NEW_GLOBAL_MESSAGE, data=message)]
