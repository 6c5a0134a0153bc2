"""Chat errors - user-facing failures raised by the services.

Every error carries a human-readable message that the event router sends back
to the client as-is. They subclass ValueError so callers that only care about
"bad input" can keep catching that.
"""


class ChatError(ValueError):
    """Base class for all errors surfaced to a connected client."""

    default_message = "Request failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class UsernameTaken(ChatError):
    default_message = "User already exists"


class UsernameTooShort(ChatError):
    default_message = "Username is too short"


class InvalidCredentials(ChatError):
    default_message = "Invalid username or password"


class UserNotFound(ChatError):
    default_message = "User not found"


class AlreadyFriends(ChatError):
    default_message = "This user is already your friend"


class CannotBefriendSelf(ChatError):
    default_message = "Cannot send friend request to yourself"


class InvalidPayload(ChatError):
    default_message = "Malformed event payload"
