"""Friend Models - Pending friend requests."""

from pydantic import BaseModel, ConfigDict, Field


class FriendRequest(BaseModel):
    """
    A pending friend request from one user to another.

    At most one exists per ordered (from, to) pair. It is removed when the
    recipient accepts or declines it.
    """
    from_user: str = Field(..., alias="from")
    to_user: str = Field(..., alias="to", exclude=True)
    from_avatar: str = Field(..., alias="fromAvatar")
    timestamp: int = Field(..., description="Creation time, epoch milliseconds")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class FriendRequestNotice(BaseModel):
    """Payload of new_friend_request sent to the recipient."""
    from_user: str = Field(..., alias="from")
    from_avatar: str = Field(..., alias="fromAvatar")

    model_config = ConfigDict(populate_by_name=True)
