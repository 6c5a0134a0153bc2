"""friendchat Models Package"""

from friendchat.models.user import User, UserProfile, UserPublic
from friendchat.models.friend import FriendRequest, FriendRequestNotice
from friendchat.models.message import PrivateMessage, GlobalMessage, ChatHistory
from friendchat.models.events import EventName, Outbound, BROADCAST

__all__ = [
    "User", "UserProfile", "UserPublic",
    "FriendRequest", "FriendRequestNotice",
    "PrivateMessage", "GlobalMessage", "ChatHistory",
    "EventName", "Outbound", "BROADCAST",
]
