"""Relationship Service - Friend requests and friendships."""

import logging
from typing import List

from friendchat.exceptions import AlreadyFriends, CannotBefriendSelf, UserNotFound
from friendchat.models.friend import FriendRequest
from friendchat.models.user import UserPublic
from friendchat.repositories.base import FriendRequestRepository, FriendshipRepository
from friendchat.services.identity_service import IdentityService
from friendchat.utils.timezone_utils import epoch_millis, utc_now

logger = logging.getLogger(__name__)


class RelationshipService:
    """
    Friend request state machine.

    pending (from, to) --accept--> friendship (symmetric)
    pending (from, to) --decline--> removed
    """

    def __init__(
        self,
        requests: FriendRequestRepository,
        friendships: FriendshipRepository,
        identity: IdentityService,
    ):
        self.requests = requests
        self.friendships = friendships
        self.identity = identity

    def send_request(self, from_user: str, to_user: str) -> FriendRequest:
        """
        Queue a friend request.

        Re-sending an identical pending request is a no-op and returns the
        existing request.

        Raises:
            UserNotFound: target does not exist
            CannotBefriendSelf: from_user == to_user
            AlreadyFriends: the two are already friends
        """
        if not self.identity.exists(to_user):
            raise UserNotFound()
        if from_user == to_user:
            raise CannotBefriendSelf()
        if self.friendships.are_friends(from_user, to_user):
            raise AlreadyFriends()

        existing = self.requests.find(from_user, to_user)
        if existing is not None:
            return existing

        sender = self.identity.find_by_username(from_user)
        request = FriendRequest(
            from_user=from_user,
            to_user=to_user,
            from_avatar=sender.avatar if sender else "",
            timestamp=epoch_millis(utc_now()),
        )
        self.requests.add(request)
        logger.info(f"Friend request: {from_user} -> {to_user}")
        return request

    def accept_request(self, accepter: str, requester: str) -> None:
        """
        Make accepter and requester friends.

        Only the (requester, accepter) request is removed; other requests to
        the accepter stay queued.
        """
        if not self.identity.exists(requester):
            raise UserNotFound()
        if accepter == requester:
            raise CannotBefriendSelf()

        self.friendships.add_pair(accepter, requester)
        self.requests.remove(requester, accepter)
        logger.info(f"Friends added: {accepter} and {requester}")

    def decline_request(self, decliner: str, requester: str) -> bool:
        """Drop the (requester, decliner) request. Returns False if there was none."""
        removed = self.requests.remove(requester, decliner)
        if removed:
            logger.info(f"Friend request declined: {requester} -> {decliner}")
        return removed

    def are_friends(self, user_a: str, user_b: str) -> bool:
        return self.friendships.are_friends(user_a, user_b)

    def friend_names(self, username: str) -> List[str]:
        return self.friendships.friends_of(username)

    def list_friends(self, username: str) -> List[UserPublic]:
        """Friends with live presence; never cached."""
        friends = []
        for name in self.friendships.friends_of(username):
            user = self.identity.find_by_username(name)
            if user is not None:
                friends.append(self.identity.to_public(user))
        return friends

    def list_pending_requests(self, username: str) -> List[FriendRequest]:
        return self.requests.pending_for(username)
