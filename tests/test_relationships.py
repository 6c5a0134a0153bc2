"""
Tests for Relationship Service

Friend request coalescing, acceptance symmetry and decline.
"""

import pytest

from friendchat.config import Settings
from friendchat.exceptions import AlreadyFriends, CannotBefriendSelf, UserNotFound
from friendchat.repositories.memory import (
    InMemoryFriendRequestRepository,
    InMemoryFriendshipRepository,
    InMemorySessionRepository,
    InMemoryUserRepository,
)
from friendchat.services.identity_service import IdentityService
from friendchat.services.presence_service import PresenceService
from friendchat.services.relationship_service import RelationshipService


class TestRelationshipService:
    """Tests for RelationshipService."""

    @pytest.fixture
    def presence(self):
        return PresenceService(InMemorySessionRepository())

    @pytest.fixture
    def identity(self, presence):
        identity = IdentityService(InMemoryUserRepository(), presence, Settings())
        for name in ["alice", "bob", "carol"]:
            identity.register(name)
        return identity

    @pytest.fixture
    def service(self, identity):
        return RelationshipService(
            InMemoryFriendRequestRepository(), InMemoryFriendshipRepository(), identity
        )

    # =========================================================================
    # Sending
    # =========================================================================

    def test_send_request_is_queued_for_target(self, service, identity):
        """Request should be queued for the target with the sender's avatar."""
        request = service.send_request("bob", "alice")

        pending = service.list_pending_requests("alice")
        assert pending == [request]
        assert request.from_avatar == identity.find_by_username("bob").avatar
        assert request.timestamp > 0

    def test_duplicate_request_is_coalesced(self, service):
        """Sending the same request twice should leave one pending request."""
        first = service.send_request("bob", "alice")
        second = service.send_request("bob", "alice")

        assert second == first
        assert len(service.list_pending_requests("alice")) == 1

    def test_send_to_unknown_user(self, service):
        """Request to a missing user should fail."""
        with pytest.raises(UserNotFound):
            service.send_request("bob", "nobody")

    def test_send_to_self(self, service):
        """Request to yourself should fail."""
        with pytest.raises(CannotBefriendSelf):
            service.send_request("bob", "bob")

    def test_send_to_friend(self, service):
        """Request to an existing friend should fail."""
        service.send_request("bob", "alice")
        service.accept_request("alice", "bob")

        with pytest.raises(AlreadyFriends):
            service.send_request("alice", "bob")

    # =========================================================================
    # Accepting / declining
    # =========================================================================

    def test_accept_is_symmetric(self, service):
        """Accepting should make both users friends of each other."""
        service.send_request("bob", "alice")
        service.accept_request("alice", "bob")

        assert [f.username for f in service.list_friends("alice")] == ["bob"]
        assert [f.username for f in service.list_friends("bob")] == ["alice"]
        assert service.are_friends("bob", "alice")

    def test_accept_removes_only_matching_request(self, service):
        """Accepting should leave other pending requests queued."""
        service.send_request("bob", "alice")
        service.send_request("carol", "alice")

        service.accept_request("alice", "bob")

        assert [r.from_user for r in service.list_pending_requests("alice")] == ["carol"]

    def test_accept_unknown_requester(self, service):
        """Accepting a missing user should fail without a friendship."""
        with pytest.raises(UserNotFound):
            service.accept_request("alice", "ghost")

        assert service.list_friends("alice") == []

    def test_accept_self_is_rejected(self, service):
        """Accepting yourself should fail and create no friendship."""
        with pytest.raises(CannotBefriendSelf):
            service.accept_request("alice", "alice")

        assert not service.are_friends("alice", "alice")
        assert service.list_friends("alice") == []

    def test_decline_removes_request(self, service):
        """Declining should drop only the matching request."""
        service.send_request("bob", "alice")
        service.send_request("carol", "alice")

        assert service.decline_request("alice", "bob") is True
        assert [r.from_user for r in service.list_pending_requests("alice")] == ["carol"]
        assert not service.are_friends("alice", "bob")

    def test_decline_without_request(self, service):
        """Declining a request that does not exist should report False."""
        assert service.decline_request("alice", "bob") is False

    # =========================================================================
    # Listing
    # =========================================================================

    def test_list_friends_reflects_live_presence(self, service, presence):
        """Friend list should show the current online status every call."""
        service.send_request("bob", "alice")
        service.accept_request("alice", "bob")

        assert service.list_friends("alice")[0].online is False

        presence.mark_online("bob", "h-bob")
        assert service.list_friends("alice")[0].online is True

        presence.mark_offline("h-bob")
        assert service.list_friends("alice")[0].online is False

    def test_pending_request_wire_shape(self, service):
        """Pending requests should serialize as from/fromAvatar/timestamp."""
        service.send_request("bob", "alice")

        dumped = service.list_pending_requests("alice")[0].model_dump(by_alias=True)

        assert set(dumped) == {"from", "fromAvatar", "timestamp"}
        assert dumped["from"] == "bob"
