"""friendchat Services Package"""

from friendchat.services.presence_service import PresenceService
from friendchat.services.identity_service import IdentityService
from friendchat.services.relationship_service import RelationshipService
from friendchat.services.conversation_service import (
    ConversationService,
    conversation_key,
    conversation_label,
)

__all__ = [
    "PresenceService",
    "IdentityService",
    "RelationshipService",
    "ConversationService",
    "conversation_key",
    "conversation_label",
]
