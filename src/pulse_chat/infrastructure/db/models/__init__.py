"""Import all models so metadata.create_all sees every table."""
from pulse_chat.infrastructure.db.models.conversation import ConversationModel
from pulse_chat.infrastructure.db.models.message import MessageModel
from pulse_chat.infrastructure.db.models.participant import ParticipantModel
from pulse_chat.infrastructure.db.models.user import UserModel

__all__ = [
    "ConversationModel",
    "MessageModel",
    "ParticipantModel",
    "UserModel",
]
