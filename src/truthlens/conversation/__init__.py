from .models import DEFAULT_GREETING, FAILURE_TEXT, ConversationEvent, Message
from .state import ConversationState

__all__ = [
    "DEFAULT_GREETING",
    "FAILURE_TEXT",
    "ConversationEvent",
    "ConversationState",
    "Message",
]
