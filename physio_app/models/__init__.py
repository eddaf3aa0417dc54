# Re-export Beanie documents
from .user import User
from .patient import Patient
from .exercise import Exercise
from .conversation import ConversationSummary
from .notification import DeviceToken, Notification

DOCUMENT_MODELS = [
    User,
    Patient,
    Exercise,
    ConversationSummary,
    DeviceToken,
    Notification,
]
