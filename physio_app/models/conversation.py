from beanie import Document, Indexed
from beanie import PydanticObjectId as OID
from pydantic import Field
from datetime import datetime, timezone


class ConversationSummary(Document):
    """Timestamped text note attached to a patient."""
    patient_id: Indexed(OID)
    date: Indexed(datetime) = Field(default_factory=lambda: datetime.now(timezone.utc))
    summary: str

    class Settings:
        name = "conversation_summaries"
