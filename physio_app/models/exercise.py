from beanie import Document, Indexed
from beanie import PydanticObjectId as OID
from datetime import datetime, timezone
from pydantic import Field


class Exercise(Document):
    """An exercise in a practitioner's library."""
    practitioner_id: Indexed(OID)
    title: Indexed(str)
    description: str | None = None
    image: str | None = None  # image URL shown on cards and in the carousel
    sets: int | None = None
    reps: int | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "exercises"
