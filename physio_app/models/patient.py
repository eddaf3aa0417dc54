from beanie import Document, Indexed
from beanie import PydanticObjectId as OID
from datetime import datetime, timezone
from pydantic import Field


class Patient(Document):
    """Patient record owned by a practitioner.

    exerciseRoutine is the ordered list of Exercise ids assigned to the
    patient. It is always written wholesale.
    """
    practitioner_id: Indexed(OID)
    user_id: Indexed(OID) | None = None

    name: str
    age: int | None = None
    email: str | None = None

    last_login: datetime | None = None
    last_workout: datetime | None = None

    exerciseRoutine: list[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "patients"

