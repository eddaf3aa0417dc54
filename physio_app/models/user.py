from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime, timezone
from physio_app.constants import Role


class User(Document):
    """Login account (practitioner, patient or admin).

    Practitioners own their patients and exercise library. A patient account is
    linked to exactly one Patient document through Patient.user_id.
    """

    name: str | None = None
    email: Indexed(str, unique=True)
    role: Role

    password_hash: str | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "users"
