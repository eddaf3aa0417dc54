"""
Pytest configuration and fixtures.
"""
import os
import tempfile
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

# Settings are cached on first import, so the environment goes first
os.environ.setdefault("LOG_DIR", str(Path(tempfile.gettempdir()) / "physio_api_test_logs"))
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DISPLAY_TIMEZONE", "UTC")

import pytest
from beanie import PydanticObjectId as OID
from httpx import AsyncClient, ASGITransport

from physio_app.constants import Role
from physio_app.main import create_app
from physio_app.schemas import ExerciseOut
from physio_app.security import get_current_user
from physio_app.services import routine_service, socket_service


def make_user(role: Role, **kwargs):
    return SimpleNamespace(
        id=kwargs.pop("id", OID()),
        role=role,
        name=kwargs.pop("name", "Test User"),
        email=kwargs.pop("email", "user@example.com"),
        **kwargs,
    )


def make_patient(practitioner_id, routine=None, **kwargs):
    patient = SimpleNamespace(
        id=kwargs.pop("id", OID()),
        practitioner_id=practitioner_id,
        user_id=kwargs.pop("user_id", None),
        name=kwargs.pop("name", "Sam Patient"),
        age=kwargs.pop("age", 42),
        email=kwargs.pop("email", "sam@example.com"),
        last_login=kwargs.pop("last_login", None),
        last_workout=kwargs.pop("last_workout", None),
        exerciseRoutine=list(routine or []),
        **kwargs,
    )
    patient.save = AsyncMock()
    return patient


@pytest.fixture
def practitioner():
    return make_user(Role.PRACTITIONER, email="dr@example.com")


@pytest.fixture
def patient_user():
    return make_user(Role.PATIENT, email="sam@example.com")


@pytest.fixture
def library():
    """A small exercise library."""
    return [
        ExerciseOut(id="e1", title="Bridge", sets=3, reps=12, notes="Hold at the top"),
        ExerciseOut(id="e2", title="Clamshell", sets=3, reps=15),
        ExerciseOut(id="e3", title="Wall Sit", sets=2, reps=1),
    ]


@pytest.fixture(autouse=True)
def reset_editors():
    routine_service._editors.clear()
    yield
    routine_service._editors.clear()


@pytest.fixture
def silent_sockets(monkeypatch):
    """Capture publish calls instead of emitting."""
    mocks = SimpleNamespace(
        patient=AsyncMock(),
        routine=AsyncMock(),
        conversations=AsyncMock(),
        exercises=AsyncMock(),
    )
    monkeypatch.setattr(socket_service, "publish_patient", mocks.patient)
    monkeypatch.setattr(socket_service, "publish_routine", mocks.routine)
    monkeypatch.setattr(socket_service, "publish_conversations", mocks.conversations)
    monkeypatch.setattr(socket_service, "publish_exercises", mocks.exercises)
    return mocks


@asynccontextmanager
async def api_client(user=None):
    """AsyncClient on a fresh app, authenticated as `user` when given."""
    app = create_app(with_lifespan=False)
    if user is not None:
        app.dependency_overrides[get_current_user] = lambda: user
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)
