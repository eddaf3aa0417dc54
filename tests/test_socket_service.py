from unittest.mock import AsyncMock

import pytest
from beanie import PydanticObjectId as OID

from physio_app.constants import Role
from physio_app.services import exercise_service, patient_service, routine_service, socket_service

from conftest import make_patient, make_user


@pytest.fixture
def sockets(monkeypatch):
    """Fresh connection tables with the server's emit and room calls mocked."""
    monkeypatch.setattr(socket_service, "socket_users", {})
    monkeypatch.setattr(socket_service, "socket_subscriptions", {})
    for name in ("emit", "enter_room", "leave_room"):
        monkeypatch.setattr(socket_service.sio, name, AsyncMock())
    return socket_service.sio


def emitted(sio, event):
    return [c.args[1] for c in sio.emit.await_args_list if c.args[0] == event]


@pytest.mark.asyncio
async def test_practitioner_subscribes_only_to_own_patients(practitioner):
    own = make_patient(practitioner.id)
    other = make_patient(OID())
    assert await socket_service.can_subscribe_patient(practitioner, own) is True
    assert await socket_service.can_subscribe_patient(practitioner, other) is False


@pytest.mark.asyncio
async def test_patient_subscribes_only_to_self(patient_user):
    me = make_patient(OID(), user_id=patient_user.id)
    someone = make_patient(OID(), user_id=OID())
    assert await socket_service.can_subscribe_patient(patient_user, me) is True
    assert await socket_service.can_subscribe_patient(patient_user, someone) is False


@pytest.mark.asyncio
async def test_admin_subscribes_to_any_patient():
    admin = make_user(Role.ADMIN)
    assert await socket_service.can_subscribe_patient(admin, make_patient(OID())) is True


@pytest.mark.asyncio
async def test_disconnect_leaves_every_subscribed_room(sockets, practitioner):
    rooms = {socket_service.patient_room("p1"), socket_service.exercises_room(str(practitioner.id))}
    socket_service.socket_users["sid1"] = {"user_id": str(practitioner.id), "user": practitioner}
    socket_service.socket_subscriptions["sid1"] = set(rooms)

    await socket_service.disconnect("sid1")

    assert "sid1" not in socket_service.socket_users
    assert "sid1" not in socket_service.socket_subscriptions
    left = {c.args[1] for c in sockets.leave_room.await_args_list}
    assert left == rooms


@pytest.mark.asyncio
async def test_subscribe_sends_routine_with_open_edit(monkeypatch, sockets, practitioner, library):
    patient = make_patient(practitioner.id, routine=["e1", "e2"])
    monkeypatch.setattr(socket_service, "_load_patient", AsyncMock(return_value=patient))
    monkeypatch.setattr(patient_service, "list_conversations", AsyncMock(return_value=[]))
    monkeypatch.setattr(patient_service, "get_owned_patient", AsyncMock(return_value=patient))
    monkeypatch.setattr(exercise_service, "list_exercises", AsyncMock(return_value=library))
    await routine_service.begin_edit(practitioner.id, str(patient.id))
    socket_service.socket_users["sid1"] = {"user_id": str(practitioner.id), "user": practitioner}

    await socket_service.subscribe_patient("sid1", {"patient_id": str(patient.id)})

    room = socket_service.patient_room(str(patient.id))
    sockets.enter_room.assert_awaited_once_with("sid1", room)
    assert room in socket_service.socket_subscriptions["sid1"]
    assert emitted(sockets, "routine_updated") == [
        {"patient_id": str(patient.id), "exerciseRoutine": ["e1", "e2"], "editing": True}
    ]
    assert emitted(sockets, "patient_updated")[0]["id"] == str(patient.id)
    assert emitted(sockets, "conversations_updated") == [
        {"patient_id": str(patient.id), "conversations": []}
    ]


@pytest.mark.asyncio
async def test_subscribe_to_foreign_patient_is_refused(monkeypatch, sockets, practitioner):
    patient = make_patient(OID())
    monkeypatch.setattr(socket_service, "_load_patient", AsyncMock(return_value=patient))
    socket_service.socket_users["sid1"] = {"user_id": str(practitioner.id), "user": practitioner}

    await socket_service.subscribe_patient("sid1", {"patient_id": str(patient.id)})

    sockets.enter_room.assert_not_awaited()
    assert emitted(sockets, "error") == [{"message": "Not your patient", "code": "E403"}]
    assert emitted(sockets, "routine_updated") == []
