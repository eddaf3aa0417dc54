from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException
from beanie import PydanticObjectId as OID

from physio_app.services import exercise_service, notification_service, routine_service

from conftest import make_patient


@pytest.fixture
def stored(monkeypatch, practitioner, library, silent_sockets):
    """One stored patient behind the routine service."""
    patient = make_patient(practitioner.id, routine=["e1", "e2"])

    async def load(practitioner_id, patient_id):
        if str(patient_id) != str(patient.id):
            raise HTTPException(status_code=404, detail="Patient not found")
        return patient

    monkeypatch.setattr(routine_service, "_load", load)
    monkeypatch.setattr(exercise_service, "list_exercises", AsyncMock(return_value=library))
    return patient


@pytest.mark.asyncio
async def test_edit_add_save_persists_working_list(practitioner, stored, silent_sockets):
    pid = str(stored.id)
    state = await routine_service.begin_edit(practitioner.id, pid)
    assert state.editing is True

    state = await routine_service.add_exercise(practitioner.id, pid, "Wall Sit")
    assert state.exerciseRoutine == ["e1", "e2", "e3"]
    # nothing written yet
    assert stored.exerciseRoutine == ["e1", "e2"]
    stored.save.assert_not_awaited()

    state = await routine_service.save_routine(practitioner.id, pid)
    assert state.editing is False
    assert stored.exerciseRoutine == ["e1", "e2", "e3"]
    stored.save.assert_awaited_once()
    silent_sockets.routine.assert_awaited_once_with(pid, ["e1", "e2", "e3"])


@pytest.mark.asyncio
async def test_cancel_restores_stored_routine(practitioner, stored):
    pid = str(stored.id)
    await routine_service.begin_edit(practitioner.id, pid)
    await routine_service.remove_exercise(practitioner.id, pid, 0)

    state = await routine_service.cancel_edit(practitioner.id, pid)
    assert state.editing is False
    assert state.exerciseRoutine == ["e1", "e2"]
    assert [e.title for e in state.exercises] == ["Bridge", "Clamshell"]
    stored.save.assert_not_awaited()


@pytest.mark.asyncio
async def test_cancel_picks_up_server_changes(practitioner, stored):
    pid = str(stored.id)
    await routine_service.begin_edit(practitioner.id, pid)
    stored.exerciseRoutine = ["e3"]  # changed by someone else meanwhile
    state = await routine_service.cancel_edit(practitioner.id, pid)
    assert state.exerciseRoutine == ["e3"]


@pytest.mark.asyncio
async def test_changes_require_open_edit(practitioner, stored):
    with pytest.raises(HTTPException) as exc:
        await routine_service.add_exercise(practitioner.id, str(stored.id), "Bridge")
    assert exc.value.status_code == 409
    with pytest.raises(HTTPException) as exc:
        await routine_service.save_routine(practitioner.id, str(stored.id))
    assert exc.value.status_code == 409


@pytest.mark.asyncio
async def test_unknown_title_is_404(practitioner, stored):
    pid = str(stored.id)
    await routine_service.begin_edit(practitioner.id, pid)
    with pytest.raises(HTTPException) as exc:
        await routine_service.add_exercise(practitioner.id, pid, "Plank")
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_remove_out_of_range_is_400(practitioner, stored):
    pid = str(stored.id)
    await routine_service.begin_edit(practitioner.id, pid)
    with pytest.raises(HTTPException) as exc:
        await routine_service.remove_exercise(practitioner.id, pid, 5)
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_replace_routine_overwrites_and_notifies_patient(monkeypatch, practitioner, stored):
    stored.user_id = OID()
    notify = AsyncMock()
    monkeypatch.setattr(notification_service, "notify_user", notify)

    state = await routine_service.replace_routine(practitioner.id, str(stored.id), ["e3", "gone"])
    assert stored.exerciseRoutine == ["e3", "gone"]
    assert [e.id for e in state.exercises] == ["e3"]
    notify.assert_awaited_once()
    assert notify.await_args.kwargs["user_id"] == stored.user_id


@pytest.mark.asyncio
async def test_editors_are_per_patient(practitioner, stored):
    await routine_service.begin_edit(practitioner.id, str(stored.id))
    assert routine_service.peek_editor(practitioner.id, stored.id).editing is True
    assert routine_service.peek_editor(practitioner.id, OID()) is None
    routine_service.discard_editor(practitioner.id, stored.id)
    assert routine_service.peek_editor(practitioner.id, stored.id) is None


@pytest.mark.asyncio
async def test_save_and_cancel_close_the_editor(practitioner, stored):
    pid = str(stored.id)
    await routine_service.begin_edit(practitioner.id, pid)
    await routine_service.save_routine(practitioner.id, pid)
    assert routine_service.peek_editor(practitioner.id, stored.id) is None

    await routine_service.begin_edit(practitioner.id, pid)
    await routine_service.cancel_edit(practitioner.id, pid)
    assert routine_service.peek_editor(practitioner.id, stored.id) is None
    assert routine_service._editors == {}


@pytest.mark.asyncio
async def test_reads_and_replace_do_not_open_an_editor(practitioner, stored):
    pid = str(stored.id)
    state = await routine_service.get_routine(practitioner.id, pid)
    assert state.editing is False
    await routine_service.replace_routine(practitioner.id, pid, ["e2"])
    assert routine_service._editors == {}


@pytest.mark.asyncio
async def test_replace_keeps_open_working_list(practitioner, stored):
    pid = str(stored.id)
    await routine_service.begin_edit(practitioner.id, pid)
    await routine_service.add_exercise(practitioner.id, pid, "Wall Sit")

    state = await routine_service.replace_routine(practitioner.id, pid, ["e2"])
    assert stored.exerciseRoutine == ["e2"]
    assert state.editing is True
    assert state.exerciseRoutine == ["e1", "e2", "e3"]


@pytest.mark.asyncio
async def test_save_succeeds_when_push_delivery_fails(monkeypatch, practitioner, stored, silent_sockets):
    stored.user_id = OID()
    monkeypatch.setattr(notification_service, "notify_user", AsyncMock(side_effect=RuntimeError("fcm down")))
    pid = str(stored.id)
    await routine_service.begin_edit(practitioner.id, pid)
    await routine_service.remove_exercise(practitioner.id, pid, 0)

    state = await routine_service.save_routine(practitioner.id, pid)
    assert state.editing is False
    assert state.exerciseRoutine == ["e2"]
    assert stored.exerciseRoutine == ["e2"]
    stored.save.assert_awaited_once()
    silent_sockets.routine.assert_awaited_once_with(pid, ["e2"])
    assert routine_service.peek_editor(practitioner.id, stored.id) is None
