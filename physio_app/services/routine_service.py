"""
Routine editing for the practitioner's patient page.

A RoutineEditor per (practitioner, patient) lives in process memory only while
an edit is open; save and cancel close it. Saving overwrites
Patient.exerciseRoutine wholesale; cancelling re-reads the patient document.
There is no conflict detection: the last save wins.
"""
from typing import Dict, List, Optional, Tuple

from fastapi import HTTPException
from beanie import PydanticObjectId as OID

from physio_app.models import Patient
from physio_app.schemas import RoutineStateOut
from physio_app.services import exercise_service, notification_service, socket_service
from physio_app.services.routine_editor import ExerciseNotFound, RoutineEditor
from physio_app.utils.logger import get_logger
from physio_app.utils.patient_view import patient_out, resolve_routine

logger = get_logger("routine_service")

# Open edits only
_editors: Dict[Tuple[str, str], RoutineEditor] = {}


def _key(practitioner_id: str | OID, patient_id: str | OID) -> Tuple[str, str]:
    return str(practitioner_id), str(patient_id)


def peek_editor(practitioner_id: str | OID, patient_id: str | OID) -> Optional[RoutineEditor]:
    return _editors.get(_key(practitioner_id, patient_id))


def discard_editor(practitioner_id: str | OID, patient_id: str | OID) -> None:
    _editors.pop(_key(practitioner_id, patient_id), None)


def _synced_editor(practitioner_id: str | OID, patient: Patient) -> Optional[RoutineEditor]:
    """The open editor, if any, with the stored routine as its saved list."""
    editor = peek_editor(practitioner_id, patient.id)
    if editor is not None:
        editor.reload(patient.exerciseRoutine or [])
    return editor


def _open_editor(practitioner_id: str | OID, patient: Patient) -> RoutineEditor:
    editor = _synced_editor(practitioner_id, patient)
    if editor is None:
        editor = RoutineEditor(patient.exerciseRoutine or [])
        _editors[_key(practitioner_id, patient.id)] = editor
    return editor


def _require_editing(practitioner_id: str | OID, patient: Patient) -> RoutineEditor:
    editor = _synced_editor(practitioner_id, patient)
    if editor is None or not editor.editing:
        raise HTTPException(status_code=409, detail="Routine is not being edited")
    return editor


async def _state(practitioner_id: str | OID, patient: Patient, editor: Optional[RoutineEditor]) -> RoutineStateOut:
    library = await exercise_service.list_exercises(practitioner_id)
    editing = bool(editor and editor.editing)
    routine = editor.working if editing else list(patient.exerciseRoutine or [])
    return RoutineStateOut(
        patient_id=str(patient.id),
        editing=editing,
        exerciseRoutine=list(routine),
        exercises=resolve_routine(routine, library),
    )


async def _load(practitioner_id: str | OID, patient_id: str) -> Patient:
    from physio_app.services.patient_service import get_owned_patient

    return await get_owned_patient(practitioner_id, patient_id)


async def get_routine(practitioner_id: str | OID, patient_id: str) -> RoutineStateOut:
    patient = await _load(practitioner_id, patient_id)
    return await _state(practitioner_id, patient, _synced_editor(practitioner_id, patient))


async def begin_edit(practitioner_id: str | OID, patient_id: str) -> RoutineStateOut:
    """Open an edit with the stored routine as the working list."""
    patient = await _load(practitioner_id, patient_id)
    editor = _open_editor(practitioner_id, patient)
    editor.begin()
    return await _state(practitioner_id, patient, editor)


async def add_exercise(practitioner_id: str | OID, patient_id: str, title: str) -> RoutineStateOut:
    """Append the library exercise titled `title` to the working list."""
    patient = await _load(practitioner_id, patient_id)
    editor = _require_editing(practitioner_id, patient)
    library = await exercise_service.list_exercises(practitioner_id)
    try:
        editor.add(title, library)
    except ExerciseNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return await _state(practitioner_id, patient, editor)


async def remove_exercise(practitioner_id: str | OID, patient_id: str, index: int) -> RoutineStateOut:
    patient = await _load(practitioner_id, patient_id)
    editor = _require_editing(practitioner_id, patient)
    try:
        editor.remove(index)
    except IndexError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return await _state(practitioner_id, patient, editor)


async def _persist(patient: Patient, routine: List[str]) -> None:
    patient.exerciseRoutine = list(routine)
    await patient.save()
    await socket_service.publish_routine(str(patient.id), patient.exerciseRoutine)
    await socket_service.publish_patient(str(patient.id), patient_out(patient).model_dump(mode="json"))
    await notification_service.notify_routine_saved(patient)


async def save_routine(practitioner_id: str | OID, patient_id: str) -> RoutineStateOut:
    """Persist the working list verbatim and close the edit."""
    patient = await _load(practitioner_id, patient_id)
    editor = _require_editing(practitioner_id, patient)
    routine = editor.save()
    discard_editor(practitioner_id, patient.id)
    await _persist(patient, routine)
    logger.info(f"Routine saved for patient {patient.id}: {len(routine)} exercises")
    return await _state(practitioner_id, patient, None)


async def cancel_edit(practitioner_id: str | OID, patient_id: str) -> RoutineStateOut:
    """Drop local changes; the routine goes back to the stored value."""
    patient = await _load(practitioner_id, patient_id)
    editor = _require_editing(practitioner_id, patient)
    editor.cancel()
    discard_editor(practitioner_id, patient.id)
    return await _state(practitioner_id, patient, None)


async def replace_routine(practitioner_id: str | OID, patient_id: str, routine: List[str]) -> RoutineStateOut:
    """Overwrite the stored routine in one call. An open edit keeps its working list."""
    patient = await _load(practitioner_id, patient_id)
    await _persist(patient, routine)
    return await _state(practitioner_id, patient, _synced_editor(practitioner_id, patient))
