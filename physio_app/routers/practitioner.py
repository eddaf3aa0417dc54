from typing import List

from fastapi import APIRouter, Depends, Response

from physio_app.constants import Role
from physio_app.schemas import (
    ConversationCreate,
    ConversationOut,
    ExerciseCreate,
    ExerciseOut,
    ExerciseUpdate,
    PatientCreate,
    PatientDetailsOut,
    PatientOut,
    PatientUpdate,
    RoutineAddIn,
    RoutineReplaceIn,
    RoutineStateOut,
)
from physio_app.security import get_current_user, require_roles
from physio_app.services import exercise_service, patient_service, routine_service

router = APIRouter(
    prefix="/practitioner",
    tags=["practitioner"],
    dependencies=[Depends(require_roles([Role.PRACTITIONER]))],
)

# -------------------- Patients --------------------


@router.get("/patients", response_model=List[PatientOut])
async def list_patients(current=Depends(get_current_user)):
    return await patient_service.list_patients(current.id)


@router.post("/patients", response_model=PatientOut, status_code=201)
async def create_patient(payload: PatientCreate, current=Depends(get_current_user)):
    return await patient_service.create_patient(current.id, payload)


@router.get("/patients/{patient_id}", response_model=PatientDetailsOut)
async def patient_details(patient_id: str, current=Depends(get_current_user)):
    """Patient page: header, routine cards, conversation summaries."""
    return await patient_service.get_patient_details(current.id, patient_id)


@router.patch("/patients/{patient_id}", response_model=PatientOut)
async def update_patient(patient_id: str, payload: PatientUpdate, current=Depends(get_current_user)):
    return await patient_service.update_patient(current.id, patient_id, payload)


@router.delete("/patients/{patient_id}", status_code=204)
async def delete_patient(patient_id: str, current=Depends(get_current_user)):
    await patient_service.delete_patient(current.id, patient_id)
    return Response(status_code=204)

# -------------------- Conversation summaries --------------------


@router.get("/patients/{patient_id}/conversations", response_model=List[ConversationOut])
async def list_conversations(patient_id: str, current=Depends(get_current_user)):
    patient = await patient_service.get_owned_patient(current.id, patient_id)
    return await patient_service.list_conversations(patient)


@router.post("/patients/{patient_id}/conversations", response_model=List[ConversationOut], status_code=201)
async def add_conversation(patient_id: str, payload: ConversationCreate, current=Depends(get_current_user)):
    return await patient_service.add_conversation(current.id, patient_id, payload)

# -------------------- Routine --------------------


@router.get("/patients/{patient_id}/routine", response_model=RoutineStateOut)
async def get_routine(patient_id: str, current=Depends(get_current_user)):
    return await routine_service.get_routine(current.id, patient_id)


@router.put("/patients/{patient_id}/routine", response_model=RoutineStateOut)
async def replace_routine(patient_id: str, payload: RoutineReplaceIn, current=Depends(get_current_user)):
    return await routine_service.replace_routine(current.id, patient_id, payload.exerciseRoutine)


@router.post("/patients/{patient_id}/routine/edit", response_model=RoutineStateOut)
async def begin_edit(patient_id: str, current=Depends(get_current_user)):
    return await routine_service.begin_edit(current.id, patient_id)


@router.post("/patients/{patient_id}/routine/exercises", response_model=RoutineStateOut)
async def add_routine_exercise(patient_id: str, payload: RoutineAddIn, current=Depends(get_current_user)):
    return await routine_service.add_exercise(current.id, patient_id, payload.title)


@router.delete("/patients/{patient_id}/routine/exercises/{index}", response_model=RoutineStateOut)
async def remove_routine_exercise(patient_id: str, index: int, current=Depends(get_current_user)):
    return await routine_service.remove_exercise(current.id, patient_id, index)


@router.post("/patients/{patient_id}/routine/save", response_model=RoutineStateOut)
async def save_routine(patient_id: str, current=Depends(get_current_user)):
    return await routine_service.save_routine(current.id, patient_id)


@router.post("/patients/{patient_id}/routine/cancel", response_model=RoutineStateOut)
async def cancel_routine_edit(patient_id: str, current=Depends(get_current_user)):
    return await routine_service.cancel_edit(current.id, patient_id)

# -------------------- Exercise library --------------------


@router.get("/exercises", response_model=List[ExerciseOut])
async def list_exercises(current=Depends(get_current_user)):
    return await exercise_service.list_exercises(current.id)


@router.post("/exercises", response_model=ExerciseOut, status_code=201)
async def create_exercise(payload: ExerciseCreate, current=Depends(get_current_user)):
    return await exercise_service.create_exercise(current.id, payload)


@router.patch("/exercises/{exercise_id}", response_model=ExerciseOut)
async def update_exercise(exercise_id: str, payload: ExerciseUpdate, current=Depends(get_current_user)):
    return await exercise_service.update_exercise(current.id, exercise_id, payload)


@router.delete("/exercises/{exercise_id}", status_code=204)
async def delete_exercise(exercise_id: str, current=Depends(get_current_user)):
    await exercise_service.delete_exercise(current.id, exercise_id)
    return Response(status_code=204)
