from typing import List

from fastapi import HTTPException
from beanie import PydanticObjectId as OID

from physio_app.models import Exercise
from physio_app.schemas import ExerciseCreate, ExerciseOut, ExerciseUpdate
from physio_app.services import socket_service
from physio_app.utils.ids import parse_oid
from physio_app.utils.logger import get_logger
from physio_app.utils.patient_view import exercise_out

logger = get_logger("exercise_service")


async def _get_owned_exercise(practitioner_id: str | OID, exercise_id: str) -> Exercise:
    exercise = await Exercise.find_one(
        Exercise.id == parse_oid(exercise_id, "exercise_id"),
        Exercise.practitioner_id == parse_oid(practitioner_id, "practitioner_id"),
    )
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return exercise


async def list_exercises(practitioner_id: str | OID) -> List[ExerciseOut]:
    """The practitioner's exercise library, oldest first."""
    exercises = await Exercise.find(
        Exercise.practitioner_id == parse_oid(practitioner_id, "practitioner_id")
    ).sort(+Exercise.created_at).to_list()
    return [exercise_out(e) for e in exercises]


async def _publish_library(practitioner_id: str | OID) -> None:
    exercises = await list_exercises(practitioner_id)
    await socket_service.publish_exercises(
        str(practitioner_id), [e.model_dump(mode="json") for e in exercises]
    )


async def create_exercise(practitioner_id: str | OID, payload: ExerciseCreate) -> ExerciseOut:
    exercise = Exercise(
        practitioner_id=parse_oid(practitioner_id, "practitioner_id"),
        **payload.model_dump(),
    )
    await exercise.insert()
    logger.info(f"Exercise created: {exercise.id} '{exercise.title}' for practitioner {practitioner_id}")
    await _publish_library(practitioner_id)
    return exercise_out(exercise)


async def update_exercise(practitioner_id: str | OID, exercise_id: str, payload: ExerciseUpdate) -> ExerciseOut:
    exercise = await _get_owned_exercise(practitioner_id, exercise_id)
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(exercise, field, value)
    await exercise.save()
    await _publish_library(practitioner_id)
    return exercise_out(exercise)


async def delete_exercise(practitioner_id: str | OID, exercise_id: str) -> None:
    """Delete from the library. Routines keep the id; it is skipped when rendered."""
    exercise = await _get_owned_exercise(practitioner_id, exercise_id)
    await exercise.delete()
    logger.info(f"Exercise deleted: {exercise_id}")
    await _publish_library(practitioner_id)
