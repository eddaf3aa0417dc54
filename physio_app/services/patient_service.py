from datetime import datetime, timezone
from typing import List, Optional

from fastapi import HTTPException
from beanie import PydanticObjectId as OID

from physio_app.constants import CarouselMove, Role
from physio_app.models import ConversationSummary, Patient, User
from physio_app.schemas import (
    CarouselDot,
    CarouselSlideOut,
    ConversationCreate,
    ConversationOut,
    ExerciseOut,
    PatientCreate,
    PatientDetailsOut,
    PatientOut,
    PatientUpdate,
    WorkoutStartOut,
)
from physio_app.security import hash_password
from physio_app.services import exercise_service, routine_service, socket_service
from physio_app.services.carousel import ExerciseCarousel
from physio_app.utils.formatting import format_last_login
from physio_app.utils.ids import parse_oid
from physio_app.utils.logger import get_logger
from physio_app.utils.patient_view import conversations_out, patient_out, resolve_routine

logger = get_logger("patient_service")


def patient_payload(patient: Patient) -> dict:
    """JSON-ready patient record as pushed to subscribers."""
    return patient_out(patient).model_dump(mode="json")


async def get_owned_patient(practitioner_id: str | OID, patient_id: str) -> Patient:
    """Fetch one of the practitioner's patients or 404."""
    patient = await Patient.find_one(
        Patient.id == parse_oid(patient_id, "patient_id"),
        Patient.practitioner_id == parse_oid(practitioner_id, "practitioner_id"),
    )
    if not patient:
        logger.warning(f"Patient not found: {patient_id} (practitioner {practitioner_id})")
        raise HTTPException(status_code=404, detail="Patient not found")
    return patient


async def find_patient_for_user(user: User) -> Optional[Patient]:
    return await Patient.find_one(Patient.user_id == user.id)


async def get_patient_for_user(user: User) -> Patient:
    """The Patient record linked to a patient login."""
    patient = await find_patient_for_user(user)
    if not patient:
        logger.warning(f"Patient record not found for user {user.id}")
        raise HTTPException(status_code=404, detail="Patient not found")
    return patient


async def list_patients(practitioner_id: str | OID) -> List[PatientOut]:
    patients = await Patient.find(
        Patient.practitioner_id == parse_oid(practitioner_id, "practitioner_id")
    ).sort(+Patient.name).to_list()
    return [patient_out(p) for p in patients]


async def create_patient(practitioner_id: str | OID, payload: PatientCreate) -> PatientOut:
    """Create a patient record, plus a login account when a password is given."""
    user_id: Optional[OID] = None
    if payload.password:
        if not payload.email:
            raise HTTPException(status_code=400, detail="Email is required to create a patient login")
        if await User.find_one(User.email == payload.email):
            raise HTTPException(status_code=400, detail="Email already exists")
        user = User(
            email=payload.email,
            name=payload.name,
            role=Role.PATIENT,
            password_hash=hash_password(payload.password),
        )
        await user.insert()
        user_id = user.id

    patient = Patient(
        practitioner_id=parse_oid(practitioner_id, "practitioner_id"),
        user_id=user_id,
        name=payload.name,
        age=payload.age,
        email=payload.email,
        exerciseRoutine=list(payload.exerciseRoutine),
    )
    await patient.insert()
    logger.info(f"Patient created: {patient.id} for practitioner {practitioner_id}")
    return patient_out(patient)


async def update_patient(practitioner_id: str | OID, patient_id: str, payload: PatientUpdate) -> PatientOut:
    patient = await get_owned_patient(practitioner_id, patient_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(patient, field, value)
    await patient.save()
    await socket_service.publish_patient(str(patient.id), patient_payload(patient))
    return patient_out(patient)


async def delete_patient(practitioner_id: str | OID, patient_id: str) -> None:
    """Delete the patient, its summaries and its login account."""
    patient = await get_owned_patient(practitioner_id, patient_id)
    await ConversationSummary.find(ConversationSummary.patient_id == patient.id).delete()
    if patient.user_id:
        user = await User.get(patient.user_id)
        if user:
            await user.delete()
    routine_service.discard_editor(practitioner_id, str(patient.id))
    await patient.delete()
    logger.info(f"Patient deleted: {patient_id}")


# -------------------- Conversation summaries --------------------


async def list_conversations(patient: Patient) -> List[ConversationOut]:
    summaries = await ConversationSummary.find(
        ConversationSummary.patient_id == patient.id
    ).to_list()
    return conversations_out(summaries)


async def add_conversation(practitioner_id: str | OID, patient_id: str, payload: ConversationCreate) -> List[ConversationOut]:
    """Attach a summary and return the patient's full, re-sorted list."""
    patient = await get_owned_patient(practitioner_id, patient_id)
    summary = ConversationSummary(
        patient_id=patient.id,
        date=payload.date or datetime.now(timezone.utc),
        summary=payload.summary,
    )
    await summary.insert()
    conversations = await list_conversations(patient)
    await socket_service.publish_conversations(
        str(patient.id), [c.model_dump(mode="json") for c in conversations]
    )
    return conversations


# -------------------- Details page --------------------


async def get_patient_details(practitioner_id: str | OID, patient_id: str) -> PatientDetailsOut:
    """Header, routine cards and conversation summaries for one patient."""
    patient = await get_owned_patient(practitioner_id, patient_id)
    library = await exercise_service.list_exercises(practitioner_id)
    conversations = await list_conversations(patient)

    editor = routine_service.peek_editor(practitioner_id, str(patient.id))
    editing = bool(editor and editor.editing)
    routine_ids = editor.working if editing else list(patient.exerciseRoutine or [])

    return PatientDetailsOut(
        patient=patient_out(patient),
        last_login_display=format_last_login(patient.last_login),
        exerciseRoutine=list(routine_ids),
        routine=resolve_routine(routine_ids, library),
        conversations=conversations,
        editing=editing,
    )


# -------------------- Patient side --------------------


async def record_login(user: User) -> None:
    """Stamp last_login on the patient record of a patient login."""
    patient = await find_patient_for_user(user)
    if not patient:
        return
    patient.last_login = datetime.now(timezone.utc)
    await patient.save()
    await socket_service.publish_patient(str(patient.id), patient_payload(patient))


def build_slide(exercises: List[ExerciseOut], index: int = 0, move: CarouselMove | None = None) -> CarouselSlideOut:
    carousel = ExerciseCarousel(exercises, index)
    carousel.move(move)
    return CarouselSlideOut(
        index=carousel.index,
        total=len(carousel),
        exercise=carousel.current,
        dots=[CarouselDot(index=i, active=active) for i, active in carousel.dots()],
    )


async def get_carousel_slide(user: User, index: int = 0, move: CarouselMove | None = None) -> CarouselSlideOut:
    """Slide of the patient's assigned exercises."""
    patient = await get_patient_for_user(user)
    library = await exercise_service.list_exercises(patient.practitioner_id)
    exercises = resolve_routine(patient.exerciseRoutine or [], library)
    return build_slide(exercises, index, move)


def workout_path(practitioner_id: str | OID, patient_id: str | OID) -> str:
    return f"/{practitioner_id}/patient/{patient_id}/workout"


async def start_workout(user: User) -> WorkoutStartOut:
    patient = await get_patient_for_user(user)
    now = datetime.now(timezone.utc)
    patient.last_workout = now
    await patient.save()
    await socket_service.publish_patient(str(patient.id), patient_payload(patient))
    return WorkoutStartOut(
        path=workout_path(patient.practitioner_id, patient.id),
        progress=0,
        started_at=now,
    )
