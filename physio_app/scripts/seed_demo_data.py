"""
Seed script to populate the database with demo data.
Creates: a practitioner, an exercise library, a patient with a routine and
conversation summaries. Safe to run more than once.

    python -m physio_app.scripts.seed_demo_data
"""
import asyncio
from datetime import datetime, timedelta, timezone

from beanie import PydanticObjectId as OID

from physio_app.constants import Role
from physio_app.database import init_db
from physio_app.models import ConversationSummary, Exercise, Patient, User
from physio_app.schemas import ExerciseCreate, PatientCreate
from physio_app.services.auth_service import register_practitioner
from physio_app.services.exercise_service import create_exercise
from physio_app.services.patient_service import create_patient

PRACTITIONER_EMAIL = "practitioner@example.com"
PATIENT_EMAIL = "patient@example.com"

DEMO_EXERCISES = [
    ExerciseCreate(
        title="Bridge",
        description="Lie on your back, knees bent, lift the hips until the body is straight.",
        image="https://example.com/img/bridge.png",
        sets=3,
        reps=12,
        notes="Hold 2 seconds at the top",
    ),
    ExerciseCreate(
        title="Clamshell",
        description="Side lying with knees bent, open the top knee keeping the feet together.",
        image="https://example.com/img/clamshell.png",
        sets=3,
        reps=15,
    ),
    ExerciseCreate(
        title="Wall Sit",
        description="Slide down a wall until the knees are at 90 degrees.",
        image="https://example.com/img/wall-sit.png",
        sets=2,
        reps=1,
        notes="30 seconds per rep",
    ),
]


async def _create_or_get_practitioner() -> User:
    existing = await User.find_one(User.email == PRACTITIONER_EMAIL)
    if existing:
        print(f"[SKIP] Practitioner '{PRACTITIONER_EMAIL}' already exists")
        return existing
    user = await register_practitioner(email=PRACTITIONER_EMAIL, password="practitioner123", name="Dr. Demo")
    print(f"[OK] Created practitioner: {user.name} ({PRACTITIONER_EMAIL})")
    return user


async def create_demo_exercises(practitioner: User) -> list[str]:
    print("\n=== Creating Exercise Library ===")
    ids = []
    for payload in DEMO_EXERCISES:
        existing = await Exercise.find_one(
            Exercise.practitioner_id == practitioner.id,
            Exercise.title == payload.title,
        )
        if existing:
            print(f"[SKIP] Exercise '{payload.title}' already exists")
            ids.append(str(existing.id))
            continue
        exercise = await create_exercise(practitioner.id, payload)
        print(f"[OK] Created exercise: {exercise.title}")
        ids.append(exercise.id)
    return ids


async def create_demo_patient(practitioner: User, routine: list[str]) -> None:
    print("\n=== Creating Patient ===")
    if await User.find_one(User.email == PATIENT_EMAIL):
        print(f"[SKIP] Patient '{PATIENT_EMAIL}' already exists")
        return
    patient = await create_patient(
        practitioner.id,
        PatientCreate(
            name="Sam Demo",
            age=42,
            email=PATIENT_EMAIL,
            password="patient123",
            exerciseRoutine=routine[:2],
        ),
    )
    print(f"[OK] Created patient: {patient.name} ({PATIENT_EMAIL})")

    now = datetime.now(timezone.utc)
    record = await Patient.get(OID(patient.id))
    for days_ago, text in [
        (7, "Initial assessment, lower back pain after lifting."),
        (2, "Pain reduced, added clamshells."),
    ]:
        await ConversationSummary(
            patient_id=record.id,
            date=now - timedelta(days=days_ago),
            summary=text,
        ).insert()
    print("[OK] Added conversation summaries")


async def main():
    await init_db()
    practitioner = await _create_or_get_practitioner()
    if practitioner.role != Role.PRACTITIONER:
        raise SystemExit(f"{PRACTITIONER_EMAIL} exists but is not a practitioner")
    routine = await create_demo_exercises(practitioner)
    await create_demo_patient(practitioner, routine)
    print("\n✅ Seed complete")


if __name__ == "__main__":
    asyncio.run(main())
