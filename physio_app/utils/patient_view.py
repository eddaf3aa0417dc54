from typing import Dict, Iterable, List

from physio_app.schemas import (
    ConversationOut,
    ExerciseOut,
    PatientOut,
)
from physio_app.utils.formatting import format_summary_date, to_utc


def exercise_out(exercise) -> ExerciseOut:
    return ExerciseOut(
        id=str(exercise.id),
        title=exercise.title,
        description=exercise.description,
        image=exercise.image,
        sets=exercise.sets,
        reps=exercise.reps,
        notes=exercise.notes,
    )


def patient_out(patient) -> PatientOut:
    return PatientOut(
        id=str(patient.id),
        practitioner_id=str(patient.practitioner_id),
        name=patient.name,
        age=patient.age,
        email=patient.email,
        last_login=patient.last_login,
        last_workout=patient.last_workout,
        exerciseRoutine=list(patient.exerciseRoutine or []),
    )


def resolve_routine(routine_ids: Iterable[str], exercises: Iterable[ExerciseOut]) -> List[ExerciseOut]:
    """Exercise cards in routine order.

    Ids with no matching exercise (deleted, or from another library) are
    skipped. Repeated ids produce repeated cards.
    """
    by_id: Dict[str, ExerciseOut] = {}
    for e in exercises:
        by_id.setdefault(e.id, e)
    return [by_id[eid] for eid in routine_ids if eid in by_id]


def conversations_out(summaries: Iterable, tz_name: str | None = None) -> List[ConversationOut]:
    """Conversation summaries, newest first, with display dates."""
    items = [
        ConversationOut(
            id=str(s.id) if getattr(s, "id", None) else None,
            date=s.date,
            formatted_date=format_summary_date(s.date, tz_name),
            summary=s.summary,
        )
        for s in summaries
    ]
    items.sort(key=lambda c: to_utc(c.date), reverse=True)
    return items
