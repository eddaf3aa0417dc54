from typing import Optional

from fastapi import APIRouter, Depends, Query

from physio_app.constants import CarouselMove, Role
from physio_app.schemas import CarouselSlideOut, PatientOut, WorkoutStartOut
from physio_app.security import get_current_user, require_roles
from physio_app.services import patient_service
from physio_app.utils.patient_view import patient_out

router = APIRouter(prefix="/patient", tags=["patient"], dependencies=[Depends(require_roles([Role.PATIENT]))])


@router.get("/me", response_model=PatientOut)
async def my_record(current=Depends(get_current_user)):
    patient = await patient_service.get_patient_for_user(current)
    return patient_out(patient)


@router.get("/exercises", response_model=CarouselSlideOut)
async def exercise_carousel(
    index: int = Query(0, description="Slide currently shown"),
    move: Optional[CarouselMove] = Query(None, description="next|prev, omitted to jump to index"),
    current=Depends(get_current_user),
):
    """Assigned exercises, one slide at a time, wrapping at both ends."""
    return await patient_service.get_carousel_slide(current, index, move)


@router.post("/workout/start", response_model=WorkoutStartOut)
async def start_workout(current=Depends(get_current_user)):
    return await patient_service.start_workout(current)
