from datetime import datetime
from pydantic import BaseModel, Field, EmailStr
from typing import Optional, List

from physio_app.constants import Role

# -------------------- Auth / User Schemas --------------------


class UserOut(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    role: Role

    class Config:
        from_attributes = True


class PractitionerRegisterIn(BaseModel):
    name: Optional[str] = None
    email: EmailStr
    password: str = Field(..., min_length=8)


class RefreshIn(BaseModel):
    refresh_token: str


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class DeviceTokenIn(BaseModel):
    token: str
    platform: Optional[str] = Field(None, description="ios|android|web")

# -------------------- Exercise Schemas --------------------


class ExerciseCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    sets: Optional[int] = Field(None, ge=0)
    reps: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class ExerciseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    sets: Optional[int] = Field(None, ge=0)
    reps: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class ExerciseOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    image: Optional[str] = None
    sets: Optional[int] = None
    reps: Optional[int] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True

# -------------------- Patient Schemas --------------------


class PatientCreate(BaseModel):
    name: str = Field(..., min_length=1)
    age: Optional[int] = Field(None, ge=0)
    email: Optional[EmailStr] = None
    # When set, a patient login account is created with this password
    password: Optional[str] = Field(None, min_length=8)
    exerciseRoutine: List[str] = Field(default_factory=list)


class PatientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    age: Optional[int] = Field(None, ge=0)
    email: Optional[EmailStr] = None


class PatientOut(BaseModel):
    id: str
    practitioner_id: str
    name: str
    age: Optional[int] = None
    email: Optional[str] = None
    last_login: Optional[datetime] = None
    last_workout: Optional[datetime] = None
    exerciseRoutine: List[str] = []

    class Config:
        from_attributes = True

# -------------------- Conversation Summaries --------------------


class ConversationCreate(BaseModel):
    summary: str = Field(..., min_length=1)
    date: Optional[datetime] = None


class ConversationOut(BaseModel):
    id: Optional[str] = None
    date: datetime
    formatted_date: str
    summary: str

# -------------------- Routine --------------------


class RoutineReplaceIn(BaseModel):
    """Bulk overwrite of a patient's routine."""
    exerciseRoutine: List[str]


class RoutineAddIn(BaseModel):
    title: str = Field(..., min_length=1)


class RoutineStateOut(BaseModel):
    patient_id: str
    editing: bool
    exerciseRoutine: List[str]
    exercises: List[ExerciseOut] = []

# -------------------- Patient Details --------------------


class PatientDetailsOut(BaseModel):
    patient: PatientOut
    last_login_display: str
    # Working list while an edit is open, otherwise the stored routine.
    # Indexes for DELETE .../routine/exercises/{index} refer to this list.
    exerciseRoutine: List[str] = []
    routine: List[ExerciseOut]
    conversations: List[ConversationOut]
    editing: bool = False

# -------------------- Carousel / Workout --------------------


class CarouselDot(BaseModel):
    index: int
    active: bool


class CarouselSlideOut(BaseModel):
    index: int
    total: int
    exercise: Optional[ExerciseOut] = None
    dots: List[CarouselDot] = []


class WorkoutStartOut(BaseModel):
    path: str
    progress: int = 0
    started_at: datetime
