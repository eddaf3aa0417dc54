from enum import Enum

class Role(str, Enum):
    """System roles for RBAC."""
    ADMIN = "admin"
    PRACTITIONER = "practitioner"
    PATIENT = "patient"


class CarouselMove(str, Enum):
    NEXT = "next"
    PREV = "prev"


NEVER_LOGGED_IN = "Never"
