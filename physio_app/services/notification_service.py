from typing import Optional
from beanie import PydanticObjectId as OID

from physio_app.models import DeviceToken, Notification, Patient
from physio_app.utils.firebase import send_firebase_message
from physio_app.utils.logger import get_logger

logger = get_logger("notification_service")

ROUTINE_SAVED_TITLE = "Exercise routine updated"


def routine_saved_body(routine: list[str]) -> str:
    count = len(routine)
    return f"Your routine now has {count} exercise{'' if count == 1 else 's'}."


async def register_device_token(*, user_id: str | OID, token: str, platform: Optional[str]) -> DeviceToken:
    """Save or re-activate the FCM token of a user's device."""
    uid = user_id if isinstance(user_id, OID) else OID(user_id)
    existing = await DeviceToken.find_one(DeviceToken.token == token)
    if existing:
        existing.user_id = uid
        existing.platform = platform
        existing.active = True
        await existing.save()
        return existing
    dt = DeviceToken(user_id=uid, token=token, platform=platform)
    await dt.insert()
    return dt


async def notify_user(*, user_id: str | OID, title: str, body: str) -> None:
    """Push to all of the user's devices via Firebase and store the record."""
    uid = user_id if isinstance(user_id, OID) else OID(user_id)
    tokens_docs = await DeviceToken.find(DeviceToken.user_id == uid, DeviceToken.active == True).to_list()
    tokens = [dt.token for dt in tokens_docs]
    if tokens:
        await send_firebase_message(tokens, title, body)
    await Notification(user_id=uid, title=title, body=body).insert()


async def notify_routine_saved(patient: Patient) -> bool:
    """Tell a patient with a login that their routine changed.

    The routine is already stored when this runs, so a delivery failure is
    logged and reported as False instead of propagating.
    """
    if not patient.user_id:
        return False
    try:
        await notify_user(
            user_id=patient.user_id,
            title=ROUTINE_SAVED_TITLE,
            body=routine_saved_body(patient.exerciseRoutine or []),
        )
    except Exception as e:
        logger.error(f"Routine notification failed for patient {patient.id}: {e}", exc_info=True)
        return False
    return True
