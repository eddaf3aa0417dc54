from typing import List

import firebase_admin
from firebase_admin import credentials, messaging

from physio_app.config import get_settings
from physio_app.utils.logger import get_logger

settings = get_settings()
logger = get_logger("firebase")

_firebase_ready = False


def init_firebase() -> bool:
    """Initialize the Admin SDK once; stays in no-op mode without credentials."""
    global _firebase_ready
    if _firebase_ready:
        return True
    if not settings.FIREBASE_CREDENTIALS_FILE:
        return False
    try:
        cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_FILE)
        firebase_admin.initialize_app(cred)
        _firebase_ready = True
    except (ValueError, OSError) as e:
        logger.error(f"Firebase initialization failed: {e}")
        _firebase_ready = False
    return _firebase_ready


async def send_firebase_message(tokens: List[str], title: str, body: str) -> None:
    """Send a multicast FCM message; no-op if Firebase not configured."""
    if not tokens or not init_firebase():
        logger.debug(f"[FCM:SKIP] title={title} tokens={len(tokens)}")
        return
    message = messaging.MulticastMessage(
        notification=messaging.Notification(title=title, body=body),
        tokens=tokens,
    )
    response = messaging.send_each_for_multicast(message)
    logger.info(f"[FCM] Sent: success={response.success_count} failure={response.failure_count}")
