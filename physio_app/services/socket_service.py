"""
Socket.IO service for live document subscriptions.

Clients subscribe to a patient (record, routine, conversation summaries) or to
their practitioner's exercise library and receive the full new state on every
change. The latest notification always wins; nothing is queued or replayed.
"""
import socketio
from typing import Dict, Set
from beanie import PydanticObjectId as OID

from physio_app.constants import Role
from physio_app.models import Patient, User
from physio_app.security import decode_token, user_from_payload
from physio_app.utils.logger import get_logger

logger = get_logger("socket")

sio = socketio.AsyncServer(
    cors_allowed_origins="*",
    async_mode="asgi",
)

# socketId -> user data
socket_users: Dict[str, dict] = {}

# socketId -> rooms it subscribed to (besides its own sid room)
socket_subscriptions: Dict[str, Set[str]] = {}


def patient_room(patient_id: str) -> str:
    return f"patient_{patient_id}"


def exercises_room(practitioner_id: str) -> str:
    return f"exercises_{practitioner_id}"


def get_socket_app(other_asgi_app=None):
    """Socket.IO ASGI app, forwarding every other request to `other_asgi_app`."""
    return socketio.ASGIApp(sio, other_asgi_app=other_asgi_app, socketio_path="socket.io")


def _extract_token(environ: dict | None, auth: dict | None) -> str | None:
    token = (auth or {}).get("token")
    if not token and environ:
        auth_header = environ.get("HTTP_AUTHORIZATION", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[len("Bearer "):]
    return token


async def can_subscribe_patient(user: User, patient: Patient) -> bool:
    """Practitioners see their own patients, patients only themselves."""
    if user.role == Role.ADMIN:
        return True
    if user.role == Role.PRACTITIONER:
        return patient.practitioner_id == user.id
    if user.role == Role.PATIENT:
        return patient.user_id == user.id
    return False


@sio.on("connect")
async def connect(sid: str, environ: dict, auth: dict | None = None):
    """Authenticate the socket with a JWT access token."""
    token = _extract_token(environ, auth)
    if not token:
        logger.info(f"Connection rejected for {sid}: no token")
        return False
    try:
        payload = decode_token(token, token_type="access")
    except Exception:
        logger.info(f"Connection rejected for {sid}: invalid token")
        return False
    user = await user_from_payload(payload)
    if not user:
        logger.info(f"Connection rejected for {sid}: user not found")
        return False

    socket_users[sid] = {"user_id": str(user.id), "user": user}
    socket_subscriptions[sid] = set()
    logger.debug(f"User connected: {user.id} - socket {sid}")
    return True


@sio.on("disconnect")
async def disconnect(sid: str):
    """Drop every subscription held by the socket."""
    user_data = socket_users.pop(sid, None)
    for room in socket_subscriptions.pop(sid, set()):
        await sio.leave_room(sid, room)
    if user_data:
        logger.debug(f"User disconnected: {user_data['user_id']} - socket {sid}")


async def _load_patient(patient_id: str) -> Patient | None:
    try:
        return await Patient.get(OID(patient_id))
    except Exception:
        return None


async def _emit_error(sid: str, message: str, code: str) -> None:
    await sio.emit("error", {"message": message, "code": code}, room=sid)


@sio.on("subscribe_patient")
async def subscribe_patient(sid: str, data: dict):
    user_data = socket_users.get(sid)
    if not user_data:
        await _emit_error(sid, "Not authenticated", "E401")
        return
    patient_id = (data or {}).get("patient_id")
    if not patient_id:
        await _emit_error(sid, "patient_id is required", "E400")
        return
    patient = await _load_patient(patient_id)
    if not patient:
        logger.warning(f"Patient not found: {patient_id}")
        await _emit_error(sid, "Patient not found", "E404")
        return
    if not await can_subscribe_patient(user_data["user"], patient):
        await _emit_error(sid, "Not your patient", "E403")
        return

    room = patient_room(str(patient.id))
    await sio.enter_room(sid, room)
    socket_subscriptions.setdefault(sid, set()).add(room)

    await send_patient_snapshot(sid, patient)


async def send_patient_snapshot(sid: str, patient: Patient) -> None:
    """Current record, routine and summaries, shaped like later change events."""
    from physio_app.services import patient_service, routine_service

    await sio.emit("patient_updated", patient_service.patient_payload(patient), room=sid)

    editor = routine_service.peek_editor(patient.practitioner_id, patient.id)
    await sio.emit(
        "routine_updated",
        {
            "patient_id": str(patient.id),
            "exerciseRoutine": list(patient.exerciseRoutine or []),
            "editing": bool(editor and editor.editing),
        },
        room=sid,
    )

    conversations = await patient_service.list_conversations(patient)
    await sio.emit(
        "conversations_updated",
        {"patient_id": str(patient.id), "conversations": [c.model_dump(mode="json") for c in conversations]},
        room=sid,
    )


@sio.on("unsubscribe_patient")
async def unsubscribe_patient(sid: str, data: dict):
    patient_id = (data or {}).get("patient_id")
    if not patient_id:
        return
    room = patient_room(patient_id)
    await sio.leave_room(sid, room)
    socket_subscriptions.get(sid, set()).discard(room)


@sio.on("subscribe_exercises")
async def subscribe_exercises(sid: str, data: dict | None = None):
    """Subscribe to the exercise library of the socket's practitioner."""
    user_data = socket_users.get(sid)
    if not user_data:
        await _emit_error(sid, "Not authenticated", "E401")
        return
    user: User = user_data["user"]
    if user.role == Role.PRACTITIONER:
        practitioner_id = str(user.id)
    else:
        patient = await Patient.find_one(Patient.user_id == user.id)
        if not patient:
            await _emit_error(sid, "Patient not found", "E404")
            return
        practitioner_id = str(patient.practitioner_id)

    room = exercises_room(practitioner_id)
    await sio.enter_room(sid, room)
    socket_subscriptions.setdefault(sid, set()).add(room)

    from physio_app.services import exercise_service

    exercises = await exercise_service.list_exercises(practitioner_id)
    await sio.emit(
        "exercises_updated",
        {"exercises": [e.model_dump(mode="json") for e in exercises]},
        room=sid,
    )


# ------------------------ Publishing ------------------------


async def publish_patient(patient_id: str, payload: dict) -> None:
    await sio.emit("patient_updated", payload, room=patient_room(patient_id))


async def publish_routine(patient_id: str, routine: list[str], editing: bool = False) -> None:
    await sio.emit(
        "routine_updated",
        {"patient_id": patient_id, "exerciseRoutine": routine, "editing": editing},
        room=patient_room(patient_id),
    )


async def publish_conversations(patient_id: str, conversations: list[dict]) -> None:
    await sio.emit(
        "conversations_updated",
        {"patient_id": patient_id, "conversations": conversations},
        room=patient_room(patient_id),
    )


async def publish_exercises(practitioner_id: str, exercises: list[dict]) -> None:
    await sio.emit("exercises_updated", {"exercises": exercises}, room=exercises_room(practitioner_id))
