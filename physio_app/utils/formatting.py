from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from physio_app.config import get_settings
from physio_app.constants import NEVER_LOGGED_IN

settings = get_settings()


def to_utc(dt: datetime) -> datetime:
    """Normalize a datetime to UTC, adding tzinfo if needed.

    Mongo hands back naive datetimes that are already UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_summary_date(dt: datetime | None, tz_name: str | None = None) -> str:
    """D/M/YYYY H:MM, minutes zero padded. Empty string for no date."""
    if not dt:
        return ""
    local = to_utc(dt).astimezone(ZoneInfo(tz_name or settings.DISPLAY_TIMEZONE))
    return f"{local.day}/{local.month}/{local.year} {local.hour}:{local.minute:02d}"


def format_last_login(dt: datetime | None, tz_name: str | None = None) -> str:
    if not dt:
        return NEVER_LOGGED_IN
    return format_summary_date(dt, tz_name)
