from physio_app.config import get_settings
from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie

from physio_app.utils.logger import get_logger

settings = get_settings()
logger = get_logger("database")

_mongo_client: AsyncIOMotorClient | None = None

DEFAULT_DB_NAME = "physio_db"


def database_name(uri: str) -> str:
    """Database name from the URI path, without query params.

    mongodb://host:27017, mongodb://host:27017/ and mongodb://host/?opts all
    fall back to DEFAULT_DB_NAME.
    """
    _, _, rest = uri.partition("://")
    _, slash, path = rest.partition("/")
    if not slash:
        return DEFAULT_DB_NAME
    db_name = path.split("?", 1)[0]
    return db_name or DEFAULT_DB_NAME


async def init_db() -> None:
    """Initialize MongoDB (Beanie) and register document models."""
    global _mongo_client
    _mongo_client = AsyncIOMotorClient(settings.MONGODB_URI)
    db_name = database_name(settings.MONGODB_URI)
    from physio_app.models import DOCUMENT_MODELS

    await init_beanie(
        database=_mongo_client[db_name],
        document_models=DOCUMENT_MODELS,
    )
    logger.info(f"Beanie initialized on database '{db_name}'")


def close_db() -> None:
    global _mongo_client
    if _mongo_client:
        _mongo_client.close()
        _mongo_client = None


async def ping_db() -> bool:
    """Check MongoDB connectivity."""
    if not _mongo_client:
        return False
    try:
        await _mongo_client.admin.command("ping")
        return True
    except Exception as e:
        logger.warning(f"MongoDB ping failed: {e}")
        return False
