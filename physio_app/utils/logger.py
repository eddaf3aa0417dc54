import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from physio_app.config import get_settings

settings = get_settings()

LOG_LEVEL = logging.DEBUG if settings.APP_DEBUG else logging.INFO
MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUPS = 5

console_format = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
file_format = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)


def _rotating_handler(path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS)
    handler.setLevel(level)
    handler.setFormatter(file_format)
    return handler


logs_dir = Path(settings.LOG_DIR)
logs_dir.mkdir(parents=True, exist_ok=True)

logger = logging.getLogger("physio_api")
logger.setLevel(LOG_LEVEL)

# Prevent duplicate logs on reload
if logger.handlers:
    logger.handlers.clear()

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(LOG_LEVEL)
console_handler.setFormatter(console_format)
logger.addHandler(console_handler)

logger.addHandler(_rotating_handler(logs_dir / "app.log", logging.INFO))
logger.addHandler(_rotating_handler(logs_dir / "errors.log", logging.ERROR))


def get_logger(name: str = None) -> logging.Logger:
    """Get a logger instance. If name is provided, returns a child logger."""
    if name:
        return logger.getChild(name)
    return logger
