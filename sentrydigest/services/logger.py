import sys
from loguru import logger
from sentrydigest.config import Settings, settings as default_settings

def setup_logging(settings: Settings = default_settings):
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )
    # Add file logging
    if settings.LOG_FILE_ENABLED:
        log_file = settings.DATA_DIR / "sentrydigest.log"
        logger.add(log_file, rotation="10 MB", level="DEBUG")

__all__ = ["logger", "setup_logging"]
