import sys

from loguru import logger

from codescore.core.config import settings


def configure_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with one honouring LOG_LEVEL."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or settings.LOG_LEVEL).upper(),
        backtrace=settings.APP_ENV == "development",
        diagnose=False,
    )
