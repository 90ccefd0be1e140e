import logging

import structlog

from cinesocial_auth.core.config import settings


def configure_logging() -> None:
    """Configure logging defaults for the application.

    Stdlib loggers and structlog share the level from LOG_LEVEL so
    module loggers and request-level structlog events filter alike.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
