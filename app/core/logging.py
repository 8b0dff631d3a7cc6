"""Logging configuration for the course assistant."""

import logging
import sys

from app.core.config import settings

LOGGER_NAME = "course_assistant"


def setup_logging() -> logging.Logger:
    """Configure and return the application logger."""
    level = logging.DEBUG if settings.DEBUG else logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Prevent duplicate handlers on reload
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if settings.DEBUG:
        formatter = logging.Formatter(
            "\n%(levelname)s [%(asctime)s] %(name)s\n"
            "└── %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = logging.Formatter("%(levelname)s: [%(name)s] %(message)s")

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # httpx logs every outgoing request at INFO
    if not settings.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)

    return logger


def get_logger(component: str) -> logging.Logger:
    """Child logger for a pipeline component, e.g. ``course_assistant.scoring``."""
    return logging.getLogger(f"{LOGGER_NAME}.{component}")


# Application logger instance
logger = setup_logging()
