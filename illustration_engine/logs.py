"""structlog setup shared by the library and the Flask adapter.

Engine loggers wrap standard-library loggers under ``illustration_engine``,
which carries a ``NullHandler``. Used as a plain library the engine writes
nothing until the host configures logging.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import structlog

from illustration_engine.config import settings

ROOT_LOGGER_NAME = "illustration_engine"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> Any:
    """structlog logger backed by ``logging.getLogger("illustration_engine.<name>")``."""
    return structlog.wrap_logger(logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}"))


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """Configure structlog processors and the minimum level.

    Falls back to ``settings.LOG_LEVEL`` / ``settings.LOG_JSON`` when the
    arguments are omitted. Rendered lines go to the standard-library handlers.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    use_json = settings.LOG_JSON if json_output is None else json_output

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    logging.basicConfig(format="%(message)s", level=numeric_level)
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(numeric_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )
