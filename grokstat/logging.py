"""Central logging helpers"""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Union

import structlog
import structlog.stdlib

from grokstat.config import settings

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _build_file_handler(component: str) -> RotatingFileHandler:
    log_dir: Path = settings.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"{component}.log"
    handler = RotatingFileHandler(log_path, maxBytes=5 * 1024 * 1024, backupCount=5)
    handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
    return handler


def resolve_level(level: Union[int, str, None]) -> int:
    """Accept a numeric level or a level name such as ``"debug"``."""
    if level is None:
        level = settings.log_level
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else logging.WARNING


def setup_logging(component: str = "grokstat", level: Union[int, str, None] = None) -> None:
    """Configure structlog + stdlib logging for a component.

    Records go to stderr (and optionally a rotating file) so stdout stays
    reserved for JSON output.
    """
    resolved = resolve_level(level)
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if settings.log_to_file:
        handlers.append(_build_file_handler(component))

    logging.basicConfig(level=resolved, handlers=handlers, format=_DEFAULT_FORMAT, force=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.getLogger(__name__).debug("logging_initialized", extra={"component": component})
