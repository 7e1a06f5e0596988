"""
Centralized structlog configuration.

Entry points call ``configure_logging()`` once at startup. Library modules only
call ``structlog.get_logger()`` and never configure processors themselves.
"""

import logging
from typing import Optional, Union

import structlog

from ..config import get_settings

_CONFIGURED = False


def _parse_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    level = level.strip().upper()
    if level.isdigit():
        return int(level)
    numeric = getattr(logging, level, None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO


def configure_logging(
    level: Optional[Union[int, str]] = None,
    json: Optional[bool] = None,
    force: bool = False,
) -> None:
    """
    Configure structlog exactly once.

    Args:
        level: Minimum level; defaults to ``app_log_level`` from settings
        json: Render JSON lines instead of console output; defaults to
            ``app_log_json``
        force: Reconfigure even if already configured
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    settings = get_settings()
    min_level = _parse_level(level if level is not None else settings.app_log_level)
    use_json = settings.app_log_json if json is None else json

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if use_json:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True
