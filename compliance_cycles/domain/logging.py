"""Lightweight logging helpers for domain code without infrastructure coupling."""
from __future__ import annotations

import logging
from typing import Final

DOMAIN_LOGGER_NAME: Final[str] = "compliance_cycles.domain"

_LEVEL_MAP: Final[dict[str, int]] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return _LEVEL_MAP.get(str(level).upper(), logging.INFO)


def log_message(message: str, level: str | int = "INFO") -> None:
    """Log ``message`` using the standard library domain logger."""

    logging.getLogger(DOMAIN_LOGGER_NAME).log(_resolve_level(level), message)


def debug(message: str) -> None:
    log_message(message, "DEBUG")


def warn(message: str) -> None:
    log_message(message, "WARNING")
