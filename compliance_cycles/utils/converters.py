"""Type conversion helpers used across the compliance engine."""

from __future__ import annotations

from datetime import date, datetime, time
from enum import Enum
from typing import Any, Optional


def to_datetime(value: Any) -> Optional[datetime]:
    """Best-effort conversion of common date representations to a naive ``datetime``.

    Aware values keep their wall clock and lose ``tzinfo``. Anything that
    cannot be read returns ``None``.
    """

    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        if stripped.endswith("Z"):
            stripped = stripped[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(stripped).replace(tzinfo=None)
        except ValueError:
            return None
    return None


def to_status_code(value: Any) -> Optional[str]:
    """Normalise a status value (string or enum) to an upper-case code."""

    if value is None:
        return None
    if isinstance(value, Enum):
        value = value.value
    text = str(value).strip()
    return text.upper() or None
