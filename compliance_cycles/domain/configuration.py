"""Domain configuration structs decoupled from infrastructure settings."""
from __future__ import annotations

from dataclasses import dataclass, field

from compliance_cycles.domain.exceptions import InvalidArgument

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def _require_positive(name: str, value: int) -> None:
    if value < 1:
        raise InvalidArgument(f"{name} must be at least 1, got {value}")


@dataclass(frozen=True)
class FourWeekCycleConfig:
    """Rules for the fixed-duration (four-week) cycle model."""

    cycle_duration_days: int = 28
    submission_grace_days: int = 5
    visit_grace_days: int = 5
    max_cycles: int = 26

    def __post_init__(self) -> None:
        _require_positive("cycle_duration_days", self.cycle_duration_days)
        _require_positive("submission_grace_days", self.submission_grace_days)
        _require_positive("max_cycles", self.max_cycles)
        if self.visit_grace_days < 0:
            raise InvalidArgument(f"visit_grace_days must not be negative, got {self.visit_grace_days}")


@dataclass(frozen=True)
class MonthlyCycleConfig:
    """Rules for the calendar-month cycle model."""

    min_days_for_inclusion: int = 10
    report_due_day: int = 5
    max_months: int = 24
    month_names: tuple[str, ...] = MONTH_NAMES

    def __post_init__(self) -> None:
        _require_positive("min_days_for_inclusion", self.min_days_for_inclusion)
        _require_positive("max_months", self.max_months)
        if not 1 <= self.report_due_day <= 28:
            raise InvalidArgument(f"report_due_day must be between 1 and 28, got {self.report_due_day}")
        if len(self.month_names) != 12:
            raise InvalidArgument("month_names must contain exactly 12 labels")


@dataclass(frozen=True)
class ComplianceConfig:
    """Everything the engine reads, injected once at construction."""

    four_week: FourWeekCycleConfig = field(default_factory=FourWeekCycleConfig)
    monthly: MonthlyCycleConfig = field(default_factory=MonthlyCycleConfig)
    due_soon_days: int = 7


__all__ = [
    "MONTH_NAMES",
    "FourWeekCycleConfig",
    "MonthlyCycleConfig",
    "ComplianceConfig",
]
