"""Value objects produced by the cycle engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence


class ReportStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    DRAFT = "DRAFT"
    APPROVED = "APPROVED"
    OVERDUE = "OVERDUE"


class VisitStatus(str, Enum):
    UPCOMING = "UPCOMING"
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"


class CycleWindowState(str, Enum):
    """Where a four-week cycle sits relative to its submission window."""

    NOT_YET_DUE = "NOT_YET_DUE"
    CAN_SUBMIT = "CAN_SUBMIT"
    OVERDUE = "OVERDUE"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class CycleDescriptor:
    """One reporting period within an internship.

    ``period_start``/``period_end`` are clamped to the internship range and
    ``days_in_period`` counts the overlap inclusively.
    """

    index: int
    period_start: datetime
    period_end: datetime
    report_due_at: datetime
    visit_due_at: datetime
    is_first: bool
    is_last: bool
    days_in_period: int

    def contains(self, instant: datetime) -> bool:
        return self.period_start <= instant <= self.period_end


@dataclass(frozen=True)
class FourWeekCycle(CycleDescriptor):
    """A 28-day window anchored to the internship start date."""

    due_at: datetime
    submission_window_start: datetime
    submission_window_end: datetime


@dataclass(frozen=True)
class MonthlyCycle(CycleDescriptor):
    """A calendar month of an internship."""

    year: int
    month: int
    month_name: str
    is_included: bool


@dataclass(frozen=True)
class MonthlyCalculationResult:
    months: tuple[MonthlyCycle, ...] = ()
    included_months: tuple[MonthlyCycle, ...] = ()
    excluded_months: tuple[MonthlyCycle, ...] = ()

    @property
    def total_expected_months(self) -> int:
        return len(self.included_months)


@dataclass(frozen=True)
class CycleCalculationResult:
    """Four-week cycle overview against a set of completed cycle numbers."""

    cycles: tuple[FourWeekCycle, ...]
    current_cycle_index: Optional[int]
    next_due_date: Optional[datetime]
    overdue_count: int

    @property
    def total_expected_cycles(self) -> int:
        return len(self.cycles)


@dataclass(frozen=True)
class CurrentCycleInfo:
    cycle: Optional[CycleDescriptor] = None
    position: Optional[int] = None
    next_cycle: Optional[CycleDescriptor] = None
    total_cycles: int = 0
    is_before_start: bool = False
    is_after_end: bool = False
    is_in_submission_window: bool = False
    is_overdue: bool = False
    days_until_report_due: Optional[int] = None
    days_until_visit_due: Optional[int] = None


@dataclass(frozen=True)
class StatusResult:
    label: str
    color: str
    is_overdue: bool
    days_overdue: int


@dataclass(frozen=True)
class ReportStatusResult(StatusResult):
    status: ReportStatus
    can_submit: bool


@dataclass(frozen=True)
class VisitStatusResult(StatusResult):
    status: VisitStatus
    can_complete: bool
    days_until_due: Optional[int] = None


@dataclass(frozen=True)
class CycleWindowStatus:
    status: CycleWindowState
    label: str
    color: str
    can_submit: bool
    sublabel: Optional[str] = None


@dataclass(frozen=True)
class LatenessResult:
    is_late: bool
    days_late: int = 0


def due_dates(cycles: Sequence[CycleDescriptor], kind: str = "report") -> list[datetime]:
    attr = "report_due_at" if kind == "report" else "visit_due_at"
    return [getattr(cycle, attr) for cycle in cycles]


__all__ = [
    "ReportStatus",
    "VisitStatus",
    "CycleWindowState",
    "CycleDescriptor",
    "FourWeekCycle",
    "MonthlyCycle",
    "MonthlyCalculationResult",
    "CycleCalculationResult",
    "CurrentCycleInfo",
    "StatusResult",
    "ReportStatusResult",
    "VisitStatusResult",
    "CycleWindowStatus",
    "LatenessResult",
    "due_dates",
]
