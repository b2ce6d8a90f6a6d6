"""Compliance cycle provider abstraction shared by both cycle models."""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Optional, Sequence

from compliance_cycles.domain import dates
from compliance_cycles.domain.configuration import ComplianceConfig
from compliance_cycles.domain.entities import (
    CurrentCycleInfo,
    CycleDescriptor,
    LatenessResult,
    ReportStatusResult,
    VisitStatusResult,
    due_dates,
)
from compliance_cycles.domain.exceptions import InvalidArgument
from compliance_cycles.domain.status import classify_report, classify_visit


class CycleModelKind(str, Enum):
    FOUR_WEEK = "four_week"
    MONTHLY = "monthly"


def resolve_now(now: Any = None) -> datetime:
    """Return ``now`` as a naive datetime, reading the clock when omitted."""

    if now is None:
        return datetime.now()
    return dates.coerce_datetime(now, "now")


def normalise_range(start_date: Any, end_date: Any) -> tuple[datetime, datetime]:
    """Validate both dates and clamp them to whole days.

    Raises:
        InvalidArgument: if either date is missing or unparseable.
    """

    start = dates.start_of_day(dates.coerce_datetime(start_date, "start_date"))
    end = dates.end_of_day(dates.coerce_datetime(end_date, "end_date"))
    return start, end


class CycleModel(ABC):
    """A compliance cycle provider.

    Concrete models only know how to enumerate their cycles; every aggregate
    query is derived from that single enumeration so the two cannot drift.
    """

    kind: CycleModelKind

    def __init__(self, config: ComplianceConfig | None = None) -> None:
        self._config = config or ComplianceConfig()

    @property
    def config(self) -> ComplianceConfig:
        return self._config

    @abstractmethod
    def cycles(self, start_date: Any, end_date: Any) -> list[CycleDescriptor]:
        """Return the ordered cycles that count towards compliance."""

    # ------------------------------------------------------------------
    # Aggregate queries
    # ------------------------------------------------------------------
    def total_expected_count(self, start_date: Any, end_date: Any) -> int:
        return len(self.cycles(start_date, end_date))

    def _count_passed(self, start_date: Any, end_date: Any, now: Any, kind: str) -> int:
        start, end = normalise_range(start_date, end_date)
        current = resolve_now(now)
        if end < start or current < start:
            return 0
        return sum(1 for due in due_dates(self.cycles(start, end), kind) if current > due)

    def expected_reports_as_of(self, start_date: Any, end_date: Any, now: Any = None) -> int:
        """Reports whose due date is strictly before ``now``."""
        return self._count_passed(start_date, end_date, now, "report")

    def expected_visits_as_of(self, start_date: Any, end_date: Any, now: Any = None) -> int:
        """Visits whose due date is strictly before ``now``."""
        return self._count_passed(start_date, end_date, now, "visit")

    def current_cycle(self, start_date: Any, end_date: Any, now: Any = None) -> Optional[CycleDescriptor]:
        """The cycle containing ``now``, else the next one, else the last one."""

        return self.current_cycle_info(start_date, end_date, now).cycle

    def current_cycle_info(self, start_date: Any, end_date: Any, now: Any = None) -> CurrentCycleInfo:
        start, end = normalise_range(start_date, end_date)
        current = resolve_now(now)
        cycles = self.cycles(start, end)
        if not cycles:
            return CurrentCycleInfo()

        position = _locate(cycles, current)
        cycle = cycles[position]
        following = cycles[position + 1] if position + 1 < len(cycles) else None
        return CurrentCycleInfo(
            cycle=cycle,
            position=position,
            next_cycle=following,
            total_cycles=len(cycles),
            is_before_start=current < start,
            is_after_end=current > end,
            is_in_submission_window=self._in_submission_window(cycle, current),
            is_overdue=current > cycle.report_due_at,
            days_until_report_due=max(0, dates.days_until(current, cycle.report_due_at)),
            days_until_visit_due=max(0, dates.days_until(current, cycle.visit_due_at)),
        )

    def _in_submission_window(self, cycle: CycleDescriptor, now: datetime) -> bool:
        return cycle.period_end < now <= cycle.report_due_at

    def _next_due(self, start_date: Any, end_date: Any, now: Any, kind: str) -> Optional[datetime]:
        start, end = normalise_range(start_date, end_date)
        current = resolve_now(now)
        upcoming = [due for due in due_dates(self.cycles(start, end), kind) if due > current]
        return min(upcoming) if upcoming else None

    def next_report_due_date(self, start_date: Any, end_date: Any, now: Any = None) -> Optional[datetime]:
        return self._next_due(start_date, end_date, now, "report")

    def next_visit_due_date(self, start_date: Any, end_date: Any, now: Any = None) -> Optional[datetime]:
        return self._next_due(start_date, end_date, now, "visit")

    def cycle_by_index(self, start_date: Any, end_date: Any, index: int) -> Optional[CycleDescriptor]:
        return next((c for c in self.cycles(start_date, end_date) if c.index == index), None)

    def is_submission_late(
        self,
        cycle_index: int,
        start_date: Any,
        end_date: Any,
        submitted_at: Any = None,
        now: Any = None,
    ) -> LatenessResult:
        """Stamp a submission as late without blocking it.

        With no ``submitted_at`` the check is made against ``now``.
        """

        cycle = self.cycle_by_index(start_date, end_date, cycle_index)
        if cycle is None:
            return LatenessResult(is_late=False)
        reference = (
            dates.coerce_datetime(submitted_at, "submitted_at")
            if submitted_at is not None
            else resolve_now(now)
        )
        if reference > cycle.report_due_at:
            return LatenessResult(is_late=True, days_late=dates.whole_days_between(cycle.report_due_at, reference))
        return LatenessResult(is_late=False)

    # ------------------------------------------------------------------
    # Status classification
    # ------------------------------------------------------------------
    def report_status(self, due_at: datetime, record: Any = None, now: Any = None) -> ReportStatusResult:
        return classify_report(due_at, record, now)

    def visit_status(self, due_at: datetime, record: Any = None, now: Any = None) -> VisitStatusResult:
        return classify_visit(due_at, record, now, due_soon_days=self._config.due_soon_days)


def _locate(cycles: Sequence[CycleDescriptor], now: datetime) -> int:
    for position, cycle in enumerate(cycles):
        if cycle.contains(now) or now < cycle.period_start:
            return position
    return len(cycles) - 1


def build_cycle_model(kind: CycleModelKind | str, config: ComplianceConfig | None = None) -> CycleModel:
    """Instantiate the cycle model registered under ``kind``."""

    from compliance_cycles.domain.four_week_cycle import FourWeekCycleModel
    from compliance_cycles.domain.monthly_cycle import MonthlyCycleModel

    try:
        resolved = CycleModelKind(kind)
    except ValueError as exc:
        known = ", ".join(k.value for k in CycleModelKind)
        raise InvalidArgument(f"Unknown cycle model {kind!r}; expected one of: {known}") from exc

    registry: dict[CycleModelKind, type[CycleModel]] = {
        CycleModelKind.FOUR_WEEK: FourWeekCycleModel,
        CycleModelKind.MONTHLY: MonthlyCycleModel,
    }
    return registry[resolved](config)


def available_models() -> Iterable[str]:
    return [kind.value for kind in CycleModelKind]


__all__ = [
    "CycleModel",
    "CycleModelKind",
    "build_cycle_model",
    "available_models",
    "normalise_range",
    "resolve_now",
]
