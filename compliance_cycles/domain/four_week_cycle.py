"""Fixed-duration (four-week) cycle model.

Cycles are 28-day windows anchored to each internship's own start date, so
every student has a different set of deadlines:

    Internship start: 2025-12-15
    Cycle 1: Dec 15 - Jan 11 -> due Jan 16 (5 day submission window)
    Cycle 2: Jan 12 - Feb 08 -> due Feb 13
    Cycle 3: Feb 09 - Mar 08 -> due Mar 13

Visits follow the same windows and are due ``visit_grace_days`` after the
window closes. A one-day internship gets an extra day on both deadlines, so
the report and the visit fall due on day 1 + grace.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Collection, Optional

from compliance_cycles.domain import dates
from compliance_cycles.domain import logging as domain_log
from compliance_cycles.domain.configuration import ComplianceConfig, FourWeekCycleConfig
from compliance_cycles.domain.cycle_service import CycleModel, CycleModelKind, normalise_range, resolve_now
from compliance_cycles.domain.entities import (
    CycleCalculationResult,
    CycleWindowState,
    CycleWindowStatus,
    FourWeekCycle,
)


def _plural(count: int, word: str = "day") -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


class FourWeekCycleModel(CycleModel):
    """Legacy four-week compliance schedule."""

    kind = CycleModelKind.FOUR_WEEK

    def __init__(self, config: ComplianceConfig | None = None) -> None:
        super().__init__(config)
        self._rules: FourWeekCycleConfig = self.config.four_week

    @property
    def rules(self) -> FourWeekCycleConfig:
        return self._rules

    def _build_cycle(
        self,
        index: int,
        period_start: datetime,
        period_end: datetime,
        *,
        due_at: datetime,
        is_last: bool,
        visit_offset: int = 0,
    ) -> FourWeekCycle:
        window_start = dates.start_of_day(dates.add_days(period_end, 1))
        visit_days = visit_offset + self._rules.visit_grace_days
        return FourWeekCycle(
            index=index,
            period_start=period_start,
            period_end=period_end,
            report_due_at=due_at,
            visit_due_at=dates.end_of_day(dates.add_days(period_end, visit_days)),
            is_first=index == 1,
            is_last=is_last,
            days_in_period=dates.inclusive_days(period_start, period_end),
            due_at=due_at,
            submission_window_start=window_start,
            submission_window_end=due_at,
        )

    def cycles(self, start_date: Any, end_date: Any) -> list[FourWeekCycle]:
        """Enumerate the 28-day windows covering the internship.

        Raises:
            InvalidArgument: if either date is missing or unparseable, or a
                deadline would fall after the year 9999.
        """

        start, end = normalise_range(start_date, end_date)
        if end < start:
            return []

        rules = self._rules
        if start.date() == end.date():
            due_at = dates.end_of_day(dates.add_days(end, 1 + rules.submission_grace_days))
            return [self._build_cycle(1, start, end, due_at=due_at, is_last=True, visit_offset=1)]

        total_days = dates.inclusive_days(start, end)
        if total_days > rules.max_cycles * rules.cycle_duration_days:
            domain_log.warn(
                f"Internship duration ({total_days} days) exceeds the {rules.max_cycles} cycle limit; "
                f"cycles after {rules.max_cycles * rules.cycle_duration_days} days are not generated"
            )

        result: list[FourWeekCycle] = []
        window_start = start
        index = 1
        while window_start <= end and index <= rules.max_cycles:
            natural_end = dates.end_of_day(dates.add_days(window_start, rules.cycle_duration_days - 1))
            period_end = min(natural_end, end)
            is_final = natural_end >= end
            submission_start = dates.add_days(dates.start_of_day(period_end), 1)
            due_at = dates.end_of_day(dates.add_days(submission_start, rules.submission_grace_days - 1))
            result.append(self._build_cycle(index, window_start, period_end, due_at=due_at, is_last=is_final))
            if is_final:
                break
            window_start = submission_start
            index += 1

        if result and not result[-1].is_last:
            last = result[-1]
            result[-1] = self._build_cycle(last.index, last.period_start, last.period_end, due_at=last.due_at, is_last=True)
        return result

    def total_expected_count(self, start_date: Any, end_date: Any) -> int:
        """Closed-form count; agrees with ``len(cycles(...))`` for every range."""

        start, end = normalise_range(start_date, end_date)
        if end < start:
            return 0
        total_days = dates.inclusive_days(start, end)
        return min(math.ceil(total_days / self._rules.cycle_duration_days), self._rules.max_cycles)

    def cycle_number_for_date(self, start_date: Any, target_date: Any) -> int:
        """Which cycle ``target_date`` falls into, counting from 1; 0 before the start."""

        start = dates.start_of_day(dates.coerce_datetime(start_date, "start_date"))
        target = dates.start_of_day(dates.coerce_datetime(target_date, "target_date"))
        if target < start:
            return 0
        return (target - start).days // self._rules.cycle_duration_days + 1

    def internship_cycle_status(
        self,
        start_date: Any,
        end_date: Any,
        completed_cycles: Collection[int] = (),
        now: Any = None,
    ) -> CycleCalculationResult:
        """Overview of an internship given the cycle numbers already completed."""

        current = resolve_now(now)
        cycles = self.cycles(start_date, end_date)
        completed = set(completed_cycles)

        current_index: Optional[int] = None
        next_due: Optional[datetime] = None
        overdue = 0
        for position, cycle in enumerate(cycles):
            done = cycle.index in completed
            if not done and current > cycle.due_at:
                overdue += 1
            if current_index is None and not done and current <= cycle.submission_window_end:
                current_index = position
                next_due = cycle.due_at

        if current_index is None:
            for position, cycle in enumerate(cycles):
                if cycle.index not in completed:
                    current_index = position
                    next_due = cycle.due_at
                    break

        return CycleCalculationResult(
            cycles=tuple(cycles),
            current_cycle_index=current_index,
            next_due_date=next_due,
            overdue_count=overdue,
        )

    def cycle_window_status(
        self,
        cycle: FourWeekCycle,
        is_completed: bool = False,
        now: Any = None,
    ) -> CycleWindowStatus:
        """Where ``cycle`` stands: still running, open for submission, or late."""

        current = resolve_now(now)
        if is_completed:
            return CycleWindowStatus(
                status=CycleWindowState.COMPLETED,
                label="Completed",
                color="green",
                can_submit=False,
            )

        if current < cycle.period_end:
            remaining = dates.days_until(current, cycle.period_end)
            return CycleWindowStatus(
                status=CycleWindowState.NOT_YET_DUE,
                label="In Progress",
                color="blue",
                can_submit=False,
                sublabel=f"{_plural(remaining)} until cycle ends",
            )

        if current > cycle.due_at:
            late = dates.whole_days_between(cycle.due_at, current)
            return CycleWindowStatus(
                status=CycleWindowState.OVERDUE,
                label="Overdue",
                color="red",
                can_submit=True,
                sublabel=f"{_plural(late)} late",
            )

        if current >= cycle.submission_window_start:
            remaining = dates.days_until(current, cycle.due_at)
            return CycleWindowStatus(
                status=CycleWindowState.CAN_SUBMIT,
                label="Due Soon",
                color="orange",
                can_submit=True,
                sublabel=f"{_plural(remaining)} to submit",
            )

        return CycleWindowStatus(
            status=CycleWindowState.CAN_SUBMIT,
            label="Ready to Submit",
            color="green",
            can_submit=True,
            sublabel=f"Due by {cycle.due_at:%Y-%m-%d}",
        )


def format_cycle_label(cycle: FourWeekCycle) -> str:
    """``Cycle 1: Dec 15 - Jan 11, 2026``"""

    start, end = cycle.period_start, cycle.period_end
    return f"Cycle {cycle.index}: {start:%b} {start.day} - {end:%b} {end.day}, {end.year}"


__all__ = ["FourWeekCycleModel", "format_cycle_label"]
