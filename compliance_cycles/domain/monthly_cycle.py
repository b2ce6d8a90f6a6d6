"""Calendar-month cycle model.

Reports and visits follow calendar months:

- a month counts only when the student is present on more than
  ``min_days_for_inclusion`` days of it (strictly greater);
- the report for month M is due on ``report_due_day`` of month M+1;
- the visit for month M is due on the last day of M, with no grace period.

Internship 2026-01-15 .. 2026-05-15 with the defaults gives five months:
January (17 days), February, March, April (full) and May (15 days).
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Optional

from compliance_cycles.domain import dates
from compliance_cycles.domain import logging as domain_log
from compliance_cycles.domain.configuration import ComplianceConfig, MonthlyCycleConfig
from compliance_cycles.domain.cycle_service import CycleModel, CycleModelKind, normalise_range
from compliance_cycles.domain.entities import MonthlyCalculationResult, MonthlyCycle


class MonthlyCycleModel(CycleModel):
    """Fixed monthly compliance schedule."""

    kind = CycleModelKind.MONTHLY

    def __init__(self, config: ComplianceConfig | None = None) -> None:
        super().__init__(config)
        self._rules: MonthlyCycleConfig = self.config.monthly

    @property
    def rules(self) -> MonthlyCycleConfig:
        return self._rules

    # ------------------------------------------------------------------
    # Per-month helpers
    # ------------------------------------------------------------------
    def month_name(self, month: int) -> str:
        return dates.month_name(month, self._rules.month_names)

    def report_due_date(self, year: int, month: int) -> datetime:
        """``report_due_day`` of the following month, end of day."""

        due_year, due_month = dates.next_month(year, month)
        return dates.end_of_day(date(due_year, due_month, self._rules.report_due_day))

    def visit_due_date(self, year: int, month: int) -> datetime:
        """Last day of the month, end of day."""

        return dates.month_bounds(year, month)[1]

    def format_report_name(self, month: int, year: Optional[int] = None) -> str:
        name = self.month_name(month)
        if year:
            return f"{name} {year} Report"
        return f"{name} Report"

    def format_month_label(self, year: int, month: int) -> str:
        return f"{self.month_name(month)} {year}"

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------
    def all_months(self, start_date: Any, end_date: Any) -> MonthlyCalculationResult:
        """Every month the internship touches, included or not.

        Raises:
            InvalidArgument: if either date is missing or unparseable, or a
                deadline would fall after the year 9999.
        """

        start, end = normalise_range(start_date, end_date)
        if end < start:
            return MonthlyCalculationResult()

        rules = self._rules
        months: list[MonthlyCycle] = []
        year, month = start.year, start.month
        for _ in range(rules.max_months):
            month_start, month_end = dates.month_bounds(year, month)
            if month_start > end:
                break
            period_start = max(start, month_start)
            period_end = min(end, month_end)
            days = dates.inclusive_days(period_start, period_end)
            months.append(
                MonthlyCycle(
                    index=len(months) + 1,
                    period_start=period_start,
                    period_end=period_end,
                    report_due_at=self.report_due_date(year, month),
                    visit_due_at=self.visit_due_date(year, month),
                    is_first=not months,
                    is_last=False,
                    days_in_period=days,
                    year=year,
                    month=month,
                    month_name=self.month_name(month),
                    is_included=days > rules.min_days_for_inclusion,
                )
            )
            year, month = dates.next_month(year, month)
        else:
            if dates.month_bounds(year, month)[0] <= end:
                domain_log.warn(
                    f"Internship {start:%Y-%m-%d}..{end:%Y-%m-%d} spans more than "
                    f"{rules.max_months} months; later months are not generated"
                )

        if months:
            months[-1] = replace(months[-1], is_last=True)

        included = [m for m in months if m.is_included]
        included = [
            replace(m, index=position, is_first=position == 1, is_last=position == len(included))
            for position, m in enumerate(included, start=1)
        ]
        excluded = tuple(m for m in months if not m.is_included)

        domain_log.debug(
            f"Monthly cycles {start:%Y-%m-%d}..{end:%Y-%m-%d}: "
            f"{len(included)} included, {len(excluded)} excluded"
        )
        return MonthlyCalculationResult(
            months=tuple(months),
            included_months=tuple(included),
            excluded_months=excluded,
        )

    def cycles(self, start_date: Any, end_date: Any) -> list[MonthlyCycle]:
        """Included months only, re-indexed from 1."""

        return list(self.all_months(start_date, end_date).included_months)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def is_month_included(self, start_date: Any, end_date: Any, year: int, month: int) -> bool:
        return any(m.year == year and m.month == month for m in self.cycles(start_date, end_date))

    def month_cycle(self, start_date: Any, end_date: Any, year: int, month: int) -> Optional[MonthlyCycle]:
        """The month descriptor for ``year``/``month`` whether included or not."""

        months = self.all_months(start_date, end_date).months
        return next((m for m in months if m.year == year and m.month == month), None)


def is_date_in_period(value: Any, start_date: Any, end_date: Any) -> bool:
    """Whether ``value`` falls on a day between ``start_date`` and ``end_date`` inclusive."""

    start, end = normalise_range(start_date, end_date)
    day = dates.start_of_day(dates.coerce_datetime(value, "date"))
    return start <= day <= end


__all__ = ["MonthlyCycleModel", "is_date_in_period"]
