"""Report and visit status classification.

Classifiers take a due date, an optional caller-owned record and the current
instant. They never raise on malformed records: unknown statuses or
unreadable timestamps fall back to classification by due date alone.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from compliance_cycles.domain import dates
from compliance_cycles.domain.entities import (
    ReportStatus,
    ReportStatusResult,
    VisitStatus,
    VisitStatusResult,
)
from compliance_cycles.utils import converters

DEFAULT_DUE_SOON_DAYS = 7

REPORT_IN_PROGRESS_CODES = frozenset({"DRAFT", "PENDING", "SUBMITTED"})
VISIT_IN_PROGRESS_CODES = frozenset({"SCHEDULED", "PENDING"})

_CAMEL_KEYS = {
    "submitted_at": "submittedAt",
    "completed_at": "completedAt",
}


def record_value(record: Any, key: str) -> Any:
    """Read ``key`` from a mapping or attribute object, accepting camelCase keys."""

    if record is None:
        return None
    alias = _CAMEL_KEYS.get(key)
    if isinstance(record, Mapping):
        if key in record:
            return record[key]
        return record.get(alias) if alias else None
    value = getattr(record, key, None)
    if value is None and alias:
        value = getattr(record, alias, None)
    return value


def _record_timestamp(record: Any, key: str) -> Optional[datetime]:
    return converters.to_datetime(record_value(record, key))


def _overdue_report(days_overdue: int, label: str = "Overdue") -> ReportStatusResult:
    return ReportStatusResult(
        status=ReportStatus.OVERDUE,
        label=label,
        color="red",
        is_overdue=True,
        days_overdue=days_overdue,
        can_submit=True,
    )


def _not_started_report() -> ReportStatusResult:
    return ReportStatusResult(
        status=ReportStatus.NOT_STARTED,
        label="Not Started",
        color="gray",
        is_overdue=False,
        days_overdue=0,
        can_submit=True,
    )


def classify_report(
    due_at: datetime,
    record: Any = None,
    now: Optional[datetime] = None,
) -> ReportStatusResult:
    """Classify a monthly or cycle report against its due date."""

    now = converters.to_datetime(now) or datetime.now()
    due = converters.to_datetime(due_at)
    if due is None:
        # Without a due date nothing can be overdue.
        due = datetime.max
    days_overdue = dates.whole_days_between(due, now)
    past_due = now > due

    if not record:
        return _overdue_report(days_overdue) if past_due else _not_started_report()

    code = converters.to_status_code(record_value(record, "status"))
    submitted_at = _record_timestamp(record, "submitted_at")

    if code == ReportStatus.APPROVED.value:
        if submitted_at is not None and submitted_at > due:
            return ReportStatusResult(
                status=ReportStatus.APPROVED,
                label="Approved (Late)",
                color="orange",
                is_overdue=True,
                days_overdue=dates.whole_days_between(due, submitted_at),
                can_submit=False,
            )
        return ReportStatusResult(
            status=ReportStatus.APPROVED,
            label="Approved",
            color="green",
            is_overdue=False,
            days_overdue=0,
            can_submit=False,
        )

    if code in REPORT_IN_PROGRESS_CODES:
        if past_due and submitted_at is None:
            return _overdue_report(days_overdue, label="Overdue (Draft)")
        if submitted_at is not None and submitted_at > due:
            return ReportStatusResult(
                status=ReportStatus.DRAFT,
                label="Submitted Late",
                color="orange",
                is_overdue=True,
                days_overdue=dates.whole_days_between(due, submitted_at),
                can_submit=False,
            )
        return ReportStatusResult(
            status=ReportStatus.DRAFT,
            label="Draft",
            color="blue",
            is_overdue=False,
            days_overdue=0,
            can_submit=True,
        )

    return _overdue_report(days_overdue) if past_due else _not_started_report()


def _overdue_visit(days_overdue: int, label: str = "Overdue") -> VisitStatusResult:
    return VisitStatusResult(
        status=VisitStatus.OVERDUE,
        label=label,
        color="red",
        is_overdue=True,
        days_overdue=days_overdue,
        can_complete=True,
    )


def _upcoming_visit(due: datetime, now: datetime, due_soon_days: int) -> VisitStatusResult:
    remaining = dates.days_until(now, due) if due != datetime.max else None
    due_soon = remaining is not None and remaining <= due_soon_days
    return VisitStatusResult(
        status=VisitStatus.UPCOMING,
        label="Due Soon" if due_soon else "Upcoming",
        color="orange" if due_soon else "gray",
        is_overdue=False,
        days_overdue=0,
        can_complete=True,
        days_until_due=remaining,
    )


def classify_visit(
    due_at: datetime,
    record: Any = None,
    now: Optional[datetime] = None,
    *,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
) -> VisitStatusResult:
    """Classify a mentor visit against its due date."""

    now = converters.to_datetime(now) or datetime.now()
    due = converters.to_datetime(due_at)
    if due is None:
        due = datetime.max
    days_overdue = dates.whole_days_between(due, now)
    past_due = now > due

    if not record:
        return _overdue_visit(days_overdue) if past_due else _upcoming_visit(due, now, due_soon_days)

    code = converters.to_status_code(record_value(record, "status"))
    completed_at = _record_timestamp(record, "completed_at")

    if code == VisitStatus.COMPLETED.value:
        if completed_at is not None and completed_at > due:
            return VisitStatusResult(
                status=VisitStatus.COMPLETED,
                label="Completed Late",
                color="orange",
                is_overdue=True,
                days_overdue=dates.whole_days_between(due, completed_at),
                can_complete=False,
            )
        return VisitStatusResult(
            status=VisitStatus.COMPLETED,
            label="Completed",
            color="green",
            is_overdue=False,
            days_overdue=0,
            can_complete=False,
        )

    if code in VISIT_IN_PROGRESS_CODES:
        if past_due and completed_at is None:
            return _overdue_visit(days_overdue, label="Overdue (Scheduled)")
        return VisitStatusResult(
            status=VisitStatus.PENDING,
            label="Scheduled",
            color="blue",
            is_overdue=False,
            days_overdue=0,
            can_complete=True,
            days_until_due=dates.days_until(now, due) if not past_due and due != datetime.max else None,
        )

    return _overdue_visit(days_overdue) if past_due else _upcoming_visit(due, now, due_soon_days)


__all__ = [
    "DEFAULT_DUE_SOON_DAYS",
    "classify_report",
    "classify_visit",
    "record_value",
]
