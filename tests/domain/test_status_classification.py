from datetime import datetime
from types import SimpleNamespace

import pytest

from compliance_cycles.domain.entities import ReportStatus, VisitStatus
from compliance_cycles.domain.status import classify_report, classify_visit, record_value

DUE = datetime(2026, 2, 5, 23, 59, 59, 999999)


def test_missing_report_past_due_is_overdue():
    result = classify_report(DUE, None, datetime(2026, 2, 10, 12))

    assert result.status is ReportStatus.OVERDUE
    assert result.is_overdue
    assert result.days_overdue == 4
    assert result.can_submit
    assert result.color == "red"


def test_missing_report_before_due_is_not_started():
    result = classify_report(DUE, None, datetime(2026, 2, 1))

    assert result.status is ReportStatus.NOT_STARTED
    assert not result.is_overdue
    assert result.can_submit


def test_report_due_instant_itself_is_not_overdue():
    assert classify_report(DUE, None, DUE).status is ReportStatus.NOT_STARTED


def test_late_approval_is_flagged():
    record = {"status": "APPROVED", "submitted_at": datetime(2026, 2, 8, 10)}

    result = classify_report(DUE, record, datetime(2026, 3, 1))

    assert result.status is ReportStatus.APPROVED
    assert result.label == "Approved (Late)"
    assert result.is_overdue
    assert result.days_overdue == 2
    assert not result.can_submit


@pytest.mark.parametrize("status", ["APPROVED", "approved", ReportStatus.APPROVED])
def test_on_time_approval(status):
    record = {"status": status, "submittedAt": "2026-02-04T09:00:00"}

    result = classify_report(DUE, record, datetime(2026, 3, 1))

    assert result.status is ReportStatus.APPROVED
    assert result.label == "Approved"
    assert not result.is_overdue
    assert not result.can_submit


def test_unsubmitted_draft_past_due_is_overdue():
    result = classify_report(DUE, {"status": "DRAFT"}, datetime(2026, 2, 7))

    assert result.status is ReportStatus.OVERDUE
    assert result.label == "Overdue (Draft)"
    assert result.days_overdue == 1


def test_late_submission_keeps_draft_status():
    record = {"status": "SUBMITTED", "submitted_at": "2026-02-09T10:00:00"}

    result = classify_report(DUE, record, datetime(2026, 2, 20))

    assert result.status is ReportStatus.DRAFT
    assert result.label == "Submitted Late"
    assert result.is_overdue
    assert result.days_overdue == 3
    assert not result.can_submit


def test_draft_before_due():
    result = classify_report(DUE, {"status": "PENDING"}, datetime(2026, 2, 1))

    assert result.status is ReportStatus.DRAFT
    assert result.label == "Draft"
    assert result.can_submit


@pytest.mark.parametrize(
    "now, expected",
    [(datetime(2026, 2, 10), ReportStatus.OVERDUE), (datetime(2026, 2, 1), ReportStatus.NOT_STARTED)],
)
def test_unknown_status_falls_back_to_dates(now, expected):
    assert classify_report(DUE, {"status": "ARCHIVED"}, now).status is expected


def test_unreadable_timestamp_degrades_gracefully():
    record = {"status": "APPROVED", "submitted_at": "yesterday-ish"}

    result = classify_report(DUE, record, datetime(2026, 3, 1))

    assert result.label == "Approved"
    assert not result.is_overdue


def test_attribute_records_are_supported():
    record = SimpleNamespace(status=None, submitted_at=None)

    assert classify_report(DUE, record, datetime(2026, 2, 10)).status is ReportStatus.OVERDUE
    assert record_value(SimpleNamespace(completedAt="2026-01-01"), "completed_at") == "2026-01-01"


def test_missing_due_date_is_never_overdue():
    assert classify_report(None, None, datetime(2030, 1, 1)).status is ReportStatus.NOT_STARTED
    visit = classify_visit(None, None, datetime(2030, 1, 1))
    assert visit.status is VisitStatus.UPCOMING
    assert visit.days_until_due is None


def test_visit_due_soon_and_upcoming():
    soon = classify_visit(DUE, None, datetime(2026, 2, 2, 12))
    later = classify_visit(DUE, None, datetime(2026, 1, 10))
    narrow = classify_visit(DUE, None, datetime(2026, 2, 2, 12), due_soon_days=2)

    assert soon.status is VisitStatus.UPCOMING
    assert soon.label == "Due Soon"
    assert soon.days_until_due == 4
    assert soon.color == "orange"
    assert later.label == "Upcoming"
    assert later.color == "gray"
    assert narrow.label == "Upcoming"


def test_missing_visit_past_due_is_overdue():
    result = classify_visit(DUE, None, datetime(2026, 2, 8))

    assert result.status is VisitStatus.OVERDUE
    assert result.days_overdue == 2
    assert result.can_complete


def test_completed_visits():
    on_time = classify_visit(DUE, {"status": "COMPLETED", "completed_at": "2026-02-03"}, datetime(2026, 3, 1))
    late = classify_visit(DUE, {"status": "completed", "completedAt": "2026-02-07T12:00:00"}, datetime(2026, 3, 1))

    assert on_time.status is VisitStatus.COMPLETED
    assert on_time.label == "Completed"
    assert not on_time.can_complete
    assert late.label == "Completed Late"
    assert late.is_overdue
    assert late.days_overdue == 1


def test_scheduled_visits():
    overdue = classify_visit(DUE, {"status": "SCHEDULED"}, datetime(2026, 2, 6))
    pending = classify_visit(DUE, {"status": "PENDING"}, datetime(2026, 2, 1))

    assert overdue.status is VisitStatus.OVERDUE
    assert overdue.label == "Overdue (Scheduled)"
    assert pending.status is VisitStatus.PENDING
    assert pending.label == "Scheduled"
    assert pending.days_until_due == 5


def test_unknown_visit_status_falls_back_to_dates():
    assert classify_visit(DUE, {"status": "CANCELLED"}, datetime(2026, 2, 10)).status is VisitStatus.OVERDUE
