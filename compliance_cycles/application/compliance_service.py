"""
Compliance service used by dashboards, alerting and batch recompute jobs.

Selects a cycle model per institution or cohort, then turns an internship
record (dates plus caller-owned report and visit records) into progress
counters and overdue alerts. Nothing here is persisted.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from compliance_cycles.application.exceptions import (
    ComplianceValidationError,
    CycleModelSelectionError,
)
from compliance_cycles.domain.configuration import ComplianceConfig
from compliance_cycles.domain.cycle_service import (
    CycleModel,
    CycleModelKind,
    build_cycle_model,
    resolve_now,
)
from compliance_cycles.domain.entities import (
    CycleDescriptor,
    MonthlyCycle,
    ReportStatus,
    VisitStatus,
)
from compliance_cycles.domain.exceptions import InvalidArgument
from compliance_cycles.domain.status import record_value
from compliance_cycles.logging_setup import get_logger
from compliance_cycles.utils import converters

LOG_TAG = "SVC"

SUBMITTED_REPORT_CODES = frozenset({"APPROVED", "SUBMITTED"})

_FIELD_ALIASES = {
    "start_date": "startDate",
    "end_date": "endDate",
    "institution_id": "institutionId",
    "cycle_number": "cycleNumber",
    "reports": "monthlyReports",
    "visits": "facultyVisits",
}


def _field(record: Any, key: str) -> Any:
    value = record_value(record, key)
    alias = _FIELD_ALIASES.get(key)
    if value is None and alias:
        value = record_value(record, alias)
    return value


@dataclass(frozen=True)
class ComplianceSummary:
    """Progress counters for one internship."""

    internship_id: Any
    model: CycleModelKind
    total_expected_reports: int
    total_expected_visits: int
    expected_reports_to_date: int
    expected_visits_to_date: int
    submitted_reports: int
    completed_visits: int
    overdue_reports: int
    overdue_visits: int
    current_cycle_index: Optional[int]
    next_report_due: Optional[datetime]
    next_visit_due: Optional[datetime]

    @property
    def report_completion_rate(self) -> float:
        if not self.expected_reports_to_date:
            return 1.0
        return min(1.0, self.submitted_reports / self.expected_reports_to_date)


@dataclass(frozen=True)
class OverdueAlert:
    internship_id: Any
    kind: str
    cycle_index: int
    due_at: datetime
    days_overdue: int
    label: str


@dataclass(frozen=True)
class ExpectedCounts:
    internship_id: Any
    total_expected_reports: int
    total_expected_visits: int


@dataclass
class ExpectedCountsBatch:
    updated: List[ExpectedCounts] = field(default_factory=list)
    failed: List[tuple[Any, str]] = field(default_factory=list)


class ComplianceService:
    """Runs compliance queries against the cycle model configured for an internship."""

    def __init__(
        self,
        config: ComplianceConfig | None = None,
        *,
        default_model: CycleModelKind | str = CycleModelKind.MONTHLY,
        model_overrides: Mapping[str, CycleModelKind | str] | None = None,
    ) -> None:
        self._config = config or ComplianceConfig()
        self._default_model = self._resolve_kind(default_model, "default")
        self._overrides = {
            str(key): self._resolve_kind(value, str(key))
            for key, value in (model_overrides or {}).items()
        }
        self._models: dict[CycleModelKind, CycleModel] = {}

    @classmethod
    def from_settings(cls, settings: Any, **kwargs: Any) -> "ComplianceService":
        return cls(settings.to_domain_config(), default_model=settings.DEFAULT_CYCLE_MODEL, **kwargs)

    @staticmethod
    def _resolve_kind(value: CycleModelKind | str, owner: str) -> CycleModelKind:
        try:
            return CycleModelKind(value)
        except ValueError as exc:
            raise CycleModelSelectionError(f"Unknown cycle model {value!r} configured for {owner}") from exc

    def model_for(self, *, institution_id: Any = None, cohort: Any = None) -> CycleModel:
        """Cycle model for a cohort, then institution, then the default."""

        kind = self._default_model
        for key in (cohort, institution_id):
            if key is not None and str(key) in self._overrides:
                kind = self._overrides[str(key)]
                break
        if kind not in self._models:
            self._models[kind] = build_cycle_model(kind, self._config)
        return self._models[kind]

    def _model_for_internship(self, internship: Any) -> CycleModel:
        return self.model_for(
            institution_id=_field(internship, "institution_id"),
            cohort=_field(internship, "cohort"),
        )

    def _cycles(self, model: CycleModel, internship: Any) -> tuple[datetime, datetime, Sequence[CycleDescriptor]]:
        start, end = _field(internship, "start_date"), _field(internship, "end_date")
        try:
            return start, end, model.cycles(start, end)
        except InvalidArgument as exc:
            internship_id = _field(internship, "id")
            raise ComplianceValidationError(
                f"Internship {internship_id}: internship start/end date required ({exc})"
            ) from exc

    # ------------------------------------------------------------------
    # Dashboards
    # ------------------------------------------------------------------
    def summarize(self, internship: Any, now: Any = None) -> ComplianceSummary:
        """Progress counters for the compliance dashboard."""

        current = resolve_now(now)
        model = self._model_for_internship(internship)
        start, end, cycles = self._cycles(model, internship)
        reports = _field(internship, "reports") or []
        visits = _field(internship, "visits") or []

        submitted = overdue_reports = completed = overdue_visits = 0
        for cycle in cycles:
            report = _match_record(cycle, reports)
            report_result = model.report_status(cycle.report_due_at, report, current)
            if report is not None and _is_submitted(report):
                submitted += 1
            if report_result.status is ReportStatus.OVERDUE:
                overdue_reports += 1

            visit = _match_record(cycle, visits)
            visit_result = model.visit_status(cycle.visit_due_at, visit, current)
            if visit_result.status is VisitStatus.COMPLETED:
                completed += 1
            if visit_result.status is VisitStatus.OVERDUE:
                overdue_visits += 1

        current_cycle = model.current_cycle(start, end, current)
        return ComplianceSummary(
            internship_id=_field(internship, "id"),
            model=model.kind,
            total_expected_reports=len(cycles),
            total_expected_visits=len(cycles),
            expected_reports_to_date=model.expected_reports_as_of(start, end, current),
            expected_visits_to_date=model.expected_visits_as_of(start, end, current),
            submitted_reports=submitted,
            completed_visits=completed,
            overdue_reports=overdue_reports,
            overdue_visits=overdue_visits,
            current_cycle_index=current_cycle.index if current_cycle else None,
            next_report_due=model.next_report_due_date(start, end, current),
            next_visit_due=model.next_visit_due_date(start, end, current),
        )

    # ------------------------------------------------------------------
    # Alerting
    # ------------------------------------------------------------------
    def overdue_alerts(self, internships: Iterable[Any], now: Any = None) -> List[OverdueAlert]:
        """Overdue reports and visits across ``internships`` for reminder fan-out.

        Internships without usable dates are logged and skipped so one bad
        record does not stop the run.
        """

        current = resolve_now(now)
        alerts: List[OverdueAlert] = []
        for internship in internships:
            internship_id = _field(internship, "id")
            model = self._model_for_internship(internship)
            try:
                _, _, cycles = self._cycles(model, internship)
            except ComplianceValidationError as exc:
                get_logger(LOG_TAG).warning(f"Skipping overdue check: {exc}")
                continue

            reports = _field(internship, "reports") or []
            visits = _field(internship, "visits") or []
            for cycle in cycles:
                report_result = model.report_status(cycle.report_due_at, _match_record(cycle, reports), current)
                if report_result.status is ReportStatus.OVERDUE:
                    alerts.append(
                        OverdueAlert(internship_id, "report", cycle.index, cycle.report_due_at,
                                     report_result.days_overdue, report_result.label)
                    )
                visit_result = model.visit_status(cycle.visit_due_at, _match_record(cycle, visits), current)
                if visit_result.status is VisitStatus.OVERDUE:
                    alerts.append(
                        OverdueAlert(internship_id, "visit", cycle.index, cycle.visit_due_at,
                                     visit_result.days_overdue, visit_result.label)
                    )

        get_logger(LOG_TAG).info(f"Overdue check found {len(alerts)} alert(s) as of {current:%Y-%m-%d}")
        return alerts

    # ------------------------------------------------------------------
    # Batch recompute
    # ------------------------------------------------------------------
    def recompute_expected_counts(self, internships: Iterable[Any]) -> ExpectedCountsBatch:
        """Recalculate expected report/visit totals; idempotent."""

        batch = ExpectedCountsBatch()
        for internship in internships:
            internship_id = _field(internship, "id")
            model = self._model_for_internship(internship)
            try:
                total = model.total_expected_count(_field(internship, "start_date"), _field(internship, "end_date"))
            except InvalidArgument as exc:
                get_logger(LOG_TAG).error(f"Internship {internship_id}: cannot recompute expected counts: {exc}")
                batch.failed.append((internship_id, str(exc)))
                continue
            batch.updated.append(ExpectedCounts(internship_id, total, total))

        get_logger(LOG_TAG).info(
            f"Expected counts recomputed: {len(batch.updated)} updated, {len(batch.failed)} failed"
        )
        return batch


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _is_submitted(record: Any) -> bool:
    code = converters.to_status_code(record_value(record, "status"))
    return code in SUBMITTED_REPORT_CODES or record_value(record, "submitted_at") is not None


def _match_record(cycle: CycleDescriptor, records: Sequence[Any]) -> Any:
    """Find the caller record for ``cycle`` by month/year or by cycle number."""

    for record in records:
        if isinstance(cycle, MonthlyCycle):
            month, year = _as_int(record_value(record, "month")), _as_int(record_value(record, "year"))
            if month is not None and year is not None:
                if (year, month) == (cycle.year, cycle.month):
                    return record
                continue
        if _as_int(_field(record, "cycle_number")) == cycle.index:
            return record
    return None


__all__ = [
    "ComplianceService",
    "ComplianceSummary",
    "OverdueAlert",
    "ExpectedCounts",
    "ExpectedCountsBatch",
]
