"""Internship compliance cycle engine.

Two interchangeable cycle models (four-week windows and calendar months)
compute reporting and visit periods, their due dates and live status for an
internship's start and end dates.
"""

from compliance_cycles.domain.configuration import (
    ComplianceConfig,
    FourWeekCycleConfig,
    MonthlyCycleConfig,
)
from compliance_cycles.domain.cycle_service import CycleModel, CycleModelKind, build_cycle_model
from compliance_cycles.domain.entities import (
    CurrentCycleInfo,
    CycleDescriptor,
    FourWeekCycle,
    MonthlyCycle,
    ReportStatus,
    ReportStatusResult,
    VisitStatus,
    VisitStatusResult,
)
from compliance_cycles.domain.exceptions import ComplianceError, InvalidArgument
from compliance_cycles.domain.four_week_cycle import FourWeekCycleModel
from compliance_cycles.domain.monthly_cycle import MonthlyCycleModel
from compliance_cycles.domain.status import classify_report, classify_visit

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "ComplianceConfig",
    "FourWeekCycleConfig",
    "MonthlyCycleConfig",
    "CycleModel",
    "CycleModelKind",
    "build_cycle_model",
    "CurrentCycleInfo",
    "CycleDescriptor",
    "FourWeekCycle",
    "MonthlyCycle",
    "ReportStatus",
    "ReportStatusResult",
    "VisitStatus",
    "VisitStatusResult",
    "ComplianceError",
    "InvalidArgument",
    "FourWeekCycleModel",
    "MonthlyCycleModel",
    "classify_report",
    "classify_visit",
]
