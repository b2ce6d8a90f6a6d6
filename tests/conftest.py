import os
import sys
import tempfile
from datetime import date
from pathlib import Path

import pytest

os.environ.setdefault("COMPLIANCE_LOG_DIR", tempfile.mkdtemp(prefix="compliance-logs-"))
os.environ.setdefault("COMPLIANCE_LOG_TO_CONSOLE", "false")


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


from compliance_cycles import logging_setup  # noqa: E402
from compliance_cycles.domain.configuration import ComplianceConfig  # noqa: E402
from compliance_cycles.domain.four_week_cycle import FourWeekCycleModel  # noqa: E402
from compliance_cycles.domain.monthly_cycle import MonthlyCycleModel  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logging_setup.reset_logging()


@pytest.fixture
def config() -> ComplianceConfig:
    return ComplianceConfig()


@pytest.fixture
def four_week(config: ComplianceConfig) -> FourWeekCycleModel:
    return FourWeekCycleModel(config)


@pytest.fixture
def monthly(config: ComplianceConfig) -> MonthlyCycleModel:
    return MonthlyCycleModel(config)


@pytest.fixture
def scenario_a() -> tuple[date, date]:
    """Four-week internship used in the worked example."""
    return date(2025, 12, 15), date(2026, 6, 15)


@pytest.fixture
def scenario_b() -> tuple[date, date]:
    """Monthly internship used in the worked example."""
    return date(2026, 1, 15), date(2026, 5, 15)
