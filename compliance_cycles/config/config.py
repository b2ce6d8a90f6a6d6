"""
Centralised config for the compliance cycle engine.

This module consolidates the business rules of both cycle models, loading
overrides from environment variables (or a ``.env`` file) and providing
typed, validated access to them through a singleton `settings` object.
"""

import os
from pathlib import Path
from typing import Any, Callable, Literal, Optional, TypeVar

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from compliance_cycles.domain.configuration import (
    ComplianceConfig,
    FourWeekCycleConfig,
    MonthlyCycleConfig,
)

CONFIG_FILE = Path(__file__).resolve()


def _discover_project_root(config_file: Path) -> tuple[Path, Path]:
    """Return a project root and env file path without assuming ``.env`` exists.

    Walk the parents looking for a ``.env`` file and fall back to the
    repository root (detected via common project markers) when it is missing.
    """

    parents = list(config_file.parents)

    for parent in parents:
        env_file = parent / ".env"
        if env_file.exists():
            return parent, env_file

    for marker in ("pyproject.toml", ".git"):
        for parent in parents:
            if (parent / marker).exists():
                return parent, parent / ".env"

    fallback_root = parents[1] if len(parents) > 1 else parents[0]
    return fallback_root, fallback_root / ".env"


PROJECT_ROOT, ENV_FILE_PATH = _discover_project_root(CONFIG_FILE)


T = TypeVar("T")


class Settings(BaseSettings):
    """
    Centralised and validated engine settings.
    """
    model_config = SettingsConfigDict(
        env_file=ENV_FILE_PATH, env_file_encoding="utf-8", extra="ignore", case_sensitive=False
    )

    # --- CORE SETTINGS ---
    DEFAULT_CYCLE_MODEL: Literal["monthly", "four_week"] = "monthly"

    # --- FOUR-WEEK CYCLE RULES ---
    CYCLE_DURATION_DAYS: int = Field(28, ge=7, le=56)
    SUBMISSION_GRACE_DAYS: int = Field(5, ge=1, le=28)
    VISIT_GRACE_DAYS: int = Field(5, ge=0, le=28)
    MAX_CYCLES: int = Field(26, ge=1, le=260)

    # --- MONTHLY CYCLE RULES ---
    MIN_DAYS_FOR_INCLUSION: int = Field(10, ge=1, le=28)
    REPORT_DUE_DAY: int = Field(5, ge=1, le=28)
    MAX_MONTHS: int = Field(24, ge=1, le=60)

    # --- STATUS CLASSIFICATION ---
    DUE_SOON_DAYS: int = Field(7, ge=0)

    # --- LOGGING ---
    COMPLIANCE_LOG_LEVEL: str = "INFO"
    COMPLIANCE_LOG_TO_CONSOLE: bool = True
    COMPLIANCE_LOG_DIR: Optional[Path] = None

    @model_validator(mode="after")
    def check_cycle_window(self) -> "Settings":
        """A grace period longer than the cycle would overlap the next window."""
        if self.SUBMISSION_GRACE_DAYS > self.CYCLE_DURATION_DAYS:
            raise ValueError("SUBMISSION_GRACE_DAYS must not exceed CYCLE_DURATION_DAYS")
        return self

    # --- DYNAMIC FILE PATHS ---
    @property
    def log_path(self) -> Path:
        """
        Path for the engine log file.

        Uses ``COMPLIANCE_LOG_DIR`` when configured, otherwise a ``logs``
        directory under the project root.
        """
        log_dir = self.COMPLIANCE_LOG_DIR or (PROJECT_ROOT / "logs")
        return Path(log_dir) / "compliance_cycles.log"

    def to_domain_config(self) -> ComplianceConfig:
        """Freeze the current values into the struct the engine consumes."""
        return ComplianceConfig(
            four_week=FourWeekCycleConfig(
                cycle_duration_days=self.CYCLE_DURATION_DAYS,
                submission_grace_days=self.SUBMISSION_GRACE_DAYS,
                visit_grace_days=self.VISIT_GRACE_DAYS,
                max_cycles=self.MAX_CYCLES,
            ),
            monthly=MonthlyCycleConfig(
                min_days_for_inclusion=self.MIN_DAYS_FOR_INCLUSION,
                report_due_day=self.REPORT_DUE_DAY,
                max_months=self.MAX_MONTHS,
            ),
            due_soon_days=self.DUE_SOON_DAYS,
        )


# Create a single, importable instance of the settings for the entire application.
settings = Settings()


def _to_bool(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _coerce_type(raw: str, template: Any) -> Any:
    if isinstance(template, bool):
        return _to_bool(raw)
    if isinstance(template, int) and not isinstance(template, bool):
        return int(raw)
    if isinstance(template, float):
        return float(raw)
    if isinstance(template, Path):
        return Path(raw)
    return raw


def get_env(
    name: str,
    default: T | None = None,
    *,
    parser: Callable[[str], T] | None = None,
) -> T | Any | None:
    """Return a configuration value resolving environment overrides consistently.

    The resolution order is:

    1. Explicit environment variable overrides at runtime.
    2. Typed values provided by the Pydantic ``settings`` object.
    3. The supplied ``default`` value.

    When an override is read directly from :mod:`os.environ`, ``parser`` (or the
    inferred type from ``settings``) is used to coerce the string into the
    expected type.
    """

    if name in os.environ:
        raw_value = os.environ[name]
        if parser is not None:
            return parser(raw_value)
        if hasattr(settings, name):
            template = getattr(settings, name)
            try:
                return _coerce_type(raw_value, template)
            except (TypeError, ValueError):
                return template
        return raw_value

    if hasattr(settings, name):
        value = getattr(settings, name)
        if value is not None:
            return value

    return default
