"""Custom exception hierarchy for compliance application services."""

from __future__ import annotations


class ApplicationError(Exception):
    """Base exception for application-level compliance failures."""


class ComplianceValidationError(ApplicationError):
    """Raised when an internship record cannot be evaluated (bad or missing dates)."""


class CycleModelSelectionError(ApplicationError):
    """Raised when an institution or cohort maps to an unknown cycle model."""


__all__ = [
    "ApplicationError",
    "ComplianceValidationError",
    "CycleModelSelectionError",
]
