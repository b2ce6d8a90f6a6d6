"""Exceptions raised by the cycle engine."""

from __future__ import annotations


class ComplianceError(Exception):
    """Base exception for cycle engine failures."""


class InvalidArgument(ComplianceError, ValueError):
    """Raised for structurally malformed input the engine cannot proceed without.

    Missing or unparseable dates, month numbers outside 1-12 and invalid
    configuration values end up here. Degenerate but well-formed input
    (reversed ranges, zero-length ranges) never does.
    """


__all__ = ["ComplianceError", "InvalidArgument"]
