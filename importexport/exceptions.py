"""Exceptions raised by profile loading, validation and path encoding."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from importexport.profiles.validation import FieldViolation


class ImportExportError(Exception):
    """Base exception for all import/export errors."""


class ProfileLoadError(ImportExportError):
    """A profile document could not be read, parsed or resolved."""

    def __init__(self, profile_name: str, reason: str):
        super().__init__(f'Unable to load profile "{profile_name}": {reason}')
        self.profile_name = profile_name
        self.reason = reason


class ProfileValidationError(ImportExportError):
    """Candidate fields failed one or more profile rules.

    The message lists every violation, one per line.
    """

    def __init__(self, section: str, violations: List["FieldViolation"]):
        super().__init__("\n".join(v.describe() for v in violations))
        self.section = section
        self.violations = list(violations)


class PathEncodingError(ImportExportError):
    """An encoded path could not be decoded."""

    def __init__(self, encoded: str, reason: Optional[str] = None):
        message = f"Malformed encoded path: {encoded!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.encoded = encoded
