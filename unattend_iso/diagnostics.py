"""Host-visible diagnostics.

Every failure inside a lifecycle operation is reported to the host as a
diagnostic with a stable code, a category label (summary) and a
human-readable detail message. Codes align with the ``code`` attribute
carried by the component exceptions.
"""

from dataclasses import dataclass
from typing import Any

from unattend_iso.types import Severity

# Error code constants
CONFIGURATION_ERROR = "configuration_error"
BUILD_ERROR = "build_error"
IO_ERROR = "io_error"
INTERNAL_ERROR = "internal_error"

# Category labels shown to the user
CATEGORY_LABELS = {
    CONFIGURATION_ERROR: "Configuration Error",
    BUILD_ERROR: "Build Error",
    IO_ERROR: "IO Error",
    INTERNAL_ERROR: "Internal Error",
}


@dataclass
class Diagnostic:
    """Structured diagnostic attached to a lifecycle response.

    Attributes:
        severity: Error or warning.
        summary: Category label (e.g. 'Build Error').
        detail: Human-readable message.
        code: Stable code for programmatic handling.
    """

    severity: Severity
    summary: str
    detail: str
    code: str = INTERNAL_ERROR

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "severity": self.severity.value,
            "summary": self.summary,
            "detail": self.detail,
            "code": self.code,
        }


class Diagnostics(list[Diagnostic]):
    """Ordered collection of diagnostics for one operation."""

    def has_error(self) -> bool:
        """Return True if any diagnostic is an error."""
        return any(d.severity is Severity.ERROR for d in self)

    def errors(self) -> list[Diagnostic]:
        """Return only the error diagnostics."""
        return [d for d in self if d.severity is Severity.ERROR]

    def add_error(self, code: str, detail: str, summary: str | None = None) -> None:
        """Append an error diagnostic.

        Args:
            code: Stable error code.
            detail: Human-readable message.
            summary: Category label; derived from the code if not given.
        """
        self.append(
            Diagnostic(
                severity=Severity.ERROR,
                summary=summary or CATEGORY_LABELS.get(code, "Error"),
                detail=detail,
                code=code,
            )
        )

    def add_warning(self, summary: str, detail: str) -> None:
        """Append a warning diagnostic."""
        self.append(
            Diagnostic(
                severity=Severity.WARNING,
                summary=summary,
                detail=detail,
                code="warning",
            )
        )

    def add_exception(self, exc: Exception) -> None:
        """Append an error diagnostic built from a component exception.

        Exceptions without a ``code`` attribute are reported as internal
        errors.
        """
        code = getattr(exc, "code", INTERNAL_ERROR)
        self.add_error(code, str(exc))

    def to_dict(self) -> list[dict[str, Any]]:
        """Convert to a list of dictionaries for JSON serialization."""
        return [d.to_dict() for d in self]


__all__ = [
    "BUILD_ERROR",
    "CATEGORY_LABELS",
    "CONFIGURATION_ERROR",
    "Diagnostic",
    "Diagnostics",
    "INTERNAL_ERROR",
    "IO_ERROR",
]
