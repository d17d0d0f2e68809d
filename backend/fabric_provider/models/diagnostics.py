"""Diagnostic models returned by lifecycle operations."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    """Single error or warning attached to an operation result."""

    severity: Severity
    summary: str
    detail: Optional[str] = None
    attribute_path: Optional[str] = None  # e.g. "redundant_uuid"

    @classmethod
    def error(cls, summary: str, detail: str | None = None) -> "Diagnostic":
        return cls(severity=Severity.ERROR, summary=summary, detail=detail)

    @classmethod
    def warning(
        cls, summary: str, detail: str | None = None, attribute_path: str | None = None
    ) -> "Diagnostic":
        return cls(
            severity=Severity.WARNING,
            summary=summary,
            detail=detail,
            attribute_path=attribute_path,
        )
