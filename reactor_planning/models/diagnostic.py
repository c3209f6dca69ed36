"""Diagnostics accumulated during planning, canonicalization and validation.

Expected planning failures never raise; they are reported as diagnostics
and the caller decides whether a diagnostic blocks a commit.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Tuple


class DiagnosticSeverity(str, Enum):
    """Severity levels for diagnostics."""
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class DiagnosticCode:
    """Diagnostic codes emitted by the engine."""
    # Ingestion
    INVALID_ORDER = "INVALID_ORDER"
    INVALID_MANUAL_ASSIGNMENT = "INVALID_MANUAL_ASSIGNMENT"
    MANUAL_ASSIGNMENT_REPLACED = "MANUAL_ASSIGNMENT_REPLACED"

    # Manual assignments
    MANUAL_ASSIGNMENT_UNMATCHED = "MANUAL_ASSIGNMENT_UNMATCHED"
    MANUAL_ASSIGNMENT_DUPLICATE = "MANUAL_ASSIGNMENT_DUPLICATE"
    MANUAL_VOLUME_MISMATCH = "MANUAL_VOLUME_MISMATCH"
    UNKNOWN_REACTOR = "UNKNOWN_REACTOR"

    # Scheduling
    NO_SPLIT_CANDIDATE = "NO_SPLIT_CANDIDATE"
    CLUSTER_IBC_FALLBACK = "CLUSTER_IBC_FALLBACK"
    UNSCHEDULED_BATCH = "UNSCHEDULED_BATCH"

    # Canonicalization / validation
    EVENT_INVALID = "EVENT_INVALID"
    DUPLICATE_EVENT_ID = "DUPLICATE_EVENT_ID"
    LANE_NOT_CANONICAL = "LANE_NOT_CANONICAL"
    QTIME_MISSING = "QTIME_MISSING"
    QTIME_NOT_QUANTIZED = "QTIME_NOT_QUANTIZED"
    QTIME_INVALID_RANGE = "QTIME_INVALID_RANGE"
    TYPE_LANE_MISMATCH = "TYPE_LANE_MISMATCH"
    LANE_OVERLAP = "LANE_OVERLAP"
    BATCH_VOLUME_OUT_OF_BOUNDS = "BATCH_VOLUME_OUT_OF_BOUNDS"
    CONSUMER_VOLUME_MISMATCH = "CONSUMER_VOLUME_MISMATCH"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single non-fatal finding.

    Attributes:
        code: Machine-readable code (see DiagnosticCode)
        severity: INFO, WARNING or ERROR
        message: Human-readable explanation
        related_ids: Ids of the events, orders, reactors or segments involved
        details: Additional structured context
    """
    code: str
    severity: DiagnosticSeverity
    message: str
    related_ids: Tuple[str, ...] = ()
    details: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_error(self) -> bool:
        return self.severity == DiagnosticSeverity.ERROR

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.code}: {self.message}"


def info(code: str, message: str, related_ids: Iterable[str] = (), **details: Any) -> Diagnostic:
    return Diagnostic(code, DiagnosticSeverity.INFO, message, tuple(related_ids), details)


def warning(code: str, message: str, related_ids: Iterable[str] = (), **details: Any) -> Diagnostic:
    return Diagnostic(code, DiagnosticSeverity.WARNING, message, tuple(related_ids), details)


def error(code: str, message: str, related_ids: Iterable[str] = (), **details: Any) -> Diagnostic:
    return Diagnostic(code, DiagnosticSeverity.ERROR, message, tuple(related_ids), details)


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
    """True if any diagnostic has ERROR severity."""
    return any(d.is_error for d in diagnostics)
