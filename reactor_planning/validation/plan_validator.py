"""Validation of canonical plans.

The validator never raises: every violation becomes an ERROR diagnostic
and the caller decides what to do with an invalid plan.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Union
import logging
import math

from ..config import PlanConfig, resolve_config
from ..models.diagnostic import Diagnostic, DiagnosticCode, error
from ..models.plan_event import EXPECTED_LANE_TYPE, PlanEvent, PlanMode
from ..parsers.input_adapter import coerce_events

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """
    Result of validating a plan.

    Attributes:
        ok: True if no violation was found
        diagnostics: One ERROR diagnostic per violation
    """
    ok: bool
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.diagnostics)

    def __str__(self) -> str:
        if self.ok:
            return "Plan valid"
        return f"Plan invalid: {self.error_count} violations"


def _on_grid(value: float, step: float) -> bool:
    ratio = value / step
    return abs(ratio - round(ratio)) <= 1e-9


def _check_event(event: PlanEvent, config: PlanConfig) -> List[Diagnostic]:
    """Per-event invariants."""
    issues: List[Diagnostic] = []
    step = config.step_min
    eid = event.id or "?"
    related = (event.id,) if event.id else ()

    if event.lane_type is None or not event.lane_id:
        issues.append(error(
            DiagnosticCode.LANE_NOT_CANONICAL,
            f"Missing lane type or lane id on event {eid}",
            related,
        ))

    expected = EXPECTED_LANE_TYPE.get(event.type)
    if expected is not None and event.lane_type is not None and event.lane_type != expected:
        issues.append(error(
            DiagnosticCode.TYPE_LANE_MISMATCH,
            f"{event.type_name} must be on lane type {expected.value}, found {event.lane_type.value}: {eid}",
            related,
        ))

    if event.is_batch and event.mode == PlanMode.GEPLANT and event.volume_l is not None:
        if (event.volume_l < config.min_batch_l - config.volume_epsilon_l
                or event.volume_l > config.max_batch_l + config.volume_epsilon_l):
            issues.append(error(
                DiagnosticCode.BATCH_VOLUME_OUT_OF_BOUNDS,
                f"Batch {eid} volume {event.volume_l:.1f} L outside "
                f"[{config.min_batch_l:.0f}, {config.max_batch_l:.0f}]",
                related,
                volume_l=event.volume_l,
            ))

    if event.consumers and event.volume_l is not None:
        supplied = event.consumer_volume_l
        if abs(supplied - event.volume_l) > config.volume_epsilon_l:
            issues.append(error(
                DiagnosticCode.CONSUMER_VOLUME_MISMATCH,
                f"Event {eid}: consumers take {supplied:.4f} L of {event.volume_l:.4f} L",
                related,
                consumer_volume_l=supplied,
                volume_l=event.volume_l,
            ))

    q_start, q_end = event.q_start, event.q_end
    if q_start is None or q_end is None or not math.isfinite(q_start) or not math.isfinite(q_end):
        issues.append(error(
            DiagnosticCode.QTIME_MISSING,
            f"Missing q_start/q_end on event {eid}",
            related,
        ))
        return issues

    if not _on_grid(q_start, step) or not _on_grid(q_end, step):
        issues.append(error(
            DiagnosticCode.QTIME_NOT_QUANTIZED,
            f"q-times of {eid} ({q_start}-{q_end}) are not multiples of {step} min",
            related,
        ))

    if q_end < q_start + step:
        issues.append(error(
            DiagnosticCode.QTIME_INVALID_RANGE,
            f"q_end < q_start + {step} on {eid} ({q_start}-{q_end})",
            related,
        ))

    return issues


def _check_overlaps(events: List[PlanEvent]) -> List[Diagnostic]:
    """Reactor lanes: no two events may overlap (touching is allowed)."""
    issues: List[Diagnostic] = []
    by_lane: Dict[str, List[PlanEvent]] = defaultdict(list)
    for event in events:
        if not event.is_reactor_occupying or event.q_start is None or event.q_end is None:
            continue
        by_lane[event.lane_key].append(event)

    for lane_key in sorted(by_lane):
        ordered = sorted(by_lane[lane_key], key=lambda e: (e.q_start, e.q_end, e.id or ""))
        blocker = ordered[0]
        for current in ordered[1:]:
            if current.q_start < blocker.q_end:
                issues.append(error(
                    DiagnosticCode.LANE_OVERLAP,
                    f"Overlap on lane {lane_key}: {blocker.id} ({blocker.q_start}-{blocker.q_end}) "
                    f"overlaps {current.id} ({current.q_start}-{current.q_end})",
                    tuple(i for i in (current.id, blocker.id) if i),
                    lane_key=lane_key,
                ))
            if current.q_end > blocker.q_end:
                blocker = current

    return issues


def validate_plan(
    events: Any,
    config: Union[PlanConfig, Mapping[str, Any], None] = None,
) -> ValidationResult:
    """
    Validate a canonical event list.

    Checks:
    - lane identity present (LANE_NOT_CANONICAL)
    - q-times present (QTIME_MISSING), on the step grid (QTIME_NOT_QUANTIZED)
      and at least one step long (QTIME_INVALID_RANGE)
    - event type matches lane type (TYPE_LANE_MISMATCH)
    - planned batches within the batch limits (BATCH_VOLUME_OUT_OF_BOUNDS)
    - consumer volumes add up to the event volume (CONSUMER_VOLUME_MISMATCH)
    - no overlapping q-windows on a reactor lane (LANE_OVERLAP)
    - malformed raw events (EVENT_INVALID)

    Args:
        events: Canonical events (PlanEvent objects or raw mappings)
        config: PlanConfig, mapping of overrides, or None for defaults

    Returns:
        ValidationResult listing every violation
    """
    cfg = resolve_config(config)
    parsed, dropped = coerce_events(events)

    diagnostics: List[Diagnostic] = [
        error(d.code, d.message, d.related_ids, **d.details) for d in dropped
    ]
    for event in parsed:
        diagnostics.extend(_check_event(event, cfg))
    diagnostics.extend(_check_overlaps(parsed))

    if diagnostics:
        logger.warning(f"Plan validation found {len(diagnostics)} violations in {len(parsed)} events")

    return ValidationResult(ok=not diagnostics, diagnostics=diagnostics)
