"""Event canonicalization.

Brings any event list into its canonical form before comparison, hashing or
validation:

- every event sits on an explicit lane (lane type + lane id)
- quantized q-times on the STEP_MIN grid, at least one step long
- consumers carry q-times and are sorted
- ids derived from content, so equal plans get equal ids
- events in a total order

Canonicalization is idempotent: canonicalizing a canonical list returns an
equal list.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging
import re

from ..constants import STEP_MIN
from ..models.diagnostic import Diagnostic, DiagnosticCode, warning
from ..models.plan_event import Consumer, EventType, LaneType, PlanEvent
from ..parsers.input_adapter import coerce_events
from ..utils.hashing import normalize_number, stable_id
from ..utils.time_volume import quantize_times

logger = logging.getLogger(__name__)

#: Sort rank of lane types
LANE_TYPE_ORDER = {LaneType.LINE: 1, LaneType.RW: 2, LaneType.IBC: 3}

#: Sort rank of event types within one lane and window
TYPE_PRIORITY = {
    EventType.BLOCKED: 1,
    EventType.RW_BATCH: 2,
    EventType.LINE_FILL: 3,
    EventType.IBC_BATCH: 4,
}

#: Lane type implied by the event type
TYPE_LANE = {
    EventType.LINE_FILL: LaneType.LINE,
    EventType.RW_BATCH: LaneType.RW,
    EventType.IBC_BATCH: LaneType.IBC,
}

IBC_LANE_ID = "IBC"
UNKNOWN_REACTOR_LANE = "RW_UNK"

_LINE_SHORT = re.compile(r"^L(\d+)$")
_LINE_LONG = re.compile(r"^(?:linie|line)\s*(\d+)$", re.IGNORECASE)


@dataclass
class CanonicalPlan:
    """
    Canonicalized events.

    Attributes:
        events: Canonical events in canonical order
        lane_index: "{laneType}:{laneId}" -> events on that lane (canonical order)
        diagnostics: Dropped events and duplicate ids
    """
    events: List[PlanEvent] = field(default_factory=list)
    lane_index: Dict[str, List[PlanEvent]] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)


def _line_lane_id(raw: str) -> Optional[str]:
    match = _LINE_SHORT.match(raw) or _LINE_LONG.match(raw)
    if match:
        return f"L{int(match.group(1))}"
    return None


def _canonical_line_id(raw: Optional[str]) -> Optional[str]:
    """Line ids in the "L<n>" form used by line lanes; other ids unchanged."""
    if raw is None:
        return None
    return _line_lane_id(raw.strip()) or raw


def canonical_lane(event: PlanEvent) -> Tuple[LaneType, str]:
    """
    Resolve the lane of an event.

    The lane type comes from the event's explicit lane type, else from its
    event type, else from the lane id pattern ("IBC", "L<n>", "Linie<n>",
    "Line<n>"), else RW. Line lanes are written "L<n>", the container lane is
    always "IBC" and an RW lane without an id becomes "RW_UNK".

    Args:
        event: Event to inspect

    Returns:
        Tuple of (lane type, lane id)
    """
    raw = (event.lane_id or event.line_id or "").strip()

    lane_type = event.lane_type or TYPE_LANE.get(event.type)
    if lane_type is None:
        if raw.upper() == IBC_LANE_ID:
            lane_type = LaneType.IBC
        elif _line_lane_id(raw) is not None:
            lane_type = LaneType.LINE
        else:
            lane_type = LaneType.RW

    if lane_type == LaneType.IBC:
        return lane_type, IBC_LANE_ID
    if lane_type == LaneType.LINE:
        return lane_type, _line_lane_id(raw) or raw
    return lane_type, raw or UNKNOWN_REACTOR_LANE


def _consumer_sort_key(consumer: Consumer) -> Tuple[str, str, float, float, str, float]:
    return (
        consumer.order_id or "",
        consumer.line_id or "",
        consumer.q_start or 0.0,
        consumer.q_end or 0.0,
        consumer.demand_id or "",
        consumer.volume_l,
    )


def _consumer_payload(consumer: Consumer) -> Dict[str, Any]:
    return {
        'orderId': consumer.order_id,
        'lineId': consumer.line_id,
        'demandId': consumer.demand_id,
        'qStart': normalize_number(consumer.q_start),
        'qEnd': normalize_number(consumer.q_end),
        'volumeL': normalize_number(consumer.volume_l),
    }


def event_payload(event: PlanEvent) -> Dict[str, Any]:
    """Content of a canonical event that determines its id and the plan hash."""
    return {
        'type': event.type_name,
        'laneType': event.lane_type.value if event.lane_type is not None else None,
        'laneId': event.lane_id,
        'qStart': normalize_number(event.q_start),
        'qEnd': normalize_number(event.q_end),
        'productId': event.product_id,
        'volumeL': normalize_number(event.volume_l),
        'orderId': event.order_id,
        'sourceReactorId': event.source_reactor_id,
        'consumers': [_consumer_payload(c) for c in event.consumers],
    }


def canonicalize_event(event: PlanEvent, step_min: float = STEP_MIN) -> PlanEvent:
    """
    Canonical form of a single event.

    Raw start/end are kept; q-times are derived from them (or from existing
    q-times when the raw times are missing).
    """
    lane_type, lane_id = canonical_lane(event)
    q_start, q_end = quantize_times(
        event.start if event.start is not None else event.q_start,
        event.end if event.end is not None else event.q_end,
        step_min,
    )

    consumers = []
    for consumer in event.consumers:
        c_start, c_end = quantize_times(
            consumer.start if consumer.start is not None else consumer.q_start,
            consumer.end if consumer.end is not None else consumer.q_end,
            step_min,
        )
        consumers.append(consumer.model_copy(update={
            'q_start': c_start,
            'q_end': c_end,
            'line_id': _canonical_line_id(consumer.line_id),
        }))
    consumers.sort(key=_consumer_sort_key)

    canonical = event.model_copy(update={
        'lane_type': lane_type,
        'lane_id': lane_id,
        'line_id': _canonical_line_id(event.line_id),
        'q_start': q_start,
        'q_end': q_end,
        'consumers': tuple(consumers),
    })
    return canonical.model_copy(update={'id': stable_id(event.type_name, event_payload(canonical))})


def _sort_key(event: PlanEvent) -> Tuple:
    return (
        LANE_TYPE_ORDER.get(event.lane_type, 99),
        event.lane_id or "",
        event.q_start,
        event.q_end,
        TYPE_PRIORITY.get(event.type, 50),
        event.id or "",
    )


def sort_canonical(events: Iterable[PlanEvent]) -> List[PlanEvent]:
    """Canonical order: lane type, lane id, q-start, q-end, type priority, id."""
    return sorted(events, key=_sort_key)


def index_by_lane(events: Iterable[PlanEvent]) -> Dict[str, List[PlanEvent]]:
    """Group canonical events by lane key in canonical order."""
    index: Dict[str, List[PlanEvent]] = {}
    for event in events:
        index.setdefault(event.lane_key, []).append(event)
    return {key: sort_canonical(lane) for key, lane in index.items()}


def canonicalize_events(events: Any, step_min: float = STEP_MIN) -> CanonicalPlan:
    """
    Canonicalize a list of events.

    Args:
        events: PlanEvent objects and/or raw event mappings (camelCase keys
            accepted). ``None`` is treated as an empty list.
        step_min: Quantization step in minutes

    Returns:
        CanonicalPlan with sorted events, lane index and diagnostics.
        Malformed entries are dropped with EVENT_INVALID; ids occurring more
        than once are reported as DUPLICATE_EVENT_ID.
    """
    parsed, diagnostics = coerce_events(events)
    canonical = sort_canonical(canonicalize_event(e, step_min) for e in parsed)

    seen = set()
    for event in canonical:
        if event.id in seen:
            diagnostics.append(warning(
                DiagnosticCode.DUPLICATE_EVENT_ID,
                f"Duplicate event id after canonicalization: {event.id}",
                (event.id,),
            ))
        seen.add(event.id)

    if diagnostics:
        logger.warning(f"Canonicalized {len(canonical)} events with {len(diagnostics)} diagnostics")

    return CanonicalPlan(events=canonical, lane_index=index_by_lane(canonical), diagnostics=diagnostics)
