"""Plan assembly: the entry point of the planning engine.

Pipeline for one call:

1. Ingest orders and manual assignments (invalid records become diagnostics)
2. Build the demand timeline of every filling line
3. Apply locked manual assignments (IST batches)
4. Cluster the remaining demand by product
5. Schedule every cluster (split candidates, reactor choice, IBC fallback)
6. Canonicalize, validate and hash the resulting events

Every call owns its allocator, reactor timeline and event list; inputs are
never mutated and the same inputs always give the same plan hash.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set, Union
import logging

from ..analysis.demand_allocator import DemandAllocator
from ..config import PlanConfig, resolve_config
from ..models.demand import DemandSegment
from ..models.diagnostic import Diagnostic, DiagnosticSeverity, has_errors
from ..models.plan_event import EventType, LaneType, PlanEvent
from ..models.reactor import ReactorCatalog, default_catalog
from ..parsers.input_adapter import parse_line_orders, parse_manual_assignments
from ..validation.canonicalizer import canonicalize_events
from ..validation.plan_hash import compute_plan_hash
from ..validation.plan_validator import validate_plan
from .cluster_scheduler import schedule_cluster
from .clustering import cluster_by_product
from .demand_builder import build_demand_timeline
from .manual_assignments import apply_manual_assignments
from .reactor_assignment import ReactorTimeline

logger = logging.getLogger(__name__)


@dataclass
class PlanResult:
    """
    Result of one planning call.

    Attributes:
        events: Canonical plan events in canonical order
        diagnostics: Everything worth reporting (ingestion, scheduling,
            canonicalization and validation)
        ok: False if any diagnostic has ERROR severity
        plan_hash: 8-hex-digit fingerprint of the events
        demand_segments: Demand timeline the plan was built for
        covered_demand_ids: Segments supplied by locked manual assignments
        lane_index: "{laneType}:{laneId}" -> events on that lane
    """
    events: List[PlanEvent]
    diagnostics: List[Diagnostic]
    ok: bool
    plan_hash: str
    demand_segments: List[DemandSegment] = field(default_factory=list)
    covered_demand_ids: Set[str] = field(default_factory=set)
    lane_index: Dict[str, List[PlanEvent]] = field(default_factory=dict)

    @property
    def batches(self) -> List[PlanEvent]:
        """Reactor batches (IST, GEPLANT and IBC mode)."""
        return [e for e in self.events if e.type == EventType.RW_BATCH]

    @property
    def unscheduled(self) -> List[PlanEvent]:
        return [e for e in self.events if e.unscheduled]

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == DiagnosticSeverity.ERROR]

    def lane(self, lane_type: Union[LaneType, str], lane_id: str) -> List[PlanEvent]:
        """Events on one lane, e.g. ``result.lane("RW", "A1")``."""
        key = f"{LaneType(lane_type).value}:{lane_id}"
        return list(self.lane_index.get(key, []))

    def __str__(self) -> str:
        status = "OK" if self.ok else f"{len(self.errors)} errors"
        return (
            f"Plan {self.plan_hash}: {len(self.batches)} batches, "
            f"{len(self.events)} events, {status}"
        )


def line_fill_events(segments: List[DemandSegment]) -> List[PlanEvent]:
    """One lineFill event per demand segment on its line lane."""
    return [
        PlanEvent(
            type=EventType.LINE_FILL,
            lane_type=LaneType.LINE,
            lane_id=segment.line_id,
            start=segment.start,
            end=segment.end,
            product_id=segment.product_id,
            volume_l=segment.volume_l,
            order_id=segment.order_id,
            line_id=segment.line_id,
            locked=segment.first_position,
            label=f"{segment.order_id} · {segment.product_id} · {round(segment.volume_l)}L",
        )
        for segment in segments
    ]


def plan(
    line_orders: Any,
    manual_assignments: Any = None,
    config: Union[PlanConfig, Mapping[str, Any], None] = None,
    catalog: Optional[ReactorCatalog] = None,
) -> PlanResult:
    """
    Build a reactor and filling-line plan.

    Args:
        line_orders: Mapping of line id to a list of order records, or a list
            of order records naming their line. Records may use camelCase keys
            (``orderId``, ``volumeL``, ``isIstPos1``...).
        manual_assignments: Mapping of reactor id to assignment record, or a
            list of records naming their reactor (later records win)
        config: PlanConfig, mapping of parameter overrides, or None
        catalog: Reactor fleet (defaults to the production fleet)

    Returns:
        PlanResult with canonical events, diagnostics and plan hash

    Raises:
        ValueError: If the configuration is invalid

    Example:
        >>> result = plan({"L1": [{"orderId": "A", "productId": "P1", "volumeL": 10000}]})
        >>> [e.lane_id for e in result.batches]
        ['A1']
    """
    cfg = resolve_config(config)
    fleet = catalog if catalog is not None else default_catalog()
    diagnostics: List[Diagnostic] = []

    orders, order_diags = parse_line_orders(line_orders)
    assignments, assignment_diags = parse_manual_assignments(manual_assignments)
    diagnostics.extend(order_diags)
    diagnostics.extend(assignment_diags)

    demand = build_demand_timeline(orders, cfg)
    allocator = DemandAllocator(demand, cfg.volume_epsilon_l)
    timeline = ReactorTimeline(cfg.step_min)
    logger.info(f"Planning {len(orders)} orders on {len({s.line_id for s in demand})} lines")

    events: List[PlanEvent] = line_fill_events(demand)

    manual = apply_manual_assignments(assignments, demand, fleet, timeline, allocator, cfg)
    events.extend(manual.events)
    diagnostics.extend(manual.diagnostics)

    clusters = cluster_by_product(allocator.open_segments(), cfg.cluster_gap_min)
    logger.info(f"{len(clusters)} product clusters to schedule")

    for cluster in clusters:
        outcome = schedule_cluster(cluster, allocator, timeline, fleet, cfg)
        events.extend(outcome.events)
        diagnostics.extend(outcome.diagnostics)

    canonical = canonicalize_events(events, cfg.step_min)
    diagnostics.extend(canonical.diagnostics)

    validation = validate_plan(canonical.events, cfg)
    diagnostics.extend(validation.diagnostics)

    result = PlanResult(
        events=canonical.events,
        diagnostics=diagnostics,
        ok=not has_errors(diagnostics),
        plan_hash=compute_plan_hash(canonical.events, cfg.step_min),
        demand_segments=demand,
        covered_demand_ids=set(manual.covered_demand_ids),
        lane_index=canonical.lane_index,
    )

    if result.ok:
        logger.info(str(result))
    else:
        logger.warning(str(result))
    return result
