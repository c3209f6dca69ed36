"""Manual (IST) reactor assignments.

Operators lock reactors to orders that are already in production. Each
locked assignment becomes a fixed reactor batch from t=0 until its order has
been filled, and the order's demand is removed from automatic planning.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Set
import logging
import math

from ..analysis.demand_allocator import DemandAllocator
from ..config import PlanConfig
from ..models.demand import DemandSegment
from ..models.diagnostic import Diagnostic, DiagnosticCode, warning
from ..models.order import ManualAssignment
from ..models.plan_event import BatchPhases, EventType, LaneType, PlanEvent, PlanMode, TimeWindow
from ..models.reactor import ReactorCatalog
from .reactor_assignment import ReactorTimeline

logger = logging.getLogger(__name__)


@dataclass
class ManualAssignmentResult:
    """
    Outcome of applying manual assignments.

    Attributes:
        events: Locked reactor batches
        covered_demand_ids: Demand segments supplied by the locked batches
        diagnostics: Skipped or adjusted assignments
    """
    events: List[PlanEvent] = field(default_factory=list)
    covered_demand_ids: Set[str] = field(default_factory=set)
    diagnostics: List[Diagnostic] = field(default_factory=list)


def apply_manual_assignments(
    assignments: Mapping[str, ManualAssignment],
    demand: Sequence[DemandSegment],
    catalog: ReactorCatalog,
    timeline: ReactorTimeline,
    allocator: DemandAllocator,
    config: PlanConfig,
) -> ManualAssignmentResult:
    """
    Convert locked assignments into fixed reactor batches.

    Reactors are processed in sorted id order. For each locked assignment the
    first-position demand segment of the assigned order is looked up; if it
    does not exist the assignment is skipped with a diagnostic. Otherwise a
    locked IST batch spanning [0, segment end) is reserved on the reactor,
    the whole segment becomes its only consumer and the segment is covered.

    Args:
        assignments: Reactor id -> assignment
        demand: All demand segments
        catalog: Reactor fleet
        timeline: Reactor occupancy (reservations are added)
        allocator: Demand allocator (covered segments are consumed)
        config: Planning configuration

    Returns:
        ManualAssignmentResult
    """
    result = ManualAssignmentResult()

    first_position: Dict[str, DemandSegment] = {}
    for segment in demand:
        if segment.first_position and segment.order_id not in first_position:
            first_position[segment.order_id] = segment

    for reactor_id in sorted(assignments):
        assignment = assignments[reactor_id]

        if not assignment.locked:
            logger.debug(f"Reactor {reactor_id}: unlocked assignment for {assignment.order_id} ignored")
            continue

        if reactor_id not in catalog:
            result.diagnostics.append(warning(
                DiagnosticCode.UNKNOWN_REACTOR,
                f"Manual assignment references unknown reactor {reactor_id}",
                (reactor_id, assignment.order_id),
            ))
            continue

        segment = first_position.get(assignment.order_id)
        if segment is None:
            result.diagnostics.append(warning(
                DiagnosticCode.MANUAL_ASSIGNMENT_UNMATCHED,
                f"Reactor {reactor_id}: no first-position demand for order {assignment.order_id}",
                (reactor_id, assignment.order_id),
            ))
            continue

        if segment.id in result.covered_demand_ids:
            result.diagnostics.append(warning(
                DiagnosticCode.MANUAL_ASSIGNMENT_DUPLICATE,
                f"Reactor {reactor_id}: order {assignment.order_id} is already locked to another reactor",
                (reactor_id, assignment.order_id, segment.id),
            ))
            continue

        if assignment.volume_l is not None and not math.isclose(
            assignment.volume_l, segment.volume_l, abs_tol=config.volume_epsilon_l
        ):
            result.diagnostics.append(warning(
                DiagnosticCode.MANUAL_VOLUME_MISMATCH,
                f"Reactor {reactor_id}: assigned {assignment.volume_l:.0f} L but order "
                f"{assignment.order_id} needs {segment.volume_l:.0f} L; using the order volume",
                (reactor_id, assignment.order_id),
                assigned_volume_l=assignment.volume_l,
                order_volume_l=segment.volume_l,
            ))

        product_id = assignment.product_id or segment.product_id
        consumer = allocator.consume_all(segment)
        start, end = 0.0, segment.end

        event = PlanEvent(
            type=EventType.RW_BATCH,
            lane_type=LaneType.RW,
            lane_id=reactor_id,
            start=start,
            end=end,
            product_id=product_id,
            volume_l=segment.volume_l,
            consumers=(consumer,),
            locked=True,
            mode=PlanMode.IST,
            label=f"IST · {product_id} · {round(segment.volume_l)}L",
            phases=BatchPhases(production=TimeWindow(start=start, end=start)),
        )
        timeline.reserve(reactor_id, start, end)
        result.events.append(event)
        result.covered_demand_ids.add(segment.id)
        logger.info(f"Reactor {reactor_id} locked to order {assignment.order_id} until {end:.1f} min")

    return result
