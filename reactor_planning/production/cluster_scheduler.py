"""Scheduling of one product cluster onto reactors.

Split candidates are tried best-first. Each attempt works on a forked
allocator and reactor timeline, so a candidate that cannot be placed leaves
no trace. The first candidate whose batches all find a free reactor is
committed. If none can be placed, the cluster's remaining volume goes to the
IBC fallback.
"""

from dataclasses import dataclass, field
from typing import List, Optional
import logging

from ..analysis.demand_allocator import DemandAllocator
from ..config import PlanConfig
from ..models.demand import ProductCluster
from ..models.diagnostic import Diagnostic, DiagnosticCode, warning
from ..models.plan_event import BatchPhases, EventType, LaneType, PlanEvent, PlanMode, TimeWindow
from ..models.reactor import ReactorCatalog
from .ibc_fallback import schedule_ibc_fallback
from .reactor_assignment import ReactorTimeline, choose_reactor
from .split_candidates import SplitCandidate, generate_split_candidates

logger = logging.getLogger(__name__)

#: Reasons attached to fallback events
REASON_NO_SPLIT = "NO_FEASIBLE_SPLIT"
REASON_NO_REACTOR_WINDOW = "NO_REACTOR_WINDOW"


@dataclass
class ClusterSchedule:
    """
    Outcome of scheduling one cluster.

    Attributes:
        cluster_id: Scheduled cluster
        events: Reactor batches (and IBC events on fallback)
        diagnostics: Fallback and unscheduled diagnostics
        candidate: Committed split candidate (None on fallback)
        used_fallback: True if the IBC fallback was used
    """
    cluster_id: str
    events: List[PlanEvent] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    candidate: Optional[SplitCandidate] = None
    used_fallback: bool = False


def _try_candidate(
    cluster: ProductCluster,
    candidate: SplitCandidate,
    allocator: DemandAllocator,
    timeline: ReactorTimeline,
    catalog: ReactorCatalog,
    config: PlanConfig,
) -> Optional[List[PlanEvent]]:
    """Place every batch of a candidate; None if any batch cannot be placed."""
    events: List[PlanEvent] = []

    for index, volume in enumerate(candidate.batches):
        consumers, shortfall = allocator.take(cluster.segments, volume)
        if not consumers or shortfall > 0:
            logger.debug(f"{cluster.id}: batch {index + 1} of {candidate.n} lacks demand ({shortfall:.1f} L short)")
            return None

        # Consumers on several lines run in parallel
        first_start = min(c.start for c in consumers)
        start = max(0.0, first_start - config.prod_time_min)
        end = max(c.end for c in consumers)

        choice = choose_reactor(
            volume,
            catalog.eligible_for_volume(volume),
            start,
            end,
            timeline,
            catalog,
            config,
        )
        if choice is None:
            logger.debug(f"{cluster.id}: no reactor for batch {index + 1} of {candidate.n} ({volume:.0f} L)")
            return None

        timeline.reserve(choice.reactor_id, start, end)
        events.append(PlanEvent(
            type=EventType.RW_BATCH,
            lane_type=LaneType.RW,
            lane_id=choice.reactor_id,
            start=start,
            end=end,
            product_id=cluster.product_id,
            volume_l=volume,
            consumers=tuple(consumers),
            mode=PlanMode.GEPLANT,
            label=f"GEPLANT · {cluster.product_id} · {round(volume)}L",
            phases=BatchPhases(production=TimeWindow(start=start, end=first_start)),
        ))

    return events


def schedule_cluster(
    cluster: ProductCluster,
    allocator: DemandAllocator,
    timeline: ReactorTimeline,
    catalog: ReactorCatalog,
    config: PlanConfig,
) -> ClusterSchedule:
    """
    Schedule a cluster's remaining demand.

    Args:
        cluster: Product cluster
        allocator: Call-scoped demand allocator (updated on commit)
        timeline: Call-scoped reactor occupancy (updated on commit)
        catalog: Reactor fleet
        config: Planning configuration

    Returns:
        ClusterSchedule with the committed batches, or the IBC fallback
        events and diagnostics
    """
    outcome = ClusterSchedule(cluster_id=cluster.id)
    residual = allocator.residual_volume(cluster.segments)
    if residual <= config.volume_epsilon_l:
        return outcome

    candidates = generate_split_candidates(residual, catalog, config)
    if not candidates:
        outcome.diagnostics.append(warning(
            DiagnosticCode.NO_SPLIT_CANDIDATE,
            f"{cluster.id}: no feasible batch split for {residual:.0f} L of {cluster.product_id}",
            cluster.segment_ids,
            cluster_id=cluster.id,
            volume_l=residual,
        ))
        reason = REASON_NO_SPLIT
    else:
        for rank, candidate in enumerate(candidates, start=1):
            attempt_allocator = allocator.fork()
            attempt_timeline = timeline.fork()

            events = _try_candidate(cluster, candidate, attempt_allocator, attempt_timeline, catalog, config)
            if events is None:
                continue

            allocator.commit(attempt_allocator)
            timeline.commit(attempt_timeline)
            outcome.events = events
            outcome.candidate = candidate
            logger.info(
                f"{cluster.id}: {residual:.0f} L {cluster.product_id} planned as {candidate} "
                f"(candidate {rank}/{len(candidates)})"
            )
            return outcome
        reason = REASON_NO_REACTOR_WINDOW

    logger.warning(f"{cluster.id}: {residual:.0f} L {cluster.product_id} routed to IBC fallback ({reason})")
    outcome.used_fallback = True
    outcome.diagnostics.append(warning(
        DiagnosticCode.CLUSTER_IBC_FALLBACK,
        f"{cluster.id}: {residual:.0f} L of {cluster.product_id} produced into IBC containers",
        cluster.segment_ids,
        cluster_id=cluster.id,
        reason=reason,
        volume_l=residual,
    ))

    events, diagnostics = schedule_ibc_fallback(cluster, allocator, timeline, catalog, config, reason)
    outcome.events.extend(events)
    outcome.diagnostics.extend(diagnostics)
    return outcome
