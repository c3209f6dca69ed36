"""IBC fallback for clusters that cannot be fed directly from reactors.

The remaining volume is produced ahead of time into intermediate bulk
containers (IBC, 1000 L each). Each sub-batch runs on the reactor that is
free earliest: production first, then the reactor is emptied into containers
at the IBC fill rate. Sub-batches that no reactor can take become
UNSCHEDULED markers on the IBC lane.
"""

from typing import List, Optional, Tuple
import logging
import math

from ..analysis.demand_allocator import DemandAllocator
from ..config import PlanConfig
from ..models.demand import ProductCluster
from ..models.diagnostic import Diagnostic, DiagnosticCode, error
from ..models.plan_event import BatchPhases, EventType, LaneType, PlanEvent, PlanMode, TimeWindow
from ..models.reactor import ReactorCatalog
from ..utils.time_volume import duration_for_volume, max_fill_pieces, split_by_max
from .reactor_assignment import ReactorTimeline

logger = logging.getLogger(__name__)

#: Lane id of the container lane
IBC_LANE_ID = "IBC"

#: Reason attached to UNSCHEDULED markers
REASON_NO_ELIGIBLE_REACTOR = "NO_ELIGIBLE_REACTOR"


def fallback_pieces(volume_l: float, config: PlanConfig) -> List[float]:
    """
    Sub-batches for the fallback: max-fill with the tail topped up to the
    batch minimum. A volume that cannot reach the minimum stays a single
    undersized piece.
    """
    pieces = split_by_max(volume_l, config.max_batch_l, config.min_batch_l)
    if pieces is None:
        pieces = max_fill_pieces(volume_l, config.max_batch_l)
    return pieces


def container_count(volume_l: float, config: PlanConfig) -> int:
    return math.ceil(volume_l / config.ibc_container_l)


def _earliest_reactor(
    volume_l: float,
    timeline: ReactorTimeline,
    catalog: ReactorCatalog,
) -> Optional[Tuple[str, float]]:
    best: Optional[Tuple[str, float]] = None
    for reactor_id in catalog.eligible_for_volume(volume_l):
        start = timeline.next_free_start(reactor_id)
        if best is None or start < best[1]:
            best = (reactor_id, start)
    return best


def schedule_ibc_fallback(
    cluster: ProductCluster,
    allocator: DemandAllocator,
    timeline: ReactorTimeline,
    catalog: ReactorCatalog,
    config: PlanConfig,
    reason: str,
) -> Tuple[List[PlanEvent], List[Diagnostic]]:
    """
    Produce a cluster's remaining volume into IBC containers.

    For every sub-batch the demand is allocated FIFO from the cluster, then:

    - an rwBatch (mode IBC) occupies the earliest-free eligible reactor for
      PROD_TIME_MIN + volume / IBC_FILL_LPM, with production and
      container-fill phases
    - an ibcBatch on the IBC lane covers the container-fill span
    - without any eligible reactor, a zero-length UNSCHEDULED ibcBatch
      marker at the cluster start carries the consumers and an
      UNSCHEDULED_BATCH error is reported

    Args:
        cluster: Product cluster
        allocator: Call-scoped demand allocator (consumed directly)
        timeline: Call-scoped reactor occupancy (reservations are added)
        catalog: Reactor fleet
        config: Planning configuration
        reason: Why the cluster fell back (stored on the events)

    Returns:
        Tuple of (events, diagnostics)
    """
    events: List[PlanEvent] = []
    diagnostics: List[Diagnostic] = []

    residual = allocator.residual_volume(cluster.segments)
    if residual <= config.volume_epsilon_l:
        return events, diagnostics

    product_id = cluster.product_id
    for volume in fallback_pieces(residual, config):
        consumers, _ = allocator.take(cluster.segments, volume)
        ibc_count = container_count(volume, config)
        slot = _earliest_reactor(volume, timeline, catalog)

        if slot is None:
            events.append(PlanEvent(
                type=EventType.IBC_BATCH,
                lane_type=LaneType.IBC,
                lane_id=IBC_LANE_ID,
                start=cluster.start,
                end=cluster.start,
                product_id=product_id,
                volume_l=volume,
                consumers=tuple(consumers),
                mode=PlanMode.IBC,
                label=f"UNSCHEDULED · {product_id} · {round(volume)}L",
                ibc_count=ibc_count,
                reasons=(reason, REASON_NO_ELIGIBLE_REACTOR),
                unscheduled=True,
            ))
            diagnostics.append(error(
                DiagnosticCode.UNSCHEDULED_BATCH,
                f"{cluster.id}: no reactor can produce {volume:.0f} L of {product_id}",
                tuple(c.demand_id for c in consumers if c.demand_id),
                cluster_id=cluster.id,
                volume_l=volume,
            ))
            logger.error(f"{cluster.id}: {volume:.0f} L of {product_id} left unscheduled")
            continue

        reactor_id, start = slot
        production_end = start + config.prod_time_min
        end = production_end + duration_for_volume(volume, config.ibc_fill_lpm)

        timeline.reserve(reactor_id, start, end)
        events.append(PlanEvent(
            type=EventType.RW_BATCH,
            lane_type=LaneType.RW,
            lane_id=reactor_id,
            start=start,
            end=end,
            product_id=product_id,
            volume_l=volume,
            consumers=tuple(consumers),
            mode=PlanMode.IBC,
            label=f"IBC · {product_id} · {round(volume)}L",
            phases=BatchPhases(
                production=TimeWindow(start=start, end=production_end),
                ibc_filling=TimeWindow(start=production_end, end=end),
            ),
            ibc_count=ibc_count,
            reasons=(reason,),
        ))
        events.append(PlanEvent(
            type=EventType.IBC_BATCH,
            lane_type=LaneType.IBC,
            lane_id=IBC_LANE_ID,
            start=production_end,
            end=end,
            product_id=product_id,
            volume_l=volume,
            mode=PlanMode.IBC,
            label=f"IBC · {product_id} · {ibc_count}× {round(config.ibc_container_l)}L",
            ibc_count=ibc_count,
            reasons=(reason,),
            source_reactor_id=reactor_id,
        ))
        logger.info(
            f"{cluster.id}: {volume:.0f} L of {product_id} on {reactor_id} into {ibc_count} IBC "
            f"[{start:.1f}-{end:.1f}]"
        )

    return events, diagnostics
