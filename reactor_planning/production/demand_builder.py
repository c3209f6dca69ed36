"""Demand timeline construction.

Turns the order queue of every filling line into demand segments: the time
window during which the line fills each order.
"""

from collections import defaultdict
from typing import Dict, Iterable, List
import logging

from ..config import PlanConfig
from ..models.demand import DemandSegment
from ..models.order import LineOrder
from ..utils.time_volume import duration_for_volume

logger = logging.getLogger(__name__)


def segment_id(order: LineOrder) -> str:
    """Deterministic demand segment id."""
    return f"{order.line_id}:{order.order_index}:{order.order_id}"


def build_demand_timeline(orders: Iterable[LineOrder], config: PlanConfig) -> List[DemandSegment]:
    """
    Build demand segments for all lines.

    Each line is walked in order-index order with a cursor starting at 0.
    A normal order starts at the cursor and lasts volume / line rate; the
    cursor then moves to its end. An order flagged as first-position
    override is already running and starts at 0; the cursor moves to
    ``max(cursor, end)`` so following orders queue behind it and the cursor
    never moves backwards.

    Args:
        orders: Validated line orders (any order)
        config: Planning configuration (line rate)

    Returns:
        Demand segments grouped by line (sorted line ids), in queue order
    """
    by_line: Dict[str, List[LineOrder]] = defaultdict(list)
    for order in orders:
        by_line[order.line_id].append(order)

    segments: List[DemandSegment] = []
    for line_id in sorted(by_line):
        queue = sorted(by_line[line_id], key=lambda o: (o.order_index, o.order_id))
        cursor = 0.0

        for order in queue:
            duration = duration_for_volume(order.volume_l, config.line_rate_lpm)
            start = 0.0 if order.first_position_override else cursor
            end = start + duration

            segments.append(DemandSegment(
                id=segment_id(order),
                line_id=order.line_id,
                order_id=order.order_id,
                order_index=order.order_index,
                product_id=order.product_id,
                volume_l=order.volume_l,
                start=start,
                end=end,
                first_position=order.first_position_override,
            ))

            cursor = max(cursor, end)

        logger.debug(f"Line {line_id}: {len(queue)} orders, busy until {cursor:.1f} min")

    return segments
