"""Tabular views of a plan.

Hosting services (dashboards, exports) work with DataFrames; these helpers
flatten canonical events into pandas tables.
"""

from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from ..models.plan_event import PlanEvent
from ..models.reactor import ReactorCatalog

EVENT_COLUMNS = [
    'id', 'type', 'lane_type', 'lane_id', 'start', 'end', 'q_start', 'q_end',
    'product_id', 'volume_l', 'mode', 'locked', 'consumer_count', 'ibc_count',
    'unscheduled', 'label',
]

CONSUMER_COLUMNS = [
    'event_id', 'lane_id', 'demand_id', 'line_id', 'order_id',
    'start', 'end', 'q_start', 'q_end', 'volume_l',
]

UTILIZATION_COLUMNS = [
    'reactor_id', 'batches', 'volume_l', 'busy_min', 'first_start', 'last_end', 'utilization',
]


def _enum_value(value: Any) -> Any:
    return getattr(value, 'value', value)


def events_to_dataframe(events: Iterable[PlanEvent]) -> pd.DataFrame:
    """
    One row per event.

    Args:
        events: Plan events (canonical events have q-times and ids)

    Returns:
        DataFrame with EVENT_COLUMNS
    """
    rows: List[Dict[str, Any]] = []
    for event in events:
        rows.append({
            'id': event.id,
            'type': _enum_value(event.type),
            'lane_type': _enum_value(event.lane_type),
            'lane_id': event.lane_id,
            'start': event.start,
            'end': event.end,
            'q_start': event.q_start,
            'q_end': event.q_end,
            'product_id': event.product_id,
            'volume_l': event.volume_l,
            'mode': _enum_value(event.mode),
            'locked': event.locked,
            'consumer_count': len(event.consumers),
            'ibc_count': event.ibc_count,
            'unscheduled': event.unscheduled,
            'label': event.label,
        })
    return pd.DataFrame(rows, columns=EVENT_COLUMNS)


def consumers_to_dataframe(events: Iterable[PlanEvent]) -> pd.DataFrame:
    """One row per consumer of every event (demand supplied by each batch)."""
    rows: List[Dict[str, Any]] = []
    for event in events:
        for consumer in event.consumers:
            rows.append({
                'event_id': event.id,
                'lane_id': event.lane_id,
                'demand_id': consumer.demand_id,
                'line_id': consumer.line_id,
                'order_id': consumer.order_id,
                'start': consumer.start,
                'end': consumer.end,
                'q_start': consumer.q_start,
                'q_end': consumer.q_end,
                'volume_l': consumer.volume_l,
            })
    return pd.DataFrame(rows, columns=CONSUMER_COLUMNS)


def reactor_utilization(
    events: Iterable[PlanEvent],
    catalog: Optional[ReactorCatalog] = None,
    horizon_min: Optional[float] = None,
) -> pd.DataFrame:
    """
    Busy time and volume per reactor.

    Busy time is measured on the quantized windows of reactor-lane events.
    Reactors of the catalog without any event are listed with zero load.

    Args:
        events: Canonical plan events
        catalog: Fleet whose idle reactors should be included
        horizon_min: Planning horizon for the utilization ratio (defaults to
            the latest q_end of any event)

    Returns:
        DataFrame with UTILIZATION_COLUMNS, one row per reactor, sorted by id
    """
    events = list(events)
    df = events_to_dataframe(e for e in events if e.is_reactor_occupying)

    if horizon_min is None:
        ends = [e.q_end for e in events if e.q_end is not None]
        horizon_min = max(ends) if ends else 0.0

    if df.empty:
        table = pd.DataFrame(columns=UTILIZATION_COLUMNS[:-1])
    else:
        df['busy_min'] = df['q_end'] - df['q_start']
        table = (
            df.groupby('lane_id')
            .agg(
                batches=('id', 'count'),
                volume_l=('volume_l', 'sum'),
                busy_min=('busy_min', 'sum'),
                first_start=('q_start', 'min'),
                last_end=('q_end', 'max'),
            )
            .reset_index()
            .rename(columns={'lane_id': 'reactor_id'})
        )

    if catalog is not None:
        planned = set(table['reactor_id'])
        idle = [rid for rid in catalog.reactor_ids if rid not in planned]
        if idle:
            zeros = pd.DataFrame({
                'reactor_id': idle,
                'batches': 0,
                'volume_l': 0.0,
                'busy_min': 0.0,
                'first_start': float('nan'),
                'last_end': float('nan'),
            })
            table = zeros if table.empty else pd.concat([table, zeros], ignore_index=True)

    if horizon_min > 0:
        table['utilization'] = table['busy_min'].astype(float) / horizon_min
    else:
        table['utilization'] = 0.0

    return table.sort_values('reactor_id').reset_index(drop=True)[UTILIZATION_COLUMNS]
