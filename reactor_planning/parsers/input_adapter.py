"""Boundary adapter for planning inputs.

All heterogeneous input shapes are converted here into validated models so
the planning algorithm only ever sees canonical attribute names:

- line orders as ``{line_id: [record, ...]}`` or a flat list of records
- manual assignments as ``{reactor_id: record}`` or a list of records
- plan events as PlanEvent objects or raw mappings

Malformed records are dropped with a diagnostic instead of raising.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type
import logging

from pydantic import BaseModel, ValidationError

from ..models.diagnostic import Diagnostic, DiagnosticCode, info, warning
from ..models.order import LineOrder, ManualAssignment
from ..models.plan_event import PlanEvent

logger = logging.getLogger(__name__)


def _alias_keys(model: Type[BaseModel], field_name: str) -> Tuple[str, ...]:
    """All input keys accepted for a model field."""
    alias = model.model_fields[field_name].validation_alias
    choices = getattr(alias, 'choices', None)
    if choices:
        return tuple(str(c) for c in choices)
    return (field_name,)


def _has_any(record: Mapping[str, Any], keys: Iterable[str]) -> bool:
    return any(record.get(k) is not None for k in keys)


def _first_of(record: Mapping[str, Any], keys: Iterable[str]) -> Optional[Any]:
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


def _summarize(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get('loc', ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get('msg')))
    return "; ".join(parts)


def parse_line_orders(raw: Any) -> Tuple[List[LineOrder], List[Diagnostic]]:
    """
    Convert raw line orders into validated LineOrder records.

    Args:
        raw: Mapping of line id to a list of order records, or a list of
            order records that each name their line. Records may be mappings
            or LineOrder instances. A record without an order index gets its
            position in the line's list.

    Returns:
        Tuple of (valid orders, ingestion diagnostics)
    """
    orders: List[LineOrder] = []
    diagnostics: List[Diagnostic] = []
    if raw is None:
        return orders, diagnostics

    line_keys = _alias_keys(LineOrder, 'line_id')
    index_keys = _alias_keys(LineOrder, 'order_index')
    order_keys = _alias_keys(LineOrder, 'order_id')

    if isinstance(raw, Mapping):
        groups = [(str(line_id), records) for line_id, records in raw.items()]
    else:
        groups = [(None, raw)]

    seen = set()
    for line_id, records in groups:
        if records is None:
            continue
        if not isinstance(records, (list, tuple)):
            diagnostics.append(warning(
                DiagnosticCode.INVALID_ORDER,
                f"Orders of line {line_id} are not a list ({type(records).__name__})",
                (),
                line_id=line_id,
            ))
            continue

        for position, record in enumerate(records):
            if isinstance(record, LineOrder):
                order = record
            elif not isinstance(record, Mapping):
                diagnostics.append(warning(
                    DiagnosticCode.INVALID_ORDER,
                    f"Order record at position {position} on line {line_id} is not a mapping",
                    (),
                    line_id=line_id,
                ))
                continue
            else:
                data = dict(record)
                if line_id is not None and not _has_any(data, line_keys):
                    data['line_id'] = line_id
                if not _has_any(data, index_keys):
                    data['order_index'] = position

                try:
                    order = LineOrder.model_validate(data)
                except ValidationError as exc:
                    order_id = _first_of(data, order_keys)
                    message = f"Order {order_id} dropped: {_summarize(exc)}"
                    logger.warning(message)
                    diagnostics.append(warning(
                        DiagnosticCode.INVALID_ORDER,
                        message,
                        (str(order_id),) if order_id is not None else (),
                        line_id=_first_of(data, line_keys),
                    ))
                    continue

            # Demand segment ids are built from this key
            key = (order.line_id, order.order_index, order.order_id)
            if key in seen:
                message = (
                    f"Order {order.order_id} dropped: line {order.line_id} already has "
                    f"this order at index {order.order_index}"
                )
                logger.warning(message)
                diagnostics.append(warning(
                    DiagnosticCode.INVALID_ORDER,
                    message,
                    (order.order_id,),
                    line_id=order.line_id,
                    order_index=order.order_index,
                ))
                continue
            seen.add(key)
            orders.append(order)

    return orders, diagnostics


def parse_manual_assignments(raw: Any) -> Tuple[Dict[str, ManualAssignment], List[Diagnostic]]:
    """
    Convert raw manual assignments into one ManualAssignment per reactor.

    Args:
        raw: Mapping of reactor id to assignment record, or a list of
            records that each name their reactor. ``None`` entries clear
            nothing and are skipped. For the same reactor, later records
            replace earlier ones.

    Returns:
        Tuple of (reactor id -> assignment, ingestion diagnostics)
    """
    assignments: Dict[str, ManualAssignment] = {}
    diagnostics: List[Diagnostic] = []
    if raw is None:
        return assignments, diagnostics

    reactor_keys = _alias_keys(ManualAssignment, 'reactor_id')

    if isinstance(raw, Mapping):
        items = [(str(reactor_id), record) for reactor_id, record in raw.items()]
    elif isinstance(raw, (list, tuple)):
        items = [(None, record) for record in raw]
    else:
        diagnostics.append(warning(
            DiagnosticCode.INVALID_MANUAL_ASSIGNMENT,
            f"Manual assignments are not a mapping or list ({type(raw).__name__})",
        ))
        return assignments, diagnostics

    for reactor_id, record in items:
        if record is None:
            continue

        if isinstance(record, ManualAssignment):
            assignment = record
            if reactor_id is not None and assignment.reactor_id != reactor_id:
                assignment = assignment.model_copy(update={'reactor_id': reactor_id})
        else:
            if not isinstance(record, Mapping):
                diagnostics.append(warning(
                    DiagnosticCode.INVALID_MANUAL_ASSIGNMENT,
                    f"Manual assignment for reactor {reactor_id} is not a mapping",
                    (reactor_id,) if reactor_id else (),
                ))
                continue

            data = dict(record)
            if reactor_id is not None:
                for key in reactor_keys:
                    data.pop(key, None)
                data['reactor_id'] = reactor_id

            try:
                assignment = ManualAssignment.model_validate(data)
            except ValidationError as exc:
                rid = reactor_id or _first_of(data, reactor_keys)
                message = f"Manual assignment for reactor {rid} dropped: {_summarize(exc)}"
                logger.warning(message)
                diagnostics.append(warning(
                    DiagnosticCode.INVALID_MANUAL_ASSIGNMENT,
                    message,
                    (str(rid),) if rid is not None else (),
                ))
                continue

        if assignment.reactor_id in assignments:
            previous = assignments[assignment.reactor_id]
            diagnostics.append(info(
                DiagnosticCode.MANUAL_ASSIGNMENT_REPLACED,
                f"Reactor {assignment.reactor_id}: assignment for order {previous.order_id} "
                f"replaced by order {assignment.order_id}",
                (assignment.reactor_id, previous.order_id, assignment.order_id),
            ))
        assignments[assignment.reactor_id] = assignment

    return assignments, diagnostics


def coerce_events(raw_events: Any) -> Tuple[List[PlanEvent], List[Diagnostic]]:
    """
    Convert an event list of PlanEvent objects and/or raw mappings.

    Args:
        raw_events: Iterable of events (None is treated as empty)

    Returns:
        Tuple of (events in input order, diagnostics for dropped entries)
    """
    events: List[PlanEvent] = []
    diagnostics: List[Diagnostic] = []
    if raw_events is None:
        return events, diagnostics

    for position, raw in enumerate(raw_events):
        if isinstance(raw, PlanEvent):
            events.append(raw)
            continue
        try:
            events.append(PlanEvent.model_validate(raw))
        except ValidationError as exc:
            event_id = raw.get('id') if isinstance(raw, Mapping) else None
            diagnostics.append(warning(
                DiagnosticCode.EVENT_INVALID,
                f"Event at position {position} dropped: {_summarize(exc)}",
                (str(event_id),) if event_id else (),
                position=position,
            ))

    return events, diagnostics
