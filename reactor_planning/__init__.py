"""Reactor batch planning engine.

Allocates capacity-bounded reactors and filling-line time to production
orders and returns a conflict-free, canonical, hashable plan.

Example:
    >>> from reactor_planning import plan
    >>> result = plan({"L1": [{"orderId": "A", "productId": "P1", "volumeL": 10000}]})
    >>> result.ok
    True
"""

from .config import PlanConfig
from .models import (
    Reactor,
    ReactorClass,
    ReactorCatalog,
    default_catalog,
    LineOrder,
    ManualAssignment,
    DemandSegment,
    PlanEvent,
    Consumer,
    EventType,
    LaneType,
    PlanMode,
    Diagnostic,
    DiagnosticCode,
    DiagnosticSeverity,
)
from .production import plan, PlanResult
from .validation import canonicalize_events, validate_plan, compute_plan_hash
from .analysis import events_to_dataframe, reactor_utilization

__version__ = "1.0.0"

__all__ = [
    # Entry point
    "plan",
    "PlanResult",
    "PlanConfig",
    # Fleet
    "Reactor",
    "ReactorClass",
    "ReactorCatalog",
    "default_catalog",
    # Inputs and events
    "LineOrder",
    "ManualAssignment",
    "DemandSegment",
    "PlanEvent",
    "Consumer",
    "EventType",
    "LaneType",
    "PlanMode",
    # Diagnostics
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticSeverity",
    # Canonical plan tools
    "canonicalize_events",
    "validate_plan",
    "compute_plan_hash",
    "events_to_dataframe",
    "reactor_utilization",
]
