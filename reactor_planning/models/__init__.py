"""Data models for the reactor planning engine."""

from .reactor import Reactor, ReactorClass, ReactorCatalog, default_catalog, DEFAULT_FLEET
from .order import LineOrder, ManualAssignment
from .demand import DemandSegment, ProductCluster
from .plan_event import (
    BatchPhases,
    Consumer,
    EventType,
    LaneType,
    PlanEvent,
    PlanMode,
    TimeWindow,
)
from .diagnostic import Diagnostic, DiagnosticCode, DiagnosticSeverity

__all__ = [
    # Fleet
    "Reactor",
    "ReactorClass",
    "ReactorCatalog",
    "default_catalog",
    "DEFAULT_FLEET",
    # Inputs
    "LineOrder",
    "ManualAssignment",
    # Demand
    "DemandSegment",
    "ProductCluster",
    # Events
    "BatchPhases",
    "Consumer",
    "EventType",
    "LaneType",
    "PlanEvent",
    "PlanMode",
    "TimeWindow",
    # Diagnostics
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticSeverity",
]
