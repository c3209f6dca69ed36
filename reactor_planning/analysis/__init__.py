"""Analysis tools for plans.

- Call-scoped FIFO demand allocation
- pandas tables of events, consumers and reactor utilization
"""

from .demand_allocator import DemandAllocator
from .plan_summary import (
    events_to_dataframe,
    consumers_to_dataframe,
    reactor_utilization,
)

__all__ = [
    "DemandAllocator",
    "events_to_dataframe",
    "consumers_to_dataframe",
    "reactor_utilization",
]
