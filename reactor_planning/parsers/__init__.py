"""Input adapters for planning data."""

from .input_adapter import parse_line_orders, parse_manual_assignments, coerce_events

__all__ = ['parse_line_orders', 'parse_manual_assignments', 'coerce_events']
