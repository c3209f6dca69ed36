"""Canonicalization, validation and hashing of plan events."""

from .canonicalizer import (
    CanonicalPlan,
    canonical_lane,
    canonicalize_event,
    canonicalize_events,
    index_by_lane,
    sort_canonical,
)
from .plan_validator import ValidationResult, validate_plan
from .plan_hash import compute_plan_hash

__all__ = [
    # Canonicalization
    'CanonicalPlan',
    'canonical_lane',
    'canonicalize_event',
    'canonicalize_events',
    'index_by_lane',
    'sort_canonical',
    # Validation
    'ValidationResult',
    'validate_plan',
    # Hashing
    'compute_plan_hash',
]
