"""Deterministic plan fingerprint."""

from typing import Any

from ..constants import STEP_MIN
from ..utils.hashing import canonical_json, fnv1a32, hex32
from .canonicalizer import canonicalize_events, event_payload


def compute_plan_hash(events: Any, step_min: float = STEP_MIN) -> str:
    """
    32-bit FNV-1a fingerprint of a plan.

    The events are canonicalized first, so the hash does not depend on the
    order in which they were generated or on raw time noise inside one
    quantization step.

    Args:
        events: PlanEvent objects and/or raw event mappings
        step_min: Quantization step in minutes

    Returns:
        Hash as 8 lowercase hex digits

    Example:
        >>> compute_plan_hash([]) == compute_plan_hash(None)
        True
    """
    canonical = canonicalize_events(events, step_min)
    payload = [dict(event_payload(e), id=e.id) for e in canonical.events]
    return hex32(fnv1a32(canonical_json(payload)))
