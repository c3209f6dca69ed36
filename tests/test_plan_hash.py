"""Tests for the plan fingerprint."""

import re

from reactor_planning.utils.hashing import canonical_json, fnv1a32, hex32
from reactor_planning.validation import compute_plan_hash

EVENTS = [
    {"type": "rwBatch", "laneId": "RW09", "start": 0, "end": 98, "productId": "P1", "volumeL": 3000},
    {"type": "lineFill", "laneId": "L1", "start": 0, "end": 100, "orderId": "A", "volumeL": 3000},
]


class TestComputePlanHash:
    """Tests for compute_plan_hash."""

    def test_format(self):
        assert re.fullmatch(r"[0-9a-f]{8}", compute_plan_hash(EVENTS))

    def test_empty_plan(self):
        assert compute_plan_hash([]) == hex32(fnv1a32(canonical_json([])))
        assert compute_plan_hash(None) == compute_plan_hash([])

    def test_order_independent(self):
        assert compute_plan_hash(EVENTS) == compute_plan_hash(list(reversed(EVENTS)))

    def test_raw_noise_within_step(self):
        """Test that raw times landing on the same grid cells give the same hash."""
        noisy = [dict(EVENTS[0], start=1.5, end=96.2), EVENTS[1]]

        assert compute_plan_hash(noisy) == compute_plan_hash(EVENTS)

    def test_content_changes_hash(self):
        changed = [dict(EVENTS[0], volumeL=3001), EVENTS[1]]

        assert compute_plan_hash(changed) != compute_plan_hash(EVENTS)

    def test_lane_changes_hash(self):
        moved = [dict(EVENTS[0], laneId="RW10"), EVENTS[1]]

        assert compute_plan_hash(moved) != compute_plan_hash(EVENTS)

    def test_other_event_types_change_hash(self):
        """Test that a cleaning window on a reactor is part of the fingerprint."""
        cleaning = {"type": "cleaning", "lane": "A1", "start": 50, "end": 80}

        assert compute_plan_hash(EVENTS + [cleaning]) != compute_plan_hash(EVENTS)

    def test_single_reason_string_kept(self):
        """Test that an event with a plain-string reason is not dropped."""
        fallback = {"type": "ibcBatch", "start": 120, "end": 132, "volumeL": 900, "reason": "CLUSTER_FALLBACK"}

        assert compute_plan_hash(EVENTS + [fallback]) != compute_plan_hash(EVENTS)
