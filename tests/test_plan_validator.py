"""Tests for plan validation."""

import pytest

from reactor_planning.models import DiagnosticCode
from reactor_planning.validation import validate_plan


def batch(**overrides):
    """A valid canonical reactor batch, with overrides."""
    event = {
        "id": "rwBatch_00000001",
        "type": "rwBatch",
        "laneType": "RW",
        "laneId": "RW09",
        "qStart": 0,
        "qEnd": 100,
        "productId": "P1",
        "volumeL": 5000,
        "mode": "GEPLANT",
    }
    event.update(overrides)
    return event


def codes(result):
    return [d.code for d in result.diagnostics]


class TestValidatePlan:
    """Tests for validate_plan."""

    def test_valid_plan(self):
        events = [
            batch(),
            batch(id="rwBatch_00000002", qStart=100, qEnd=200),
            {"id": "lineFill_1", "type": "lineFill", "laneType": "LINE", "laneId": "L1", "qStart": 0, "qEnd": 170},
        ]

        result = validate_plan(events)

        assert result.ok
        assert result.diagnostics == []
        assert str(result) == "Plan valid"

    def test_empty_plan(self):
        assert validate_plan([]).ok
        assert validate_plan(None).ok

    def test_q_times_off_grid(self):
        result = validate_plan([batch(qStart=3)])

        assert not result.ok
        assert codes(result) == [DiagnosticCode.QTIME_NOT_QUANTIZED]

    def test_zero_length_window(self):
        result = validate_plan([batch(qStart=10, qEnd=10)])

        assert codes(result) == [DiagnosticCode.QTIME_INVALID_RANGE]

    def test_missing_q_times(self):
        result = validate_plan([batch(qStart=None)])

        assert codes(result) == [DiagnosticCode.QTIME_MISSING]

    def test_missing_lane(self):
        result = validate_plan([batch(laneType=None)])

        assert codes(result) == [DiagnosticCode.LANE_NOT_CANONICAL]

    def test_type_on_wrong_lane(self):
        event = {"id": "lf", "type": "lineFill", "laneType": "RW", "laneId": "RW09", "qStart": 0, "qEnd": 50}

        result = validate_plan([event])

        assert codes(result) == [DiagnosticCode.TYPE_LANE_MISMATCH]

    @pytest.mark.parametrize("volume", [1000, 20000])
    def test_planned_batch_out_of_bounds(self, volume):
        result = validate_plan([batch(volumeL=volume)])

        assert codes(result) == [DiagnosticCode.BATCH_VOLUME_OUT_OF_BOUNDS]

    def test_bounds_only_for_planned_batches(self):
        """Test that IBC and locked batches may leave the batch limits."""
        events = [
            batch(volumeL=900, mode="IBC"),
            batch(id="b2", qStart=100, qEnd=200, volumeL=900, mode="IST"),
        ]

        result = validate_plan(events)

        assert result.ok

    def test_consumer_volume_mismatch(self):
        event = batch(volumeL=2000, consumers=[{"demandId": "L1:0:A", "volumeL": 1000}])

        result = validate_plan([event])

        assert codes(result) == [DiagnosticCode.CONSUMER_VOLUME_MISMATCH]
        assert result.diagnostics[0].related_ids == ("rwBatch_00000001",)

    def test_consumer_volume_within_tolerance(self):
        event = batch(volumeL=2000, consumers=[{"volumeL": 1000}, {"volumeL": 999.99995}])

        assert validate_plan([event]).ok

    def test_overlap_on_reactor_lane(self):
        events = [batch(qStart=0, qEnd=100), batch(id="rwBatch_00000002", qStart=50, qEnd=150)]

        result = validate_plan(events)

        assert codes(result) == [DiagnosticCode.LANE_OVERLAP]
        assert set(result.diagnostics[0].related_ids) == {"rwBatch_00000001", "rwBatch_00000002"}

    def test_other_event_type_occupies_reactor(self):
        """Test that a cleaning window on a reactor conflicts with a batch."""
        cleaning = {"id": "cleaning_1", "type": "cleaning", "laneType": "RW", "laneId": "RW09", "qStart": 50, "qEnd": 80}

        result = validate_plan([batch(), cleaning])

        assert codes(result) == [DiagnosticCode.LANE_OVERLAP]
        assert set(result.diagnostics[0].related_ids) == {"rwBatch_00000001", "cleaning_1"}

    def test_overlap_against_long_window(self):
        """Test that a short window after a long one is still compared with the long one."""
        events = [
            batch(id="long", qStart=0, qEnd=300),
            batch(id="short", qStart=50, qEnd=100),
            batch(id="late", qStart=200, qEnd=250),
        ]

        result = validate_plan(events)

        assert codes(result) == [DiagnosticCode.LANE_OVERLAP, DiagnosticCode.LANE_OVERLAP]

    def test_touching_windows_allowed(self):
        events = [batch(qStart=0, qEnd=100), batch(id="b2", qStart=100, qEnd=150)]

        assert validate_plan(events).ok

    def test_line_lanes_may_overlap(self):
        fill = {"type": "lineFill", "laneType": "LINE", "laneId": "L1", "qStart": 0, "qEnd": 100}

        assert validate_plan([dict(fill, id="a"), dict(fill, id="b", qStart=50, qEnd=150)]).ok

    def test_different_reactors_may_overlap(self):
        events = [batch(qStart=0, qEnd=100), batch(id="b2", laneId="RW10", qStart=50, qEnd=150)]

        assert validate_plan(events).ok

    def test_garbage_never_raises(self):
        result = validate_plan([{"type": 5}, 42])

        assert not result.ok
        assert codes(result) == [DiagnosticCode.EVENT_INVALID, DiagnosticCode.EVENT_INVALID]
        assert all(d.is_error for d in result.diagnostics)
        assert result.error_count == 2

    def test_config_override(self):
        """Test that the batch limits follow the configuration."""
        result = validate_plan([batch(volumeL=14000)], {"MAX_BATCH_L": 15000})

        assert result.ok
