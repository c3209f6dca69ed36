"""Tests for time, volume and quantization helpers."""

import pytest

from reactor_planning.models import Reactor, ReactorClass
from reactor_planning.utils import (
    duration_for_volume,
    make_equal_split,
    max_fill_pieces,
    quantize_times,
    split_by_max,
    volume_for_duration,
    volume_fit_penalty,
    windows_overlap,
)


class TestDurations:
    """Tests for volume/duration conversion."""

    def test_duration_for_volume(self):
        assert duration_for_volume(10000, 30) == pytest.approx(333.3333, abs=1e-3)

    def test_zero_volume_takes_no_time(self):
        assert duration_for_volume(0, 30) == 0.0
        assert duration_for_volume(-5, 30) == 0.0

    def test_volume_for_duration(self):
        assert volume_for_duration(60, 80) == 4800
        assert volume_for_duration(-1, 80) == 0.0


class TestMakeEqualSplit:
    """Tests for equal batch splitting."""

    def test_remainder_goes_to_first_batches(self):
        """Test integer remainder distribution."""
        assert make_equal_split(10000, 3) == [3334.0, 3333.0, 3333.0]

    def test_exact_split(self):
        assert make_equal_split(25000, 2) == [12500.0, 12500.0]

    def test_fractional_total_is_conserved(self):
        """Test that a fractional residue is not lost."""
        batches = make_equal_split(10000.5, 2)

        assert batches == [5000.5, 5000.0]
        assert sum(batches) == pytest.approx(10000.5)

    def test_single_batch(self):
        assert make_equal_split(900, 1) == [900.0]

    def test_invalid_count(self):
        with pytest.raises(ValueError, match="at least 1"):
            make_equal_split(1000, 0)


class TestMaxFillSplit:
    """Tests for greedy max-fill splitting."""

    def test_max_fill_pieces(self):
        assert max_fill_pieces(27000, 13000) == [13000, 13000, 1000]

    def test_tail_topped_up(self):
        """Test that an undersized tail takes volume from earlier batches."""
        assert split_by_max(14000, 13000, 1500) == [12500, 1500]

    def test_exact_multiple(self):
        assert split_by_max(26000, 13000, 1500) == [13000, 13000]

    def test_single_undersized_batch(self):
        """Test that a lone batch below the minimum cannot be repaired."""
        assert split_by_max(900, 13000, 1500) is None

    def test_tail_cannot_be_repaired(self):
        """Test that donors never drop below the minimum."""
        assert split_by_max(2500, 1600, 1500) is None


class TestVolumeFitPenalty:
    """Tests for reactor fit penalties."""

    @pytest.fixture
    def big(self):
        return Reactor(id="A1", min_l=5000, max_l=13000, reactor_class=ReactorClass.BIG)

    @pytest.fixture
    def small(self):
        return Reactor(id="RW01", min_l=700, max_l=4900, reactor_class=ReactorClass.SMALL)

    def test_waste_in_thousands(self, big, config):
        assert volume_fit_penalty(10000, big, config) == pytest.approx(3.0)

    def test_small_batch_in_big_reactor(self, big, config):
        assert volume_fit_penalty(6000, big, config) == 10

    def test_large_batch_in_small_reactor(self, config):
        reactor = Reactor(id="RW05", min_l=2000, max_l=7500, reactor_class=ReactorClass.SMALL)

        assert volume_fit_penalty(7600, reactor, config) == 10

    def test_tight_fit(self, small, config):
        assert volume_fit_penalty(3000, small, config) == pytest.approx(1.9)


class TestQuantization:
    """Tests for snapping windows onto the step grid."""

    def test_negative_start_clamped(self):
        assert quantize_times(-120, 333.33, 5) == (0.0, 335.0)

    def test_start_floored_end_ceiled(self):
        assert quantize_times(12, 61, 5) == (10.0, 65.0)

    def test_minimum_one_step(self):
        """Test that zero-length windows last one step."""
        assert quantize_times(10, 10, 5) == (10.0, 15.0)

    def test_short_window_inside_a_step(self):
        assert quantize_times(7, 8, 5) == (5.0, 15.0)

    def test_missing_times(self):
        assert quantize_times(None, None, 5) == (0.0, 5.0)

    def test_on_grid_is_stable(self):
        """Test that quantized windows quantize to themselves."""
        q = quantize_times(12, 61, 5)
        assert quantize_times(*q, 5) == q


class TestWindowsOverlap:
    """Tests for half-open overlap."""

    def test_touching_windows_do_not_overlap(self):
        assert not windows_overlap(0, 10, 10, 20)

    def test_overlap(self):
        assert windows_overlap(0, 10, 5, 20)

    def test_nested(self):
        assert windows_overlap(0, 100, 20, 30)
