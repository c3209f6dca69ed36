"""Tests for the FIFO demand allocator."""

import pytest

from reactor_planning.analysis import DemandAllocator


@pytest.fixture
def segments(make_segment):
    """Two 3000 L segments back to back on L1: [0, 100] and [100, 200]."""
    return [make_segment("A", 3000, 0.0), make_segment("B", 3000, 100.0, index=1)]


class TestDemandAllocator:
    """Tests for DemandAllocator."""

    def test_take_spans_segments(self, segments):
        """Test that one batch may supply several segments in FIFO order."""
        allocator = DemandAllocator(segments)
        consumers, shortfall = allocator.take(segments, 4500)

        assert shortfall == 0.0
        assert [(c.order_id, c.volume_l) for c in consumers] == [("A", 3000), ("B", 1500)]
        assert (consumers[0].start, consumers[0].end) == (0.0, 100.0)
        assert (consumers[1].start, consumers[1].end) == (100.0, 150.0)
        assert allocator.is_exhausted("L1:0:A")
        assert allocator.remaining("L1:1:B") == 1500

    def test_segment_shared_by_batches(self, segments):
        """Test that the next batch continues where the previous one stopped."""
        allocator = DemandAllocator(segments)
        allocator.take(segments, 4500)
        consumers, _ = allocator.take(segments, 1500)

        assert len(consumers) == 1
        assert (consumers[0].start, consumers[0].end) == (150.0, 200.0)
        assert allocator.residual_volume(segments) == 0

    def test_shortfall(self, segments):
        """Test that missing volume is reported."""
        allocator = DemandAllocator(segments)
        consumers, shortfall = allocator.take(segments, 7000)

        assert sum(c.volume_l for c in consumers) == 6000
        assert shortfall == 1000

    def test_fork_is_independent(self, segments):
        """Test that a failed attempt leaves no trace."""
        allocator = DemandAllocator(segments)
        attempt = allocator.fork()
        attempt.take(segments, 5000)

        assert allocator.residual_volume(segments) == 6000
        assert attempt.residual_volume(segments) == 1000

    def test_commit(self, segments):
        """Test that a committed attempt becomes the allocator state."""
        allocator = DemandAllocator(segments)
        attempt = allocator.fork()
        attempt.take(segments, 5000)
        allocator.commit(attempt)

        assert allocator.allocated("L1:0:A") == 3000
        assert allocator.allocated("L1:1:B") == 2000

    def test_open_segments_chronological(self, segments):
        """Test that open segments are returned earliest first."""
        allocator = DemandAllocator(list(reversed(segments)))
        allocator.take([segments[0]], 3000)

        assert [s.order_id for s in allocator.open_segments()] == ["B"]

    def test_consume_all(self, segments):
        """Test allocating a whole segment at once."""
        allocator = DemandAllocator(segments)
        consumer = allocator.consume_all(segments[1])

        assert consumer.volume_l == 3000
        assert (consumer.start, consumer.end) == (100.0, 200.0)
        assert allocator.is_exhausted("L1:1:B")

    def test_input_segments_untouched(self, segments):
        """Test that segments themselves are never mutated."""
        allocator = DemandAllocator(segments)
        allocator.take(segments, 6000)

        assert [s.volume_l for s in segments] == [3000, 3000]
