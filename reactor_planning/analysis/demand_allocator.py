"""FIFO demand allocator.

Tracks the volume still to be supplied for every demand segment during one
planning call and hands it out to batches in chronological order. Input
segments are never mutated; scheduling attempts work on a fork and only a
successful attempt is committed back.
"""

from typing import Dict, Iterable, List, Sequence, Tuple

from ..constants import VOLUME_EPSILON_L
from ..models.demand import DemandSegment
from ..models.plan_event import Consumer


class DemandAllocator:
    """
    Allocates demand-segment volume to batches (segment id -> remaining litres).

    Example:
        >>> allocator = DemandAllocator(segments)
        >>> attempt = allocator.fork()
        >>> consumers, shortfall = attempt.take(cluster.segments, 5000)
        >>> allocator.commit(attempt)
    """

    def __init__(self, segments: Iterable[DemandSegment], epsilon: float = VOLUME_EPSILON_L):
        """
        Initialize allocator with every segment fully open.

        Args:
            segments: Demand segments of the planning call
            epsilon: Volumes at or below this are treated as exhausted
        """
        self.epsilon = epsilon
        self._segments: Dict[str, DemandSegment] = {}
        self._remaining: Dict[str, float] = {}
        for segment in segments:
            self._segments[segment.id] = segment
            self._remaining[segment.id] = segment.volume_l

    def remaining(self, segment_id: str) -> float:
        return self._remaining[segment_id]

    def allocated(self, segment_id: str) -> float:
        return self._segments[segment_id].volume_l - self._remaining[segment_id]

    def is_exhausted(self, segment_id: str) -> bool:
        return self._remaining[segment_id] <= self.epsilon

    def residual_volume(self, segments: Iterable[DemandSegment]) -> float:
        """Total volume not yet allocated across the given segments."""
        return sum(self._remaining[s.id] for s in segments if self._remaining[s.id] > self.epsilon)

    def open_segments(self) -> List[DemandSegment]:
        """Segments with volume left, in chronological order."""
        open_ = [s for s in self._segments.values() if self._remaining[s.id] > self.epsilon]
        return sorted(open_, key=lambda s: (s.start, s.id))

    def take(self, segments: Sequence[DemandSegment], volume_l: float) -> Tuple[List[Consumer], float]:
        """
        Allocate ``volume_l`` from the segments in the given (chronological) order.

        A batch may span several segments and a segment may be shared by
        several batches. Each consumer covers the part of the segment's fill
        span that its litres occupy.

        Args:
            segments: Candidate segments, earliest first
            volume_l: Volume to allocate

        Returns:
            Tuple of (consumers, shortfall); shortfall is 0 when the full
            volume was allocated
        """
        need = volume_l
        consumers: List[Consumer] = []

        for segment in segments:
            if need <= self.epsilon:
                break
            remaining = self._remaining[segment.id]
            if remaining <= self.epsilon:
                continue

            take = min(need, remaining)
            filled_before = segment.volume_l - remaining
            consumers.append(Consumer(
                demand_id=segment.id,
                line_id=segment.line_id,
                order_id=segment.order_id,
                start=segment.time_at_volume(filled_before),
                end=segment.time_at_volume(filled_before + take),
                volume_l=take,
            ))

            left = remaining - take
            self._remaining[segment.id] = left if left > self.epsilon else 0.0
            need -= take

        shortfall = need if need > self.epsilon else 0.0
        return consumers, shortfall

    def consume_all(self, segment: DemandSegment) -> Consumer:
        """Allocate the whole remaining volume of one segment."""
        consumers, _ = self.take([segment], self._remaining[segment.id])
        if consumers:
            return consumers[0]
        return Consumer(
            demand_id=segment.id,
            line_id=segment.line_id,
            order_id=segment.order_id,
            start=segment.start,
            end=segment.end,
            volume_l=0.0,
        )

    def fork(self) -> 'DemandAllocator':
        """Independent copy for a tentative scheduling attempt."""
        clone = DemandAllocator((), epsilon=self.epsilon)
        clone._segments = self._segments
        clone._remaining = dict(self._remaining)
        return clone

    def commit(self, attempt: 'DemandAllocator') -> None:
        """Adopt the allocation state of a successful attempt."""
        self._remaining = dict(attempt._remaining)

    def __repr__(self) -> str:
        open_count = sum(1 for v in self._remaining.values() if v > self.epsilon)
        return f"DemandAllocator({len(self._remaining)} segments, {open_count} open)"
