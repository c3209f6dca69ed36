"""Demand segments and product clusters."""

from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass(frozen=True)
class DemandSegment:
    """
    Filling-line time window required to consume one order's volume.

    Segments are immutable; the volume still to be supplied during a
    planning call is tracked by the DemandAllocator.

    Attributes:
        id: Deterministic segment identifier
        line_id: Filling line
        order_id: Order the segment fills
        order_index: Position of the order on its line
        product_id: Product filled
        volume_l: Order volume (litres)
        start: Fill start (minutes from plan origin)
        end: Fill end (minutes from plan origin)
        first_position: Order was flagged as already running
    """
    id: str
    line_id: str
    order_id: str
    order_index: int
    product_id: str
    volume_l: float
    start: float
    end: float
    first_position: bool = False

    @property
    def duration(self) -> float:
        return self.end - self.start

    def time_at_volume(self, filled_l: float) -> float:
        """Time at which ``filled_l`` litres of this segment have been filled."""
        if self.volume_l <= 0:
            return self.start
        return self.start + self.duration * (filled_l / self.volume_l)

    def __str__(self) -> str:
        return (
            f"{self.line_id} {self.order_id}: {self.volume_l:.0f} L {self.product_id} "
            f"[{self.start:.1f}-{self.end:.1f}]"
        )


@dataclass
class ProductCluster:
    """
    Time-contiguous group of same-product demand segments batched together.

    Attributes:
        id: Deterministic cluster identifier
        product_id: Product of every member
        segments: Member segments in chronological order
        start: Earliest member start
        end: Latest member end
        total_volume_l: Summed member volume
    """
    id: str
    product_id: str
    segments: List[DemandSegment] = field(default_factory=list)
    start: float = 0.0
    end: float = 0.0
    total_volume_l: float = 0.0

    def add(self, segment: DemandSegment) -> None:
        """Add a segment and extend the cluster span."""
        if not self.segments:
            self.start = segment.start
            self.end = segment.end
        else:
            self.start = min(self.start, segment.start)
            self.end = max(self.end, segment.end)
        self.segments.append(segment)
        self.total_volume_l += segment.volume_l

    @property
    def segment_ids(self) -> Tuple[str, ...]:
        return tuple(s.id for s in self.segments)

    def __str__(self) -> str:
        return (
            f"Cluster {self.id}: {len(self.segments)} segments, "
            f"{self.total_volume_l:.0f} L [{self.start:.1f}-{self.end:.1f}]"
        )
