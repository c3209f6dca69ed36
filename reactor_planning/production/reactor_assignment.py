"""Reactor occupancy tracking and reactor selection for batches.

Reactor windows are compared on the quantized grid, the same one the
canonicalizer and validator use, so a plan that is conflict-free here stays
conflict-free after canonicalization.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from ..config import PlanConfig
from ..models.reactor import ReactorCatalog
from ..utils.time_volume import quantize_times, volume_fit_penalty, windows_overlap

logger = logging.getLogger(__name__)


class ReactorTimeline:
    """
    Committed occupancy windows per reactor for one planning call.

    Example:
        >>> timeline = ReactorTimeline(step=5)
        >>> timeline.reserve("RW09", 0, 333.3)
        >>> timeline.is_free("RW09", 330, 400)
        False
    """

    def __init__(self, step: float):
        self.step = step
        self._windows: Dict[str, List[Tuple[float, float]]] = {}
        self._last_end: Dict[str, float] = {}

    def reserve(self, reactor_id: str, start: float, end: float) -> None:
        """Record an occupancy window (raw minutes) on a reactor."""
        q_start, q_end = quantize_times(start, end, self.step)
        self._windows.setdefault(reactor_id, []).append((q_start, q_end))
        self._last_end[reactor_id] = max(self._last_end.get(reactor_id, 0.0), end)

    def is_free(self, reactor_id: str, start: float, end: float) -> bool:
        """True if the quantized window does not overlap any reservation."""
        q_start, q_end = quantize_times(start, end, self.step)
        return not any(
            windows_overlap(q_start, q_end, s, e) for s, e in self._windows.get(reactor_id, ())
        )

    def last_end(self, reactor_id: str) -> float:
        """Raw end of the latest reservation (0 for an idle reactor)."""
        return self._last_end.get(reactor_id, 0.0)

    def next_free_start(self, reactor_id: str) -> float:
        """Earliest grid instant after every reservation on the reactor."""
        windows = self._windows.get(reactor_id)
        if not windows:
            return 0.0
        return max(e for _, e in windows)

    def windows(self, reactor_id: str) -> List[Tuple[float, float]]:
        return sorted(self._windows.get(reactor_id, ()))

    def fork(self) -> 'ReactorTimeline':
        """Independent copy for a tentative scheduling attempt."""
        clone = ReactorTimeline(self.step)
        clone._windows = {rid: list(w) for rid, w in self._windows.items()}
        clone._last_end = dict(self._last_end)
        return clone

    def commit(self, attempt: 'ReactorTimeline') -> None:
        """Adopt the reservations of a successful attempt."""
        self._windows = {rid: list(w) for rid, w in attempt._windows.items()}
        self._last_end = dict(attempt._last_end)

    def __repr__(self) -> str:
        count = sum(len(w) for w in self._windows.values())
        return f"ReactorTimeline({len(self._windows)} reactors, {count} reservations)"


@dataclass(frozen=True)
class ReactorChoice:
    """
    Selected reactor for a batch.

    Attributes:
        reactor_id: Chosen reactor
        score: idle-gap and fit score (lower is better)
        idle_gap: Minutes the reactor sits idle before the batch
        fit_penalty: Capacity fit penalty
    """
    reactor_id: str
    score: float
    idle_gap: float
    fit_penalty: float


def choose_reactor(
    volume_l: float,
    candidates: Sequence[str],
    window_start: float,
    window_end: float,
    timeline: ReactorTimeline,
    catalog: ReactorCatalog,
    config: PlanConfig,
) -> Optional[ReactorChoice]:
    """
    Pick the best free reactor for a batch window.

    Reactors whose reservations overlap the window are skipped. The rest are
    scored as ``idle_gap * idle_gap_weight + fit_penalty * fit_penalty_weight``
    where idle_gap is the time since the reactor's last reservation ended.
    The lowest score wins; on ties the earlier candidate is kept.

    Args:
        volume_l: Batch volume
        candidates: Capacity-eligible reactor ids in discovery order
        window_start: Batch start (minutes)
        window_end: Batch end (minutes)
        timeline: Committed reactor occupancy
        catalog: Reactor fleet
        config: Planning configuration (weights)

    Returns:
        ReactorChoice, or None if no candidate is free
    """
    best: Optional[ReactorChoice] = None

    for reactor_id in candidates:
        reactor = catalog.get(reactor_id)
        if reactor is None:
            continue
        if not timeline.is_free(reactor_id, window_start, window_end):
            continue

        idle_gap = max(0.0, window_start - timeline.last_end(reactor_id))
        fit = volume_fit_penalty(volume_l, reactor, config)
        score = idle_gap * config.idle_gap_weight + fit * config.fit_penalty_weight

        if best is None or score < best.score:
            best = ReactorChoice(reactor_id=reactor_id, score=score, idle_gap=idle_gap, fit_penalty=fit)

    if best is None:
        logger.debug(
            f"No free reactor for {volume_l:.0f} L in [{window_start:.1f}, {window_end:.1f}] "
            f"among {list(candidates)}"
        )
    return best
