"""Time and volume helpers shared by the planner, canonicalizer and validator."""

from typing import List, Optional, Tuple
import math

from ..config import PlanConfig
from ..models.reactor import Reactor, ReactorClass


def duration_for_volume(volume_l: float, rate_lpm: float) -> float:
    """
    Minutes needed to move a volume at a given rate.

    Args:
        volume_l: Volume in litres
        rate_lpm: Rate in litres per minute

    Returns:
        Duration in minutes (0 for non-positive volumes)
    """
    if volume_l <= 0:
        return 0.0
    return volume_l / rate_lpm


def volume_for_duration(duration_min: float, rate_lpm: float) -> float:
    """Litres moved in ``duration_min`` minutes at ``rate_lpm``."""
    return max(0.0, duration_min) * rate_lpm


def make_equal_split(total_l: float, n: int) -> List[float]:
    """
    Split a volume into ``n`` near-equal integer-litre batches.

    Each batch gets floor(total / n); the integer remainder is handed out
    one litre at a time to the first batches. A fractional residue (for
    non-integer totals) goes to the first batch, so the batches always sum
    to the total and are non-increasing.

    Args:
        total_l: Volume to split
        n: Number of batches (>= 1)

    Returns:
        List of n batch volumes

    Example:
        >>> make_equal_split(10000, 3)
        [3334.0, 3333.0, 3333.0]
    """
    if n < 1:
        raise ValueError(f"Batch count must be at least 1, got {n}")

    base = float(math.floor(total_l / n))
    rest = total_l - base * n
    whole = min(n, int(rest))
    fraction = rest - whole

    batches = [base] * n
    for i in range(whole):
        batches[i] += 1.0
    if fraction > 0:
        batches[0] += fraction
    return batches


def max_fill_pieces(total_l: float, max_l: float) -> List[float]:
    """Greedy partition: full ``max_l`` batches followed by the remainder."""
    batches: List[float] = []
    remaining = total_l
    while remaining > max_l:
        batches.append(max_l)
        remaining -= max_l
    batches.append(remaining)
    return batches


def split_by_max(total_l: float, max_l: float, min_l: float) -> Optional[List[float]]:
    """
    Max-fill partition with an undersized tail topped up from earlier batches.

    Earlier batches give up volume (never dropping below ``min_l``) until the
    last batch reaches ``min_l``.

    Args:
        total_l: Volume to split
        max_l: Largest batch
        min_l: Smallest batch

    Returns:
        Batch volumes, or None if the tail cannot be brought up to ``min_l``
        (including a single batch smaller than ``min_l``)

    Example:
        >>> split_by_max(14000, 13000, 1500)
        [12500, 1500]
    """
    batches = max_fill_pieces(total_l, max_l)

    if batches[-1] < min_l:
        if len(batches) == 1:
            return None

        need = min_l - batches[-1]
        for i in range(len(batches) - 1):
            if need <= 0:
                break
            give = min(need, max(0.0, batches[i] - min_l))
            if give > 0:
                batches[i] -= give
                batches[-1] += give
                need -= give

        if batches[-1] < min_l:
            return None

    return batches


def volume_fit_penalty(volume_l: float, reactor: Reactor, config: PlanConfig) -> float:
    """
    Penalty for running a batch on a reactor of the wrong size.

    Returns the mismatch penalty when a small batch would sit in a big
    reactor or a large batch in a small one; otherwise the unused capacity
    in units of ``fit_waste_divisor_l`` (tight fits score best).

    Args:
        volume_l: Batch volume
        reactor: Candidate reactor
        config: Planning configuration

    Returns:
        Non-negative penalty
    """
    if volume_l < config.small_batch_threshold_l and reactor.reactor_class == ReactorClass.BIG:
        return config.fit_mismatch_penalty
    if volume_l > config.large_batch_threshold_l and reactor.reactor_class == ReactorClass.SMALL:
        return config.fit_mismatch_penalty

    waste = reactor.max_l - volume_l
    return max(0.0, waste / config.fit_waste_divisor_l)


def quantize_down(value: float, step: float) -> float:
    return float(math.floor(value / step) * step)


def quantize_up(value: float, step: float) -> float:
    return float(math.ceil(value / step) * step)


def quantize_times(start: Optional[float], end: Optional[float], step: float) -> Tuple[float, float]:
    """
    Snap a time window onto the step grid.

    Start is floored and end is ceiled. Missing or non-finite starts become
    0, missing ends become start + step, negative starts are clamped to 0
    and every window lasts at least one step.

    Args:
        start: Raw start (minutes)
        end: Raw end (minutes)
        step: Grid step (minutes)

    Returns:
        Tuple of (q_start, q_end)

    Example:
        >>> quantize_times(-120, 333.33, 5)
        (0.0, 335.0)
    """
    s = start if start is not None and math.isfinite(start) else 0.0
    e = end if end is not None and math.isfinite(end) else s + step

    s = max(0.0, s)
    e = max(s + step, e)

    q_start = quantize_down(s, step)
    q_end = quantize_up(e, step)
    return q_start, max(q_end, q_start + step)


def windows_overlap(a_start: float, a_end: float, b_start: float, b_end: float) -> bool:
    """Half-open overlap test; touching endpoints do not overlap."""
    return a_start < b_end and b_start < a_end
