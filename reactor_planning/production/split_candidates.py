"""Batch-split candidate generation and scoring.

A cluster's total volume can be produced as a few large batches (big
reactors only) or many small ones (small reactors usable too). This module
proposes a mix of both, drops infeasible splits and ranks the rest so the
scheduler can try them best-first.
"""

from dataclasses import dataclass
from typing import List, Set, Tuple
import logging
import math

import numpy as np

from ..config import PlanConfig
from ..models.reactor import ReactorCatalog
from ..utils.time_volume import make_equal_split, split_by_max

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SplitCandidate:
    """
    One way of splitting a cluster volume into batches.

    Attributes:
        batches: Batch volumes in production order
        score: Ranking score (lower is better)
        eligible_counts: Number of eligible reactors per batch
        source: "equal" for equal splits, "max_fill" for the greedy fallback
    """
    batches: Tuple[float, ...]
    score: float
    eligible_counts: Tuple[int, ...]
    source: str = "equal"

    @property
    def n(self) -> int:
        return len(self.batches)

    @property
    def total_l(self) -> float:
        return sum(self.batches)

    def __str__(self) -> str:
        sizes = ", ".join(f"{b:.0f}" for b in self.batches)
        return f"{self.n} batches [{sizes}] score={self.score:.2f}"


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def batch_count_bounds(total_l: float, config: PlanConfig) -> Tuple[int, int]:
    """
    Smallest and largest batch counts worth exploring.

    Returns:
        Tuple of (min_n, n_cap) where min_n = ceil(V / MAX) and n_cap is
        ceil(V / MIN) capped at max_batches_per_cluster
    """
    min_n = max(1, math.ceil(total_l / config.max_batch_l))
    max_n = max(min_n, math.ceil(total_l / config.min_batch_l))
    return min_n, min(max_n, config.max_batches_per_cluster)


def candidate_batch_counts(total_l: float, config: PlanConfig) -> List[int]:
    """
    Batch counts to try for a cluster volume.

    Sources:
    - round/floor/ceil of V / target for every target batch size
    - the lowest counts starting at min_n ("few large batches")
    - the highest counts up to the cap ("many small batches")

    Args:
        total_l: Cluster volume
        config: Planning configuration

    Returns:
        Sorted distinct counts within [min_n, n_cap]
    """
    min_n, n_cap = batch_count_bounds(total_l, config)
    wanted: Set[int] = set()

    for target in config.target_batch_sizes:
        ratio = total_l / target
        for n in (_round_half_up(ratio), math.ceil(ratio), math.floor(ratio)):
            if min_n <= n <= n_cap:
                wanted.add(n)

    low_end = min(n_cap, min_n + config.low_batch_count_span - 1)
    wanted.update(range(min_n, low_end + 1))

    if n_cap > low_end:
        wanted.update(range(max(min_n, n_cap - config.high_batch_count_span + 1), n_cap + 1))

    return sorted(wanted)


def is_feasible_split(batches: List[float], catalog: ReactorCatalog, config: PlanConfig) -> bool:
    """All batches within the batch limits and each runnable on some reactor."""
    if any(b < config.min_batch_l or b > config.max_batch_l for b in batches):
        return False
    return all(catalog.eligible_count(b) > 0 for b in batches)


def score_split(
    batches: List[float],
    catalog: ReactorCatalog,
    config: PlanConfig,
) -> Tuple[float, Tuple[int, ...]]:
    """
    Score a split (lower is better).

    score = batch-count penalty
          + large-batch penalty (batches above the large-batch threshold)
          + balance penalty (standard deviation of batch volumes)
          + scarcity penalty (batches with at most two eligible reactors)
          - flexibility bonus (sum of ln(1 + eligible reactors))

    Args:
        batches: Batch volumes
        catalog: Reactor fleet
        config: Planning configuration (weights)

    Returns:
        Tuple of (score, eligible reactor count per batch)
    """
    volumes = np.asarray(batches, dtype=float)
    counts = np.asarray([catalog.eligible_count(b) for b in batches], dtype=float)

    count_penalty = len(batches) * config.split_count_weight
    large_penalty = float(np.count_nonzero(volumes > config.large_batch_threshold_l)) * config.split_large_batch_weight
    balance_penalty = float(volumes.std()) / config.split_balance_divisor_l

    scarcity_penalty = 0.0
    for c in counts:
        if c <= 1:
            scarcity_penalty += config.scarcity_penalty_single
        elif c == 2:
            scarcity_penalty += config.scarcity_penalty_pair

    flexibility = float(np.log1p(counts).sum()) * config.split_flex_weight

    score = count_penalty + large_penalty + balance_penalty + scarcity_penalty - flexibility
    return score, tuple(int(c) for c in counts)


def generate_split_candidates(
    total_l: float,
    catalog: ReactorCatalog,
    config: PlanConfig,
) -> List[SplitCandidate]:
    """
    Propose and rank split candidates for a cluster volume.

    Every candidate batch count gets an equal split; splits with a batch
    outside the batch limits or without any eligible reactor are dropped.
    If nothing survives, a greedy max-fill split is tried instead. The
    survivors are scored and the best ones kept (ascending score, ties by
    batch count).

    Args:
        total_l: Cluster volume
        catalog: Reactor fleet
        config: Planning configuration

    Returns:
        Ranked candidates (possibly empty when no feasible split exists)
    """
    if total_l <= config.volume_epsilon_l:
        return []

    splits: List[Tuple[List[float], str]] = []
    for n in candidate_batch_counts(total_l, config):
        batches = make_equal_split(total_l, n)
        if is_feasible_split(batches, catalog, config):
            splits.append((batches, "equal"))

    if not splits:
        fallback = split_by_max(total_l, config.max_batch_l, config.min_batch_l)
        if fallback is not None and is_feasible_split(fallback, catalog, config):
            splits.append((fallback, "max_fill"))

    scored: List[SplitCandidate] = []
    for batches, source in splits:
        score, counts = score_split(batches, catalog, config)
        scored.append(SplitCandidate(batches=tuple(batches), score=score, eligible_counts=counts, source=source))

    scored.sort(key=lambda c: (c.score, c.n))
    limit = min(config.max_split_candidates, max(config.min_split_candidates, len(scored)))
    picked = scored[:limit]

    logger.debug(
        f"Split candidates for {total_l:.0f} L: {len(splits)} feasible, kept {len(picked)}"
        + (f", best {picked[0]}" if picked else "")
    )
    return picked
