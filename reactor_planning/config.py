"""Planning configuration with overridable defaults."""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple, Union
import math

from . import constants as C


@dataclass(frozen=True)
class PlanConfig:
    """
    Configuration for one planning call.

    All values default to the constants in ``reactor_planning.constants``.
    Overrides can be given by field name (``line_rate_lpm``) or by the
    upper-case parameter name used in planning documents (``LINE_RATE_LPM``).

    Attributes:
        line_rate_lpm: Filling-line throughput (L/min)
        ibc_fill_lpm: IBC fill rate (L/min)
        prod_time_min: Production time per batch (min)
        cluster_gap_min: Maximum gap between demand segments of one cluster (min)
        min_batch_l: Smallest batch volume (L)
        max_batch_l: Largest batch volume (L)
        max_batches_per_cluster: Cap on the batch count of one cluster
        min_split_candidates: Minimum split candidates kept when available
        max_split_candidates: Maximum split candidates kept
        target_batch_sizes: Average batch sizes explored by the split generator (L)
        step_min: Quantization step for canonical times (min)
    """
    line_rate_lpm: float = C.LINE_RATE_LPM
    ibc_fill_lpm: float = C.IBC_FILL_LPM
    prod_time_min: float = C.PROD_TIME_MIN
    cluster_gap_min: float = C.CLUSTER_GAP_MIN
    min_batch_l: float = C.MIN_BATCH_L
    max_batch_l: float = C.MAX_BATCH_L
    max_batches_per_cluster: int = C.MAX_BATCHES_PER_CLUSTER
    min_split_candidates: int = C.MIN_SPLIT_CANDIDATES
    max_split_candidates: int = C.MAX_SPLIT_CANDIDATES
    target_batch_sizes: Tuple[float, ...] = C.TARGET_BATCH_SIZES
    step_min: int = C.STEP_MIN
    low_batch_count_span: int = C.LOW_BATCH_COUNT_SPAN
    high_batch_count_span: int = C.HIGH_BATCH_COUNT_SPAN
    ibc_container_l: float = C.IBC_CONTAINER_L

    # Reactor assignment scoring
    idle_gap_weight: float = C.IDLE_GAP_WEIGHT
    fit_penalty_weight: float = C.FIT_PENALTY_WEIGHT
    fit_mismatch_penalty: float = C.FIT_MISMATCH_PENALTY
    small_batch_threshold_l: float = C.SMALL_BATCH_THRESHOLD_L
    large_batch_threshold_l: float = C.LARGE_BATCH_THRESHOLD_L
    fit_waste_divisor_l: float = C.FIT_WASTE_DIVISOR_L

    # Split candidate scoring
    split_count_weight: float = C.SPLIT_COUNT_WEIGHT
    split_large_batch_weight: float = C.SPLIT_LARGE_BATCH_WEIGHT
    split_balance_divisor_l: float = C.SPLIT_BALANCE_DIVISOR_L
    scarcity_penalty_single: float = C.SCARCITY_PENALTY_SINGLE
    scarcity_penalty_pair: float = C.SCARCITY_PENALTY_PAIR
    split_flex_weight: float = C.SPLIT_FLEX_WEIGHT

    volume_epsilon_l: float = field(default=C.VOLUME_EPSILON_L, repr=False)

    def __post_init__(self):
        """Validate configuration."""
        positive = (
            'line_rate_lpm', 'ibc_fill_lpm', 'min_batch_l', 'max_batch_l',
            'step_min', 'max_batches_per_cluster', 'ibc_container_l',
            'fit_waste_divisor_l', 'split_balance_divisor_l',
        )
        for name in positive:
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive finite number, got {value}")

        for name in ('prod_time_min', 'cluster_gap_min'):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

        if self.min_batch_l > self.max_batch_l:
            raise ValueError(
                f"min_batch_l ({self.min_batch_l}) must not exceed max_batch_l ({self.max_batch_l})"
            )
        if self.min_split_candidates < 1 or self.max_split_candidates < self.min_split_candidates:
            raise ValueError(
                f"split candidate limits must satisfy 1 <= min ({self.min_split_candidates}) "
                f"<= max ({self.max_split_candidates})"
            )
        if any(not math.isfinite(t) or t <= 0 for t in self.target_batch_sizes):
            raise ValueError(f"target_batch_sizes must be positive, got {self.target_batch_sizes}")

        # Lists from JSON/YAML overrides are frozen into a tuple
        if not isinstance(self.target_batch_sizes, tuple):
            object.__setattr__(self, 'target_batch_sizes', tuple(self.target_batch_sizes))

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_overrides(cls, overrides: Optional[Mapping[str, Any]] = None) -> 'PlanConfig':
        """
        Build a configuration from a mapping of overrides.

        Args:
            overrides: Mapping of parameter name to value. Keys may use the
                field name or its upper-case form. ``None`` values are ignored.

        Returns:
            PlanConfig with defaults replaced by the overrides

        Raises:
            ValueError: If a key does not name a configuration parameter
        """
        return cls().with_overrides(overrides)

    def with_overrides(self, overrides: Optional[Mapping[str, Any]] = None) -> 'PlanConfig':
        """Return a copy of this configuration with overrides applied."""
        if not overrides:
            return self

        known = set(self.field_names())
        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            name = _ALIASES.get(key, key.lower())
            if name not in known:
                raise ValueError(f"Unknown planning parameter: {key}")
            if value is None:
                continue
            changes[name] = value

        return replace(self, **changes)


# Parameter names whose upper-case form differs from the field name
_ALIASES = {
    'FILL_RATE': 'line_rate_lpm',
    'IBC_RATE': 'ibc_fill_lpm',
    'PROD_TIME': 'prod_time_min',
}


def resolve_config(config: Union[PlanConfig, Mapping[str, Any], None]) -> PlanConfig:
    """Accept a PlanConfig, a mapping of overrides or None."""
    if config is None:
        return PlanConfig()
    if isinstance(config, PlanConfig):
        return config
    return PlanConfig.from_overrides(config)
