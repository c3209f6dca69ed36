"""Centralized constants for the reactor planning engine.

This module contains the default rates, durations, batch limits and scoring
weights used across the planner. PlanConfig takes its defaults from here, so
changing a value here changes the default behaviour of every planning call.
"""

# ============================================================================
# RATES (litres per minute)
# ============================================================================

#: Filling-line throughput
#: Converts an order volume into the length of its demand segment
LINE_RATE_LPM = 30.0

#: Intermediate bulk container (IBC) fill rate
#: Used by the IBC fallback to size the reactor occupancy after production
IBC_FILL_LPM = 80.0


# ============================================================================
# DURATIONS (minutes)
# ============================================================================

#: Fixed production time per batch
#: Production must finish exactly when filling of the first consumer begins
PROD_TIME_MIN = 120.0

#: Maximum idle gap between same-product demand segments of one cluster
CLUSTER_GAP_MIN = 240.0

#: Quantization step for canonical event times
STEP_MIN = 5


# ============================================================================
# BATCH LIMITS (litres)
# ============================================================================

#: Smallest batch the planner proposes
MIN_BATCH_L = 1_500.0

#: Largest batch the planner proposes (capacity of the biggest reactors)
MAX_BATCH_L = 13_000.0

#: Upper bound on batches a single cluster may be split into
MAX_BATCHES_PER_CLUSTER = 40

#: Number of split candidates kept per cluster
MIN_SPLIT_CANDIDATES = 5
MAX_SPLIT_CANDIDATES = 12

#: Target average batch sizes explored when generating split candidates
#: The small sizes keep the small reactors usable for large clusters
TARGET_BATCH_SIZES = (13_000, 10_000, 7_500, 7_000, 6_500, 5_000, 4_700, 4_000, 3_500, 3_000, 2_500, 2_000, 1_500)

#: Batch counts explored above the minimum count ("few large batches")
LOW_BATCH_COUNT_SPAN = 11

#: Batch counts explored below the cap ("many small batches")
HIGH_BATCH_COUNT_SPAN = 7

#: Volume represented by one intermediate bulk container
IBC_CONTAINER_L = 1_000.0


# ============================================================================
# REACTOR ASSIGNMENT SCORING
# ============================================================================

#: Weight of the idle gap (minutes) between a reactor's last job and the batch
IDLE_GAP_WEIGHT = 2.0

#: Weight of the volume-fit penalty
FIT_PENALTY_WEIGHT = 5.0

#: Penalty for a batch on the wrong reactor class
#: (small batch on a big reactor or large batch on a small reactor)
FIT_MISMATCH_PENALTY = 10.0

#: Batches below this volume should avoid big reactors
SMALL_BATCH_THRESHOLD_L = 7_000.0

#: Batches above this volume should avoid small reactors
LARGE_BATCH_THRESHOLD_L = 7_500.0

#: Litres of unused reactor capacity per fit-penalty point
FIT_WASTE_DIVISOR_L = 1_000.0


# ============================================================================
# SPLIT CANDIDATE SCORING
# ============================================================================

#: Penalty per batch in a split (fragmentation)
SPLIT_COUNT_WEIGHT = 4.0

#: Penalty per batch above LARGE_BATCH_THRESHOLD_L (only big reactors can run it)
SPLIT_LARGE_BATCH_WEIGHT = 0.6

#: Litres of batch-volume standard deviation per balance-penalty point
SPLIT_BALANCE_DIVISOR_L = 1_200.0

#: Scarcity penalty for a batch with at most one eligible reactor
SCARCITY_PENALTY_SINGLE = 8.0

#: Scarcity penalty for a batch with exactly two eligible reactors
SCARCITY_PENALTY_PAIR = 3.0

#: Weight of the flexibility bonus (sum of ln(1 + eligible reactors))
SPLIT_FLEX_WEIGHT = 1.0


# ============================================================================
# TOLERANCES
# ============================================================================

#: Volumes below this are treated as zero during allocation (litres)
VOLUME_EPSILON_L = 1e-4
