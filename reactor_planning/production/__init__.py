"""Production planning: demand timeline, clustering, batch splitting and reactor scheduling.

Pipeline:
- Demand timeline per filling line
- Locked manual (IST) assignments
- Product clustering
- Split candidates and reactor assignment
- IBC fallback for clusters that cannot be placed
"""

from .demand_builder import build_demand_timeline, segment_id
from .manual_assignments import apply_manual_assignments, ManualAssignmentResult
from .clustering import cluster_by_product
from .split_candidates import SplitCandidate, generate_split_candidates, score_split, candidate_batch_counts
from .reactor_assignment import ReactorTimeline, ReactorChoice, choose_reactor
from .cluster_scheduler import schedule_cluster, ClusterSchedule
from .ibc_fallback import schedule_ibc_fallback
from .planner import plan, PlanResult

__all__ = [
    'build_demand_timeline',
    'segment_id',
    'apply_manual_assignments',
    'ManualAssignmentResult',
    'cluster_by_product',
    'SplitCandidate',
    'generate_split_candidates',
    'score_split',
    'candidate_batch_counts',
    'ReactorTimeline',
    'ReactorChoice',
    'choose_reactor',
    'schedule_cluster',
    'ClusterSchedule',
    'schedule_ibc_fallback',
    'plan',
    'PlanResult',
]
