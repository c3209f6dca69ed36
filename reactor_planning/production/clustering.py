"""Product clustering of open demand."""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from ..models.demand import DemandSegment, ProductCluster


def cluster_by_product(demand: Iterable[DemandSegment], gap_min: float) -> List[ProductCluster]:
    """
    Group same-product demand that can be served by shared batches.

    Segments of one product are walked by start time. A segment joins the
    running cluster when it starts no more than ``gap_min`` minutes after
    the cluster ends; otherwise the cluster is closed and a new one begins.

    Args:
        demand: Open demand segments
        gap_min: Maximum gap inside a cluster (minutes)

    Returns:
        Clusters ordered by start time (then product id)
    """
    by_product: Dict[str, List[DemandSegment]] = defaultdict(list)
    for segment in demand:
        by_product[segment.product_id].append(segment)

    clusters: List[ProductCluster] = []
    for product_id in sorted(by_product):
        ordered = sorted(by_product[product_id], key=lambda s: (s.start, s.id))
        current: Optional[ProductCluster] = None
        count = 0

        for segment in ordered:
            if current is not None and segment.start - current.end <= gap_min:
                current.add(segment)
                continue

            if current is not None:
                clusters.append(current)
            count += 1
            current = ProductCluster(id=f"cluster_{product_id}_{count}", product_id=product_id)
            current.add(segment)

        if current is not None:
            clusters.append(current)

    clusters.sort(key=lambda c: (c.start, c.product_id, c.id))
    return clusters
