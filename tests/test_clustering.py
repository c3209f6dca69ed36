"""Tests for product clustering."""

from reactor_planning.production import cluster_by_product


class TestClusterByProduct:
    """Tests for cluster_by_product."""

    def test_close_segments_merge(self, make_segment):
        """Test that a gap within the limit keeps one cluster."""
        a = make_segment("A", 3000, 0.0)
        b = make_segment("B", 3000, 300.0, index=1)

        clusters = cluster_by_product([a, b], 240)

        assert len(clusters) == 1
        assert clusters[0].segment_ids == (a.id, b.id)
        assert clusters[0].total_volume_l == 6000
        assert (clusters[0].start, clusters[0].end) == (0.0, 400.0)

    def test_gap_at_limit_merges(self, make_segment):
        a = make_segment("A", 3000, 0.0)
        b = make_segment("B", 3000, 340.0, index=1)

        assert len(cluster_by_product([a, b], 240)) == 1

    def test_large_gap_splits(self, make_segment):
        """Test that a gap beyond the limit starts a new cluster."""
        a = make_segment("A", 3000, 0.0)
        b = make_segment("B", 3000, 341.0, index=1)

        clusters = cluster_by_product([a, b], 240)

        assert [c.id for c in clusters] == ["cluster_P1_1", "cluster_P1_2"]

    def test_products_never_mix(self, make_segment):
        """Test that different products are clustered separately, ordered by start."""
        a = make_segment("A", 3000, 100.0, product_id="P2")
        b = make_segment("B", 3000, 0.0, line_id="L2", product_id="P1")

        clusters = cluster_by_product([a, b], 240)

        assert [(c.product_id, c.segment_ids) for c in clusters] == [
            ("P1", (b.id,)),
            ("P2", (a.id,)),
        ]

    def test_segments_from_several_lines(self, make_segment):
        """Test that the same product on two lines shares a cluster."""
        a = make_segment("A", 3000, 0.0, line_id="L1")
        b = make_segment("B", 3000, 0.0, line_id="L2")

        clusters = cluster_by_product([b, a], 240)

        assert len(clusters) == 1
        assert clusters[0].segment_ids == ("L1:0:A", "L2:0:B")

    def test_empty(self):
        assert cluster_by_product([], 240) == []
