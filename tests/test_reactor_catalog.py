"""Tests for the Reactor model and ReactorCatalog."""

import pytest

from reactor_planning.models import Reactor, ReactorCatalog, ReactorClass, default_catalog


class TestReactor:
    """Tests for the Reactor model."""

    def test_create_reactor(self):
        """Test creating a reactor from a class name string."""
        reactor = Reactor(id="RW09", min_l=5000, max_l=13000, reactor_class="big")

        assert reactor.reactor_class == ReactorClass.BIG
        assert reactor.display_name == "RW09"
        assert reactor.auto_assignable

    def test_can_hold(self):
        """Test the inclusive capacity range."""
        reactor = Reactor(id="RW04", min_l=1500, max_l=7000, reactor_class=ReactorClass.SMALL)

        assert reactor.can_hold(1500)
        assert reactor.can_hold(7000)
        assert not reactor.can_hold(1499)
        assert not reactor.can_hold(7001)

    def test_inverted_range_rejected(self):
        """Test that min above max is rejected."""
        with pytest.raises(ValueError):
            Reactor(id="X", min_l=5000, max_l=1000, reactor_class=ReactorClass.SMALL)

    def test_special_reactor_not_auto_assignable(self):
        """Test that special reactors are reserved for manual use."""
        reactor = Reactor(id="Ex-Diss", min_l=150, max_l=1000, reactor_class=ReactorClass.SPECIAL)

        assert not reactor.auto_assignable


class TestReactorCatalog:
    """Tests for ReactorCatalog."""

    def test_default_fleet(self, catalog):
        """Test the production fleet."""
        assert len(catalog) == 11
        assert catalog.reactor_ids[:5] == ("A1", "A2", "RW09", "RW10", "RW11")
        assert "Ex-Diss" in catalog
        assert catalog.get("RW05").max_l == 7500

    def test_unknown_reactor(self, catalog):
        """Test lookup of an unknown id."""
        assert catalog.get("RW99") is None
        assert "RW99" not in catalog

    def test_duplicate_ids_rejected(self):
        """Test that a fleet cannot contain the same id twice."""
        reactor = Reactor(id="A1", min_l=5000, max_l=13000, reactor_class=ReactorClass.BIG)

        with pytest.raises(ValueError, match="Duplicate reactor id"):
            ReactorCatalog([reactor, reactor])

    def test_eligible_large_batch(self, catalog):
        """Test that only big reactors take a 10000 L batch, in catalog order."""
        assert catalog.eligible_for_volume(10000) == ("A1", "A2", "RW09", "RW10", "RW11")

    def test_eligible_small_batch_sorted_by_capacity(self, catalog):
        """Test that eligible reactors are ordered by maximum capacity."""
        assert catalog.eligible_for_volume(3000) == ("RW03-Y", "RW01", "RW02", "RW04", "RW05")

    def test_special_reactor_never_eligible(self, catalog):
        """Test that the dissolver is excluded even when the volume fits."""
        eligible = catalog.eligible_for_volume(900)

        assert "Ex-Diss" not in eligible
        assert eligible == ("RW03-Y", "RW01", "RW02")

    def test_no_reactor_for_oversized_batch(self, catalog):
        """Test a batch above every capacity."""
        assert catalog.eligible_for_volume(14000) == ()
        assert catalog.eligible_count(14000) == 0

    def test_catalog_is_independent(self):
        """Test that each call builds a fresh catalog."""
        assert default_catalog() is not default_catalog()
        assert default_catalog().reactor_ids == default_catalog().reactor_ids
