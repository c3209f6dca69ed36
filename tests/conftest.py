"""Pytest configuration and shared fixtures."""

import pytest

from reactor_planning.config import PlanConfig
from reactor_planning.models import (
    DemandSegment,
    Reactor,
    ReactorCatalog,
    ReactorClass,
    default_catalog,
)


@pytest.fixture
def config():
    """Fixture for the default planning configuration."""
    return PlanConfig()


@pytest.fixture
def catalog():
    """Fixture for the production fleet."""
    return default_catalog()


@pytest.fixture
def big_only_catalog():
    """Fixture for a fleet of big reactors only (minimum 5000 L)."""
    return ReactorCatalog([
        Reactor(id="A1", min_l=5000, max_l=13000, reactor_class=ReactorClass.BIG),
        Reactor(id="A2", min_l=5000, max_l=13000, reactor_class=ReactorClass.BIG),
    ])


@pytest.fixture
def single_order():
    """Fixture for one 10000 L order on line L1."""
    return {"L1": [{"orderId": "A", "productId": "P1", "volumeL": 10000}]}


@pytest.fixture
def make_segment():
    """Factory fixture for demand segments filled at 30 L/min."""
    def _make(order_id, volume_l, start=0.0, line_id="L1", product_id="P1", index=0, first_position=False):
        return DemandSegment(
            id=f"{line_id}:{index}:{order_id}",
            line_id=line_id,
            order_id=order_id,
            order_index=index,
            product_id=product_id,
            volume_l=volume_l,
            start=start,
            end=start + volume_l / 30.0,
            first_position=first_position,
        )
    return _make
