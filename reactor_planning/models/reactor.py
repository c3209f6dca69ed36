"""Reactor (mixing vessel) data model and the reactor catalog."""

from enum import Enum
from typing import Dict, Iterable, Iterator, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, model_validator


class ReactorClass(str, Enum):
    """Capacity class of a reactor."""
    BIG = "big"
    SMALL = "small"
    SPECIAL = "special"  # Never assigned automatically


class Reactor(BaseModel):
    """
    Represents a mixing vessel with a fixed capacity range.

    Attributes:
        id: Unique reactor identifier (also its lane id, e.g. "RW09")
        min_l: Smallest batch volume the reactor can mix (litres)
        max_l: Largest batch volume the reactor can mix (litres)
        reactor_class: Capacity class (big, small or special)
        name: Display name (defaults to the id)
    """
    id: str = Field(..., min_length=1, description="Unique reactor identifier")
    min_l: float = Field(..., ge=0, description="Minimum batch volume (L)")
    max_l: float = Field(..., gt=0, description="Maximum batch volume (L)")
    reactor_class: ReactorClass = Field(..., description="Capacity class")
    name: Optional[str] = Field(None, description="Display name")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def range_is_ordered(self) -> 'Reactor':
        """Ensure the capacity range is not inverted."""
        if self.min_l > self.max_l:
            raise ValueError(f"Reactor {self.id}: min_l ({self.min_l}) exceeds max_l ({self.max_l})")
        return self

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @property
    def auto_assignable(self) -> bool:
        """Special reactors are reserved for manual use."""
        return self.reactor_class != ReactorClass.SPECIAL

    def can_hold(self, volume_l: float) -> bool:
        """
        Check if a batch volume lies inside the capacity range.

        Args:
            volume_l: Batch volume in litres

        Returns:
            True if min_l <= volume_l <= max_l
        """
        return self.min_l <= volume_l <= self.max_l

    def __str__(self) -> str:
        return f"{self.display_name} [{self.min_l:.0f}-{self.max_l:.0f} L, {self.reactor_class.value}]"


class ReactorCatalog:
    """
    Immutable fleet of reactors.

    The catalog is injected into the planner instead of being a module-level
    global, so alternate fleets can be planned and tested.

    Example:
        >>> catalog = ReactorCatalog([
        ...     Reactor(id="A1", min_l=5000, max_l=13000, reactor_class="big"),
        ...     Reactor(id="RW01", min_l=700, max_l=4900, reactor_class="small"),
        ... ])
        >>> catalog.eligible_for_volume(3000)
        ('RW01',)
    """

    def __init__(self, reactors: Iterable[Reactor]):
        """
        Initialize catalog.

        Args:
            reactors: Reactors in catalog order (used for tie-breaking)

        Raises:
            ValueError: If two reactors share an id
        """
        self._reactors: Tuple[Reactor, ...] = tuple(reactors)
        self._by_id: Dict[str, Reactor] = {}
        for reactor in self._reactors:
            if reactor.id in self._by_id:
                raise ValueError(f"Duplicate reactor id in catalog: {reactor.id}")
            self._by_id[reactor.id] = reactor

    @property
    def reactors(self) -> Tuple[Reactor, ...]:
        return self._reactors

    @property
    def reactor_ids(self) -> Tuple[str, ...]:
        return tuple(r.id for r in self._reactors)

    def get(self, reactor_id: str) -> Optional[Reactor]:
        """Look up a reactor by id (None if unknown)."""
        return self._by_id.get(reactor_id)

    def __contains__(self, reactor_id: object) -> bool:
        return reactor_id in self._by_id

    def __iter__(self) -> Iterator[Reactor]:
        return iter(self._reactors)

    def __len__(self) -> int:
        return len(self._reactors)

    def eligible_for_volume(self, volume_l: float) -> Tuple[str, ...]:
        """
        Get reactors that can run a batch of the given volume.

        Special reactors are never returned. The result is ordered by
        maximum capacity ascending (tightest fit first), keeping catalog
        order between reactors of equal capacity.

        Args:
            volume_l: Batch volume in litres

        Returns:
            Tuple of reactor ids
        """
        eligible = [r for r in self._reactors if r.auto_assignable and r.can_hold(volume_l)]
        eligible.sort(key=lambda r: r.max_l)
        return tuple(r.id for r in eligible)

    def eligible_count(self, volume_l: float) -> int:
        return len(self.eligible_for_volume(volume_l))

    def __repr__(self) -> str:
        return f"ReactorCatalog({len(self._reactors)} reactors)"


# Production fleet: (id, min L, max L, class)
DEFAULT_FLEET = (
    # Big reactors
    ("A1", 5_000, 13_000, ReactorClass.BIG),
    ("A2", 5_000, 13_000, ReactorClass.BIG),
    ("RW09", 5_000, 13_000, ReactorClass.BIG),
    ("RW10", 5_000, 13_000, ReactorClass.BIG),
    ("RW11", 5_000, 13_000, ReactorClass.BIG),
    # Small / medium reactors
    ("RW05", 2_000, 7_500, ReactorClass.SMALL),
    ("RW04", 1_500, 7_000, ReactorClass.SMALL),
    ("RW02", 700, 5_000, ReactorClass.SMALL),
    ("RW01", 700, 4_900, ReactorClass.SMALL),
    ("RW03-Y", 500, 4_700, ReactorClass.SMALL),
    # Dissolver, manual use only
    ("Ex-Diss", 150, 1_000, ReactorClass.SPECIAL),
)


def default_catalog() -> ReactorCatalog:
    """Create the catalog of the production fleet."""
    return ReactorCatalog(
        Reactor(id=rid, min_l=min_l, max_l=max_l, reactor_class=cls)
        for rid, min_l, max_l, cls in DEFAULT_FLEET
    )
