"""Input records: filling-line orders and manual reactor assignments.

Field aliases used by upstream systems (``volume``/``volumeL``,
``line``/``lineId``, ...) are accepted here, at the model boundary, and
collapse to one canonical attribute name each.
"""

from typing import Any, Optional
import math

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _to_id(value: Any) -> Any:
    """Normalize numeric ids to strings and strip whitespace."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(int(value)) if float(value).is_integer() else str(value)
    if isinstance(value, str):
        value = value.strip()
    return value


def _not_bool(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError(f"volume must be a number, got {value!r}")
    return value


def _finite_positive(value: float) -> float:
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"volume must be a positive finite number, got {value}")
    return value


class LineOrder(BaseModel):
    """
    A production order queued on a filling line.

    Attributes:
        order_id: Order identifier
        line_id: Filling line the order runs on
        order_index: Position of the order in the line's queue
        product_id: Product to fill
        volume_l: Order volume in litres
        first_position_override: Order is already running (starts at t=0)
    """
    order_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices('order_id', 'orderId', 'id'),
    )
    line_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices('line_id', 'lineId', 'line', 'lane'),
    )
    order_index: int = Field(
        0,
        validation_alias=AliasChoices('order_index', 'orderIndex', 'index', 'position'),
    )
    product_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices('product_id', 'productId', 'product'),
    )
    volume_l: float = Field(
        ...,
        validation_alias=AliasChoices('volume_l', 'volumeL', 'volume'),
    )
    first_position_override: bool = Field(
        False,
        validation_alias=AliasChoices(
            'first_position_override', 'firstPositionOverride', 'isIstPos1', 'first_position'
        ),
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator('order_id', 'line_id', 'product_id', mode='before')
    @classmethod
    def coerce_ids(cls, v: Any) -> Any:
        return _to_id(v)

    @field_validator('volume_l', mode='before')
    @classmethod
    def volume_not_bool(cls, v: Any) -> Any:
        return _not_bool(v)

    @field_validator('volume_l')
    @classmethod
    def volume_finite_positive(cls, v: float) -> float:
        """Reject non-finite and non-positive volumes."""
        return _finite_positive(v)

    def __str__(self) -> str:
        marker = " [pos1]" if self.first_position_override else ""
        return f"Order {self.order_id} on {self.line_id}#{self.order_index}: {self.volume_l:.0f} L {self.product_id}{marker}"


class ManualAssignment(BaseModel):
    """
    Operator override locking a reactor to an order that is already running.

    Attributes:
        reactor_id: Reactor the order is locked to
        order_id: Order being produced
        product_id: Product in the reactor
        volume_l: Volume in the reactor (defaults to the order volume)
        locked: Only locked assignments are applied
    """
    reactor_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices('reactor_id', 'reactorId', 'rwId', 'rw_id'),
    )
    order_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices('order_id', 'orderId'),
    )
    product_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices('product_id', 'productId', 'product'),
    )
    volume_l: Optional[float] = Field(
        None,
        validation_alias=AliasChoices('volume_l', 'volumeL', 'volume'),
    )
    locked: bool = Field(True)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator('reactor_id', 'order_id', 'product_id', mode='before')
    @classmethod
    def coerce_ids(cls, v: Any) -> Any:
        return _to_id(v)

    @field_validator('volume_l', mode='before')
    @classmethod
    def volume_not_bool(cls, v: Any) -> Any:
        return _not_bool(v)

    @field_validator('volume_l')
    @classmethod
    def volume_finite_positive(cls, v: Optional[float]) -> Optional[float]:
        if v is None:
            return v
        return _finite_positive(v)
