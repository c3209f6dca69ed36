"""Plan event schema: the output unit of the planning engine.

Three event variants share one model:

- ``lineFill``: filling of one order on a filling line (lane type LINE)
- ``rwBatch``: one batch occupying a reactor (lane type RW)
- ``ibcBatch``: intermediate-container fill or UNSCHEDULED marker (lane type IBC)

Events created by the engine carry raw ``start``/``end`` minutes. The
canonicalizer adds ``lane_type``/``lane_id``, quantized ``q_start``/``q_end``
and a content-derived ``id``. Raw mappings from other producers may use
camelCase keys (``laneId``, ``qStart``, ``volumeL``...); they are accepted on
validation. Their events of other types (``cleaning``...) keep the type string.
"""

from enum import Enum
from typing import Any, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class LaneType(str, Enum):
    """Kind of timeline lane an event occupies."""
    LINE = "LINE"
    RW = "RW"
    IBC = "IBC"


class EventType(str, Enum):
    """Plan event variant."""
    LINE_FILL = "lineFill"
    RW_BATCH = "rwBatch"
    IBC_BATCH = "ibcBatch"
    BLOCKED = "blocked"  # Reactor unavailable (cleaning, maintenance)


#: Type of events from other producers that name no type
UNKNOWN_EVENT_TYPE = "unknown"


class PlanMode(str, Enum):
    """Origin of a batch."""
    IST = "IST"  # Actual: locked by manual assignment
    GEPLANT = "GEPLANT"  # Planned by the engine
    IBC = "IBC"  # Produced into intermediate containers (fallback)


#: Lane type each event type must sit on
EXPECTED_LANE_TYPE = {
    EventType.LINE_FILL: LaneType.LINE,
    EventType.RW_BATCH: LaneType.RW,
    EventType.IBC_BATCH: LaneType.IBC,
}


class Consumer(BaseModel):
    """
    Portion of a demand segment supplied by a batch.

    Attributes:
        demand_id: Demand segment supplied
        line_id: Filling line of the segment
        order_id: Order of the segment
        start: Start of the filled portion (minutes)
        end: End of the filled portion (minutes)
        q_start: Quantized start (set by the canonicalizer)
        q_end: Quantized end (set by the canonicalizer)
        volume_l: Litres supplied
    """
    demand_id: Optional[str] = Field(None, validation_alias=AliasChoices('demand_id', 'demandId'))
    line_id: Optional[str] = Field(None, validation_alias=AliasChoices('line_id', 'lineId'))
    order_id: Optional[str] = Field(None, validation_alias=AliasChoices('order_id', 'orderId'))
    start: Optional[float] = None
    end: Optional[float] = None
    q_start: Optional[float] = Field(None, validation_alias=AliasChoices('q_start', 'qStart'))
    q_end: Optional[float] = Field(None, validation_alias=AliasChoices('q_end', 'qEnd'))
    volume_l: float = Field(0.0, validation_alias=AliasChoices('volume_l', 'volumeL', 'volume'))

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class TimeWindow(BaseModel):
    """Half-open time window in minutes."""
    start: float
    end: float

    model_config = ConfigDict(frozen=True)

    @property
    def duration(self) -> float:
        return self.end - self.start


class BatchPhases(BaseModel):
    """
    Internal phases of a reactor batch.

    Attributes:
        production: Mixing time before the product is available
        ibc_filling: Container-fill span (IBC fallback batches only)
    """
    production: Optional[TimeWindow] = None
    ibc_filling: Optional[TimeWindow] = None

    model_config = ConfigDict(frozen=True)


class PlanEvent(BaseModel):
    """
    One event on the plan timeline.

    Attributes:
        id: Deterministic content id (set by the canonicalizer)
        type: Event variant (types from other producers are kept as strings)
        lane_type: Lane kind (LINE, RW, IBC)
        lane_id: Lane identifier (line "L1", reactor "RW09", "IBC")
        start: Raw start (minutes from plan origin)
        end: Raw end (minutes from plan origin)
        q_start: Quantized start
        q_end: Quantized end
        product_id: Product
        volume_l: Volume in litres
        consumers: Demand portions supplied by a batch
        locked: Fixed by an operator (manual assignment)
        mode: Batch origin (IST, GEPLANT, IBC)
        order_id: Order filled (lineFill)
        line_id: Filling line (lineFill)
        label: Human-readable label
        phases: Production / IBC-filling phases of a batch
        ibc_count: Number of containers (IBC events)
        reasons: Machine-readable reasons (fallback and marker events); a single
            string is accepted
        unscheduled: Marker for demand that could not be placed on any reactor
        source_reactor_id: Reactor an IBC container fill drains (ibcBatch)
    """
    id: Optional[str] = None
    type: Union[EventType, str] = Field(UNKNOWN_EVENT_TYPE, union_mode='left_to_right')
    lane_type: Optional[LaneType] = Field(None, validation_alias=AliasChoices('lane_type', 'laneType'))
    lane_id: Optional[str] = Field(None, validation_alias=AliasChoices('lane_id', 'laneId', 'lane', 'rwId'))
    start: Optional[float] = None
    end: Optional[float] = None
    q_start: Optional[float] = Field(None, validation_alias=AliasChoices('q_start', 'qStart'))
    q_end: Optional[float] = Field(None, validation_alias=AliasChoices('q_end', 'qEnd'))
    product_id: Optional[str] = Field(None, validation_alias=AliasChoices('product_id', 'productId', 'product'))
    volume_l: Optional[float] = Field(None, validation_alias=AliasChoices('volume_l', 'volumeL', 'volume'))
    consumers: Tuple[Consumer, ...] = ()
    locked: bool = False
    mode: Optional[PlanMode] = None
    order_id: Optional[str] = Field(None, validation_alias=AliasChoices('order_id', 'orderId'))
    line_id: Optional[str] = Field(None, validation_alias=AliasChoices('line_id', 'lineId'))
    label: Optional[str] = None
    phases: Optional[BatchPhases] = None
    ibc_count: Optional[int] = Field(None, validation_alias=AliasChoices('ibc_count', 'ibcCount'))
    reasons: Tuple[str, ...] = Field((), validation_alias=AliasChoices('reasons', 'reason'))
    unscheduled: bool = False
    source_reactor_id: Optional[str] = Field(
        None, validation_alias=AliasChoices('source_reactor_id', 'sourceReactorId')
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator('type', mode='before')
    @classmethod
    def missing_type_is_unknown(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return UNKNOWN_EVENT_TYPE
        return v

    @field_validator('reasons', mode='before')
    @classmethod
    def single_reason(cls, v: Any) -> Any:
        if v is None:
            return ()
        if isinstance(v, str):
            return (v,)
        return v

    @property
    def type_name(self) -> str:
        """Event type as a plain string (also for types outside EventType)."""
        return self.type.value if isinstance(self.type, EventType) else self.type

    @property
    def is_batch(self) -> bool:
        return self.type == EventType.RW_BATCH

    @property
    def is_reactor_occupying(self) -> bool:
        """Events on a reactor lane lock the reactor for their whole window."""
        return self.lane_type == LaneType.RW

    @property
    def lane_key(self) -> str:
        lane_type = self.lane_type.value if self.lane_type is not None else "?"
        return f"{lane_type}:{self.lane_id}"

    @property
    def consumer_volume_l(self) -> float:
        return sum(c.volume_l for c in self.consumers)

    def __str__(self) -> str:
        lane = self.lane_id or "?"
        volume = f" {self.volume_l:.0f} L" if self.volume_l is not None else ""
        return f"{self.type_name} on {lane} [{self.start}-{self.end}]{volume} {self.product_id or ''}".rstrip()
