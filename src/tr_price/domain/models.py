"""Domain models for tr_price."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PricePoint:
    value: float
    at_tick: int


@dataclass
class PriceSnapshot:
    price: float
    change_pct: float           # over the retained history window
    history: list[PricePoint]
