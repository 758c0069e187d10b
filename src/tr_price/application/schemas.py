"""Pydantic schemas for the price endpoint."""

from pydantic import BaseModel

from src.tr_common.amounts import format_percentage
from src.tr_price.domain.models import PriceSnapshot


class PricePointOut(BaseModel):
    value: float
    at_tick: int


class PriceResponse(BaseModel):
    price: float
    change_pct: float
    change_display: str
    history: list[PricePointOut]

    @classmethod
    def from_snapshot(cls, snapshot: PriceSnapshot) -> "PriceResponse":
        return cls(
            price=snapshot.price,
            change_pct=snapshot.change_pct,
            change_display=format_percentage(snapshot.change_pct),
            history=[PricePointOut(value=p.value, at_tick=p.at_tick) for p in snapshot.history],
        )
