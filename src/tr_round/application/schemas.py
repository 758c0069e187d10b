"""Pydantic schemas for round endpoints."""

from pydantic import BaseModel

from src.tr_round.domain.models import Round


class RoundResponse(BaseModel):
    id: int
    start_tick: int
    end_tick: int
    start_price: float | None
    end_price: float | None
    result: str | None
    total_pool: float
    up_pool: float
    down_pool: float
    status: str

    @classmethod
    def from_domain(cls, r: Round) -> "RoundResponse":
        return cls(
            id=r.id,
            start_tick=r.start_tick,
            end_tick=r.end_tick,
            start_price=r.start_price,
            end_price=r.end_price,
            result=r.result.value if r.result else None,
            total_pool=r.total_pool,
            up_pool=r.up_pool,
            down_pool=r.down_pool,
            status=r.status.value,
        )


class CurrentRoundResponse(RoundResponse):
    current_tick: int
    ticks_remaining: int


class RoundHistoryResponse(BaseModel):
    items: list[RoundResponse]
