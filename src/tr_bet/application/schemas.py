"""Pydantic schemas for bet, claim, quote and stats endpoints."""

from pydantic import BaseModel, Field

from src.tr_bet.domain.models import Bet, ClaimableWinning, UserStats
from src.tr_bet.domain.payout import PayoutQuote
from src.tr_common.amounts import format_amount
from src.tr_common.enums import Direction
from src.tr_engine.interface import ClaimReceipt

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PlaceBetRequest(BaseModel):
    direction: Direction
    amount: float = Field(..., gt=0, description="Stake in QU")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BetItem(BaseModel):
    id: str
    round_id: int
    address: str
    direction: Direction
    amount: float
    placed_at: int
    claimed: bool
    won: bool | None
    payout: float | None

    @classmethod
    def from_domain(cls, b: Bet) -> "BetItem":
        return cls(
            id=b.id,
            round_id=b.round_id,
            address=b.address,
            direction=b.direction,
            amount=b.amount,
            placed_at=b.placed_at,
            claimed=b.claimed,
            won=b.won,
            payout=b.payout,
        )


class BetListResponse(BaseModel):
    items: list[BetItem]


class ClaimableItem(BaseModel):
    round_id: int
    amount: float
    amount_display: str
    direction: Direction

    @classmethod
    def from_domain(cls, c: ClaimableWinning) -> "ClaimableItem":
        return cls(
            round_id=c.round_id,
            amount=c.amount,
            amount_display=format_amount(c.amount),
            direction=c.direction,
        )


class ClaimResponse(BaseModel):
    tx_id: str
    round_id: int
    amount: float
    amount_display: str

    @classmethod
    def from_receipt(cls, r: ClaimReceipt) -> "ClaimResponse":
        return cls(
            tx_id=r.tx_id,
            round_id=r.round_id,
            amount=r.amount,
            amount_display=format_amount(r.amount),
        )


class QuoteResponse(BaseModel):
    amount: float
    direction: Direction
    expected_payout: float
    expected_payout_display: str
    multiplier: float
    house_fee_amount: float
    net_profit: float

    @classmethod
    def from_quote(cls, q: PayoutQuote) -> "QuoteResponse":
        return cls(
            amount=q.amount,
            direction=q.direction,
            expected_payout=q.expected_payout,
            expected_payout_display=format_amount(q.expected_payout),
            multiplier=round(q.multiplier, 4),
            house_fee_amount=q.house_fee_amount,
            net_profit=q.net_profit,
        )


class StatsResponse(BaseModel):
    total_bets: int
    total_wins: int
    total_losses: int
    total_wagered: float
    total_won: float
    win_rate: float

    @classmethod
    def from_domain(cls, s: UserStats) -> "StatsResponse":
        return cls(
            total_bets=s.total_bets,
            total_wins=s.total_wins,
            total_losses=s.total_losses,
            total_wagered=s.total_wagered,
            total_won=s.total_won,
            win_rate=s.win_rate,
        )
