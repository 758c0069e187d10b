"""Domain models for tr_bet, with their storage mapping."""

from dataclasses import dataclass
from typing import Any

from src.tr_common.amounts import is_finite_number
from src.tr_common.enums import Direction
from src.tr_common.errors import CorruptedValueError


@dataclass
class Bet:
    id: str
    round_id: int
    address: str
    direction: Direction
    amount: float
    placed_at: int              # epoch ms
    claimed: bool = False
    won: bool | None = None     # None until the round is settled
    payout: float | None = None

    @property
    def resolved(self) -> bool:
        return self.won is not None

    @property
    def claimable(self) -> bool:
        return self.won is True and not self.claimed

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "round_id": self.round_id,
            "address": self.address,
            "direction": self.direction.value,
            "amount": self.amount,
            "placed_at": self.placed_at,
            "claimed": self.claimed,
            "won": self.won,
            "payout": self.payout,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Bet":
        if not isinstance(data, dict):
            raise CorruptedValueError("bets", f"bet record is not a mapping: {data!r}")
        claimed = data.get("claimed", False)
        won = data.get("won")
        if not isinstance(claimed, bool) or not (won is None or isinstance(won, bool)):
            raise CorruptedValueError(
                "bets", f"bad flags in bet record {data!r}: claimed={claimed!r} won={won!r}"
            )
        try:
            bet = cls(
                id=str(data["id"]),
                round_id=int(data["round_id"]),
                address=str(data["address"]),
                direction=Direction(data["direction"]),
                amount=float(data["amount"]),
                placed_at=int(data["placed_at"]),
                claimed=claimed,
                won=won,
                payout=None if data.get("payout") is None else float(data["payout"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise CorruptedValueError("bets", f"bad bet record {data!r}: {exc}") from exc
        if not is_finite_number(bet.amount) or bet.amount <= 0:
            raise CorruptedValueError("bets", f"bad amount in bet {bet.id}")
        if bet.payout is not None and not is_finite_number(bet.payout):
            raise CorruptedValueError("bets", f"bad payout in bet {bet.id}")
        if bet.claimed and bet.won is not True:
            raise CorruptedValueError("bets", f"bet {bet.id} claimed without a win")
        return bet


@dataclass(frozen=True)
class ClaimableWinning:
    round_id: int
    amount: float
    direction: Direction


@dataclass(frozen=True)
class UserStats:
    total_bets: int
    total_wins: int
    total_losses: int
    total_wagered: float
    total_won: float
    win_rate: float             # percent of resolved bets

    @classmethod
    def from_bets(cls, bets: list[Bet]) -> "UserStats":
        wins = sum(1 for b in bets if b.won is True)
        losses = sum(1 for b in bets if b.won is False)
        resolved = wins + losses
        return cls(
            total_bets=len(bets),
            total_wins=wins,
            total_losses=losses,
            total_wagered=sum(b.amount for b in bets),
            total_won=sum(b.payout or 0.0 for b in bets if b.won is True),
            win_rate=wins / resolved * 100 if resolved else 0.0,
        )
