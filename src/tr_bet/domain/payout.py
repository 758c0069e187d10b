"""Pari-mutuel payout.

    pool          = pool on the bettor's side before the wager
    opposite_pool = pool on the other side
    total_after   = (pool + opposite_pool) * (1 - house_fee)
    share         = amount / (pool + amount)
    payout        = total_after * share

`pool + amount > 0` whenever amount > 0, so the payout is always defined. With
an empty side (pool == 0) the bettor takes the whole after-fee pool.
"""

from dataclasses import dataclass

from src.tr_common.enums import Direction
from src.tr_round.domain.models import Round


def calculate_payout(
    amount: float,
    pool: float,
    opposite_pool: float,
    house_fee: float,
) -> float:
    if amount <= 0:
        raise ValueError(f"amount must be positive, got {amount}")
    if pool < 0 or opposite_pool < 0:
        raise ValueError("pools must be non-negative")
    total_after_fee = (pool + opposite_pool) * (1 - house_fee)
    share = amount / (pool + amount)
    return total_after_fee * share


@dataclass(frozen=True)
class PayoutQuote:
    amount: float
    direction: Direction
    expected_payout: float
    multiplier: float           # expected_payout / amount, display only
    house_fee_amount: float
    net_profit: float


class PayoutEngine:
    def __init__(self, house_fee: float) -> None:
        if not (0 <= house_fee < 1):
            raise ValueError(f"house_fee must be in [0, 1), got {house_fee}")
        self.house_fee = house_fee

    def compute(self, amount: float, direction: Direction, round_: Round) -> float:
        return calculate_payout(
            amount,
            round_.pool_for(direction),
            round_.pool_for(direction.opposite),
            self.house_fee,
        )

    def quote(self, amount: float, direction: Direction, round_: Round) -> PayoutQuote:
        payout = self.compute(amount, direction, round_)
        return PayoutQuote(
            amount=amount,
            direction=direction,
            expected_payout=payout,
            multiplier=payout / amount,
            house_fee_amount=amount * self.house_fee,
            net_profit=payout - amount,
        )
