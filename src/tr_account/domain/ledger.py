"""Spendable demo balance per address.

Only two mutations exist: `debit` (wager placement) and `credit` (claim). A
debit larger than the balance is rejected, never clamped, so balances cannot go
negative. Each mutation persists the whole mapping under `balances` and then
publishes a balance-changed notification.

Stored balances that are not finite numbers are treated as corrupted: they are
replaced with the initial balance and written back straight away.
"""

import logging
from collections.abc import Callable

from src.tr_account.domain.events import BalanceEvents, BalanceListener
from src.tr_common.amounts import is_finite_number
from src.tr_common.errors import BetValidationError, CorruptedValueError, InsufficientBalanceError
from src.tr_persistence.domain import keys
from src.tr_persistence.layer import PersistenceLayer

logger = logging.getLogger(__name__)


def _parse_balance(address: str, value: object) -> float:
    if not is_finite_number(value):
        raise CorruptedValueError(f"{keys.BALANCES}.{address}", f"not a finite number: {value!r}")
    if value < 0:  # type: ignore[operator]
        raise CorruptedValueError(f"{keys.BALANCES}.{address}", f"negative balance: {value!r}")
    return float(value)  # type: ignore[arg-type]


class BalanceLedger:
    def __init__(
        self,
        store: PersistenceLayer,
        initial_balance: float,
        events: BalanceEvents | None = None,
    ) -> None:
        self._store = store
        self._initial_balance = initial_balance
        self._balances: dict[str, float] = {}
        self.events = events or BalanceEvents()

    @property
    def initial_balance(self) -> float:
        return self._initial_balance

    async def load(self) -> None:
        raw = await self._store.load(keys.BALANCES)
        if raw is None:
            return
        healed = False
        if not isinstance(raw, dict):
            logger.warning("Stored balances are not a mapping (%r), starting empty", type(raw))
            raw = {}
            healed = True
        for address, value in raw.items():
            try:
                self._balances[address] = _parse_balance(address, value)
            except CorruptedValueError as exc:
                logger.warning("%s; resetting to %.2f", exc.message, self._initial_balance)
                self._balances[address] = self._initial_balance
                healed = True
        if healed:
            await self._save()

    def balance_of(self, address: str) -> float:
        return self._balances.get(address, 0.0)

    def has_account(self, address: str) -> bool:
        return address in self._balances

    async def open_account(self, address: str) -> float:
        """Seed `address` with the initial balance if it has no entry yet."""
        if address not in self._balances:
            self._balances[address] = self._initial_balance
            await self._save()
            logger.info("Opened demo account %s with %.2f", address, self._initial_balance)
            self.events.publish()
        return self._balances[address]

    async def debit(self, address: str, amount: float) -> float:
        if not is_finite_number(amount) or amount <= 0:
            raise BetValidationError(f"debit amount must be positive, got {amount!r}")
        available = self.balance_of(address)
        if amount > available:
            raise InsufficientBalanceError(amount, available)
        self._balances[address] = available - amount
        await self._save()
        self.events.publish()
        return self._balances[address]

    async def credit(self, address: str, amount: float) -> float:
        if not is_finite_number(amount) or amount < 0:
            raise BetValidationError(f"credit amount must be non-negative, got {amount!r}")
        self._balances[address] = self.balance_of(address) + amount
        await self._save()
        self.events.publish()
        return self._balances[address]

    def subscribe(self, listener: BalanceListener) -> Callable[[], None]:
        return self.events.subscribe(listener)

    async def reset(self) -> None:
        self._balances.clear()
        await self._store.delete(keys.BALANCES)
        self.events.publish()

    async def _save(self) -> None:
        await self._store.save(keys.BALANCES, dict(self._balances))
