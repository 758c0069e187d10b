"""Ledger client boundary (Protocols only).

The engine talks to an external ledger network through `LedgerClient`.
Key management and signing stay outside: a `TransactionSigner` turns a contract
call into an encoded, signed transaction.
"""

from dataclasses import dataclass
from typing import Protocol

from src.tr_common.enums import Direction


@dataclass(frozen=True)
class TxResult:
    tx_id: str
    success: bool
    message: str | None = None


class LedgerClient(Protocol):
    async def get_current_tick(self) -> int: ...

    async def get_balance(self, address: str) -> float: ...

    async def broadcast_wager(
        self, address: str, direction: Direction, amount: float, round_id: int
    ) -> TxResult: ...

    async def broadcast_claim(self, address: str, round_id: int) -> TxResult: ...

    async def close(self) -> None: ...


class TransactionSigner(Protocol):
    async def sign(
        self,
        address: str,
        contract_id: int,
        input_type: int,
        payload: bytes,
        amount: float,
        target_tick: int,
    ) -> bytes: ...
