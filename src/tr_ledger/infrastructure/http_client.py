"""LedgerClient over the network RPC, using httpx.

Endpoints:
  GET  /v1/tick-info                -> {"tickInfo": {"tick": n}} or {"tick": n}
  GET  /v1/balances/{address}       -> {"balance": x} or {"entity": {"balance": x}}
  POST /v1/broadcast-transaction    <- {"encodedTransaction": base64}

Reads raise LedgerUnavailableError on failure. Broadcasts never raise: every
failure comes back as TxResult(success=False, message=...). Transactions are
targeted `target_tick_offset` ticks ahead of the current tick.
"""

import base64
import logging
from typing import Any

import httpx

from src.tr_common.enums import Direction
from src.tr_common.errors import LedgerUnavailableError
from src.tr_ledger.domain.client import TransactionSigner, TxResult
from src.tr_ledger.domain.encoding import (
    CLAIM_INPUT_TYPE,
    WAGER_INPUT_TYPE,
    encode_claim_input,
    encode_wager_input,
)

logger = logging.getLogger(__name__)


def _extract_tick(data: Any) -> int:
    if isinstance(data, dict):
        info = data.get("tickInfo")
        if isinstance(info, dict) and "tick" in info:
            return int(info["tick"])
        if "tick" in data:
            return int(data["tick"])
    return 0


def _extract_balance(data: Any) -> float:
    if isinstance(data, dict):
        if data.get("balance") is not None:
            return float(data["balance"])
        entity = data.get("entity")
        if isinstance(entity, dict) and entity.get("balance") is not None:
            return float(entity["balance"])
    return 0.0


def _extract_tx_id(data: Any) -> str:
    if isinstance(data, dict):
        for key in ("transactionId", "txId", "txHash", "id"):
            if data.get(key):
                return str(data[key])
    return ""


def _extract_error(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if body.get(key):
                return str(body[key])
    return f"RPC error: {response.status_code}"


class HttpLedgerClient:
    def __init__(
        self,
        rpc_url: str,
        contract_id: int,
        signer: TransactionSigner | None = None,
        timeout: float = 5.0,
        target_tick_offset: int = 20,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._contract_id = contract_id
        self._signer = signer
        self._target_tick_offset = target_tick_offset
        self._http = http or httpx.AsyncClient(base_url=rpc_url, timeout=timeout)

    async def get_current_tick(self) -> int:
        try:
            response = await self._http.get("/v1/tick-info")
            response.raise_for_status()
            return _extract_tick(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            raise LedgerUnavailableError(f"failed to get current tick: {exc}") from exc

    async def get_balance(self, address: str) -> float:
        try:
            response = await self._http.get(f"/v1/balances/{address}")
            response.raise_for_status()
            return _extract_balance(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            raise LedgerUnavailableError(f"failed to fetch balance: {exc}") from exc

    async def broadcast_wager(
        self, address: str, direction: Direction, amount: float, round_id: int
    ) -> TxResult:
        payload = encode_wager_input(direction, round_id)
        return await self._broadcast(address, WAGER_INPUT_TYPE, payload, amount)

    async def broadcast_claim(self, address: str, round_id: int) -> TxResult:
        payload = encode_claim_input(round_id)
        return await self._broadcast(address, CLAIM_INPUT_TYPE, payload, 0)

    async def _broadcast(
        self, address: str, input_type: int, payload: bytes, amount: float
    ) -> TxResult:
        if self._signer is None:
            return TxResult(tx_id="", success=False, message="No transaction signer configured")
        try:
            tick = await self.get_current_tick()
            signed = await self._signer.sign(
                address,
                self._contract_id,
                input_type,
                payload,
                amount,
                tick + self._target_tick_offset,
            )
            response = await self._http.post(
                "/v1/broadcast-transaction",
                json={"encodedTransaction": base64.b64encode(signed).decode()},
            )
            if response.is_error:
                return TxResult(tx_id="", success=False, message=_extract_error(response))
            tx_id = _extract_tx_id(response.json())
        except LedgerUnavailableError as exc:
            return TxResult(tx_id="", success=False, message=exc.message)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Broadcast failed for %s: %s", address, exc)
            return TxResult(tx_id="", success=False, message=str(exc))
        return TxResult(tx_id=tx_id, success=True, message="Transaction broadcast successfully")

    async def close(self) -> None:
        await self._http.aclose()
