"""Unified error codes and custom exceptions.

Error code ranges:
  2xxx: Account / session
  3xxx: Round
  4xxx: Bet
  6xxx: Ledger network
  9xxx: System

Rejected operations (2xxx-6xxx) never mutate state. The 9xxx storage errors are
recovered inside the engine and never reach an API caller.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 2xxx: Account / session ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: float, available: float) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required:.2f}, available {available:.2f}",
            422,
        )


class WalletNotConnectedError(AppError):
    def __init__(self) -> None:
        super().__init__(2002, "Wallet not connected", 401)


class InvalidAddressError(AppError):
    def __init__(self, address: str) -> None:
        super().__init__(2003, f"Invalid address: {address!r}", 422)


# --- 3xxx: Round ---

class InvalidRoundError(AppError):
    def __init__(self, round_id: int) -> None:
        super().__init__(3001, f"Invalid round id: {round_id}", 404)


# --- 4xxx: Bet ---

class BetValidationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4001, f"Invalid bet: {detail}", 422)


class NoClaimableWinningsError(AppError):
    def __init__(self, round_id: int) -> None:
        super().__init__(4002, f"No claimable winnings for round {round_id}", 404)


# --- 6xxx: Ledger network ---

class LedgerBroadcastError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(6001, f"Transaction failed: {detail}", 502)


class LedgerUnavailableError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(6002, f"Ledger network unavailable: {detail}", 503)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class StorageUnavailableError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9003, f"Storage unavailable: {detail}", 503)


class CorruptedValueError(AppError):
    def __init__(self, key: str, detail: str) -> None:
        super().__init__(9004, f"Corrupted persisted value at {key}: {detail}", 500)


class DemoUnavailableError(AppError):
    def __init__(self) -> None:
        super().__init__(2004, "Demo accounts are only available in simulation mode", 422)
