"""Pydantic schemas for account and session endpoints."""

from pydantic import BaseModel, Field

from src.tr_account.domain.session import Session
from src.tr_common.amounts import format_amount


class ConnectRequest(BaseModel):
    address: str = Field(..., min_length=1, max_length=128)


class BalanceResponse(BaseModel):
    address: str
    balance: float
    balance_display: str

    @classmethod
    def from_amount(cls, address: str, balance: float) -> "BalanceResponse":
        return cls(address=address, balance=balance, balance_display=format_amount(balance))


class SessionResponse(BaseModel):
    connected: bool
    address: str | None
    demo_mode: bool
    simulation: bool

    @classmethod
    def from_domain(cls, s: Session, simulation: bool) -> "SessionResponse":
        return cls(
            connected=s.connected,
            address=s.address,
            demo_mode=s.demo_mode,
            simulation=simulation,
        )
