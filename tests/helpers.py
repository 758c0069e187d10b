"""Builders shared by unit and integration tests."""

import random
from collections.abc import Callable

from config.settings import Settings
from src.tr_engine.core import EngineCore
from src.tr_engine.factory import build_engine
from src.tr_ledger.domain.client import LedgerClient
from src.tr_persistence.layer import PersistenceLayer
from src.tr_round.domain.clock import TickSource

FROZEN_MS = 1_718_000_000_000
SEED = 42


def make_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "SIMULATION_MODE": True,
        "TICKER_ENABLED": False,
        "STORAGE_BACKEND": "memory",
        "ROUND_DURATION": 20,
        "HOUSE_FEE": 0.02,
        "INITIAL_BALANCE": 10_000,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[arg-type]


def make_engine(
    store: PersistenceLayer,
    ticks: TickSource,
    ledger_client: LedgerClient | None = None,
    time_ms: Callable[[], int] = lambda: FROZEN_MS,
    **overrides: object,
) -> EngineCore:
    if ledger_client is not None:
        overrides.setdefault("SIMULATION_MODE", False)
    return build_engine(
        make_settings(**overrides),
        store=store,
        tick_source=ticks,
        ledger_client=ledger_client,
        rng=random.Random(SEED),
        time_ms=time_ms,
    )
