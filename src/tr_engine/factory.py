"""Pick SimulationEngine or LedgerEngine once, from settings.

Every collaborator can be injected (storage, tick source, ledger client, RNG,
time) so tests build a fully deterministic engine with fresh state.
"""

import random
from collections.abc import Callable

from config.settings import Settings
from src.tr_account.domain.ledger import BalanceLedger
from src.tr_account.domain.session import SessionStore
from src.tr_bet.domain.ledger import BetLedger
from src.tr_bet.domain.payout import PayoutEngine
from src.tr_common.datetime_utils import now_ms
from src.tr_engine.core import EngineCore, EngineParts
from src.tr_engine.ledger_engine import LedgerEngine
from src.tr_engine.simulation import SimulationEngine
from src.tr_ledger.domain.client import LedgerClient
from src.tr_ledger.infrastructure.http_client import HttpLedgerClient
from src.tr_ledger.infrastructure.tick_source import LedgerTickSource
from src.tr_persistence.factory import build_persistence
from src.tr_persistence.layer import PersistenceLayer
from src.tr_price.domain.process import PriceProcess
from src.tr_round.domain.clock import RoundClock, TickSource, WallClockTickSource
from src.tr_round.domain.store import RoundStore


def build_engine(
    cfg: Settings,
    store: PersistenceLayer | None = None,
    tick_source: TickSource | None = None,
    ledger_client: LedgerClient | None = None,
    rng: random.Random | None = None,
    time_ms: Callable[[], int] = now_ms,
) -> EngineCore:
    store = store or build_persistence(cfg)
    rng = rng or random.Random(cfg.RANDOM_SEED)
    simulation = cfg.SIMULATION_MODE

    wall_clock = WallClockTickSource(cfg.TICK_DURATION_MS, cfg.CLOCK_EPOCH_MS, time_ms)
    if not simulation and ledger_client is None:
        ledger_client = HttpLedgerClient(
            cfg.LEDGER_RPC_URL,
            cfg.LEDGER_CONTRACT_ID,
            timeout=cfg.LEDGER_TIMEOUT_SECONDS,
            target_tick_offset=cfg.ROUND_DURATION,
        )
    if tick_source is None:
        if simulation or ledger_client is None:
            tick_source = wall_clock
        else:
            tick_source = LedgerTickSource(ledger_client, wall_clock)

    clock = RoundClock(tick_source, cfg.ROUND_DURATION)
    payout = PayoutEngine(cfg.HOUSE_FEE)
    rounds = RoundStore(store, clock, rng, simulate_pools=simulation)
    price = PriceProcess(
        store,
        rng,
        initial_price=cfg.PRICE_INITIAL,
        price_min=cfg.PRICE_MIN,
        price_max=cfg.PRICE_MAX,
        force=cfg.PRICE_FORCE,
        max_velocity=cfg.PRICE_MAX_VELOCITY,
        history_size=cfg.PRICE_HISTORY_SIZE,
    )
    balances = BalanceLedger(store, cfg.INITIAL_BALANCE) if simulation else None
    bets = BetLedger(
        store,
        rounds,
        clock,
        payout,
        rng,
        min_bet=cfg.MIN_BET,
        max_bet=cfg.MAX_BET,
        balances=balances,
        fallback_enabled=cfg.SETTLEMENT_FALLBACK_ENABLED,
        fallback_win_probability=cfg.FALLBACK_WIN_PROBABILITY,
        time_ms=time_ms,
    )
    parts = EngineParts(
        store=store,
        clock=clock,
        price=price,
        rounds=rounds,
        bets=bets,
        payout=payout,
        sessions=SessionStore(store),
    )
    if simulation:
        assert balances is not None
        return SimulationEngine(
            parts, balances, demo_address=cfg.DEMO_ADDRESS, rng=rng, time_ms=time_ms
        )
    assert ledger_client is not None
    return LedgerEngine(parts, client=ledger_client)
