"""Unit tests for PriceProcess."""
import random

import pytest

from src.tr_persistence.domain import keys
from src.tr_persistence.infrastructure.memory_backend import InMemoryBackend
from src.tr_persistence.layer import PersistenceLayer
from src.tr_price.domain.process import PriceProcess


def _process(store: PersistenceLayer | None = None, seed: int = 3, **kwargs: float) -> PriceProcess:
    return PriceProcess(store or PersistenceLayer(InMemoryBackend()), random.Random(seed), **kwargs)


class TestStep:
    def test_stays_in_band(self) -> None:
        proc = _process(initial_price=1001, price_min=1000, price_max=1010, force=50, max_velocity=50)
        for tick in range(500):
            price = proc.step(tick)
            assert 1000 <= price <= 1010

    def test_velocity_bounded(self) -> None:
        proc = _process(force=10, max_velocity=2)
        for tick in range(200):
            proc.step(tick)
            assert abs(proc.velocity) <= 2

    def test_same_seed_same_path(self) -> None:
        a, b = _process(seed=11), _process(seed=11)
        assert [a.step(t) for t in range(30)] == [b.step(t) for t in range(30)]

    def test_history_is_fifo(self) -> None:
        proc = _process(history_size=5)
        for tick in range(8):
            proc.step(tick)
        history = proc.history()
        assert len(history) == 5
        assert [p.at_tick for p in history] == [3, 4, 5, 6, 7]
        assert history[-1].value == proc.current_price

    def test_initial_price_outside_band_rejected(self) -> None:
        with pytest.raises(ValueError):
            _process(initial_price=10, price_min=1000, price_max=5000)


class TestChangeOverWindow:
    def test_empty_history(self) -> None:
        assert _process().change_over_window() == 0.0

    def test_relative_to_oldest_sample(self) -> None:
        proc = _process(history_size=10)
        for tick in range(10):
            proc.step(tick)
        oldest = proc.history()[0].value
        expected = (proc.current_price - oldest) / oldest * 100
        assert proc.change_over_window() == pytest.approx(expected)
        assert proc.snapshot().change_pct == pytest.approx(expected)


class TestPersistence:
    async def test_advance_persists_price_and_history(self) -> None:
        store = PersistenceLayer(InMemoryBackend())
        proc = _process(store)
        await proc.advance(1)
        await proc.advance(2)

        reloaded = _process(store)
        await reloaded.load()
        assert reloaded.current_price == proc.current_price
        assert reloaded.history() == proc.history()
        assert reloaded.velocity == 0.0

    async def test_out_of_band_stored_price_ignored(self) -> None:
        store = PersistenceLayer(InMemoryBackend())
        await store.save(keys.PRICE, 99_999)
        proc = _process(store, initial_price=2500)
        await proc.load()
        assert proc.current_price == 2500

    async def test_reset(self) -> None:
        store = PersistenceLayer(InMemoryBackend())
        proc = _process(store, initial_price=2500)
        await proc.advance(1)
        await proc.reset()
        assert proc.current_price == 2500
        assert proc.history() == []
        assert await store.load(keys.PRICE) is None
