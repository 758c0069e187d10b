"""Shared test fixtures.

Every test gets a freshly built engine: in-memory storage, a hand-driven tick
source, a seeded RNG and a frozen clock, so outcomes are exact and repeatable.
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.tr_engine.core import EngineCore
from src.tr_gateway.api.dependencies import get_engine
from src.tr_persistence.infrastructure.memory_backend import InMemoryBackend
from src.tr_persistence.layer import PersistenceLayer
from src.tr_round.domain.clock import ManualTickSource
from tests.helpers import make_engine


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def store(backend: InMemoryBackend) -> PersistenceLayer:
    return PersistenceLayer(backend)


@pytest.fixture
def ticks() -> ManualTickSource:
    return ManualTickSource(tick=5)


@pytest.fixture
async def engine(store: PersistenceLayer, ticks: ManualTickSource) -> EngineCore:
    eng = make_engine(store, ticks)
    await eng.initialize()
    return eng


@pytest.fixture
async def client(engine: EngineCore) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints against the test engine."""

    async def _override() -> EngineCore:
        return engine

    app.dependency_overrides[get_engine] = _override
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_engine, None)
