"""FastAPI dependency: get_engine.

The engine is built once at import time and stored on app.state; this
dependency makes sure it has loaded its persisted state before first use.
Tests swap it with `app.dependency_overrides[get_engine]`.
"""

from fastapi import Request

from src.tr_engine.core import EngineCore


async def get_engine(request: Request) -> EngineCore:
    engine: EngineCore = request.app.state.engine
    await engine.initialize()
    return engine
