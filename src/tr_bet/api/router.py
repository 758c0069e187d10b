"""Bet endpoints: placement, listing, claims, quotes and stats.

Everything except the quote acts on the active session's account.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.tr_bet.application.schemas import (
    BetItem,
    BetListResponse,
    ClaimableItem,
    ClaimResponse,
    PlaceBetRequest,
    QuoteResponse,
    StatsResponse,
)
from src.tr_common.enums import Direction
from src.tr_common.response import ApiResponse, success_response
from src.tr_engine.core import EngineCore
from src.tr_gateway.api.dependencies import get_engine

router = APIRouter(tags=["bets"])


@router.get("/payout/quote")
async def quote_payout(
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
    direction: Direction = Query(...),
    amount: float = Query(..., gt=0),
) -> ApiResponse:
    quote = await engine.quote(direction, amount)
    return success_response(QuoteResponse.from_quote(quote).model_dump(), request)


@router.post("/bets")
async def place_bet(
    body: PlaceBetRequest,
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
) -> ApiResponse:
    bet = await engine.place_bet(body.direction, body.amount)
    return success_response(BetItem.from_domain(bet).model_dump(), request)


@router.get("/bets")
async def list_bets(
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
) -> ApiResponse:
    bets = await engine.list_bets()
    data = BetListResponse(items=[BetItem.from_domain(b) for b in bets])
    return success_response(data.model_dump(), request)


@router.get("/bets/claimable")
async def list_claimable(
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
) -> ApiResponse:
    items = [ClaimableItem.from_domain(c).model_dump() for c in await engine.claimable()]
    return success_response({"items": items}, request)


@router.post("/bets/claim/{round_id}")
async def claim_winnings(
    round_id: int,
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
) -> ApiResponse:
    receipt = await engine.claim(round_id)
    return success_response(ClaimResponse.from_receipt(receipt).model_dump(), request)


@router.get("/bets/stats")
async def get_stats(
    engine: Annotated[EngineCore, Depends(get_engine)],
    request: Request,
) -> ApiResponse:
    stats = await engine.stats()
    return success_response(StatsResponse.from_domain(stats).model_dump(), request)
