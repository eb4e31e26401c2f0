"""Price calculation, negotiation check and the live pricing socket"""
import asyncio
import logging
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from haulage.api.deps import get_engine, get_live_engine
from haulage.core.metrics import live_pricing_sessions
from haulage.core.response_builders import build_pricing_response
from haulage.schemas.pricing import (
    CalculateRequest,
    CalculateResponse,
    DistanceOut,
    NegotiationRequest,
    NegotiationResult,
    PricingRequest,
)
from haulage.services import negotiation
from haulage.services.distance import DistanceResolver
from haulage.services.pricing import PricingEngine, PricingSession

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/pricing", tags=["pricing"])

resolver = DistanceResolver()


@router.get("/distance", response_model=DistanceOut)
async def get_distance(
    from_lga: str = Query(..., min_length=1),
    to_lga: str = Query(..., min_length=1),
):
    return DistanceOut(
        from_lga=from_lga,
        to_lga=to_lga,
        distance_km=resolver.resolve(from_lga, to_lga),
    )


@router.post("/calculate", response_model=CalculateResponse)
async def calculate(
    req: CalculateRequest,
    engine: PricingEngine = Depends(get_engine),
):
    result = await engine.calculate(req)

    analysis = None
    if result is not None:
        offer = negotiation.parse_offer_price(req.offer_price)
        if offer is not None:
            analysis = negotiation.evaluate(offer, result.breakdown.break_even_price)

    return build_pricing_response(result, analysis)


@router.post("/negotiate", response_model=NegotiationResult)
async def negotiate(req: NegotiationRequest):
    offer = negotiation.parse_offer_price(req.offer_price) or 0.0
    return negotiation.evaluate(offer, req.break_even_price)


@router.websocket("/live")
async def live_pricing(
    websocket: WebSocket,
    engine: PricingEngine = Depends(get_live_engine),
):
    """Each message starts a new cycle; only the latest cycle's result is sent."""
    await websocket.accept()
    live_pricing_sessions.inc()
    session = PricingSession(engine)
    tasks = set()

    async def run_cycle(request: PricingRequest):
        try:
            update = await session.recalculate(request)
        except Exception:
            logger.exception("Live pricing cycle failed")
            await websocket.send_json({"error": "pricing_failed"})
            return
        if not update.applied:
            return
        response = build_pricing_response(update.result)
        await websocket.send_json({"token": update.token, **response.model_dump(mode="json")})

    try:
        while True:
            payload = await websocket.receive_text()
            try:
                request = PricingRequest.model_validate_json(payload)
            except ValidationError as e:
                await websocket.send_json({"error": "invalid_request", "detail": e.errors(include_url=False, include_context=False)})
                continue

            task = asyncio.create_task(run_cycle(request))
            tasks.add(task)
            task.add_done_callback(tasks.discard)
    except WebSocketDisconnect:
        logger.debug("Live pricing client disconnected")
    finally:
        live_pricing_sessions.dec()
        for task in list(tasks):
            task.cancel()
