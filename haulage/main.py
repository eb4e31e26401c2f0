from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from starlette.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware
from haulage.api import catalog, params, pricing, quotes
from haulage.core.config import settings
from haulage.core.exceptions import QuoteVersionConflict, StoreUnavailableError
from haulage.core.redis import init_redis, close_redis, is_redis_ready, ping_redis
from haulage.core.metrics import request_count, request_duration, db_connected, redis_connected, get_metrics_text
from haulage.db.session import engine
from haulage.models.base import Base
from haulage.services.pricing import PricingFeatures
from dataclasses import asdict
import time
import logging

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _endpoint_label(request: Request) -> str:
    # Route template keeps quote ids out of the label set
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        status = 500

        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            endpoint = _endpoint_label(request)
            request_count.labels(
                method=request.method,
                endpoint=endpoint,
                status=status
            ).inc()
            request_duration.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(time.perf_counter() - start_time)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting...")

    logger.info("Initializing Redis connection...")
    try:
        await init_redis()
        redis_connected.set(1)
        logger.info("Redis connected")
    except Exception as e:
        logger.error(f"Redis connection failed: {e}")
        redis_connected.set(0)

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        db_connected.set(1)
        logger.info("Database connected")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        db_connected.set(0)

    yield

    logger.info("Application shutting down...")
    await close_redis()
    await engine.dispose()
    redis_connected.set(0)
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan
)

app.add_middleware(MetricsMiddleware)

app.include_router(catalog.router)
app.include_router(params.router)
app.include_router(pricing.router)
app.include_router(quotes.router)


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(QuoteVersionConflict)
async def version_conflict_handler(request: Request, exc: QuoteVersionConflict):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.get("/metrics", tags=["monitoring"])
async def metrics():
    return Response(
        content=get_metrics_text(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@app.get("/health", tags=["monitoring"])
async def health_check():
    redis_healthy = is_redis_ready()

    return {
        "status": "healthy",
        "service": settings.API_TITLE,
        "version": settings.API_VERSION,
        "dependencies": {
            "redis": "connected" if redis_healthy else "disconnected",
        },
        "route_provider": "google" if settings.GOOGLE_MAPS_API_KEY else "table",
        "fuel_feed": "live" if settings.FUEL_PRICE_API_URL else "simulated",
        "features": asdict(PricingFeatures.from_settings()),
    }


@app.get("/readiness", tags=["monitoring"])
async def readiness_check():
    if not await ping_redis():
        return JSONResponse(
            status_code=503,
            content={"ready": False, "reason": "Redis not available"},
        )

    return {
        "ready": True,
        "service": settings.API_TITLE
    }


@app.get("/", tags=["root"])
async def root():
    return {
        "message": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics"
    }
