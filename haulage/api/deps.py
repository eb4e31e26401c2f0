"""FastAPI dependencies wiring the stores and the pricing engine."""
from fastapi import Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from haulage.core.config import settings
from haulage.core.redis import get_redis
from haulage.db.session import get_db
from haulage.services.fuel import FuelPriceService
from haulage.services.params import ParamStore, RedisParamStore, default_pricing_params
from haulage.services.pricing import PricingEngine, PricingFeatures
from haulage.services.quote_store import QuoteStore
from haulage.services.routing import RouteProvider, build_route_provider


def get_param_store(redis: Redis = Depends(get_redis)) -> RedisParamStore:
    return RedisParamStore(redis)


def get_fuel_service(redis: Redis = Depends(get_redis)) -> FuelPriceService:
    return FuelPriceService(redis, api_url=settings.FUEL_PRICE_API_URL)


def get_route_provider(redis: Redis = Depends(get_redis)) -> RouteProvider:
    return build_route_provider(redis)


def get_features() -> PricingFeatures:
    return PricingFeatures.from_settings()


async def get_engine(
    store: ParamStore = Depends(get_param_store),
    route_provider: RouteProvider = Depends(get_route_provider),
    fuel_service: FuelPriceService = Depends(get_fuel_service),
    features: PricingFeatures = Depends(get_features),
) -> PricingEngine:
    params = await store.load()
    return PricingEngine(params, route_provider, fuel_service, features)


def get_quote_store(db: AsyncSession = Depends(get_db)) -> QuoteStore:
    return QuoteStore(db)


def get_live_engine(
    store: ParamStore = Depends(get_param_store),
    route_provider: RouteProvider = Depends(get_route_provider),
    fuel_service: FuelPriceService = Depends(get_fuel_service),
    features: PricingFeatures = Depends(get_features),
) -> PricingEngine:
    """Engine for long-lived sessions; parameters are reloaded every cycle."""
    return PricingEngine(default_pricing_params(), route_provider, fuel_service, features, param_store=store)
