import logging
from typing import Optional

from redis.asyncio import Redis

from haulage.core.config import settings
from haulage.services.fuel import FuelPriceService

logger = logging.getLogger(__name__)


async def refresh_fuel_price_async(redis: Optional[Redis] = None) -> dict:
    """Fetch the current fuel price and store it in the shared cache"""
    owns_client = redis is None
    if owns_client:
        redis = Redis.from_url(settings.REDIS_URL, decode_responses=False)

    try:
        service = FuelPriceService(redis, api_url=settings.FUEL_PRICE_API_URL)
        data = await service.refresh_cache()
        logger.info(f"Fuel price refreshed: {data.price_per_liter} {data.currency} ({data.source})")
        return data.model_dump(mode="json")
    finally:
        if owns_client:
            await redis.aclose()
