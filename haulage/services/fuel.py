"""Fuel consumption cost and the NNPC retail fuel price feed."""
import json
import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import httpx
from redis.asyncio import Redis

from haulage.core.config import settings
from haulage.core.metrics import cache_hits, cache_misses, fuel_price_lookups
from haulage.schemas.pricing import FuelData, VehicleSpecs

logger = logging.getLogger(__name__)

LIVE_SOURCE = "NNPC Retail"
CACHED_SOURCE = "Cached"
JITTER_RANGE = 50.0  # +/- 25 NGN around the fallback price


def liters_consumed(distance_km: float, vehicle_specs: VehicleSpecs) -> float:
    return (distance_km / 100) * vehicle_specs.fuel_consumption


def fuel_cost(distance_km: float, vehicle_specs: VehicleSpecs, fuel_data: FuelData) -> float:
    return liters_consumed(distance_km, vehicle_specs) * fuel_data.price_per_liter


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FuelPriceService:
    """Current fuel price with a one hour Redis cache and a fixed fallback.

    When no feed URL is configured the retail feed is simulated around the
    fallback price using ``rng``.
    """

    def __init__(
        self,
        redis: Optional[Redis],
        api_url: Optional[str] = None,
        fallback_price: float = settings.FUEL_PRICE_FALLBACK,
        cache_key: str = settings.FUEL_PRICE_CACHE_KEY,
        cache_ttl: int = settings.FUEL_PRICE_CACHE_TTL,
        timeout: float = settings.HTTP_TIMEOUT,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = _utcnow,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.redis = redis
        self.api_url = api_url
        self.fallback_price = fallback_price
        self.cache_key = cache_key
        self.cache_ttl = cache_ttl
        self.timeout = timeout
        self.rng = rng or random.Random()
        self.clock = clock
        self.transport = transport

    async def get_current_fuel_price(self) -> FuelData:
        try:
            data = await self._fetch_live()
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Failed to fetch live fuel price, using cached data: {e}")
            return await self._get_cached()

        fuel_price_lookups.labels(source="live").inc()
        await self._write_cache(data)
        return data

    async def refresh_cache(self) -> FuelData:
        return await self.get_current_fuel_price()

    async def _fetch_live(self) -> FuelData:
        if not self.api_url:
            variation = (self.rng.random() - 0.5) * JITTER_RANGE
            return FuelData(
                price_per_liter=round(self.fallback_price + variation),
                currency="NGN",
                last_updated=self.clock(),
                source=LIVE_SOURCE,
            )

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.get(self.api_url)
            response.raise_for_status()
            payload = response.json()

        price = float(payload["price_per_liter"])
        if price <= 0:
            raise ValueError(f"Invalid fuel price {price}")
        return FuelData(
            price_per_liter=price,
            currency=payload.get("currency", "NGN"),
            last_updated=self.clock(),
            source=payload.get("source", LIVE_SOURCE),
        )

    async def _get_cached(self) -> FuelData:
        cached = await self._read_cache()
        if cached is not None:
            last_updated = cached.last_updated
            if last_updated.tzinfo is None:
                last_updated = last_updated.replace(tzinfo=timezone.utc)
            if self.clock() - last_updated < timedelta(seconds=self.cache_ttl):
                cache_hits.labels(cache="fuel_price").inc()
                fuel_price_lookups.labels(source="cache").inc()
                return cached

        cache_misses.labels(cache="fuel_price").inc()
        fuel_price_lookups.labels(source="fallback").inc()
        default_data = FuelData(
            price_per_liter=self.fallback_price,
            currency="NGN",
            last_updated=self.clock(),
            source=CACHED_SOURCE,
        )
        await self._write_cache(default_data)
        return default_data

    async def _read_cache(self) -> Optional[FuelData]:
        if self.redis is None:
            return None
        try:
            raw = await self.redis.get(self.cache_key)
            if not raw:
                return None
            return FuelData.model_validate(json.loads(raw))
        except Exception as e:
            logger.warning(f"Fuel price cache read failed: {e}")
            return None

    async def _write_cache(self, data: FuelData) -> None:
        if self.redis is None:
            return
        try:
            await self.redis.set(self.cache_key, data.model_dump_json())
        except Exception as e:
            logger.warning(f"Fuel price cache write failed: {e}")
