"""Pricing parameter persistence in Redis."""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Protocol

from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from haulage.core.config import settings
from haulage.core.exceptions import StoreUnavailableError
from haulage.schemas.pricing import PricingParams, PricingParamsUpdate, VehicleSpecs, VehicleSpecsUpdate

logger = logging.getLogger(__name__)


def default_pricing_params() -> PricingParams:
    return PricingParams()


class ParamStore(Protocol):
    async def load(self) -> PricingParams:
        ...

    async def save(self, params: PricingParams) -> None:
        ...


class RedisParamStore:
    """Stores the whole ``PricingParams`` document as JSON under one key."""

    def __init__(self, redis: Redis, key: str = settings.PARAMS_KEY):
        self.redis = redis
        self.key = key

    async def load(self) -> PricingParams:
        try:
            raw = await self.redis.get(self.key)
        except RedisError as e:
            logger.error(f"Could not read pricing parameters, using defaults: {e}")
            return default_pricing_params()

        if not raw:
            return default_pricing_params()

        try:
            return PricingParams.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logger.warning(f"Stored pricing parameters are invalid, using defaults: {e}")
            return default_pricing_params()

    async def save(self, params: PricingParams) -> None:
        try:
            await self.redis.set(self.key, params.model_dump_json())
        except RedisError as e:
            logger.error(f"Could not save pricing parameters: {e}")
            raise StoreUnavailableError("pricing parameters", "save", str(e)) from e

    async def update(self, changes: PricingParamsUpdate) -> PricingParams:
        current = await self.load()
        data = changes.model_dump(exclude_unset=True)
        if data.get("load_factors"):
            # Sizes left out keep their current factor
            data["load_factors"] = {**current.load_factors, **data["load_factors"]}
        return await self._apply(current, data)

    async def update_vehicle_specs(self, changes: VehicleSpecsUpdate) -> PricingParams:
        current = await self.load()
        specs = current.vehicle_specs.model_copy(update=changes.model_dump(exclude_unset=True))
        specs = VehicleSpecs.model_validate(specs.model_dump())
        return await self._apply(current, {"vehicle_specs": specs.model_dump()})

    async def _apply(self, current: PricingParams, changes: Dict[str, Any]) -> PricingParams:
        merged = current.model_dump()
        merged.update({field: value for field, value in changes.items() if value is not None})
        merged["last_updated"] = datetime.now(timezone.utc)
        updated = PricingParams.model_validate(merged)
        await self.save(updated)
        logger.info(f"Pricing parameters updated: {sorted(changes)}")
        return updated

