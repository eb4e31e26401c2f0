from fastapi import APIRouter, Depends

from haulage.api.deps import get_param_store
from haulage.schemas.pricing import PricingParams, PricingParamsUpdate, VehicleSpecsUpdate
from haulage.services.params import RedisParamStore

router = APIRouter(prefix="/params", tags=["params"])


@router.get("/", response_model=PricingParams)
async def get_params(store: RedisParamStore = Depends(get_param_store)):
    return await store.load()


@router.put("/", response_model=PricingParams)
async def update_params(
    payload: PricingParamsUpdate,
    store: RedisParamStore = Depends(get_param_store),
):
    """Merge the given fields into the stored parameters"""
    return await store.update(payload)


@router.put("/vehicle", response_model=PricingParams)
async def update_vehicle_specs(
    payload: VehicleSpecsUpdate,
    store: RedisParamStore = Depends(get_param_store),
):
    return await store.update_vehicle_specs(payload)
