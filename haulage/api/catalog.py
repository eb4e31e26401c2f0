from typing import List
from fastapi import APIRouter, Depends

from haulage.api.deps import get_fuel_service
from haulage.schemas.pricing import FuelData, LGAOut
from haulage.services.distance import list_lgas
from haulage.services.fuel import FuelPriceService

router = APIRouter(tags=["catalog"])


@router.get("/lgas", response_model=List[LGAOut])
async def get_lgas():
    return [LGAOut(name=name, zone=zone) for name, zone in list_lgas().items()]


@router.get("/fuel-price", response_model=FuelData)
async def get_fuel_price(fuel_service: FuelPriceService = Depends(get_fuel_service)):
    return await fuel_service.get_current_fuel_price()
