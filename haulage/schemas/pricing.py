from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from haulage.core.enums import CycleOutcome, FuelType, LoadSize, LocationZone
from haulage.schemas.route import Stop


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VehicleSpecs(BaseModel):
    name: str = "Ford Cargo Van"
    year: int = 2016
    fuel_consumption: float = Field(15.0, ge=0)  # L/100km
    load_capacity: float = Field(1300.0, ge=0)  # kg
    fuel_type: FuelType = FuelType.PETROL


class VehicleSpecsUpdate(BaseModel):
    name: Optional[str] = None
    year: Optional[int] = None
    fuel_consumption: Optional[float] = Field(None, ge=0)
    load_capacity: Optional[float] = Field(None, ge=0)
    fuel_type: Optional[FuelType] = None


class FuelData(BaseModel):
    price_per_liter: float
    currency: str = "NGN"
    last_updated: datetime = Field(default_factory=_utcnow)
    source: str


DEFAULT_LOAD_FACTORS: Dict[LoadSize, float] = {
    LoadSize.HALF: 1.15,
    LoadSize.SEMI_FULL: 1.25,
    LoadSize.FULL: 1.4,
}

DEFAULT_TRAFFIC_MULTIPLIERS: Dict[int, float] = {
    6: 1.3, 7: 1.8, 8: 2.0, 9: 1.5,  # morning rush
    17: 1.5, 18: 1.8, 19: 2.0, 20: 1.3,  # evening rush
}


def _check_hours(value: Dict[int, float]) -> Dict[int, float]:
    for hour in value:
        if not 0 <= hour <= 23:
            raise ValueError(f"Traffic multiplier hour must be between 0 and 23, got {hour}")
    return value


def _check_factors(value: Dict[LoadSize, float]) -> Dict[LoadSize, float]:
    for size, factor in value.items():
        if factor <= 0:
            raise ValueError(f"Load factor for {size} must be positive, got {factor}")
    return value


class PricingParams(BaseModel):
    base_rate: float = Field(300.0, ge=0)  # NGN per km
    fuel_surcharge: float = Field(1.25, ge=0)
    profit_margin_percentage: float = Field(25.0, ge=0)
    load_factors: Dict[LoadSize, float] = Field(default_factory=lambda: dict(DEFAULT_LOAD_FACTORS))
    traffic_multipliers: Dict[int, float] = Field(default_factory=lambda: dict(DEFAULT_TRAFFIC_MULTIPLIERS))
    vehicle_specs: VehicleSpecs = Field(default_factory=VehicleSpecs)
    last_updated: datetime = Field(default_factory=_utcnow)

    @field_validator("traffic_multipliers")
    @classmethod
    def validate_hours(cls, value):
        return _check_hours(value)

    @field_validator("load_factors")
    @classmethod
    def validate_load_factors(cls, value):
        missing = [str(size) for size in LoadSize if size not in value]
        if missing:
            raise ValueError(f"Missing load factors for {', '.join(missing)}")
        return _check_factors(value)


class PricingParamsUpdate(BaseModel):
    base_rate: Optional[float] = Field(None, ge=0)
    fuel_surcharge: Optional[float] = Field(None, ge=0)
    profit_margin_percentage: Optional[float] = Field(None, ge=0)
    load_factors: Optional[Dict[LoadSize, float]] = None
    traffic_multipliers: Optional[Dict[int, float]] = None
    vehicle_specs: Optional[VehicleSpecs] = None

    @field_validator("traffic_multipliers")
    @classmethod
    def validate_hours(cls, value):
        if value is None:
            return value
        return _check_hours(value)

    @field_validator("load_factors")
    @classmethod
    def validate_load_factors(cls, value):
        if value is None:
            return value
        return _check_factors(value)


class PriceBreakdown(BaseModel):
    base_distance: float
    adjusted_distance: float
    base_rate: float
    traffic_multiplier: float
    load_factor: float
    fuel_surcharge: float
    real_fuel_cost: int
    profit_margin: int
    base_calculation: int
    subtotal: int
    total: int
    break_even_price: int


class PricingRequest(BaseModel):
    stops: List[Stop]
    load_size: LoadSize
    load_weight: float = 0.0
    pickup_time: datetime


class PricingResult(BaseModel):
    breakdown: PriceBreakdown
    distance_km: float
    duration_minutes: Optional[float] = None
    fuel_data: Optional[FuelData] = None
    vehicle_specs: VehicleSpecs


class NegotiationRequest(BaseModel):
    offer_price: Union[float, str]
    break_even_price: float


class NegotiationResult(BaseModel):
    difference: float
    is_profitable: bool
    margin_percentage: float


class CalculateRequest(PricingRequest):
    offer_price: Optional[Union[float, str]] = None


class CalculateResponse(BaseModel):
    status: CycleOutcome
    breakdown: Optional[PriceBreakdown] = None
    distance_km: Optional[float] = None
    duration_minutes: Optional[float] = None
    fuel_data: Optional[FuelData] = None
    vehicle_specs: Optional[VehicleSpecs] = None
    negotiation: Optional[NegotiationResult] = None


class DistanceOut(BaseModel):
    from_lga: str
    to_lga: str
    distance_km: float


class LGAOut(BaseModel):
    name: str
    zone: LocationZone
