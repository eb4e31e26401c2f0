from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from datetime import datetime
from haulage.core.enums import LoadSize, QuoteStatus
from haulage.schemas.pricing import FuelData, PriceBreakdown, VehicleSpecs
from haulage.schemas.route import Stop


class QuoteCreate(BaseModel):
    stops: List[Stop] = Field(min_length=2)
    load_size: LoadSize
    load_weight: float = 0.0
    pickup_time: datetime
    distance: float
    duration: Optional[float] = None
    price: int
    breakdown: PriceBreakdown
    status: QuoteStatus = QuoteStatus.DRAFT
    vehicle_specs: Optional[VehicleSpecs] = None
    fuel_data: Optional[FuelData] = None


# Columns that must keep a value once a quote is saved
NON_NULLABLE_FIELDS = {
    "stops", "load_size", "load_weight", "pickup_time",
    "distance", "price", "breakdown", "status",
}


class QuoteUpdate(BaseModel):
    stops: Optional[List[Stop]] = Field(None, min_length=2)
    load_size: Optional[LoadSize] = None
    load_weight: Optional[float] = None
    pickup_time: Optional[datetime] = None
    distance: Optional[float] = None
    duration: Optional[float] = None
    price: Optional[int] = None
    breakdown: Optional[PriceBreakdown] = None
    status: Optional[QuoteStatus] = None
    vehicle_specs: Optional[VehicleSpecs] = None
    fuel_data: Optional[FuelData] = None
    version: Optional[int] = None

    @model_validator(mode="after")
    def reject_nulls(self):
        nulls = sorted(
            field for field in self.model_fields_set
            if field in NON_NULLABLE_FIELDS and getattr(self, field) is None
        )
        if nulls:
            raise ValueError(f"{', '.join(nulls)} cannot be null")
        return self


class QuoteOut(BaseModel):
    id: str
    stops: List[Stop]
    load_size: LoadSize
    load_weight: float
    pickup_time: datetime
    distance: float
    duration: Optional[float] = None
    price: int
    breakdown: PriceBreakdown
    status: QuoteStatus
    vehicle_specs: Optional[VehicleSpecs] = None
    fuel_data: Optional[FuelData] = None
    version: int
    created_at: datetime
    updated_at: Optional[datetime] = None
