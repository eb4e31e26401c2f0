from pydantic import BaseModel
from typing import List, Optional
from haulage.core.enums import StopRole


class Coordinates(BaseModel):
    lat: float
    lng: float


class Stop(BaseModel):
    id: str
    type: StopRole = StopRole.DROPOFF
    lga: str = ""
    address: str = ""
    coordinates: Optional[Coordinates] = None


class RouteResult(BaseModel):
    distance_km: float
    duration_minutes: Optional[float] = None
    polyline: Optional[str] = None
    stops: List[Stop] = []
