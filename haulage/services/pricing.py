"""Price breakdown computation and the pricing cycle around it."""
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional
from zoneinfo import ZoneInfo

from haulage.core.config import settings
from haulage.core.enums import CycleOutcome
from haulage.core.metrics import pricing_cycles, pricing_duration
from haulage.schemas.pricing import PriceBreakdown, PricingParams, PricingRequest, PricingResult
from haulage.services import load_factor, traffic
from haulage.services.fuel import FuelPriceService, fuel_cost
from haulage.services.params import ParamStore
from haulage.services.routing import RouteProvider

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def compute_breakdown(
    distance_km: float,
    traffic_multiplier: float,
    adjusted_load_factor: float,
    base_rate: float,
    real_fuel_cost: float,
    fuel_surcharge: float,
    profit_margin_percentage: float,
) -> PriceBreakdown:
    """Combine distance, multipliers and costs into a price breakdown.

    Order of operations is fixed::

        base_calculation = distance * rate * traffic * load
        subtotal         = base_calculation + fuel cost
        with_surcharge   = subtotal * fuel surcharge
        profit_margin    = with_surcharge * margin% / 100
        total            = round(with_surcharge + profit_margin)
        break_even_price = round(with_surcharge)

    Each currency figure is rounded half-up on its own. Passing a fuel cost
    and margin of zero gives the basic tariff, where total and break-even
    coincide.
    """
    base_calculation = distance_km * base_rate * traffic_multiplier * adjusted_load_factor
    subtotal = base_calculation + real_fuel_cost
    with_surcharge = subtotal * fuel_surcharge
    profit_margin = with_surcharge * (profit_margin_percentage / 100)

    return PriceBreakdown(
        base_distance=distance_km,
        adjusted_distance=distance_km * traffic_multiplier,
        base_rate=base_rate,
        traffic_multiplier=traffic_multiplier,
        load_factor=adjusted_load_factor,
        fuel_surcharge=fuel_surcharge,
        real_fuel_cost=round_half_up(real_fuel_cost),
        profit_margin=round_half_up(profit_margin),
        base_calculation=round_half_up(base_calculation),
        subtotal=round_half_up(subtotal),
        total=round_half_up(with_surcharge + profit_margin),
        break_even_price=round_half_up(with_surcharge),
    )


@dataclass(frozen=True)
class PricingFeatures:
    real_time_fuel_data: bool = True
    vehicle_weight: bool = True
    live_traffic: bool = True
    profit_margin: bool = True

    @classmethod
    def basic(cls) -> "PricingFeatures":
        return cls(real_time_fuel_data=False, vehicle_weight=False, live_traffic=False, profit_margin=False)

    @classmethod
    def from_settings(cls) -> "PricingFeatures":
        return cls(
            real_time_fuel_data=settings.ENABLE_LIVE_FUEL_DATA,
            vehicle_weight=settings.ENABLE_VEHICLE_WEIGHT,
            live_traffic=settings.ENABLE_LIVE_TRAFFIC,
            profit_margin=settings.ENABLE_PROFIT_MARGIN,
        )


def local_hour(pickup_time: datetime, tz_name: str = settings.TIMEZONE) -> int:
    if pickup_time.tzinfo is not None:
        pickup_time = pickup_time.astimezone(ZoneInfo(tz_name))
    return pickup_time.hour


class PricingEngine:
    """Runs one pricing cycle: route, fuel price, multipliers, breakdown.

    The engine holds no mutable state; parameters are read-only for the
    duration of a cycle. With a ``param_store`` the parameters are reloaded
    at the start of every cycle, otherwise ``params`` is used as given.
    """

    def __init__(
        self,
        params: PricingParams,
        route_provider: RouteProvider,
        fuel_service: Optional[FuelPriceService] = None,
        features: Optional[PricingFeatures] = None,
        param_store: Optional[ParamStore] = None,
    ):
        self.params = params
        self.param_store = param_store
        self.route_provider = route_provider
        self.fuel_service = fuel_service
        self.features = features or PricingFeatures()

    async def calculate(self, request: PricingRequest) -> Optional[PricingResult]:
        stops = [stop for stop in request.stops if stop.lga.strip()]
        if len(stops) < 2:
            logger.debug("Fewer than two stops with a location, nothing to price")
            pricing_cycles.labels(outcome=CycleOutcome.NO_ROUTE.value).inc()
            return None

        start_time = time.time()
        route = await self.route_provider.calculate_route(stops)
        if route is None:
            logger.info("Route could not be resolved, no price for this cycle")
            pricing_cycles.labels(outcome=CycleOutcome.NO_ROUTE.value).inc()
            return None

        fuel_data = None
        if self.features.real_time_fuel_data and self.fuel_service is not None:
            fuel_data = await self.fuel_service.get_current_fuel_price()

        params = self.params
        if self.param_store is not None:
            params = await self.param_store.load()
        distance = route.distance_km

        scheduled = traffic.multiplier_for_hour(local_hour(request.pickup_time), params.traffic_multipliers)
        live = 1.0
        if self.features.live_traffic:
            live = traffic.live_multiplier(route.duration_minutes, distance)
        traffic_multiplier = traffic.effective_multiplier(scheduled, live)

        adjusted_load_factor = load_factor.factor_for(request.load_size, params.load_factors)
        if self.features.vehicle_weight:
            adjusted_load_factor = load_factor.weight_adjusted_factor(
                adjusted_load_factor,
                request.load_weight,
                params.vehicle_specs.load_capacity,
            )

        real_fuel_cost = fuel_cost(distance, params.vehicle_specs, fuel_data) if fuel_data is not None else 0.0
        margin = params.profit_margin_percentage if self.features.profit_margin else 0.0

        breakdown = compute_breakdown(
            distance_km=distance,
            traffic_multiplier=traffic_multiplier,
            adjusted_load_factor=adjusted_load_factor,
            base_rate=params.base_rate,
            real_fuel_cost=real_fuel_cost,
            fuel_surcharge=params.fuel_surcharge,
            profit_margin_percentage=margin,
        )

        pricing_cycles.labels(outcome=CycleOutcome.PRICED.value).inc()
        pricing_duration.observe(time.time() - start_time)
        logger.info(
            f"Priced {len(stops)} stops over {distance:.1f} km: total {breakdown.total}, "
            f"break-even {breakdown.break_even_price}"
        )

        return PricingResult(
            breakdown=breakdown,
            distance_km=distance,
            duration_minutes=route.duration_minutes,
            fuel_data=fuel_data,
            vehicle_specs=params.vehicle_specs,
        )


@dataclass
class SessionUpdate:
    token: int
    outcome: CycleOutcome
    result: Optional[PricingResult] = None

    @property
    def applied(self) -> bool:
        return self.outcome != CycleOutcome.SUPERSEDED


class PricingSession:
    """Latest-wins wrapper for inputs that change while a cycle is in flight.

    Each call to ``recalculate`` takes a new token. A cycle that finishes
    after a newer one has started is discarded and ``current`` is left alone.
    """

    def __init__(self, engine: PricingEngine):
        self.engine = engine
        self.current: Optional[PricingResult] = None
        self._latest_token = 0

    @property
    def latest_token(self) -> int:
        return self._latest_token

    async def recalculate(self, request: PricingRequest) -> SessionUpdate:
        self._latest_token += 1
        token = self._latest_token

        result = await self.engine.calculate(request)

        if token != self._latest_token:
            logger.debug(f"Discarding stale pricing cycle {token}, latest is {self._latest_token}")
            pricing_cycles.labels(outcome=CycleOutcome.SUPERSEDED.value).inc()
            return SessionUpdate(token=token, outcome=CycleOutcome.SUPERSEDED)

        self.current = result
        if result is None:
            return SessionUpdate(token=token, outcome=CycleOutcome.NO_ROUTE)
        return SessionUpdate(token=token, outcome=CycleOutcome.PRICED, result=result)
