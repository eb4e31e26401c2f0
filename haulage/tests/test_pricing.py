import asyncio
from datetime import datetime, timezone

import pytest

from haulage.core.enums import CycleOutcome, LoadSize, StopRole
from haulage.schemas.pricing import PricingParams, PricingParamsUpdate, PricingRequest, VehicleSpecs
from haulage.schemas.route import RouteResult, Stop
from haulage.services.params import RedisParamStore
from haulage.services.pricing import (
    PricingEngine,
    PricingFeatures,
    PricingSession,
    compute_breakdown,
    local_hour,
    round_half_up,
)

pytestmark = pytest.mark.pricing


class FakeRouteProvider:
    def __init__(self, distance_km=25.0, duration_minutes=50.0, result_none=False):
        self.distance_km = distance_km
        self.duration_minutes = duration_minutes
        self.result_none = result_none
        self.calls = []

    async def calculate_route(self, stops):
        self.calls.append(list(stops))
        if self.result_none:
            return None
        return RouteResult(
            distance_km=self.distance_km,
            duration_minutes=self.duration_minutes,
            stops=list(stops),
        )


class GatedRouteProvider:
    """Holds each route until the test releases the gate for its pickup location."""

    def __init__(self, distances):
        self.distances = distances
        self.gates = {lga: asyncio.Event() for lga in distances}

    async def calculate_route(self, stops):
        lga = stops[0].lga
        await self.gates[lga].wait()
        distance = self.distances[lga]
        return RouteResult(distance_km=distance, duration_minutes=distance * 2, stops=list(stops))


def make_request(pickup_lga="Ikorodu", dropoff_lga="Lekki", hour_utc=7, load_size=LoadSize.SEMI_FULL, load_weight=0.0):
    return PricingRequest(
        stops=[
            Stop(id="a", type=StopRole.PICKUP, lga=pickup_lga),
            Stop(id="b", type=StopRole.DROPOFF, lga=dropoff_lga),
        ],
        load_size=load_size,
        load_weight=load_weight,
        pickup_time=datetime(2024, 1, 15, hour_utc, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def params():
    return PricingParams(vehicle_specs=VehicleSpecs(fuel_consumption=12.0))


class TestRounding:

    @pytest.mark.parametrize("value,expected", [
        (23437.5, 23438),
        (6562.5, 6563),
        (32812.5, 32813),
        (0.5, 1),
        (2.4999, 2),
        (26250.0, 26250),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestBreakdownFormula:

    def test_basic_worked_example(self):
        breakdown = compute_breakdown(
            distance_km=25.0,
            traffic_multiplier=2.0,
            adjusted_load_factor=1.25,
            base_rate=300.0,
            real_fuel_cost=0.0,
            fuel_surcharge=1.25,
            profit_margin_percentage=0.0,
        )

        assert breakdown.base_calculation == 18750
        assert breakdown.subtotal == 18750
        assert breakdown.total == 23438
        assert breakdown.break_even_price == 23438
        assert breakdown.profit_margin == 0
        assert breakdown.real_fuel_cost == 0
        assert breakdown.adjusted_distance == 50.0

    def test_enhanced_worked_example(self):
        breakdown = compute_breakdown(
            distance_km=25.0,
            traffic_multiplier=2.0,
            adjusted_load_factor=1.25,
            base_rate=300.0,
            real_fuel_cost=2250.0,
            fuel_surcharge=1.25,
            profit_margin_percentage=25.0,
        )

        assert breakdown.base_calculation == 18750
        assert breakdown.real_fuel_cost == 2250
        assert breakdown.subtotal == 21000
        assert breakdown.break_even_price == 26250
        assert breakdown.profit_margin == 6563
        assert breakdown.total == 32813

    @pytest.mark.parametrize("margin", [0.0, 5.0, 25.0, 40.0, 100.0])
    def test_total_never_below_break_even(self, margin):
        breakdown = compute_breakdown(17.3, 1.8, 1.15, 300.0, 1946.25, 1.25, margin)

        assert breakdown.total >= breakdown.break_even_price
        if margin == 0:
            assert breakdown.total == breakdown.break_even_price

    def test_break_even_is_rounded_surcharged_subtotal(self):
        breakdown = compute_breakdown(13.0, 1.3, 1.4, 275.0, 1462.5, 1.1, 25.0)
        with_surcharge = (13.0 * 275.0 * 1.3 * 1.4 + 1462.5) * 1.1
        assert breakdown.break_even_price == round_half_up(with_surcharge)

    def test_identical_inputs_identical_output(self):
        args = (22.0, 1.8, 1.4, 300.0, 2475.0, 1.25, 25.0)
        assert compute_breakdown(*args) == compute_breakdown(*args)


class TestLocalHour:

    def test_converts_to_lagos_time(self):
        assert local_hour(datetime(2024, 1, 15, 7, 0, tzinfo=timezone.utc)) == 8

    def test_naive_time_taken_as_local(self):
        assert local_hour(datetime(2024, 1, 15, 18, 30)) == 18


class TestPricingEngine:

    async def test_enhanced_worked_example(self, params, static_fuel_service):
        engine = PricingEngine(
            params,
            FakeRouteProvider(distance_km=25.0, duration_minutes=50.0),
            static_fuel_service,
            PricingFeatures(vehicle_weight=False),
        )

        result = await engine.calculate(make_request())

        assert result is not None
        assert result.breakdown.total == 32813
        assert result.breakdown.break_even_price == 26250
        assert result.breakdown.profit_margin == 6563
        assert result.breakdown.real_fuel_cost == 2250
        assert result.fuel_data.price_per_liter == 750.0
        assert result.distance_km == 25.0
        assert result.duration_minutes == 50.0
        assert result.vehicle_specs.fuel_consumption == 12.0

    async def test_basic_features(self, params, static_fuel_service):
        engine = PricingEngine(params, FakeRouteProvider(), static_fuel_service, PricingFeatures.basic())

        result = await engine.calculate(make_request())

        assert result.breakdown.total == 23438
        assert result.breakdown.total == result.breakdown.break_even_price
        assert result.breakdown.real_fuel_cost == 0
        assert result.fuel_data is None
        assert static_fuel_service.calls == 0

    async def test_without_fuel_service_matches_basic_fuel(self, params):
        engine = PricingEngine(params, FakeRouteProvider(), None, PricingFeatures(vehicle_weight=False))

        result = await engine.calculate(make_request())

        assert result.breakdown.real_fuel_cost == 0
        assert result.breakdown.break_even_price == 23438

    @pytest.mark.parametrize("weight,expected_factor", [
        (0.0, 1.0),
        (650.0, 1.25),
        (1300.0, 1.5),
    ])
    async def test_vehicle_weight_adjusts_load_factor(self, params, weight, expected_factor):
        engine = PricingEngine(params, FakeRouteProvider(), None, PricingFeatures(
            real_time_fuel_data=False, vehicle_weight=True, live_traffic=False, profit_margin=False,
        ))

        result = await engine.calculate(make_request(load_weight=weight))

        assert result.breakdown.load_factor == pytest.approx(expected_factor)

    async def test_live_traffic_raises_multiplier_off_peak(self, params):
        # 25 km in 100 minutes is twice the free-flow time
        provider = FakeRouteProvider(distance_km=25.0, duration_minutes=100.0)
        live = PricingEngine(params, provider, None, PricingFeatures(real_time_fuel_data=False, vehicle_weight=False))
        scheduled_only = PricingEngine(params, provider, None, PricingFeatures.basic())

        request = make_request(hour_utc=11)
        assert (await live.calculate(request)).breakdown.traffic_multiplier == pytest.approx(2.0)
        assert (await scheduled_only.calculate(request)).breakdown.traffic_multiplier == 1.0

    async def test_scheduled_multiplier_wins_when_worse(self, params):
        provider = FakeRouteProvider(distance_km=25.0, duration_minutes=60.0)
        engine = PricingEngine(params, provider, None, PricingFeatures(real_time_fuel_data=False, vehicle_weight=False))

        result = await engine.calculate(make_request(hour_utc=7))

        assert result.breakdown.traffic_multiplier == 2.0

    async def test_live_multiplier_is_capped(self, params):
        provider = FakeRouteProvider(distance_km=10.0, duration_minutes=400.0)
        engine = PricingEngine(params, provider, None, PricingFeatures(real_time_fuel_data=False))

        result = await engine.calculate(make_request(hour_utc=11))

        assert result.breakdown.traffic_multiplier == 2.5

    async def test_fewer_than_two_located_stops(self, params):
        provider = FakeRouteProvider()
        engine = PricingEngine(params, provider)
        request = make_request(dropoff_lga="")

        assert await engine.calculate(request) is None
        assert provider.calls == []

    async def test_empty_stops_are_skipped(self, params):
        provider = FakeRouteProvider()
        engine = PricingEngine(params, provider, None, PricingFeatures.basic())
        request = make_request()
        request.stops.insert(1, Stop(id="blank", lga=""))

        result = await engine.calculate(request)

        assert result is not None
        assert [stop.id for stop in provider.calls[0]] == ["a", "b"]

    async def test_no_route(self, params):
        engine = PricingEngine(params, FakeRouteProvider(result_none=True))
        assert await engine.calculate(make_request()) is None

    async def test_params_changes_flow_into_breakdown(self):
        params = PricingParams(base_rate=400.0, fuel_surcharge=1.0)
        engine = PricingEngine(params, FakeRouteProvider(distance_km=10.0, duration_minutes=20.0), None, PricingFeatures.basic())

        result = await engine.calculate(make_request(hour_utc=11, load_size=LoadSize.FULL))

        assert result.breakdown.base_rate == 400.0
        assert result.breakdown.total == 5600

    async def test_param_store_reloaded_each_cycle(self, fake_redis):
        store = RedisParamStore(fake_redis, key="test:live_params")
        engine = PricingEngine(
            PricingParams(), FakeRouteProvider(), None, PricingFeatures.basic(), param_store=store,
        )

        before = await engine.calculate(make_request())
        await store.update(PricingParamsUpdate(base_rate=400.0))
        after = await engine.calculate(make_request())

        assert before.breakdown.base_calculation == 18750
        assert after.breakdown.base_rate == 400.0
        assert after.breakdown.base_calculation == 25000


class TestPricingSession:

    async def test_single_cycle_sets_current(self, params):
        session = PricingSession(PricingEngine(params, FakeRouteProvider(), None, PricingFeatures.basic()))

        update = await session.recalculate(make_request())

        assert update.applied
        assert update.outcome == CycleOutcome.PRICED
        assert update.token == 1
        assert session.current is update.result

    async def test_no_route_clears_current(self, params):
        provider = FakeRouteProvider()
        session = PricingSession(PricingEngine(params, provider, None, PricingFeatures.basic()))
        await session.recalculate(make_request())

        provider.result_none = True
        update = await session.recalculate(make_request())

        assert update.outcome == CycleOutcome.NO_ROUTE
        assert update.applied
        assert session.current is None

    async def test_stale_cycle_is_discarded(self, params):
        provider = GatedRouteProvider({"Ikeja": 28.0, "Ikorodu": 25.0})
        session = PricingSession(PricingEngine(params, provider, None, PricingFeatures.basic()))

        slow = asyncio.create_task(session.recalculate(make_request(pickup_lga="Ikeja")))
        await asyncio.sleep(0)
        fast = asyncio.create_task(session.recalculate(make_request(pickup_lga="Ikorodu")))
        await asyncio.sleep(0)

        provider.gates["Ikorodu"].set()
        latest = await fast
        provider.gates["Ikeja"].set()
        stale = await slow

        assert latest.outcome == CycleOutcome.PRICED
        assert latest.token == 2
        assert stale.outcome == CycleOutcome.SUPERSEDED
        assert stale.token == 1
        assert not stale.applied
        assert stale.result is None
        assert session.current.distance_km == 25.0
        assert session.latest_token == 2

    async def test_stale_cycle_cannot_overwrite_newer_result(self, params):
        provider = GatedRouteProvider({"Ikeja": 28.0, "Ikorodu": 25.0})
        session = PricingSession(PricingEngine(params, provider, None, PricingFeatures.basic()))

        slow = asyncio.create_task(session.recalculate(make_request(pickup_lga="Ikeja")))
        await asyncio.sleep(0)
        fast = asyncio.create_task(session.recalculate(make_request(pickup_lga="Ikorodu")))
        await asyncio.sleep(0)

        # the older cycle finishes first but a newer one is already in flight
        provider.gates["Ikeja"].set()
        assert (await slow).outcome == CycleOutcome.SUPERSEDED
        assert session.current is None

        provider.gates["Ikorodu"].set()
        await fast
        assert session.current.distance_km == 25.0
