import random
from datetime import datetime, timezone

import pytest
from fakeredis import FakeAsyncRedis, FakeServer
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from haulage.main import app
from haulage.api.deps import get_features, get_route_provider
from haulage.core.enums import LoadSize, StopRole
from haulage.core.redis import get_redis
from haulage.db.session import get_db
from haulage.models.base import Base
from haulage.schemas.pricing import FuelData, PricingRequest
from haulage.schemas.route import Stop
from haulage.services.pricing import PricingFeatures
from haulage.services.routing import TableRouteProvider


TEST_DATABASE_URL = "sqlite+aiosqlite://"


class StaticFuelService:
    """Fuel price source with a fixed price, no jitter and no network."""

    def __init__(self, price_per_liter: float = 750.0):
        self.price_per_liter = price_per_liter
        self.calls = 0

    async def get_current_fuel_price(self) -> FuelData:
        self.calls += 1
        return FuelData(
            price_per_liter=self.price_per_liter,
            last_updated=datetime(2024, 1, 15, tzinfo=timezone.utc),
            source="NNPC Retail",
        )


@pytest.fixture
async def fake_redis():
    redis = FakeAsyncRedis(server=FakeServer())
    yield redis
    await redis.aclose()


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    AsyncSessionTest = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with AsyncSessionTest() as session:
        yield session


@pytest.fixture
async def test_client(db_engine, fake_redis):
    AsyncSessionTest = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with AsyncSessionTest() as session:
            yield session

    def override_get_redis():
        return fake_redis

    def override_get_route_provider():
        return TableRouteProvider()

    def override_get_features():
        return PricingFeatures.basic()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_route_provider] = override_get_route_provider
    app.dependency_overrides[get_features] = override_get_features

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def static_fuel_service():
    return StaticFuelService()


@pytest.fixture
def seeded_rng():
    return random.Random(42)


@pytest.fixture
def rush_hour_pickup():
    """08:00 in Lagos (UTC+1)"""
    return datetime(2024, 1, 15, 7, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_stops():
    return [
        Stop(id="stop-1", type=StopRole.PICKUP, lga="Ikorodu", address="12 Ikorodu Road"),
        Stop(id="stop-2", type=StopRole.DROPOFF, lga="Lekki", address="Admiralty Way, Lekki Phase 1"),
    ]


@pytest.fixture
def pricing_request(sample_stops, rush_hour_pickup):
    return PricingRequest(
        stops=sample_stops,
        load_size=LoadSize.SEMI_FULL,
        load_weight=0.0,
        pickup_time=rush_hour_pickup,
    )


@pytest.fixture
def pricing_payload(pricing_request):
    return pricing_request.model_dump(mode="json")


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "api: marks tests that go through the HTTP interface"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "quotes: marks tests related to saved quotes"
    )
    config.addinivalue_line(
        "markers", "params: marks tests related to pricing parameters"
    )
    config.addinivalue_line(
        "markers", "fuel: marks tests related to the fuel price feed"
    )
    config.addinivalue_line(
        "markers", "routing: marks tests related to route providers"
    )
    config.addinivalue_line(
        "markers", "websocket: marks tests for the live pricing socket"
    )
