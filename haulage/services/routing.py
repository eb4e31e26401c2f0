"""Route providers: static table, Google Maps and a Redis-cached wrapper."""
import json
import logging
from typing import List, Optional, Protocol, Sequence

import httpx
from redis.asyncio import Redis

from haulage.core.config import settings
from haulage.core.metrics import cache_hits, cache_misses, route_lookups
from haulage.data.lgas import LGA_COORDINATES
from haulage.schemas.route import Coordinates, RouteResult, Stop
from haulage.services.distance import DistanceResolver
from haulage.services.traffic import FREE_FLOW_MINUTES_PER_KM
from haulage.utils.hashing import payload_hash

logger = logging.getLogger(__name__)


class RouteProvider(Protocol):
    async def calculate_route(self, stops: Sequence[Stop]) -> Optional[RouteResult]:
        ...


class TableRouteProvider:
    """Sums table distances between consecutive stops, no live traffic."""

    name = "table"

    def __init__(self, resolver: Optional[DistanceResolver] = None):
        self.resolver = resolver or DistanceResolver()

    async def calculate_route(self, stops: Sequence[Stop]) -> Optional[RouteResult]:
        if len(stops) < 2:
            return None

        distance = self.resolver.total_distance(stop.lga for stop in stops)
        route_lookups.labels(provider=self.name, status="ok").inc()
        return RouteResult(
            distance_km=distance,
            duration_minutes=distance * FREE_FLOW_MINUTES_PER_KM,
            stops=list(stops),
        )


class GoogleRouteProvider:
    """Driving route through all stops using the Geocoding and Directions APIs."""

    name = "google"

    def __init__(
        self,
        api_key: str,
        geocode_url: str = settings.GEOCODE_URL,
        directions_url: str = settings.DIRECTIONS_URL,
        timeout: float = settings.HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.geocode_url = geocode_url
        self.directions_url = directions_url
        self.timeout = timeout
        self.transport = transport

    async def geocode(self, client: httpx.AsyncClient, stop: Stop) -> Optional[Coordinates]:
        if stop.coordinates is not None:
            return stop.coordinates

        full_address = f"{stop.address}, {stop.lga}, Lagos, Nigeria"
        try:
            response = await client.get(
                self.geocode_url,
                params={"address": full_address, "key": self.api_key},
            )
            response.raise_for_status()
            payload = response.json()
            if payload.get("status") == "OK" and payload.get("results"):
                location = payload["results"][0]["geometry"]["location"]
                return Coordinates(lat=location["lat"], lng=location["lng"])
            logger.warning(f"Geocoding returned {payload.get('status')} for stop {stop.id}")
        except (httpx.HTTPError, ValueError, KeyError, IndexError) as e:
            logger.warning(f"Geocoding failed for stop {stop.id}: {e}")

        centroid = LGA_COORDINATES.get(stop.lga)
        if centroid is None:
            return None
        return Coordinates(lat=centroid[0], lng=centroid[1])

    async def calculate_route(self, stops: Sequence[Stop]) -> Optional[RouteResult]:
        if len(stops) < 2:
            return None

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resolved: List[Stop] = []
                for stop in stops:
                    coordinates = await self.geocode(client, stop)
                    if coordinates is None:
                        logger.warning(f"Dropping unresolvable stop {stop.id} ({stop.lga})")
                        continue
                    resolved.append(stop.model_copy(update={"coordinates": coordinates}))

                if len(resolved) < 2:
                    route_lookups.labels(provider=self.name, status="unresolvable").inc()
                    return None

                response = await client.get(self.directions_url, params=self._directions_params(resolved))
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Directions request failed: {e}")
            route_lookups.labels(provider=self.name, status="error").inc()
            return None

        if payload.get("status") != "OK" or not payload.get("routes"):
            logger.warning(f"Directions returned {payload.get('status')}")
            route_lookups.labels(provider=self.name, status="error").inc()
            return None

        route = payload["routes"][0]
        total_meters = 0.0
        total_seconds = 0.0
        for leg in route.get("legs", []):
            total_meters += leg.get("distance", {}).get("value", 0)
            duration = leg.get("duration_in_traffic") or leg.get("duration") or {}
            total_seconds += duration.get("value", 0)

        route_lookups.labels(provider=self.name, status="ok").inc()
        return RouteResult(
            distance_km=total_meters / 1000,
            duration_minutes=total_seconds / 60,
            polyline=route.get("overview_polyline", {}).get("points"),
            stops=resolved,
        )

    def _directions_params(self, stops: Sequence[Stop]) -> dict:
        def fmt(stop: Stop) -> str:
            return f"{stop.coordinates.lat},{stop.coordinates.lng}"

        params = {
            "origin": fmt(stops[0]),
            "destination": fmt(stops[-1]),
            "mode": "driving",
            "departure_time": "now",
            "traffic_model": "best_guess",
            "key": self.api_key,
        }
        middle = stops[1:-1]
        if middle:
            params["waypoints"] = "optimize:true|" + "|".join(fmt(stop) for stop in middle)
        return params


class CachedRouteProvider:

    def __init__(self, provider: RouteProvider, redis: Optional[Redis], ttl: int = settings.ROUTE_CACHE_TTL):
        self.provider = provider
        self.redis = redis
        self.ttl = ttl

    def _cache_key(self, stops: Sequence[Stop]) -> str:
        return f"route:{payload_hash({'stops': [stop.model_dump(mode='json') for stop in stops]})}"

    async def calculate_route(self, stops: Sequence[Stop]) -> Optional[RouteResult]:
        cache_key = self._cache_key(stops)

        if self.redis is not None:
            try:
                cached = await self.redis.get(cache_key)
                if cached:
                    cache_hits.labels(cache="route").inc()
                    return RouteResult.model_validate(json.loads(cached))
            except Exception as e:
                logger.warning(f"Route cache retrieval failed: {e}")
        cache_misses.labels(cache="route").inc()

        result = await self.provider.calculate_route(stops)

        if result is not None and self.redis is not None:
            try:
                await self.redis.set(cache_key, result.model_dump_json(), ex=self.ttl)
            except Exception as e:
                logger.warning(f"Route cache write failed: {e}")

        return result


def build_route_provider(redis: Optional[Redis] = None) -> RouteProvider:
    if settings.GOOGLE_MAPS_API_KEY:
        provider: RouteProvider = GoogleRouteProvider(settings.GOOGLE_MAPS_API_KEY)
    else:
        provider = TableRouteProvider()
    return CachedRouteProvider(provider, redis)
