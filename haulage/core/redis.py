"""Shared Redis connection for pricing parameters, fuel price and route caches"""
import logging
from typing import Optional
from redis.asyncio import Redis
from redis.exceptions import RedisError
from haulage.core.config import settings

logger = logging.getLogger(__name__)

redis_client: Optional[Redis] = None


async def init_redis() -> Redis:
    global redis_client
    try:
        client = Redis.from_url(settings.REDIS_URL, decode_responses=False)
        await client.ping()
        redis_client = client
        logger.info(f"Connected to Redis at {settings.REDIS_URL}")
        return redis_client
    except Exception as e:
        logger.error(f"Failed to connect to Redis: {e}")
        raise


async def close_redis():
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None


def get_redis() -> Redis:
    if redis_client is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return redis_client


def is_redis_ready() -> bool:
    return redis_client is not None


async def ping_redis() -> bool:
    if redis_client is None:
        return False
    try:
        return bool(await redis_client.ping())
    except RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        return False
