# /app/db/redis.py
import asyncio
import logging
from typing import Optional

from fastapi import HTTPException, status
from redis.asyncio import ConnectionPool, Redis

from app.core.config import settings

logger = logging.getLogger(__name__)

CONNECT_ATTEMPTS = 3

_pool: Optional[ConnectionPool] = None


def get_pool() -> ConnectionPool:
    """Connection pool shared by request-scoped clients"""
    global _pool
    if _pool is None:
        _pool = ConnectionPool.from_url(settings.redis_url, decode_responses=True)
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.disconnect()
        _pool = None


async def get_redis():
    """Redis client as a FastAPI dependency, used for token blacklisting and rate limits"""
    client = Redis(connection_pool=get_pool())
    delay = 0.5

    for attempt in range(1, CONNECT_ATTEMPTS + 1):
        try:
            await client.ping()
            break
        except Exception as e:
            if attempt == CONNECT_ATTEMPTS:
                logger.error(
                    f"Redis at {settings.REDIS_HOST}:{settings.REDIS_PORT} unreachable "
                    f"after {CONNECT_ATTEMPTS} attempts: {str(e)}"
                )
                raise HTTPException(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    detail="Service temporarily unavailable. Please try again later."
                )
            logger.warning(f"Redis ping {attempt} failed: {str(e)}. Retrying in {delay}s")
            await asyncio.sleep(delay)
            delay *= 2

    try:
        yield client
    finally:
        await client.aclose(close_connection_pool=False)
