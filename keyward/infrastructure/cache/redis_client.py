import logging

from redis.asyncio import ConnectionPool, Redis

logger = logging.getLogger(__name__)


def create_redis_client(url: str, *, timeout_seconds: float = 5.0) -> Redis:
    """Build the async client used by the revocation store; no connection is opened yet."""
    pool = ConnectionPool.from_url(
        url,
        max_connections=50,
        decode_responses=True,
        socket_connect_timeout=timeout_seconds,
        socket_timeout=timeout_seconds,
        retry_on_timeout=True,
    )
    return Redis(connection_pool=pool)


async def close_redis_client(client: Redis) -> None:
    try:
        await client.aclose()
    except (OSError, RuntimeError) as exc:
        logger.warning("Error while closing Redis client: %s", exc)
