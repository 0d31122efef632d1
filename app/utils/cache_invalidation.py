"""
Cache invalidation utilities.

The API layer caches query responses per node under
``node:{type}:{id}`` keys. Settling a donation changes the article's
donation totals, so its entries are dropped here.
"""

from loguru import logger
from redis.asyncio import Redis

from app.config.constants import NODE_CACHE_KEY_PREFIX


def node_cache_pattern(node_type: str, node_id: int) -> str:
    """Build the key pattern of a cached node."""
    return f"{NODE_CACHE_KEY_PREFIX}:{node_type}:{node_id}*"


async def invalidate_node_cache(
    redis_client: Redis | None, node_type: str, node_id: int
) -> int:
    """
    Invalidate cached responses of a node.

    Fire-and-forget: errors are logged, never raised.

    Args:
        redis_client: Redis client instance
        node_type: GraphQL node type (e.g. "Article")
        node_id: Node ID

    Returns:
        Number of keys deleted
    """
    if not redis_client:
        logger.warning("Redis client not provided, skipping node cache invalidation")
        return 0

    pattern = node_cache_pattern(node_type, node_id)
    try:
        keys = [key async for key in redis_client.scan_iter(match=pattern)]
        if not keys:
            return 0
        deleted = await redis_client.delete(*keys)
        logger.info(f"Cache invalidated: {deleted} key(s) for {node_type}:{node_id}")
        return deleted
    except Exception as e:
        logger.error(f"Failed to invalidate cache for {node_type}:{node_id}: {e}")
        return 0
