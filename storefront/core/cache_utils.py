"""
Caching utilities for catalog listings
Uses Redis in production, the local-memory cache otherwise
"""
from django.core.cache import cache
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
PRODUCTS_LIST_CACHE_TTL = 120  # 2 minutes
COURSES_LIST_CACHE_TTL = 120  # 2 minutes

PRODUCTS_LIST_PREFIX = "products_list"
COURSES_LIST_PREFIX = "courses_list"


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def get_cached_list(prefix, filters_dict):
    """
    Look up a cached listing for the given filters
    Returns tuple: (cached_data, cache_key)
    """
    cache_key = make_cache_key(prefix, **filters_dict)
    cached_data = cache.get(cache_key)
    if cached_data is not None:
        logger.debug(f"Cache HIT for {prefix}: {cache_key}")
    else:
        logger.debug(f"Cache MISS for {prefix}: {cache_key}")
    return cached_data, cache_key


def cache_list(cache_key, data, ttl):
    cache.set(cache_key, data, ttl)
    logger.debug(f"Cached listing: {cache_key}")


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern
    Uses Redis SCAN when available; other backends cannot scan, so they are cleared
    """
    try:
        from django_redis import get_redis_connection
        redis_conn = get_redis_connection("default")
    except Exception as e:
        logger.debug(f"Pattern invalidation unavailable ({str(e)}), clearing cache for {pattern}")
        cache.clear()
        return

    try:
        keys = []
        cursor = 0
        while True:
            cursor, partial_keys = redis_conn.scan(cursor, match=f"*{pattern}*", count=100)
            keys.extend(partial_keys)
            if cursor == 0:
                break

        if keys:
            redis_conn.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching pattern: {pattern}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")


def invalidate_products_cache():
    """Invalidate all product listings"""
    invalidate_cache_pattern(PRODUCTS_LIST_PREFIX)


def invalidate_courses_cache():
    """Invalidate all course listings"""
    invalidate_cache_pattern(COURSES_LIST_PREFIX)
