"""
Redis-backed cache for product tag aggregates.

Keys live under ``catalog:producttag:``. Every Redis failure is logged and the
cache is bypassed; callers always get a computed result.
"""
import json
import logging
from typing import Dict, Optional

import redis
from django.conf import settings
from django.db.models import Count, Q

from .models import ProductTag

logger = logging.getLogger(__name__)

PRODUCT_TAG_KEY_PREFIX = 'catalog:producttag:'
PRODUCT_TAG_COUNTS_KEY = PRODUCT_TAG_KEY_PREFIX + 'counts:{include_hidden}'

_redis_client: Optional[redis.Redis] = None
_redis_checked = False


def get_redis_client() -> Optional[redis.Redis]:
    """
    Return the shared Redis client, or ``None`` if caching is disabled or
    Redis is unreachable. The connection is probed once per process.
    """
    global _redis_client, _redis_checked

    if not getattr(settings, 'PRODUCT_TAG_CACHE_ENABLED', True):
        return None
    if _redis_checked:
        return _redis_client

    _redis_checked = True
    try:
        client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5
        )
        client.ping()
        _redis_client = client
    except (redis.ConnectionError, redis.TimeoutError) as e:
        logger.warning(f"Redis connection failed: {e}. Product tag caching is disabled.")
        _redis_client = None

    return _redis_client


def _count_tagged_products(include_hidden: bool) -> Dict[int, int]:
    product_filter = Q(products__deleted=False)
    tags = ProductTag.objects.all()
    if not include_hidden:
        product_filter &= Q(products__published=True)
        tags = tags.filter(published=True)

    rows = tags.annotate(
        product_count=Count('products', filter=product_filter, distinct=True)
    ).values_list('id', 'product_count')
    return {tag_id: count for tag_id, count in rows if count > 0}


def get_product_tag_counts(include_hidden: bool = False) -> Dict[int, int]:
    """
    Number of (not deleted) products per tag ID. Tags without products are
    omitted. Without ``include_hidden`` only published tags and published
    products are counted.
    """
    client = get_redis_client()
    key = PRODUCT_TAG_COUNTS_KEY.format(include_hidden=int(include_hidden))

    if client is not None:
        try:
            cached = client.get(key)
            if cached is not None:
                return {int(tag_id): count for tag_id, count in json.loads(cached).items()}
        except redis.RedisError as e:
            logger.error(f"Redis error reading product tag cache: {e}")

    counts = _count_tagged_products(include_hidden)

    if client is not None:
        try:
            client.set(key, json.dumps(counts), ex=settings.PRODUCT_TAG_CACHE_TIMEOUT)
        except redis.RedisError as e:
            logger.error(f"Redis error writing product tag cache: {e}")

    return counts


def invalidate_product_tag_cache() -> int:
    """
    Drop every cached product tag entry.

    Returns:
        Number of keys removed
    """
    client = get_redis_client()
    if client is None:
        return 0

    try:
        keys = list(client.scan_iter(match=PRODUCT_TAG_KEY_PREFIX + '*'))
        removed = client.delete(*keys) if keys else 0
        logger.info(f"Invalidated product tag cache: {removed} keys removed")
        return removed
    except redis.RedisError as e:
        logger.error(f"Redis error invalidating product tag cache: {e}")
        return 0
