# hotelcatalog/utils/cache.py
import os
from typing import Callable, Optional

import redis

from .log import setup_logger
from .schemas import CatalogMeta

logger = setup_logger(__name__)

# --- Catalog metadata (room type selector, price bound, destinations) ---
CACHE_ON = os.getenv("CATALOG_CACHE", "off") == "on"
TTL_SECONDS = int(os.getenv("CATALOG_CACHE_TTL_SECONDS", "300"))
META_KEY = "hotelcatalog:meta"


def _client() -> "redis.Redis":
    return redis.from_url(
        os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        decode_responses=True,
    )


def get_catalog_meta(
    compute: Callable[[], CatalogMeta], enabled: Optional[bool] = None
) -> CatalogMeta:
    """
    Read-through: return the cached metadata, or compute and store it.
    With the cache off (default) this always recomputes.
    """
    if not (CACHE_ON if enabled is None else enabled):
        return compute()

    try:
        r = _client()
        data = r.get(META_KEY)
    except redis.RedisError as e:
        logger.warning(f"catalog meta cache read failed: {e}")
        return compute()
    if data:
        try:
            return CatalogMeta.model_validate_json(data)
        except ValueError:
            # stale shape; fall through and overwrite
            logger.info("discarding unreadable catalog meta cache entry")

    meta = compute()
    try:
        r.set(META_KEY, meta.model_dump_json(), ex=TTL_SECONDS)
    except redis.RedisError as e:
        logger.warning(f"catalog meta cache write failed: {e}")
    return meta


def invalidate_catalog_meta() -> None:
    """Drop cached metadata; call after any write to hotels or room types."""
    try:
        _client().delete(META_KEY)
    except redis.RedisError as e:
        logger.warning(f"catalog meta cache invalidation failed: {e}")
