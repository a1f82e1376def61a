"""
Revalidation hook - tag-versioned cache invalidation.

Read paths that cache their output build the cache key from the current
version of one or more tags. Write paths call revalidate() with the tags they
affect, which bumps the version so the next read misses the cache.

revalidate() is fire-and-forget: it never raises, so a cache outage can never
break the write that triggered it.

Usage:
    from apps.core.revalidation import revalidate, versioned_key, CATALOG

    revalidate(CATALOG)
    key = versioned_key(CATALOG, "list", page, page_size)
"""
import logging

from django.core.cache import cache

logger = logging.getLogger(__name__)

# Tags
CATALOG = "catalog"

VERSION_KEY = "revalidate:{tag}"


def get_tag_version(tag: str) -> int:
    """Current version of a tag. Starts at 1."""
    version = cache.get(VERSION_KEY.format(tag=tag))
    return int(version) if version else 1


def versioned_key(tag: str, *parts) -> str:
    """Cache key bound to the current version of ``tag``."""
    suffix = ":".join(str(p) for p in parts)
    return f"{tag}:v{get_tag_version(tag)}:{suffix}"


def revalidate(*tags: str) -> None:
    """
    Invalidate every cache entry built from the given tags.
    Never raises.
    """
    for tag in tags:
        key = VERSION_KEY.format(tag=tag)
        try:
            # add() is a no-op when the key exists, incr() is atomic on Redis
            cache.add(key, 1, timeout=None)
            cache.incr(key)
        except Exception as e:
            logger.warning(f"Revalidation of tag '{tag}' failed: {e}")
