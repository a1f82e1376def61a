"""
Cache configuration for the Volunteer Marketplace.
Uses Redis in deployed environments and process-local memory for development.
"""
import os

REDIS_URL = os.getenv('REDIS_URL', '')


def get_cache_settings() -> dict:
    """
    Returns the CACHES setting based on environment configuration.

    The cache backs the revalidation hook (tag version counters) and the cached
    public task listing, so every process must share it in production.
    """
    if REDIS_URL:
        return {
            'default': {
                'BACKEND': 'django.core.cache.backends.redis.RedisCache',
                'LOCATION': REDIS_URL,
                'KEY_PREFIX': 'vm',
                'TIMEOUT': 300,
            }
        }
    return {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'volunteer-marketplace',
            'TIMEOUT': 300,
        }
    }


def is_redis_enabled() -> bool:
    """Check if the shared Redis cache is configured."""
    return bool(REDIS_URL)
