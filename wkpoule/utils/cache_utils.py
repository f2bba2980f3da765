"""
Cache utilities for the WK Poule scoring service
Provides caching decorators and helper functions for leaderboard reads
"""

import functools

from flask import current_app

from wkpoule import cache


def make_query_cache_key(model_name, func_name, *args, **kwargs):
    """Generate a cache key from a model name, function name and arguments"""
    args_str = "_".join(str(arg) for arg in args)
    kwargs_str = "_".join(f"{k}_{v}" for k, v in sorted(kwargs.items()))
    return f"query_{model_name}_{func_name}_{args_str}_{kwargs_str}"


def cached_query(model_name, timeout=None):
    """
    Decorator for caching plain-data query results

    Args:
        model_name: Name of the model for cache key generation
        timeout: Cache timeout in seconds (default LEADERBOARD_CACHE_TIMEOUT)
    """

    def decorator(f):
        @functools.wraps(f)
        def wrapped(*args, **kwargs):
            cache_key = make_query_cache_key(model_name, f.__name__, *args, **kwargs)

            result = cache.get(cache_key)
            if result is not None:
                current_app.logger.debug(f"Query cache hit: {cache_key}")
                return result

            result = f(*args, **kwargs)
            if result is not None:
                cache.set(
                    cache_key,
                    result,
                    timeout=timeout
                    or current_app.config.get("LEADERBOARD_CACHE_TIMEOUT", 60),
                )
                current_app.logger.debug(f"Query cache set: {cache_key}")

            return result

        return wrapped

    return decorator


def invalidate_cache_pattern(pattern):
    """
    Invalidate cache keys matching a pattern

    Args:
        pattern: Pattern to match cache keys
    """
    try:
        # SimpleCache and RedisCache expose no portable pattern delete
        cache.clear()
        current_app.logger.info(f"Cache cleared for pattern: {pattern}")
    except Exception as e:
        current_app.logger.error(f"Failed to clear cache: {e}")


def invalidate_model_cache(model_name):
    """
    Invalidate all cache entries for a specific model

    Args:
        model_name: Name of the model to invalidate
    """
    invalidate_cache_pattern(f"query_{model_name}_*")
