"""In-memory TTL cache decorator."""

import time
from functools import wraps

from flask import has_request_context, request

from activity_reports.config import get_config
from activity_reports.extensions import cache


def cached(ttl_seconds=None):
    """Decorator for caching function results with TTL.

    The TTL defaults to the configured cache_ttl_seconds, read at call time.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            ttl = ttl_seconds if ttl_seconds is not None else get_config().cache_ttl_seconds
            qs = request.query_string.decode() if has_request_context() else ''
            cache_key = f"{func.__name__}:{args}:{sorted(kwargs.items())}:{qs}"
            now = time.time()

            if cache_key in cache:
                result, timestamp = cache[cache_key]
                if now - timestamp < ttl:
                    return result

            result = func(*args, **kwargs)
            cache[cache_key] = (result, now)
            return result

        return wrapper

    return decorator
