"""
Rate limiting dependencies for API endpoints.

Global per-address limit through slowapi (Redis backed, shared across
instances) plus the per-action Redis counters used inside endpoints.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ...core.config import get_settings
from ...core.rate_limiter import RateLimiter

_settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{_settings.rate_limit_requests}/{_settings.rate_limit_window} seconds"],
    storage_uri=_settings.redis_url,
)


def get_rate_limiter(request: Request) -> RateLimiter:
    """Get rate limiter backed by the Redis connection in app state."""
    redis_cache = getattr(request.app.state, "redis", None)
    return RateLimiter(redis_cache)


def client_key(request: Request) -> str:
    """Rate limit key for anonymous actions (upvotes, uploads)."""
    return get_remote_address(request)
