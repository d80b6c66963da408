"""Rate Limiting: per-IP request budgets enforced with slowapi.

Invariants:
    - Key is the client IP (request.client.host)
    - Every route except /unlock depends on enforce_default_limit:
      settings.rate_limit_default, one budget per IP shared across routes
    - /unlock is decorated with settings.rate_limit_unlock instead
    - moving-window strategy: a sliding log of hit timestamps per key; the
      in-memory storage purges expired keys on its own timer

Design Decisions:
    - The default budget is a dependency, not SlowAPIMiddleware: the middleware
      resolves routes from app.routes, which no longer lists APIRoutes once
      routers are included on recent FastAPI releases
    - Both budgets live in the limiter's storage, so limiter.reset() clears both
"""

from fastapi import Request
from limits import parse
from slowapi import Limiter
from slowapi.util import get_remote_address

from subvault.config import get_settings
from subvault.core.errors import RateLimitedError

settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    strategy="moving-window",
    storage_uri="memory://",
    enabled=settings.rate_limit_enabled,
)

DEFAULT_LIMIT = parse(settings.rate_limit_default)
DEFAULT_SCOPE = "default"


async def enforce_default_limit(request: Request) -> None:
    """Count one request against the caller's default budget."""
    if not limiter.enabled:
        return
    if not limiter.limiter.hit(DEFAULT_LIMIT, DEFAULT_SCOPE, get_remote_address(request)):
        raise RateLimitedError(str(DEFAULT_LIMIT))
