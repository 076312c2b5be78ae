"""
Request rate limiting shared by the gateway and the domain services.

Window accounting is delegated to the `limits` library; this module only
decides what is counted, under which key, and what the caller sees when a
quota runs out.

Limiters:
    - TieredRateLimiter: fixed hourly quota for one subscription tier, keyed by
      the authenticated user id when present, otherwise by client address.
      Built with `create_rate_limiter(tier)`.
    - SubscriptionRateLimiter: picks the tier from the caller's access token
      (anonymous callers are treated as "free").
    - AuthRateLimitMiddleware: strict per-address limit on login and
      registration that only counts failed attempts.
    - create_global_limiter: slowapi limiter applied to every gateway request.

Quotas per hour:
    free          100
    starter     1,000
    professional 10,000
    enterprise  100,000

Storage:
    Counters live in the storage named by RATE_LIMIT_STORAGE_URI. The default
    "memory://" is per process; point it at redis://... when more than one
    instance serves the same clients.

Example:
    ```python
    from fastapi import APIRouter, Depends
    from common.rate_limit import create_rate_limiter

    router = APIRouter(dependencies=[Depends(create_rate_limiter("starter"))])
    ```
"""

from collections.abc import Iterable
from enum import Enum
import time
from typing import Optional

from fastapi import Depends, Request
from limits import RateLimitItem, RateLimitItemPerHour, parse
from limits.storage import storage_from_string
from limits.strategies import FixedWindowRateLimiter, MovingWindowRateLimiter
from loguru import logger
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from common.config import get_settings
from common.exceptions import RateLimitExceededError, rate_limit_response
from common.security import AuthenticatedUser, get_optional_user

AUTH_RATE_LIMIT_MESSAGE = "Too many login attempts. Please try again later."


class SubscriptionTier(str, Enum):
    FREE = "free"
    STARTER = "starter"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


TIER_QUOTAS: dict[SubscriptionTier, int] = {
    SubscriptionTier.FREE: 100,
    SubscriptionTier.STARTER: 1_000,
    SubscriptionTier.PROFESSIONAL: 10_000,
    SubscriptionTier.ENTERPRISE: 100_000,
}

_STRATEGIES = {
    "fixed-window": FixedWindowRateLimiter,
    "moving-window": MovingWindowRateLimiter,
}


def tier_limit(tier: SubscriptionTier | str) -> RateLimitItem:
    """Return the hourly limit item for a tier."""
    return RateLimitItemPerHour(TIER_QUOTAS[SubscriptionTier(tier)])


def resolve_tier(value: Optional[str]) -> SubscriptionTier:
    """Map a tier claim onto a known tier, falling back to free."""
    try:
        return SubscriptionTier(value or SubscriptionTier.FREE)
    except ValueError:
        logger.warning(f"Unknown subscription tier {value!r}, using free tier quota")
        return SubscriptionTier.FREE


def client_address(request: Request, trust_proxy_headers: bool = False) -> str:
    """
    Return the address a request is attributed to.

    When `trust_proxy_headers` is set the last X-Forwarded-For entry wins.
    That entry is appended by the proxy directly in front of this process;
    anything before it came from the client and is ignored.
    """
    if trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for", "")
        last_hop = forwarded.split(",")[-1].strip()
        if last_hop:
            return last_hop
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RateLimiter:
    """
    Thin wrapper around a `limits` storage and window strategy.

    Args:
        storage_uri: Counter storage; defaults to RATE_LIMIT_STORAGE_URI.
        strategy: "fixed-window" or "moving-window"; defaults to RATE_LIMIT_STRATEGY.
        trust_proxy_headers: Attribute requests by X-Forwarded-For; defaults to
            TRUST_PROXY_HEADERS.
    """

    def __init__(
        self,
        storage_uri: Optional[str] = None,
        strategy: Optional[str] = None,
        trust_proxy_headers: Optional[bool] = None,
    ) -> None:
        if storage_uri is None or strategy is None or trust_proxy_headers is None:
            settings = get_settings()
            storage_uri = storage_uri or settings.RATE_LIMIT_STORAGE_URI
            strategy = strategy or settings.RATE_LIMIT_STRATEGY
            if trust_proxy_headers is None:
                trust_proxy_headers = settings.TRUST_PROXY_HEADERS
        self.storage_uri = storage_uri
        self.strategy = strategy
        self.trust_proxy_headers = trust_proxy_headers
        self._storage = storage_from_string(self.storage_uri)
        self._window = _STRATEGIES[self.strategy](self._storage)

    def hit(self, item: RateLimitItem, *identifiers: str) -> bool:
        """Count one request. Returns False if it went over the limit."""
        return self._window.hit(item, *identifiers)

    def test(self, item: RateLimitItem, *identifiers: str) -> bool:
        """Return True if one more request would still be within the limit."""
        return self._window.test(item, *identifiers)

    def retry_after(self, item: RateLimitItem, *identifiers: str) -> float:
        """Seconds until the current window for these identifiers resets."""
        reset_time, _ = self._window.get_window_stats(item, *identifiers)
        return max(0.0, reset_time - time.time())

    def consume(self, item: RateLimitItem, *identifiers: str) -> None:
        """
        Count one request and raise once the quota is used up.

        Raises:
            RateLimitExceededError: If the request exceeded the limit.
        """
        if not self.hit(item, *identifiers):
            raise RateLimitExceededError(self.retry_after(item, *identifiers))

    def refund(self, item: RateLimitItem, *identifiers: str) -> None:
        """
        Give back one request previously counted by `hit`.

        Only fixed windows keep a plain counter that can be decremented.

        Raises:
            NotImplementedError: For the moving-window strategy.
        """
        if not isinstance(self._window, FixedWindowRateLimiter):
            raise NotImplementedError(f"{self.strategy} counters cannot be refunded")
        self._storage.incr(item.key_for(*identifiers), item.get_expiry(), amount=-1)

    def reset(self) -> None:
        """Clear every counter held by this limiter's storage."""
        self._storage.reset()


class TieredRateLimiter(RateLimiter):
    """
    FastAPI dependency enforcing one subscription tier's hourly quota.

    Requests are keyed by the authenticated user id when a valid bearer token
    is present, otherwise by client address.
    """

    def __init__(
        self,
        tier: SubscriptionTier | str = SubscriptionTier.FREE,
        storage_uri: Optional[str] = None,
        strategy: Optional[str] = None,
        trust_proxy_headers: Optional[bool] = None,
    ) -> None:
        super().__init__(storage_uri, strategy, trust_proxy_headers)
        self.tier = SubscriptionTier(tier)
        self.limit = tier_limit(self.tier)

    def key_for(self, request: Request, user: Optional[AuthenticatedUser]) -> str:
        if user is not None:
            return f"user:{user.id}"
        return f"ip:{client_address(request, self.trust_proxy_headers)}"

    async def __call__(
        self,
        request: Request,
        user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    ) -> None:
        self.consume(self.limit, "tier", self.key_for(request, user))


class SubscriptionRateLimiter(TieredRateLimiter):
    """
    FastAPI dependency applying the quota of the caller's own tier.

    The tier comes from the `tier` claim of the access token; anonymous callers
    and unknown tiers get the free quota.
    """

    def __init__(
        self,
        storage_uri: Optional[str] = None,
        strategy: Optional[str] = None,
        trust_proxy_headers: Optional[bool] = None,
    ) -> None:
        super().__init__(SubscriptionTier.FREE, storage_uri, strategy, trust_proxy_headers)

    async def __call__(
        self,
        request: Request,
        user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    ) -> None:
        tier = resolve_tier(user.tier) if user is not None else SubscriptionTier.FREE
        self.consume(tier_limit(tier), "tier", self.key_for(request, user))


def create_rate_limiter(
    tier: SubscriptionTier | str = SubscriptionTier.FREE, **kwargs
) -> TieredRateLimiter:
    """
    Create a limiter for a subscription tier.

    Args:
        tier: "free", "starter", "professional" or "enterprise".
        **kwargs: Passed through to TieredRateLimiter (storage_uri, strategy,
            trust_proxy_headers).

    Raises:
        ValueError: For an unknown tier.
    """
    return TieredRateLimiter(tier, **kwargs)


class AuthRateLimitMiddleware(BaseHTTPMiddleware):
    """
    Limit failed authentication attempts per client address.

    Every guarded request is counted before it reaches the endpoint, so
    concurrent attempts cannot slip past the limit together. Responses with
    status < 400 hand their count back, so a client that keeps logging in
    successfully is never blocked. Once the quota is used up every request to
    the guarded paths gets a 429 until the window resets.

    Args:
        app: The wrapped ASGI application.
        limit: Rate limit string, e.g. "5/15 minutes".
        paths: Path suffixes to guard, e.g. ("/api/v1/login",).
        methods: HTTP methods to guard.
        limiter: Counter storage. Must use the fixed-window strategy; a new
            fixed-window RateLimiter with default settings if omitted.
    """

    def __init__(
        self,
        app: ASGIApp,
        limit: str = "5/15 minutes",
        paths: Iterable[str] = (),
        methods: Iterable[str] = ("POST",),
        limiter: Optional[RateLimiter] = None,
    ) -> None:
        super().__init__(app)
        self.limit = parse(limit)
        self.paths = tuple(paths)
        self.methods = {method.upper() for method in methods}
        self.limiter = limiter or RateLimiter(strategy="fixed-window")
        if self.limiter.strategy != "fixed-window":
            msg = f"Authentication limits need a fixed-window limiter, got: {self.limiter.strategy}"
            raise ValueError(msg)

    def _guards(self, request: Request) -> bool:
        return request.method in self.methods and request.url.path.endswith(self.paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.paths or not self._guards(request):
            return await call_next(request)

        key = client_address(request, self.limiter.trust_proxy_headers)
        if not self.limiter.hit(self.limit, "auth", key):
            retry_after = self.limiter.retry_after(self.limit, "auth", key)
            logger.warning(f"Authentication rate limit exceeded for {key}")
            return rate_limit_response(
                RateLimitExceededError(retry_after).retry_after, AUTH_RATE_LIMIT_MESSAGE
            )

        response = await call_next(request)
        if response.status_code < 400:
            self.limiter.refund(self.limit, "auth", key)
        return response


def create_global_limiter(
    limit: str,
    storage_uri: Optional[str] = None,
    trust_proxy_headers: bool = False,
) -> Limiter:
    """
    Build the slowapi limiter the gateway applies to every request.

    Args:
        limit: Default limit string, e.g. "100/15 minutes".
        storage_uri: Counter storage URI.
        trust_proxy_headers: Attribute requests by X-Forwarded-For.
    """

    def key_func(request: Request) -> str:
        return client_address(request, trust_proxy_headers)

    return Limiter(
        key_func=key_func,
        application_limits=[limit],
        storage_uri=storage_uri or get_settings().RATE_LIMIT_STORAGE_URI,
    )


def global_rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> Response:
    """
    Render slowapi's RateLimitExceeded as the structured 429 body.

    Kept synchronous because slowapi's middleware calls the registered handler
    directly.
    """
    retry_after: float = exc.limit.limit.get_expiry()
    view_limit = getattr(request.state, "view_rate_limit", None)
    limiter: Optional[Limiter] = getattr(request.app.state, "limiter", None)
    if view_limit is not None and limiter is not None:
        item, identifiers = view_limit
        reset_time, _ = limiter.limiter.get_window_stats(item, *identifiers)
        retry_after = reset_time - time.time()

    logger.warning(
        f"Global rate limit exceeded for {request.method} {request.url.path}: {exc.detail}"
    )
    return rate_limit_response(RateLimitExceededError(retry_after).retry_after)


default_rate_limiter = create_rate_limiter(SubscriptionTier.FREE)
