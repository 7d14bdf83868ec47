"""URL Shortener Service Layer - Core Business Logic

This module sits between the HTTP routes and the in-memory registry. It owns
the shorten and resolve workflows, their metrics and their logging.

Architecture Overview
==================
::
    ┌──────────────────────────────────────────────────────┐
    │                    Service Layer                     │
    │  ┌───────────────────┐      ┌─────────────────────┐  │
    │  │ ShortenerService  │ ───► │ ShortCodeGenerator  │  │
    │  │                   │      │ • random candidates │  │
    │  │ • shorten()       │      └─────────────────────┘  │
    │  │ • resolve()       │      ┌─────────────────────┐  │
    │  │ • build_short_url │ ───► │ URLRegistry         │  │
    │  └───────────────────┘      │ • short <-> long    │  │
    │                             └─────────────────────┘  │
    └──────────────────────────────────────────────────────┘

Shorten Flow
------------
::
    ┌─────────────┐
    │ POST        │
    │ /shorten    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Reject empty│
    │ / invalid   │
    └──────┬──────┘
           ▼
    ┌─────────────┐   HIT
    │find_existing├────────► return existing code
    └──────┬──────┘
      MISS │
           ▼
    ┌─────────────┐
    │ generate()  │◄─────────┐
    └──────┬──────┘          │ collision
           ▼                 │ (bounded retries)
    ┌──────────────────┐     │
    │register_if_absent├─────┘
    └──────┬───────────┘
           ▼
    return new (or concurrently registered) code

Resolve Flow
------------
::
    GET /:code ──► registry.resolve ──► HIT: 302 Location
                                   └──► MISS: ShortCodeNotFoundError (404)

Usage Examples
=============
```python
@router.post("/shorten")
async def shorten_url(
    payload: ShortenRequest,
    service: ShortenerService = Depends(get_shortener_service),
) -> ShortenResponse:
    result = service.shorten(payload.url)
    return ShortenResponse(short_url=result.short_url)
```
"""

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import validators
from prometheus_client import Counter, Gauge

from shortener.enums import RequestStatus
from shortener.errors import InvalidURLError, ShortCodeNotFoundError, ShortCodeSpaceExhaustedError

if TYPE_CHECKING:
    from shortener.dependencies import RequestContext

__all__ = ["RESERVED_PATH_SEGMENTS", "ShortenResult", "ShortenerService"]

# First path segments served by fixed routes (see shortener.routes / main)
RESERVED_PATH_SEGMENTS = frozenset({"health", "metrics", "shorten", "docs", "redoc"})


# ============================================================================
# PROMETHEUS METRICS
# ============================================================================

SHORTEN_REQUESTS_TOTAL = Counter(
    "url_shortener_shorten_requests_total",
    "Total shorten requests",
    ["status"],
)
RESOLVE_REQUESTS_TOTAL = Counter(
    "url_shortener_resolve_requests_total",
    "Total resolve requests",
    ["status"],
)
SHORTEN_COLLISIONS_TOTAL = Counter(
    "url_shortener_shorten_collisions_total",
    "Generated short codes that collided with an existing code",
)
REGISTRY_ENTRIES = Gauge(
    "url_shortener_registry_entries",
    "Number of short codes held in the registry",
)


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True)
class ShortenResult:
    """Outcome of a shorten call."""

    short_code: str
    short_url: str
    created: bool


# ============================================================================
# CORE SERVICE CLASS
# ============================================================================

class ShortenerService:
    """Shorten and resolve URLs against the shared registry.

    A service instance is cheap and built per request; the registry and
    generator it wraps are process-wide and shared.

    Example:
        >>> service = ShortenerService.from_context(ctx)
        >>> result = service.shorten("https://example.com")
        >>> service.resolve(result.short_code)
        'https://example.com'
    """

    def __init__(self, ctx: "RequestContext"):
        self._registry = ctx.registry
        self._generator = ctx.generator
        self._settings = ctx.settings
        self._logger = ctx.logger
        self._ctx = ctx

    @classmethod
    def from_context(cls, ctx: "RequestContext") -> "ShortenerService":
        return cls(ctx)

    # ========================================================================
    # PUBLIC API METHODS
    # ========================================================================

    def shorten(self, long_url: str) -> ShortenResult:
        """Return the short code for ``long_url``, creating one if needed.

        Repeated calls with the same URL return the same code. The existence
        check and the insert happen in one registry write section, so two
        concurrent requests for one URL also agree on a single code.

        Raises:
            InvalidURLError: ``long_url`` is blank, or fails URL validation
                when VALIDATE_URLS is enabled.
            ShortCodeSpaceExhaustedError: every candidate collided.
        """
        start_time = time.perf_counter()
        try:
            self._validate(long_url)

            existing = self._registry.find_existing(long_url)
            if existing is not None:
                SHORTEN_REQUESTS_TOTAL.labels(status=RequestStatus.SUCCESS).inc()
                self._logger.info(f"Reusing short code {existing} for {long_url}")
                return ShortenResult(existing, self.build_short_url(existing), created=False)

            short_code, created = self._allocate(long_url)
        except InvalidURLError as exc:
            SHORTEN_REQUESTS_TOTAL.labels(status=RequestStatus.VALIDATION_ERROR).inc()
            self._logger.warning(f"Rejected shorten request: {exc}")
            raise
        except ShortCodeSpaceExhaustedError:
            SHORTEN_REQUESTS_TOTAL.labels(status=RequestStatus.ERROR).inc()
            self._logger.error(
                f"No free short code after {self._settings.SHORTEN_MAX_ATTEMPTS} attempts for {long_url}"
            )
            raise

        SHORTEN_REQUESTS_TOTAL.labels(status=RequestStatus.SUCCESS).inc()
        REGISTRY_ENTRIES.set(len(self._registry))
        duration = time.perf_counter() - start_time
        self._logger.info(f"Shortened {long_url} -> {short_code} in {duration:.6f}s")
        return ShortenResult(short_code, self.build_short_url(short_code), created=created)

    def resolve(self, short_code: str) -> str:
        """Return the long URL for ``short_code``.

        Raises:
            ShortCodeNotFoundError: the code was never registered.
        """
        long_url = self._registry.resolve(short_code) if short_code else None
        if long_url is None:
            RESOLVE_REQUESTS_TOTAL.labels(status=RequestStatus.NOT_FOUND).inc()
            self._logger.warning(f"Short code not found: {short_code!r}")
            raise ShortCodeNotFoundError()

        RESOLVE_REQUESTS_TOTAL.labels(status=RequestStatus.SUCCESS).inc()
        self._logger.debug(f"Resolved {short_code} -> {long_url}")
        return long_url

    def build_short_url(self, short_code: str) -> str:
        return f"{self._settings.BASE_URL.rstrip('/')}/{short_code}"

    # ========================================================================
    # PRIVATE HELPER METHODS
    # ========================================================================

    def _validate(self, long_url: str) -> None:
        if not isinstance(long_url, str) or not long_url.strip():
            raise InvalidURLError()
        if self._settings.VALIDATE_URLS and not validators.url(long_url):
            raise InvalidURLError()

    def _allocate(self, long_url: str) -> tuple[str, bool]:
        """Generate candidates until one is registered for ``long_url``.

        Returns:
            (short_code, created). ``created`` is False when a concurrent
            request registered the same URL first and its code is reused.
        """
        for attempt in range(1, self._settings.SHORTEN_MAX_ATTEMPTS + 1):
            candidate = self._generator.generate()
            # A code equal to a route segment would be shadowed by that route.
            if candidate not in RESERVED_PATH_SEGMENTS:
                registered = self._registry.register_if_absent(candidate, long_url)
                if registered is not None:
                    return registered, registered == candidate

            SHORTEN_COLLISIONS_TOTAL.inc()
            self._logger.warning(f"Short code collision on {candidate} (attempt {attempt})")

        raise ShortCodeSpaceExhaustedError()
