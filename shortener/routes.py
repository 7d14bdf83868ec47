"""FastAPI route definitions for the URL shortener HTTP API.

API Endpoint Overview
=====================
::
    GET  /health
        └─ HealthResponse (200)

    POST /shorten
        ├─ ShortenRequest (request body)
        └─ ShortenResponse (200) or 400 (plain text)

    *    /shorten (any other method)
        └─ 405 (plain text)

    GET  /:short_code[/...]
        └─ 302 Redirect or 404 (plain text)

Request Flow Diagram
====================
::
    ┌─────────────┐
    │  HTTP       │
    │  Request    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Validate &  │
    │ Parse       │
    │ (Pydantic)  │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Inject      │
    │ Service     │
    │ (container) │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Call Service│
    │ Layer       │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ HTTP        │
    │ Response    │
    └─────────────┘

Key Behaviours
===============
- Every error is a ShortenerError rendered as plain text by the app-level
  exception handler.
- The redirect route is registered last: it catches every path the other
  routes do not, and only the first path segment is used as the short code.
- 302 is used for redirects.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from shortener.dependencies import RequestContext, get_request_context, get_shortener_service
from shortener.enums import HealthStatus
from shortener.errors import MethodNotAllowedError
from shortener.schemas import HealthResponse, ShortenRequest, ShortenResponse
from shortener.service import ShortenerService

__all__ = ["router"]

router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(ctx: RequestContext = Depends(get_request_context)) -> HealthResponse:
    ctx.logger.debug("Health check requested")
    return HealthResponse(status=HealthStatus.HEALTHY, registry_size=len(ctx.registry))


@router.post("/shorten", response_model=ShortenResponse, tags=["urls"])
async def shorten_url(
    payload: ShortenRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: ShortenerService = Depends(get_shortener_service),
) -> ShortenResponse:
    ctx.add_tag("url_creation")
    result = service.shorten(payload.url)
    ctx.logger.info(
        f"URL shortened: {result.short_code}",
        extra={
            "operation": "shorten",
            "short_code": result.short_code,
            "new_code": result.created,
            "duration_ms": ctx.get_duration(),
        },
    )
    return ShortenResponse(short_url=result.short_url)


@router.api_route(
    "/shorten",
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def shorten_method_not_allowed() -> None:
    raise MethodNotAllowedError()


@router.get("/{request_path:path}", tags=["redirect"])
async def redirect_to_url(
    request_path: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ShortenerService = Depends(get_shortener_service),
) -> RedirectResponse:
    ctx.add_tag("redirect")
    short_code = request_path.split("/", 1)[0]
    long_url = service.resolve(short_code)
    ctx.logger.info(
        f"Redirect: {short_code} -> {long_url}",
        extra={
            "operation": "redirect",
            "short_code": short_code,
            "duration_ms": ctx.get_duration(),
        },
    )
    return RedirectResponse(url=long_url, status_code=302)
