"""FastAPI application entry point for the URL shortener service.

Application Lifecycle Diagram
===========================
::
    ┌──────────────┐
    │  import      │
    │  module      │
    └──────┬───────┘
           ▼
    ┌──────────────┐
    │ Build        │
    │ ServiceCont- │
    │ ainer (empty │
    │ registry)    │
    └──────┬───────┘
           ▼
    ┌──────────────┐
    │ Create       │
    │ FastAPI app, │
    │ middleware,  │
    │ handlers     │
    └──────┬───────┘
           ▼
    ┌──────────────┐
    │ Serve HTTP   │
    │ requests     │
    └──────┬───────┘
           ▼
    ┌──────────────┐
    │ shutdown:    │
    │ registry is  │
    │ discarded    │
    └──────────────┘

How to Use
===========
**Step 1 — Run**::
    python -m shortener
    # or
    uvicorn shortener.main:app --host 0.0.0.0 --port 8080

**Step 2 — Make API calls**::
    curl -X POST http://localhost:8080/shorten \
         -H "Content-Type: application/json" \
         -d '{"url": "https://example.com"}'

    curl -i http://localhost:8080/AbC123

Key Behaviours
===============
- All state is in memory; restarting the process empties the registry.
- Errors are returned as plain text with the status code of the error type.
- Prometheus metrics are exposed at /metrics unless METRICS_ENABLED is off.
"""

__all__ = ["app", "create_app"]

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_fastapi_instrumentator import Instrumentator

from shortener.config import get_settings
from shortener.dependencies import ServiceContainer
from shortener.errors import InvalidURLError, ShortenerError
from shortener.routes import router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    container: ServiceContainer = app.state.container
    container.logger.info(
        f"{container.settings.APP_NAME} listening, short URLs under {container.settings.BASE_URL}"
    )
    yield
    container.logger.info(f"Shutting down with {len(container.registry)} registered URLs")


async def shortener_error_handler(request: Request, exc: ShortenerError) -> PlainTextResponse:
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    request.app.state.container.logger.warning(f"Invalid request body on {request.url.path}: {exc.errors()}")
    return PlainTextResponse(InvalidURLError.message, status_code=InvalidURLError.status_code)


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """Build the application around ``container`` (a fresh one by default)."""
    container = container or ServiceContainer()
    settings = container.settings

    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="In-memory URL shortener",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ShortenerError, shortener_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    if settings.METRICS_ENABLED:
        Instrumentator(
            should_group_status_codes=True,
            should_ignore_untemplated=False,
            should_respect_env_var=False,
        ).instrument(app).expose(app)

    # Registered last: the redirect route matches every remaining path.
    app.include_router(router)
    return app


app = create_app(ServiceContainer(get_settings()))
