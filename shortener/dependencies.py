"""Dependency injection for the shortener routes.

Shared resources (settings, logger, registry, generator) live in a single
ServiceContainer that is built once at process start and attached to
``app.state``. Each request gets a lightweight RequestContext on top of it.
"""

import logging
import random
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Depends, Request

from shortener.config import Settings, get_settings
from shortener.generator import ShortCodeGenerator
from shortener.registry import URLRegistry
from shortener.service import ShortenerService

__all__ = [
    "ServiceContainer",
    "RequestContext",
    "setup_logger",
    "get_container",
    "get_request_context",
    "get_shortener_service",
]

LOGGER_NAME = "shortener"


def setup_logger(settings: Settings) -> logging.Logger:
    """Configure the service logger once."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(settings.LOG_LEVEL.upper())
    return logger


# ============================================================================
# SERVICE CONTAINER
# ============================================================================


class ServiceContainer:
    """Process-wide resources shared by every request.

    The registry is the only stateful object in the service. Constructing a
    fresh container gives a fresh, empty registry, which is how tests get
    isolation.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        registry: Optional[URLRegistry] = None,
        generator: Optional[ShortCodeGenerator] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.logger = setup_logger(self.settings)
        self.registry = registry if registry is not None else URLRegistry()
        self.generator = generator or ShortCodeGenerator(length=self.settings.SHORT_CODE_LENGTH, rng=rng)


# ============================================================================
# LIGHTWEIGHT REQUEST CONTEXT
# ============================================================================


@dataclass
class RequestContext:
    """Per-request tracking on top of the shared container.

    Attributes:
        container: Process-wide shared resources
        request_id: Unique identifier for this request
        trace_id: Correlation ID taken from X-Trace-ID, if sent
        user_agent: Client user agent string
        client_ip: Client IP address
        start_time: Request start timestamp
        tags: Request tags for categorization
    """

    container: ServiceContainer
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    trace_id: Optional[str] = None
    user_agent: Optional[str] = None
    client_ip: Optional[str] = None
    start_time: float = field(default_factory=time.time)
    tags: list[str] = field(default_factory=list)

    @property
    def registry(self) -> URLRegistry:
        return self.container.registry

    @property
    def generator(self) -> ShortCodeGenerator:
        return self.container.generator

    @property
    def settings(self) -> Settings:
        return self.container.settings

    @property
    def logger(self) -> logging.LoggerAdapter:
        """Shared logger with this request's context attached."""
        return logging.LoggerAdapter(
            self.container.logger,
            {
                "request_id": self.request_id,
                "trace_id": self.trace_id or self.request_id,
                "client_ip": self.client_ip,
                "user_agent": self.user_agent,
                "tags": ",".join(self.tags),
            },
        )

    def add_tag(self, tag: str) -> None:
        if tag not in self.tags:
            self.tags.append(tag)

    def get_duration(self) -> float:
        """Get request duration in milliseconds."""
        return (time.time() - self.start_time) * 1000


# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_request_context(
    request: Request,
    container: ServiceContainer = Depends(get_container),
) -> RequestContext:
    """Build the request context from client info and tracing headers."""
    return RequestContext(
        container=container,
        trace_id=request.headers.get("x-trace-id"),
        user_agent=request.headers.get("user-agent"),
        client_ip=request.client.host if request.client else None,
    )


def get_shortener_service(ctx: RequestContext = Depends(get_request_context)) -> ShortenerService:
    return ShortenerService.from_context(ctx)
