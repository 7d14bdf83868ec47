"""Shared pytest fixtures for API, registry and service tests."""

import random
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from shortener.config import Settings
from shortener.dependencies import ServiceContainer, get_container
from shortener.main import app


@pytest.fixture
def settings() -> Settings:
    return Settings(BASE_URL="http://localhost:8080", SHORT_CODE_LENGTH=6)


@pytest.fixture
def container(settings: Settings) -> ServiceContainer:
    """Fresh container: empty registry and a seeded generator."""
    return ServiceContainer(settings=settings, rng=random.Random(1234))


@pytest_asyncio.fixture(scope="function")
async def client(container: ServiceContainer) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_container] = lambda: container

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
