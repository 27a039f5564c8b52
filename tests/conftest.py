"""Pytest configuration and fixtures."""

import asyncio
from typing import AsyncGenerator, Iterable

import pytest
from httpx import ASGITransport, AsyncClient

from config import Config
from tinylink.codes import CodeGenerator
from tinylink.common.logging_config import setup_logging
from tinylink.database.base import LinkStoreBase
from tinylink.database.memory import MemoryLinkStore
from tinylink.service import LinkService
from web_app import create_app


class ScriptedGenerator(CodeGenerator):
    """Generator returning a fixed sequence of codes."""

    def __init__(self, codes: Iterable[str]):
        super().__init__()
        self._codes = iter(codes)
        self.calls = 0

    def generate(self) -> str:
        self.calls += 1
        return next(self._codes)


class YieldingStore(LinkStoreBase):
    """Wraps a store and yields to the event loop before every call.

    Lets concurrently gathered tasks interleave right up to the store's
    atomic operation.
    """

    def __init__(self, inner: LinkStoreBase):
        self.inner = inner

    async def insert(self, code, destination_url, owner_email):
        await asyncio.sleep(0)
        return await self.inner.insert(code, destination_url, owner_email)

    async def find_by_code(self, code):
        await asyncio.sleep(0)
        return await self.inner.find_by_code(code)

    async def list_by_owner(self, email):
        await asyncio.sleep(0)
        return await self.inner.list_by_owner(email)

    async def record_visit(self, code):
        await asyncio.sleep(0)
        return await self.inner.record_visit(code)

    async def delete_by_code(self, code):
        await asyncio.sleep(0)
        return await self.inner.delete_by_code(code)

    async def health_check(self):
        return await self.inner.health_check()

    async def close(self):
        await self.inner.close()


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
async def store(logger) -> AsyncGenerator[MemoryLinkStore, None]:
    """Create in-memory store."""
    store = MemoryLinkStore(logger=logger)
    yield store
    await store.close()


@pytest.fixture
def code_generator():
    """Create short code generator."""
    return CodeGenerator(length=8)


@pytest.fixture
def service(store, code_generator, logger) -> LinkService:
    """Create service instance."""
    return LinkService(
        store=store,
        generator=code_generator,
        logger=logger,
    )


@pytest.fixture
def config():
    """Create test configuration."""
    return Config(storage_backend="memory", base_url="http://testserver")


@pytest.fixture
def app(service, config):
    """Create test FastAPI app."""
    return create_app(service_instance=service, config=config)


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "http://stackoverflow.com/questions/123456",
    ]
