"""Tests for the allocation, resolution and link services."""

import logging

import pytest

from conftest import ScriptedGenerator
from tinylink.codes import validate_code
from tinylink.database.memory import MemoryLinkStore
from tinylink.errors import (
    AllocationExhaustedError,
    ConflictError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from tinylink.service import AllocationService, ResolutionService, LinkService


class TestAllocationService:
    """Test link allocation."""

    async def test_generated_code(self, store, sample_urls):
        allocation = AllocationService(store)

        link = await allocation.allocate(sample_urls[0], "a@b.com")

        assert validate_code(link.code)
        assert len(link.code) == 8
        assert link.total_clicks == 0
        assert link.last_clicked_at is None
        assert await store.find_by_code(link.code) == link

    async def test_requested_code(self, store, sample_urls):
        allocation = AllocationService(store)

        link = await allocation.allocate(sample_urls[0], "a@b.com", requested_code="abc123")

        assert link.code == "abc123"

    async def test_empty_requested_code_is_generated(self, store, sample_urls):
        allocation = AllocationService(store)

        link = await allocation.allocate(sample_urls[0], "a@b.com", requested_code="")

        assert validate_code(link.code)

    async def test_requested_code_taken(self, store, sample_urls):
        allocation = AllocationService(store)
        await allocation.allocate(sample_urls[0], "a@b.com", requested_code="abc123")

        with pytest.raises(ConflictError, match="already exists"):
            await allocation.allocate(sample_urls[1], "c@d.com", requested_code="abc123")

        link = await store.find_by_code("abc123")
        assert link.destination_url == sample_urls[0]

    async def test_requested_code_is_not_retried(self, store, sample_urls):
        generator = ScriptedGenerator([])
        allocation = AllocationService(store, generator=generator)
        await store.insert("abc123", sample_urls[0], "a@b.com")

        with pytest.raises(ConflictError):
            await allocation.allocate(sample_urls[1], "a@b.com", requested_code="abc123")

        assert generator.calls == 0

    @pytest.mark.parametrize("code", ["abc", "abc-123", "abcdefghij", "abc 12", 12345678, 0])
    async def test_malformed_requested_code(self, store, sample_urls, code):
        allocation = AllocationService(store)

        with pytest.raises(ValidationError, match="Invalid short code"):
            await allocation.allocate(sample_urls[0], "a@b.com", requested_code=code)

        assert await store.list_by_owner("a@b.com") == []

    @pytest.mark.parametrize("url", [
        "ftp://x",
        "not-a-url",
        "",
        None,
        "https://",
        "http://example.com:abc",
        "http://example.com:99999",
        "http://exa mple.com",
        "https://exa<mple>.com",
        42,
    ])
    async def test_invalid_url(self, store, url):
        allocation = AllocationService(store)

        with pytest.raises(ValidationError, match="Invalid URL"):
            await allocation.allocate(url, "a@b.com")

        assert await store.list_by_owner("a@b.com") == []

    @pytest.mark.parametrize("email", ["", None, "nobody", "a@b"])
    async def test_invalid_email(self, store, sample_urls, email):
        allocation = AllocationService(store)

        with pytest.raises(ValidationError, match="Invalid email"):
            await allocation.allocate(sample_urls[0], email, requested_code="abc123")

        assert await store.find_by_code("abc123") is None

    async def test_url_checked_before_email(self, store):
        allocation = AllocationService(store)

        with pytest.raises(ValidationError, match="Invalid URL"):
            await allocation.allocate("ftp://x", "nobody")

    async def test_collision_retries_with_new_code(self, store, sample_urls):
        await store.insert("taken111", sample_urls[0], "a@b.com")
        await store.insert("taken222", sample_urls[0], "a@b.com")
        generator = ScriptedGenerator(["taken111", "taken222", "fresh333"])
        allocation = AllocationService(store, generator=generator)

        link = await allocation.allocate(sample_urls[1], "c@d.com")

        assert link.code == "fresh333"
        assert generator.calls == 3

    async def test_collision_budget_exhausted(self, store, sample_urls):
        await store.insert("taken111", sample_urls[0], "a@b.com")
        generator = ScriptedGenerator(["taken111"] * 10)
        allocation = AllocationService(store, generator=generator, max_attempts=5)

        with pytest.raises(AllocationExhaustedError) as exc_info:
            await allocation.allocate(sample_urls[1], "c@d.com")

        assert exc_info.value.attempts == 5
        assert generator.calls == 5
        assert await store.list_by_owner("c@d.com") == []

    async def test_collisions_are_not_logged_as_errors(self, store, sample_urls, caplog):
        await store.insert("taken111", sample_urls[0], "a@b.com")
        generator = ScriptedGenerator(["taken111", "fresh333"])
        allocation = AllocationService(store, generator=generator)

        with caplog.at_level(logging.DEBUG):
            await allocation.allocate(sample_urls[1], "c@d.com")
            with pytest.raises(ConflictError):
                await allocation.allocate(sample_urls[1], "c@d.com", requested_code="taken111")

        assert not [r for r in caplog.records if r.levelno >= logging.ERROR]

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            AllocationService(MemoryLinkStore(), max_attempts=0)


class TestResolutionService:
    """Test code resolution."""

    async def test_resolve_counts_visit(self, store, sample_urls):
        await store.insert("abc123", sample_urls[0], "a@b.com")
        resolution = ResolutionService(store)

        assert await resolution.resolve("abc123") == sample_urls[0]

        link = await store.find_by_code("abc123")
        assert link.total_clicks == 1
        assert link.last_clicked_at is not None

    async def test_resolve_missing(self, store):
        resolution = ResolutionService(store)

        with pytest.raises(NotFoundError, match="not found"):
            await resolution.resolve("nope123")

        assert await store.find_by_code("nope123") is None

    async def test_resolve_after_delete(self, store, sample_urls):
        await store.insert("abc123", sample_urls[0], "a@b.com")
        await store.delete_by_code("abc123")

        with pytest.raises(NotFoundError):
            await ResolutionService(store).resolve("abc123")


class TestLinkService:
    """Test the link service facade."""

    async def test_lifecycle(self, service, sample_urls):
        link = await service.create_link(sample_urls[0], "a@b.com")

        assert await service.resolve(link.code) == sample_urls[0]
        assert await service.resolve(link.code) == sample_urls[0]
        assert (await service.get_link(link.code)).total_clicks == 2

        await service.delete_link(link.code)

        with pytest.raises(NotFoundError):
            await service.resolve(link.code)
        with pytest.raises(NotFoundError):
            await service.get_link(link.code)

    async def test_get_link_does_not_count(self, service, sample_urls):
        link = await service.create_link(sample_urls[0], "a@b.com")

        await service.get_link(link.code)

        assert (await service.get_link(link.code)).total_clicks == 0

    async def test_delete_missing(self, service):
        with pytest.raises(NotFoundError):
            await service.delete_link("nope123")

    async def test_list_links(self, service, sample_urls):
        first = await service.create_link(sample_urls[0], "a@b.com")
        second = await service.create_link(sample_urls[1], "a@b.com")
        await service.create_link(sample_urls[2], "other@b.com")

        links = await service.list_links("a@b.com")

        assert [link.code for link in links] == [second.code, first.code]

    async def test_list_links_invalid_email(self, service):
        with pytest.raises(ValidationError):
            await service.list_links("nobody")

    async def test_health_check(self, service):
        health = await service.health_check()

        assert health == {"database": True, "overall": True}

    async def test_health_check_store_down(self, store):
        class DownStore(type(store)):
            async def health_check(self):
                raise StorageUnavailableError("down")

        service = LinkService(store=DownStore())

        assert await service.health_check() == {"database": False, "overall": False}

    async def test_uses_configured_attempts(self, store, sample_urls):
        await store.insert("taken111", sample_urls[0], "a@b.com")
        generator = ScriptedGenerator(["taken111"] * 3)
        service = LinkService(store=store, generator=generator, max_allocation_attempts=2)

        with pytest.raises(AllocationExhaustedError):
            await service.create_link(sample_urls[1], "a@b.com")

        assert generator.calls == 2
