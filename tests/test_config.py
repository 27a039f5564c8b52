"""Tests for configuration and store selection."""

import pytest
from pydantic import ValidationError as SettingsError

from config import Config
from tinylink.database import build_store, MemoryLinkStore, PostgresLinkStore, RedisLinkStore


class TestConfig:
    """Test configuration loading."""

    def test_defaults(self, monkeypatch):
        for name in ("STORAGE_BACKEND", "CODE_LENGTH", "MAX_ALLOCATION_ATTEMPTS"):
            monkeypatch.delenv(name, raising=False)

        config = Config(_env_file=None)

        assert config.storage_backend == "postgres"
        assert config.code_length == 8
        assert config.max_allocation_attempts == 5

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        monkeypatch.setenv("CODE_LENGTH", "6")

        config = Config(_env_file=None)

        assert config.storage_backend == "memory"
        assert config.code_length == 6

    @pytest.mark.parametrize("overrides", [
        {"code_length": 5},
        {"code_length": 9},
        {"max_allocation_attempts": 0},
        {"storage_backend": "sqlite"},
    ])
    def test_rejects_invalid_values(self, overrides):
        with pytest.raises(SettingsError):
            Config(_env_file=None, **overrides)


class TestBuildStore:
    """Test store selection."""

    def test_memory(self):
        store = build_store(Config(_env_file=None, storage_backend="memory"))
        assert isinstance(store, MemoryLinkStore)
        assert store.name == "memory"

    def test_postgres(self):
        config = Config(
            _env_file=None,
            storage_backend="postgres",
            database_url="postgresql://u:p@db:5432/links",
        )

        store = build_store(config)

        assert isinstance(store, PostgresLinkStore)
        assert store.name == "postgres"
        assert store.database_url == "postgresql://u:p@db:5432/links"

    def test_redis(self):
        config = Config(_env_file=None, storage_backend="redis", redis_url="redis://cache:6379/0")

        store = build_store(config)
        assert isinstance(store, RedisLinkStore)
        assert store.name == "redis"

    def test_redis_requires_url(self):
        with pytest.raises(ValueError, match="REDIS_URL"):
            build_store(Config(_env_file=None, storage_backend="redis", redis_url=None))
