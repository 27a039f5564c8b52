"""Storage layer for TinyLink."""

import logging
from typing import Optional

from .base import LinkStoreBase
from .memory import MemoryLinkStore
from .postgres import PostgresLinkStore
from .redis_store import RedisLinkStore
from .models import Link

__all__ = [
    "LinkStoreBase",
    "MemoryLinkStore",
    "PostgresLinkStore",
    "RedisLinkStore",
    "Link",
    "build_store",
]


def build_store(config, logger: Optional[logging.Logger] = None) -> LinkStoreBase:
    """Create the link store selected by ``config.storage_backend``.
    
    Args:
        config: Configuration instance
        logger: Optional logger
        
    Returns:
        Uninitialized store; call ``initialize()`` before use
        
    Raises:
        ValueError: If the backend name is unknown or its URL is missing
    """
    backend = config.storage_backend.lower()
    
    if backend == "postgres":
        return PostgresLinkStore(
            database_url=config.database_url,
            pool_max_size=config.db_pool_max_size,
            timeout_seconds=config.db_timeout_seconds,
            create_tables=config.create_tables,
            logger=logger,
        )
    if backend == "redis":
        if not config.redis_url:
            raise ValueError("REDIS_URL is required for the redis storage backend")
        return RedisLinkStore(redis_url=config.redis_url, logger=logger)
    if backend == "memory":
        return MemoryLinkStore(logger=logger)
    
    raise ValueError(f"Unknown storage backend: {config.storage_backend}")
