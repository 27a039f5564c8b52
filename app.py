#!/usr/bin/env python3
"""
Main entry point for the TinyLink service.

Concurrency: requests are served with async I/O (FastAPI + asyncpg pool or
redis.asyncio). Uniqueness and click counting are enforced by the store, so
WORKERS > 1 is safe with the postgres and redis backends. The memory backend
is per-process and only suitable for a single worker.

Usage:
    python app.py

Environment variables:
    STORAGE_BACKEND - postgres (default), redis or memory
    DATABASE_URL - PostgreSQL connection URL
    CREATE_TABLES - Set to 'true' to create the links table on startup
    REDIS_URL - Redis connection URL (redis backend)
    BASE_URL - Base URL for short links
    PORT - Port to listen on
    WORKERS - Number of uvicorn worker processes (default 1)
    CODE_LENGTH - Length of generated codes (6-8, default 8)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import load_config
from tinylink.codes import CodeGenerator
from tinylink.common.logging_config import setup_logging
from tinylink.database import build_store
from tinylink.service import LinkService
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting TinyLink service...")
    store = build_store(config, logger=logger)
    logger.info(f"Using {store.name} link store")
    await store.initialize()

    app.state.service = LinkService(
        store=store,
        generator=CodeGenerator(length=config.code_length),
        logger=logger,
        max_allocation_attempts=config.max_allocation_attempts,
    )

    logger.info("Service started successfully")

    yield

    logger.info("Shutting down TinyLink service...")
    await app.state.service.close()
    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("TinyLink Service")
    logger.info(
        f"Configuration: {config.model_dump(exclude={'database_url', 'redis_url'})}"
    )

    app = create_app(service_instance=None, config=config)
    app.state.logger = logger
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        access_log=False,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
