#!/usr/bin/env python3
"""
Command-line interface for TinyLink.

Usage:
    python tinylink_cli.py create <url> --email EMAIL [--code CODE]
    python tinylink_cli.py info <code>
    python tinylink_cli.py list --email EMAIL
    python tinylink_cli.py delete <code>
    python tinylink_cli.py resolve <code>
    python tinylink_cli.py health
"""

import argparse
import asyncio
import json
import sys
from typing import Optional

from config import load_config
from tinylink.codes import CodeGenerator
from tinylink.common.logging_config import setup_logging
from tinylink.database import build_store
from tinylink.errors import LinkError
from tinylink.service import LinkService


class TinyLinkCLI:
    """Command-line interface for TinyLink."""

    def __init__(
        self,
        backend: Optional[str] = None,
        database_url: Optional[str] = None,
        redis_url: Optional[str] = None,
        verbose: bool = False,
    ):
        overrides = {
            key: value
            for key, value in (
                ("storage_backend", backend),
                ("database_url", database_url),
                ("redis_url", redis_url),
            )
            if value
        }
        self.config = load_config().model_copy(update=overrides)
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING")
        self.service: Optional[LinkService] = None

    async def initialize(self):
        """Connect to the configured store."""
        store = build_store(self.config, logger=self.logger)
        await store.initialize()
        self.service = LinkService(
            store=store,
            generator=CodeGenerator(length=self.config.code_length),
            logger=self.logger,
            max_allocation_attempts=self.config.max_allocation_attempts,
        )

    async def cleanup(self):
        if self.service:
            await self.service.close()

    async def create(self, url: str, email: str, code: Optional[str] = None) -> int:
        link = await self.service.create_link(url, email, code=code)
        return _emit({"success": True, "link": link.to_dict()})

    async def info(self, code: str) -> int:
        link = await self.service.get_link(code)
        return _emit({"success": True, "link": link.to_dict()})

    async def list_links(self, email: str) -> int:
        links = await self.service.list_links(email)
        return _emit({
            "success": True,
            "count": len(links),
            "links": [link.to_dict() for link in links],
        })

    async def delete(self, code: str) -> int:
        await self.service.delete_link(code)
        return _emit({"success": True, "code": code, "message": f"Deleted {code}"})

    async def resolve(self, code: str) -> int:
        """Resolve a code. Counts as a visit."""
        destination = await self.service.resolve(code)
        return _emit({"success": True, "code": code, "url": destination})

    async def health(self) -> int:
        health_status = await self.service.health_check()
        _emit({"success": True, "store": self.service.store.name, "health": health_status})
        return 0 if health_status["overall"] else 1


def _emit(payload: dict) -> int:
    print(json.dumps(payload, indent=2))
    return 0


def _fail(message: str) -> int:
    print(json.dumps({"success": False, "error": message}, indent=2), file=sys.stderr)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="TinyLink CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create a link with a generated code
  %(prog)s create https://example.com/long/url --email me@example.com

  # Create with a custom code
  %(prog)s create https://example.com/long/url --email me@example.com --code mylink1

  # Show click statistics
  %(prog)s info mylink1

  # List an owner's links
  %(prog)s list --email me@example.com
        """
    )

    parser.add_argument("--backend", choices=["postgres", "redis"], help="Storage backend (default: from STORAGE_BACKEND)")
    parser.add_argument("--database-url", help="PostgreSQL URL (default: from DATABASE_URL)")
    parser.add_argument("--redis-url", help="Redis URL (default: from REDIS_URL)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    create_parser = subparsers.add_parser("create", help="Create a short link")
    create_parser.add_argument("url", help="Destination URL")
    create_parser.add_argument("--email", required=True, help="Owner email")
    create_parser.add_argument("--code", help="Custom short code")

    info_parser = subparsers.add_parser("info", help="Show a link and its clicks")
    info_parser.add_argument("code", help="Short code")

    list_parser = subparsers.add_parser("list", help="List links by owner")
    list_parser.add_argument("--email", required=True, help="Owner email")

    delete_parser = subparsers.add_parser("delete", help="Delete a link")
    delete_parser.add_argument("code", help="Short code")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve a code (counts a visit)")
    resolve_parser.add_argument("code", help="Short code")

    subparsers.add_parser("health", help="Check store health")

    return parser


async def main() -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    cli = TinyLinkCLI(
        backend=args.backend,
        database_url=args.database_url,
        redis_url=args.redis_url,
        verbose=args.verbose,
    )

    try:
        await cli.initialize()

        if args.command == "create":
            return await cli.create(args.url, args.email, args.code)
        elif args.command == "info":
            return await cli.info(args.code)
        elif args.command == "list":
            return await cli.list_links(args.email)
        elif args.command == "delete":
            return await cli.delete(args.code)
        elif args.command == "resolve":
            return await cli.resolve(args.code)
        elif args.command == "health":
            return await cli.health()

        parser.print_help()
        return 1

    except LinkError as e:
        return _fail(str(e))
    finally:
        await cli.cleanup()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
