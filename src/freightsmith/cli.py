"""Command-line interface for FreightSmith."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import uvicorn

from .config import settings


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="FreightSmith - freight tracking header resolution and container risk engine"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # Seed command
    seed_parser = subparsers.add_parser(
        "seed", help="Seed the header dictionary with canonical field aliases"
    )
    seed_parser.add_argument(
        "--database", type=Path, default=None, help="Database path (default: DATABASE_PATH)"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        run_server(args.host, args.port, args.reload, args.log_level)
    elif args.command == "seed":
        asyncio.run(run_seed(args.database))
    else:
        parser.print_help()
        sys.exit(1)


def run_server(host: str, port: int, reload: bool, log_level: str = "INFO"):
    """Run the web server."""
    uvicorn.run(
        "freightsmith.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
        log_level=log_level.lower(),
    )


async def run_seed(db_path: Optional[Path] = None) -> int:
    """Seed the dictionary and report how many entries were added."""
    from .dictionary import DictionaryStore

    store = DictionaryStore(db_path)
    await store.initialize()
    try:
        seeded = await store.seed_from_registry()
        total = len(await store.list_all())
    finally:
        await store.close()

    print(f"Seeded {seeded} entries ({total} total) into {store.db_path}")
    return seeded


if __name__ == "__main__":
    main()
