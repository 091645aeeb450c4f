"""CLI entry point for Search Battle (server and corpus seeding)."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from searchbattle.config.settings import Settings

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    from searchbattle.observability.logging import setup_logging

    settings = _load_settings(args.config)
    if args.log_level:
        settings.observability.log_level = args.log_level
    setup_logging(settings.observability)

    if args.command == "seed":
        sys.exit(_seed(settings, args))
    _serve(settings, args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="searchbattle",
        description="Search Battle: race a SQL substring search against Elasticsearch",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Search Battle {_get_version()}",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", type=str, default=None, help="Server bind address (overrides config)")
    serve.add_argument("--port", "-p", type=int, default=None, help="Server port (overrides config)")
    serve.add_argument("--workers", "-w", type=int, default=None, help="Number of worker processes")
    serve.add_argument("--reload", action="store_true", help="Enable auto-reload for development")

    seed = sub.add_parser("seed", help="Load the corpus CSV into both backends")
    seed.add_argument("--csv", dest="csv_path", type=Path, default=Path("processed.csv"), help="Corpus CSV file")
    seed.add_argument("--skip-relational", action="store_true", help="Do not seed the database")
    seed.add_argument("--skip-index", action="store_true", help="Do not seed the search index")
    return parser


def _load_settings(config: str | None) -> Settings:
    from searchbattle.config.settings import Settings

    if config:
        config_path = Path(config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            sys.exit(1)
        return Settings.from_yaml(config_path)
    return Settings()


# ── serve ────────────────────────────────────────────────────────────────────


def _serve(settings: Settings, args: argparse.Namespace) -> None:
    if args.host:
        settings.server.host = args.host
    if args.port:
        settings.server.port = args.port
    if args.workers:
        settings.server.workers = args.workers

    _check_port(settings.server.host, settings.server.port)

    import uvicorn

    log_level = settings.observability.log_level.lower()
    if settings.server.workers == 1 and not args.reload:
        from searchbattle.api.app import create_app

        uvicorn.run(create_app(settings), host=settings.server.host, port=settings.server.port, log_level=log_level)
        return

    # Worker processes import the factory and re-read settings from env / searchbattle-config.yaml.
    uvicorn.run(
        "searchbattle.api.app:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        workers=settings.server.workers if not args.reload else 1,
        reload=args.reload,
        log_level=log_level,
    )


def _check_port(host: str, port: int) -> None:
    """Exit with a readable message if the port is already taken."""
    import socket

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind((host if host != "0.0.0.0" else "127.0.0.1", port))
    except OSError:
        print(f"Error: Port {port} is already in use. Run 'lsof -i :{port}' to find the process.", file=sys.stderr)
        sys.exit(1)
    finally:
        sock.close()


# ── seed ─────────────────────────────────────────────────────────────────────


def _seed(settings: Settings, args: argparse.Namespace) -> int:
    if not args.csv_path.exists():
        print(f"Error: Corpus file not found: {args.csv_path}", file=sys.stderr)
        return 1
    try:
        asyncio.run(_seed_async(settings, args.csv_path, args.skip_relational, args.skip_index))
    except Exception:
        logger.error("Seeding failed", exc_info=True)
        return 1
    return 0


async def _seed_async(settings: Settings, csv_path: Path, skip_relational: bool, skip_index: bool) -> None:
    from searchbattle.adapters.indexed.adapter import create_search_client
    from searchbattle.adapters.relational.adapter import create_database_engine
    from searchbattle.seeding.loader import read_corpus, seed_index, seed_relational

    if not skip_relational:
        engine = create_database_engine(settings.database)
        try:
            count = await seed_relational(engine, read_corpus(csv_path), table=settings.database.table)
            logger.info("Database seeding completed: %d records", count)
        finally:
            await engine.dispose()

    if not skip_index:
        client = create_search_client(settings.elasticsearch)
        try:
            count = await seed_index(client, read_corpus(csv_path), index=settings.elasticsearch.index)
            logger.info("Elasticsearch seeding completed: %d records", count)
        finally:
            await client.close()


def _get_version() -> str:
    from searchbattle import __version__

    return __version__


if __name__ == "__main__":
    main()
