"""
Produce API server

Usage:
  python -m produce_api                     # settings from env / config.yaml
  python -m produce_api --port 8080 --memory
  python -m produce_api --db data/db.sqlite --driver sqlalchemy
"""
from __future__ import annotations

import argparse
import sys

import uvicorn

from .api import create_app
from .config import DRIVERS, MEMORY, load_settings
from .errors import ProduceError
from .logs import configure_logging


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="produce-api", description="Produce CRUD HTTP service")
    ap.add_argument("--host", help="bind address (env HOST)")
    ap.add_argument("--port", type=int, help="listen port (env PORT)")
    where = ap.add_mutually_exclusive_group()
    where.add_argument("--db", dest="db_path", help="SQLite file (env PRODUCE_DB_PATH)")
    where.add_argument("--memory", action="store_true", help="keep data in memory only")
    ap.add_argument("--driver", choices=DRIVERS, help="storage driver (env PRODUCE_DB_DRIVER)")
    ap.add_argument("--no-test-routes", action="store_true", help="do not mount POST /__test/reset")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings()
    except ProduceError as e:
        print(f"config error: {e}", file=sys.stderr)
        return 2

    if args.host:
        settings.host = args.host
    if args.port is not None:
        settings.port = args.port
    if args.memory:
        settings.db_path = MEMORY
    elif args.db_path:
        settings.db_path = args.db_path
    if args.driver:
        settings.db_driver = args.driver
    if args.no_test_routes:
        settings.enable_test_routes = False

    configure_logging(settings.log_level)
    try:
        app = create_app(settings)
    except ProduceError as e:
        print(f"startup failed: {e}", file=sys.stderr)
        return 1

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
