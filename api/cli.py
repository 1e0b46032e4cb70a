#!/usr/bin/env python3
"""CLI for business services management tasks.

Usage:
    python -m cli <command>

Commands:
    migrate     Run database migrations (upgrade to a target, default head)
    serve       Run the API with uvicorn
"""

import argparse
import sys
from pathlib import Path

from core.logger import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)

API_DIR = Path(__file__).resolve().parent


def _get_alembic_config():
    from alembic.config import Config

    cfg = Config(str(API_DIR / "alembic.ini"))
    # Make script_location absolute so it works from any working directory.
    cfg.set_main_option("script_location", str(API_DIR / "alembic"))
    return cfg


def cmd_migrate(target: str) -> int:
    """Run database migrations."""
    from alembic import command

    logger.info("migrations.starting", target=target)
    command.upgrade(_get_alembic_config(), target)
    logger.info("migrations.complete", target=target)
    return 0


def cmd_serve(host: str, port: int, reload: bool) -> int:
    """Serve the FastAPI app."""
    import uvicorn

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        app_dir=str(API_DIR),
        log_config=None,
    )
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Business services API CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    migrate = subparsers.add_parser("migrate", help="Run database migrations")
    migrate.add_argument(
        "target",
        nargs="?",
        default="head",
        help="Target revision (default: head)",
    )

    serve = subparsers.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")

    args = parser.parse_args()

    if args.command == "migrate":
        return cmd_migrate(args.target)
    elif args.command == "serve":
        return cmd_serve(args.host, args.port, args.reload)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
