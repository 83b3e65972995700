#!/usr/bin/env python3
"""Apply or inspect the vouch schema migrations.

    python scripts/run_migrations.py                 # upgrade to head
    python scripts/run_migrations.py --revision c41e5a9d2b70
    python scripts/run_migrations.py --sql > schema.sql
    python scripts/run_migrations.py --current
"""

import argparse
import sys

import logfire
from alembic import command
from alembic.config import Config

from vouch.config import Settings
from vouch.util.logging import setup_logging
from vouch.util.observability import configure_logfire


def main() -> int:
    parser = argparse.ArgumentParser(description="Run vouch database migrations")
    parser.add_argument("--revision", default="head", help="Target revision")
    parser.add_argument(
        "--sql", action="store_true", help="Print the SQL instead of executing it"
    )
    parser.add_argument(
        "--current", action="store_true", help="Show the applied revision and exit"
    )
    parser.add_argument("--config", default="alembic.ini", help="Alembic config file")
    args = parser.parse_args()

    settings = Settings()
    configure_logfire(settings)
    setup_logging(settings)

    alembic_cfg = Config(args.config)

    if args.current:
        command.current(alembic_cfg, verbose=True)
        return 0

    with logfire.span(
        "migrations.upgrade", revision=args.revision, offline=args.sql
    ):
        try:
            command.upgrade(alembic_cfg, args.revision, sql=args.sql)
        except Exception as e:
            logfire.error(
                "Migration failed",
                revision=args.revision,
                error=str(e),
                error_type=type(e).__name__,
                _exc_info=sys.exc_info(),
            )
            # Deploys must stop on a broken schema
            raise

    if not args.sql:
        logfire.info(
            "Migrations applied",
            revision=args.revision,
            environment=settings.environment,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
