"""Standard library logging setup.

Libraries (sqlalchemy, alembic, redis, httpx) log through the standard
``logging`` module. Their records are routed into logfire so they appear
next to the application's own spans and logs.
"""

import logging

import logfire

from vouch.config import Settings

# Only warnings and above from these, whatever the root level
NOISY_LOGGERS = ("httpx", "httpcore", "redis", "asyncio")


def log_level(settings: Settings) -> int:
    """Root level for the environment; the debug flag wins."""
    if settings.debug:
        return logging.DEBUG
    if settings.environment == "production":
        return logging.WARNING
    return logging.INFO


def setup_logging(settings: Settings) -> None:
    """Send standard library logging to logfire.

    Call after ``configure_logfire``.

    Args:
        settings: Application settings
    """
    level = log_level(settings)
    logging.basicConfig(
        level=level,
        handlers=[logfire.LogfireLoggingHandler()],
        force=True,  # Replace handlers installed by imported libraries
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    # Statement echo is for debugging only
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.debug else logging.WARNING
    )

    logfire.debug(
        "Logging configured",
        environment=settings.environment,
        level=logging.getLevelName(level),
    )
