"""Logfire setup and instrumentation.

Services log and trace through logfire directly:

    logfire.info("Second factor verified", identity_id=str(identity.id))

    with logfire.span("identity_link_broker.complete", provider=provider):
        ...
"""

import logfire
from sqlalchemy.ext.asyncio import AsyncEngine

from vouch.config import Settings

# Attribute names whose values never leave the process. Logfire already
# scrubs "password", "secret" and "token"; these are the domain's own.
SCRUB_PATTERNS = [
    "backup_code",
    "two_factor_secret",
    "encryption_key",
]


def _should_send(settings: Settings) -> bool:
    # The test environment never sends; an explicit flag beats token presence
    if settings.environment == "test":
        return False
    if settings.observability.send_to_logfire is not None:
        return settings.observability.send_to_logfire
    return bool(settings.observability.logfire_token)


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire once per process.

    Set ``OBSERVABILITY__LOGFIRE_TOKEN`` to ship spans to Logfire cloud;
    ``OBSERVABILITY__SEND_TO_LOGFIRE`` forces it on or off. Attribute values
    matching ``SCRUB_PATTERNS`` are redacted before export.

    Args:
        settings: Application settings
    """
    send = _should_send(settings)
    console: logfire.ConsoleOptions | bool = False
    if settings.environment != "test":
        console = logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
            min_log_level="debug" if settings.debug else "info",
        )

    logfire.configure(
        service_name="vouch",
        service_version="0.1.0",
        environment=settings.environment,
        token=settings.observability.logfire_token,
        send_to_logfire=send,
        console=console,
        scrubbing=logfire.ScrubbingOptions(extra_patterns=SCRUB_PATTERNS),
    )
    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send,
    )


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Instrument SQLAlchemy engine with Logfire.

    Args:
        engine: SQLAlchemy async engine
    """
    logfire.instrument_sqlalchemy(
        engine=engine.sync_engine,
        enable_commenter=True,  # Add SQL comments with span context
    )
    logfire.info("SQLAlchemy instrumented")


def instrument_redis() -> None:
    """Instrument redis commands used for rate limits and pending sessions.

    Statements are not captured: pending-session payloads contain emails.
    """
    logfire.instrument_redis(capture_statement=False)
    logfire.info("Redis instrumented")


def instrument_httpx() -> None:
    """Instrument httpx so notification webhook calls are traced."""
    logfire.instrument_httpx()
    logfire.info("httpx instrumented")
