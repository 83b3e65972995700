"""Base use case."""

import time
from abc import ABC, abstractmethod
from typing import Any

import logfire

from vouch.domain.event import EventBus
from vouch.domain.model.event import (
    CommandExecuted,
    CommandFailed,
    ErrorOccurred,
    Event,
)
from vouch.domain.model.outcome import Outcome
from vouch.domain.repository import UnitOfWork
from vouch.domain.value import AuditSeverity, FailureReason, RequestContext
from vouch.util.clock import Clock


class BaseUseCase(ABC):
    """Base use case for orchestrating domain services.

    ``execute`` times the run and publishes ``system.command_executed``.
    Infrastructure faults raised by the run roll back the unit of work and
    become an ``internal_error`` outcome, announced as a critical
    ``system.error_occurred``.
    """

    command_name: str = "command"

    def __init__(
        self,
        event_bus: EventBus,
        clock: Clock,
        unit_of_work: UnitOfWork | None = None,
    ) -> None:
        self.event_bus = event_bus
        self.clock = clock
        self.unit_of_work = unit_of_work

    async def execute(
        self, request: Any, context: RequestContext | None = None
    ) -> Outcome[Any]:
        started = time.perf_counter()
        with logfire.span(f"usecase.{self.command_name}"):
            try:
                outcome = await self.run(request, context)
            except Exception as e:
                duration_ms = (time.perf_counter() - started) * 1000
                logfire.error(
                    "Use case failed",
                    command=self.command_name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                if self.unit_of_work is not None:
                    await self.unit_of_work.rollback()
                await self._publish(
                    ErrorOccurred(
                        error=str(e),
                        error_type=type(e).__name__,
                        severity=AuditSeverity.CRITICAL,
                        context={"command": self.command_name},
                    ),
                    context,
                )
                await self._publish(
                    CommandFailed(
                        command=self.command_name,
                        duration_ms=duration_ms,
                        error=str(e),
                        error_type=type(e).__name__,
                    ),
                    context,
                )
                return Outcome.failure(FailureReason.INTERNAL_ERROR)

        await self._publish(
            CommandExecuted(
                command=self.command_name,
                duration_ms=(time.perf_counter() - started) * 1000,
                success=outcome.ok,
                reason=outcome.reason.value if outcome.reason else None,
            ),
            context,
        )
        return outcome

    @abstractmethod
    async def run(self, request: Any, context: RequestContext | None) -> Outcome[Any]:
        pass

    async def _publish(self, payload, context, identity_id=None) -> None:
        await self.event_bus.publish(
            Event.create(
                payload, user_id=identity_id, context=context, timestamp=self.clock.now()
            )
        )
