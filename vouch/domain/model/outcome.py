"""Result of a verification or protocol step."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from vouch.domain.value import FAILURE_MESSAGES, FailureReason

T = TypeVar("T")


class Outcome(BaseModel, Generic[T]):
    """Success with a value, or failure with a reason.

    ``message`` is safe to show to the user; detailed reasons belong in the
    audit trail.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ok: bool
    reason: FailureReason | None = None
    message: str | None = None
    value: T | None = None

    @classmethod
    def success(cls, value: T | None = None) -> "Outcome[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: FailureReason, message: str | None = None) -> "Outcome[T]":
        return cls(ok=False, reason=reason, message=message or FAILURE_MESSAGES[reason])
