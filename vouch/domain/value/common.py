"""Value object bases."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, RootModel

T = TypeVar("T")


class ValueObject(BaseModel):
    """Frozen, equal by field values."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class RootValueObject(RootModel[T], Generic[T]):
    """Wraps one primitive, reachable as ``.root``.

    Dumps to the bare primitive, so an Email lands in a column or an event
    payload as a plain string.
    """

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return str(self.root)
