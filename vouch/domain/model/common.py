"""Entity base."""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Frozen entity such as Identity or LinkRequest.

    Mutations go through ``model_copy(update=...)``; the copy is what gets
    saved, so a half-applied change never reaches a store.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
