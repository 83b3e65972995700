"""Account linking use cases."""

from .complete import CompleteLinkRequest, CompleteLinkUseCase
from .initiate import InitiateLinkRequest, InitiateLinkUseCase
from .unlink import UnlinkAccountRequest, UnlinkAccountUseCase

__all__ = [
    "CompleteLinkRequest",
    "CompleteLinkUseCase",
    "InitiateLinkRequest",
    "InitiateLinkUseCase",
    "UnlinkAccountRequest",
    "UnlinkAccountUseCase",
]
