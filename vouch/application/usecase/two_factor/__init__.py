"""Two-factor enrollment use cases."""

from .disable import DisableTwoFactorRequest, DisableTwoFactorUseCase
from .enable import EnableTwoFactorRequest, EnableTwoFactorResponse, EnableTwoFactorUseCase
from .regenerate_backup_codes import (
    RegenerateBackupCodesRequest,
    RegenerateBackupCodesResponse,
    RegenerateBackupCodesUseCase,
)
from .setup import SetupTwoFactorRequest, SetupTwoFactorResponse, SetupTwoFactorUseCase

__all__ = [
    "DisableTwoFactorRequest",
    "DisableTwoFactorUseCase",
    "EnableTwoFactorRequest",
    "EnableTwoFactorResponse",
    "EnableTwoFactorUseCase",
    "RegenerateBackupCodesRequest",
    "RegenerateBackupCodesResponse",
    "RegenerateBackupCodesUseCase",
    "SetupTwoFactorRequest",
    "SetupTwoFactorResponse",
    "SetupTwoFactorUseCase",
]
