"""Authentication use cases."""

from .finalize_login import (
    FinalizeLoginRequest,
    FinalizeLoginResponse,
    FinalizeLoginUseCase,
)
from .login import LoginRequest, LoginResponse, LoginUseCase
from .verify_second_factor import (
    VerifySecondFactorRequest,
    VerifySecondFactorResponse,
    VerifySecondFactorUseCase,
)

__all__ = [
    "FinalizeLoginRequest",
    "FinalizeLoginResponse",
    "FinalizeLoginUseCase",
    "LoginRequest",
    "LoginResponse",
    "LoginUseCase",
    "VerifySecondFactorRequest",
    "VerifySecondFactorResponse",
    "VerifySecondFactorUseCase",
]
