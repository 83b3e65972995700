"""Adapter DI providers."""

from dishka import Scope, provide

from vouch.adapter.crypto import BcryptPasswordHasher, FernetSecretCipher
from vouch.adapter.qr import SvgQRRenderer
from vouch.config import AuthSettings
from vouch.domain.service import PasswordHasher, QRRenderer, SecretCipher
from vouch.util.di.base import ProviderBase


class ProdAdapterProvider(ProviderBase):
    """Stateless adapters shared for the container's lifetime."""

    scope = Scope.APP

    @provide
    def get_secret_cipher(self, auth_settings: AuthSettings) -> SecretCipher:
        """Provide Fernet cipher keyed from the configured encryption key."""
        return FernetSecretCipher(auth_settings.encryption_key)

    @provide
    def get_password_hasher(self, auth_settings: AuthSettings) -> PasswordHasher:
        return BcryptPasswordHasher(rounds=auth_settings.bcrypt_rounds)

    @provide
    def get_qr_renderer(self) -> QRRenderer:
        return SvgQRRenderer()
