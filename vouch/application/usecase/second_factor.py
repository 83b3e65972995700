"""Second-factor code checking shared by the two-factor use cases."""

from vouch.domain.model.identity import Identity
from vouch.domain.service import BackupCodeVault, SecretCipher, TOTPEngine
from vouch.domain.value import SecondFactorMethod
from vouch.domain.value.common import ValueObject


class SecondFactorCheck(ValueObject):
    valid: bool
    method: SecondFactorMethod
    # Backup codes to store after a consumed backup code; None otherwise
    remaining_backup_codes: list[str] | None = None


class SecondFactorChecker:
    """Checks a TOTP or backup code against an identity's stored secrets."""

    def __init__(
        self, totp_engine: TOTPEngine, backup_code_vault: BackupCodeVault, cipher: SecretCipher
    ) -> None:
        self.totp_engine = totp_engine
        self.backup_code_vault = backup_code_vault
        self.cipher = cipher

    def check(
        self, identity: Identity, code: str, method: SecondFactorMethod
    ) -> SecondFactorCheck:
        """Check ``code`` without saving anything.

        Raises:
            SecretUnavailableError: If the stored TOTP secret cannot be decrypted
        """
        if method == SecondFactorMethod.BACKUP_CODE:
            result = self.backup_code_vault.validate_and_consume(code, identity.backup_codes)
            return SecondFactorCheck(
                valid=result.valid,
                method=method,
                remaining_backup_codes=result.remaining_codes if result.valid else None,
            )

        if not identity.two_factor_secret:
            return SecondFactorCheck(valid=False, method=method)
        secret = self.cipher.decrypt(identity.two_factor_secret)
        return SecondFactorCheck(valid=self.totp_engine.validate(code, secret), method=method)
