"""Time-based one-time password engine."""

import re
from abc import ABC, abstractmethod
from datetime import datetime
from urllib.parse import quote

import logfire
import pyotp

from vouch.config import TOTPSettings
from vouch.domain.value.common import ValueObject
from vouch.util.clock import Clock

from .base import Service

_NON_BASE32 = re.compile(r"[^A-Z2-7]")
_NON_DIGIT = re.compile(r"\D")


class QRRenderer(ABC):
    """Renders an otpauth:// URI as a scannable image."""

    @abstractmethod
    def render_to_image(self, uri: str) -> bytes:
        """Render ``uri`` as image bytes."""
        pass

    @property
    @abstractmethod
    def media_type(self) -> str:
        """Media type of the rendered bytes."""
        pass


class TOTPDiagnosis(ValueObject):
    """Why a code did or did not validate.

    Never contains codes, only where a submitted code falls in time.
    """

    secret_valid: bool
    code_format_valid: bool
    valid: bool
    matched_offset: int | None = None  # Steps from the current step, if found
    diagnostic_window: int
    tolerance: int
    seconds_into_step: int
    seconds_remaining: int


class TOTPEngine(Service):
    """Generates secrets and checks 6-digit codes with drift tolerance.

    A code is accepted when it matches the current 30-second step or any
    step within ``tolerance`` steps either side.
    """

    DIAGNOSTIC_WINDOW = 10

    def __init__(self, settings: TOTPSettings, clock: Clock) -> None:
        """Initialize TOTP engine.

        Args:
            settings: TOTP settings (digits, step, tolerance, widening)
            clock: Time source
        """
        self.settings = settings
        self.clock = clock

    @staticmethod
    def normalize_secret(secret: str) -> str:
        """Uppercase and drop anything outside the Base32 alphabet."""
        return _NON_BASE32.sub("", secret.upper())

    def generate_secret(self) -> str:
        """Generate a new Base32 secret (160 bits)."""
        return self.normalize_secret(pyotp.random_base32(length=32))

    def is_valid_secret(self, secret: str) -> bool:
        normalized = self.normalize_secret(secret)
        if len(normalized) < 16:
            return False
        try:
            self._totp(normalized).byte_secret()
        except ValueError:
            return False
        return True

    def provisioning_uri(
        self, secret: str, account_label: str, issuer: str | None = None
    ) -> str:
        """Build the otpauth:// URI authenticator apps scan.

        Format: ``otpauth://totp/{label}?secret={base32}&issuer={issuer}``

        Args:
            secret: Base32 secret
            account_label: Label shown in the app, usually the email
            issuer: Issuer name; defaults to the configured issuer

        Returns:
            Provisioning URI
        """
        issuer = issuer or self.settings.issuer
        return (
            f"otpauth://totp/{quote(account_label, safe='@')}"
            f"?secret={self.normalize_secret(secret)}"
            f"&issuer={quote(issuer, safe='')}"
        )

    def code_at(self, secret: str, at: datetime | None = None) -> str:
        """Code for the step containing ``at`` (defaults to now)."""
        return self._totp(self.normalize_secret(secret)).at(at or self.clock.now())

    def validate(self, code: str, secret: str) -> bool:
        """Check a submitted code against a secret.

        Args:
            code: Code as typed by the user (spaces and dashes allowed)
            secret: Base32 secret

        Returns:
            True if the code matches a step within tolerance
        """
        normalized = _NON_DIGIT.sub("", code)
        if len(normalized) != self.settings.digits:
            return False
        if not self.is_valid_secret(secret):
            logfire.warn("TOTP validation attempted with an unusable secret")
            return False

        try:
            totp = self._totp(self.normalize_secret(secret))
            now = self.clock.now()

            if totp.verify(normalized, for_time=now, valid_window=self.settings.tolerance):
                return True

            if self.settings.widen_on_failure and totp.verify(
                normalized, for_time=now, valid_window=self.settings.widened_tolerance
            ):
                logfire.warn(
                    "TOTP accepted outside default tolerance",
                    tolerance=self.settings.tolerance,
                    widened_tolerance=self.settings.widened_tolerance,
                )
                return True
        except ValueError as e:
            logfire.error("TOTP validation failed on unreadable secret", error=str(e))
            return False

        return False

    def time_remaining(self) -> int:
        """Seconds until the current step ends. For UX hints only."""
        step = self.settings.step_seconds
        return step - int(self.clock.now().timestamp()) % step

    def diagnose(self, secret: str, code: str) -> TOTPDiagnosis:
        """Explain where a code falls relative to the current step.

        Searches ``DIAGNOSTIC_WINDOW`` steps either side, which is wider than
        what ``validate`` accepts, so drift can be measured without being
        tolerated.

        Args:
            secret: Base32 secret
            code: Submitted code

        Returns:
            Drift diagnosis
        """
        with logfire.span("totp_engine.diagnose"):
            now = self.clock.now()
            step = self.settings.step_seconds
            seconds_into_step = int(now.timestamp()) % step
            normalized = _NON_DIGIT.sub("", code)
            secret_valid = self.is_valid_secret(secret)
            format_valid = len(normalized) == self.settings.digits

            matched_offset = None
            if secret_valid and format_valid:
                totp = self._totp(self.normalize_secret(secret))
                for offset in sorted(
                    range(-self.DIAGNOSTIC_WINDOW, self.DIAGNOSTIC_WINDOW + 1), key=abs
                ):
                    if totp.at(now, offset) == normalized:
                        matched_offset = offset
                        break

            diagnosis = TOTPDiagnosis(
                secret_valid=secret_valid,
                code_format_valid=format_valid,
                valid=matched_offset is not None
                and abs(matched_offset) <= self.settings.tolerance,
                matched_offset=matched_offset,
                diagnostic_window=self.DIAGNOSTIC_WINDOW,
                tolerance=self.settings.tolerance,
                seconds_into_step=seconds_into_step,
                seconds_remaining=step - seconds_into_step,
            )
            logfire.info(
                "TOTP diagnosis",
                valid=diagnosis.valid,
                matched_offset=matched_offset,
                secret_valid=secret_valid,
            )
            return diagnosis

    def _totp(self, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(
            secret, digits=self.settings.digits, interval=self.settings.step_seconds
        )
