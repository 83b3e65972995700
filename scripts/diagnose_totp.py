#!/usr/bin/env python3
"""Diagnose why a TOTP code is rejected.

Reports how many 30-second steps away from now the code matches, so clock
drift on the user's device can be told apart from a wrong secret.

    python scripts/diagnose_totp.py --email user@example.com --code 123456
    python scripts/diagnose_totp.py --secret JBSWY3DPEHPK3PXP --code 123456
"""

import argparse
import asyncio
import sys

import logfire

from vouch.config import Settings
from vouch.domain.repository import IdentityRepository
from vouch.domain.service import SecretCipher, TOTPEngine
from vouch.util.di.container import create_container
from vouch.util.logging import setup_logging
from vouch.util.observability import configure_logfire


async def diagnose(
    settings: Settings, secret: str | None, email: str | None, code: str
) -> int:
    container = create_container(settings)
    try:
        async with container() as request_container:
            engine = await request_container.get(TOTPEngine)

            if secret is None:
                repository = await request_container.get(IdentityRepository)
                identity = await repository.find_by_email(email)
                if identity is None or not identity.two_factor_secret:
                    print(f"No two-factor secret stored for {email}")
                    return 1
                cipher = await request_container.get(SecretCipher)
                secret = cipher.decrypt(identity.two_factor_secret)

            diagnosis = engine.diagnose(secret, code)
    finally:
        await container.close()

    print(f"secret valid:       {diagnosis.secret_valid}")
    print(f"code format valid:  {diagnosis.code_format_valid}")
    print(f"accepted:           {diagnosis.valid} (tolerance ±{diagnosis.tolerance} steps)")
    if diagnosis.matched_offset is None:
        print(f"no match within ±{diagnosis.diagnostic_window} steps")
    else:
        print(f"matched offset:     {diagnosis.matched_offset:+d} steps")
    print(
        f"current step:       {diagnosis.seconds_into_step}s in, "
        f"{diagnosis.seconds_remaining}s left"
    )
    return 0 if diagnosis.valid else 2


def main() -> int:
    parser = argparse.ArgumentParser(description="Diagnose TOTP code drift")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--secret", help="Base32 secret")
    source.add_argument("--email", help="Load the stored secret for this identity")
    parser.add_argument("--code", required=True, help="Code from the authenticator app")
    args = parser.parse_args()

    settings = Settings()
    configure_logfire(settings)
    setup_logging(settings)

    try:
        return asyncio.run(diagnose(settings, args.secret, args.email, args.code))
    except Exception as e:
        logfire.error(
            "TOTP diagnosis failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise


if __name__ == "__main__":
    sys.exit(main())
