"""Test configuration.

Settings are read from the environment whenever a container is built, so
test defaults are set here, before any test module is imported.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("AUTH__BCRYPT_ROUNDS", "4")
os.environ.setdefault("AUTH__JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("AUTH__ENCRYPTION_KEY", "test-encryption-key")
os.environ.setdefault("EVENTS__ASYNC_DISPATCH", "false")
os.environ.setdefault("EVENTS__RETRY_DELAY_SECONDS", "0")
