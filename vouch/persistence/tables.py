"""SQLAlchemy table definitions for Vouch.

Core tables only; rows are mapped to the pydantic domain models by hand in
``mappers``.
"""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# IDENTITIES TABLE
# ============================================================================
identities_table = Table(
    "identities",
    metadata,
    Column("id", UUID, primary_key=True, server_default="gen_random_uuid()"),
    Column("email", String(255), nullable=False, unique=True),  # Stored lower-cased
    Column("name", String(255), nullable=True),
    Column("image", Text, nullable=True),
    Column("password_hash", String(255), nullable=True),  # NULL for provider-only
    Column("role", String(20), nullable=False, server_default="user"),
    Column("primary_auth_method", String(20), nullable=False, server_default="password"),
    Column("linked_providers", ARRAY(String(20)), nullable=False, server_default="{}"),
    Column("two_factor_enabled", Boolean, nullable=False, server_default="false"),
    Column("two_factor_secret", Text, nullable=True),  # Ciphertext
    Column("two_factor_enabled_at", TIMESTAMP(timezone=True), nullable=True),
    Column("backup_codes", ARRAY(Text), nullable=False, server_default="{}"),  # Ciphertexts
    Column("login_attempts", Integer, nullable=False, server_default="0"),
    Column("locked_until", TIMESTAMP(timezone=True), nullable=True),
    Column("last_login_at", TIMESTAMP(timezone=True), nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index("idx_identities_two_factor_enabled", identities_table.c.two_factor_enabled)

# ============================================================================
# EXTERNAL ACCOUNTS TABLE (linked providers)
# ============================================================================
external_accounts_table = Table(
    "external_accounts",
    metadata,
    Column("id", UUID, primary_key=True, server_default="gen_random_uuid()"),
    Column(
        "identity_id",
        UUID,
        ForeignKey("identities.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("provider", String(20), nullable=False),  # 'google', 'github'
    Column("provider_account_id", String(255), nullable=False),
    Column("access_token", Text, nullable=True),
    Column("refresh_token", Text, nullable=True),
    Column("expires_at", Integer, nullable=True),
    Column("token_type", String(50), nullable=True),
    Column("scope", Text, nullable=True),
    Column("id_token", Text, nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint(
        "provider", "provider_account_id", name="uq_external_accounts_provider_account"
    ),
)

Index("idx_external_accounts_identity_id", external_accounts_table.c.identity_id)

# ============================================================================
# LINK REQUESTS TABLE
# ============================================================================
link_requests_table = Table(
    "link_requests",
    metadata,
    Column("id", UUID, primary_key=True, server_default="gen_random_uuid()"),
    Column(
        "identity_id",
        UUID,
        ForeignKey("identities.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("token", String(64), nullable=False, unique=True),  # 32 bytes hex
    Column("request_type", String(50), nullable=False),  # 'link_google', ...
    Column("expires_at", TIMESTAMP(timezone=True), nullable=False),
    Column("completed", Boolean, nullable=False, server_default="false"),
    Column("metadata", JSONB, nullable=False, server_default="{}"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

Index("idx_link_requests_expires_at", link_requests_table.c.expires_at)

# ============================================================================
# AUDIT RECORDS TABLE (append-only)
# ============================================================================
audit_records_table = Table(
    "audit_records",
    metadata,
    Column("id", UUID, primary_key=True),
    Column("event_id", UUID, nullable=False),
    Column("event_type", String(100), nullable=False),
    Column("action", String(100), nullable=False),
    Column("severity", String(20), nullable=False),
    Column("timestamp", TIMESTAMP(timezone=True), nullable=False),
    Column("identity_id", UUID, nullable=True),  # No FK: records outlive identities
    Column("correlation_id", String(100), nullable=True),
    Column("ip_address", String(64), nullable=True),
    Column("user_agent", Text, nullable=True),
    Column("details", JSONB, nullable=False, server_default="{}"),
)

Index(
    "idx_audit_records_identity_timestamp",
    audit_records_table.c.identity_id,
    audit_records_table.c.timestamp,
)
Index("idx_audit_records_action", audit_records_table.c.action)
