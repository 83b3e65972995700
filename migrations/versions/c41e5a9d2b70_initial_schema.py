"""initial_schema

Create the Vouch schema:
- Identities (password, two-factor and lockout state)
- External accounts (linked providers, unique per provider account)
- Link requests (single-use link tokens)
- Audit records (append-only audit trail)

Revision ID: c41e5a9d2b70
Revises:
Create Date: 2026-10-18 09:12:44.318204

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "c41e5a9d2b70"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # ========================================================================
    # IDENTITIES table
    # ========================================================================
    op.create_table(
        "identities",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column(
            "primary_auth_method", sa.String(20), nullable=False, server_default="password"
        ),
        sa.Column(
            "linked_providers",
            postgresql.ARRAY(sa.String(20)),
            nullable=False,
            server_default="{}",
        ),
        sa.Column(
            "two_factor_enabled", sa.Boolean(), nullable=False, server_default="false"
        ),
        sa.Column("two_factor_secret", sa.Text(), nullable=True),  # Ciphertext
        sa.Column("two_factor_enabled_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column(
            "backup_codes", postgresql.ARRAY(sa.Text()), nullable=False, server_default="{}"
        ),
        sa.Column("login_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("locked_until", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("last_login_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_identities_email"),
    )
    op.create_index(
        "idx_identities_two_factor_enabled", "identities", ["two_factor_enabled"]
    )

    # ========================================================================
    # EXTERNAL_ACCOUNTS table (linked providers)
    # ========================================================================
    op.create_table(
        "external_accounts",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("identity_id", sa.UUID(), nullable=False),
        sa.Column("provider", sa.String(20), nullable=False),  # 'google', 'github'
        sa.Column("provider_account_id", sa.String(255), nullable=False),
        sa.Column("access_token", sa.Text(), nullable=True),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.Integer(), nullable=True),
        sa.Column("token_type", sa.String(50), nullable=True),
        sa.Column("scope", sa.Text(), nullable=True),
        sa.Column("id_token", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.ForeignKeyConstraint(["identity_id"], ["identities.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "provider",
            "provider_account_id",
            name="uq_external_accounts_provider_account",
        ),
    )
    op.create_index(
        "idx_external_accounts_identity_id", "external_accounts", ["identity_id"]
    )

    # ========================================================================
    # LINK_REQUESTS table
    # ========================================================================
    op.create_table(
        "link_requests",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("identity_id", sa.UUID(), nullable=False),
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("request_type", sa.String(50), nullable=False),  # 'link_google'
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default="{}",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.ForeignKeyConstraint(["identity_id"], ["identities.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token", name="uq_link_requests_token"),
    )
    op.create_index("idx_link_requests_expires_at", "link_requests", ["expires_at"])

    # ========================================================================
    # AUDIT_RECORDS table (append-only, no FK so records outlive identities)
    # ========================================================================
    op.create_table(
        "audit_records",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("event_id", sa.UUID(), nullable=False),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("severity", sa.String(20), nullable=False),
        sa.Column("timestamp", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("identity_id", sa.UUID(), nullable=True),
        sa.Column("correlation_id", sa.String(100), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column(
            "details",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default="{}",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_audit_records_identity_timestamp",
        "audit_records",
        ["identity_id", "timestamp"],
    )
    op.create_index("idx_audit_records_action", "audit_records", ["action"])


def downgrade() -> None:
    """Downgrade schema."""
    # Drop tables (in reverse order of dependencies)
    op.drop_table("audit_records")
    op.drop_table("link_requests")
    op.drop_table("external_accounts")
    op.drop_table("identities")
