"""Mappers for converting between database rows and domain models.

Domain models are immutable pydantic models, so rows are mapped by hand
rather than through SQLAlchemy's ORM.
"""

from typing import Any, Dict
from uuid import UUID

from vouch.domain.model import AuditEntry, ExternalAccount, Identity, LinkRequest
from vouch.domain.value import (
    AuditEntryId,
    AuditSeverity,
    AuthMethod,
    AuthProvider,
    EventId,
    ExternalAccountId,
    IdentityId,
    LinkRequestId,
    Role,
)


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def row_to_identity(row: Dict[str, Any]) -> Identity:
    """Convert database row to Identity domain model.

    Args:
        row: Database row as dict

    Returns:
        Identity domain model
    """
    return Identity(
        id=IdentityId(_uuid(row["id"])),
        email=row["email"],
        name=row.get("name"),
        image=row.get("image"),
        password_hash=row.get("password_hash"),
        role=Role(row["role"]),
        primary_auth_method=AuthMethod(row["primary_auth_method"]),
        linked_providers=frozenset(
            AuthProvider(p) for p in row.get("linked_providers") or []
        ),
        two_factor_enabled=row["two_factor_enabled"],
        two_factor_secret=row.get("two_factor_secret"),
        two_factor_enabled_at=row.get("two_factor_enabled_at"),
        backup_codes=list(row.get("backup_codes") or []),
        login_attempts=row["login_attempts"],
        locked_until=row.get("locked_until"),
        last_login_at=row.get("last_login_at"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def identity_to_dict(identity: Identity) -> Dict[str, Any]:
    """Convert Identity domain model to database dict.

    Args:
        identity: Identity domain model

    Returns:
        Dict suitable for database insertion/update
    """
    data = identity.model_dump()
    data["role"] = identity.role.value
    data["primary_auth_method"] = identity.primary_auth_method.value
    data["linked_providers"] = sorted(p.value for p in identity.linked_providers)
    return data


def row_to_external_account(row: Dict[str, Any]) -> ExternalAccount:
    return ExternalAccount(
        id=ExternalAccountId(_uuid(row["id"])),
        identity_id=IdentityId(_uuid(row["identity_id"])),
        provider=AuthProvider(row["provider"]),
        provider_account_id=row["provider_account_id"],
        access_token=row.get("access_token"),
        refresh_token=row.get("refresh_token"),
        expires_at=row.get("expires_at"),
        token_type=row.get("token_type"),
        scope=row.get("scope"),
        id_token=row.get("id_token"),
        created_at=row["created_at"],
    )


def external_account_to_dict(account: ExternalAccount) -> Dict[str, Any]:
    data = account.model_dump()
    data["provider"] = account.provider.value
    return data


def row_to_link_request(row: Dict[str, Any]) -> LinkRequest:
    return LinkRequest(
        id=LinkRequestId(_uuid(row["id"])),
        identity_id=IdentityId(_uuid(row["identity_id"])),
        token=row["token"],
        request_type=row["request_type"],
        expires_at=row["expires_at"],
        completed=row["completed"],
        metadata=dict(row.get("metadata") or {}),
        created_at=row["created_at"],
    )


def link_request_to_dict(request: LinkRequest) -> Dict[str, Any]:
    return request.model_dump()


def row_to_audit_entry(row: Dict[str, Any]) -> AuditEntry:
    identity_id = row.get("identity_id")
    return AuditEntry(
        id=AuditEntryId(_uuid(row["id"])),
        event_id=EventId(_uuid(row["event_id"])),
        event_type=row["event_type"],
        action=row["action"],
        severity=AuditSeverity(row["severity"]),
        timestamp=row["timestamp"],
        identity_id=IdentityId(_uuid(identity_id)) if identity_id else None,
        correlation_id=row.get("correlation_id"),
        ip_address=row.get("ip_address"),
        user_agent=row.get("user_agent"),
        details=dict(row.get("details") or {}),
    )


def audit_entry_to_dict(entry: AuditEntry) -> Dict[str, Any]:
    data = entry.model_dump()
    data["severity"] = entry.severity.value
    # JSONB column: keep values JSON-safe
    data["details"] = entry.model_dump(mode="json")["details"]
    return data
