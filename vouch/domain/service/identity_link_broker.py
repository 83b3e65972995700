"""Linking and unlinking external identity providers."""

import secrets
from datetime import datetime, timedelta
from uuid import uuid4

import logfire

from vouch.config import AuthSettings
from vouch.domain.event import EventBus
from vouch.domain.model.event import (
    AccountLinked,
    AccountUnlinked,
    Event,
    LinkFailed,
    LinkInitiated,
)
from vouch.domain.model.identity import ExternalAccount, Identity
from vouch.domain.model.link_request import LinkRequest, request_type_for
from vouch.domain.model.outcome import Outcome
from vouch.domain.repository import IdentityRepository, LinkRequestRepository
from vouch.domain.value import (
    AuthMethod,
    AuthProvider,
    ExternalAccountId,
    FailureReason,
    IdentityId,
    LinkRequestId,
    RequestContext,
)
from vouch.domain.value.common import ValueObject
from vouch.util.clock import Clock

from .base import Service
from .password import PasswordHasher

LINK_TOKEN_BYTES = 32

INITIATE = "initiate"
COMPLETE = "complete"
UNLINK = "unlink"


class ProviderProfile(ValueObject):
    """Profile fields reported by the provider."""

    name: str | None = None
    image: str | None = None


class ProviderAccountData(ValueObject):
    """What the provider's OAuth callback returned."""

    provider: str
    provider_account_id: str
    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: int | None = None
    token_type: str | None = None
    scope: str | None = None
    id_token: str | None = None
    profile: ProviderProfile | None = None


class LinkInitiation(ValueObject):
    token: str
    provider: AuthProvider
    expires_at: datetime


class LinkCompletion(ValueObject):
    identity_id: IdentityId
    provider: AuthProvider
    external_account_id: ExternalAccountId


class UnlinkResult(ValueObject):
    identity_id: IdentityId
    provider: AuthProvider
    primary_auth_method: AuthMethod


class IdentityLinkBroker(Service):
    """Single-use token protocol for attaching external accounts.

    Initiation needs the identity's password and issues a token for one
    provider. Completion consumes the token once, before it expires, for
    that provider only.
    """

    def __init__(
        self,
        identity_repository: IdentityRepository,
        link_request_repository: LinkRequestRepository,
        password_hasher: PasswordHasher,
        event_bus: EventBus,
        clock: Clock,
        auth_settings: AuthSettings,
    ) -> None:
        """Initialize identity link broker.

        Args:
            identity_repository: Identity repository
            link_request_repository: Link token repository
            password_hasher: Password hasher for reverification
            event_bus: Event bus for link events
            clock: Time source
            auth_settings: Link TTL and linkable providers
        """
        self.identity_repository = identity_repository
        self.link_request_repository = link_request_repository
        self.password_hasher = password_hasher
        self.event_bus = event_bus
        self.clock = clock
        self.auth_settings = auth_settings

    def _supported(self, provider: str) -> AuthProvider | None:
        if provider not in self.auth_settings.linkable_providers:
            return None
        try:
            return AuthProvider(provider)
        except ValueError:
            return None

    async def initiate(
        self,
        identity_id: IdentityId,
        password: str,
        provider: str,
        context: RequestContext | None = None,
    ) -> Outcome[LinkInitiation]:
        """Issue a link token after reverifying the password.

        Args:
            identity_id: Identity requesting the link
            password: Current password
            provider: Provider to link
            context: Request origin

        Returns:
            Outcome carrying the token and its expiry
        """
        with logfire.span(
            "identity_link_broker.initiate",
            identity_id=str(identity_id),
            provider=provider,
        ):
            if not password or not provider:
                return await self._reject(
                    FailureReason.VALIDATION_ERROR, identity_id, provider, context, INITIATE
                )

            supported = self._supported(provider)
            if supported is None:
                return await self._reject(
                    FailureReason.UNSUPPORTED_PROVIDER, identity_id, provider, context, INITIATE
                )

            loaded = await self.identity_repository.find_with_accounts(identity_id)
            if loaded is None:
                return await self._reject(
                    FailureReason.IDENTITY_NOT_FOUND, identity_id, provider, context, INITIATE
                )
            identity = loaded.identity

            if identity.password_hash is None:
                return await self._reject(
                    FailureReason.PASSWORD_NOT_SET, identity_id, provider, context, INITIATE
                )

            if not self.password_hasher.verify(password, identity.password_hash):
                return await self._reject(
                    FailureReason.INVALID_PASSWORD, identity_id, provider, context, INITIATE
                )

            if identity.has_provider(supported) or loaded.account_for(supported):
                return await self._reject(
                    FailureReason.ALREADY_LINKED, identity_id, provider, context, INITIATE
                )

            now = self.clock.now()
            expires_at = now + timedelta(minutes=self.auth_settings.link_token_ttl_minutes)
            request = LinkRequest(
                id=LinkRequestId(uuid4()),
                identity_id=identity_id,
                token=secrets.token_hex(LINK_TOKEN_BYTES),
                request_type=request_type_for(supported.value),
                expires_at=expires_at,
                created_at=now,
                metadata={
                    "provider": supported.value,
                    "initiated_at": now.isoformat(),
                    "ip_address": context.ip_address if context else None,
                },
            )
            await self.link_request_repository.save(request)

            await self._publish(
                LinkInitiated(
                    identity_id=identity_id,
                    provider=supported.value,
                    expires_at=expires_at,
                ),
                identity_id,
                context,
            )
            logfire.info("Link initiated", identity_id=str(identity_id), provider=supported.value)
            return Outcome.success(
                LinkInitiation(token=request.token, provider=supported, expires_at=expires_at)
            )

    async def complete(
        self,
        token: str,
        account_data: ProviderAccountData,
        context: RequestContext | None = None,
    ) -> Outcome[LinkCompletion]:
        """Consume a link token and attach the provider account.

        Args:
            token: Link token from ``initiate``
            account_data: Account returned by the provider
            context: Request origin

        Returns:
            Outcome carrying the created account id
        """
        with logfire.span(
            "identity_link_broker.complete", provider=account_data.provider
        ):
            if not token or not account_data.provider_account_id:
                return Outcome.failure(FailureReason.VALIDATION_ERROR)

            request = await self.link_request_repository.find_by_token(token)
            if request is None:
                return await self._reject(
                    FailureReason.TOKEN_NOT_FOUND, None, account_data.provider, context
                )

            now = self.clock.now()
            if request.is_expired(now):
                return await self._reject(
                    FailureReason.TOKEN_EXPIRED,
                    request.identity_id,
                    account_data.provider,
                    context,
                )

            if request.completed:
                return await self._reject(
                    FailureReason.TOKEN_ALREADY_COMPLETED,
                    request.identity_id,
                    account_data.provider,
                    context,
                )

            if not request.is_for(account_data.provider):
                return await self._reject(
                    FailureReason.PROVIDER_MISMATCH,
                    request.identity_id,
                    account_data.provider,
                    context,
                )
            provider = AuthProvider(request.provider)

            existing = await self.identity_repository.find_account_by_provider(
                provider, account_data.provider_account_id
            )
            if existing is not None and existing.identity_id != request.identity_id:
                return await self._reject(
                    FailureReason.ACCOUNT_ALREADY_LINKED_ELSEWHERE,
                    request.identity_id,
                    provider.value,
                    context,
                )

            loaded = await self.identity_repository.find_with_accounts(request.identity_id)
            if loaded is None:
                return await self._reject(
                    FailureReason.IDENTITY_NOT_FOUND,
                    request.identity_id,
                    provider.value,
                    context,
                )
            if loaded.identity.has_provider(provider) or loaded.account_for(provider):
                return await self._reject(
                    FailureReason.ALREADY_LINKED,
                    request.identity_id,
                    provider.value,
                    context,
                )

            account = ExternalAccount(
                id=ExternalAccountId(uuid4()),
                identity_id=request.identity_id,
                provider=provider,
                provider_account_id=account_data.provider_account_id,
                access_token=account_data.access_token,
                refresh_token=account_data.refresh_token,
                expires_at=account_data.expires_at,
                token_type=account_data.token_type,
                scope=account_data.scope,
                id_token=account_data.id_token,
                created_at=now,
            )
            identity = self._with_provider(loaded.identity, provider, account_data, now)
            completed = request.model_copy(
                update={
                    "completed": True,
                    "metadata": {
                        **request.metadata,
                        "completed_at": now.isoformat(),
                        "linked_account_id": str(account.id),
                    },
                }
            )

            try:
                await self.identity_repository.link_account(identity, account)
                await self.link_request_repository.save(completed)
            except Exception as e:
                logfire.error(
                    "Link completion failed",
                    identity_id=str(request.identity_id),
                    provider=provider.value,
                    error=str(e),
                )
                await self._link_failed(
                    FailureReason.INTERNAL_ERROR,
                    request.identity_id,
                    provider.value,
                    context,
                )
                raise

            await self._publish(
                AccountLinked(
                    identity_id=request.identity_id,
                    provider=provider.value,
                    provider_account_id=account.provider_account_id,
                    external_account_id=str(account.id),
                ),
                request.identity_id,
                context,
            )
            logfire.info(
                "Account linked",
                identity_id=str(request.identity_id),
                provider=provider.value,
            )
            return Outcome.success(
                LinkCompletion(
                    identity_id=request.identity_id,
                    provider=provider,
                    external_account_id=account.id,
                )
            )

    async def unlink(
        self,
        identity_id: IdentityId,
        password: str | None,
        provider: str,
        context: RequestContext | None = None,
    ) -> Outcome[UnlinkResult]:
        """Detach a provider from an identity.

        Refuses to remove the identity's last way to sign in.

        Args:
            identity_id: Identity to change
            password: Current password
            provider: Provider to detach
            context: Request origin

        Returns:
            Outcome carrying the resulting primary auth method
        """
        with logfire.span(
            "identity_link_broker.unlink", identity_id=str(identity_id), provider=provider
        ):
            try:
                target = AuthProvider(provider)
            except ValueError:
                return await self._reject(
                    FailureReason.UNSUPPORTED_PROVIDER, identity_id, provider, context, UNLINK
                )

            loaded = await self.identity_repository.find_with_accounts(identity_id)
            if loaded is None:
                return await self._reject(
                    FailureReason.IDENTITY_NOT_FOUND, identity_id, provider, context, UNLINK
                )
            identity = loaded.identity

            account = loaded.account_for(target)
            if account is None and not identity.has_provider(target):
                return await self._reject(
                    FailureReason.PROVIDER_NOT_LINKED, identity_id, provider, context, UNLINK
                )

            remaining = loaded.other_providers(target)
            if not identity.has_password and not remaining:
                return await self._reject(
                    FailureReason.CANNOT_REMOVE_LAST_AUTH_METHOD,
                    identity_id,
                    provider,
                    context,
                    UNLINK,
                )

            if identity.password_hash is None:
                return await self._reject(
                    FailureReason.PASSWORD_NOT_SET, identity_id, provider, context, UNLINK
                )
            if not password or not self.password_hasher.verify(
                password, identity.password_hash
            ):
                return await self._reject(
                    FailureReason.INVALID_PASSWORD, identity_id, provider, context, UNLINK
                )

            now = self.clock.now()
            primary = identity.primary_auth_method
            if primary.value == target.value:
                if identity.has_password:
                    primary = AuthMethod.PASSWORD
                else:
                    primary = AuthMethod(remaining[0].value)

            updated = identity.model_copy(
                update={
                    "linked_providers": identity.linked_providers - {target},
                    "primary_auth_method": primary,
                    "updated_at": now,
                }
            )
            if account is not None:
                await self.identity_repository.unlink_account(updated, account.id)
            else:
                await self.identity_repository.save(updated)

            await self._publish(
                AccountUnlinked(
                    identity_id=identity_id,
                    provider=target.value,
                    primary_auth_method=primary.value,
                ),
                identity_id,
                context,
            )
            logfire.info(
                "Account unlinked",
                identity_id=str(identity_id),
                provider=target.value,
                primary_auth_method=primary.value,
            )
            return Outcome.success(
                UnlinkResult(
                    identity_id=identity_id, provider=target, primary_auth_method=primary
                )
            )

    @staticmethod
    def _with_provider(
        identity: Identity,
        provider: AuthProvider,
        account_data: ProviderAccountData,
        now: datetime,
    ) -> Identity:
        """Set the provider flag and fill profile fields that are still empty."""
        update = {
            "linked_providers": identity.linked_providers | {provider},
            "updated_at": now,
        }
        profile = account_data.profile
        if profile is not None:
            if not identity.name and profile.name:
                update["name"] = profile.name
            if not identity.image and profile.image:
                update["image"] = profile.image
        return identity.model_copy(update=update)

    async def _reject(
        self,
        reason: FailureReason,
        identity_id: IdentityId | None,
        provider: str | None,
        context: RequestContext | None,
        operation: str = COMPLETE,
    ) -> Outcome:
        logfire.warn(
            "Link request rejected",
            operation=operation,
            reason=reason.value,
            provider=provider,
        )
        await self._link_failed(reason, identity_id, provider, context, operation)
        return Outcome.failure(reason)

    async def _link_failed(
        self,
        reason: FailureReason,
        identity_id: IdentityId | None,
        provider: str | None,
        context: RequestContext | None,
        operation: str = COMPLETE,
    ) -> None:
        await self._publish(
            LinkFailed(
                reason=reason.value,
                identity_id=identity_id,
                provider=provider,
                operation=operation,
            ),
            identity_id,
            context,
        )

    async def _publish(self, payload, identity_id, context) -> None:
        await self.event_bus.publish(
            Event.create(
                payload, user_id=identity_id, context=context, timestamp=self.clock.now()
            )
        )
