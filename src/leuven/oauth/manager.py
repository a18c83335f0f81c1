import logging
from collections.abc import Iterable, Iterator

import httpx

from leuven.core.exceptions import (
    AccountLinkError,
    DatabaseError,
    OAuthError,
    UniqueViolationError,
    UnknownProviderError,
)
from leuven.core.results import AccountRecord, SignInResult, UserRecord
from leuven.oauth.models import OAuthProfile, OAuthTokens
from leuven.oauth.providers import BUILTIN_PROVIDERS, OAuthProvider
from leuven.password.policy import normalize_email
from leuven.protocols import AccountProtocol, DBConnection, StoreProtocol, UserProtocol

logger = logging.getLogger(__name__)

OAUTH_FAILED = "OAuth authentication failed"
EMAIL_MISSING = "Email not provided by OAuth provider"


class ProviderRegistry:
    """Providers keyed by id. Lookups of unknown ids raise instead of returning ``None``."""

    def __init__(self, providers: Iterable[OAuthProvider] = ()) -> None:
        self._providers: dict[str, OAuthProvider] = {}
        for provider in providers:
            self.register(provider)

    @classmethod
    def with_builtins(cls) -> "ProviderRegistry":
        return cls(provider_cls() for provider_cls in BUILTIN_PROVIDERS)

    def register(self, provider: OAuthProvider) -> None:
        if provider.provider_id in self._providers:
            logger.debug("replacing oauth provider %s", provider.provider_id)
        self._providers[provider.provider_id] = provider

    def get(self, provider_id: str) -> OAuthProvider:
        if (provider := self._providers.get(provider_id)) is None:
            msg = "Unknown OAuth provider"
            raise UnknownProviderError(msg)
        return provider

    def find(self, provider_id: str) -> OAuthProvider | None:
        return self._providers.get(provider_id)

    def configured(self) -> list[OAuthProvider]:
        return [provider for provider in self._providers.values() if provider.configured]

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._providers

    def __iter__(self) -> Iterator[OAuthProvider]:
        return iter(self._providers.values())

    def __len__(self) -> int:
        return len(self._providers)


class OAuthManager:
    def __init__(
        self,
        adapter: StoreProtocol,
        registry: ProviderRegistry | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.adapter = adapter
        self.registry = registry if registry is not None else ProviderRegistry.with_builtins()
        self.http_client = http_client

    def configure_provider(
        self,
        provider_id: str,
        client_id: str,
        client_secret: str,
        scope: str | None = None,
    ) -> None:
        self.registry.get(provider_id).configure(client_id, client_secret, scope)
        logger.debug("configured oauth provider %s", provider_id)

    def add_custom_provider(self, provider: OAuthProvider) -> None:
        self.registry.register(provider)

    def generate_authorization_url(self, provider_id: str, redirect_uri: str, state: str) -> str:
        """Build the provider redirect.

        ``state`` is passed through untouched; issuing and checking it belongs
        to the HTTP layer that owns the callback round trip.
        """
        return self.registry.get(provider_id).generate_authorization_url(redirect_uri, state)

    async def handle_callback(
        self,
        db: DBConnection,
        provider_id: str,
        code: str,
        redirect_uri: str,
        state: str | None = None,  # noqa: ARG002
    ) -> SignInResult:
        try:
            provider = self.registry.get(provider_id)
        except UnknownProviderError as exc:
            return SignInResult.failure(exc.message)

        if not provider.configured:
            return SignInResult.failure(f"OAuth provider {provider_id} is not configured")

        try:
            tokens = await provider.exchange_code_for_tokens(code, redirect_uri, client=self.http_client)
            profile = await provider.get_profile(tokens, client=self.http_client)
        except OAuthError as exc:
            logger.warning("oauth callback rejected for %s: %s", provider_id, exc.message)
            return SignInResult.failure(OAUTH_FAILED)

        if not profile.email:
            return SignInResult.failure(EMAIL_MISSING)

        try:
            user, account, created = await self.find_or_create_user(db, provider_id, profile, tokens)
        except AccountLinkError as exc:
            logger.warning("oauth callback rejected for %s: %s", provider_id, exc.message)
            return SignInResult.failure(exc.message)

        return SignInResult(
            success=True,
            user=UserRecord.from_model(user),
            account=AccountRecord.from_model(account),
            created=created,
        )

    async def find_or_create_user(
        self,
        db: DBConnection,
        provider_id: str,
        profile: OAuthProfile,
        tokens: OAuthTokens,
    ) -> tuple[UserProtocol, AccountProtocol, bool]:
        """Resolve a provider identity to a local user.

        Order matters: an existing account wins, then an existing user with
        the same e-mail gets the account linked, and only then is a new user
        created. New users are marked verified since the provider vouched for
        the address.

        Returns:
            The user, the account, and whether the user was created.

        Raises:
            AccountLinkError: If the user matched by e-mail already holds a
                different account with this provider.
        """
        token_fields = tokens.account_fields()

        if account := await self.adapter.get_account(db, provider_id, profile.id):
            account = await self.adapter.update_account_tokens(db, account.id, **token_fields) or account
            return await self._owner(db, account), account, False

        email = normalize_email(profile.email or "")
        created = False
        if user := await self.adapter.get_user_by_email(db, email):
            if await self.adapter.get_account_by_user(db, user.id, provider_id) is not None:
                raise AccountLinkError(_already_linked(provider_id))
            logger.info("linking %s account to existing user", provider_id, extra={"user_id": str(user.id)})
        else:
            try:
                user = await self.adapter.create_user(
                    db,
                    email=email,
                    name=profile.name,
                    image=profile.image,
                    email_verified=True,
                )
                created = True
                logger.info("user created from %s profile", provider_id, extra={"user_id": str(user.id)})
            except UniqueViolationError:
                logger.warning("concurrent oauth sign-up lost the race on e-mail uniqueness")
                if (user := await self.adapter.get_user_by_email(db, email)) is None:
                    raise

        try:
            account = await self.adapter.create_account(
                db,
                user_id=user.id,
                provider=provider_id,
                provider_account_id=profile.id,
                **token_fields,
            )
        except UniqueViolationError as exc:
            logger.warning("concurrent oauth callback lost the race on account uniqueness")
            if (account := await self.adapter.get_account(db, provider_id, profile.id)) is None:
                # the user gained another account with this provider meanwhile
                raise AccountLinkError(_already_linked(provider_id)) from exc
            return await self._owner(db, account), account, False

        return user, account, created

    async def _owner(self, db: DBConnection, account: AccountProtocol) -> UserProtocol:
        if (user := await self.adapter.get_user_by_id(db, account.user_id)) is None:
            msg = "OAuth account references a missing user"
            raise DatabaseError(msg)
        return user


def _already_linked(provider_id: str) -> str:
    return f"A {provider_id} account is already linked to this email"
