from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from leuven.core.exceptions import AuthError, ConfigurationError, ValidationError
from leuven.core.hooks import HookContext, HookRunner, Hooks
from leuven.core.results import HealthStatus, SignInResult, SignUpResult
from leuven.core.settings import MIN_SECRET_LENGTH, LeuvenSettings
from leuven.oauth.manager import OAuthManager
from leuven.password.auth import PasswordAuth
from leuven.password.hashing import BcryptHasher, PasswordHasher
from leuven.protocols import (
    AccountProtocol,
    DBConnection,
    SessionProtocol,
    StoreProtocol,
    UserProtocol,
    VerificationTokenProtocol,
)
from leuven.session.manager import SessionManager
from leuven.session.strategies import DatabaseSessionStrategy, SessionStrategy, StatelessSessionStrategy

if TYPE_CHECKING:
    from collections.abc import Callable
    from contextlib import AbstractAsyncContextManager
    from uuid import UUID

    import httpx

    from leuven.core.results import SessionData, SessionInfo, SessionRecord

logger = logging.getLogger(__name__)

PASSWORD_AUTH_DISABLED = "Password authentication is not enabled"
DEFAULT_CLEANUP_INTERVAL = 3600.0


def validate_settings(settings: LeuvenSettings) -> None:
    """Reject settings the engine cannot run with.

    Raises:
        ConfigurationError: If the session secret is too short, the session
            ages are inconsistent, or a configured provider lacks credentials.
    """
    if len(settings.session.secret.get_secret_value()) < MIN_SECRET_LENGTH:
        msg = f"Session secret must be at least {MIN_SECRET_LENGTH} characters long"
        raise ConfigurationError(msg)

    if settings.session.max_age <= 0:
        msg = "Session max_age must be positive"
        raise ConfigurationError(msg)

    if settings.session.update_age >= settings.session.max_age:
        msg = "Session update_age must be smaller than max_age"
        raise ConfigurationError(msg)

    for provider_id, provider in settings.oauth_providers().items():
        if not provider.client_id.strip() or not provider.client_secret.get_secret_value().strip():
            msg = f"OAuth provider {provider_id} requires client_id and client_secret"
            raise ConfigurationError(msg)


class AuthEngine[
    UserT: UserProtocol,
    AccountT: AccountProtocol,
    SessionT: SessionProtocol,
    TokenT: VerificationTokenProtocol,
]:
    """Single entry point for password, OAuth and session flows.

    Every operation takes the database connection first; the engine holds no
    connection of its own. Hooks run after the primary operation succeeded
    and cannot change its outcome.

    Example:
        >>> settings = LeuvenSettings(session=SessionSettings(secret="x" * 32))
        >>> adapter = AlchemyAdapter(
        ...     user=User,
        ...     account=Account,
        ...     session=Session,
        ...     verification_token=VerificationToken,
        ... )
        >>> engine = AuthEngine(settings=settings, adapter=adapter)
        >>> async with settings.database.session_maker() as db:
        ...     result = await engine.sign_in(db, "a@example.com", "Str0ng!Pass")
    """

    def __init__(
        self,
        settings: LeuvenSettings,
        adapter: StoreProtocol[UserT, AccountT, SessionT, TokenT],
        hooks: Hooks | None = None,
        hasher: PasswordHasher | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Validate settings and wire the components.

        Args:
            settings: Engine configuration
            adapter: Store used for users, accounts, sessions and verification tokens
            hooks: Lifecycle observers
            hasher: Password hasher, bcrypt with the configured rounds by default
            http_client: Shared client for provider calls; a client per call otherwise

        Raises:
            ConfigurationError: If the settings are unusable.
        """
        validate_settings(settings)

        self.settings = settings
        self.adapter = adapter
        self.hook_runner = HookRunner(hooks=hooks or Hooks())

        self.password_auth = PasswordAuth(
            adapter=adapter,
            hasher=hasher or BcryptHasher(rounds=settings.email_password.bcrypt_rounds),
            settings=settings.email_password,
        )

        self.oauth_manager = OAuthManager(adapter, http_client=http_client)
        for provider_id, provider in settings.oauth_providers().items():
            self.oauth_manager.configure_provider(
                provider_id,
                provider.client_id,
                provider.client_secret.get_secret_value(),
                provider.scope,
            )

        self.session_manager = SessionManager(
            strategy=self._build_strategy(),
            cookie_settings=settings.cookie,
            max_age=settings.session.max_age,
            secure=settings.cookie_secure,
        )

    def _build_strategy(self) -> SessionStrategy:
        session = self.settings.session
        if session.strategy == "jwt":
            return StatelessSessionStrategy(secret=session.secret.get_secret_value(), max_age=session.max_age)
        return DatabaseSessionStrategy(self.adapter, max_age=session.max_age, update_age=session.update_age)

    def _require_password_auth(self) -> None:
        if not self.settings.email_password.enabled:
            raise AuthError(PASSWORD_AUTH_DISABLED, code="PASSWORD_AUTH_DISABLED")

    async def _start_session(
        self,
        db: DBConnection,
        result: SignInResult,
        ip_address: str | None,
        user_agent: str | None,
    ) -> SignInResult:
        if not result.success or result.user is None:
            return result

        session = await self.session_manager.create_session(
            db,
            result.user,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        result = result.with_session(session, self.session_manager.create_session_cookie(session.session_token))
        logger.info("user signed in", extra={"user_id": str(result.user.id)})
        await self.hook_runner.emit(
            "on_signin",
            HookContext(user=result.user, db=db, session=session, account=result.account),
        )
        return result

    # password flows

    async def sign_up(
        self,
        db: DBConnection,
        email: str,
        password: str,
        name: str | None = None,
    ) -> SignUpResult:
        if not self.settings.email_password.enabled:
            return SignUpResult.failure(PASSWORD_AUTH_DISABLED)

        result = await self.password_auth.sign_up(db, email, password, name)
        if result.success and result.user is not None:
            await self.hook_runner.emit("on_signup", HookContext(user=result.user, db=db))
        return result

    async def sign_in(
        self,
        db: DBConnection,
        email: str,
        password: str,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SignInResult:
        if not self.settings.email_password.enabled:
            return SignInResult.failure(PASSWORD_AUTH_DISABLED)

        result = await self.password_auth.sign_in(db, email, password)
        return await self._start_session(db, result, ip_address, user_agent)

    async def update_password(self, db: DBConnection, user_id: UUID, old_password: str, new_password: str) -> bool:
        self._require_password_auth()
        return await self.password_auth.update_password(db, user_id, old_password, new_password)

    async def request_password_reset(self, db: DBConnection, email: str) -> str | None:
        self._require_password_auth()
        return await self.password_auth.generate_password_reset_token(db, email)

    async def reset_password(self, db: DBConnection, email: str, new_password: str, token: str) -> bool:
        self._require_password_auth()
        return await self.password_auth.reset_password(db, email, new_password, token)

    # oauth flows

    def get_oauth_authorization_url(self, provider_id: str, redirect_uri: str, state: str) -> str:
        provider = self.oauth_manager.registry.get(provider_id)
        if not provider.configured:
            msg = f"OAuth provider {provider_id} is not configured"
            raise ValidationError(msg)
        return self.oauth_manager.generate_authorization_url(provider_id, redirect_uri, state)

    async def handle_oauth_callback(  # noqa: PLR0913
        self,
        db: DBConnection,
        provider_id: str,
        code: str,
        redirect_uri: str,
        state: str | None = None,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SignInResult:
        provider = self.oauth_manager.registry.find(provider_id)
        if provider is None or not provider.configured:
            return SignInResult.failure(f"OAuth provider {provider_id} is not configured")

        result = await self.oauth_manager.handle_callback(db, provider_id, code, redirect_uri, state)
        if result.created and result.user is not None:
            await self.hook_runner.emit(
                "on_signup",
                HookContext(user=result.user, db=db, account=result.account),
            )
        return await self._start_session(db, result, ip_address, user_agent)

    def list_configured_providers(self) -> list[str]:
        return [provider.provider_id for provider in self.oauth_manager.registry.configured()]

    # sessions

    async def get_session(self, db: DBConnection, token: str) -> SessionData | None:
        return await self.session_manager.validate_session(db, token)

    async def get_session_info(self, db: DBConnection, token: str) -> SessionInfo:
        return await self.session_manager.get_session_info(db, token)

    async def refresh_session(self, db: DBConnection, token: str) -> SessionRecord | None:
        return await self.session_manager.update_session(db, token)

    async def sign_out(self, db: DBConnection, token: str) -> bool:
        data = await self.session_manager.get_session(db, token)
        deleted = await self.session_manager.delete_session(db, token)
        if data is not None:
            logger.info("user signed out", extra={"user_id": str(data.user.id)})
            await self.hook_runner.emit("on_signout", HookContext(user=data.user, db=db, session=data.session))
        return deleted

    async def sign_out_all_sessions(self, db: DBConnection, user_id: UUID) -> int:
        return await self.session_manager.delete_all_user_sessions(db, user_id)

    def create_session_cookie(self, token: str) -> str:
        return self.session_manager.create_session_cookie(token)

    def create_logout_cookie(self) -> str:
        return self.session_manager.create_logout_cookie()

    def get_session_token_from_cookies(self, cookie_header: str | None) -> str | None:
        return self.session_manager.get_session_token_from_cookies(cookie_header)

    # maintenance

    async def cleanup_expired_sessions(self, db: DBConnection) -> int:
        count = await self.session_manager.cleanup_expired_sessions(db)
        logger.info("removed %d expired sessions", count)
        return count

    async def cleanup_expired_tokens(self, db: DBConnection) -> int:
        count = await self.password_auth.cleanup_expired_tokens(db)
        logger.info("removed %d expired verification tokens", count)
        return count

    async def run_cleanup(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[DBConnection]],
        interval: float = DEFAULT_CLEANUP_INTERVAL,
    ) -> None:
        """Remove expired sessions and tokens every ``interval`` seconds until cancelled.

        A failed run is logged and retried on the next tick. Meant to be
        started with ``asyncio.create_task`` and stopped by cancelling it.
        """
        while True:
            try:
                async with session_factory() as db:
                    await self.cleanup_expired_sessions(db)
                    await self.cleanup_expired_tokens(db)
            except AuthError:
                logger.exception("cleanup run failed")
            await asyncio.sleep(interval)

    async def health(self, db: DBConnection) -> HealthStatus:
        try:
            await self.adapter.ping(db)
        except Exception as exc:  # noqa: BLE001
            logger.warning("health check failed: %s", exc)
            return HealthStatus(status="error", database=False, error=str(exc))
        return HealthStatus(status="ok", database=True)
