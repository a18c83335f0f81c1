import httpx
import pytest
import respx
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from __tests__.fixtures.models import Account, User
from leuven.alchemy import AlchemyAdapter
from leuven.core.exceptions import AccountLinkError, UniqueViolationError, UnknownProviderError
from leuven.oauth.manager import OAuthManager, ProviderRegistry
from leuven.oauth.models import OAuthProfile, OAuthTokens
from leuven.oauth.providers import GitHubProvider, GoogleProvider, OAuthProvider

REDIRECT_URI = "http://localhost:8000/auth/callback"


@pytest.fixture
def manager(adapter: AlchemyAdapter) -> OAuthManager:
    manager = OAuthManager(adapter)
    manager.configure_provider("google", "google-id", "google-secret")
    manager.configure_provider("github", "github-id", "github-secret")
    return manager


def mock_google(profile_id: str = "g-1", email: str | None = "alice@example.com") -> None:
    respx.post(GoogleProvider.token_endpoint).mock(
        return_value=httpx.Response(200, json={"access_token": f"access-{profile_id}", "expires_in": 3600}),
    )
    respx.get(GoogleProvider.userinfo_endpoint).mock(
        return_value=httpx.Response(200, json={"id": profile_id, "email": email, "name": "Alice"}),
    )


def mock_github(profile_id: int = 99, email: str = "Alice@Example.com") -> None:
    respx.post(GitHubProvider.token_endpoint).mock(
        return_value=httpx.Response(200, json={"access_token": "gh-access", "token_type": "bearer"}),
    )
    respx.get(GitHubProvider.userinfo_endpoint).mock(
        return_value=httpx.Response(200, json={"id": profile_id, "login": "alice", "email": email}),
    )


async def count(db: AsyncSession, model: type) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


# registry


def test_registry_has_builtins() -> None:
    registry = ProviderRegistry.with_builtins()

    assert {provider.provider_id for provider in registry} == {"google", "github", "facebook"}
    assert len(registry) == 3
    assert "google" in registry
    assert registry.configured() == []


def test_registry_unknown_provider_raises() -> None:
    registry = ProviderRegistry()

    with pytest.raises(UnknownProviderError, match="Unknown OAuth provider"):
        registry.get("myspace")
    assert registry.find("myspace") is None


def test_configure_unknown_provider(manager: OAuthManager) -> None:
    with pytest.raises(UnknownProviderError):
        manager.configure_provider("myspace", "id", "secret")


def test_add_custom_provider(manager: OAuthManager) -> None:
    provider = OAuthProvider(
        provider_id="gitlab",
        client_id="id",
        client_secret="secret",  # noqa: S106
        authorization_endpoint="https://gitlab.example.com/oauth/authorize",
    )

    manager.add_custom_provider(provider)

    assert manager.registry.get("gitlab") is provider
    assert manager.generate_authorization_url("gitlab", REDIRECT_URI, "s").startswith(
        "https://gitlab.example.com/oauth/authorize?",
    )


def test_generate_authorization_url_unknown_provider(manager: OAuthManager) -> None:
    with pytest.raises(UnknownProviderError):
        manager.generate_authorization_url("myspace", REDIRECT_URI, "s")


# callbacks


@pytest.mark.asyncio
@respx.mock
async def test_callback_creates_verified_user_and_account(manager: OAuthManager, db_session: AsyncSession) -> None:
    mock_google()

    result = await manager.handle_callback(db_session, "google", "code", REDIRECT_URI, state="s")

    assert result.success
    assert result.user is not None
    assert result.user.email == "alice@example.com"
    assert result.user.email_verified is True
    assert result.account is not None
    assert result.account.provider == "google"
    assert result.account.provider_account_id == "g-1"
    assert result.session is None


@pytest.mark.asyncio
@respx.mock
async def test_callback_is_idempotent(manager: OAuthManager, db_session: AsyncSession) -> None:
    mock_google()

    first = await manager.handle_callback(db_session, "google", "code-1", REDIRECT_URI)
    second = await manager.handle_callback(db_session, "google", "code-2", REDIRECT_URI)

    assert first.user is not None
    assert second.user is not None
    assert first.user.id == second.user.id
    assert await count(db_session, User) == 1
    assert await count(db_session, Account) == 1


@pytest.mark.asyncio
@respx.mock
async def test_returning_user_refreshes_tokens(
    manager: OAuthManager,
    adapter: AlchemyAdapter,
    db_session: AsyncSession,
) -> None:
    mock_google()
    await manager.handle_callback(db_session, "google", "code-1", REDIRECT_URI)
    respx.post(GoogleProvider.token_endpoint).mock(
        return_value=httpx.Response(200, json={"access_token": "rotated"}),
    )

    await manager.handle_callback(db_session, "google", "code-2", REDIRECT_URI)

    account = await adapter.get_account(db_session, "google", "g-1")
    assert account is not None
    assert account.access_token == "rotated"


@pytest.mark.asyncio
@respx.mock
async def test_callback_links_existing_user_by_email(
    manager: OAuthManager,
    adapter: AlchemyAdapter,
    db_session: AsyncSession,
) -> None:
    existing = await adapter.create_user(db_session, email="alice@example.com", password_hash="hash")
    mock_google()
    mock_github()

    google_result = await manager.handle_callback(db_session, "google", "code", REDIRECT_URI)
    github_result = await manager.handle_callback(db_session, "github", "code", REDIRECT_URI)

    assert google_result.user is not None
    assert github_result.user is not None
    assert google_result.user.id == existing.id
    assert github_result.user.id == existing.id
    assert await count(db_session, User) == 1
    assert await count(db_session, Account) == 2


@pytest.mark.asyncio
@respx.mock
async def test_callback_without_email(manager: OAuthManager, db_session: AsyncSession) -> None:
    mock_google(email=None)

    result = await manager.handle_callback(db_session, "google", "code", REDIRECT_URI)

    assert not result.success
    assert result.error == "Email not provided by OAuth provider"
    assert await count(db_session, User) == 0


@pytest.mark.asyncio
@respx.mock
async def test_callback_provider_failure_is_generic(manager: OAuthManager, db_session: AsyncSession) -> None:
    respx.post(GoogleProvider.token_endpoint).mock(return_value=httpx.Response(500))

    result = await manager.handle_callback(db_session, "google", "code", REDIRECT_URI)

    assert not result.success
    assert result.error == "OAuth authentication failed"


@pytest.mark.asyncio
async def test_callback_unknown_provider(manager: OAuthManager, db_session: AsyncSession) -> None:
    result = await manager.handle_callback(db_session, "myspace", "code", REDIRECT_URI)

    assert not result.success
    assert result.error == "Unknown OAuth provider"


@pytest.mark.asyncio
async def test_callback_unconfigured_provider(manager: OAuthManager, db_session: AsyncSession) -> None:
    result = await manager.handle_callback(db_session, "facebook", "code", REDIRECT_URI)

    assert not result.success
    assert result.error == "OAuth provider facebook is not configured"


# races


@pytest.mark.asyncio
async def test_user_creation_race_links_to_winner(
    manager: OAuthManager,
    adapter: AlchemyAdapter,
    db_session: AsyncSession,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    create_user = adapter.create_user

    async def racing_create_user(db: AsyncSession, **kwargs: object) -> User:
        # another request creates the same user first
        await create_user(db, email="alice@example.com")
        msg = "Record violates a uniqueness constraint"
        raise UniqueViolationError(msg)

    monkeypatch.setattr(adapter, "create_user", racing_create_user)
    real_get = adapter.get_user_by_email
    lookups: list[str] = []

    async def tracking_get(db: AsyncSession, email: str) -> User | None:
        lookups.append(email)
        return await real_get(db, email)

    monkeypatch.setattr(adapter, "get_user_by_email", tracking_get)

    user, account, created = await manager.find_or_create_user(
        db_session,
        "google",
        OAuthProfile(id="g-1", email="alice@example.com"),
        OAuthTokens(access_token="tok"),
    )

    assert lookups == ["alice@example.com", "alice@example.com"]
    assert user.email == "alice@example.com"
    assert account.user_id == user.id
    # the competing request created the user
    assert created is False
    assert await count(db_session, User) == 1


@pytest.mark.asyncio
async def test_account_creation_race_returns_existing_account(
    manager: OAuthManager,
    adapter: AlchemyAdapter,
    db_session: AsyncSession,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    owner = await adapter.create_user(db_session, email="alice@example.com")
    create_account = adapter.create_account

    async def racing_create_account(db: AsyncSession, **kwargs: object) -> Account:
        await create_account(db, user_id=owner.id, provider="google", provider_account_id="g-1")
        msg = "Record violates a uniqueness constraint"
        raise UniqueViolationError(msg)

    monkeypatch.setattr(adapter, "create_account", racing_create_account)
    real_get_account = adapter.get_account
    calls: list[int] = []

    async def get_account_after_race(db: AsyncSession, provider: str, provider_account_id: str) -> Account | None:
        calls.append(1)
        # the first lookup happens before the competing insert
        if len(calls) == 1:
            return None
        return await real_get_account(db, provider, provider_account_id)

    monkeypatch.setattr(adapter, "get_account", get_account_after_race)

    user, account, created = await manager.find_or_create_user(
        db_session,
        "google",
        OAuthProfile(id="g-1", email="alice@example.com"),
        OAuthTokens(access_token="tok"),
    )

    assert user.id == owner.id
    assert account.provider_account_id == "g-1"
    assert created is False
    assert await count(db_session, Account) == 1


@pytest.mark.asyncio
async def test_concurrent_link_for_same_provider_is_rejected(
    manager: OAuthManager,
    adapter: AlchemyAdapter,
    db_session: AsyncSession,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    owner = await adapter.create_user(db_session, email="alice@example.com")
    create_account = adapter.create_account

    async def racing_create_account(db: AsyncSession, **kwargs: object) -> Account:
        # another request links a different google identity first
        await create_account(db, user_id=owner.id, provider="google", provider_account_id="g-other")
        msg = "Record violates a uniqueness constraint"
        raise UniqueViolationError(msg)

    monkeypatch.setattr(adapter, "create_account", racing_create_account)

    with pytest.raises(AccountLinkError):
        await manager.find_or_create_user(
            db_session,
            "google",
            OAuthProfile(id="g-1", email="alice@example.com"),
            OAuthTokens(access_token="tok"),
        )
    assert await count(db_session, Account) == 1


# one account per provider


@pytest.mark.asyncio
@respx.mock
async def test_callback_reports_created_user(manager: OAuthManager, db_session: AsyncSession) -> None:
    mock_google()

    first = await manager.handle_callback(db_session, "google", "code-1", REDIRECT_URI)
    second = await manager.handle_callback(db_session, "google", "code-2", REDIRECT_URI)

    assert first.created is True
    assert second.created is False


@pytest.mark.asyncio
@respx.mock
async def test_linking_to_existing_user_is_not_a_sign_up(
    manager: OAuthManager,
    adapter: AlchemyAdapter,
    db_session: AsyncSession,
) -> None:
    await adapter.create_user(db_session, email="alice@example.com", password_hash="hash")
    mock_google()

    result = await manager.handle_callback(db_session, "google", "code", REDIRECT_URI)

    assert result.success
    assert result.created is False


@pytest.mark.asyncio
@respx.mock
async def test_second_identity_from_same_provider_is_rejected(
    manager: OAuthManager,
    adapter: AlchemyAdapter,
    db_session: AsyncSession,
) -> None:
    mock_google(profile_id="g-1")
    first = await manager.handle_callback(db_session, "google", "code-1", REDIRECT_URI)
    assert first.success
    mock_google(profile_id="g-2")

    second = await manager.handle_callback(db_session, "google", "code-2", REDIRECT_URI)

    assert not second.success
    assert second.error == "A google account is already linked to this email"
    assert await count(db_session, Account) == 1
    assert await adapter.get_account(db_session, "google", "g-2") is None
