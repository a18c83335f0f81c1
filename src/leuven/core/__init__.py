from leuven.core.engine import AuthEngine, validate_settings
from leuven.core.exceptions import (
    AccountLinkError,
    AuthError,
    ConfigurationError,
    DatabaseError,
    OAuthError,
    TokenError,
    UniqueViolationError,
    UnknownProviderError,
    ValidationError,
)
from leuven.core.hooks import HookContext, HookEvent, HookRunner, Hooks
from leuven.core.results import (
    AccountRecord,
    HealthStatus,
    SessionData,
    SessionInfo,
    SessionRecord,
    SignInResult,
    SignUpResult,
    UserRecord,
)
from leuven.core.settings import (
    CookieSettings,
    EmailPasswordSettings,
    FacebookSettings,
    GitHubSettings,
    GoogleSettings,
    LeuvenSettings,
    OAuthProviderSettings,
    SessionSettings,
)

__all__ = [  # noqa: RUF022
    # Engine
    "AuthEngine",
    "validate_settings",
    "Hooks",
    "HookContext",
    "HookEvent",
    "HookRunner",
    # Results
    "AccountRecord",
    "HealthStatus",
    "SessionData",
    "SessionInfo",
    "SessionRecord",
    "SignInResult",
    "SignUpResult",
    "UserRecord",
    # Settings
    "LeuvenSettings",
    "SessionSettings",
    "CookieSettings",
    "EmailPasswordSettings",
    "OAuthProviderSettings",
    "GoogleSettings",
    "GitHubSettings",
    "FacebookSettings",
    # Exceptions
    "AuthError",
    "ConfigurationError",
    "ValidationError",
    "UnknownProviderError",
    "AccountLinkError",
    "DatabaseError",
    "UniqueViolationError",
    "OAuthError",
    "TokenError",
]
