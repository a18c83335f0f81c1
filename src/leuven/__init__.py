"""Leuven - authentication and session engine."""

from leuven.core import (
    AccountLinkError,
    AuthEngine,
    AuthError,
    ConfigurationError,
    CookieSettings,
    DatabaseError,
    EmailPasswordSettings,
    HealthStatus,
    HookContext,
    Hooks,
    LeuvenSettings,
    OAuthError,
    SessionData,
    SessionInfo,
    SessionRecord,
    SessionSettings,
    SignInResult,
    SignUpResult,
    UniqueViolationError,
    UnknownProviderError,
    UserRecord,
    ValidationError,
)
from leuven.oauth import OAuthManager, OAuthProvider, ProviderRegistry
from leuven.password import BcryptHasher, PasswordAuth, PasswordHasher
from leuven.protocols import DBConnection, StoreProtocol
from leuven.session import DatabaseSessionStrategy, SessionManager, SessionStrategy, StatelessSessionStrategy
from leuven.utils.crypto import generate_state_token

__all__ = [  # noqa: RUF022
    # Core
    "AuthEngine",
    "Hooks",
    "HookContext",
    # Components
    "PasswordAuth",
    "PasswordHasher",
    "BcryptHasher",
    "OAuthManager",
    "OAuthProvider",
    "ProviderRegistry",
    "SessionManager",
    "SessionStrategy",
    "DatabaseSessionStrategy",
    "StatelessSessionStrategy",
    # Store
    "DBConnection",
    "StoreProtocol",
    # Results
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
    # Exceptions
    "AuthError",
    "ConfigurationError",
    "ValidationError",
    "UnknownProviderError",
    "AccountLinkError",
    "DatabaseError",
    "UniqueViolationError",
    "OAuthError",
    # Utils
    "generate_state_token",
]
