class AuthError(Exception):
    """Base error for the engine.

    Carries a machine-readable ``code`` and an HTTP-style ``status_code`` so an
    HTTP adapter can map failures to responses without inspecting messages.
    """

    default_code = "AUTH_ERROR"
    default_status_code = 400

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status_code


class ConfigurationError(AuthError):
    default_code = "CONFIG_ERROR"
    default_status_code = 500


class ValidationError(AuthError):
    default_code = "VALIDATION_ERROR"
    default_status_code = 400


class UnknownProviderError(ValidationError):
    default_code = "UNKNOWN_PROVIDER"


class DatabaseError(AuthError):
    default_code = "DATABASE_ERROR"
    default_status_code = 500


class UniqueViolationError(DatabaseError):
    default_code = "UNIQUE_VIOLATION"
    default_status_code = 409


class OAuthError(AuthError):
    default_code = "OAUTH_ERROR"
    default_status_code = 502


class TokenError(AuthError):
    default_code = "INVALID_TOKEN"
    default_status_code = 401


class AccountLinkError(ValidationError):
    default_code = "ACCOUNT_ALREADY_LINKED"
    default_status_code = 409
