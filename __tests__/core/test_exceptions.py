import pytest

from leuven.core.exceptions import (
    AuthError,
    ConfigurationError,
    DatabaseError,
    OAuthError,
    TokenError,
    UniqueViolationError,
    UnknownProviderError,
    ValidationError,
)


@pytest.mark.parametrize(
    ("error_cls", "code", "status_code"),
    [
        (AuthError, "AUTH_ERROR", 400),
        (ConfigurationError, "CONFIG_ERROR", 500),
        (ValidationError, "VALIDATION_ERROR", 400),
        (UnknownProviderError, "UNKNOWN_PROVIDER", 400),
        (DatabaseError, "DATABASE_ERROR", 500),
        (UniqueViolationError, "UNIQUE_VIOLATION", 409),
        (OAuthError, "OAUTH_ERROR", 502),
        (TokenError, "INVALID_TOKEN", 401),
    ],
)
def test_default_code_and_status(error_cls: type[AuthError], code: str, status_code: int) -> None:
    error = error_cls("boom")

    assert error.message == "boom"
    assert str(error) == "boom"
    assert error.code == code
    assert error.status_code == status_code


def test_explicit_code_overrides_default() -> None:
    error = AuthError("disabled", code="PASSWORD_AUTH_DISABLED", status_code=403)

    assert error.code == "PASSWORD_AUTH_DISABLED"
    assert error.status_code == 403


def test_hierarchy() -> None:
    assert issubclass(UnknownProviderError, ValidationError)
    assert issubclass(UniqueViolationError, DatabaseError)
    for error_cls in (ConfigurationError, ValidationError, DatabaseError, OAuthError, TokenError):
        assert issubclass(error_cls, AuthError)


def test_unique_violation_caught_as_database_error() -> None:
    msg = "duplicate"
    with pytest.raises(DatabaseError):
        raise UniqueViolationError(msg)
