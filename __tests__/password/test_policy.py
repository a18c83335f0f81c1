import pytest

from leuven.password.policy import is_valid_email, normalize_email, validate_password_strength


def test_normalize_email_lowercases_and_strips() -> None:
    assert normalize_email("  Alice@Example.COM ") == "alice@example.com"


@pytest.mark.parametrize("email", ["a@x.com", "first.last+tag@sub.example.org"])
def test_valid_emails(email: str) -> None:
    assert is_valid_email(email)


@pytest.mark.parametrize("email", ["", "plain", "a@b", "a b@x.com", "@x.com", "a@@x.com"])
def test_invalid_emails(email: str) -> None:
    assert not is_valid_email(email)


def test_strong_password_has_no_errors() -> None:
    assert validate_password_strength("Str0ng!Pass") == []


@pytest.mark.parametrize(
    ("password", "expected"),
    [
        ("Sh0rt!", "at least 8 characters"),
        ("NOLOWER1!", "lowercase"),
        ("noupper1!", "uppercase"),
        ("NoDigits!!", "number"),
        ("NoSpecial1", "special character"),
    ],
)
def test_weak_passwords_report_the_violation(password: str, expected: str) -> None:
    errors = validate_password_strength(password)

    assert len(errors) == 1
    assert expected in errors[0]


def test_password_over_bcrypt_limit_is_rejected() -> None:
    password = "Aa1!" + "x" * 69

    errors = validate_password_strength(password)

    assert errors == ["Password must be at most 72 bytes long"]


def test_multibyte_characters_count_as_bytes() -> None:
    # 4 + 23 * 3 = 73 bytes, only 27 characters
    password = "Aa1!" + "é" * 23

    assert "Password must be at most 72 bytes long" in validate_password_strength(password)


def test_custom_min_length() -> None:
    errors = validate_password_strength("Str0ng!Pass", min_length=12)
    assert errors == ["Password must be at least 12 characters long"]
