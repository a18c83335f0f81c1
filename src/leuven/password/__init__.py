from leuven.password.auth import PASSWORD_RESET_PURPOSE, PasswordAuth
from leuven.password.hashing import BcryptHasher, PasswordHasher
from leuven.password.policy import is_valid_email, normalize_email, validate_password_strength

__all__ = [
    "PASSWORD_RESET_PURPOSE",
    "BcryptHasher",
    "PasswordAuth",
    "PasswordHasher",
    "is_valid_email",
    "normalize_email",
    "validate_password_strength",
]
