from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from leuven.core.exceptions import TokenError

ALGORITHM = "HS256"


def sign_session_token(claims: dict[str, Any], *, secret: str) -> str:
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def verify_session_token(token: str, *, secret: str, verify_exp: bool = True) -> dict[str, Any]:
    """Decode and verify an HS256 session token.

    Raises ``TokenError`` with code ``TOKEN_EXPIRED`` for expired tokens and
    ``INVALID_TOKEN`` for anything else that fails verification.
    """
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM], options={"verify_exp": verify_exp})
    except ExpiredSignatureError as e:
        msg = "Session token has expired"
        raise TokenError(msg, code="TOKEN_EXPIRED") from e
    except JWTError as e:
        msg = "Session token is invalid"
        raise TokenError(msg) from e
