from leuven.session.cookies import parse_cookie_header, serialize_cookie
from leuven.session.manager import SessionManager
from leuven.session.strategies import DatabaseSessionStrategy, SessionStrategy, StatelessSessionStrategy
from leuven.session.tokens import sign_session_token, verify_session_token

__all__ = [
    "DatabaseSessionStrategy",
    "SessionManager",
    "SessionStrategy",
    "StatelessSessionStrategy",
    "parse_cookie_header",
    "serialize_cookie",
    "sign_session_token",
    "verify_session_token",
]
