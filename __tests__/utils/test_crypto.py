from uuid import UUID

from leuven.utils.crypto import (
    generate_session_id,
    generate_session_token,
    generate_state_token,
    generate_verification_token,
)


def test_generate_state_token_is_url_safe() -> None:
    token = generate_state_token()

    assert len(token) >= 43
    assert all(c.isalnum() or c in "-_" for c in token)


def test_generate_tokens_are_unique() -> None:
    tokens = {generate_session_token() for _ in range(100)}
    assert len(tokens) == 100


def test_generate_verification_token_differs_from_session_token() -> None:
    assert generate_verification_token() != generate_session_token()


def test_generate_session_id_returns_uuid4() -> None:
    session_id = generate_session_id()

    assert isinstance(session_id, UUID)
    assert session_id.version == 4
