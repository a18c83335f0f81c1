from leuven.utils.crypto import (
    generate_session_id,
    generate_session_token,
    generate_state_token,
    generate_verification_token,
)

__all__ = [
    "generate_session_id",
    "generate_session_token",
    "generate_state_token",
    "generate_verification_token",
]
