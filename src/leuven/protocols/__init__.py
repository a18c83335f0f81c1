"""Persistence protocols consumed by the Leuven engine."""

from leuven.protocols.account import AccountProtocol
from leuven.protocols.connection import DBConnection
from leuven.protocols.session import SessionProtocol
from leuven.protocols.store import StoreProtocol
from leuven.protocols.user import UserProtocol
from leuven.protocols.verification_token import VerificationTokenProtocol

__all__ = [
    "AccountProtocol",
    "DBConnection",
    "SessionProtocol",
    "StoreProtocol",
    "UserProtocol",
    "VerificationTokenProtocol",
]
