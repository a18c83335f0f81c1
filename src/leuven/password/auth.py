import logging
import secrets
from datetime import UTC, datetime, timedelta
from uuid import UUID

from leuven.core.exceptions import UniqueViolationError, ValidationError
from leuven.core.results import SignInResult, SignUpResult, UserRecord
from leuven.core.settings import EmailPasswordSettings
from leuven.password.hashing import PasswordHasher
from leuven.password.policy import is_valid_email, normalize_email, validate_password_strength
from leuven.protocols import DBConnection, StoreProtocol
from leuven.utils.crypto import generate_verification_token

logger = logging.getLogger(__name__)

PASSWORD_RESET_PURPOSE = "password_reset"  # noqa: S105

USER_EXISTS = "User already exists with this email"
INVALID_CREDENTIALS = "Invalid email or password"
INVALID_EMAIL = "Invalid email address"


class PasswordAuth:
    """E-mail and password credentials.

    Sign-up and sign-in report expected failures through their result objects.
    Password changes and resets raise ``ValidationError`` so callers can show
    the specific reason.
    """

    def __init__(
        self,
        adapter: StoreProtocol,
        hasher: PasswordHasher,
        settings: EmailPasswordSettings,
    ) -> None:
        self.adapter = adapter
        self.hasher = hasher
        self.settings = settings
        self._dummy_hash: str | None = None

    def _password_errors(self, password: str) -> list[str]:
        return validate_password_strength(password, min_length=self.settings.min_password_length)

    async def _burn_hash(self, password: str) -> None:
        # run one verification so unknown and OAuth-only users cost the same as a wrong password
        if self._dummy_hash is None:
            self._dummy_hash = await self.hasher.hash(secrets.token_urlsafe(16))
        await self.hasher.verify(password, self._dummy_hash)

    async def sign_up(
        self,
        db: DBConnection,
        email: str,
        password: str,
        name: str | None = None,
    ) -> SignUpResult:
        if not is_valid_email(email):
            return SignUpResult.failure(INVALID_EMAIL)

        if errors := self._password_errors(password):
            return SignUpResult.failure(", ".join(errors))

        email = normalize_email(email)
        if await self.adapter.get_user_by_email(db, email):
            return SignUpResult.failure(USER_EXISTS)

        password_hash = await self.hasher.hash(password)
        try:
            user = await self.adapter.create_user(
                db,
                email=email,
                name=name,
                password_hash=password_hash,
                email_verified=False,
            )
        except UniqueViolationError:
            logger.warning("concurrent sign-up lost the race on e-mail uniqueness")
            return SignUpResult.failure(USER_EXISTS)

        logger.info("user signed up", extra={"user_id": str(user.id)})
        return SignUpResult(success=True, user=UserRecord.from_model(user), requires_verification=True)

    async def sign_in(self, db: DBConnection, email: str, password: str) -> SignInResult:
        if not is_valid_email(email):
            return SignInResult.failure(INVALID_EMAIL)
        if not password:
            return SignInResult.failure("Password is required")

        user = await self.adapter.get_user_by_email(db, normalize_email(email))
        if user is None or not user.password_hash:
            await self._burn_hash(password)
            return SignInResult.failure(INVALID_CREDENTIALS)

        if not await self.hasher.verify(password, user.password_hash):
            return SignInResult.failure(INVALID_CREDENTIALS)

        return SignInResult(success=True, user=UserRecord.from_model(user))

    async def update_password(
        self,
        db: DBConnection,
        user_id: UUID,
        old_password: str,
        new_password: str,
    ) -> bool:
        user = await self.adapter.get_user_by_id(db, user_id)
        if user is None or not user.password_hash:
            msg = "User not found or password not set"
            raise ValidationError(msg)

        if not await self.hasher.verify(old_password, user.password_hash):
            msg = "Current password is incorrect"
            raise ValidationError(msg)

        if errors := self._password_errors(new_password):
            raise ValidationError(", ".join(errors))

        password_hash = await self.hasher.hash(new_password)
        await self.adapter.update_user(db, user.id, password_hash=password_hash)
        logger.info("password updated", extra={"user_id": str(user.id)})
        return True

    async def generate_password_reset_token(self, db: DBConnection, email: str) -> str | None:
        """Issue a single-use reset token.

        Returns ``None`` for unknown addresses and stores nothing. Callers
        must answer both outcomes identically and deliver the token out of
        band, so neither the response nor its timing reveals whether an
        account exists.
        """
        token = generate_verification_token()
        email = normalize_email(email)
        user = await self.adapter.get_user_by_email(db, email)
        if user is None:
            return None

        expires_at = datetime.now(UTC) + timedelta(seconds=self.settings.reset_token_max_age)
        await self.adapter.create_verification_token(
            db,
            identifier=email,
            token=token,
            purpose=PASSWORD_RESET_PURPOSE,
            expires_at=expires_at,
        )
        logger.debug("password reset token issued", extra={"user_id": str(user.id)})
        return token

    async def reset_password(self, db: DBConnection, email: str, new_password: str, token: str) -> bool:
        if errors := self._password_errors(new_password):
            raise ValidationError(", ".join(errors))

        record = await self.adapter.get_verification_token(db, token)
        if record is None or record.purpose != PASSWORD_RESET_PURPOSE:
            msg = "Invalid or expired reset token"
            raise ValidationError(msg)

        if record.expires_at <= datetime.now(UTC):
            await self.adapter.delete_verification_token(db, token)
            msg = "Reset token has expired"
            raise ValidationError(msg)

        email = normalize_email(email)
        if record.identifier != email:
            msg = "Token does not match email"
            raise ValidationError(msg)

        user = await self.adapter.get_user_by_email(db, email)
        if user is None:
            msg = "Invalid or expired reset token"
            raise ValidationError(msg)

        # single use: only the caller that deletes the token may proceed
        if not await self.adapter.delete_verification_token(db, token):
            msg = "Invalid or expired reset token"
            raise ValidationError(msg)

        password_hash = await self.hasher.hash(new_password)
        await self.adapter.update_user(db, user.id, password_hash=password_hash)
        logger.info("password reset", extra={"user_id": str(user.id)})
        return True

    async def cleanup_expired_tokens(self, db: DBConnection) -> int:
        return await self.adapter.delete_expired_verification_tokens(db)
