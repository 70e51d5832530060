"""Account and session service.

Passwords and session tokens are both stored as bcrypt hashes. A session
token is looked up by its 12-character prefix (unique), then verified
against the stored hash.
"""

import logging
import secrets
from datetime import UTC, datetime, timedelta

import bcrypt
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from collectibles.auth.models import AuthSession, User
from collectibles.auth.schemas import Credentials, SessionResponse, UserResponse
from collectibles.config.settings import get_settings
from collectibles.core.exceptions import (
    AuthenticationError,
    ConflictError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Same message for unknown email and wrong password
_INVALID_CREDENTIALS_MESSAGE = "Invalid login credentials"


class AuthService:
    """Service class for accounts and sessions."""

    TOKEN_PREFIX = "ses_"
    TOKEN_LENGTH = 32
    LOOKUP_PREFIX_LENGTH = 12

    @staticmethod
    def generate_token() -> str:
        random_part = secrets.token_urlsafe(AuthService.TOKEN_LENGTH)
        return f"{AuthService.TOKEN_PREFIX}{random_part}"

    @staticmethod
    def hash_secret(secret: str) -> str:
        """Hash a password or session token using bcrypt."""
        settings = get_settings()
        salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
        hashed: bytes = bcrypt.hashpw(secret.encode(), salt)
        return hashed.decode()

    @staticmethod
    def verify_secret(secret: str, secret_hash: str) -> bool:
        result: bool = bcrypt.checkpw(secret.encode(), secret_hash.encode())
        return result

    @staticmethod
    def lookup_prefix(token: str) -> str:
        return token[: AuthService.LOOKUP_PREFIX_LENGTH]

    @staticmethod
    def _require_credentials(data: Credentials) -> None:
        if not data.email or not data.password:
            raise ValidationError("Email and password are required")

    @staticmethod
    async def sign_up(db: AsyncSession, data: Credentials) -> User:
        """Create an account.

        Raises:
            ValidationError: If email or password is missing or too short.
            ConflictError: If the email is already registered.
        """
        AuthService._require_credentials(data)
        settings = get_settings()
        if len(data.password) < settings.password_min_length:
            raise ValidationError(
                f"Password should be at least {settings.password_min_length} characters"
            )

        user = User(email=data.email, password_hash=AuthService.hash_secret(data.password))
        db.add(user)
        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            raise ConflictError("User already registered") from e
        await db.refresh(user)

        logger.info("Registered user", extra={"user_id": user.id})
        return user

    @staticmethod
    async def sign_in(db: AsyncSession, data: Credentials) -> SessionResponse:
        """Verify credentials and open a new session.

        Returns:
            The session, including the raw token (only shown once).
        """
        AuthService._require_credentials(data)

        result = await db.execute(select(User).where(User.email == data.email))
        user = result.scalar_one_or_none()
        if user is None or not AuthService.verify_secret(
            data.password, user.password_hash
        ):
            logger.warning(
                "Sign-in rejected",
                extra={"email_domain": data.email.rpartition("@")[2]},
            )
            raise AuthenticationError(_INVALID_CREDENTIALS_MESSAGE)

        raw_token, session = await AuthService.open_session(db, user)
        return SessionResponse(
            access_token=raw_token,
            expires_at=session.expires_at,
            user=UserResponse.model_validate(user),
        )

    @staticmethod
    async def open_session(db: AsyncSession, user: User) -> tuple[str, AuthSession]:
        settings = get_settings()
        raw_token = AuthService.generate_token()
        session = AuthSession(
            user_id=user.id,
            token_hash=AuthService.hash_secret(raw_token),
            token_prefix=AuthService.lookup_prefix(raw_token),
            expires_at=datetime.now(UTC)
            + timedelta(minutes=settings.session_ttl_minutes),
        )
        db.add(session)
        await db.flush()
        await db.refresh(session)

        logger.info(
            "Opened session",
            extra={"user_id": user.id, "session_id": session.id},
        )
        return raw_token, session

    @staticmethod
    async def validate_token(db: AsyncSession, token: str) -> User | None:
        """Resolve a bearer token to its user.

        Returns:
            The user if the token names a live session, None otherwise.
        """
        prefix = AuthService.lookup_prefix(token)
        result = await db.execute(
            select(AuthSession).where(
                AuthSession.token_prefix == prefix,
                AuthSession.revoked_at.is_(None),
            )
        )
        session = result.scalar_one_or_none()
        if session is None or not AuthService.verify_secret(token, session.token_hash):
            logger.debug("Session token not recognised", extra={"prefix": prefix})
            return None

        if session.is_expired:
            logger.info("Session expired", extra={"session_id": session.id})
            return None

        session.last_used_at = datetime.now(UTC)
        await db.flush()
        return await db.get(User, session.user_id)

    @staticmethod
    async def sign_out(db: AsyncSession, token: str) -> bool:
        """Revoke the session named by the token.

        Returns:
            True if a live session was revoked.
        """
        prefix = AuthService.lookup_prefix(token)
        result = await db.execute(
            select(AuthSession).where(
                AuthSession.token_prefix == prefix,
                AuthSession.revoked_at.is_(None),
            )
        )
        session = result.scalar_one_or_none()
        if session is None or not AuthService.verify_secret(token, session.token_hash):
            return False

        await db.execute(
            update(AuthSession)
            .where(AuthSession.id == session.id)
            .values(revoked_at=datetime.now(UTC))
        )
        logger.info("Closed session", extra={"session_id": session.id})
        return True

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
        result = await db.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()
