"""
Auth Service - credentials, sessions and password resets

Credentials are HS256 JWTs bound to a user id (``sub``) with a one hour
lifetime. Every sign-in also records the credential in the session cache
under the user's id with a matching TTL.

Revocation Model:
    session_revocation = False (default)
        authenticate() only checks signature, expiry and that the user
        still exists. Sign-out drops the cache entry but an issued
        credential keeps working until it expires.
    session_revocation = True
        authenticate() additionally requires the credential to be the
        one currently cached for the user. Sign-out, cache expiry and a
        newer sign-in all revoke it.

Password Reset Flow:
    request_password_reset(email) -> token stored on the user (1 hour),
        handed to the ResetNotifier; a new request overwrites the old token
    confirm_password_reset(token, new_password) -> rehash, clear token
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ats.config import Settings
from ats.errors import (
    InvalidCredentials,
    InvalidOrExpiredToken,
    NotFound,
    Unauthenticated,
    ValidationError,
)
from ats.models import User, utcnow
from ats.services.session_cache import SessionCache

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
RESET_PURPOSE = "password-reset"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: str, secret_key: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        "sub": user_id,
        "iat": now,
        "exp": now + expires_delta,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str, secret_key: str) -> Optional[str]:
    """Return the user id a credential is bound to, or None if invalid or expired."""
    try:
        payload = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("purpose") is not None:
        # Reset tokens are signed with the same key but are not credentials
        return None
    return payload.get("sub")


def create_reset_token(user_id: str, secret_key: str, expires_delta: timedelta) -> str:
    to_encode = {
        "sub": user_id,
        "purpose": RESET_PURPOSE,
        "exp": datetime.now(timezone.utc) + expires_delta,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)


class ResetNotifier(Protocol):
    async def send_reset(self, user: User, token: str) -> None:
        ...


class LoggingResetNotifier:
    """Stand-in for e-mail delivery: records that a reset was issued."""

    async def send_reset(self, user: User, token: str) -> None:
        logger.info(f"Password reset token issued for user {user.id}")


class AuthService:
    """
    Issues, verifies and revokes credentials.

    Args:
        db: Request-scoped database session
        cache: Session cache handle
        settings: Application settings (secret, lifetimes, revocation mode)
        notifier: Receives freshly issued reset tokens
    """

    def __init__(
        self,
        db: AsyncSession,
        cache: SessionCache,
        settings: Settings,
        notifier: Optional[ResetNotifier] = None,
    ):
        self.db = db
        self.cache = cache
        self.settings = settings
        self.notifier = notifier or LoggingResetNotifier()

    @property
    def token_ttl(self) -> timedelta:
        return timedelta(minutes=self.settings.token_expire_minutes)

    async def _get_user_by(self, *criteria) -> Optional[User]:
        result = await self.db.execute(select(User).where(*criteria))
        return result.scalar_one_or_none()

    # ==================== Sessions ====================

    async def sign_in(self, username: str, password: str) -> str:
        """
        Verify a username/password pair and open a session.

        Returns:
            Signed credential valid for token_expire_minutes

        Raises:
            InvalidCredentials: Unknown user or wrong password
        """
        user = await self._get_user_by(User.username == username)
        if not user or not verify_password(password, user.password_hash):
            logger.info(f"Failed sign-in for username {username!r}")
            raise InvalidCredentials()

        credential = create_access_token(user.id, self.settings.secret_key, self.token_ttl)
        await self.cache.store(user.id, credential, int(self.token_ttl.total_seconds()))
        return credential

    async def sign_out(self, user: User) -> None:
        await self.cache.delete(user.id)

    async def authenticate(self, credential: str) -> User:
        """
        Resolve a credential to its user.

        Raises:
            Unauthenticated: Bad signature, expired, unknown user, or (with
                session_revocation) no longer the cached session
        """
        user_id = decode_access_token(credential, self.settings.secret_key)
        if not user_id:
            raise Unauthenticated()

        user = await self._get_user_by(User.id == user_id)
        if user is None:
            raise Unauthenticated()

        if self.settings.session_revocation:
            current = await self.cache.get(user.id)
            if current != credential:
                raise Unauthenticated("Session has been signed out or replaced.")

        return user

    # ==================== Password Reset ====================

    async def request_password_reset(self, email: str) -> None:
        """
        Issue a reset token for the user with this e-mail.

        Raises:
            NotFound: No user has this e-mail
        """
        user = await self._get_user_by(User.email == email)
        if not user:
            raise NotFound("User not found")

        lifetime = timedelta(minutes=self.settings.reset_token_expire_minutes)
        token = create_reset_token(user.id, self.settings.secret_key, lifetime)

        now = user.touch()
        user.reset_password_token = token
        user.reset_password_expires = now + lifetime
        await self.db.commit()

        await self.notifier.send_reset(user, token)

    async def confirm_password_reset(self, token: str, new_password: str) -> None:
        """
        Set a new password using an outstanding reset token.

        Raises:
            ValidationError: Empty new password
            InvalidOrExpiredToken: No user holds this token, or it has expired
        """
        if not new_password:
            raise ValidationError("New password is required")

        user = await self._get_user_by(
            User.reset_password_token == token,
            User.reset_password_expires > utcnow(),
        )
        if not user:
            raise InvalidOrExpiredToken()

        user.touch()
        user.password_hash = hash_password(new_password)
        user.reset_password_token = None
        user.reset_password_expires = None
        await self.db.commit()


async def provision_user(db: AsyncSession, username: str, email: str, password: str) -> User:
    """
    Create a recruiter account.

    Raises:
        ValidationError: Missing field, or username/e-mail already taken
    """
    if not username or not email or not password:
        raise ValidationError("username, email and password are required")

    existing = await db.execute(
        select(User).where((User.username == username) | (User.email == email))
    )
    if existing.scalars().first():
        raise ValidationError("A user with this username or email already exists")

    user = User(username=username, email=email, password_hash=hash_password(password))
    user.touch()
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user
