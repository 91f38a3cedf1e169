"""Authentication: password hashing, JWT tokens, TOTP second factor."""

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt
import pyotp
from sqlmodel import Session, select

from trade_journal.config import settings
from trade_journal.models.user import User

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    pw = password.encode("utf-8")[:72]  # bcrypt ignores anything past 72 bytes
    return bcrypt.hashpw(pw, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    pw = plain.encode("utf-8")[:72]
    return bcrypt.checkpw(pw, hashed.encode("utf-8"))


def create_access_token(user_id: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {"sub": user_id, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str | None:
    """Return the user id carried by a valid token, None otherwise."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    return payload.get("sub")


def verify_totp(secret: str, code: str) -> bool:
    return pyotp.TOTP(secret).verify(code, valid_window=1)


def generate_totp_secret() -> str:
    return pyotp.random_base32()


def get_totp_uri(secret: str, username: str) -> str:
    return pyotp.TOTP(secret).provisioning_uri(name=username, issuer_name="Trade Journal")


def authenticate(session: Session, username: str, password: str, totp_code: str) -> User | None:
    """Check all three factors; the caller cannot tell which one failed."""
    user = session.exec(select(User).where(User.username == username)).first()
    if user is None or not user.is_active:
        logger.info(f"Login rejected for unknown or inactive user '{username}'")
        return None
    if not verify_password(password, user.hashed_password):
        logger.info(f"Login rejected for '{username}': bad password")
        return None
    if not verify_totp(user.totp_secret, totp_code):
        logger.info(f"Login rejected for '{username}': bad TOTP code")
        return None
    return user
