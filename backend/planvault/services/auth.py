import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from passlib.context import CryptContext

from planvault.core.config import settings
from planvault.core.exceptions import DuplicateException
from planvault.db.base import utcnow
from planvault.models import User, UserSession
from planvault.schemas.auth import UserCreate
from planvault.storage import Storage

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)

SESSION_LIFETIME = timedelta(days=7)

RECOVERY_WORDS = (
    "alpha", "bravo", "charlie", "delta", "echo", "foxtrot", "golf", "hotel",
    "india", "juliet", "kilo", "lima", "mike", "november", "oscar", "papa",
    "quebec", "romeo", "sierra", "tango", "uniform", "victor", "whiskey", "xray",
)


def hash_password(password: str) -> str:
    """Pre-hash with SHA-256 so long passwords don't hit bcrypt's 72-byte limit."""
    truncated = hashlib.sha256(password.encode()).hexdigest()
    return pwd_context.hash(truncated)


def verify_password(plain: str, hashed: str) -> bool:
    truncated = hashlib.sha256(plain.encode()).hexdigest()
    return pwd_context.verify(truncated, hashed)


def generate_session_token() -> str:
    return secrets.token_hex(32)


def generate_encryption_key() -> str:
    return secrets.token_hex(32)


def generate_recovery_key(word_count: int = 8) -> str:
    return "-".join(secrets.choice(RECOVERY_WORDS) for _ in range(word_count))


def register_user(storage: Storage, user_data: UserCreate) -> User:
    try:
        user = storage.create_user(
            username=user_data.username,
            password_hash=hash_password(user_data.password),
            recovery_key=user_data.recovery_key,
            encryption_key=generate_encryption_key(),
        )
    except DuplicateException:
        logger.warning("Registration rejected, username already taken")
        raise
    logger.info("Registered user %s", user.id)
    return user


def authenticate_user(storage: Storage, username: str, password: str) -> Optional[User]:
    user = storage.get_user_by_username(username)
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def recover_account(storage: Storage, username: str, recovery_key: str, new_password: str) -> Optional[User]:
    """Reset the password of ``username`` if ``recovery_key`` matches the stored phrase."""
    user = storage.get_user_by_username(username)
    if not user:
        return None
    if not hmac.compare_digest(user.recovery_key.encode(), recovery_key.encode()):
        return None
    new_hash = hash_password(new_password)
    if not storage.update_password(user.id, new_hash):
        return None
    user.password_hash = new_hash
    logger.info("Password reset through recovery key for user %s", user.id)
    return user


def start_session(storage: Storage, user_id: str, now: Optional[datetime] = None) -> UserSession:
    now = now or utcnow()
    return storage.create_session(user_id, generate_session_token(), now + SESSION_LIFETIME)


def resolve_session(storage: Storage, session_token: str, now: Optional[datetime] = None) -> Optional[UserSession]:
    return storage.get_session(session_token, now or utcnow())


def end_session(storage: Storage, session_token: str) -> None:
    storage.delete_session(session_token)
