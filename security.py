import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import jwt, JWTError
from passlib.context import CryptContext

from config import Settings
from errors import UnauthorizedError

logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def generate_salt() -> str:
    """Return a fresh bcrypt salt (the 22 character part, without the cost prefix)."""
    return bcrypt.gensalt().decode("ascii")[-22:]


def get_password_hash(password: str, salt: Optional[str] = None) -> str:
    """Hash ``password`` with bcrypt.

    The result is a modular-crypt string that embeds its own salt, so the same
    ``(password, salt)`` pair always yields the same hash.
    """
    if salt is None:
        salt = generate_salt()
    hasher = pwd_context.handler("bcrypt").using(salt=salt)
    return hasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Unknown or corrupt hash in the table counts as a mismatch
        logger.warning("Stored password hash could not be identified")
        return False


def dummy_verify() -> None:
    """Spend the time a real verification would, for usernames that don't exist."""
    pwd_context.dummy_verify()


class TokenService:
    """Issues and verifies the signed bearer tokens handed out at login.

    Everything it needs to sign is on ``settings``; nothing is read from the
    environment here.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def issue(self, username: str, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.settings.access_token_expire_minutes))
        payload = {"sub": username, "iat": now, "exp": expire}
        return jwt.encode(payload, self.settings.secret_key, algorithm=self.settings.algorithm)

    def decode(self, token: str) -> str:
        """Check signature and expiry and return the username the token was issued for."""
        try:
            payload = jwt.decode(token, self.settings.secret_key, algorithms=[self.settings.algorithm])
        except JWTError as exc:
            logger.debug("Rejected token: %s", exc)
            raise UnauthorizedError() from exc

        username = payload.get("sub")
        if not isinstance(username, str) or not username:
            raise UnauthorizedError()
        return username

    def verify(self, token: str, users):
        """Resolve ``token`` to a live user through the ``users`` directory.

        Raises UnauthorizedError when the token is bad or the account is gone.
        """
        username = self.decode(token)
        user = users.get_by_username(username)
        if user is None:
            logger.debug("Token subject %s no longer exists", username)
            raise UnauthorizedError()
        return user
