import logging
from typing import Optional

from errors import ConflictError
from models import User
from security import dummy_verify, generate_salt, get_password_hash, verify_password

logger = logging.getLogger(__name__)


class UserDirectory:
    """Account creation and credential checks on top of a user repository."""

    def __init__(self, users):
        self.users = users

    def sign_up(self, username: str, password: str) -> User:
        password_hash = get_password_hash(password, generate_salt())
        try:
            user = self.users.create(username=username, password_hash=password_hash)
        except ConflictError as exc:
            logger.warning("Sign-up rejected, username %s is taken", username)
            raise ConflictError("Username already exists") from exc
        logger.info("Created user %s (id=%s)", user.username, user.id)
        return user

    def validate_credentials(self, username: str, password: str) -> Optional[str]:
        """Return ``username`` if the password is right, else None.

        An unknown user and a wrong password look the same from outside.
        """
        user = self.users.find_one(username=username)
        if user is None:
            dummy_verify()
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user.username

    def get_by_username(self, username: str) -> Optional[User]:
        return self.users.find_one(username=username)
