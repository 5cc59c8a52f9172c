"""Local user accounts and the current-user record."""

import hashlib
import logging
import secrets
import time
from typing import Optional

from .errors import AccountError
from .models import User
from .storage import CURRENT_USER_KEY, USERS_KEY, MemoryStorage

logger = logging.getLogger(__name__)


def _hash_password(password: str, salt: str) -> str:
    return hashlib.sha256(f"{salt}:{password}".encode("utf-8")).hexdigest()


class AccountStore:
    """Signup, login and logout against the shared storage."""

    def __init__(self, storage: MemoryStorage):
        self.storage = storage

    @property
    def current_user(self) -> Optional[User]:
        data = self.storage.get(CURRENT_USER_KEY)
        return User.from_dict(data) if data else None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    def signup(self, name: str, email: str, password: str, gender: str = "", phone: str = "", age: int = 0) -> User:
        """
        Register a user and log them in.

        Raises:
            AccountError: If the email is already registered.
        """
        email = email.strip().lower()
        user = User(
            id=f"user_{int(time.time() * 1000)}_{secrets.token_hex(4)}",
            name=name,
            email=email,
            gender=gender,
            phone=phone,
            age=int(age),
        )

        def add(records):
            if any(record.get("email") == email for record in records):
                raise AccountError("Email already in use")
            salt = secrets.token_hex(8)
            record = user.to_dict()
            record["salt"] = salt
            record["passwordHash"] = _hash_password(password, salt)
            return list(records) + [record]

        self.storage.update(USERS_KEY, add, default=[])
        self.storage.set(CURRENT_USER_KEY, user.to_dict())
        logger.info(f"Registered user {user.id}")
        return user

    def login(self, email: str, password: str) -> Optional[User]:
        """Log in; returns the user, or None for bad credentials."""
        email = email.strip().lower()
        for record in self.storage.get(USERS_KEY, []):
            if record.get("email") != email:
                continue
            if record.get("passwordHash") == _hash_password(password, record.get("salt", "")):
                user = User.from_dict(record)
                self.storage.set(CURRENT_USER_KEY, user.to_dict())
                logger.info(f"User {user.id} logged in")
                return user
            break
        logger.warning("Login failed: invalid email or password")
        return None

    def logout(self) -> None:
        self.storage.remove(CURRENT_USER_KEY)
        logger.info("Logged out")
