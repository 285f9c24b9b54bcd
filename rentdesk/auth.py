"""Pluggable credential check for the console login."""

import hmac
import logging
from typing import Protocol

from rentdesk.models import User
from rentdesk.store import EntityStore

logger = logging.getLogger(__name__)


class CredentialVerifier(Protocol):
    """Anything that turns an email/password pair into a user (or refuses)."""

    def verify(self, email: str, password: str) -> User | None: ...


class StaticCredentialVerifier:
    """Accept one configured email/password pair and return the stored user.

    Stand-in for a real identity provider; swap in another
    ``CredentialVerifier`` without touching the rest of the package.
    """

    def __init__(self, store: EntityStore, email: str = "landlord@example.com", password: str = "password") -> None:
        self.store = store
        self._email = email.lower()
        self._password = password

    def verify(self, email: str, password: str) -> User | None:
        email_ok = hmac.compare_digest(email.strip().lower(), self._email)
        password_ok = hmac.compare_digest(password, self._password)
        if not (email_ok and password_ok):
            logger.warning("Login refused for %s", email)
            return None

        user = self.store.get_user()
        if user is None or not user.is_active:
            logger.warning("Login for %s matched but no active user is stored", email)
            return None
        return user
