"""User directory backed by the internal User record type."""

from __future__ import annotations

import logging
from typing import Any

from recordkeeper.auth.password import PasswordService
from recordkeeper.auth.permissions import roles_for
from recordkeeper.auth.types import AuthenticatedUser
from recordkeeper.metadata.loader import RecordType
from recordkeeper.persistence.adapter import PersistenceAdapter

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when an email/password pair does not match a user."""


class AccountDisabledError(Exception):
    """Raised when a matching user has been deactivated."""


class DuplicateUserError(ValueError):
    """Raised when registering an email that already has an account."""


class UserDirectory:
    """Looks up, registers and authenticates users.

    Every active user holds the USER role. ADMIN is granted when the user's
    ``admin`` flag is set or their email is listed in ``admin_emails``.
    """

    def __init__(
        self,
        store: PersistenceAdapter,
        record_type: RecordType,
        password_service: PasswordService,
        admin_emails: frozenset[str] = frozenset(),
    ):
        self._store = store
        self._record_type = record_type
        self._passwords = password_service
        self._admin_emails = frozenset(e.strip().lower() for e in admin_emails if e.strip())

    def _is_admin(self, record: dict[str, Any]) -> bool:
        return bool(record.get("admin")) or record["email"].lower() in self._admin_emails

    def _to_user(self, record: dict[str, Any]) -> AuthenticatedUser:
        admin = self._is_admin(record)
        active = bool(record.get("active", 1))
        return AuthenticatedUser(
            user_id=str(record["id"]),
            email=record["email"],
            name=record["name"],
            admin=admin,
            active=active,
            roles=roles_for(admin) if active else [],
        )

    def find_by_email(self, email: str) -> AuthenticatedUser | None:
        record = self._store.find_one_by(self._record_type, "email", email.strip().lower())
        return self._to_user(record) if record else None

    def get_user(self, user_id: str) -> AuthenticatedUser | None:
        try:
            key = int(user_id)
        except (TypeError, ValueError):
            return None
        record = self._store.find_by_id(self._record_type, key)
        return self._to_user(record) if record else None

    def list_users(self) -> list[AuthenticatedUser]:
        return [self._to_user(r) for r in self._store.find_all(self._record_type)]

    def add_user(
        self,
        email: str,
        name: str,
        password: str,
        admin: bool = False,
    ) -> AuthenticatedUser:
        """Register a new user.

        Raises:
            DuplicateUserError: If the email is already registered
        """
        email = email.strip().lower()
        if self._store.find_one_by(self._record_type, "email", email):
            raise DuplicateUserError(f"A user with email {email} already exists")

        saved = self._store.save(
            self._record_type,
            {
                "id": None,
                "email": email,
                "name": name,
                "passwordHash": self._passwords.hash(password),
                "admin": 1 if admin else 0,
                "active": 1,
            },
        )
        logger.info("Registered user %s (admin=%s)", email, admin)
        return self._to_user(saved)

    def set_active(self, user_id: str, active: bool) -> AuthenticatedUser | None:
        """Enable or disable a user account."""
        record = self._store.find_by_id(self._record_type, int(user_id))
        if record is None:
            return None
        record["active"] = 1 if active else 0
        return self._to_user(self._store.save(self._record_type, record))

    def authenticate(self, email: str, password: str) -> AuthenticatedUser:
        """Verify credentials and return the user with resolved roles.

        Raises:
            AuthenticationError: Unknown email or wrong password
            AccountDisabledError: The account exists but is inactive
        """
        record = self._store.find_one_by(self._record_type, "email", email.strip().lower())
        if not record or not self._passwords.verify(password, record.get("passwordHash") or ""):
            raise AuthenticationError("Invalid email or password")

        user = self._to_user(record)
        if not user.active:
            raise AccountDisabledError("User account is disabled")

        if self._passwords.needs_rehash(record["passwordHash"]):
            record["passwordHash"] = self._passwords.hash(password)
            self._store.save(self._record_type, record)
            logger.info("Upgraded password hash for %s", user.email)
        return user
