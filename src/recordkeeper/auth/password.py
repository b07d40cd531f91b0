"""Password hashing for stored user accounts."""

from passlib.context import CryptContext


class PasswordService:
    """Hashes and verifies the ``passwordHash`` field of User records.

    bcrypt via passlib's CryptContext. Hashes made with a different work
    factor still verify, and ``needs_rehash`` reports them so the directory
    can upgrade them on the next successful login.
    """

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
            bcrypt__min_rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hash: str) -> bool:
        """Check a password; an empty or malformed stored hash never matches."""
        if not hash:
            return False
        try:
            return self._context.verify(password, hash)
        except ValueError:
            return False

    def needs_rehash(self, hash: str) -> bool:
        """True when a stored hash was made with other settings than the current ones."""
        return self._context.needs_update(hash)
