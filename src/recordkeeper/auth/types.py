"""Type definitions for authentication."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CallerContext:
    """Identity and roles of the caller, passed explicitly into every handler call.

    Attributes:
        user_id: The authenticated user's ID
        email: The user's email address
        roles: Role names resolved for this request ("USER", "ADMIN")
    """

    user_id: str | None = None
    email: str | None = None
    roles: frozenset[str] = field(default_factory=frozenset)

    def has_role(self, role: str) -> bool:
        return role in self.roles


@dataclass
class TokenClaims:
    """Claims embedded in a JWT token.

    Attributes:
        user_id: The authenticated user's ID
        email: The user's email address
        roles: Roles granted when the token was issued
        exp: Token expiration timestamp
        iat: Token issued-at timestamp
        type: Token type (only "access" is issued)
    """

    user_id: str
    email: str | None = None
    roles: list[str] = field(default_factory=list)
    exp: int = 0
    iat: int = 0
    type: str = "access"

    def to_caller(self) -> CallerContext:
        return CallerContext(
            user_id=self.user_id,
            email=self.email,
            roles=frozenset(self.roles),
        )


@dataclass
class AccessToken:
    """A signed access token handed out at login.

    Attributes:
        access_token: Token for API access
        token_type: Always "Bearer"
        expires_in: Access token TTL in seconds
    """

    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 3600


@dataclass
class AuthenticatedUser:
    """A registered user, as returned by the user directory."""

    user_id: str
    email: str
    name: str
    admin: bool = False
    active: bool = True
    roles: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            "id": self.user_id,
            "email": self.email,
            "name": self.name,
            "admin": self.admin,
            "active": self.active,
            "roles": self.roles,
        }
