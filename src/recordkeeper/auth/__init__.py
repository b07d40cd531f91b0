"""Authentication and authorization for recordkeeper."""

from recordkeeper.auth.types import (
    AccessToken,
    AuthenticatedUser,
    CallerContext,
    TokenClaims,
)
from recordkeeper.auth.password import PasswordService
from recordkeeper.auth.jwt_service import JWTService
from recordkeeper.auth.middleware import AuthMiddleware, get_caller
from recordkeeper.auth.dependencies import get_current_caller, require_role
from recordkeeper.auth.permissions import (
    ADMIN,
    POLICY,
    ROLE_HIERARCHY,
    USER,
    Operation,
    allow,
    authorize,
)
from recordkeeper.auth.users import UserDirectory

__all__ = [
    "AccessToken",
    "AuthenticatedUser",
    "CallerContext",
    "TokenClaims",
    "PasswordService",
    "JWTService",
    "AuthMiddleware",
    "get_caller",
    "get_current_caller",
    "require_role",
    "ADMIN",
    "POLICY",
    "ROLE_HIERARCHY",
    "USER",
    "Operation",
    "allow",
    "authorize",
    "UserDirectory",
]
