"""FastAPI dependencies for authentication."""

from typing import Callable

from fastapi import Request

from recordkeeper.auth.middleware import get_caller
from recordkeeper.auth.permissions import has_role_or_higher
from recordkeeper.auth.types import CallerContext
from recordkeeper.errors import AuthorizationDenied


def get_current_caller(request: Request) -> CallerContext | None:
    """Dependency to get the current caller context.

    This is a soft dependency - returns None if not authenticated. Record
    routes pass the result straight to their handler, which applies the
    authorization gate.
    """
    return get_caller(request)


def require_role(required_role: str) -> Callable[[Request], CallerContext]:
    """Create a dependency that requires a role or one above it in the hierarchy.

    Used by the supporting endpoints (current user, admin listings) that are
    not driven by a record handler.

    Example:
        @router.get("/admin/users")
        async def list_users(caller: CallerContext = Depends(require_role(ADMIN))):
            ...
    """

    def dependency(request: Request) -> CallerContext:
        caller = get_caller(request)
        if not caller or not caller.roles:
            raise AuthorizationDenied("access", reason="Authentication required")
        if not has_role_or_higher(caller, required_role):
            raise AuthorizationDenied(
                "access",
                reason=f"Insufficient permissions. Required role: {required_role}",
            )
        return caller

    return dependency
