"""Authentication and account API endpoints."""

from typing import Any, Callable

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from recordkeeper.auth.dependencies import require_role
from recordkeeper.auth.jwt_service import JWTService
from recordkeeper.auth.permissions import ADMIN, USER
from recordkeeper.auth.types import CallerContext
from recordkeeper.auth.users import AccountDisabledError, AuthenticationError, UserDirectory


class LoginRequest(BaseModel):
    """Request body for login."""

    email: str
    password: str


class LoginResponse(BaseModel):
    """Response body for login."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int


def create_auth_router(
    jwt_service: JWTService,
    get_directory: Callable[[], UserDirectory | None],
) -> APIRouter:
    """Create the auth router with injected dependencies.

    Args:
        jwt_service: JWT service for token operations
        get_directory: Function returning the user directory

    Returns:
        Configured APIRouter
    """
    router = APIRouter(prefix="/api", tags=["auth"])

    def _directory() -> UserDirectory:
        directory = get_directory()
        if not directory:
            raise HTTPException(500, "Service not initialized")
        return directory

    @router.post("/auth/login", response_model=LoginResponse)
    async def login(request: LoginRequest) -> LoginResponse:
        """Authenticate a user and return an access token.

        Raises:
            HTTPException 401 if credentials invalid
            HTTPException 403 if user inactive
        """
        try:
            user = _directory().authenticate(request.email, request.password)
        except AuthenticationError as e:
            raise HTTPException(401, str(e))
        except AccountDisabledError as e:
            raise HTTPException(403, str(e))

        token = jwt_service.generate_access_token(
            user_id=user.user_id,
            roles=user.roles,
            email=user.email,
        )
        return LoginResponse(
            access_token=token.access_token,
            token_type=token.token_type,
            expires_in=token.expires_in,
        )

    @router.get("/currentUser")
    async def current_user(
        caller: CallerContext = Depends(require_role(USER)),
    ) -> dict[str, Any]:
        """Return the caller's identity and roles."""
        user = _directory().get_user(caller.user_id) if caller.user_id else None
        return {
            "user": user.to_dict() if user else {"id": caller.user_id, "email": caller.email},
            "roles": sorted(caller.roles),
        }

    @router.get("/admin/users")
    async def list_users(
        caller: CallerContext = Depends(require_role(ADMIN)),
    ) -> list[dict[str, Any]]:
        """List every registered user."""
        return [u.to_dict() for u in _directory().list_users()]

    return router
