"""Authentication middleware for FastAPI."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from recordkeeper.auth.jwt_service import JWTError, JWTService
from recordkeeper.auth.types import CallerContext

logger = logging.getLogger(__name__)


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that extracts JWT from Authorization header and sets the caller context.

    The middleware:
    1. Extracts Bearer token from Authorization header
    2. Decodes and validates the JWT
    3. Sets request.state.caller with the resolved CallerContext

    If no token is present or the token is invalid, caller is set to None.
    The middleware does NOT reject requests; the authorization gate does.
    """

    def __init__(self, app, jwt_service: JWTService):
        super().__init__(app)
        self._jwt_service = jwt_service

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process the request and extract authentication info."""
        request.state.caller = None

        if self._should_skip_auth(request.url.path):
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            token = auth_header[7:]  # Remove "Bearer " prefix
            try:
                claims = self._jwt_service.decode_token(token)
                if claims.type == "access":
                    request.state.caller = claims.to_caller()
            except JWTError as e:
                # Invalid token - leave caller as None
                logger.debug("Rejected bearer token: %s", e)

        return await call_next(request)

    def _should_skip_auth(self, path: str) -> bool:
        """Check if a path should skip authentication processing."""
        skip_paths = [
            "/api/auth/login",
            "/docs",
            "/openapi.json",
            "/redoc",
        ]
        return any(path.startswith(p) for p in skip_paths)


def get_caller(request: Request) -> CallerContext | None:
    """Get the caller context from the request state.

    Returns:
        CallerContext if authenticated, None otherwise
    """
    return getattr(request.state, "caller", None)
