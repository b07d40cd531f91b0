"""JWT token generation and validation service."""

import time

import jwt

from recordkeeper.auth.types import AccessToken, TokenClaims


class JWTError(Exception):
    """Base exception for JWT-related errors."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid or malformed."""

    pass


class JWTService:
    """Service for generating and validating JWT tokens.

    Uses HS256 algorithm with a shared secret key.
    """

    ACCESS_TOKEN_TTL = 60 * 60  # 1 hour

    def __init__(self, secret_key: str, algorithm: str = "HS256", ttl: int | None = None):
        """Initialize the JWT service.

        Args:
            secret_key: Secret key for signing tokens (should be at least 32 chars)
            algorithm: JWT algorithm (default HS256)
            ttl: Access token lifetime in seconds
        """
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._ttl = ttl if ttl is not None else self.ACCESS_TOKEN_TTL

    def generate_access_token(
        self,
        user_id: str,
        roles: list[str],
        email: str | None = None,
    ) -> AccessToken:
        """Generate a signed access token carrying the user's roles.

        Args:
            user_id: The authenticated user's ID
            roles: Roles resolved for the user at login time
            email: Optional email to include in the token

        Returns:
            AccessToken with the encoded JWT
        """
        now = int(time.time())

        claims = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + self._ttl,
            "type": "access",
            "roles": list(roles),
        }
        if email:
            claims["email"] = email

        token = jwt.encode(claims, self._secret_key, algorithm=self._algorithm)
        return AccessToken(access_token=token, expires_in=self._ttl)

    def decode_token(self, token: str) -> TokenClaims:
        """Decode and validate a JWT token.

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the token is invalid or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        roles = payload.get("roles") or []
        if not isinstance(roles, list):
            raise InvalidTokenError("Invalid token: roles claim must be a list")

        return TokenClaims(
            user_id=payload.get("sub", ""),
            email=payload.get("email"),
            roles=[str(r) for r in roles],
            exp=payload.get("exp", 0),
            iat=payload.get("iat", 0),
            type=payload.get("type", "access"),
        )
