"""Bearer token verification.

Tokens are issued elsewhere (the login service) as HS256 JWTs signed with
the shared JWT_SECRET. This module only verifies them:

- signature, HS256 only
- exp, with 60s leeway for clock skew
- iss, only when an issuer is configured
- aud, only when audiences are configured
- sub present and a UUID (it becomes the viewer's user id)
"""

import logging
from typing import Any, Protocol
from uuid import UUID

import jwt
from jwt.exceptions import (
    DecodeError,
    ExpiredSignatureError,
    InvalidAudienceError,
    InvalidIssuerError,
    InvalidSignatureError,
    InvalidTokenError,
)

from photoreview.errors import ApiError, ApiErrorCode

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
CLOCK_SKEW_SECONDS = 60

# Most specific first: every entry is a subclass of InvalidTokenError
_FAILURES: list[tuple[type[InvalidTokenError], str, str]] = [
    (ExpiredSignatureError, "expired_token", "Token expired"),
    (InvalidSignatureError, "invalid_signature", "Invalid token signature"),
    (InvalidIssuerError, "invalid_issuer", "Invalid token issuer"),
    (InvalidAudienceError, "invalid_audience", "Invalid token audience"),
    (DecodeError, "decode_error", "Invalid token format"),
    (InvalidTokenError, "invalid_token", "Invalid token"),
]


class TokenVerifier(Protocol):
    """Anything that turns a bearer token into verified claims."""

    def verify(self, token: str) -> dict[str, Any]:
        """Return the token's claims.

        Raises:
            ApiError(E_UNAUTHENTICATED): The token is not acceptable.
        """
        ...


def _reject(reason: str, message: str) -> ApiError:
    logger.warning("auth_failure", extra={"reason": reason})
    return ApiError(ApiErrorCode.E_UNAUTHENTICATED, message)


class JwtVerifier:
    """HS256 verifier backed by a shared secret."""

    def __init__(
        self,
        secret: str,
        issuer: str | None = None,
        audiences: list[str] | None = None,
    ):
        self.secret = secret
        self.issuer = issuer.rstrip("/") if issuer else None
        self.audiences = list(audiences or [])

    def _decode(self, token: str) -> dict[str, Any]:
        required = ["exp", "sub", "iss"] if self.issuer else ["exp", "sub"]
        return jwt.decode(
            token,
            self.secret,
            algorithms=[JWT_ALGORITHM],
            audience=self.audiences or None,
            issuer=self.issuer,
            leeway=CLOCK_SKEW_SECONDS,
            options={"require": required, "verify_aud": bool(self.audiences)},
        )

    def verify(self, token: str) -> dict[str, Any]:
        try:
            claims = self._decode(token)
        except InvalidTokenError as e:
            reason, message = next((r, m) for cls, r, m in _FAILURES if isinstance(e, cls))
            raise _reject(reason, message) from e

        try:
            UUID(claims["sub"])
        except (ValueError, TypeError, AttributeError) as e:
            raise _reject("invalid_sub", "Invalid token: sub is not a valid UUID") from e

        return claims
