"""Bearer tokens for tests.

Tokens are HS256 JWTs signed with TEST_JWT_SECRET, which the test_verifier
fixture accepts. Users referenced by a token's sub must still be created
with tests.factories.create_user before they can own anything.
"""

import time
from uuid import UUID

import jwt

TEST_JWT_SECRET = "photoreview-test-secret-not-for-production"
TOKEN_TTL_SECONDS = 3600


def mint_test_token(
    user_id: UUID | str,
    expires_in: int = TOKEN_TTL_SECONDS,
    secret: str = TEST_JWT_SECRET,
    **claims,
) -> str:
    """Sign a token for user_id; extra keyword arguments become claims.

    A negative expires_in gives an already-expired token.
    """
    issued_at = int(time.time())
    payload = {"sub": str(user_id), "iat": issued_at, "exp": issued_at + expires_in}
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


def mint_expired_token(user_id: UUID | str) -> str:
    return mint_test_token(user_id, expires_in=-TOKEN_TTL_SECONDS)


def mint_token_with_bad_signature(user_id: UUID | str) -> str:
    return mint_test_token(user_id, secret="a-different-secret-than-the-test-one")


def auth_headers(user_id: UUID | str, **token_kwargs) -> dict[str, str]:
    return {"Authorization": f"Bearer {mint_test_token(user_id, **token_kwargs)}"}
