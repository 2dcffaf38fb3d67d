"""Auth helpers for FastAPI endpoints.

Provides:
- `Principal` Pydantic model for the bearer token subject
- `issue_credential` to sign an HS256 JWT for an account
- `verify_jwt` to decode/validate such a JWT
- `get_current_user` FastAPI dependency using HTTP Bearer auth
"""

from datetime import datetime, timedelta, timezone

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from pydantic import BaseModel

from .errors import InvalidToken, MissingToken
from .logging import set_user_id

security = HTTPBearer(auto_error=False)

ALGORITHM = "HS256"


class Principal(BaseModel):
    """Authenticated caller extracted from a validated JWT."""
    user_id: str
    is_admin: bool = False


def issue_credential(account_id: str, is_admin: bool, secret: str, ttl_hours: int = 24) -> str:
    """Sign a bearer token binding `account_id` and the admin flag.

    There is no refresh or revocation: the token stays valid until `exp`.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": account_id,
        "userId": account_id,
        "isAdmin": bool(is_admin),
        "iat": now,
        "exp": now + timedelta(hours=ttl_hours),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def verify_jwt(token: str, secret: str) -> Principal:
    """Decode and validate a JWT and return a `Principal`.

    Validates signature (HS256) and expiration.

    Raises:
        InvalidToken: malformed, expired, or signed with another secret.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"require": ["exp"], "verify_exp": True},
        )
    except jwt.PyJWTError as e:
        raise InvalidToken(detail=str(e)) from e
    user_id = payload.get("userId") or payload.get("sub")
    if not user_id:
        raise InvalidToken(detail="token has no subject")
    return Principal(user_id=str(user_id), is_admin=bool(payload.get("isAdmin", False)))


async def get_current_user(
    request: Request, creds: HTTPAuthorizationCredentials | None = Depends(security)
) -> Principal:
    """FastAPI dependency to extract the current principal from Authorization header.

    The account id is stamped onto every log line written later in the request.

    Raises:
        MissingToken: no bearer credentials were sent.
        InvalidToken: the token did not validate.
    """
    if not creds or not creds.credentials:
        raise MissingToken()
    principal = verify_jwt(creds.credentials, request.app.state.settings.JWT_SECRET)
    set_user_id(principal.user_id)
    return principal
