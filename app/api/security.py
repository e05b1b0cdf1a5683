from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.errors import Unauthorized
from app.services.auth_service import resolve_user_id


_http_bearer = HTTPBearer(auto_error=False)


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def identity_from_header(authorization: Optional[str]) -> str:
    """Resolve the caller of a relay request.

    Raises ``Unauthorized`` rather than HTTPException so the relay can fold it
    into its uniform error envelope.
    """
    if not authorization:
        raise Unauthorized("Missing authorization header")

    token = _extract_bearer_token(authorization)
    user_id = resolve_user_id(token) if token else None
    if not user_id:
        raise Unauthorized("Unauthorized")
    return user_id


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_http_bearer),
) -> str:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Not authenticated")

    user_id = resolve_user_id(credentials.credentials)
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id
