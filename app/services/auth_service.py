import datetime as dt
from typing import Any, Optional

from jose import JWTError, jwt

from app.core.config import settings


# Tokens are minted by the external identity provider; this service only
# verifies them. create_access_token exists for local development and tests.


def create_access_token(*, subject: str, expires_minutes: int = 60, audience: Optional[str] = None) -> str:
    now = dt.datetime.now(dt.timezone.utc)
    expire = now + dt.timedelta(minutes=int(expires_minutes))

    payload: dict[str, Any] = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    aud = audience if audience is not None else settings.JWT_AUDIENCE
    if aud:
        payload["aud"] = aud
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    options = {"verify_aud": bool(settings.JWT_AUDIENCE)}
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    except JWTError as e:
        raise ValueError("Invalid token") from e


def resolve_user_id(token: str) -> Optional[str]:
    """Return the caller's user id (the token subject), or None if the token is unusable."""
    try:
        payload = decode_token(token)
    except ValueError:
        return None
    sub = payload.get("sub")
    return str(sub) if sub else None
