from datetime import datetime, timedelta, timezone

import jwt

from bistro.core import config

_TIMING_CLAIMS = ("iat", "exp")


class TokenError(Exception):
    """Base class for tokens that cannot be trusted."""


class InvalidTokenError(TokenError):
    """Token is empty, malformed or carries a bad signature."""


class TokenExpiredError(TokenError):
    """Token signature is fine but its lifetime is over."""


def issue_token(
    claims: dict,
    expires_minutes: int | None = None,
    issued_at: datetime | None = None,
) -> str:
    if not claims.get("email"):
        raise ValueError("Token claims must include an email.")

    issued = issued_at or datetime.now(timezone.utc)
    expire = issued + timedelta(minutes=expires_minutes or config.JWT_EXPIRES_MINUTES)
    payload = {**claims, "iat": issued, "exp": expire}
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def verify_token(token: str | None) -> dict:
    if not token:
        raise InvalidTokenError("Token is missing.")
    try:
        payload = jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("Token has expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError(str(exc)) from exc

    return {key: value for key, value in payload.items() if key not in _TIMING_CLAIMS}
