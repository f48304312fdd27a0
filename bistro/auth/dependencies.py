import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bistro.auth import jwt_handler
from bistro.database import database_unavailable, get_db
from bistro.models.user import User, UserRole

logger = logging.getLogger(__name__)

# Missing credentials are reported by get_current_claims as 401, not by HTTPBearer.
security = HTTPBearer(auto_error=False)

UNAUTHORIZED_DETAIL = "unauthorized access"
FORBIDDEN_DETAIL = "forbidden access"


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=UNAUTHORIZED_DETAIL,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _forbidden() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN_DETAIL)


def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict:
    if credentials is None:
        raise _unauthorized()

    try:
        claims = jwt_handler.verify_token(credentials.credentials)
    except jwt_handler.TokenExpiredError as exc:
        logger.info("Rejected expired token")
        raise _unauthorized() from exc
    except jwt_handler.TokenError as exc:
        logger.info("Rejected invalid token: %s", exc)
        raise _unauthorized() from exc

    if not claims.get("email"):
        raise _unauthorized()
    return claims


def is_admin(user: User | None) -> bool:
    return user is not None and user.role == UserRole.ADMIN.value


def require_admin(
    claims: dict = Depends(get_current_claims),
    db: Session = Depends(get_db),
) -> User:
    email = normalize_email(claims.get("email"))
    try:
        user = db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as exc:
        logger.exception("Admin lookup failed for %s", email)
        raise database_unavailable() from exc

    if user is None:
        logger.warning("Admin access denied: no user record for %s", email)
        raise _forbidden()
    if not is_admin(user):
        logger.warning("Admin access denied: %s has role %s", email, user.role)
        raise _forbidden()
    return user


def require_self(email: str, claims: dict) -> str:
    """Ensure the caller is asking about their own account.

    This is an identity check only; the stored role is never consulted.
    """
    requested = normalize_email(email)
    if requested != normalize_email(claims.get("email")):
        raise _forbidden()
    return requested
