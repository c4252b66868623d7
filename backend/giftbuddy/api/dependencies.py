"""
Request dependencies: bearer-token identity and the caller capability.
"""
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from giftbuddy.core.exceptions import NotFoundError
from giftbuddy.core.security import decode_access_token
from giftbuddy.db.session import get_db
from giftbuddy.services.capability import Caller, resolve_caller

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """Verify the identity-provider token and return its subject."""
    if credentials is None:
        raise _unauthorized("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise _unauthorized("Could not validate credentials")
    return payload["sub"]


def get_caller(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> Caller:
    """Resolve the caller's role once for the whole request."""
    try:
        return resolve_caller(user_id, db)
    except NotFoundError:
        raise _unauthorized("User profile not found")
