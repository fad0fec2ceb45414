"""Bearer-token identity: token issuing/verification and the current-user dependency.

Tokens are HS256 JWTs whose ``sub`` claim is a ``user_id``.  In production
they are minted by the identity provider that shares ``JWT_SECRET``;
``create_access_token`` exists for that provider and for tests.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from eventhub.config import Settings
from eventhub.database import get_db
from eventhub.models.user import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(user_id: str, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token for ``user_id`` using the configured secret and algorithm."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = {"sub": str(user_id), "exp": expire, "type": "access"}
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Optional[dict]:
    """Return the token claims, or None if the signature or expiry is invalid."""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to a User or fail with 401."""
    if credentials is None:
        raise _unauthorized("Not authenticated")

    claims = decode_access_token(credentials.credentials, request.app.state.settings)
    if not claims or not claims.get("sub"):
        raise _unauthorized("Invalid or expired token")

    user = db.query(User).filter(User.user_id == claims["sub"]).first()
    if not user:
        logger.warning("Token presented for unknown user %s", claims["sub"])
        raise _unauthorized("User no longer exists")
    return user
