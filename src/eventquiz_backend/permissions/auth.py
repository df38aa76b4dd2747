"""
Resolution of the request principal.

Tokens are issued by the identity provider and carry the principal id in the
``sub`` claim. A request without credentials is anonymous, which is a valid
principal for reads; an invalid or expired token is rejected.
"""

import datetime
import logging
from typing import Optional
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.orm import Session

from eventquiz_backend.api.exceptions import UnauthorizedException
from eventquiz_backend.database import bind_principal, get_db
from eventquiz_backend.permissions.principal import ANONYMOUS, Principal
from eventquiz_backend.settings import settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(user_id: str, email: Optional[str] = None, expires_in: int = 3600) -> str:
    """Issue a token the way the identity provider does. Used by the CLI and tests."""
    now = datetime.datetime.now(datetime.timezone.utc)
    claims = {
        "sub": user_id,
        "iat": now,
        "exp": now + datetime.timedelta(seconds=expires_in),
    }
    if email is not None:
        claims["email"] = email
    if settings.JWT_AUDIENCE:
        claims["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def principal_from_token(token: str) -> Principal:
    if not settings.JWT_SECRET:
        raise UnauthorizedException("Token verification is not configured")

    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    except ExpiredSignatureError:
        raise UnauthorizedException("Token expired")
    except JWTError as e:
        logger.info(f"Rejected token: {e}")
        raise UnauthorizedException("Invalid token")

    user_id = claims.get("sub")
    if not user_id:
        raise UnauthorizedException("Token has no subject")

    return Principal(user_id=str(user_id), email=claims.get("email"))


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    db: Session = Depends(get_db),
) -> Principal:
    if credentials is None:
        principal = ANONYMOUS
    else:
        principal = principal_from_token(credentials.credentials)

    bind_principal(db, principal.user_id)
    return principal
