"""Session tokens and route gates.

The session is an HS256 JWT carried in the http-only ``token`` cookie.
Gates are FastAPI dependencies: ``verify_token`` for any signed-in caller,
``require_role(...)`` when the caller's stored role matters.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Request, Response
from jose import ExpiredSignatureError, JWTError, jwt
from pymongo.database import Database

from config import get_settings
from database import USERS, get_db
from errors import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "token"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.access_token_expire_days)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.access_token_secret, algorithm=settings.access_token_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.access_token_secret, algorithms=[settings.access_token_algorithm])
    except ExpiredSignatureError:
        raise UnauthorizedError("expired")
    except JWTError:
        raise UnauthorizedError("invalid")


def set_token_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=int(timedelta(days=settings.access_token_expire_days).total_seconds()),
        httponly=True,
        secure=settings.is_production,
        samesite=settings.cookie_samesite,
    )


def clear_token_cookie(response: Response) -> None:
    settings = get_settings()
    # delete_cookie sends max-age=0 with the same attributes the cookie was set with
    response.delete_cookie(
        TOKEN_COOKIE,
        httponly=True,
        secure=settings.is_production,
        samesite=settings.cookie_samesite,
    )


def verify_token(request: Request) -> Dict[str, Any]:
    """Decoded claims of the caller's session token, or 401."""
    token = request.cookies.get(TOKEN_COOKIE)
    if not token:
        raise UnauthorizedError("missing")
    claims = decode_access_token(token)
    request.state.user = claims
    return claims


def require_role(*roles: str):
    """Dependency factory: caller's stored role must be one of ``roles``.

    The role is read from the users collection on every request, so a
    role change takes effect without a new token.
    """
    allowed = frozenset(roles)

    def check_role(
        claims: Dict[str, Any] = Depends(verify_token),
        db: Database = Depends(get_db),
    ) -> Dict[str, Any]:
        email = claims.get("email")
        user = db[USERS].find_one({"email": email}) if email else None
        role = user.get("role") if user else None
        if role not in allowed:
            logger.info(
                f"Role '{role}' rejected, need one of {sorted(allowed)}",
                extra={"email": email},
            )
            raise ForbiddenError(sorted(allowed), role)
        return claims

    check_role.__name__ = f"require_{'_or_'.join(sorted(allowed))}"
    return check_role


require_admin = require_role("admin")
require_creator = require_role("creator")
