from datetime import datetime, timedelta
from typing import Optional
import logging

from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.responses import Response
from starlette.requests import Request
from sqlalchemy.orm import Session

from svgshare.core.config import settings
from svgshare.core.database import get_db
from svgshare.models import User, UserStatus

logger = logging.getLogger(__name__)

SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}


def create_session_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Signed session token bound to a local user id"""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)
    expire = datetime.utcnow() + expires_delta
    to_encode = {"sub": str(user_id), "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_session_token(token: Optional[str]) -> Optional[int]:
    """User id from a session token; None when missing, tampered, malformed or expired."""
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None

    subject = payload.get("sub")
    if subject is None:
        return None
    try:
        return int(subject)
    except (TypeError, ValueError):
        return None


def set_session_cookie(response: Response, user_id: int) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=create_session_token(user_id),
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )


def get_session_user_id(request: Request) -> Optional[int]:
    return decode_session_token(request.cookies.get(settings.SESSION_COOKIE_NAME))


async def get_session_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """User bound to the session cookie, regardless of account status."""
    user_id = get_session_user_id(request)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


async def get_unlocked_user(
    request: Request,
    user: User = Depends(get_session_user),
) -> User:
    """Session user whose account is not locked."""
    if user.status == UserStatus.LOCKED.value:
        logger.info("Rejected locked user: userId=%s %s %s", user.id, request.method, request.url.path)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account locked")
    return user


def ensure_can_write(user: User, method: str) -> None:
    """Pending accounts may only use safe methods."""
    if user.status == UserStatus.PENDING.value and method.upper() not in SAFE_METHODS:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account pending approval")


async def get_current_user(
    request: Request,
    user: User = Depends(get_unlocked_user),
) -> User:
    """
    Session user allowed to use the protected API.

    Locked accounts are refused outright; pending accounts may only read.
    """
    ensure_can_write(user, request.method)
    return user


async def require_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin only")
    return current_user
