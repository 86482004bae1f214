from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from svgshare.core.config import settings
from svgshare.models import SvgFile, User, UserRole, UserStatus

logger = logging.getLogger(__name__)

VALID_ROLES = {role.value for role in UserRole}
VALID_STATUSES = {item.value for item in UserStatus}

# storage_limit is a signed 64-bit column
MAX_STORAGE_LIMIT = 2**63 - 1


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_github_id(db: Session, github_id: str) -> User | None:
    return db.query(User).filter(User.github_id == str(github_id)).first()


def create_user(
    db: Session,
    github_id: str,
    username: str,
    avatar_url: str | None,
    *,
    role: str = UserRole.USER.value,
    status: str = UserStatus.PENDING.value,
) -> User:
    user = User(
        github_id=str(github_id),
        username=username,
        avatar_url=avatar_url,
        role=role,
        status=status,
        storage_limit=settings.DEFAULT_STORAGE_LIMIT,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user: userId=%s username=%s role=%s status=%s", user.id, username, role, status)
    return user


def _is_bootstrap_admin(github_id: str, username: str) -> bool:
    if str(github_id) in settings.ADMIN_GITHUB_IDS:
        return True
    return username.lower() in {name.lower() for name in settings.ADMIN_USERNAMES}


def _initial_role_and_status(github_id: str, username: str) -> tuple[str, str]:
    if _is_bootstrap_admin(github_id, username):
        return UserRole.ADMIN.value, UserStatus.ACTIVE.value
    if settings.AUTO_APPROVE_USERS:
        return UserRole.USER.value, UserStatus.ACTIVE.value
    return UserRole.USER.value, UserStatus.PENDING.value


def update_user_profile(db: Session, user: User, username: str, avatar_url: str | None) -> User:
    """Keep username/avatar in sync with the provider; role and status are untouched."""
    changed = False
    if username and user.username != username:
        user.username = username
        changed = True
    if avatar_url and user.avatar_url != avatar_url:
        user.avatar_url = avatar_url
        changed = True
    if changed:
        db.commit()
        db.refresh(user)
    return user


def get_or_create_user_from_profile(db: Session, profile: dict[str, Any]) -> User:
    """Local user for a provider profile, created on first login."""
    github_id = str(profile["id"])
    username = str(profile.get("login") or f"user-{github_id}")
    avatar_url = profile.get("avatar_url")

    user = get_user_by_github_id(db, github_id)
    if user is not None:
        return update_user_profile(db, user, username, avatar_url)

    role, status = _initial_role_and_status(github_id, username)
    return create_user(db, github_id, username, avatar_url, role=role, status=status)


def get_storage_usage(db: Session, user_id: int) -> int:
    total = db.query(func.coalesce(func.sum(SvgFile.size), 0)).filter(SvgFile.user_id == user_id).scalar()
    return int(total or 0)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _apply_user_filters(query, role: str | None, status: str | None, search: str | None):
    if role:
        query = query.filter(User.role == role)
    if status:
        query = query.filter(User.status == status)
    if search and search.strip():
        term = f"%{_escape_like(search.strip().lower())}%"
        query = query.filter(
            or_(
                func.lower(User.username).like(term, escape="\\"),
                User.github_id.like(term, escape="\\"),
            )
        )
    return query


def list_users(
    db: Session,
    *,
    role: str | None = None,
    status: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[dict[str, Any]], int]:
    """
    One page of users, newest first, plus the total matching the same filters.

    Rows are dicts carrying total_storage_used next to the user columns.
    """
    page = max(1, int(page))
    limit = max(1, int(limit))

    usage = (
        db.query(SvgFile.user_id.label("user_id"), func.sum(SvgFile.size).label("used"))
        .group_by(SvgFile.user_id)
        .subquery()
    )

    rows_query = db.query(User, func.coalesce(usage.c.used, 0)).outerjoin(usage, usage.c.user_id == User.id)
    rows_query = _apply_user_filters(rows_query, role, status, search)
    rows = (
        rows_query.order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    count_query = _apply_user_filters(db.query(func.count(User.id)), role, status, search)
    total = int(count_query.scalar() or 0)

    users = []
    for user, used in rows:
        item = user_to_dict(user)
        item["total_storage_used"] = int(used or 0)
        users.append(item)
    return users, total


def update_user_status(db: Session, user: User, status: str) -> User:
    if status not in VALID_STATUSES:
        raise ValueError(f"Invalid status: {status}")
    previous = user.status
    user.status = status
    db.commit()
    db.refresh(user)
    logger.info("User status changed: userId=%s %s -> %s", user.id, previous, status)
    return user


def update_user_quota(db: Session, user: User, limit: int) -> User:
    if limit < 0 or limit > MAX_STORAGE_LIMIT:
        raise ValueError(f"Quota must be between 0 and {MAX_STORAGE_LIMIT} bytes")
    user.storage_limit = int(limit)
    db.commit()
    db.refresh(user)
    logger.info("User quota changed: userId=%s limit=%s", user.id, limit)
    return user


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "github_id": user.github_id,
        "username": user.username,
        "avatar_url": user.avatar_url,
        "role": user.role,
        "status": user.status,
        "storage_limit": user.storage_limit,
        "created_at": user.created_at,
    }
