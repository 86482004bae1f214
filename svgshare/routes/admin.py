from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
import logging

from svgshare.core.database import get_db
from svgshare.core.security import require_admin
from svgshare.models import User
from svgshare.schemas.user import (
    AdminUserListResponse,
    UserQuotaUpdate,
    UserResponse,
    UserStatusUpdate,
)
from svgshare.services.users import (
    MAX_STORAGE_LIMIT,
    VALID_ROLES,
    VALID_STATUSES,
    get_user_by_id,
    list_users,
    update_user_quota,
    update_user_status,
)

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/users", response_model=AdminUserListResponse)
async def get_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    role: str | None = Query(None),
    status_filter: str | None = Query(None, alias="status"),
    search: str | None = Query(None),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Paginated user list with role/status filters and substring search"""
    # The admin UI sends empty strings for "all"
    role = role or None
    status_filter = status_filter or None
    if role is not None and role not in VALID_ROLES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid role: {role}")
    if status_filter is not None and status_filter not in VALID_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid status: {status_filter}")

    users, total = list_users(
        db,
        role=role,
        status=status_filter,
        search=search,
        page=page,
        limit=limit,
    )
    return {"users": users, "total": total, "page": page, "limit": limit}


@router.patch("/users/{user_id}/status", response_model=UserResponse)
async def set_user_status(
    user_id: int,
    data: UserStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Approve, lock or unlock an account"""
    if data.status not in VALID_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")

    user = _get_user_or_404(db, user_id)
    if user.id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot change your own status")

    logger.info("Admin %s sets status of user %s to %s", admin.id, user.id, data.status)
    return update_user_status(db, user, data.status)


@router.patch("/users/{user_id}/quota", response_model=UserResponse)
async def set_user_quota(
    user_id: int,
    data: UserQuotaUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Set a user's storage limit in bytes"""
    limit = data.limit
    # bool is an int subclass; "true" is not a quota
    if isinstance(limit, bool) or not isinstance(limit, int) or not 0 <= limit <= MAX_STORAGE_LIMIT:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid quota")

    user = _get_user_or_404(db, user_id)
    logger.info("Admin %s sets quota of user %s to %s", admin.id, user.id, limit)
    return update_user_quota(db, user, limit)
