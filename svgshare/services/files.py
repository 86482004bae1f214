from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from svgshare.models import Share, SvgFile, User
from svgshare.services.users import get_storage_usage

logger = logging.getLogger(__name__)


class QuotaExceededError(ValueError):
    """Write would push a user past their storage limit."""


def new_storage_key() -> str:
    return uuid.uuid4().hex


def ensure_quota(db: Session, user: User, incoming_size: int, replacing_size: int = 0) -> None:
    """Raise QuotaExceededError when usage - replacing_size + incoming_size exceeds the limit."""
    used = get_storage_usage(db, user.id)
    projected = used - replacing_size + incoming_size
    if projected > user.storage_limit:
        logger.info(
            "Quota exceeded: userId=%s used=%s incoming=%s limit=%s",
            user.id,
            used,
            incoming_size,
            user.storage_limit,
        )
        raise QuotaExceededError("Storage quota exceeded")


def create_file(
    db: Session,
    user_id: int,
    filename: str,
    size: int,
    r2_key: str,
    width: int,
    height: int,
) -> SvgFile:
    record = SvgFile(
        user_id=user_id,
        filename=filename,
        size=size,
        r2_key=r2_key,
        width=width,
        height=height,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def list_files_for_user(db: Session, user_id: int) -> list[dict[str, Any]]:
    """Files owned by a user, newest first, with their share state."""
    rows = (
        db.query(SvgFile, Share)
        .outerjoin(Share, Share.file_id == SvgFile.id)
        .filter(SvgFile.user_id == user_id)
        .order_by(SvgFile.created_at.desc(), SvgFile.id.desc())
        .all()
    )
    result = []
    for record, share in rows:
        item = file_to_dict(record)
        item["share_enabled"] = share.is_enabled if share else None
        item["share_id"] = share.share_id if share else None
        item["visit_count"] = share.visit_count if share else None
        result.append(item)
    return result


def get_file(db: Session, file_id: int) -> SvgFile | None:
    return db.query(SvgFile).filter(SvgFile.id == file_id).first()


def get_owned_file(db: Session, file_id: int, user_id: int) -> SvgFile | None:
    """The file, only when it belongs to user_id."""
    return db.query(SvgFile).filter(SvgFile.id == file_id, SvgFile.user_id == user_id).first()


def rename_file(db: Session, record: SvgFile, filename: str) -> SvgFile:
    record.filename = filename
    record.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(record)
    return record


def replace_file_content(db: Session, record: SvgFile, size: int, width: int, height: int) -> SvgFile:
    record.size = size
    record.width = width
    record.height = height
    record.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(record)
    return record


def delete_file(db: Session, record: SvgFile) -> None:
    """Remove the file row and its share (relationship cascade); the blob is the caller's job."""
    db.delete(record)
    db.commit()


def file_to_dict(record: SvgFile) -> dict[str, Any]:
    return {
        "id": record.id,
        "user_id": record.user_id,
        "filename": record.filename,
        "size": record.size,
        "r2_key": record.r2_key,
        "width": record.width,
        "height": record.height,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }
