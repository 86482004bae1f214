from __future__ import annotations

import logging
from typing import Any, Callable

from sqlalchemy.orm import Session

from svgshare.models import Share, SvgFile, generate_share_token

logger = logging.getLogger(__name__)


def get_share_by_file_id(db: Session, file_id: int) -> Share | None:
    return db.query(Share).filter(Share.file_id == file_id).first()


def create_share(db: Session, file_id: int) -> Share:
    share = Share(file_id=file_id, share_id=generate_share_token(), is_enabled=1, visit_count=0)
    db.add(share)
    db.commit()
    db.refresh(share)
    logger.info("Share created: fileId=%s shareId=%s", file_id, share.share_id)
    return share


def set_share_enabled(db: Session, file_id: int, enabled: bool) -> Share | None:
    """Enable or disable a file's share; None when the file was never shared."""
    share = get_share_by_file_id(db, file_id)
    if share is None:
        return None
    share.is_enabled = 1 if enabled else 0
    db.commit()
    db.refresh(share)
    logger.info("Share toggled: fileId=%s enabled=%s", file_id, share.is_enabled)
    return share


def create_or_toggle_share(db: Session, file_id: int, enable: bool | None = None) -> Share:
    """
    First call creates an enabled share. Later calls set the requested state,
    or flip the current one when no state is given. The token never changes.
    """
    existing = get_share_by_file_id(db, file_id)
    if existing is None:
        return create_share(db, file_id)
    new_state = enable if enable is not None else not bool(existing.is_enabled)
    return set_share_enabled(db, file_id, new_state)


def get_enabled_share(db: Session, share_id: str) -> dict[str, Any] | None:
    """Enabled share joined with its file; None when unknown or disabled."""
    row = (
        db.query(Share, SvgFile)
        .join(SvgFile, Share.file_id == SvgFile.id)
        .filter(Share.share_id == share_id, Share.is_enabled == 1)
        .first()
    )
    if row is None:
        return None
    share, record = row
    return {
        "id": share.id,
        "file_id": share.file_id,
        "share_id": share.share_id,
        "is_enabled": share.is_enabled,
        "visit_count": share.visit_count,
        "created_at": share.created_at,
        "filename": record.filename,
        "size": record.size,
        "width": record.width,
        "height": record.height,
        "updated_at": record.updated_at,
        "r2_key": record.r2_key,
        "user_id": record.user_id,
    }


def increment_visit_count(db: Session, share_id: str) -> None:
    db.query(Share).filter(Share.share_id == share_id).update(
        {Share.visit_count: Share.visit_count + 1},
        synchronize_session=False,
    )
    db.commit()


def record_visit(session_factory: Callable[[], Session], share_id: str) -> None:
    """
    Background task run after the public response is sent.

    Uses its own session; failures are logged and dropped, never retried.
    """
    db = session_factory()
    try:
        increment_visit_count(db, share_id)
    except Exception:
        db.rollback()
        logger.exception("Failed to record share visit: shareId=%s", share_id)
    finally:
        db.close()
