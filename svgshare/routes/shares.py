"""
Public share access: metadata for the share page and the raw SVG.

No session is required; only enabled shares resolve.
"""
from urllib.parse import quote
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy.orm import Session, sessionmaker

from svgshare.core.database import get_db, get_session_factory
from svgshare.core.storage import get_object
from svgshare.schemas.share import PublicShareResponse
from svgshare.services.shares import get_enabled_share, record_visit

router = APIRouter()
raw_router = APIRouter()
logger = logging.getLogger(__name__)

# Shared SVGs come from arbitrary users; never let them run script
RAW_CSP = "default-src 'none'; style-src 'unsafe-inline'; img-src data:; font-src data:; sandbox"


@router.get("/{share_id}", response_model=PublicShareResponse)
async def get_share_info(
    share_id: str,
    db: Session = Depends(get_db),
):
    """Public metadata for an enabled share"""
    share = get_enabled_share(db, share_id)
    if share is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    return share


@raw_router.get("/{share_id}")
async def get_shared_raw(
    share_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """Raw SVG behind a share link; the visit is counted after the response"""
    share = get_enabled_share(db, share_id)
    if share is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found or Disabled")

    background_tasks.add_task(record_visit, session_factory, share_id)

    stored = get_object(share["user_id"], share["r2_key"])
    if stored is None:
        logger.warning("Shared file missing from storage: shareId=%s fileId=%s", share_id, share["file_id"])
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File Missing")

    return Response(
        content=stored.body,
        media_type=stored.content_type,
        headers={
            "ETag": stored.etag,
            "Content-Disposition": f"inline; filename*=UTF-8''{quote(share['filename'])}",
            "Content-Security-Policy": RAW_CSP,
            "X-Content-Type-Options": "nosniff",
        },
    )
