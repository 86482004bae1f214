from urllib.parse import quote
import logging

from fastapi import APIRouter, Body, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from svgshare.core.config import settings
from svgshare.core.database import get_db
from svgshare.core.security import ensure_can_write, get_current_user, get_unlocked_user
from svgshare.core.storage import delete_object, get_object, put_object
from svgshare.models import SvgFile, User
from svgshare.schemas.file import FileListItem, FileRename, FileResponse
from svgshare.schemas.share import ShareResponse, ShareToggle
from svgshare.services.files import (
    QuotaExceededError,
    create_file,
    delete_file,
    ensure_quota,
    get_owned_file,
    list_files_for_user,
    new_storage_key,
    rename_file,
    replace_file_content,
)
from svgshare.services.shares import create_or_toggle_share
from svgshare.services.svg import SvgValidationError, parse_dimensions, validate_svg_upload

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_FILENAME_LENGTH = 255


async def _read_svg_upload(file: UploadFile | None) -> tuple[bytes, str]:
    """Upload bytes and decoded text; 400 for anything that is not a small SVG."""
    data = None
    if file is not None:
        # One byte past the limit is enough to reject
        data = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    try:
        text = validate_svg_upload(
            file.filename if file is not None else None,
            file.content_type if file is not None else None,
            data,
            settings.MAX_UPLOAD_BYTES,
        )
    except SvgValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return data, text


def _get_owned_or_404(db: Session, file_id: int, user: User) -> SvgFile:
    record = get_owned_file(db, file_id, user.id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    return record


@router.get("", response_model=list[FileListItem])
async def list_files(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Own files, newest first"""
    return list_files_for_user(db, current_user.id)


@router.post("", response_model=FileResponse)
async def upload_file(
    request: Request,
    file: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_unlocked_user),
):
    """Upload a new SVG (multipart field "file")"""
    data, text = await _read_svg_upload(file)
    ensure_can_write(current_user, request.method)

    try:
        ensure_quota(db, current_user, len(data))
    except QuotaExceededError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    r2_key = new_storage_key()
    try:
        put_object(current_user.id, r2_key, data)
    except Exception as e:
        logger.exception("Upload to storage failed: userId=%s", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Upload failed: {e}",
        )

    width, height = parse_dimensions(text)
    try:
        record = create_file(db, current_user.id, file.filename, len(data), r2_key, width, height)
    except Exception:
        # No row will ever point at the blob
        delete_object(current_user.id, r2_key)
        raise
    logger.info("File uploaded: fileId=%s userId=%s size=%s", record.id, current_user.id, record.size)
    return record


@router.delete("/{file_id}")
async def remove_file(
    file_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a file, its blob and its share"""
    record = _get_owned_or_404(db, file_id, current_user)

    if not delete_object(current_user.id, record.r2_key):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Storage delete failed")
    delete_file(db, record)
    logger.info("File deleted: fileId=%s userId=%s", file_id, current_user.id)
    return {"success": True}


@router.get("/{file_id}/content")
async def get_file_content(
    file_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Raw SVG for the owner's preview"""
    record = _get_owned_or_404(db, file_id, current_user)

    stored = get_object(current_user.id, record.r2_key)
    if stored is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File Missing")

    return Response(
        content=stored.body,
        media_type=stored.content_type,
        headers={
            "ETag": stored.etag,
            "Cache-Control": "private, no-cache",
            "Content-Disposition": f"inline; filename*=UTF-8''{quote(record.filename)}",
            "X-Content-Type-Options": "nosniff",
        },
    )


@router.put("/{file_id}/content", response_model=FileResponse)
async def replace_content(
    file_id: int,
    request: Request,
    file: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_unlocked_user),
):
    """Overwrite a file's content in place (same storage key)"""
    data, text = await _read_svg_upload(file)
    ensure_can_write(current_user, request.method)
    record = _get_owned_or_404(db, file_id, current_user)

    try:
        ensure_quota(db, current_user, len(data), replacing_size=record.size)
    except QuotaExceededError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    try:
        put_object(current_user.id, record.r2_key, data)
    except Exception as e:
        logger.exception("Content replace failed: fileId=%s", file_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Upload failed: {e}",
        )

    width, height = parse_dimensions(text)
    record = replace_file_content(db, record, len(data), width, height)
    logger.info("File content replaced: fileId=%s size=%s", file_id, record.size)
    return record


@router.patch("/{file_id}", response_model=FileResponse)
async def rename(
    file_id: int,
    data: FileRename,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Rename a file"""
    record = _get_owned_or_404(db, file_id, current_user)

    new_name = (data.filename or "").strip()
    if not new_name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Filename required")
    if len(new_name) > MAX_FILENAME_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Filename longer than {MAX_FILENAME_LENGTH} characters",
        )

    return rename_file(db, record, new_name)


@router.post("/{file_id}/share", response_model=ShareResponse)
async def share_file(
    file_id: int,
    data: ShareToggle | None = Body(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create the file's share on first call, then enable/disable it"""
    record = _get_owned_or_404(db, file_id, current_user)
    enable = data.enable if data is not None else None
    return create_or_toggle_share(db, record.id, enable)
