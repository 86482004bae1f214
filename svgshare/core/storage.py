import hashlib
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

import oss2

from svgshare.core.config import settings

logger = logging.getLogger(__name__)

SVG_CONTENT_TYPE = "image/svg+xml"

_bucket = None


@dataclass
class StoredObject:
    body: bytes
    content_type: str
    etag: str


def _oss_endpoint() -> str:
    raw = settings.OSS_ENDPOINT.strip()
    if not raw:
        return ""
    # oss2 needs the scheme
    return raw if raw.startswith(("http://", "https://")) else f"https://{raw}"


def is_oss_configured() -> bool:
    if settings.FORCE_LOCAL_STORAGE:
        return False
    return bool(
        settings.OSS_ACCESS_KEY_ID
        and settings.OSS_ACCESS_KEY_SECRET
        and settings.OSS_BUCKET_NAME
        and _oss_endpoint()
    )


def get_bucket() -> oss2.Bucket:
    global _bucket
    if _bucket is None:
        if not is_oss_configured():
            raise ValueError("OSS is not configured (OSS_ACCESS_KEY_ID/OSS_ACCESS_KEY_SECRET/OSS_BUCKET_NAME/OSS_ENDPOINT)")
        auth = oss2.Auth(settings.OSS_ACCESS_KEY_ID, settings.OSS_ACCESS_KEY_SECRET)
        _bucket = oss2.Bucket(auth, _oss_endpoint(), settings.OSS_BUCKET_NAME)
    return _bucket


def build_object_key(user_id: int | str, r2_key: str) -> str:
    """Every blob lives under its owner: files/<user_id>/<r2_key>.svg"""
    return _safe_rel_key(f"files/{user_id}/{r2_key}.svg")


def _safe_rel_key(key: str) -> str:
    value = str(key or "").strip().lstrip("/")
    if not value:
        raise ValueError("empty key")

    path = Path(value)
    if path.is_absolute():
        raise ValueError("absolute key not allowed")
    if any(part in {".", ".."} for part in path.parts):
        raise ValueError("invalid key")

    return "/".join(path.parts)


def get_local_storage_root() -> Path:
    raw = (settings.LOCAL_STORAGE_ROOT or "storage").strip()
    base = Path(raw)
    if not base.is_absolute():
        base = Path.cwd() / base
    return base


def _local_path(key: str) -> Path:
    return get_local_storage_root() / key


def _local_etag(data: bytes) -> str:
    return f'"{hashlib.md5(data).hexdigest()}"'


def _write_local(key: str, data: bytes) -> Path:
    local_path = _local_path(key)
    local_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="wb",
            delete=False,
            dir=str(local_path.parent),
            prefix=".tmp_upload_",
        ) as tmp_file:
            tmp_file.write(data)
            tmp_name = tmp_file.name
        os.replace(tmp_name, str(local_path))
        return local_path
    except OSError:
        logger.exception("Failed to write local object: %s", local_path)
        if tmp_name and os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise


def put_object(user_id: int | str, r2_key: str, data: bytes, content_type: str = SVG_CONTENT_TYPE) -> str:
    """Upload or overwrite a blob. Returns the full object key."""
    key = build_object_key(user_id, r2_key)
    if is_oss_configured():
        get_bucket().put_object(key, data, headers={"Content-Type": content_type})
    else:
        _write_local(key, data)
    logger.info("Stored object %s (%d bytes)", key, len(data))
    return key


def get_object(user_id: int | str, r2_key: str) -> StoredObject | None:
    """Read a blob; None when the key does not exist."""
    key = build_object_key(user_id, r2_key)
    if is_oss_configured():
        try:
            result = get_bucket().get_object(key)
        except oss2.exceptions.NoSuchKey:
            return None
        except oss2.exceptions.OssError:
            logger.exception("Failed to read OSS object: %s", key)
            raise
        body = result.read()
        content_type = result.headers.get("Content-Type") or SVG_CONTENT_TYPE
        return StoredObject(body=body, content_type=content_type, etag=result.etag or _local_etag(body))

    local_path = _local_path(key)
    if not local_path.is_file():
        return None
    body = local_path.read_bytes()
    return StoredObject(body=body, content_type=SVG_CONTENT_TYPE, etag=_local_etag(body))


def delete_object(user_id: int | str, r2_key: str) -> bool:
    """Delete a blob. Missing keys count as deleted."""
    key = build_object_key(user_id, r2_key)
    if is_oss_configured():
        try:
            get_bucket().delete_object(key)
        except oss2.exceptions.OssError:
            logger.exception("Failed to delete OSS object: %s", key)
            return False
        return True

    try:
        _local_path(key).unlink(missing_ok=True)
    except OSError:
        logger.exception("Failed to delete local object: %s", key)
        return False
    return True
