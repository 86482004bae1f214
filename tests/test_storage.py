"""
Tests for blob storage (local backend and OSS error handling).
"""
import logging

import oss2
import pytest

from svgshare.core import storage
from svgshare.core.storage import (
    build_object_key,
    delete_object,
    get_object,
    is_oss_configured,
    put_object,
)


class TestObjectKey:
    def test_layout(self):
        assert build_object_key(5, "abc123") == "files/5/abc123.svg"

    @pytest.mark.parametrize("r2_key", ["../escape", "a/../../b"])
    def test_rejects_traversal(self, r2_key):
        with pytest.raises(ValueError):
            build_object_key(5, r2_key)


class TestLocalBackend:
    """Local directory fallback used when OSS is not configured"""

    def test_forced_local(self):
        assert is_oss_configured() is False

    def test_put_get_delete(self, storage_root):
        key = put_object(3, "k1", b"<svg/>")
        assert key == "files/3/k1.svg"
        assert (storage_root / key).read_bytes() == b"<svg/>"

        stored = get_object(3, "k1")
        assert stored.body == b"<svg/>"
        assert stored.content_type == "image/svg+xml"
        assert stored.etag.startswith('"') and stored.etag.endswith('"')

        assert delete_object(3, "k1") is True
        assert get_object(3, "k1") is None

    def test_overwrite_in_place(self):
        put_object(3, "k1", b"<svg>one</svg>")
        first = get_object(3, "k1")
        put_object(3, "k1", b"<svg>two</svg>")
        second = get_object(3, "k1")
        assert second.body == b"<svg>two</svg>"
        assert first.etag != second.etag

    def test_missing_object(self):
        assert get_object(3, "nope") is None

    def test_delete_missing_counts_as_deleted(self):
        assert delete_object(3, "nope") is True

    def test_keys_are_scoped_by_owner(self):
        put_object(1, "shared-name", b"<svg>1</svg>")
        assert get_object(2, "shared-name") is None

    def test_no_temp_files_left(self, storage_root):
        put_object(3, "k1", b"<svg/>")
        leftovers = [p for p in (storage_root / "files" / "3").iterdir() if p.name.startswith(".tmp_upload_")]
        assert leftovers == []


class FailingBucket:
    """Stands in for oss2.Bucket; every call fails with the given error."""

    def __init__(self, error):
        self.error = error

    def get_object(self, key):
        raise self.error

    def delete_object(self, key):
        raise self.error


class TestOssBackend:
    """Error handling when the OSS bucket is in use"""

    @pytest.fixture
    def use_bucket(self, monkeypatch):
        def _use(bucket):
            monkeypatch.setattr(storage, "is_oss_configured", lambda: True)
            monkeypatch.setattr(storage, "get_bucket", lambda: bucket)

        return _use

    def test_missing_key_is_none(self, use_bucket):
        use_bucket(FailingBucket(oss2.exceptions.NoSuchKey(404, {}, "", {})))
        assert get_object(3, "k1") is None

    def test_read_failure_is_logged_and_raised(self, use_bucket, caplog):
        use_bucket(FailingBucket(oss2.exceptions.ServerError(503, {}, "", {})))

        with caplog.at_level(logging.ERROR, logger="svgshare.core.storage"):
            with pytest.raises(oss2.exceptions.OssError):
                get_object(3, "k1")
        assert "Failed to read OSS object: files/3/k1.svg" in caplog.text

    def test_delete_failure_returns_false(self, use_bucket):
        use_bucket(FailingBucket(oss2.exceptions.ServerError(503, {}, "", {})))
        assert delete_object(3, "k1") is False
