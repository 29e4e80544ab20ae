"""Tests for custom exception hierarchy."""

from pathlib import Path

import pytest

from img_size_cache.errors import (
    CacheCorruptError,
    CacheWriteError,
    ImgSizeCacheError,
    ResolutionError,
)


class TestExceptionHierarchy:
    def test_all_inherit_from_base(self):
        assert issubclass(ResolutionError, ImgSizeCacheError)
        assert issubclass(CacheCorruptError, ImgSizeCacheError)
        assert issubclass(CacheWriteError, ImgSizeCacheError)

    def test_base_inherits_from_exception(self):
        assert issubclass(ImgSizeCacheError, Exception)

    def test_catchable_as_base(self):
        with pytest.raises(ImgSizeCacheError):
            raise CacheCorruptError("bad file")


class TestResolutionError:
    def test_attributes(self):
        original = TimeoutError("slow")
        err = ResolutionError(
            "HTTP 404",
            reference="https://example.com/a.png",
            reason="http_error",
            http_status=404,
            original=original,
        )
        assert err.message == "HTTP 404"
        assert err.reference == "https://example.com/a.png"
        assert err.reason == "http_error"
        assert err.http_status == 404
        assert err.original is original
        assert "HTTP 404" in str(err)

    def test_defaults(self):
        err = ResolutionError("test")
        assert err.reason == "unknown"
        assert err.http_status is None
        assert err.original is None


class TestCacheErrors:
    def test_corrupt_path(self):
        err = CacheCorruptError("not a list", path=Path("/tmp/c.yaml"))
        assert err.path == Path("/tmp/c.yaml")
        assert err.message == "not a list"

    def test_write_original(self):
        cause = PermissionError("denied")
        err = CacheWriteError("cannot write", path=Path("/x"), original=cause)
        assert err.original is cause
        assert err.path == Path("/x")
