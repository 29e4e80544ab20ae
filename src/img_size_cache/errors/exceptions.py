"""Custom exception hierarchy for img-size-cache."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class ImgSizeCacheError(Exception):
    """Base exception for all img-size-cache errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class ResolutionError(ImgSizeCacheError):
    """Dimensions for a single reference could not be determined.

    Examples: missing local file, HTTP error, timeout, undecodable payload.
    Never escapes the resolver; other references continue.
    """

    def __init__(
        self,
        message: str = "",
        reference: str = "",
        reason: str = "unknown",
        http_status: int | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.reference = reference
        self.reason = reason
        self.http_status = http_status
        self.original = original


class CacheCorruptError(ImgSizeCacheError):
    """The on-disk cache could not be parsed into records."""

    def __init__(self, message: str = "", path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class CacheWriteError(ImgSizeCacheError):
    """Directory creation or file write failed while persisting the cache."""

    def __init__(
        self,
        message: str = "",
        path: Path | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.original = original
