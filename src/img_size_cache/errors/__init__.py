"""Error handling — exception hierarchy for dimension resolution and caching."""

from img_size_cache.errors.exceptions import (
    CacheCorruptError,
    CacheWriteError,
    ImgSizeCacheError,
    ResolutionError,
)

__all__ = [
    "ImgSizeCacheError",
    "ResolutionError",
    "CacheCorruptError",
    "CacheWriteError",
]
