"""Cache statistics model."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel

from img_size_cache.types import ImageSizeCache
from img_size_cache.utils.urls import is_remote_url


class CacheStats(BaseModel):
    """Aggregate statistics for one cache file."""

    path: Path
    exists: bool = False
    entries: int = 0
    remote_entries: int = 0
    local_entries: int = 0
    size_bytes: int = 0

    @property
    def size_kb(self) -> float:
        return self.size_bytes / 1024

    @classmethod
    def from_cache(cls, path: Path, cache: ImageSizeCache) -> CacheStats:
        remote = sum(1 for reference in cache if is_remote_url(reference))
        exists = path.exists()
        return cls(
            path=path,
            exists=exists,
            entries=len(cache),
            remote_entries=remote,
            local_entries=len(cache) - remote,
            size_bytes=path.stat().st_size if exists else 0,
        )
