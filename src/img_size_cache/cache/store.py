"""YAML-file dimension cache with read-merge-write updates.

The cache file is never held open between calls: ``load_cache`` and
``merge_cache`` each open, read and close it independently. ``merge_cache``
re-reads the file right before writing so entries added by other runs since
the caller's own load survive. There is no lock; two writers racing between
their re-read and their write can still drop each other's new entries.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from collections.abc import Iterable, Mapping
from pathlib import Path

import yaml

from img_size_cache.cache.codec import (
    MalformedCache,
    decode_records,
    encode_records,
    records_to_cache,
)
from img_size_cache.cache.stats import CacheStats
from img_size_cache.errors.exceptions import CacheCorruptError, CacheWriteError
from img_size_cache.types import ImageSize, ImageSizeCache

logger = logging.getLogger(__name__)


def load_cache(path: str | Path) -> ImageSizeCache:
    """Load the cache mapping from ``path``.

    A missing file is an empty cache. Unreadable or malformed content is
    logged and also yields an empty cache.
    """
    path = Path(path)
    try:
        return _read_cache(path)
    except CacheCorruptError as e:
        logger.warning("Ignoring corrupt cache file %s: %s", path, e.message)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Error reading cache file %s: %s", path, e)
    return {}


def save_cache(path: str | Path, cache: Mapping[str, ImageSize]) -> bool:
    """Overwrite ``path`` with ``cache``. Returns False on any write failure."""
    path = Path(path)
    try:
        _ensure_parent_dir(path)
        _write_cache(path, dict(cache))
    except CacheWriteError as e:
        logger.warning("Error writing cache file %s: %s", path, e.message)
        return False
    return True


def merge_cache(path: str | Path, new_entries: Mapping[str, ImageSize]) -> bool:
    """Merge ``new_entries`` into the cache currently on disk at ``path``.

    The file is re-read here, not taken from the caller, and ``new_entries``
    win for references present in both. Returns False (after logging) on
    any directory, read or write failure; a corrupt file is replaced.
    """
    path = Path(path)
    try:
        _ensure_parent_dir(path)
    except CacheWriteError as e:
        logger.warning("Error writing cache file %s: %s", path, e.message)
        return False

    if not new_entries:
        return True

    try:
        current = _read_cache(path)
    except CacheCorruptError as e:
        logger.warning("Replacing corrupt cache file %s: %s", path, e.message)
        current = {}
    except (OSError, UnicodeDecodeError) as e:
        # Writing now could discard entries we failed to read
        logger.warning("Error reading cache file %s before merge: %s", path, e)
        return False

    added = sum(1 for reference in new_entries if reference not in current)
    current.update(new_entries)

    try:
        _write_cache(path, current)
    except CacheWriteError as e:
        logger.warning("Error writing cache file %s: %s", path, e.message)
        return False

    logger.debug(
        "Merged %d entries into %s (%d new, %d total)",
        len(new_entries),
        path,
        added,
        len(current),
    )
    return True


class DimensionCacheStore:
    """Path-bound facade over the module-level cache functions."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ImageSizeCache:
        return load_cache(self._path)

    def get(self, reference: str) -> ImageSize | None:
        return self.load().get(reference)

    def merge(self, new_entries: Mapping[str, ImageSize]) -> bool:
        return merge_cache(self._path, new_entries)

    def save(self, cache: Mapping[str, ImageSize]) -> bool:
        return save_cache(self._path, cache)

    def remove(self, references: Iterable[str]) -> int:
        """Drop references from the file. Returns the number removed."""
        cache = self.load()
        removed = [ref for ref in references if cache.pop(ref, None) is not None]
        if removed and not self.save(cache):
            return 0
        return len(removed)

    def clear(self) -> bool:
        """Delete the cache file. Returns False if it could not be removed."""
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Error deleting cache file %s: %s", self._path, e)
            return False
        return True

    def stats(self) -> CacheStats:
        return CacheStats.from_cache(self._path, self.load())


def _read_cache(path: Path) -> ImageSizeCache:
    if not path.exists():
        return {}

    text = path.read_text(encoding="utf-8")
    result = decode_records(text)
    if isinstance(result, MalformedCache):
        raise CacheCorruptError(result.reason, path=path)
    if result.dropped:
        logger.warning("Dropped %d invalid records from cache file %s", result.dropped, path)
    return records_to_cache(result.records)


def _ensure_parent_dir(path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CacheWriteError(
            f"cannot create directory {path.parent}: {e}", path=path, original=e
        ) from e


def _write_cache(path: Path, cache: ImageSizeCache) -> None:
    """Write via a sibling temp file and ``os.replace`` so readers never see a partial file."""
    try:
        payload = encode_records(cache)
    except yaml.YAMLError as e:
        raise CacheWriteError(f"cannot serialize cache: {e}", path=path, original=e) from e

    tmp_path: Path | None = None
    try:
        # Unique per writer, so concurrent writers never share a temp file
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            f.write(payload)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path is not None:
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
        raise CacheWriteError(str(e), path=path, original=e) from e
