"""YAML record codec — ordered record sequence <-> reference mapping."""

from __future__ import annotations

import logging
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from img_size_cache.types import CacheRecord, ImageSizeCache

logger = logging.getLogger(__name__)


class ValidRecords(BaseModel):
    """Decoded cache content: the usable records, in file order."""

    kind: Literal["valid"] = "valid"
    records: list[CacheRecord] = Field(default_factory=list)
    dropped: int = 0


class MalformedCache(BaseModel):
    """Cache content that is not a sequence of records at all."""

    kind: Literal["malformed"] = "malformed"
    reason: str


DecodeResult = ValidRecords | MalformedCache


def decode_records(text: str) -> DecodeResult:
    """Parse cache file text into records.

    An empty document decodes to no records. A top-level value that is not
    a sequence (or YAML that does not parse) is malformed. Individual items
    that are not valid records are dropped and counted.
    """
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as e:
        return MalformedCache(reason=f"invalid YAML: {e}")
    except (RecursionError, ValueError) as e:
        # Pathologically nested or otherwise unloadable content
        return MalformedCache(reason=f"unloadable YAML: {type(e).__name__}")

    if parsed is None:
        return ValidRecords()
    if not isinstance(parsed, list):
        return MalformedCache(reason=f"expected a sequence of records, got {type(parsed).__name__}")

    records: list[CacheRecord] = []
    dropped = 0
    for index, item in enumerate(parsed):
        record = _parse_record(item, index)
        if record is None:
            dropped += 1
            continue
        records.append(record)
    return ValidRecords(records=records, dropped=dropped)


def records_to_cache(records: list[CacheRecord]) -> ImageSizeCache:
    """Fold records into a mapping; a later duplicate reference wins."""
    cache: ImageSizeCache = {}
    for record in records:
        cache[record.reference] = record.size
    return cache


def cache_to_records(cache: ImageSizeCache) -> list[CacheRecord]:
    return [
        CacheRecord(reference=reference, width=size.width, height=size.height)
        for reference, size in cache.items()
    ]


def encode_records(cache: ImageSizeCache) -> str:
    """Serialize a mapping as a YAML sequence of ``reference/width/height`` items."""
    items = [record.model_dump() for record in cache_to_records(cache)]
    return yaml.safe_dump(items, sort_keys=False, allow_unicode=True, default_flow_style=False)


def _parse_record(item: Any, index: int) -> CacheRecord | None:
    if not isinstance(item, dict):
        logger.warning("Ignoring cache record #%d: not a mapping", index)
        return None
    try:
        return CacheRecord.model_validate(item)
    except ValidationError as e:
        logger.warning("Ignoring invalid cache record #%d: %s", index, _first_error(e))
        return None


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first.get('msg', '')}" if loc else first.get("msg", "")
