"""Cache subsystem — a single YAML file of reference/width/height records."""

from img_size_cache.cache.codec import MalformedCache, ValidRecords, decode_records, encode_records
from img_size_cache.cache.stats import CacheStats
from img_size_cache.cache.store import DimensionCacheStore, load_cache, merge_cache, save_cache

__all__ = [
    "DimensionCacheStore",
    "CacheStats",
    "MalformedCache",
    "ValidRecords",
    "decode_records",
    "encode_records",
    "load_cache",
    "merge_cache",
    "save_cache",
]
