"""img-size-cache — annotate document images with cached pixel dimensions."""

from img_size_cache.annotator import ImageSizeAnnotator
from img_size_cache.cache import DimensionCacheStore, load_cache, merge_cache, save_cache
from img_size_cache.config.schema import AnnotatorOptions
from img_size_cache.core import annotate, annotate_file, annotate_markdown
from img_size_cache.resolver import ImageSizeResolver, get_image_size
from img_size_cache.types import AnnotatedDocument, AnnotationReport, ImageNode, ImageSize
from img_size_cache.utils.urls import is_remote_url, resolve_url, should_skip_url

__all__ = [
    "annotate",
    "annotate_file",
    "annotate_markdown",
    "ImageSizeAnnotator",
    "ImageSizeResolver",
    "get_image_size",
    "DimensionCacheStore",
    "load_cache",
    "merge_cache",
    "save_cache",
    "AnnotatorOptions",
    "AnnotatedDocument",
    "AnnotationReport",
    "ImageNode",
    "ImageSize",
    "is_remote_url",
    "resolve_url",
    "should_skip_url",
]
