"""Top-level entry points: annotate_markdown(), annotate(), annotate_file()."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from img_size_cache.annotator import ImageSizeAnnotator
from img_size_cache.config.hierarchy import build_options
from img_size_cache.config.schema import AnnotatorOptions
from img_size_cache.document import find_images, render_images
from img_size_cache.resolver import ImageSizeResolver
from img_size_cache.types import AnnotatedDocument

logger = logging.getLogger(__name__)


async def annotate_markdown(
    text: str,
    options: AnnotatorOptions | None = None,
    resolver: ImageSizeResolver | None = None,
) -> AnnotatedDocument:
    """Annotate every image in a markdown/HTML document with its pixel size."""
    matches = find_images(text)
    annotator = ImageSizeAnnotator(options, resolver=resolver)
    report = await annotator.annotate(match.node for match in matches)
    logger.debug(
        "Annotated %d/%d images (%d cached, %d resolved, %d failed, %d skipped)",
        report.annotated,
        report.total,
        report.from_cache,
        report.resolved,
        report.failed,
        report.skipped,
    )
    return AnnotatedDocument(
        text=render_images(text, matches),
        report=report,
        images=[match.node for match in matches],
    )


# ── Module-level convenience functions ──


def annotate(text: str, options: AnnotatorOptions | None = None) -> AnnotatedDocument:
    """Annotate a document (sync wrapper).

    Without explicit ``options`` the layered config (files, environment) is used.
    """
    if options is None:
        options = build_options()
    return asyncio.run(annotate_markdown(text, options))


def annotate_file(
    input_path: str | Path,
    output_path: str | Path | None = None,
    options: AnnotatorOptions | None = None,
) -> AnnotatedDocument:
    """Annotate a document file, optionally writing the result to ``output_path``."""
    input_path = Path(input_path)
    if not input_path.exists():
        raise FileNotFoundError(f"File not found: {input_path}")

    result = annotate(input_path.read_text(encoding="utf-8"), options)
    if output_path is not None:
        result.save(output_path)
    return result
