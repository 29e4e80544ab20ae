"""Annotation driver — cache lookup, resolution on miss, single merge-write."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from img_size_cache.cache.store import load_cache, merge_cache
from img_size_cache.config.schema import AnnotatorOptions
from img_size_cache.resolver import ImageSizeResolver
from img_size_cache.types import AnnotationReport, ImageNode, ImageSize
from img_size_cache.utils.urls import is_remote_url, should_skip_url

logger = logging.getLogger(__name__)


class ImageSizeAnnotator:
    """Attaches width/height to image nodes for one document run.

    The cache file is loaded once at the start of ``annotate`` and merged
    once at the end, only when new sizes were resolved. A reference that
    cannot be sized is left unannotated; it never fails the run.
    """

    def __init__(
        self,
        options: AnnotatorOptions | None = None,
        resolver: ImageSizeResolver | None = None,
    ) -> None:
        self._options = options or AnnotatorOptions()
        self._resolver = resolver

    @property
    def options(self) -> AnnotatorOptions:
        return self._options

    def wants(self, reference: str) -> bool:
        """Whether a reference is eligible for annotation under these options."""
        if should_skip_url(reference):
            return False
        return not (is_remote_url(reference) and not self._options.process_remote_images)

    async def annotate(self, nodes: Iterable[ImageNode]) -> AnnotationReport:
        """Annotate ``nodes`` in place and return run counters."""
        nodes = list(nodes)
        report = AnnotationReport(total=len(nodes))
        cache_path = self._options.cache_file_path
        cache = load_cache(cache_path)

        # Group by reference so each unique reference is resolved once
        candidates: dict[str, list[ImageNode]] = {}
        for node in nodes:
            if not self.wants(node.src):
                report.skipped += 1
                continue
            candidates.setdefault(node.src, []).append(node)

        pending: list[str] = []
        for reference, group in candidates.items():
            cached = cache.get(reference)
            if cached is None:
                pending.append(reference)
                continue
            for node in group:
                node.apply(cached)
            report.from_cache += len(group)
            logger.info("Read size from cache: %s (%s)", reference, cached)

        new_entries = await self._resolve_all(pending)

        for reference in pending:
            group = candidates[reference]
            size = new_entries.get(reference)
            if size is None:
                report.failed += len(group)
                report.failed_references.append(reference)
                logger.warning("Unable to get image dimensions: %s", reference)
                continue
            for node in group:
                node.apply(size)
            report.resolved += len(group)
            logger.info("Fetched and cached image size: %s (%s)", reference, size)

        if new_entries:
            report.cache_updated = merge_cache(cache_path, new_entries)
            if report.cache_updated:
                logger.info("Cache updated and saved to: %s", cache_path)

        return report

    async def _resolve_all(self, references: list[str]) -> dict[str, ImageSize]:
        if not references:
            return {}

        resolver = self._resolver or ImageSizeResolver(
            timeout=self._options.request_timeout,
            user_agent=self._options.user_agent,
            base_dir=self._options.base_dir,
        )
        semaphore = asyncio.Semaphore(self._options.max_concurrency)

        async def worker(reference: str) -> ImageSize | None:
            async with semaphore:
                return await resolver.resolve(reference)

        try:
            results = await asyncio.gather(
                *(worker(reference) for reference in references),
                return_exceptions=True,
            )
        finally:
            if self._resolver is None:
                await resolver.close()

        resolved: dict[str, ImageSize] = {}
        for reference, result in zip(references, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(
                    "Error occurred while processing image %s: %s", reference, result
                )
                continue
            if result is not None:
                resolved[reference] = result
        return resolved
