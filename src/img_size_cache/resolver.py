"""Async dimension resolver for local files and remote URLs."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from urllib.parse import unquote

import httpx

from img_size_cache.config.defaults import DEFAULT_REQUEST_TIMEOUT, DEFAULT_USER_AGENT
from img_size_cache.errors.exceptions import ResolutionError
from img_size_cache.types import ImageSize
from img_size_cache.utils.image import sniff_dimensions
from img_size_cache.utils.urls import is_remote_url

logger = logging.getLogger(__name__)


class ImageSizeResolver:
    """Reads just enough of an image to report its width and height.

    ``resolve`` never raises: every failure is logged and returns None, so
    callers can treat resolution as total.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        base_dir: Path | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_dir = base_dir
        self._timeout = timeout
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": user_agent},
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> ImageSizeResolver:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def resolve(self, reference: str) -> ImageSize | None:
        """Return the image's dimensions, or None if they cannot be determined."""
        try:
            if is_remote_url(reference):
                image_bytes = await self._fetch_remote(reference)
            else:
                image_bytes = await self._read_local(reference)
            return self._measure(reference, image_bytes)
        except ResolutionError as e:
            logger.warning("Unable to get image dimensions for %s: %s", reference, e.message)
        except Exception as e:
            logger.error(
                "Error occurred while fetching image dimensions %s: %s",
                reference,
                e,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
        return None

    def local_path(self, reference: str) -> Path:
        """Filesystem path for a local reference.

        Relative references are resolved against ``base_dir`` or, when it is
        unset, the current working directory.
        """
        path = Path(reference)
        if path.is_absolute():
            return path
        base = self._base_dir if self._base_dir is not None else Path.cwd()
        return (base / path).resolve()

    async def close(self) -> None:
        await self._client.aclose()

    async def _fetch_remote(self, url: str) -> bytes:
        try:
            # httpx timeouts are per phase; this caps the whole request
            async with asyncio.timeout(self._timeout):
                response = await self._client.get(url)
                response.raise_for_status()
        except TimeoutError as e:
            raise ResolutionError(
                f"request exceeded {self._timeout:g}s", reference=url, reason="timeout", original=e
            ) from e
        except httpx.TimeoutException as e:
            raise ResolutionError(
                f"request timed out: {e}", reference=url, reason="timeout", original=e
            ) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise ResolutionError(
                f"HTTP {status}", reference=url, reason="http_error", http_status=status, original=e
            ) from e
        except httpx.HTTPError as e:
            raise ResolutionError(
                f"request failed: {e}", reference=url, reason="network_error", original=e
            ) from e
        return response.content

    async def _read_local(self, reference: str) -> bytes:
        path = self.local_path(reference)
        if not path.exists():
            # Markdown links are often percent-encoded ("my%20photo.png")
            decoded = self.local_path(unquote(reference))
            if decoded == path or not decoded.exists():
                raise ResolutionError(
                    f"local image file does not exist: {path}",
                    reference=reference,
                    reason="missing_file",
                )
            path = decoded

        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise ResolutionError(
                f"cannot read {path}: {e}", reference=reference, reason="read_error", original=e
            ) from e

    @staticmethod
    def _measure(reference: str, image_bytes: bytes) -> ImageSize:
        dims = sniff_dimensions(image_bytes)
        if dims is None:
            raise ResolutionError(
                "payload is not a recognized image",
                reference=reference,
                reason="undecodable",
            )
        width, height = dims
        if width <= 0 or height <= 0:
            raise ResolutionError(
                f"image has no usable width/height ({width}x{height})",
                reference=reference,
                reason="incomplete_dimensions",
            )
        size = ImageSize(width=width, height=height)
        logger.debug("Measured %s: %s", reference, size)
        return size


async def get_image_size(
    reference: str,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
    base_dir: Path | None = None,
) -> ImageSize | None:
    """Resolve a single reference with a short-lived resolver."""
    async with ImageSizeResolver(timeout=timeout, user_agent=user_agent, base_dir=base_dir) as resolver:
        return await resolver.resolve(reference)
