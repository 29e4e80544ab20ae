"""Reference classification — remote URL, opaque URL, or filesystem path."""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit

_REMOTE_PREFIXES = ("http://", "https://")
_SKIP_PREFIXES = ("data:", "blob:")


def is_remote_url(url: str) -> bool:
    """True iff the reference is an absolute http(s) URL (case-sensitive)."""
    return url.startswith(_REMOTE_PREFIXES)


def should_skip_url(url: str) -> bool:
    """True for embedded or ephemeral references that never get a cache entry."""
    return url.startswith(_SKIP_PREFIXES)


def resolve_url(base: str, relative: str) -> str:
    """Resolve ``relative`` against ``base``; remote references pass through.

    Raises ValueError if ``base`` is not an absolute URL.
    """
    if is_remote_url(relative):
        return relative
    if not urlsplit(base).scheme:
        raise ValueError(f"Base is not an absolute URL: {base!r}")
    return urljoin(base, relative)
