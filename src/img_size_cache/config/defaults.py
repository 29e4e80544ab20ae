"""Package-level default configuration values."""

from __future__ import annotations

from pathlib import Path
from typing import Any

# Default cache settings
DEFAULT_CACHE_FILE = Path("cache") / "image-sizes.yaml"

# Default resolution settings
DEFAULT_PROCESS_REMOTE_IMAGES = True
DEFAULT_REQUEST_TIMEOUT = 10.0  # seconds
# Some image hosts reject requests with an empty or library user agent
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:132.0) Gecko/20100101 Firefox/132.0"
)
DEFAULT_MAX_CONCURRENCY = 4

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "cache_file_path": DEFAULT_CACHE_FILE,
        "process_remote_images": DEFAULT_PROCESS_REMOTE_IMAGES,
        "request_timeout": DEFAULT_REQUEST_TIMEOUT,
        "user_agent": DEFAULT_USER_AGENT,
        "base_dir": None,
        "max_concurrency": DEFAULT_MAX_CONCURRENCY,
        "log_level": DEFAULT_LOG_LEVEL,
    }
