import io

import pytest
from PIL import Image

from img_size_cache.config.schema import AnnotatorOptions


def _image_bytes(width: int, height: int, fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), "white").save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def make_image():
    """Factory returning encoded image bytes of the given size."""
    return _image_bytes


@pytest.fixture
def sample_image_bytes():
    """Minimal valid PNG for testing (1x1 white pixel)."""
    import base64
    return base64.b64decode(
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR4"
        "nGP4z8BQDwAEgAF/pooBPQAAAABJRU5ErkJggg=="
    )


@pytest.fixture
def cache_path(tmp_path):
    """Cache file location inside a not-yet-existing subdirectory."""
    return tmp_path / "cache" / "image-sizes.yaml"


@pytest.fixture
def options(cache_path):
    return AnnotatorOptions(cache_file_path=cache_path)


@pytest.fixture
def sample_cache_yaml(cache_path):
    """Write a two-record cache file and return its path."""
    content = """
- reference: https://example.com/image1.jpg
  width: 400
  height: 300
- reference: https://example.com/image2.jpg
  width: 800
  height: 600
"""
    cache_path.parent.mkdir(parents=True, exist_ok=True)
    cache_path.write_text(content)
    return cache_path
