"""Tests for options YAML loading."""

import pytest

from img_size_cache.config.loader import load_options_yaml
from img_size_cache.config.schema import AnnotatorOptions


class TestLoadOptionsYaml:
    def test_loads_valid_options(self, tmp_path):
        path = tmp_path / "options.yaml"
        path.write_text(
            "img_size_cache:\n"
            "  cache_file_path: sizes.yaml\n"
            "  process_remote_images: false\n"
            "  request_timeout: 5\n"
        )
        options = load_options_yaml(path)
        assert isinstance(options, AnnotatorOptions)
        assert options.cache_file_path.name == "sizes.yaml"
        assert options.cache_file_path.is_absolute()
        assert options.process_remote_images is False
        assert options.request_timeout == 5.0

    def test_empty_section_uses_defaults(self, tmp_path):
        path = tmp_path / "options.yaml"
        path.write_text("img_size_cache:\n")
        options = load_options_yaml(path)
        assert options.process_remote_images is True

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_options_yaml(tmp_path / "nonexistent.yaml")

    def test_missing_top_level_key(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("foo: bar\n")
        with pytest.raises(ValueError, match="missing top-level 'img_size_cache' key"):
            load_options_yaml(path)

    def test_section_not_mapping(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("img_size_cache:\n  - a\n")
        with pytest.raises(ValueError, match="Expected a mapping"):
            load_options_yaml(path)

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("img_size_cache:\n  max_concurrency: 0\n")
        with pytest.raises(Exception):  # Pydantic validation
            load_options_yaml(path)
