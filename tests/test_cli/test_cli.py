"""Tests for CLI commands."""

import pytest
from click.testing import CliRunner

from img_size_cache.cache.store import load_cache, save_cache
from img_size_cache.cli import cli
from img_size_cache.config import hierarchy
from img_size_cache.config.hierarchy import _ENV_MAP
from img_size_cache.types import ImageSize


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    for env_key in _ENV_MAP:
        monkeypatch.delenv(env_key, raising=False)
    monkeypatch.setattr(hierarchy, "_GLOBAL_CONFIG_PATH", tmp_path / "global" / "config.yaml")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def document(tmp_path, make_image):
    (tmp_path / "images").mkdir()
    (tmp_path / "images" / "photo.png").write_bytes(make_image(640, 480))
    path = tmp_path / "doc.md"
    path.write_text("# Doc\n\n![Photo](images/photo.png)\n")
    return path


class TestCLIGroup:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "annotate" in result.output
        assert "cache" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0


class TestAnnotateCommand:
    def test_help(self, runner):
        result = runner.invoke(cli, ["annotate", "--help"])
        assert result.exit_code == 0
        assert "--cache-file" in result.output
        assert "--no-remote" in result.output
        assert "--output" in result.output

    def test_missing_input(self, runner):
        result = runner.invoke(cli, ["annotate"])
        assert result.exit_code != 0

    def test_nonexistent_file(self, runner):
        result = runner.invoke(cli, ["annotate", "nonexistent_file.md"])
        assert result.exit_code != 0

    def test_prints_annotated_document(self, runner, document, cache_path):
        result = runner.invoke(cli, ["annotate", str(document), "--cache-file", str(cache_path)])
        assert result.exit_code == 0
        assert '<img src="images/photo.png" alt="Photo" width="640" height="480">' in result.output
        assert load_cache(cache_path) == {"images/photo.png": ImageSize(width=640, height=480)}

    def test_writes_output_file(self, runner, document, cache_path, tmp_path):
        output = tmp_path / "out" / "doc.md"
        result = runner.invoke(
            cli,
            ["annotate", str(document), "-o", str(output), "--cache-file", str(cache_path)],
        )
        assert result.exit_code == 0
        assert 'width="640"' in output.read_text()

    def test_no_remote(self, runner, tmp_path, cache_path):
        doc = tmp_path / "remote.md"
        doc.write_text("![r](https://example.com/r.png)\n")
        result = runner.invoke(
            cli, ["annotate", str(doc), "--no-remote", "--cache-file", str(cache_path)]
        )
        assert result.exit_code == 0
        assert "![r](https://example.com/r.png)" in result.output
        assert not cache_path.exists()

    def test_verbose_summary(self, runner, document, cache_path):
        result = runner.invoke(
            cli, ["annotate", str(document), "--cache-file", str(cache_path), "-v"]
        )
        assert result.exit_code == 0
        assert "Annotation Summary" in result.output

    def test_config_file(self, runner, document, tmp_path):
        config = tmp_path / "options.yaml"
        config.write_text("img_size_cache:\n  cache_file_path: from-config.yaml\n")
        result = runner.invoke(cli, ["annotate", str(document), "--config", str(config)])
        assert result.exit_code == 0
        assert (tmp_path / "from-config.yaml").exists()

    def test_bad_config_file(self, runner, document, tmp_path):
        config = tmp_path / "options.yaml"
        config.write_text("other: {}\n")
        result = runner.invoke(cli, ["annotate", str(document), "--config", str(config)])
        assert result.exit_code == 1


class TestSizeCommand:
    def test_local_image(self, runner, tmp_path, make_image):
        (tmp_path / "a.png").write_bytes(make_image(31, 17))
        result = runner.invoke(cli, ["size", "a.png"])
        assert result.exit_code == 0
        assert "31x17" in result.output

    def test_missing_image(self, runner):
        result = runner.invoke(cli, ["size", "missing.png"])
        assert result.exit_code == 1
        assert "Unable to get image dimensions" in result.output

    def test_data_uri(self, runner):
        result = runner.invoke(cli, ["size", "data:image/png;base64,xx"])
        assert result.exit_code == 1


class TestCacheCommands:
    @pytest.fixture
    def populated(self, cache_path):
        save_cache(
            cache_path,
            {
                "https://e.com/a.png": ImageSize(width=10, height=20),
                "img/b.png": ImageSize(width=30, height=40),
            },
        )
        return cache_path

    def test_cache_help(self, runner):
        result = runner.invoke(cli, ["cache", "--help"])
        assert result.exit_code == 0
        assert "stats" in result.output
        assert "clear" in result.output

    def test_stats(self, runner, populated):
        result = runner.invoke(cli, ["cache", "--cache-file", str(populated), "stats"])
        assert result.exit_code == 0
        assert "Cache Statistics" in result.output
        assert "Entries" in result.output

    def test_stats_missing_file(self, runner, tmp_path):
        result = runner.invoke(
            cli, ["cache", "--cache-file", str(tmp_path / "none.yaml"), "stats"]
        )
        assert result.exit_code == 0
        assert "no" in result.output

    def test_list(self, runner, populated):
        result = runner.invoke(cli, ["cache", "--cache-file", str(populated), "list"])
        assert result.exit_code == 0
        assert "https://e.com/a.png" in result.output
        assert "img/b.png" in result.output

    def test_remove(self, runner, populated):
        result = runner.invoke(
            cli, ["cache", "--cache-file", str(populated), "remove", "img/b.png"]
        )
        assert result.exit_code == 0
        assert "Removed 1 entry" in result.output
        assert list(load_cache(populated)) == ["https://e.com/a.png"]

    def test_clear(self, runner, populated):
        result = runner.invoke(cli, ["cache", "--cache-file", str(populated), "clear", "--yes"])
        assert result.exit_code == 0
        assert "Cache cleared" in result.output
        assert not populated.exists()

    def test_clear_aborted(self, runner, populated):
        result = runner.invoke(
            cli, ["cache", "--cache-file", str(populated), "clear"], input="n\n"
        )
        assert result.exit_code != 0
        assert populated.exists()
