"""Unit tests for the command line entry point."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from site_feed.cli import app, load_pages

runner = CliRunner()


@pytest.fixture
def site(tmp_path):
    pages_file = tmp_path / "pages.json"
    pages_file.write_text(
        json.dumps(
            [
                {
                    "path": "/guide/intro.html",
                    "pathLocale": "/",
                    "title": "Intro",
                    "frontmatter": {"date": "2024-01-01"},
                    "filePathRelative": "guide/intro.md",
                    "contentRendered": "<p>Hello</p>",
                },
                {
                    "path": "/zh/guide/intro.html",
                    "pathLocale": "/zh/",
                    "title": "介绍",
                    "frontmatter": {},
                    "filePathRelative": "zh/guide/intro.md",
                    "data": {"git": {"createdTime": 1700000000000}},
                },
            ]
        ),
        encoding="utf-8",
    )
    config_file = tmp_path / "feeds.json"
    config_file.write_text(
        json.dumps(
            {
                "hostname": "example.com",
                "json": True,
                "locales": {"/": {"atom": True}, "/zh/": {}},
            }
        ),
        encoding="utf-8",
    )
    return tmp_path, pages_file, config_file


class TestCliUnit:
    """Unit tests for the build command."""

    def test_build_success(self, site):
        tmp_path, pages_file, config_file = site
        dest = tmp_path / "dist"

        with patch("site_feed.cli.setup_structured_logging"):
            result = runner.invoke(
                app,
                [
                    "build",
                    "--pages",
                    str(pages_file),
                    "--config",
                    str(config_file),
                    "--dest",
                    str(dest),
                ],
            )

        assert result.exit_code == 0, result.output
        summary = json.loads(result.stdout.strip().splitlines()[-1])
        assert summary["status"] == "success"
        assert sorted(summary["files"]) == [
            "atom.xml",
            "atom.xsl",
            "feed.json",
            "zh/feed.json",
        ]
        zh_feed = json.loads((dest / "zh" / "feed.json").read_text(encoding="utf-8"))
        assert zh_feed["items"][0]["title"] == "介绍"
        assert zh_feed["items"][0]["date_published"].startswith("2023-11-14")

    def test_build_missing_config_exits_with_error(self, site):
        tmp_path, pages_file, _ = site

        with patch("site_feed.cli.setup_structured_logging"):
            result = runner.invoke(
                app,
                [
                    "build",
                    "--pages",
                    str(pages_file),
                    "--config",
                    str(tmp_path / "missing.json"),
                    "--dest",
                    str(tmp_path / "dist"),
                ],
            )

        assert result.exit_code == 1
        assert '"status": "error"' in result.stdout

    def test_build_output_failure_exits_with_error(self, site):
        tmp_path, pages_file, config_file = site
        dest = tmp_path / "dist"
        dest.mkdir()
        (dest / "zh").write_text("blocks the locale directory", encoding="utf-8")

        with patch("site_feed.cli.setup_structured_logging"):
            result = runner.invoke(
                app,
                [
                    "build",
                    "--pages",
                    str(pages_file),
                    "--config",
                    str(config_file),
                    "--dest",
                    str(dest),
                ],
            )

        assert result.exit_code == 1
        summary = json.loads(result.stdout.strip().splitlines()[-1])
        assert len(summary["errors"]) == 1
        assert (dest / "atom.xml").exists()


class TestLoadPagesUnit:
    """Unit tests for load_pages."""

    def test_accepts_wrapped_manifest(self, tmp_path):
        pages_file = tmp_path / "pages.json"
        pages_file.write_text(
            json.dumps({"pages": [{"path": "/a.html", "title": "A"}]}),
            encoding="utf-8",
        )

        pages = load_pages(pages_file)

        assert [page.path for page in pages] == ["/a.html"]
        assert pages[0].path_locale == "/"

    def test_rejects_entry_without_path(self, tmp_path):
        pages_file = tmp_path / "pages.json"
        pages_file.write_text(json.dumps([{"title": "A"}]), encoding="utf-8")

        with pytest.raises(ValueError, match="missing required key 'path'"):
            load_pages(pages_file)
