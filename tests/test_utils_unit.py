"""Unit tests for shared helpers."""

from datetime import UTC, datetime
from unittest.mock import MagicMock

from site_feed.models import GitData, Page
from site_feed.utils import get_page_date, get_url, strip_xml_illegal


class TestGetPageDateUnit:
    """Unit tests for get_page_date."""

    def test_null_date_falls_back_to_time(self):
        page = Page(path="/a.html", frontmatter={"date": None, "time": "2024-01-01"})

        assert get_page_date(page) == datetime(2024, 1, 1, tzinfo=UTC)

    def test_date_wins_over_time(self):
        page = Page(
            path="/a.html", frontmatter={"date": "2024-02-02", "time": "2024-01-01"}
        )

        assert get_page_date(page) == datetime(2024, 2, 2, tzinfo=UTC)

    def test_invalid_date_warns_and_uses_git(self):
        page = Page(
            path="/a.html",
            frontmatter={"date": "soon"},
            git=GitData(created_time=1_700_000_000_000),
        )
        logger = MagicMock()

        assert get_page_date(page, logger) == datetime.fromtimestamp(
            1_700_000_000, tz=UTC
        )
        logger.warning.assert_called_once()
        assert logger.warning.call_args.kwargs == {"page_path": "/a.html"}

    def test_invalid_date_without_logger(self):
        assert get_page_date(Page(path="/a.html", frontmatter={"date": "soon"})) is None


class TestStripXmlIllegalUnit:
    """Unit tests for strip_xml_illegal."""

    def test_control_characters_removed(self):
        assert strip_xml_illegal("Intro\x0bPart\x0c\x00") == "IntroPart"

    def test_whitespace_and_unicode_kept(self):
        text = "Tab\there\nline\r快速上手 \U0001f600"

        assert strip_xml_illegal(text) == text

    def test_noncharacters_removed(self):
        assert strip_xml_illegal("a\ufffeb\uffff") == "ab"


class TestGetUrlUnit:
    """Unit tests for get_url."""

    def test_scheme_added_and_slashes_collapsed(self):
        assert get_url("example.com", "/docs/", "/zh/a.html") == (
            "https://example.com/docs/zh/a.html"
        )

    def test_existing_scheme_kept(self):
        assert get_url("http://example.com/", "/", "/") == "http://example.com/"
