"""Helpers shared by feed item construction and page ordering."""

import re
from datetime import UTC, date, datetime, time

from bs4 import BeautifulSoup
from dateutil import parser as date_parser

from .logging_config import ExecutionLogger
from .models import Page

_DUPLICATE_SLASHES = re.compile(r"(?<!:)/{2,}")
_XML_ILLEGAL = re.compile(
    r"[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)


def get_url(hostname: str, base: str, path: str) -> str:
    """Join hostname, base and a site path into an absolute URL.

    A hostname without a scheme is assumed to be served over HTTPS.
    """
    hostname = hostname.rstrip("/")
    if not re.match(r"^[a-z][a-z0-9+.-]*://", hostname, re.IGNORECASE):
        hostname = f"https://{hostname}"

    return _DUPLICATE_SLASHES.sub("/", f"{hostname}/{base}/{path}")


def parse_date(value: object) -> datetime | None:
    """Coerce a frontmatter date value to a timezone-aware datetime.

    Returns:
        The parsed datetime (naive values are assumed to be UTC), or None
        when the value is empty.

    Raises:
        ValueError: If the value cannot be interpreted as a date
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    elif isinstance(value, str):
        try:
            parsed = date_parser.parse(value)
        except (OverflowError, ValueError) as e:
            raise ValueError(f"Invalid date value: {value!r}") from e
    else:
        raise ValueError(f"Unsupported date value: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def from_timestamp_ms(value: int | float | None) -> datetime | None:
    """Convert epoch milliseconds to a UTC datetime."""
    if not value:
        return None
    return datetime.fromtimestamp(value / 1000, tz=UTC)


def get_page_date(
    page: Page, logger: ExecutionLogger | None = None
) -> datetime | None:
    """Return the publish date of a page.

    Frontmatter ``date`` (or ``time`` when ``date`` is missing or null) wins
    over the git creation time. Invalid frontmatter dates are ignored, with
    a warning when a logger is given.
    """
    frontmatter_date = page.frontmatter.get("date")
    if frontmatter_date is None:
        frontmatter_date = page.frontmatter.get("time")

    try:
        parsed = parse_date(frontmatter_date)
    except ValueError as e:
        if logger:
            logger.warning(
                f"Ignoring invalid date on page {page.path}: {e}", page_path=page.path
            )
        parsed = None

    if parsed is None and page.git:
        parsed = from_timestamp_ms(page.git.created_time)

    return parsed


def strip_xml_illegal(text: str) -> str:
    """Remove characters that cannot appear in an XML 1.0 document."""
    return _XML_ILLEGAL.sub("", text)


def clean_html_content(content: str) -> str:
    """Remove HTML tags from content and normalize whitespace.

    Args:
        content: Rendered content that may contain HTML

    Returns:
        Clean text content without HTML tags
    """
    if not content:
        return ""

    if "<" not in content and ">" not in content:
        return " ".join(content.split())

    soup = BeautifulSoup(content, "html.parser")

    for element in soup(["script", "style"]):
        element.decompose()

    text = soup.get_text(separator=" ")
    return " ".join(text.split())
