"""Configuration management for the site feed generator."""

import json
import os
from collections.abc import Callable
from dataclasses import dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import Any

from .models import FeedAuthor, Page
from .utils import get_page_date, parse_date

TEMPLATES_DIR = Path(__file__).parent / "templates"

PageFilter = Callable[[Page], bool]
PageSorter = Callable[[Page, Page], int]


def default_filter(page: Page) -> bool:
    """Keep article pages that have a source file and are not opted out."""
    frontmatter = page.frontmatter
    return (
        not frontmatter.get("home")
        and bool(page.file_path_relative)
        and frontmatter.get("article") is not False
        and frontmatter.get("feed") is not False
    )


def default_sorter(page_a: Page, page_b: Page) -> int:
    """Order pages newest first; undated pages go last."""
    date_a = get_page_date(page_a)
    date_b = get_page_date(page_b)

    if date_a is None and date_b is None:
        return 0
    if date_a is None:
        return 1
    if date_b is None:
        return -1
    if date_a == date_b:
        return 0
    return -1 if date_a > date_b else 1


@dataclass
class ChannelOptions:
    """Feed-level metadata shared by every generated format."""

    title: str = ""
    link: str = ""
    description: str = ""
    language: str = "en-US"
    copyright: str = ""
    author: FeedAuthor | None = None
    icon: str | None = None
    image: str | None = None
    ttl: int | None = None
    pub_date: datetime | None = None
    last_updated: datetime | None = None


@dataclass
class FeedFilenames:
    """Output filenames and stylesheet template sources."""

    atom_output: str = "atom.xml"
    json_output: str = "feed.json"
    rss_output: str = "rss.xml"
    atom_xsl: str = "atom.xsl"
    rss_xsl: str = "rss.xsl"
    atom_xsl_template: Path = TEMPLATES_DIR / "atom.xsl"
    rss_xsl_template: Path = TEMPLATES_DIR / "rss.xsl"


@dataclass
class LocaleFeedOptions:
    """Resolved feed options for a single locale."""

    hostname: str
    base: str = "/"
    atom: bool = False
    json: bool = False
    rss: bool = False
    count: int = 100
    filter: PageFilter = default_filter
    sorter: PageSorter = default_sorter
    channel: ChannelOptions = field(default_factory=ChannelOptions)
    filenames: FeedFilenames = field(default_factory=FeedFilenames)

    @property
    def enabled(self) -> bool:
        return self.atom or self.json or self.rss


@dataclass
class FeedPaths:
    """Output paths of one locale, relative to the destination directory."""

    atom_output_filename: str
    json_output_filename: str
    rss_output_filename: str
    atom_xsl_filename: str
    rss_xsl_filename: str
    atom_xsl_template: Path
    rss_xsl_template: Path


def get_filename(options: LocaleFeedOptions, locale_path: str) -> FeedPaths:
    """Resolve the output filenames of a locale.

    The locale path is used as a directory prefix, so ``/`` writes to the
    output root and ``/zh/`` writes to ``zh/``.
    """
    prefix = locale_path.strip("/")
    filenames = options.filenames

    def resolve(filename: str) -> str:
        filename = filename.lstrip("/")
        return f"{prefix}/{filename}" if prefix else filename

    return FeedPaths(
        atom_output_filename=resolve(filenames.atom_output),
        json_output_filename=resolve(filenames.json_output),
        rss_output_filename=resolve(filenames.rss_output),
        atom_xsl_filename=resolve(filenames.atom_xsl),
        rss_xsl_filename=resolve(filenames.rss_xsl),
        atom_xsl_template=Path(filenames.atom_xsl_template),
        rss_xsl_template=Path(filenames.rss_xsl_template),
    )


def _parse_author(value: Any) -> FeedAuthor | None:
    if not value:
        return None
    if isinstance(value, str):
        return FeedAuthor(name=value)
    if isinstance(value, dict) and value.get("name"):
        return FeedAuthor(
            name=value["name"], email=value.get("email"), url=value.get("url")
        )
    raise ValueError(f"Invalid channel author: {value!r}")


def _build_channel(data: dict[str, Any]) -> ChannelOptions:
    known = {f.name for f in fields(ChannelOptions)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown channel options: {', '.join(sorted(unknown))}")

    values = dict(data)
    values["author"] = _parse_author(values.get("author"))
    for key in ("pub_date", "last_updated"):
        values[key] = parse_date(values.get(key))
    return ChannelOptions(**values)


def _build_filenames(data: dict[str, Any]) -> FeedFilenames:
    known = {f.name for f in fields(FeedFilenames)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown filename options: {', '.join(sorted(unknown))}")

    values = dict(data)
    for key in ("atom_xsl_template", "rss_xsl_template"):
        if key in values:
            values[key] = Path(values[key])
    return FeedFilenames(**values)


def build_locale_options(data: dict[str, Any]) -> dict[str, LocaleFeedOptions]:
    """Build the per-locale options map from a decoded config document.

    Top-level keys are shared by every locale; entries of ``locales``
    override them for one locale path. Channel and filename sections are
    merged key by key.
    """
    shared = {key: value for key, value in data.items() if key != "locales"}
    locales = data.get("locales") or {"/": {}}
    if not isinstance(locales, dict):
        raise ValueError("'locales' must be an object keyed by locale path")

    options_map = {}
    for locale_path, overrides in locales.items():
        merged = {**shared, **(overrides or {})}
        merged["channel"] = {
            **(shared.get("channel") or {}),
            **((overrides or {}).get("channel") or {}),
        }
        merged["filenames"] = {
            **(shared.get("filenames") or {}),
            **((overrides or {}).get("filenames") or {}),
        }

        hostname = merged.pop("hostname", None)
        if not hostname:
            raise ValueError(f"Missing 'hostname' for locale {locale_path}")

        count = merged.get("count", 100)
        if not isinstance(count, int) or isinstance(count, bool) or count < 1:
            raise ValueError(f"Invalid 'count' for locale {locale_path}: {count!r}")

        unknown = set(merged) - {
            "base",
            "atom",
            "json",
            "rss",
            "count",
            "channel",
            "filenames",
        }
        if unknown:
            raise ValueError(
                f"Unknown options for locale {locale_path}: {', '.join(sorted(unknown))}"
            )

        options_map[locale_path] = LocaleFeedOptions(
            hostname=hostname,
            base=merged.get("base", "/"),
            atom=bool(merged.get("atom", False)),
            json=bool(merged.get("json", False)),
            rss=bool(merged.get("rss", False)),
            count=count,
            channel=_build_channel(merged["channel"]),
            filenames=_build_filenames(merged["filenames"]),
        )

    return options_map


class Config:
    """Main configuration manager."""

    # Default config file path
    CONFIG_FILE = "feeds.json"
    DEFAULT_DEST = "dist"

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.config_file = os.getenv("SITE_FEED_CONFIG", self.CONFIG_FILE)
        self.dest_dir = Path(os.getenv("SITE_FEED_DEST", self.DEFAULT_DEST))
        self.log_level = os.getenv("LOG_LEVEL", "INFO")

    def get_locale_options(
        self, config_file: str | Path | None = None
    ) -> dict[str, LocaleFeedOptions]:
        """Get per-locale feed options from the JSON config file."""
        path = Path(config_file or self.config_file)
        if not path.exists():
            raise FileNotFoundError(f"Feed config file not found: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in feed config file: {e}") from e

        if not isinstance(data, dict):
            raise ValueError("Feed config file must contain a JSON object")

        return build_locale_options(data)
