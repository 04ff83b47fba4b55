"""Data models for the site feed generator."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class GitData:
    """Version-control metadata attached to a page by the site build."""

    created_time: int | None = None  # epoch milliseconds
    updated_time: int | None = None  # epoch milliseconds
    contributors: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GitData":
        return cls(
            created_time=data.get("created_time", data.get("createdTime")),
            updated_time=data.get("updated_time", data.get("updatedTime")),
            contributors=list(data.get("contributors") or []),
        )


@dataclass
class Page:
    """A page already rendered by the external site build."""

    path: str
    path_locale: str = "/"
    title: str = ""
    frontmatter: dict[str, Any] = field(default_factory=dict)
    excerpt: str = ""
    content: str = ""
    file_path_relative: str | None = None
    lang: str | None = None
    git: GitData | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Page":
        """Build a page from a manifest entry.

        Accepts both snake_case keys and the camelCase keys emitted by the
        site engine (``pathLocale``, ``filePathRelative``, ``contentRendered``).
        """
        if "path" not in data:
            raise ValueError("Page entry is missing required key 'path'")

        git = data.get("git")
        if git is None and isinstance(data.get("data"), dict):
            git = data["data"].get("git")

        return cls(
            path=data["path"],
            path_locale=data.get("path_locale", data.get("pathLocale", "/")),
            title=data.get("title") or "",
            frontmatter=dict(data.get("frontmatter") or {}),
            excerpt=data.get("excerpt") or "",
            content=data.get(
                "content", data.get("contentRendered", data.get("content_rendered"))
            )
            or "",
            file_path_relative=data.get(
                "file_path_relative", data.get("filePathRelative")
            ),
            lang=data.get("lang"),
            git=GitData.from_dict(git) if git else None,
        )


@dataclass(frozen=True)
class FeedAuthor:
    """Author or contributor of a feed or feed item."""

    name: str
    email: str | None = None
    url: str | None = None


@dataclass(frozen=True)
class FeedItem:
    """Normalized feed entry built from a single page."""

    guid: str
    link: str
    title: str
    pub_date: datetime | None = None
    last_updated: datetime | None = None
    summary: str | None = None
    content: str | None = None
    authors: tuple[FeedAuthor, ...] = ()
    categories: tuple[str, ...] = ()
    image: str | None = None
