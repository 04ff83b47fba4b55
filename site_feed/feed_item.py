"""Feed item construction from rendered pages."""

from typing import Any

from .config import LocaleFeedOptions
from .logging_config import ExecutionLogger, create_execution_logger
from .models import FeedAuthor, FeedItem, Page
from .utils import (
    clean_html_content,
    from_timestamp_ms,
    get_page_date,
    get_url,
)


def build_feed_item(
    page: Page,
    options: LocaleFeedOptions,
    locale_path: str,
    logger: ExecutionLogger | None = None,
) -> FeedItem:
    """Normalize a page into a FeedItem.

    Missing or invalid frontmatter never aborts the build: each field falls
    back to a value derived from the page.

    Args:
        page: Page rendered by the site build
        options: Feed options of the owning locale
        locale_path: Route prefix of the owning locale
        logger: Logger used to report frontmatter problems

    Returns:
        The feed item for the page

    Raises:
        ValueError: If the page does not belong to the locale
    """
    if page.path_locale != locale_path:
        raise ValueError(
            f"Page {page.path} belongs to locale {page.path_locale}, not {locale_path}"
        )

    logger = logger or create_execution_logger("feed_item")
    frontmatter = page.frontmatter
    feed_frontmatter = frontmatter.get("feed")
    if not isinstance(feed_frontmatter, dict):
        feed_frontmatter = {}

    link = get_url(options.hostname, options.base, page.path)
    pub_date = get_page_date(page, logger)
    last_updated = None
    if page.git:
        last_updated = from_timestamp_ms(page.git.updated_time)

    return FeedItem(
        guid=_as_text(feed_frontmatter.get("guid")) or link,
        link=link,
        title=_get_title(page, feed_frontmatter, logger),
        pub_date=pub_date,
        last_updated=last_updated or pub_date,
        summary=_get_summary(page, feed_frontmatter),
        content=(
            _as_text(feed_frontmatter.get("content"))
            or page.content
            or page.excerpt
            or None
        ),
        authors=_get_authors(page, options, logger),
        categories=_get_categories(frontmatter),
        image=_get_image(frontmatter, options),
    )


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _get_title(page: Page, feed_frontmatter: dict, logger: ExecutionLogger) -> str:
    title = (
        _as_text(feed_frontmatter.get("title"))
        or _as_text(page.frontmatter.get("title"))
        or _as_text(page.title)
    )
    if title:
        return title

    # derive a title from the route, e.g. /guide/get-started.html
    slug = page.path.rstrip("/").rsplit("/", 1)[-1]
    slug = slug.removesuffix(".html") or "index"
    derived = slug.replace("-", " ").replace("_", " ").strip().capitalize()
    logger.warning(
        f"Page {page.path} has no title, using '{derived}'", page_path=page.path
    )
    return derived


def _get_summary(page: Page, feed_frontmatter: dict) -> str | None:
    summary = _as_text(feed_frontmatter.get("description")) or _as_text(
        page.frontmatter.get("description")
    )
    if summary:
        return summary

    return clean_html_content(page.excerpt) or None


def _parse_author_entry(value: Any) -> FeedAuthor | None:
    if isinstance(value, str) and value.strip():
        return FeedAuthor(name=value.strip())
    if isinstance(value, dict) and _as_text(value.get("name")):
        return FeedAuthor(
            name=_as_text(value["name"]),
            email=_as_text(value.get("email")),
            url=_as_text(value.get("url")),
        )
    return None


def _get_authors(
    page: Page, options: LocaleFeedOptions, logger: ExecutionLogger
) -> tuple[FeedAuthor, ...]:
    raw = page.frontmatter.get("author")
    if raw is not None and raw is not False:
        entries = raw if isinstance(raw, list) else [raw]
        authors = [_parse_author_entry(entry) for entry in entries]
        if None in authors:
            logger.warning(
                f"Ignoring invalid author entries on page {page.path}",
                page_path=page.path,
            )
        authors = [author for author in authors if author]
        if authors:
            return tuple(authors)

    if page.git and page.git.contributors:
        contributors = [
            FeedAuthor(name=c["name"], email=_as_text(c.get("email")))
            for c in page.git.contributors
            if _as_text(c.get("name"))
        ]
        if contributors:
            return tuple(contributors)

    if options.channel.author:
        return (options.channel.author,)

    return ()


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    text = str(value).strip()
    return [text] if text else []


def _get_categories(frontmatter: dict) -> tuple[str, ...]:
    categories: list[str] = []
    for key in ("category", "categories", "tag", "tags"):
        for category in _as_list(frontmatter.get(key)):
            if category not in categories:
                categories.append(category)
    return tuple(categories)


def _get_image(frontmatter: dict, options: LocaleFeedOptions) -> str | None:
    for key in ("cover", "banner", "image"):
        image = _as_text(frontmatter.get(key))
        if image:
            if "://" in image:
                return image
            return get_url(options.hostname, options.base, image)
    return None
