"""
Feed Generators
===============
Serialize a FeedStore into Atom 1.0, RSS 2.0 and JSON Feed 1.1 documents.

Atom and RSS documents are built with feedgen and reference the locale's
XSL stylesheet through an ``xml-stylesheet`` processing instruction.
Entries keep the order of ``FeedStore.items``.
"""

import json
from typing import Any
from xml.sax.saxutils import escape

from feedgen.feed import FeedGenerator

from .models import FeedAuthor
from .store import FeedStore
from .utils import strip_xml_illegal

GENERATOR_NAME = "site-feed"
GENERATOR_URI = "https://pypi.org/project/site-feed/"
JSON_FEED_VERSION = "https://jsonfeed.org/version/1.1"


def _author_dict(author: FeedAuthor) -> dict[str, str]:
    data = {"name": strip_xml_illegal(author.name)}
    if author.email:
        data["email"] = author.email
    if author.url:
        data["uri"] = author.url
    return data


def _build_feed_generator(store: FeedStore, self_link: str) -> FeedGenerator:
    """Create a FeedGenerator populated with the store's channel and items.

    Text that XML 1.0 cannot represent is stripped, since lxml rejects it.
    """
    channel = store.channel

    fg = FeedGenerator()
    fg.id(channel.link)
    fg.title(strip_xml_illegal(channel.title))
    fg.description(strip_xml_illegal(channel.description))
    # RSS <link> is the last link added
    fg.link(href=self_link, rel="self")
    fg.link(href=channel.link, rel="alternate")
    fg.language(channel.language)
    fg.generator(GENERATOR_NAME, uri=GENERATOR_URI)

    # Build time, isolated to <updated> / <lastBuildDate>
    fg.updated(channel.last_updated)
    fg.lastBuildDate(channel.last_updated)

    if channel.pub_date:
        fg.pubDate(channel.pub_date)
    if channel.copyright:
        fg.rights(strip_xml_illegal(channel.copyright))
    if channel.author:
        fg.author(_author_dict(channel.author))
    if channel.icon:
        fg.icon(channel.icon)
    if channel.image:
        fg.logo(channel.image)
    if channel.ttl:
        fg.ttl(channel.ttl)
    for category in store.categories:
        fg.category(term=strip_xml_illegal(category))
    for author in store.authors:
        fg.contributor(_author_dict(author))

    for item in store.items:
        entry = fg.add_entry(order="append")
        entry.id(item.guid)
        entry.guid(item.guid, permalink=item.guid == item.link)
        entry.title(strip_xml_illegal(item.title))
        entry.link(href=item.link)
        # Atom requires <updated> on every entry
        entry.updated(item.last_updated or item.pub_date or channel.last_updated)

        if item.pub_date:
            entry.published(item.pub_date)
        if item.summary:
            entry.summary(strip_xml_illegal(item.summary))
        if item.content:
            entry.content(strip_xml_illegal(item.content), type="html")
        for author in item.authors:
            entry.author(_author_dict(author))
        for category in item.categories:
            entry.category(term=strip_xml_illegal(category))

    return fg


def _with_stylesheet(document: bytes, stylesheet_url: str) -> str:
    """Insert an xml-stylesheet processing instruction after the declaration."""
    declaration, _, body = document.decode("utf-8").partition("\n")
    href = escape(stylesheet_url, {'"': "&quot;"})
    instruction = f'<?xml-stylesheet type="text/xsl" href="{href}"?>'
    return f"{declaration}\n{instruction}\n{body}"


def get_atom_feed(store: FeedStore) -> str:
    """Render the store as an Atom 1.0 document."""
    fg = _build_feed_generator(store, store.links.atom)
    return _with_stylesheet(fg.atom_str(pretty=True), store.links.atom_xsl)


def get_rss_feed(store: FeedStore) -> str:
    """Render the store as an RSS 2.0 document."""
    fg = _build_feed_generator(store, store.links.rss)
    return _with_stylesheet(fg.rss_str(pretty=True), store.links.rss_xsl)


def _json_author(author: FeedAuthor) -> dict[str, str]:
    data = {"name": author.name}
    if author.url:
        data["url"] = author.url
    return data


def _drop_empty(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value not in (None, "", [])}


def get_json_feed(store: FeedStore) -> str:
    """Render the store as a JSON Feed 1.1 document."""
    channel = store.channel

    items = []
    for item in store.items:
        items.append(
            _drop_empty(
                {
                    "id": item.guid,
                    "url": item.link,
                    "title": item.title,
                    "summary": item.summary,
                    "content_html": item.content,
                    "image": item.image,
                    "date_published": (
                        item.pub_date.isoformat() if item.pub_date else None
                    ),
                    "date_modified": (
                        item.last_updated.isoformat() if item.last_updated else None
                    ),
                    "authors": [_json_author(a) for a in item.authors],
                    "tags": list(item.categories),
                }
            )
        )

    feed = _drop_empty(
        {
            "version": JSON_FEED_VERSION,
            "title": channel.title,
            "home_page_url": channel.link,
            "feed_url": store.links.json,
            "description": channel.description,
            "icon": channel.image,
            "favicon": channel.icon,
            "language": channel.language,
            "authors": [_json_author(channel.author)] if channel.author else [],
        }
    )
    feed["items"] = items

    return json.dumps(feed, indent=2, ensure_ascii=False)
