"""Bounded, ordered collection of feed items for one locale."""

from dataclasses import dataclass
from datetime import UTC, datetime

from .config import LocaleFeedOptions, get_filename
from .models import FeedAuthor, FeedItem
from .utils import get_url


@dataclass(frozen=True)
class FeedChannel:
    """Resolved feed-level metadata of a locale."""

    title: str
    link: str
    description: str
    language: str
    last_updated: datetime  # the only build-time value in generated feeds
    copyright: str = ""
    author: FeedAuthor | None = None
    icon: str | None = None
    image: str | None = None
    ttl: int | None = None
    pub_date: datetime | None = None


@dataclass(frozen=True)
class FeedLinks:
    """Absolute URLs of the files generated for a locale."""

    atom: str
    json: str
    rss: str
    atom_xsl: str
    rss_xsl: str


class FeedStore:
    """Feed items of one locale, unique by guid and capped at ``count``."""

    def __init__(
        self,
        options: LocaleFeedOptions,
        locale_path: str,
        build_time: datetime | None = None,
    ):
        """Initialize the store and resolve channel metadata.

        Args:
            options: Feed options of the locale
            locale_path: Route prefix of the locale
            build_time: Fallback for ``channel.last_updated``; defaults to now
        """
        self.options = options
        self.locale_path = locale_path
        self.count = options.count

        paths = get_filename(options, locale_path)
        hostname, base = options.hostname, options.base
        self.links = FeedLinks(
            atom=get_url(hostname, base, paths.atom_output_filename),
            json=get_url(hostname, base, paths.json_output_filename),
            rss=get_url(hostname, base, paths.rss_output_filename),
            atom_xsl=get_url(hostname, base, paths.atom_xsl_filename),
            rss_xsl=get_url(hostname, base, paths.rss_xsl_filename),
        )

        channel = options.channel
        title = channel.title or hostname
        self.channel = FeedChannel(
            title=title,
            link=channel.link or get_url(hostname, base, locale_path),
            description=channel.description or title,
            language=channel.language,
            last_updated=(
                channel.last_updated or build_time or datetime.now(UTC)
            ),
            copyright=channel.copyright,
            author=channel.author,
            icon=channel.icon,
            image=channel.image,
            ttl=channel.ttl,
            pub_date=channel.pub_date,
        )

        self._items: list[FeedItem] = []
        self._guids: set[str] = set()
        self._categories: list[str] = []
        self._authors: list[FeedAuthor] = []

    @property
    def items(self) -> tuple[FeedItem, ...]:
        return tuple(self._items)

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(self._categories)

    @property
    def authors(self) -> tuple[FeedAuthor, ...]:
        return tuple(self._authors)

    @property
    def is_full(self) -> bool:
        return len(self._items) >= self.count

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: FeedItem) -> bool:
        """Append an item unless its guid is already stored or the store is full.

        Returns:
            True if the item was added
        """
        if item.guid in self._guids or self.is_full:
            return False

        self._guids.add(item.guid)
        self._items.append(item)

        for category in item.categories:
            if category not in self._categories:
                self._categories.append(category)
        for author in item.authors:
            if author not in self._authors:
                self._authors.append(author)

        return True
