"""Property-based tests for FeedStore."""

from datetime import UTC, datetime

from hypothesis import given
from hypothesis import strategies as st

from site_feed.config import ChannelOptions, LocaleFeedOptions
from site_feed.models import FeedAuthor, FeedItem
from site_feed.store import FeedStore

slugs = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789-", min_size=1, max_size=12)


def make_item(slug: str, **kwargs) -> FeedItem:
    link = f"https://example.com/{slug}.html"
    return FeedItem(guid=link, link=link, title=slug, **kwargs)


class TestFeedStoreProperties:
    """Property-based tests for FeedStore."""

    @given(st.integers(min_value=1, max_value=20), st.lists(slugs, max_size=50))
    def test_cap_never_exceeded_property(self, count, item_slugs):
        """For any sequence of additions, the store never holds more than count items."""
        store = FeedStore(
            LocaleFeedOptions(hostname="example.com", atom=True, count=count), "/"
        )

        for slug in item_slugs:
            store.add(make_item(slug))
            assert len(store.items) <= count

        assert len(store.items) == min(count, len(set(item_slugs)))

    @given(st.lists(slugs, max_size=30))
    def test_insertion_order_and_uniqueness_property(self, item_slugs):
        """Stored items keep first-insertion order and are unique by guid."""
        store = FeedStore(LocaleFeedOptions(hostname="example.com", count=100), "/")

        for slug in item_slugs:
            store.add(make_item(slug))

        expected = list(dict.fromkeys(item_slugs))
        assert [item.title for item in store.items] == expected
        assert len({item.guid for item in store.items}) == len(store.items)


class TestFeedStoreUnit:
    """Unit tests for FeedStore."""

    def test_duplicate_guid_is_noop(self):
        """Two items with the same guid: the second add is a no-op."""
        store = FeedStore(LocaleFeedOptions(hostname="example.com"), "/")

        assert store.add(make_item("post")) is True
        assert store.add(make_item("post")) is False
        assert len(store.items) == 1

    def test_add_when_full_is_noop(self):
        store = FeedStore(LocaleFeedOptions(hostname="example.com", count=1), "/")

        store.add(make_item("first"))
        assert store.is_full
        assert store.add(make_item("second")) is False
        assert [item.title for item in store.items] == ["first"]

    def test_categories_and_authors_are_aggregated(self):
        store = FeedStore(LocaleFeedOptions(hostname="example.com"), "/")
        ada = FeedAuthor(name="Ada")

        store.add(make_item("a", categories=("Guide", "Intro"), authors=(ada,)))
        store.add(make_item("b", categories=("Intro", "News"), authors=(ada,)))

        assert store.categories == ("Guide", "Intro", "News")
        assert store.authors == (ada,)

    def test_channel_and_links_for_locale(self):
        build_time = datetime(2024, 5, 1, tzinfo=UTC)
        options = LocaleFeedOptions(
            hostname="example.com",
            channel=ChannelOptions(title="Docs", language="zh-CN"),
        )

        store = FeedStore(options, "/zh/", build_time)

        assert store.channel.title == "Docs"
        assert store.channel.description == "Docs"
        assert store.channel.link == "https://example.com/zh/"
        assert store.channel.language == "zh-CN"
        assert store.channel.last_updated == build_time
        assert store.links.atom == "https://example.com/zh/atom.xml"
        assert store.links.json == "https://example.com/zh/feed.json"
        assert store.links.rss_xsl == "https://example.com/zh/rss.xsl"

    def test_configured_last_updated_wins_over_build_time(self):
        last_updated = datetime(2023, 1, 1, tzinfo=UTC)
        options = LocaleFeedOptions(
            hostname="https://example.com",
            channel=ChannelOptions(last_updated=last_updated),
        )

        store = FeedStore(options, "/", datetime(2024, 1, 1, tzinfo=UTC))

        assert store.channel.last_updated == last_updated
        assert store.channel.title == "https://example.com"
