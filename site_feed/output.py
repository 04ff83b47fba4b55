"""Write feed files and XSL stylesheets for every configured locale."""

import asyncio
import shutil
from collections.abc import Callable, Coroutine, Iterable
from datetime import UTC, datetime
from functools import cmp_to_key
from pathlib import Path
from typing import Any

from .config import LocaleFeedOptions, get_filename
from .feed_item import build_feed_item
from .generators import get_atom_feed, get_json_feed, get_rss_feed
from .logging_config import ExecutionLogger, create_execution_logger
from .models import Page
from .store import FeedStore

OptionsMap = dict[str, LocaleFeedOptions]


class FeedOutputError(Exception):
    """Raised after all output tasks settled when one or more of them failed."""

    def __init__(self, errors: list[BaseException]):
        self.errors = errors
        details = "; ".join(f"{type(e).__name__}: {e}" for e in errors)
        super().__init__(f"{len(errors)} feed output task(s) failed: {details}")


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _copy_file(source: Path, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, target)


def select_pages(
    pages: Iterable[Page], options: LocaleFeedOptions, locale_path: str
) -> list[Page]:
    """Return the locale's pages, filtered then sorted by the configured strategies."""
    candidates = [
        page
        for page in pages
        if page.path_locale == locale_path and options.filter(page)
    ]
    return sorted(candidates, key=cmp_to_key(options.sorter))


def populate_feed_store(
    store: FeedStore,
    pages: Iterable[Page],
    logger: ExecutionLogger | None = None,
) -> FeedStore:
    """Add feed items for the locale's selected pages until the store is full."""
    for page in select_pages(pages, store.options, store.locale_path):
        store.add(build_feed_item(page, store.options, store.locale_path, logger))
        if store.is_full:
            break
    return store


def _copy_templates(
    feed_format: str,
    dest: Path,
    options_map: OptionsMap,
    logger: ExecutionLogger,
) -> list[Coroutine[Any, Any, Path]]:
    async def copy_template(source: Path, filename: str) -> Path:
        target = dest / filename
        await asyncio.to_thread(_copy_file, source, target)
        logger.log_file_generated(f"{feed_format} stylesheet", filename)
        return target

    tasks = []
    for locale_path, options in options_map.items():
        paths = get_filename(options, locale_path)
        if feed_format == "Atom" and options.atom:
            tasks.append(
                copy_template(paths.atom_xsl_template, paths.atom_xsl_filename)
            )
        elif feed_format == "RSS" and options.rss:
            tasks.append(copy_template(paths.rss_xsl_template, paths.rss_xsl_filename))
    return tasks


def output_atom_templates(
    dest: Path, options_map: OptionsMap, logger: ExecutionLogger | None = None
) -> list[Coroutine[Any, Any, Path]]:
    """Copy the Atom stylesheet for every locale with Atom enabled."""
    logger = logger or create_execution_logger("output")
    return _copy_templates("Atom", Path(dest), options_map, logger)


def output_rss_templates(
    dest: Path, options_map: OptionsMap, logger: ExecutionLogger | None = None
) -> list[Coroutine[Any, Any, Path]]:
    """Copy the RSS stylesheet for every locale with RSS enabled."""
    logger = logger or create_execution_logger("output")
    return _copy_templates("RSS", Path(dest), options_map, logger)


def output_feed_files(
    pages: list[Page],
    dest: Path,
    options_map: OptionsMap,
    logger: ExecutionLogger | None = None,
    build_time: datetime | None = None,
) -> list[Coroutine[Any, Any, list[Path]]]:
    """Create one output task per locale that has at least one format enabled.

    Each task collects the locale's feed items in memory, then writes the
    enabled formats concurrently. A task raises FeedOutputError once all of
    its writes settled if any of them failed.
    """
    logger = logger or create_execution_logger("output")
    dest = Path(dest)
    local_map = {
        locale_path: FeedStore(options, locale_path, build_time)
        for locale_path, options in options_map.items()
    }

    async def output_locale(
        locale_path: str, options: LocaleFeedOptions
    ) -> list[Path]:
        feed_store = populate_feed_store(local_map[locale_path], pages, logger)
        logger.log_feed_items(locale_path, len(feed_store))

        paths = get_filename(options, locale_path)

        async def output_feed(
            name: str, filename: str, generator: Callable[[FeedStore], str]
        ) -> Path:
            target = dest / filename
            await asyncio.to_thread(_write_text, target, generator(feed_store))
            logger.log_file_generated(name, filename)
            return target

        writes = []
        if options.atom:
            writes.append(
                output_feed("Atom feed", paths.atom_output_filename, get_atom_feed)
            )
        if options.json:
            writes.append(
                output_feed("JSON feed", paths.json_output_filename, get_json_feed)
            )
        if options.rss:
            writes.append(
                output_feed("RSS feed", paths.rss_output_filename, get_rss_feed)
            )

        results = await asyncio.gather(*writes, return_exceptions=True)
        errors = [result for result in results if isinstance(result, BaseException)]
        if errors:
            raise FeedOutputError(errors)
        return results

    return [
        output_locale(locale_path, options)
        for locale_path, options in options_map.items()
        if options.enabled
    ]


async def generate_feeds(
    pages: list[Page],
    dest: str | Path,
    options_map: OptionsMap,
    execution_id: str | None = None,
) -> list[Path]:
    """Generate feeds and stylesheets for all locales.

    Every locale task and stylesheet copy runs to completion; failures are
    collected and raised together once all of them have settled.

    Returns:
        Paths of all files written

    Raises:
        FeedOutputError: If any output task failed
    """
    logger = create_execution_logger("output", execution_id)
    logger.log_execution_start(locales=list(options_map), pages_count=len(pages))
    dest = Path(dest)

    tasks = [
        *output_feed_files(pages, dest, options_map, logger, datetime.now(UTC)),
        *output_atom_templates(dest, options_map, logger),
        *output_rss_templates(dest, options_map, logger),
    ]
    results = await asyncio.gather(*tasks, return_exceptions=True)

    written: list[Path] = []
    errors: list[BaseException] = []
    for result in results:
        if isinstance(result, FeedOutputError):
            errors.extend(result.errors)
        elif isinstance(result, BaseException):
            errors.append(result)
        elif isinstance(result, list):
            written.extend(result)
        else:
            written.append(result)

    for error in errors:
        logger.error(f"Feed output task failed: {error}", error=str(error))

    logger.log_execution_end(
        success=not errors, files_written=len(written), errors=len(errors)
    )

    if errors:
        raise FeedOutputError(errors)

    return written
