"""Command line entry point for the site feed generator."""

import asyncio
import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, Optional

import typer

from .config import Config
from .logging_config import create_execution_logger, setup_structured_logging
from .models import Page
from .output import FeedOutputError, generate_feeds

app = typer.Typer(
    help="Generate Atom, RSS and JSON feeds from a built site.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main() -> None:
    """Site feed generator."""


def load_pages(pages_file: Path) -> list[Page]:
    """Load the page manifest written by the site build.

    Raises:
        FileNotFoundError: If the manifest does not exist
        ValueError: If the manifest is not a JSON list of page objects
    """
    if not pages_file.exists():
        raise FileNotFoundError(f"Page manifest not found: {pages_file}")

    try:
        with open(pages_file, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in page manifest: {e}") from e

    if isinstance(data, dict):
        data = data.get("pages", [])
    if not isinstance(data, list):
        raise ValueError("Page manifest must be a JSON list of pages")

    return [Page.from_dict(entry) for entry in data]


@app.command()
def build(
    pages_file: Annotated[
        Path, typer.Option("--pages", help="JSON manifest of the built pages.")
    ],
    config_file: Annotated[
        Optional[Path], typer.Option("--config", help="Feed configuration file.")
    ] = None,
    dest: Annotated[
        Optional[Path], typer.Option("--dest", help="Output directory of the site.")
    ] = None,
    log_level: Annotated[
        Optional[str], typer.Option("--log-level", help="Logging level.")
    ] = None,
) -> None:
    """Write feed files and stylesheets for every configured locale."""
    config = Config()
    setup_structured_logging(log_level or config.log_level)

    execution_id = f"build_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
    main_logger = create_execution_logger("main", execution_id)
    main_logger.log_execution_start(pages_file=str(pages_file))

    dest_dir = dest or config.dest_dir
    try:
        options_map = config.get_locale_options(config_file)
        pages = load_pages(pages_file)
        main_logger.info(
            f"Loaded {len(pages)} pages for {len(options_map)} locales",
            pages_count=len(pages),
            locales_count=len(options_map),
        )
        written = asyncio.run(
            generate_feeds(pages, dest_dir, options_map, execution_id)
        )
    except (FileNotFoundError, ValueError) as e:
        main_logger.error(f"Invalid input: {e}", error=str(e))
        main_logger.log_execution_end(success=False, error=str(e))
        typer.echo(json.dumps({"status": "error", "error": str(e)}))
        raise typer.Exit(code=1) from e
    except FeedOutputError as e:
        main_logger.log_execution_end(success=False, errors=len(e.errors))
        typer.echo(
            json.dumps(
                {
                    "status": "error",
                    "error": str(e),
                    "errors": [str(error) for error in e.errors],
                }
            )
        )
        raise typer.Exit(code=1) from e

    metrics = {"locales": len(options_map), "files_written": len(written)}
    main_logger.log_metrics(metrics)
    main_logger.log_execution_end(success=True, metrics=metrics)
    typer.echo(
        json.dumps(
            {
                "status": "success",
                "execution_id": execution_id,
                "files": [str(path.relative_to(dest_dir)) for path in written],
                "metrics": metrics,
            }
        )
    )


if __name__ == "__main__":
    app()
