"""Command-line interface for pocketreader."""

from __future__ import annotations

import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import BinaryIO, Optional

import click

from pocketreader import __version__
from pocketreader.config import Config
from pocketreader.errors import ReaderError
from pocketreader.extractor import ArticleReader
from pocketreader.observability import configure_logging


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True), help="Configuration file path")
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: str) -> None:
    """pocketreader - Extract clean articles from saved web pages."""
    ctx.ensure_object(dict)
    loaded = Config.from_yaml(Path(config)) if config else Config()
    loaded.monitoring.log_level = log_level
    configure_logging(loaded.monitoring)
    ctx.obj["config"] = loaded


@cli.command()
@click.argument("source", type=click.File("rb"))
@click.option("--base-uri", help="Address the document was fetched from")
@click.option("--full", is_flag=True, help="Keep the ancestor chain down to the article")
@click.option("--no-headline", is_flag=True, help="Drop the leading headline from the content")
@click.option("--title-hint", help="Title to use instead of the in-document sources")
@click.option("--encoding", help="Encoding to try first when decoding the file")
@click.option(
    "--format",
    "output_format",
    default="html",
    type=click.Choice(["html", "text", "json"]),
    help="Output format",
)
@click.pass_context
def read(
    ctx: click.Context,
    source: BinaryIO,
    base_uri: Optional[str],
    full: bool,
    no_headline: bool,
    title_hint: Optional[str],
    encoding: Optional[str],
    output_format: str,
) -> None:
    """Extract the article from an HTML file (use - for stdin)."""
    reader = ArticleReader(ctx.obj["config"])
    try:
        article = reader.read(
            source.read(),
            base_uri,
            body_only=not full,
            no_headline=no_headline,
            title_hint=title_hint,
            encoding=encoding,
        )
    except ReaderError as e:
        click.echo(json.dumps({"error": str(e), "error_type": type(e).__name__}))
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps(asdict(article), indent=2, ensure_ascii=False))
    elif output_format == "text":
        if article.title:
            click.echo(article.title)
            click.echo()
        click.echo(article.text)
    else:
        click.echo(article.content)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
