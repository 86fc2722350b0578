"""kroki-embed CLI: embed Kroki-rendered diagrams into a built site.

Usage:
    kroki-embed render _site/
    kroki-embed languages
    kroki-embed encode "graph TD; A-->B;"
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table as RichTable

from . import __version__
from .core.config import DEFAULT_CONFIG_FILENAME, load_config_file, resolve_settings
from .core.errors import ConfigurationError
from .core.languages import LANGUAGES_VERSION, SUPPORTED_LANGUAGES
from .core.models import Document, DocumentKind, Site
from .pipeline import SiteEmbedder
from .render.encoder import decode_diagram, encode_diagram

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _load_site(site_dir: Path, config_path: Path) -> Site:
    documents: list[Document] = []
    for path in sorted(site_dir.rglob("*.html")):
        try:
            doc = Document.from_path(path, root=site_dir, kind=DocumentKind.PAGE, writable=True)
        except UnicodeDecodeError as exc:
            logger.warning("Skipping '%s': not valid UTF-8 (%s)", path.relative_to(site_dir), exc.reason)
            continue
        documents.append(doc)
    return Site(
        config=load_config_file(config_path),
        documents=documents,
        source=str(config_path),
    )


@click.group()
@click.version_option(version=__version__, prog_name="kroki-embed")
def main():
    """kroki-embed: replace diagram code blocks in HTML with Kroki SVGs."""
    pass


@main.command()
@click.argument(
    "site_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "-c", "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Site configuration (default: SITE_DIR/{DEFAULT_CONFIG_FILENAME}).",
)
@click.option(
    "--url",
    envvar="KROKI_URL",
    default=None,
    help="Kroki server URL, overrides the 'kroki.url' config key (or set KROKI_URL).",
)
@click.option(
    "--max-concurrent",
    "max_concurrent_docs",
    type=int,
    default=None,
    help="Maximum number of documents rendered at once.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def render(
    site_dir: Path,
    config_path: Path | None,
    url: str | None,
    max_concurrent_docs: int | None,
    verbose: bool,
):
    """Render diagrams in every HTML file under SITE_DIR, in place."""
    _setup_logging(verbose)
    config_path = config_path or site_dir / DEFAULT_CONFIG_FILENAME

    try:
        site = _load_site(site_dir, config_path)
        settings = resolve_settings(
            site.config,
            source=site.source,
            overrides={"url": url, "max_concurrent_docs": max_concurrent_docs},
        )
    except ConfigurationError as exc:
        # One line, whatever the message contains
        message = " ".join(str(exc).split())
        err_console.print(f"[bold red]Error:[/] {escape(message)}", soft_wrap=True, highlight=False)
        raise SystemExit(1)

    originals = {doc.name: doc.content for doc in site.documents}
    result = asyncio.run(SiteEmbedder(settings).run(site.documents))

    written = 0
    for doc in site.documents:
        if doc.path is not None and doc.content != originals[doc.name]:
            doc.path.write_text(doc.content, encoding="utf-8")
            written += 1

    console.print(
        f"[green]✓[/] {result.rendered} diagram(s) embedded in {written} file(s) "
        f"[dim]({result.processed} scanned, {len(result.failures)} failed)[/]"
    )


@main.command()
def languages():
    """List the diagram languages that are recognised in HTML."""
    table = RichTable(title=f"Kroki languages (Kroki {LANGUAGES_VERSION})", show_lines=False)
    table.add_column("Language", style="bold cyan")
    table.add_column("Matched class")

    for language in SUPPORTED_LANGUAGES:
        table.add_row(language, f"language-{language}")

    console.print(table)


@main.command()
@click.argument("text", required=False)
@click.option(
    "-f", "--file",
    "source",
    type=click.File("r", encoding="utf-8"),
    default=None,
    help="Read the diagram from a file ('-' for stdin).",
)
def encode(text: str | None, source):
    """Print the Kroki transport token for TEXT."""
    if source is not None:
        text = source.read()
    if text is None:
        raise click.UsageError("Provide TEXT or --file.")
    click.echo(encode_diagram(text))


@main.command()
@click.argument("token")
def decode(token: str):
    """Print the diagram text encoded in TOKEN."""
    try:
        click.echo(decode_diagram(token))
    except ValueError as exc:
        raise click.BadParameter(f"not a Kroki token: {exc}", param_hint="TOKEN")


if __name__ == "__main__":
    main()
