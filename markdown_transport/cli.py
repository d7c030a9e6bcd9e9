"""CLI entrypoints for loading and inspecting Markdown content."""

import json
import logging
import os
from pathlib import Path
from typing import Annotated, Any, Callable, TypeVar

import typer
from dotenv import dotenv_values
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .config import ConfigError, TransportConfig, config_from_env, load_config
from .content import ContentRecord
from .git import TransportError
from .reporting import build_ingest_stats
from .transport import MarkdownTransport

console = Console()
app = typer.Typer(help="Load Markdown content from a directory or a git repository.")

PREVIEW_LENGTH = 100

T = TypeVar("T")

ConfigPathOption = Annotated[
    str | None,
    typer.Option("--config", "-c", help="Path to a YAML configuration file or its directory."),
]
EnvFileOption = Annotated[
    str,
    typer.Option("--env-file", help="Dotenv file consulted when no config file is given."),
]
ContentDirOption = Annotated[
    str | None,
    typer.Option("--content-dir", "-d", help="Local content directory; overrides configuration."),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show progress logging."),
    ] = False,
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


@app.command("list")
def list_posts(
    config_path: ConfigPathOption = None,
    env_file: EnvFileOption = ".env",
    content_dir: ContentDirOption = None,
    include_all: Annotated[
        bool,
        typer.Option("--all", "-a", help="Include drafts and scheduled posts."),
    ] = False,
    ascending: Annotated[
        bool,
        typer.Option("--ascending", help="Oldest first instead of newest first."),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print records as JSON."),
    ] = False,
) -> None:
    """Load posts, keep the published ones, and print them newest first."""
    config = _resolve_config(config_path, env_file, content_dir)
    transport = MarkdownTransport(config)

    records = _guard(transport.load_all)
    selected = records if include_all else transport.filter_published(records)
    ordered = transport.sort_by_date(selected, ascending=ascending)

    if as_json:
        payload = [_record_payload(record) for record in ordered]
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))
        return

    stats = build_ingest_stats(records)
    for record in ordered:
        _print_record(record)
    console.print(
        f"[bold blue]Summary[/]: {stats.total} total, {stats.published} published, "
        f"{stats.drafts} draft(s), {stats.scheduled} scheduled, {stats.undated} undated."
    )


@app.command()
def sync(
    config_path: ConfigPathOption = None,
    env_file: EnvFileOption = ".env",
) -> None:
    """Synchronize the configured repository checkout."""
    config = _resolve_config(config_path, env_file, None)
    transport = MarkdownTransport(config)
    directory = _guard(transport.sync)
    console.print(f"[bold green]Synced[/]: {escape(str(directory))}")


@app.command()
def show(
    path: Annotated[
        Path,
        typer.Argument(..., help="Markdown file to load."),
    ],
) -> None:
    """Print the metadata and body of a single file."""
    try:
        record = MarkdownTransport(TransportConfig()).load_file(path)
    except OSError as exc:
        raise typer.BadParameter(f"Unable to read {path}: {exc}") from exc

    for key, value in record.metadata.as_dict().items():
        console.print(f"[bold]{escape(str(key))}[/]: {escape(str(value))}")
    console.print()
    console.print(record.content, markup=False, highlight=False)


def _resolve_config(config_path: str | None, env_file: str, content_dir: str | None) -> TransportConfig:
    if config_path:
        config = _load(config_path)
    else:
        environ: dict[str, str | None] = {}
        if Path(env_file).exists():
            environ.update(dotenv_values(env_file, encoding="utf-8"))
        environ.update(os.environ)
        try:
            config = config_from_env(environ)
        except ConfigError as exc:
            raise typer.BadParameter(str(exc)) from exc

    if content_dir:
        config = config.model_copy(update={"content_dir": Path(content_dir), "repo_url": None})
    return config


def _load(path: str) -> TransportConfig:
    try:
        return load_config(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Config file not found: {path}") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _guard(action: Callable[[], T]) -> T:
    try:
        return action()
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    except TransportError as exc:
        console.print(f"[bold red]Git error[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _print_record(record: ContentRecord) -> None:
    meta = record.metadata
    tags = ", ".join(meta.tags) or "none"
    preview = record.content.strip()[:PREVIEW_LENGTH]
    console.print("---")
    console.print(f"[bold]Title[/]: {escape(meta.title)}")
    console.print(f"[bold]Slug[/]: {escape(meta.slug)}")
    console.print(f"[bold]Published[/]: {escape(meta.publish_date)}")
    console.print(f"[bold]Tags[/]: {escape(tags)}")
    console.print(f"[bold]Preview[/]: {escape(preview)}")


def _record_payload(record: ContentRecord) -> dict[str, Any]:
    return {
        "metadata": record.metadata.as_dict(),
        "content": record.content,
        "source_path": record.source_path,
    }
