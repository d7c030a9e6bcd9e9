"""Markdown content ingestion with optional git-backed synchronization."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as load_pkg_version
from pathlib import Path
import tomllib

from .config import ConfigError, GitAuth, GitStrategy, TransportConfig, load_config
from .content import ContentMeta, ContentRecord, filter_published, parse_markdown, sort_by_date
from .git import GitAuthenticationError, TransportError, pull_repository, sync
from .ingest import load_all, load_file
from .transport import MarkdownTransport

__all__ = [
    "__version__",
    "ConfigError",
    "ContentMeta",
    "ContentRecord",
    "GitAuth",
    "GitAuthenticationError",
    "GitStrategy",
    "MarkdownTransport",
    "TransportConfig",
    "TransportError",
    "filter_published",
    "load_all",
    "load_config",
    "load_file",
    "parse_markdown",
    "pull_repository",
    "sort_by_date",
    "sync",
]


def _read_local_project_version() -> str:
    """Read the project version from pyproject.toml when the package is uninstalled."""
    pyproject = Path(__file__).resolve().parent.parent / "pyproject.toml"
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return "0.0.0"
    return data.get("project", {}).get("version", "0.0.0")


try:
    __version__ = load_pkg_version("markdown-transport")
except PackageNotFoundError:
    __version__ = _read_local_project_version()
