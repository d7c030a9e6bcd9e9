"""Object-style entry point bundling configuration with the ingestion helpers."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Sequence

from .config import ConfigError, TransportConfig
from .content import ContentRecord, filter_published, sort_by_date
from .git import GitTransport, sync
from .ingest import load_all, load_directory, load_file


class MarkdownTransport:
    """Load, filter and order Markdown content for one configuration."""

    def __init__(self, config: TransportConfig, *, transport: GitTransport | None = None) -> None:
        self._config = config
        self._transport = transport
        self._content_dir: Path | None = config.content_dir

    @property
    def config(self) -> TransportConfig:
        return self._config

    @property
    def content_dir(self) -> Path | None:
        return self._content_dir

    def load_all(self) -> list[ContentRecord]:
        if self._config.is_remote:
            return load_all(self._config, transport=self._transport)
        if self._content_dir is None:
            raise ConfigError("Content directory is not specified.")
        return load_directory(self._content_dir, self._config.extensions)

    def load_file(self, path: str | Path) -> ContentRecord:
        return load_file(path)

    def filter_published(
        self,
        records: Sequence[ContentRecord],
        *,
        now: datetime | None = None,
    ) -> list[ContentRecord]:
        return filter_published(records, now=now)

    def sort_by_date(self, records: Sequence[ContentRecord], ascending: bool = False) -> list[ContentRecord]:
        return sort_by_date(records, ascending)

    def sync(self) -> Path:
        """Synchronize the configured checkout and read content from it afterwards."""
        if not self._config.repo_url or self._config.local_path is None:
            raise ConfigError("Git repository URL and local path must be specified in config to sync.")
        self._content_dir = sync(self._config, transport=self._transport)
        return self._content_dir
