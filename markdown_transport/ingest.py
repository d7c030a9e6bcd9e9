"""High-level ingestion helpers to load content records from a directory tree."""

from __future__ import annotations

import logging
import stat
from pathlib import Path
from typing import Iterable, Iterator, List

from .config import DEFAULT_EXTENSIONS, ConfigError, TransportConfig
from .content import ContentRecord, load_markdown_document
from .git import GitTransport, checkout

logger = logging.getLogger(__name__)

SKIPPED_DIRECTORIES = {".git"}


def load_all(config: TransportConfig, *, transport: GitTransport | None = None) -> list[ContentRecord]:
    """Load every recognized file under the content root.

    A configured repository is synchronized first and its checkout becomes the
    content root. Records come back in traversal order.
    """
    if config.is_remote:
        with checkout(config, transport=transport) as root:
            return load_directory(root, config.extensions)

    if config.content_dir is None:
        raise ConfigError("Content directory is not specified.")
    return load_directory(config.content_dir, config.extensions)


def load_file(path: str | Path) -> ContentRecord:
    """Load a single file without walking any directory."""
    return load_markdown_document(path)


def load_directory(root: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> list[ContentRecord]:
    records: List[ContentRecord] = []
    for path in iter_content_files(root, extensions):
        try:
            records.append(load_markdown_document(path))
        except OSError as exc:
            logger.error("Error reading file %s: %s", path, exc)
    logger.info("Loaded %d document(s) from %s.", len(records), root)
    return records


def iter_content_files(root: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> Iterator[Path]:
    """Yield content files depth-first, entries in name order within each directory.

    Unreadable entries are logged and skipped. A missing root yields nothing.
    """
    root = Path(root)
    if not root.exists():
        logger.warning("Directory not found: %s. Skipping recursive file search.", root)
        return
    suffixes = {suffix.lower() for suffix in extensions}
    yield from _walk(root, suffixes)


def _walk(directory: Path, suffixes: set[str]) -> Iterator[Path]:
    try:
        entries = sorted(directory.iterdir(), key=lambda item: item.name)
    except OSError as exc:
        logger.error("Error reading directory %s: %s", directory, exc)
        return

    for path in entries:
        try:
            mode = path.stat().st_mode
        except OSError as exc:
            logger.error("Error getting stats for file %s: %s", path, exc)
            continue

        if stat.S_ISDIR(mode):
            if path.name in SKIPPED_DIRECTORIES or path.is_symlink():
                logger.debug("Not descending into %s", path)
                continue
            yield from _walk(path, suffixes)
        elif stat.S_ISREG(mode) and path.suffix.lower() in suffixes:
            yield path
