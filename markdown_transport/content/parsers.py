"""Parse Markdown sources into `ContentRecord` instances.

Parsing never fails: a missing, unterminated or malformed front-matter block
produces empty metadata, and the defaults below fill in the required keys.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from .models import KNOWN_KEYS, ContentMeta, ContentRecord

logger = logging.getLogger(__name__)

FRONT_MATTER_DELIMITER = "---"
DEFAULT_TITLE = "Untitled"

_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}


def load_markdown_document(path: str | Path) -> ContentRecord:
    """Read a Markdown file from disk and parse it."""
    source_path = Path(path)
    return parse_markdown(source_path.read_bytes(), source_path)


def parse_markdown(
    raw: bytes | str,
    path: str | Path,
    *,
    now: datetime | None = None,
) -> ContentRecord:
    """Split front matter from ``raw`` and build a record with defaults applied."""
    text = raw.decode("utf-8-sig", errors="replace") if isinstance(raw, bytes) else raw
    front_matter, body = split_front_matter(text, source=path)
    meta = build_metadata(front_matter, Path(path), now=now)
    return ContentRecord(
        metadata=meta,
        content=body,
        raw_content=text,
        source_path=str(path),
    )


def split_front_matter(text: str, *, source: str | Path | None = None) -> tuple[dict[str, Any], str]:
    """Return the front-matter mapping and the body that follows it."""
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        return {}, text

    for idx, line in enumerate(lines[1:], start=1):
        if line.strip() == FRONT_MATTER_DELIMITER:
            raw_front_matter = "".join(lines[1:idx])
            body = "".join(lines[idx + 1 :])
            return _load_front_matter(raw_front_matter, source), body

    logger.warning("Closing front matter delimiter missing in %s; treating file as body.", source)
    return {}, text


def build_metadata(
    data: dict[str, Any],
    source_path: Path,
    *,
    now: datetime | None = None,
) -> ContentMeta:
    """Apply the defaulting policy: explicit values first, then fallbacks."""
    title = _text(data.get("title")) or DEFAULT_TITLE
    slug = _text(data.get("slug")) or source_path.stem
    publish_date = _publish_date(data.get("publishDate")) or _timestamp(now)
    draft = _draft(data.get("draft"), source_path)
    tags = _tags(data.get("tags"))
    extra = {str(key): value for key, value in data.items() if key not in KNOWN_KEYS}
    return ContentMeta(
        title=title,
        slug=slug,
        publish_date=publish_date,
        draft=draft,
        tags=tags,
        extra=extra,
    )


def _load_front_matter(raw: str, source: str | Path | None) -> dict[str, Any]:
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        logger.warning("Malformed front matter in %s: %s", source, exc)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Front matter in %s should define a mapping; ignoring.", source)
        return {}
    return data


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    return text if text.strip() else None


def _publish_date(value: Any) -> str | None:
    # YAML turns unquoted dates into date/datetime objects.
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return _text(value)


def _timestamp(now: datetime | None) -> str:
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _draft(value: Any, source_path: Path) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    logger.warning("Unrecognized draft value %r in %s; treating as draft.", value, source_path)
    return True


def _tags(value: Any) -> tuple[str, ...]:
    if value is None or value == "":
        return ()
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    if isinstance(value, (list, tuple, set)):
        return tuple(str(item) for item in value if item is not None)
    return (str(value),)
