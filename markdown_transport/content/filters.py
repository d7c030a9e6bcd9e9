"""Publish-eligibility filtering and chronological ordering of records."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Iterable, Sequence

from .models import ContentRecord

logger = logging.getLogger(__name__)


def parse_publish_date(value: Any) -> datetime | None:
    """Interpret a publish date as an aware datetime, or ``None`` if it cannot be read.

    Naive values are taken to be UTC. Date-only strings map to midnight.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def filter_published(
    records: Iterable[ContentRecord],
    *,
    now: datetime | None = None,
) -> list[ContentRecord]:
    """Keep records that are not drafts and whose publish date has passed.

    Records with an unreadable publish date are never eligible.
    """
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)

    published: list[ContentRecord] = []
    for record in records:
        if record.metadata.draft:
            continue
        when = parse_publish_date(record.metadata.publish_date)
        if when is None:
            logger.debug(
                "Skipping %s: unreadable publish date %r",
                record.slug,
                record.metadata.publish_date,
            )
            continue
        if when <= moment:
            published.append(record)
    return published


def sort_by_date(records: Sequence[ContentRecord], ascending: bool = False) -> list[ContentRecord]:
    """Return a new list ordered by publish date, newest first unless ``ascending``.

    The sort is stable; records with unreadable dates keep their relative order
    at the end of the list in both directions.
    """
    dated: list[tuple[datetime, ContentRecord]] = []
    undated: list[ContentRecord] = []
    for record in records:
        when = parse_publish_date(record.metadata.publish_date)
        if when is None:
            undated.append(record)
        else:
            dated.append((when, record))

    dated.sort(key=lambda entry: entry[0], reverse=not ascending)
    return [record for _, record in dated] + undated
