"""Summary statistics for a set of loaded records."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from pydantic import BaseModel

from .content import ContentRecord, parse_publish_date


class IngestStats(BaseModel):
    total: int
    published: int
    drafts: int
    scheduled: int
    undated: int


def build_ingest_stats(
    records: Iterable[ContentRecord],
    *,
    now: datetime | None = None,
) -> IngestStats:
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)

    total = published = drafts = scheduled = undated = 0
    for record in records:
        total += 1
        if record.metadata.draft:
            drafts += 1
            continue
        when = parse_publish_date(record.metadata.publish_date)
        if when is None:
            undated += 1
        elif when > moment:
            scheduled += 1
        else:
            published += 1
    return IngestStats(
        total=total,
        published=published,
        drafts=drafts,
        scheduled=scheduled,
        undated=undated,
    )
