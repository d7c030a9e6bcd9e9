"""Parsing, filtering and ordering of Markdown content records."""

from .filters import filter_published, parse_publish_date, sort_by_date
from .models import ContentMeta, ContentRecord
from .parsers import load_markdown_document, parse_markdown, split_front_matter

__all__ = [
    "ContentMeta",
    "ContentRecord",
    "filter_published",
    "load_markdown_document",
    "parse_markdown",
    "parse_publish_date",
    "sort_by_date",
    "split_front_matter",
]
