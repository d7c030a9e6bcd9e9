"""Typed representations of parsed Markdown content."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

KNOWN_KEYS = ("title", "slug", "publishDate", "draft", "tags")


class ContentMeta(BaseModel):
    """Front-matter metadata with a fixed core and an open side mapping."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Display title.")
    slug: str = Field(description="URL-friendly identifier.")
    publish_date: str = Field(description="Publish timestamp as written in the source (ISO 8601).")
    draft: bool = Field(default=True, description="Unpublished when true.")
    tags: tuple[str, ...] = Field(default=(), description="Free-form tags.")
    extra: Mapping[str, Any] = Field(
        default_factory=dict,
        validate_default=True,
        description="Front-matter keys outside the known set, passed through verbatim.",
    )

    @field_validator("extra", mode="after")
    def _freeze_extra(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    @field_serializer("extra")
    def _serialize_extra(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return dict(value)

    def as_dict(self) -> dict[str, Any]:
        """Return the metadata keyed by the front-matter names."""
        data = dict(self.extra)
        data.update(
            {
                "title": self.title,
                "slug": self.slug,
                "publishDate": self.publish_date,
                "draft": self.draft,
                "tags": list(self.tags),
            }
        )
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self.as_dict().get(key, default)

    def __getitem__(self, key: str) -> Any:
        data = self.as_dict()
        if key not in data:
            raise KeyError(key)
        return data[key]


class ContentRecord(BaseModel):
    """One Markdown file: metadata, body, and the original text."""

    model_config = ConfigDict(frozen=True)

    metadata: ContentMeta = Field(description="Front-matter metadata with defaults applied.")
    content: str = Field(description="Body text with the front-matter block removed.")
    raw_content: str = Field(description="Full original file text.")
    source_path: Optional[str] = Field(default=None, description="Path the record was read from.")

    @property
    def slug(self) -> str:
        return self.metadata.slug

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def publish_date(self) -> str:
        return self.metadata.publish_date

    @property
    def draft(self) -> bool:
        return self.metadata.draft
