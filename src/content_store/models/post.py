"""Post models."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from content_store.models.category import Category
from content_store.models.tag import Tag


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Post(BaseModel):
    """A stored post. Relations are kept as ids."""

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(..., ge=1)
    title: str
    content: str
    category_id: int | None = Field(default=None, alias="categoryId")
    tag_ids: list[int] = Field(default_factory=list, alias="tagIds")
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")
    source: str = "admin"

    @field_validator("title", "content")
    @classmethod
    def _require_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("tag_ids", mode="before")
    @classmethod
    def _dedupe_tag_ids(cls, v):
        if v is None:
            return []
        if not isinstance(v, (list, tuple)):
            raise ValueError("tagIds must be a list")
        seen: list[int] = []
        for item in v:
            if isinstance(item, bool) or not isinstance(item, (int, str)):
                raise ValueError(f"invalid tag id {item!r}")
            tag_id = int(item)
            if tag_id and tag_id not in seen:
                seen.append(tag_id)
        return seen

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        # Timestamps without an offset were written as UTC
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v


class PostWithRelations(Post):
    """A post with its category and tags hydrated from their ids."""

    category: Category | None = None
    tags: list[Tag] = Field(default_factory=list)
