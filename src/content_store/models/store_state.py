"""Persisted document models: the whole storage file in one object."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from content_store.models.category import DEFAULT_CATEGORY_SLUG, Category
from content_store.models.post import Post
from content_store.models.tag import Tag


class Meta(BaseModel):
    """Id counters. Each one only ever moves forward."""

    model_config = ConfigDict(populate_by_name=True)

    next_category_id: int = Field(default=1, ge=1, alias="nextCategoryId")
    next_tag_id: int = Field(default=1, ge=1, alias="nextTagId")
    next_post_id: int = Field(default=1, ge=1, alias="nextPostId")


class StoreState(BaseModel):
    """Categories, tags, posts and counters as stored on disk."""

    model_config = ConfigDict(populate_by_name=True)

    categories: list[Category] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    posts: list[Post] = Field(default_factory=list)
    meta: Meta = Field(default_factory=Meta)

    @model_validator(mode="after")
    def _advance_counters(self) -> "StoreState":
        # Counters must stay ahead of every id already handed out.
        meta = self.meta
        for items, attr in (
            (self.categories, "next_category_id"),
            (self.tags, "next_tag_id"),
            (self.posts, "next_post_id"),
        ):
            if items:
                floor = max(item.id for item in items) + 1
                if getattr(meta, attr) < floor:
                    setattr(meta, attr, floor)
        return self

    @classmethod
    def initial(cls, default_category_name: str) -> "StoreState":
        """Fresh state holding only the default category."""
        state = cls()
        state.allocate_default_category(default_category_name)
        return state

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> tuple["StoreState", list[str]]:
        """
        Build state from a parsed storage document, record by record.

        Invalid records and counters are dropped instead of failing the
        whole document.

        Returns:
            The repaired state and a description of every dropped value
        """
        problems: list[str] = []
        collections: dict[str, list] = {}
        for key, model in (("categories", Category), ("tags", Tag), ("posts", Post)):
            raw_items = data.get(key, [])
            if not isinstance(raw_items, list):
                problems.append(f"{key}: not a list")
                raw_items = []
            kept = []
            for index, raw_item in enumerate(raw_items):
                try:
                    kept.append(model.model_validate(raw_item))
                except PydanticValidationError as exc:
                    problems.append(f"{key}[{index}]: {exc.error_count()} invalid field(s)")
            collections[key] = kept

        counters: dict[str, int] = {}
        raw_meta = data.get("meta", {})
        if not isinstance(raw_meta, dict):
            problems.append("meta: not an object")
            raw_meta = {}
        for name, field in Meta.model_fields.items():
            if field.alias not in raw_meta:
                continue
            value = raw_meta[field.alias]
            if isinstance(value, int) and not isinstance(value, bool) and value >= 1:
                counters[name] = value
            else:
                problems.append(f"meta.{field.alias}: {value!r} is not a positive integer")

        state = cls(meta=Meta(**counters), **collections)
        return state, problems

    def to_document(self) -> dict:
        """Serialize to the JSON-compatible storage layout."""
        return self.model_dump(mode="json", by_alias=True)

    # --- Lookups ---

    def get_category(self, category_id: int | None) -> Category | None:
        if category_id is None:
            return None
        return next((c for c in self.categories if c.id == category_id), None)

    def get_category_by_slug(self, slug: str) -> Category | None:
        return next((c for c in self.categories if c.slug == slug), None)

    @property
    def default_category(self) -> Category | None:
        return self.get_category_by_slug(DEFAULT_CATEGORY_SLUG)

    def get_tag(self, tag_id: int) -> Tag | None:
        return next((t for t in self.tags if t.id == tag_id), None)

    def get_tag_by_slug(self, slug: str) -> Tag | None:
        return next((t for t in self.tags if t.slug == slug), None)

    def get_tag_by_name(self, name: str) -> Tag | None:
        """Case-insensitive name lookup."""
        return next((t for t in self.tags if t.matches(name)), None)

    def get_post(self, post_id: int) -> Post | None:
        return next((p for p in self.posts if p.id == post_id), None)

    # --- Allocation ---

    def allocate_default_category(self, name: str) -> Category:
        """Return the default category, creating it if it is missing."""
        existing = self.default_category
        if existing is not None:
            return existing
        category = Category(
            id=self.meta.next_category_id,
            name=name,
            slug=DEFAULT_CATEGORY_SLUG,
        )
        self.meta.next_category_id += 1
        self.categories.append(category)
        return category
