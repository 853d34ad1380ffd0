"""Category model for organizing posts."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from content_store.utils.text_utils import normalize_keywords


DEFAULT_CATEGORY_SLUG = "uncategorized"


class Category(BaseModel):
    """Represents a post category."""

    id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, description="Display name")
    slug: str = Field(..., min_length=1, description="Store-unique URL slug")
    keywords: list[str] = Field(
        default_factory=list, description="Lowercased keywords used for classification"
    )

    @field_validator("keywords", mode="before")
    @classmethod
    def _normalize_keywords(cls, v):
        if v is not None and not isinstance(v, (str, list, tuple)):
            raise ValueError("keywords must be a list or a string")
        return normalize_keywords(v)

    @property
    def is_default(self) -> bool:
        """Whether this is the fallback category."""
        return self.slug == DEFAULT_CATEGORY_SLUG

    class Config:
        json_schema_extra = {
            "example": {
                "id": 2,
                "name": "产品测试",
                "slug": "产品测试",
                "keywords": ["测试", "qa"],
            }
        }
