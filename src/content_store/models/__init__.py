"""Pydantic data models."""

from content_store.models.category import Category, DEFAULT_CATEGORY_SLUG
from content_store.models.tag import Tag
from content_store.models.post import Post, PostWithRelations
from content_store.models.store_state import Meta, StoreState
from content_store.models.views import CategoryWithPosts, CreatedPost, Overview, TagWithPosts

__all__ = [
    "Category",
    "DEFAULT_CATEGORY_SLUG",
    "Tag",
    "Post",
    "PostWithRelations",
    "Meta",
    "StoreState",
    "Overview",
    "CategoryWithPosts",
    "TagWithPosts",
    "CreatedPost",
]
