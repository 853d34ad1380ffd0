"""Read-side views over the content store."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from content_store.models.category import Category
from content_store.models.post import Post, PostWithRelations
from content_store.models.store_state import StoreState
from content_store.models.tag import Tag
from content_store.models.views import CategoryWithPosts, Overview, TagWithPosts
from content_store.utils.text_utils import name_sort_key

if TYPE_CHECKING:
    from content_store.core.store import ContentStore


def coerce_id(value: Any) -> int | None:
    """Turn an id from form or JSON input into an int, or None if it isn't one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = int(value)
    except (TypeError, ValueError):
        return None
    return result if result > 0 else None


def _by_name(items: Iterable[Category | Tag]) -> list:
    return sorted(items, key=lambda item: (*name_sort_key(item.name), item.id))


def _newest_first(posts: Iterable[Post]) -> list[Post]:
    return sorted(posts, key=lambda post: (post.created_at, post.id), reverse=True)


def hydrate_post(
    post: Post,
    categories_by_id: dict[int, Category],
    tags_by_id: dict[int, Tag],
) -> PostWithRelations:
    """Attach category and tags to a post. Dangling ids are dropped."""
    return PostWithRelations(
        **post.model_dump(),
        category=categories_by_id.get(post.category_id) if post.category_id else None,
        tags=[tags_by_id[tag_id] for tag_id in post.tag_ids if tag_id in tags_by_id],
    )


def hydrate_posts(state: StoreState, posts: Iterable[Post]) -> list[PostWithRelations]:
    """Hydrate and sort posts newest first."""
    categories_by_id = {category.id: category for category in state.categories}
    tags_by_id = {tag.id: tag for tag in state.tags}
    return [hydrate_post(post, categories_by_id, tags_by_id) for post in _newest_first(posts)]


class QueryService:
    """
    Read-only projections of the store.

    Every call reads a fresh snapshot and never writes. Unknown keys give
    ``None`` rather than an error.
    """

    def __init__(self, store: "ContentStore"):
        self.store = store

    async def list_posts(self) -> list[PostWithRelations]:
        state = await self.store.read_state()
        return hydrate_posts(state, state.posts)

    async def list_categories(self) -> list[Category]:
        state = await self.store.read_state()
        return _by_name(state.categories)

    async def list_tags(self) -> list[Tag]:
        state = await self.store.read_state()
        return _by_name(state.tags)

    async def get_overview(self) -> Overview:
        """All posts (newest first) plus categories and tags ordered by name."""
        state = await self.store.read_state()
        return Overview(
            posts=hydrate_posts(state, state.posts),
            categories=_by_name(state.categories),
            tags=_by_name(state.tags),
        )

    async def get_category(self, category_id: Any) -> Category | None:
        state = await self.store.read_state()
        return state.get_category(coerce_id(category_id))

    async def get_category_with_posts(self, slug: str) -> CategoryWithPosts | None:
        state = await self.store.read_state()
        category = state.get_category_by_slug(slug)
        if category is None:
            return None
        posts = [post for post in state.posts if post.category_id == category.id]
        return CategoryWithPosts(category=category, posts=hydrate_posts(state, posts))

    async def get_tag_with_posts(self, slug: str) -> TagWithPosts | None:
        state = await self.store.read_state()
        tag = state.get_tag_by_slug(slug)
        if tag is None:
            return None
        posts = [post for post in state.posts if tag.id in post.tag_ids]
        return TagWithPosts(tag=tag, posts=hydrate_posts(state, posts))

    async def get_post_with_relations(self, post_id: Any) -> PostWithRelations | None:
        target = coerce_id(post_id)
        if target is None:
            return None
        state = await self.store.read_state()
        post = state.get_post(target)
        if post is None:
            return None
        return hydrate_posts(state, [post])[0]
