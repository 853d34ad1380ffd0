"""Read-side view models returned by the query layer."""

from pydantic import BaseModel, Field

from content_store.models.category import Category
from content_store.models.post import Post, PostWithRelations
from content_store.models.tag import Tag


class Overview(BaseModel):
    """All posts, categories and tags for the front page."""

    posts: list[PostWithRelations] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)


class CategoryWithPosts(BaseModel):
    """A category and the posts filed under it."""

    category: Category
    posts: list[PostWithRelations] = Field(default_factory=list)


class TagWithPosts(BaseModel):
    """A tag and the posts carrying it."""

    tag: Tag
    posts: list[PostWithRelations] = Field(default_factory=list)


class CreatedPost(BaseModel):
    """Result of a post creation."""

    post: Post
    category: Category
    tags: list[Tag] = Field(default_factory=list)
