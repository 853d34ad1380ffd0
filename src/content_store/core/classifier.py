"""Rule-based category assignment for incoming posts."""

from __future__ import annotations

from collections.abc import Sequence

from content_store.models.category import DEFAULT_CATEGORY_SLUG, Category
from content_store.utils.logging import get_logger
from content_store.utils.text_utils import slugify


logger = get_logger(__name__)


def classify(
    tags: Sequence[str],
    content: str,
    categories: Sequence[Category],
) -> Category:
    """
    Pick a category for a post from its tags and content.

    Rules are tried in order, each one against every category before moving
    on, so tag-based signals always beat content matches and earlier
    categories win ties:

    1. a tag whose slug is a category slug (tags in input order)
    2. a category whose slugified name is one of the tags
    3. a category with a keyword equal to one of the tags
    4. a category with a keyword contained in the content
    5. the default ``uncategorized`` category

    Args:
        tags: Candidate tag names
        content: Post body
        categories: Categories in stored order; must include the default one

    Returns:
        The chosen category
    """
    normalized_tags = [tag.lower() for tag in tags]
    normalized_content = (content or "").lower()
    by_slug = {category.slug: category for category in reversed(categories)}

    for tag in normalized_tags:
        match = by_slug.get(slugify(tag))
        if match is not None:
            logger.debug("Classified by tag slug %r -> %s", tag, match.slug)
            return match

    for category in categories:
        if slugify(category.name) in normalized_tags:
            logger.debug("Classified by category name -> %s", category.slug)
            return category

    for category in categories:
        if any(keyword in normalized_tags for keyword in category.keywords):
            logger.debug("Classified by tag keyword -> %s", category.slug)
            return category

    for category in categories:
        if any(keyword and keyword in normalized_content for keyword in category.keywords):
            logger.debug("Classified by content keyword -> %s", category.slug)
            return category

    default = by_slug.get(DEFAULT_CATEGORY_SLUG)
    if default is None:
        raise LookupError(f"No '{DEFAULT_CATEGORY_SLUG}' category to fall back to")
    return default
