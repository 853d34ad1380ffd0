"""JSON-file backed store for categories, tags and posts."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

import aiofiles
import aiofiles.os

from content_store.config import Settings, get_settings
from content_store.core.classifier import classify
from content_store.core.queries import QueryService, coerce_id
from content_store.core.write_queue import WriteQueue
from content_store.errors import NotFoundError, StoreCorruptedError, ValidationError
from content_store.models.category import Category
from content_store.models.post import Post, utcnow
from content_store.models.store_state import StoreState
from content_store.models.tag import Tag
from content_store.models.views import CreatedPost
from content_store.utils.logging import LogContext, get_logger
from content_store.utils.text_utils import (
    iter_hashtags,
    normalize_keywords,
    normalize_tag_names,
    slugify,
)


logger = get_logger(__name__)

T = TypeVar("T")


def unique_slug(candidate: str, taken: Iterable[str]) -> str:
    """Append ``-2``, ``-3``, ... to ``candidate`` until it is not taken."""
    taken = set(taken)
    slug = candidate
    suffix = 2
    while slug in taken:
        slug = f"{candidate}-{suffix}"
        suffix += 1
    return slug


def _require_text(value: Any, field: str, label: str) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required", field=field)
    return text


class ContentStore:
    """
    Persistent store for categories, tags and posts.

    The whole document lives in one JSON file. Every mutation goes through a
    FIFO write queue: it re-reads the file, applies its change and writes the
    full document back before the next mutation starts. Reads skip the queue
    and see the last committed file.
    """

    def __init__(
        self,
        storage_file: Path | str,
        *,
        default_category_name: str = "未分类",
        default_source: str = "admin",
        strict_load: bool = False,
    ):
        self.storage_file = Path(storage_file)
        self.default_category_name = default_category_name
        self.default_source = default_source
        self.strict_load = strict_load
        self._queue = WriteQueue(name=self.storage_file.name)
        self.queries = QueryService(self)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ContentStore":
        """Build a store from application settings."""
        settings = settings or get_settings()
        return cls(
            settings.storage_file,
            default_category_name=settings.default_category_name,
            default_source=settings.default_source,
            strict_load=settings.strict_load,
        )

    async def __aenter__(self) -> "ContentStore":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Let queued writes finish, then stop the write worker."""
        await self._queue.aclose()

    # --- File access ---

    def _initial_state(self) -> StoreState:
        return StoreState.initial(self.default_category_name)

    def _unreadable(self, raw: bytes, reason: object) -> tuple[StoreState, bytes]:
        if self.strict_load:
            raise StoreCorruptedError(self.storage_file, str(reason))
        logger.warning(
            "Storage file %s is unreadable, falling back to defaults: %s",
            self.storage_file,
            reason,
        )
        return self._initial_state(), raw

    async def _load(self) -> tuple[StoreState, bytes | None]:
        """
        Read the document.

        Returns the state plus, when the file had to be reset or repaired,
        the original bytes so the next write can back them up.
        """
        if not await aiofiles.os.path.exists(self.storage_file):
            return self._initial_state(), None

        async with aiofiles.open(self.storage_file, "rb") as f:
            raw = await f.read()
        if not raw.strip():
            return self._initial_state(), None

        try:
            data = json.loads(raw.decode("utf-8"))
            if not isinstance(data, dict):
                raise ValueError("top-level value is not an object")
        except ValueError as exc:
            # UnicodeDecodeError and JSONDecodeError are both ValueErrors
            return self._unreadable(raw, exc)

        state, problems = StoreState.from_document(data)
        if problems:
            if self.strict_load:
                raise StoreCorruptedError(self.storage_file, "; ".join(problems))
            logger.warning(
                "Dropped invalid records from %s: %s",
                self.storage_file,
                "; ".join(problems),
            )

        state.allocate_default_category(self.default_category_name)
        return state, raw if problems else None

    async def _backup_corrupt(self, raw: bytes) -> Path:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
        backup = self.storage_file.with_name(f"{self.storage_file.name}.corrupt-{stamp}")
        async with aiofiles.open(backup, "wb") as f:
            await f.write(raw)
        logger.warning("Backed up unreadable storage file to %s", backup)
        return backup

    async def _save(self, state: StoreState) -> None:
        self.storage_file.parent.mkdir(parents=True, exist_ok=True)
        tmp_file = self.storage_file.with_name(f"{self.storage_file.name}.tmp")
        async with aiofiles.open(tmp_file, "w", encoding="utf-8") as f:
            await f.write(json.dumps(state.to_document(), indent=2, ensure_ascii=False) + "\n")
        # Readers never see a half-written document
        await aiofiles.os.replace(tmp_file, self.storage_file)

    async def read_state(self) -> StoreState:
        """Snapshot of the last committed document. Not queued."""
        state, _ = await self._load()
        return state

    async def _mutate(self, label: str, apply: Callable[[StoreState], T]) -> T:
        async def job() -> T:
            state, corrupt_raw = await self._load()
            result = apply(state)
            if corrupt_raw is not None:
                await self._backup_corrupt(corrupt_raw)
            await self._save(state)
            logger.debug("Committed %s to %s", label, self.storage_file.name)
            return result

        return await self._queue.submit(job, label=label)

    async def join(self) -> None:
        """Wait for every queued write to commit."""
        await self._queue.join()

    # --- Allocation helpers (run inside a mutation) ---

    def _ensure_tag(self, state: StoreState, name: str) -> Tag | None:
        lookup = str(name or "").strip()
        if not lookup:
            return None
        existing = state.get_tag_by_name(lookup)
        if existing is not None:
            return existing

        tag_id = state.meta.next_tag_id
        candidate = slugify(lookup) or f"tag-{tag_id}"
        tag = Tag(
            id=tag_id,
            name=lookup,
            slug=unique_slug(candidate, (t.slug for t in state.tags)),
        )
        state.meta.next_tag_id += 1
        state.tags.append(tag)
        return tag

    def _ensure_tags(self, state: StoreState, names: Iterable[str]) -> list[Tag]:
        tags: list[Tag] = []
        for name in names:
            tag = self._ensure_tag(state, name)
            if tag is not None and all(t.id != tag.id for t in tags):
                tags.append(tag)
        return tags

    def _resolve_category(self, state: StoreState, category_id: int | None) -> Category:
        return state.get_category(category_id) or state.allocate_default_category(
            self.default_category_name
        )

    # --- Mutations ---

    async def initialize(self) -> StoreState:
        """Write the document, creating it with defaults if it does not exist."""
        with LogContext(logger, f"initialize {self.storage_file}"):
            state = await self._mutate("initialize", lambda state: state)
        logger.info(
            "Store ready at %s (%d categories, %d tags, %d posts)",
            self.storage_file,
            len(state.categories),
            len(state.tags),
            len(state.posts),
        )
        return state

    async def create_category(
        self,
        name: str,
        slug: str | None = None,
        keywords: Iterable[str] | str | None = None,
    ) -> Category:
        """
        Create a category.

        Args:
            name: Display name, must not be blank
            slug: Optional slug; derived from the name when omitted
            keywords: Keyword list or comma/space separated string

        Returns:
            The created category

        Raises:
            ValidationError: If the name is blank
        """
        normalized_name = _require_text(name, "name", "Category name")
        keyword_list = normalize_keywords(keywords)

        def apply(state: StoreState) -> Category:
            category_id = state.meta.next_category_id
            candidate = (slugify(slug) if slug else slugify(normalized_name)) or f"category-{category_id}"
            category = Category(
                id=category_id,
                name=normalized_name,
                slug=unique_slug(candidate, (c.slug for c in state.categories)),
                keywords=keyword_list,
            )
            state.meta.next_category_id += 1
            state.categories.append(category)
            return category

        category = await self._mutate("create_category", apply)
        logger.debug("Created category %s (%s)", category.id, category.slug)
        return category

    async def update_category_keywords(
        self,
        category_id: int | str,
        keywords: Iterable[str] | str | None,
    ) -> Category:
        """
        Replace a category's keywords.

        Raises ValidationError for a malformed id and NotFoundError for an
        unknown one.
        """
        target = coerce_id(category_id)
        if target is None:
            raise ValidationError("Invalid category id", field="id")
        keyword_list = normalize_keywords(keywords)

        def apply(state: StoreState) -> Category:
            category = state.get_category(target)
            if category is None:
                raise NotFoundError("Category", category_id)
            category.keywords = keyword_list
            return category

        return await self._mutate("update_category_keywords", apply)

    async def create_tag(self, name: str) -> Tag:
        """Return the tag with this name (any casing), creating it if needed."""
        normalized = normalize_tag_names([name])
        if not normalized:
            raise ValidationError("Tag name is required", field="name")

        return await self._mutate(
            "create_tag", lambda state: self._ensure_tag(state, normalized[0])
        )

    async def create_post(
        self,
        title: str,
        content: str,
        *,
        category_id: int | str | None = None,
        tag_names: Iterable[str] | None = None,
        source: str | None = None,
        auto_classify: bool = False,
        mine_hashtags: bool = True,
    ) -> CreatedPost:
        """
        Create a post, its missing tags and (optionally) pick its category.

        Explicit tags come first, then hashtags found in the content. With
        ``auto_classify`` the category comes from the classifier; otherwise
        ``category_id`` is used, falling back to the default category.

        Raises:
            ValidationError: If the title or content is blank
        """
        normalized_title = _require_text(title, "title", "Title")
        normalized_content = _require_text(content, "content", "Content")

        names = list(tag_names or [])
        if mine_hashtags:
            names.extend(iter_hashtags(normalized_content))
        normalized_tags = normalize_tag_names(names)
        requested_category = coerce_id(category_id)
        post_source = source or self.default_source

        def apply(state: StoreState) -> CreatedPost:
            tags = self._ensure_tags(state, normalized_tags)
            if auto_classify:
                category = classify(normalized_tags, normalized_content, state.categories)
            else:
                category = self._resolve_category(state, requested_category)

            now = utcnow()
            post = Post(
                id=state.meta.next_post_id,
                title=normalized_title,
                content=normalized_content,
                category_id=category.id,
                tag_ids=[tag.id for tag in tags],
                created_at=now,
                updated_at=now,
                source=post_source,
            )
            state.meta.next_post_id += 1
            state.posts.append(post)
            return CreatedPost(post=post, category=category, tags=tags)

        created = await self._mutate("create_post", apply)
        logger.debug(
            "Created post %s in %s with %d tags",
            created.post.id,
            created.category.slug,
            len(created.tags),
        )
        return created

    async def update_post_tags(
        self,
        post_id: int | str,
        tag_names: Iterable[str] | None,
    ) -> Post:
        """Replace a post's tags. Malformed ids fail before queueing."""
        target = coerce_id(post_id)
        if target is None:
            raise ValidationError("Invalid post id", field="id")
        normalized_tags = normalize_tag_names(tag_names)

        def apply(state: StoreState) -> Post:
            post = state.get_post(target)
            if post is None:
                raise NotFoundError("Post", post_id)
            post.tag_ids = [tag.id for tag in self._ensure_tags(state, normalized_tags)]
            post.updated_at = utcnow()
            return post

        return await self._mutate("update_post_tags", apply)
