"""Tests for Pydantic models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from content_store.models import Category, Meta, Post, StoreState, Tag


class TestCategory:
    def test_keywords_normalized(self):
        cat = Category(id=2, name="产品测试", slug="产品测试", keywords=["测试", " QA ", "qa"])
        assert cat.keywords == ["测试", "qa"]

    def test_keywords_from_string(self):
        cat = Category(id=2, name="Work", slug="work", keywords="Meeting, standup")
        assert cat.keywords == ["meeting", "standup"]

    def test_is_default(self):
        assert Category(id=1, name="未分类", slug="uncategorized").is_default
        assert not Category(id=2, name="Work", slug="work").is_default


class TestTag:
    def test_matches_case_insensitive(self):
        tag = Tag(id=1, name="Python", slug="python")
        assert tag.matches("python ")
        assert not tag.matches("py")


class TestPost:
    def test_aliases(self):
        post = Post.model_validate({
            "id": 1,
            "title": "t",
            "content": "c",
            "categoryId": 3,
            "tagIds": [2, 2, 1],
            "createdAt": "2024-01-05T09:03:00.000Z",
            "updatedAt": "2024-01-05T09:03:00.000Z",
            "source": "api",
        })
        assert post.category_id == 3
        assert post.tag_ids == [2, 1]
        assert post.created_at == datetime(2024, 1, 5, 9, 3, tzinfo=timezone.utc)

    def test_naive_timestamps_read_as_utc(self):
        post = Post.model_validate({
            "id": 1,
            "title": "t",
            "content": "c",
            "createdAt": "2024-01-01T10:00:00",
            "updatedAt": "2024-01-01T10:00:00",
        })
        assert post.created_at == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
        assert post.updated_at.tzinfo is not None

    def test_non_list_tag_ids_rejected(self):
        with pytest.raises(ValidationError):
            Post.model_validate({"id": 1, "title": "t", "content": "c", "tagIds": 5})

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            Post(id=1, title="  ", content="x")

    def test_blank_content_rejected(self):
        with pytest.raises(ValidationError):
            Post(id=1, title="x", content="")


class TestStoreState:
    def test_initial_state(self):
        state = StoreState.initial("未分类")
        assert [c.slug for c in state.categories] == ["uncategorized"]
        assert state.categories[0].id == 1
        assert state.meta.next_category_id == 2
        assert state.meta.next_tag_id == 1
        assert state.meta.next_post_id == 1

    def test_document_layout(self):
        doc = StoreState.initial("未分类").to_document()
        assert set(doc) == {"categories", "tags", "posts", "meta"}
        assert doc["meta"] == {"nextCategoryId": 2, "nextTagId": 1, "nextPostId": 1}
        assert doc["categories"][0] == {
            "id": 1,
            "name": "未分类",
            "slug": "uncategorized",
            "keywords": [],
        }

    def test_counters_stay_ahead_of_ids(self):
        state = StoreState(
            tags=[Tag(id=5, name="a", slug="a")],
            meta=Meta(next_tag_id=2),
        )
        assert state.meta.next_tag_id == 6

    def test_missing_meta_defaults(self):
        state = StoreState.model_validate({"categories": [], "tags": [], "posts": []})
        assert state.meta == Meta()

    def test_allocate_default_category_once(self):
        state = StoreState()
        first = state.allocate_default_category("未分类")
        second = state.allocate_default_category("other")
        assert first is second
        assert len(state.categories) == 1

    def test_from_document_keeps_valid_records(self):
        state, problems = StoreState.from_document({
            "categories": [{"id": 2, "name": "Work", "slug": "work", "keywords": []}],
            "tags": [
                {"id": 1, "name": "", "slug": "empty"},
                {"id": 3, "name": "python", "slug": "python"},
            ],
            "posts": [
                {"id": "x"},
                {"id": 4, "title": "t", "content": "c", "tagIds": [3]},
            ],
            "meta": {"nextCategoryId": 0, "nextTagId": 9, "nextPostId": True},
        })

        assert [c.slug for c in state.categories] == ["work"]
        assert [t.slug for t in state.tags] == ["python"]
        assert [p.id for p in state.posts] == [4]
        assert state.meta.next_category_id == 3
        assert state.meta.next_tag_id == 9
        assert state.meta.next_post_id == 5
        assert len(problems) == 4

    def test_from_document_clean(self):
        state, problems = StoreState.from_document(StoreState.initial("未分类").to_document())
        assert problems == []
        assert state.meta.next_category_id == 2

    def test_from_document_wrong_collection_type(self):
        state, problems = StoreState.from_document({"tags": {"id": 1}})
        assert state.tags == []
        assert problems == ["tags: not a list"]
