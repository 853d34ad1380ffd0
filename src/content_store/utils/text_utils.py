"""Text utilities for slugs, tags, keywords and display."""

import re
import unicodedata
from collections.abc import Iterable, Iterator
from datetime import datetime

from pypinyin import lazy_pinyin


_DISALLOWED_SLUG_CHARS = re.compile(r"[^a-z0-9\u4e00-\u9fa5\s_-]")
_TAG_SEPARATORS = re.compile(r"[,，\s]+")
_HASHTAG = re.compile(r"#([\w-]+)")
_HAN_OR_OTHER = re.compile(r"([\u4e00-\u9fff]+)|([^\u4e00-\u9fff]+)")


def slugify(text: str | None) -> str:
    """
    Convert text to URL-friendly slug.

    Keeps ASCII letters, digits and CJK ideographs. Returns an empty string
    when nothing usable is left, so callers must supply their own fallback.

    Args:
        text: Text to convert

    Returns:
        URL-friendly slug
    """
    if not text:
        return ""

    text = str(text).strip().lower()

    # Strip diacritical marks
    text = unicodedata.normalize("NFKD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))

    text = _DISALLOWED_SLUG_CHARS.sub("", text)
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"-+", "-", text)

    return text.strip("-")


def _strip_hash(value: str) -> str:
    return value[1:] if value.startswith("#") else value


def parse_tag_input(raw: str | None) -> list[str]:
    """Split free-form tag input on commas (ASCII or full-width) and whitespace."""
    if not raw:
        return []
    tokens = (_strip_hash(token.strip()).strip() for token in _TAG_SEPARATORS.split(str(raw)))
    return [token for token in tokens if token]


def normalize_tag_names(names: Iterable[str | None] | None) -> list[str]:
    """
    Deduplicate tag names case-insensitively.

    The first-seen casing wins and a leading ``#`` is dropped.
    """
    seen: set[str] = set()
    result: list[str] = []
    for value in names or []:
        raw = str(value or "").strip()
        if not raw:
            continue
        cleaned = _strip_hash(raw).strip()
        key = cleaned.lower()
        if not key or key in seen:
            continue
        seen.add(key)
        result.append(cleaned)
    return result


def iter_hashtags(content: str | None) -> Iterator[str]:
    """Yield lowercased hashtags in order of first appearance."""
    if not content:
        return
    seen: set[str] = set()
    for match in _HASHTAG.finditer(str(content)):
        tag = match.group(1).lower()
        if tag not in seen:
            seen.add(tag)
            yield tag


def extract_hashtags(content: str | None) -> set[str]:
    """Return the set of lowercased ``#hashtag`` tokens found in content."""
    return set(iter_hashtags(content))


def normalize_keywords(value: Iterable[str | None] | str | None) -> list[str]:
    """
    Normalize category keywords.

    Accepts either a sequence or a comma/whitespace separated string.
    Keywords are lowercased and deduplicated in first-seen order.
    """
    if not value:
        return []
    if isinstance(value, str):
        items: Iterable[str | None] = _TAG_SEPARATORS.split(value)
    else:
        items = value

    keywords: list[str] = []
    for item in items:
        keyword = str(item or "").strip().lower()
        if keyword and keyword not in keywords:
            keywords.append(keyword)
    return keywords


def name_sort_key(name: str) -> tuple[tuple[tuple[int, str], ...], str]:
    """
    Collation key for display-name ordering in a zh locale.

    Han characters compare by pinyin and sort after Latin text; everything
    else compares case-insensitively. The raw name breaks ties.
    """
    text = unicodedata.normalize("NFKC", name)
    parts: list[tuple[int, str]] = []
    for match in _HAN_OR_OTHER.finditer(text):
        han, other = match.groups()
        if han:
            parts.extend((1, syllable) for syllable in lazy_pinyin(han))
        else:
            parts.extend((0, ch) for ch in other.casefold())
    return tuple(parts), name


def format_date(value: datetime | None) -> str:
    """Format a timestamp for display, e.g. ``2024/1/5 09:03:00``."""
    if not value:
        return ""
    local = value.astimezone() if value.tzinfo else value
    return f"{local.year}/{local.month}/{local.day} {local:%H:%M:%S}"
