"""
Brainshelf Kernel — Filter/Sort Engine

(entries, criteria) → view list. Pure, deterministic, never mutates its
input. Filters apply conjunctively; sorts are stable so ties keep the
snapshot's relative order.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Callable, Sequence
from typing import Any

from brainshelf.kernel.types import ALL_CATEGORIES, ALL_PRICING, Criteria
from brainshelf.models.entry import Entry

# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


def matches_text(entry: Entry, search_text: str) -> bool:
    if not search_text:
        return True
    needle = search_text.lower()
    return (
        needle in entry.name.lower()
        or needle in entry.description.lower()
        or any(needle in tag.lower() for tag in entry.tags)
    )


def matches_category(entry: Entry, category: str) -> bool:
    return category == ALL_CATEGORIES or entry.category == category


def matches_pricing(entry: Entry, pricing: str) -> bool:
    return pricing == ALL_PRICING or entry.pricing == pricing


def matches_tags(entry: Entry, tags: Sequence[str]) -> bool:
    return all(tag in entry.tags for tag in tags)


def matches(entry: Entry, criteria: Criteria) -> bool:
    """True if the entry passes all four filters."""
    return (
        matches_text(entry, criteria.search_text)
        and matches_category(entry, criteria.category)
        and matches_pricing(entry, criteria.pricing)
        and matches_tags(entry, criteria.tags)
    )


# ---------------------------------------------------------------------------
# Sort keys
# ---------------------------------------------------------------------------


def collation_key(name: str | None) -> tuple[str, str, str]:
    """
    Locale-style collation key for names.

    Compares on base letters first (accents and case ignored), then on
    accents, then lowercase before uppercase.
    """
    name = name or ""
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), name.casefold(), name.swapcase())


def _created_key(entry: Entry) -> tuple[bool, float]:
    # Entries still waiting for a server timestamp count as the most recent
    if entry.created_at is None:
        return (True, 0.0)
    return (False, entry.created_at.timestamp())


def _average_key(entry: Entry) -> float:
    return entry.average_rating or 0.0


def _reviews_key(entry: Entry) -> int:
    return entry.rating_count


def _name_key(entry: Entry) -> tuple[str, str, str]:
    return collation_key(entry.name)


# sort_key -> (key function, descending)
_SORTS: dict[str, tuple[Callable[[Entry], Any], bool]] = {
    "newest": (_created_key, True),
    "oldest": (lambda e: (e.created_at is None, _created_key(e)[1]), False),
    "top-rated": (_average_key, True),
    "most-reviewed": (_reviews_key, True),
    "name-asc": (_name_key, False),
    "name-desc": (_name_key, True),
}


def sort_entries(entries: Sequence[Entry], sort_key: str) -> list[Entry]:
    """
    Return a new list of entries ordered by sort_key.

    Args:
        entries: Entries to sort (left untouched)
        sort_key: One of SORT_KEYS

    Returns:
        New sorted list
    """
    try:
        key, descending = _SORTS[sort_key]
    except KeyError as e:
        raise ValueError(f"Unknown sort key: {sort_key!r}") from e
    # sorted() stays stable with reverse=True
    return sorted(entries, key=key, reverse=descending)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def apply(entries: Sequence[Entry], criteria: Criteria) -> list[Entry]:
    """
    Filter and sort a snapshot for display.

    Args:
        entries: Current mirror snapshot
        criteria: Filter and sort selection

    Returns:
        New list holding the matching entries in sort order
    """
    filtered = [entry for entry in entries if matches(entry, criteria)]
    return sort_entries(filtered, criteria.sort_key)
