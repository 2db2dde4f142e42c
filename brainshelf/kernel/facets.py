"""
Brainshelf Kernel — Facet Extractor

Derives the distinct category and tag values present in a snapshot.
Pure and deterministic: the same entries in any order give the same facets.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from brainshelf.kernel.types import ALL_CATEGORIES, Facets
from brainshelf.models.entry import Entry


def _field(entry: Entry | Mapping[str, Any], name: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name, None)


def extract_facets(entries: Iterable[Entry | Mapping[str, Any]]) -> Facets:
    """
    Collect every category and tag used by the given entries.

    Accepts Entry models or raw remote documents. A document whose tags
    are missing or not a list contributes no tags.

    Args:
        entries: Current snapshot

    Returns:
        Facets with "All" prepended to the sorted categories and the
        sorted tags
    """
    categories: set[str] = set()
    tags: set[str] = set()

    for entry in entries:
        category = _field(entry, "category")
        if isinstance(category, str) and category:
            categories.add(category)

        entry_tags = _field(entry, "tags")
        if isinstance(entry_tags, list | tuple):
            tags.update(tag for tag in entry_tags if isinstance(tag, str))

    # "All" could also be a real category value; it must still appear once
    categories.discard(ALL_CATEGORIES)

    return Facets(
        categories=[ALL_CATEGORIES, *sorted(categories)],
        tags=sorted(tags),
    )
