"""
Brainshelf Kernel — Shared Types

Data classes used by the facet extractor and the filter/sort engine.
These are client-local and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

# ---------------------------------------------------------------------------
# Sentinels and option registries
# ---------------------------------------------------------------------------

ALL_CATEGORIES = "All"
ALL_PRICING = "all"

SORT_KEYS: tuple[str, ...] = (
    "newest",
    "oldest",
    "top-rated",
    "most-reviewed",
    "name-asc",
    "name-desc",
)

SORT_OPTIONS: list[dict[str, str]] = [
    {"label": "Newest First", "value": "newest"},
    {"label": "Oldest First", "value": "oldest"},
    {"label": "Top Rated", "value": "top-rated"},
    {"label": "Most Reviewed", "value": "most-reviewed"},
    {"label": "Name A-Z", "value": "name-asc"},
    {"label": "Name Z-A", "value": "name-desc"},
]

PRICING_FILTER_OPTIONS: list[dict[str, str]] = [
    {"label": "All Pricing", "value": ALL_PRICING},
    {"label": "Free", "value": "Free"},
    {"label": "Freemium", "value": "Freemium"},
    {"label": "Paid", "value": "Paid"},
]

# How many facet values the browse page shows before collapsing the rest
VISIBLE_CATEGORY_LIMIT = 8
VISIBLE_TAG_LIMIT = 20


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Criteria:
    """
    The user's current filter and sort selection.

    tags uses AND semantics: an entry must carry every selected tag.
    """

    search_text: str = ""
    category: str = ALL_CATEGORIES
    pricing: str = ALL_PRICING
    tags: tuple[str, ...] = ()
    sort_key: str = "newest"

    def __post_init__(self) -> None:
        if self.sort_key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {self.sort_key!r}")
        if not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags))

    @property
    def has_active_filters(self) -> bool:
        """True if any filter (not the sort) narrows the result."""
        return bool(
            self.search_text
            or self.category != ALL_CATEGORIES
            or self.pricing != ALL_PRICING
            or self.tags
        )

    def with_tag_toggled(self, tag: str) -> Criteria:
        if tag in self.tags:
            return replace(self, tags=tuple(t for t in self.tags if t != tag))
        return replace(self, tags=(*self.tags, tag))


@dataclass(frozen=True)
class Facets:
    """Distinct values available as filter options."""

    categories: list[str] = field(default_factory=lambda: [ALL_CATEGORIES])
    tags: list[str] = field(default_factory=list)

    def visible_categories(self, limit: int = VISIBLE_CATEGORY_LIMIT) -> list[str]:
        return self.categories[:limit]

    def visible_tags(self, limit: int = VISIBLE_TAG_LIMIT) -> list[str]:
        return self.tags[:limit]

    def hidden_tag_count(self, limit: int = VISIBLE_TAG_LIMIT) -> int:
        return max(len(self.tags) - limit, 0)


@dataclass(frozen=True)
class ViewStats:
    """Counts for the "showing X of Y" footer."""

    shown: int
    total: int

    @property
    def filtered_out(self) -> int:
        return self.total - self.shown
