"""
Brainshelf Kernel — the pure layer.

Two components:
  facets  — snapshot → distinct categories and tags
  query   — (snapshot, criteria) → view list  (pure, deterministic)

Nothing in here does IO or holds state.
"""

from brainshelf.kernel.facets import extract_facets
from brainshelf.kernel.query import apply, matches, sort_entries
from brainshelf.kernel.types import (
    ALL_CATEGORIES,
    ALL_PRICING,
    SORT_KEYS,
    SORT_OPTIONS,
    Criteria,
    Facets,
    ViewStats,
)

__all__ = [
    "extract_facets",
    "apply",
    "matches",
    "sort_entries",
    "Criteria",
    "Facets",
    "ViewStats",
    "ALL_CATEGORIES",
    "ALL_PRICING",
    "SORT_KEYS",
    "SORT_OPTIONS",
]
