"""Tests for the facet extractor."""

from __future__ import annotations

from conftest import make_entry

from brainshelf.kernel.facets import extract_facets
from brainshelf.kernel.types import Facets
from brainshelf.models.entry import Entry


def test_categories_sorted_with_all_first():
    entries = [
        make_entry("1", category="Writing"),
        make_entry("2", category="PKM"),
        make_entry("3", category="Note-taking"),
    ]
    assert extract_facets(entries).categories == ["All", "Note-taking", "PKM", "Writing"]


def test_empty_categories_skipped():
    entries = [make_entry("1", category=""), make_entry("2", category="PKM")]
    assert extract_facets(entries).categories == ["All", "PKM"]


def test_no_duplicates_across_entries():
    entries = [
        make_entry("1", category="PKM", tags=["AI", "Markdown"]),
        make_entry("2", category="PKM", tags=["Markdown", "AI", "Web"]),
    ]
    facets = extract_facets(entries)
    assert facets.categories == ["All", "PKM"]
    assert facets.tags == ["AI", "Markdown", "Web"]


def test_all_category_value_appears_once():
    facets = extract_facets([make_entry("1", category="All")])
    assert facets.categories == ["All"]


def test_empty_snapshot():
    facets = extract_facets([])
    assert facets.categories == ["All"]
    assert facets.tags == []


def test_order_independent():
    entries = [
        make_entry("1", category="Writing", tags=["Zen", "AI"]),
        make_entry("2", category="PKM", tags=["Kanban"]),
        make_entry("3", category="Whiteboard", tags=["Visual", "AI"]),
    ]
    assert extract_facets(entries) == extract_facets(list(reversed(entries)))


def test_raw_documents_with_malformed_tags():
    documents = [
        {"id": "1", "category": "PKM", "tags": "AI, Web"},
        {"id": "2", "category": "Writing"},
        {"id": "3", "category": None, "tags": ["Markdown", 7, None]},
        {"id": "4", "category": "PKM", "tags": None},
    ]
    facets = extract_facets(documents)
    assert facets.categories == ["All", "PKM", "Writing"]
    assert facets.tags == ["Markdown"]


def test_entry_model_drops_malformed_tags():
    entry = Entry.model_validate({"id": "1", "tags": {"AI": True}})
    assert entry.tags == ()
    assert extract_facets([entry]).tags == []


def test_visible_and_hidden_tag_counts():
    facets = Facets(tags=[f"tag-{i:02d}" for i in range(25)])
    assert len(facets.visible_tags()) == 20
    assert facets.hidden_tag_count() == 5
    assert Facets(tags=["a"]).hidden_tag_count() == 0


def test_visible_categories_capped():
    facets = Facets(categories=["All", *[f"c{i}" for i in range(10)]])
    assert facets.visible_categories() == ["All", "c0", "c1", "c2", "c3", "c4", "c5", "c6"]
