"""
Browse page state over the live mirror.

Combines the live mirror with the user's criteria: facets for the filter
options, the filtered and sorted result list, and the "showing X of Y"
counts. Facets are recomputed only when the snapshot changes; results
whenever the snapshot or the criteria change.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace

from brainshelf.errors import SubscriptionError
from brainshelf.kernel.facets import extract_facets
from brainshelf.kernel.query import apply
from brainshelf.kernel.types import Criteria, Facets, ViewStats
from brainshelf.models.entry import Entry
from brainshelf.services.mirror import LiveCollectionMirror, MirrorStatus

logger = logging.getLogger(__name__)

ChangeCallback = Callable[["DirectoryView"], None]


class DirectoryView:
    """Browse-page state over a LiveCollectionMirror."""

    def __init__(self, mirror: LiveCollectionMirror, criteria: Criteria | None = None):
        self._mirror = mirror
        self._criteria = criteria or Criteria()
        self._entries: tuple[Entry, ...] = ()
        self._facets = Facets()
        self._results: list[Entry] | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._listeners: dict[int, ChangeCallback] = {}
        self._next_token = 0

    # ------------------------------------------------------------------
    # Mirror attachment
    # ------------------------------------------------------------------

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._mirror.subscribe(self._on_snapshot, self._on_error)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_change(self, callback: ChangeCallback) -> Callable[[], None]:
        """
        Call back whenever the snapshot, status, or criteria change.

        Returns:
            Unsubscribe handle
        """
        self._next_token += 1
        token = self._next_token
        self._listeners[token] = callback

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def status(self) -> MirrorStatus:
        return self._mirror.status

    @property
    def error(self) -> SubscriptionError | None:
        return self._mirror.error

    @property
    def criteria(self) -> Criteria:
        return self._criteria

    @property
    def entries(self) -> tuple[Entry, ...]:
        return self._entries

    @property
    def facets(self) -> Facets:
        return self._facets

    @property
    def results(self) -> list[Entry]:
        if self._results is None:
            self._results = apply(self._entries, self._criteria)
        return list(self._results)

    @property
    def stats(self) -> ViewStats:
        return ViewStats(shown=len(self.results), total=len(self._entries))

    @property
    def has_active_filters(self) -> bool:
        return self._criteria.has_active_filters

    # ------------------------------------------------------------------
    # Criteria updates
    # ------------------------------------------------------------------

    def set_criteria(self, criteria: Criteria) -> None:
        if criteria == self._criteria:
            return
        self._criteria = criteria
        self._results = None
        self._notify()

    def set_search(self, text: str) -> None:
        self.set_criteria(replace(self._criteria, search_text=text))

    def set_category(self, category: str) -> None:
        self.set_criteria(replace(self._criteria, category=category))

    def set_pricing(self, pricing: str) -> None:
        self.set_criteria(replace(self._criteria, pricing=pricing))

    def set_sort(self, sort_key: str) -> None:
        self.set_criteria(replace(self._criteria, sort_key=sort_key))

    def toggle_tag(self, tag: str) -> None:
        self.set_criteria(self._criteria.with_tag_toggled(tag))

    def clear_filters(self) -> None:
        """Reset every filter and the sort order."""
        self.set_criteria(Criteria())

    # ------------------------------------------------------------------
    # Mirror callbacks
    # ------------------------------------------------------------------

    def _on_snapshot(self, entries: tuple[Entry, ...]) -> None:
        self._entries = entries
        self._facets = extract_facets(entries)
        self._results = None
        self._notify()

    def _on_error(self, error: SubscriptionError) -> None:
        logger.warning("directory_view: showing error state: %s", error)
        self._notify()

    def _notify(self) -> None:
        for callback in list(self._listeners.values()):
            try:
                callback(self)
            except Exception:
                logger.exception("directory_view: change listener failed")
