"""
Live collection mirror.

Keeps a local, newest-first, deduplicated copy of the remote entries and
republishes the complete list to its listeners on every change
notification. Listeners never see diffs.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Literal

from brainshelf.errors import SubscriptionError
from brainshelf.kernel.query import sort_entries
from brainshelf.models.entry import Entry
from brainshelf.services.entry_store import EntryStore

logger = logging.getLogger(__name__)

MirrorStatus = Literal["loading", "ready", "error"]
MirrorListener = Callable[[tuple[Entry, ...]], None]
ErrorListener = Callable[[SubscriptionError], None]


def dedupe_by_id(entries: Iterable[Entry]) -> list[Entry]:
    """
    Keep one entry per id.

    The last occurrence wins; it takes the position of the first one.
    """
    by_id: dict[str, Entry] = {}
    for entry in entries:
        by_id[entry.id] = entry
    return list(by_id.values())


class LiveCollectionMirror:
    """
    Client-side mirror of the remote entries collection.

    Holds exactly one remote subscription while started. Status is
    "loading" until the first snapshot arrives, "ready" afterwards, and
    "error" once the subscription fails; an error stays until restart().
    """

    def __init__(self, store: EntryStore):
        self._store = store
        self._entries: tuple[Entry, ...] = ()
        self._status: MirrorStatus = "loading"
        self._error: SubscriptionError | None = None
        self._unsubscribe_remote: Callable[[], None] | None = None
        # Bumped on every (re)subscribe so callbacks from a released
        # subscription are ignored
        self._generation = 0
        self._listeners: dict[int, tuple[MirrorListener, ErrorListener | None]] = {}
        self._next_token = 0

    @property
    def entries(self) -> tuple[Entry, ...]:
        return self._entries

    @property
    def status(self) -> MirrorStatus:
        return self._status

    @property
    def error(self) -> SubscriptionError | None:
        return self._error

    @property
    def active(self) -> bool:
        return self._unsubscribe_remote is not None

    # ------------------------------------------------------------------
    # Remote subscription lifecycle
    # ------------------------------------------------------------------

    def start(self) -> Callable[[], None]:
        """
        Subscribe to the remote collection.

        A no-op while already subscribed. A failure to subscribe puts the
        mirror in the error state instead of raising.

        Returns:
            Cancellation handle (same as calling stop())
        """
        if self.active:
            return self.stop

        self._generation += 1
        generation = self._generation
        self._status = "loading"
        self._error = None

        try:
            self._unsubscribe_remote = self._store.subscribe_ordered_by_creation(
                lambda entries: self._on_remote_snapshot(generation, entries),
                lambda error: self._on_remote_error(generation, error),
            )
        except Exception as e:
            logger.warning("mirror: could not subscribe: %s", e)
            self._fail(SubscriptionError(f"Could not load entries: {e}"))
            return self.stop

        logger.info("mirror: subscribed")
        return self.stop

    def stop(self) -> None:
        """Release the remote subscription. Safe to call more than once."""
        unsubscribe = self._unsubscribe_remote
        if unsubscribe is None:
            return
        self._unsubscribe_remote = None
        self._generation += 1
        unsubscribe()
        logger.info("mirror: unsubscribed")

    def restart(self) -> Callable[[], None]:
        """Drop the current subscription (if any) and subscribe again."""
        self.stop()
        return self.start()

    # ------------------------------------------------------------------
    # Downstream listeners
    # ------------------------------------------------------------------

    def subscribe(
        self,
        on_snapshot: MirrorListener,
        on_error: ErrorListener | None = None,
    ) -> Callable[[], None]:
        """
        Listen for full snapshots.

        The current snapshot (or error) is delivered right away if there
        is one.

        Returns:
            Unsubscribe handle
        """
        self._next_token += 1
        token = self._next_token
        self._listeners[token] = (on_snapshot, on_error)

        if self._status == "ready":
            on_snapshot(self._entries)
        elif self._status == "error" and on_error is not None and self._error is not None:
            on_error(self._error)

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    # ------------------------------------------------------------------
    # Remote callbacks
    # ------------------------------------------------------------------

    def _on_remote_snapshot(self, generation: int, entries: list[Entry]) -> None:
        if generation != self._generation:
            return

        self._entries = tuple(sort_entries(dedupe_by_id(entries), "newest"))
        self._status = "ready"
        self._error = None
        logger.debug("mirror: snapshot with %d entries", len(self._entries))

        for on_snapshot, _ in list(self._listeners.values()):
            try:
                on_snapshot(self._entries)
            except Exception:
                logger.exception("mirror: snapshot listener failed")

    def _on_remote_error(self, generation: int, error: Exception) -> None:
        if generation != self._generation:
            return
        logger.warning("mirror: subscription failed: %s", error)
        # The remote side is gone; release our end of it
        self.stop()
        self._fail(SubscriptionError(f"Live updates stopped: {error}"))

    def _fail(self, error: SubscriptionError) -> None:
        self._status = "error"
        self._error = error
        for _, on_error in list(self._listeners.values()):
            if on_error is None:
                continue
            try:
                on_error(error)
            except Exception:
                logger.exception("mirror: error listener failed")
