"""
Remote collection store adapters.

The store is the outside world for the mirror and the submission
workflow: it accepts new entries and pushes the full, newest-first list of
entries to every subscriber whenever the collection changes.

Implement with Postgres for production, or in-memory for tests.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from brainshelf.config import settings
from brainshelf.db import listen_conn
from brainshelf.kernel.query import sort_entries
from brainshelf.models.entry import Entry
from brainshelf.repos.entry_repo import EntryRepo

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[list[Entry]], None]
ErrorCallback = Callable[[Exception], None]


class EntryStore:
    """
    Abstract store interface.

    subscribe_ordered_by_creation() returns an unsubscribe handle right
    away; snapshots arrive later as callbacks on the event loop.
    """

    def subscribe_ordered_by_creation(
        self,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Callable[[], None]:
        """Register for newest-first snapshots. Returns an unsubscribe handle."""
        raise NotImplementedError

    async def create(self, document: dict[str, Any]) -> str:
        """Write a new entry document. Returns the store-assigned id."""
        raise NotImplementedError


class _Subscribers:
    """Subscriber bookkeeping shared by the store implementations."""

    def __init__(self) -> None:
        self._next_token = 0
        self.callbacks: dict[int, tuple[SnapshotCallback, ErrorCallback | None]] = {}

    def add(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback | None) -> int:
        self._next_token += 1
        self.callbacks[self._next_token] = (on_snapshot, on_error)
        return self._next_token

    def remove(self, token: int) -> bool:
        return self.callbacks.pop(token, None) is not None

    def publish(self, entries: list[Entry], only: int | None = None) -> None:
        for token, (on_snapshot, _) in list(self.callbacks.items()):
            if only is not None and token != only:
                continue
            # Each subscriber gets its own list
            on_snapshot(list(entries))

    def fail(self, error: Exception) -> None:
        for on_snapshot, on_error in list(self.callbacks.values()):
            if on_error is not None:
                on_error(error)

    def __len__(self) -> int:
        return len(self.callbacks)


class MemoryEntryStore(EntryStore):
    """
    In-memory store for testing and local runs.

    Assigns ids and server timestamps like the real store and delivers
    snapshots on the next event loop iteration, at most one per pending
    change per subscriber. Set subscribe_error or create_error to make the
    next calls fail.
    """

    def __init__(self) -> None:
        self.documents: dict[str, dict[str, Any]] = {}
        self.create_calls: list[dict[str, Any]] = []
        self.subscribe_error: Exception | None = None
        self.create_error: Exception | None = None
        self._subscribers = _Subscribers()
        self._publish_scheduled = False
        # Subscribers still waiting for their first snapshot
        self._pending_initial: set[int] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def snapshot(self) -> list[Entry]:
        entries = [Entry.from_document(entry_id, doc) for entry_id, doc in self.documents.items()]
        return sort_entries(entries, "newest")

    def subscribe_ordered_by_creation(
        self,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Callable[[], None]:
        if self.subscribe_error is not None:
            raise self.subscribe_error

        token = self._subscribers.add(on_snapshot, on_error)
        # A queued broadcast reaches the new subscriber too
        if not self._publish_scheduled:
            self._pending_initial.add(token)
            asyncio.get_running_loop().call_soon(self._deliver_initial, token)

        def unsubscribe() -> None:
            self._subscribers.remove(token)
            self._pending_initial.discard(token)

        return unsubscribe

    async def create(self, document: dict[str, Any]) -> str:
        self.create_calls.append(dict(document))
        if self.create_error is not None:
            raise self.create_error

        entry_id = str(uuid4())
        self.documents[entry_id] = {**document, "createdAt": datetime.now(UTC)}
        self._schedule_publish()
        return entry_id

    def put(self, entry_id: str, document: dict[str, Any]) -> None:
        """Write a document in place, as another client would."""
        self.documents[entry_id] = dict(document)
        self._schedule_publish()

    def delete(self, entry_id: str) -> None:
        self.documents.pop(entry_id, None)
        self._schedule_publish()

    def fail_subscriptions(self, error: Exception) -> None:
        """Report a broken subscription to every subscriber."""
        self._subscribers.fail(error)

    def _schedule_publish(self) -> None:
        # The broadcast supersedes pending first deliveries
        self._pending_initial.clear()
        if self._publish_scheduled:
            return
        self._publish_scheduled = True
        asyncio.get_running_loop().call_soon(self._broadcast)

    def _deliver_initial(self, token: int) -> None:
        if token not in self._pending_initial:
            return
        self._pending_initial.discard(token)
        self._subscribers.publish(self.snapshot(), only=token)

    def _broadcast(self) -> None:
        self._publish_scheduled = False
        self._subscribers.publish(self.snapshot())


class PostgresEntryStore(EntryStore):
    """
    Postgres-backed store.

    Holds one listening connection on the entries notification channel
    while at least one subscriber exists. Every notification reloads the
    full ordered list and publishes it. Reloads are serialised so that
    snapshots go out in order.
    """

    def __init__(self, repo: EntryRepo | None = None, channel: str | None = None):
        self._repo = repo or EntryRepo()
        self._channel = channel or settings.ENTRIES_CHANNEL
        self._subscribers = _Subscribers()
        self._reload_lock = asyncio.Lock()
        self._listen_task: asyncio.Task | None = None
        self._reload_tasks: set[asyncio.Task] = set()

    def subscribe_ordered_by_creation(
        self,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Callable[[], None]:
        token = self._subscribers.add(on_snapshot, on_error)

        if self._listen_task is None or self._listen_task.done():
            self._listen_task = asyncio.get_running_loop().create_task(self._listen())
        else:
            self._spawn_reload()

        def unsubscribe() -> None:
            if self._subscribers.remove(token) and not len(self._subscribers):
                self._stop_listening()

        return unsubscribe

    async def create(self, document: dict[str, Any]) -> str:
        entry_id = await self._repo.create(document)
        logger.info("entry_store: created entry %s", entry_id)
        return entry_id

    async def _listen(self) -> None:
        try:
            async with listen_conn(self._channel, self._on_notify):
                logger.info("entry_store: listening on %s", self._channel)
                await self._reload()
                # Park until cancelled by the last unsubscribe
                await asyncio.Event().wait()
        except asyncio.CancelledError:
            logger.info("entry_store: stopped listening on %s", self._channel)
            raise
        except Exception as e:
            logger.warning("entry_store: subscription on %s failed: %s", self._channel, e)
            self._subscribers.fail(e)

    def _on_notify(self, conn, pid, channel, payload) -> None:
        self._spawn_reload()

    def _spawn_reload(self) -> None:
        task = asyncio.get_running_loop().create_task(self._reload())
        self._reload_tasks.add(task)
        task.add_done_callback(self._reload_tasks.discard)

    async def _reload(self) -> None:
        async with self._reload_lock:
            try:
                entries = await self._repo.list_by_creation()
            except Exception as e:
                logger.warning("entry_store: reload failed: %s", e)
                self._subscribers.fail(e)
                return
            self._subscribers.publish(entries)

    def _stop_listening(self) -> None:
        if self._listen_task is not None:
            self._listen_task.cancel()
            self._listen_task = None
        for task in list(self._reload_tasks):
            task.cancel()
