"""
Tests for the store adapters that run without a database.

PostgresEntryStore is driven through a mocked repo and a fake listening
connection.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from conftest import make_entry, settle

from brainshelf.services import entry_store
from brainshelf.services.entry_store import PostgresEntryStore


class FakeChannel:
    """Stands in for listen_conn; lets a test fire notifications."""

    def __init__(self):
        self.callback = None
        self.closed = False
        self.fail_with: Exception | None = None

    @asynccontextmanager
    async def __call__(self, channel, callback):
        if self.fail_with is not None:
            raise self.fail_with
        self.callback = callback
        try:
            yield object()
        finally:
            self.closed = True
            self.callback = None

    def notify(self, payload="x"):
        self.callback(None, 1, "entries_changed", payload)


@pytest.fixture
def channel(monkeypatch):
    fake = FakeChannel()
    monkeypatch.setattr(entry_store, "listen_conn", fake)
    return fake


@pytest.fixture
def repo():
    repo = AsyncMock()
    repo.list_by_creation.return_value = [make_entry("a", "Alpha", minutes=1)]
    repo.create.return_value = "new-id"
    return repo


class TestMemoryEntryStore:
    async def test_snapshot_delivered_on_next_iteration(self, store):
        store.put("a", {"name": "Alpha", "createdAt": "2026-01-01T00:01:00Z"})
        seen = []
        store.subscribe_ordered_by_creation(seen.append)

        assert seen == []
        await settle()
        assert [[e.name for e in s] for s in seen] == [["Alpha"]]

    async def test_write_after_subscribe_delivers_once(self, store):
        seen = []
        store.subscribe_ordered_by_creation(seen.append)
        store.put("a", {"name": "Alpha", "createdAt": "2026-01-01T00:01:00Z"})
        await settle()

        assert [[e.name for e in s] for s in seen] == [["Alpha"]]

    async def test_writes_in_one_iteration_are_merged(self, store):
        seen = []
        store.subscribe_ordered_by_creation(seen.append)
        await settle()

        store.put("a", {"name": "Alpha", "createdAt": "2026-01-01T00:01:00Z"})
        store.put("b", {"name": "Beta", "createdAt": "2026-01-01T00:02:00Z"})
        await settle()
        store.delete("a")
        await settle()

        assert [[e.name for e in s] for s in seen] == [[], ["Beta", "Alpha"], ["Beta"]]

    async def test_existing_subscriber_unaffected_by_new_one(self, store):
        first = []
        store.subscribe_ordered_by_creation(first.append)
        await settle()

        second = []
        store.subscribe_ordered_by_creation(second.append)
        await settle()

        assert first == [[]]
        assert second == [[]]

    async def test_create_assigns_id_and_timestamp(self, store):
        entry_id = await store.create({"name": "Alpha"})

        assert store.documents[entry_id]["createdAt"] is not None
        assert store.create_calls == [{"name": "Alpha"}]

    async def test_each_subscriber_gets_its_own_list(self, store):
        first, second = [], []
        store.subscribe_ordered_by_creation(first.append)
        store.subscribe_ordered_by_creation(second.append)
        await settle()

        first[-1].append("junk")
        assert second[-1] == []


class TestPostgresEntryStore:
    async def test_initial_load_and_reload_on_notify(self, channel, repo):
        store = PostgresEntryStore(repo=repo, channel="entries_changed")
        seen = []
        unsubscribe = store.subscribe_ordered_by_creation(seen.append)
        await settle()

        assert [[e.name for e in s] for s in seen] == [["Alpha"]]

        repo.list_by_creation.return_value = [
            make_entry("b", "Beta", minutes=2),
            make_entry("a", "Alpha", minutes=1),
        ]
        channel.notify()
        await settle()

        assert [e.name for e in seen[-1]] == ["Beta", "Alpha"]
        unsubscribe()

    async def test_last_unsubscribe_stops_listening(self, channel, repo):
        store = PostgresEntryStore(repo=repo)
        first = store.subscribe_ordered_by_creation(lambda entries: None)
        second = store.subscribe_ordered_by_creation(lambda entries: None)
        await settle()

        first()
        await settle()
        assert channel.closed is False

        second()
        await settle()
        assert channel.closed is True

    async def test_second_subscriber_gets_a_snapshot(self, channel, repo):
        store = PostgresEntryStore(repo=repo)
        unsubscribe_first = store.subscribe_ordered_by_creation(lambda entries: None)
        await settle()

        seen = []
        unsubscribe_second = store.subscribe_ordered_by_creation(seen.append)
        await settle()

        assert len(seen) == 1
        unsubscribe_first()
        unsubscribe_second()

    async def test_reload_failure_reaches_subscribers(self, channel, repo):
        store = PostgresEntryStore(repo=repo)
        errors = []
        unsubscribe = store.subscribe_ordered_by_creation(lambda entries: None, errors.append)
        await settle()

        repo.list_by_creation.side_effect = ConnectionError("connection reset")
        channel.notify()
        await settle()

        assert len(errors) == 1
        assert isinstance(errors[0], ConnectionError)
        unsubscribe()

    async def test_listen_failure_reaches_subscribers(self, channel, repo):
        channel.fail_with = ConnectionError("no pool")
        store = PostgresEntryStore(repo=repo)
        errors = []
        unsubscribe = store.subscribe_ordered_by_creation(lambda entries: None, errors.append)
        await settle()

        assert len(errors) == 1
        unsubscribe()

    async def test_create_delegates_to_repo(self, channel, repo):
        store = PostgresEntryStore(repo=repo)

        assert await store.create({"name": "Alpha"}) == "new-id"
        repo.create.assert_awaited_once_with({"name": "Alpha"})
