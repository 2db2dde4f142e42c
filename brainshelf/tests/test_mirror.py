"""Tests for the live collection mirror."""

from __future__ import annotations

from datetime import UTC, datetime

from conftest import make_entry, settle

from brainshelf.errors import SubscriptionError
from brainshelf.services.entry_store import EntryStore
from brainshelf.services.mirror import LiveCollectionMirror, dedupe_by_id


def doc(name: str, minute: int | None) -> dict:
    created_at = None if minute is None else datetime(2026, 1, 1, 0, minute, tzinfo=UTC)
    return {"name": name, "description": f"{name} desc", "createdAt": created_at}


class RecordingListener:
    def __init__(self):
        self.snapshots = []
        self.errors = []

    def on_snapshot(self, entries):
        self.snapshots.append([e.name for e in entries])

    def on_error(self, error):
        self.errors.append(error)


async def test_loading_until_first_snapshot(store, mirror):
    store.put("a", doc("Alpha", 1))
    assert mirror.status == "loading"

    mirror.start()
    assert mirror.status == "loading"

    await settle()
    assert mirror.status == "ready"
    assert [e.name for e in mirror.entries] == ["Alpha"]


async def test_publishes_full_snapshot_on_every_change(store, mirror):
    listener = RecordingListener()
    mirror.subscribe(listener.on_snapshot)
    mirror.start()
    await settle()

    store.put("a", doc("Alpha", 1))
    await settle()
    store.put("b", doc("Beta", 2))
    await settle()

    assert listener.snapshots == [[], ["Alpha"], ["Beta", "Alpha"]]


async def test_created_entry_shows_up_newest_first(store, mirror):
    store.put("a", doc("Alpha", 1))
    mirror.start()
    await settle()

    await store.create({"name": "Fresh", "description": "new"})
    await settle()

    assert [e.name for e in mirror.entries] == ["Fresh", "Alpha"]
    assert mirror.entries[0].created_at is not None


async def test_update_in_place_keeps_one_entry_per_id(store, mirror):
    store.put("a", doc("Alpha", 1))
    mirror.start()
    await settle()

    store.put("a", doc("Alpha v2", 1))
    await settle()

    assert [(e.id, e.name) for e in mirror.entries] == [("a", "Alpha v2")]


async def test_delete_removes_entry(store, mirror):
    store.put("a", doc("Alpha", 1))
    store.put("b", doc("Beta", 2))
    mirror.start()
    await settle()

    store.delete("b")
    await settle()

    assert [e.name for e in mirror.entries] == ["Alpha"]


async def test_late_subscriber_gets_current_snapshot(store, mirror):
    store.put("a", doc("Alpha", 1))
    mirror.start()
    await settle()

    listener = RecordingListener()
    mirror.subscribe(listener.on_snapshot)

    assert listener.snapshots == [["Alpha"]]


async def test_unsubscribed_listener_stops_receiving(store, mirror):
    listener = RecordingListener()
    unsubscribe = mirror.subscribe(listener.on_snapshot)
    mirror.start()
    await settle()

    unsubscribe()
    store.put("a", doc("Alpha", 1))
    await settle()

    assert listener.snapshots == [[]]


async def test_start_holds_a_single_remote_subscription(store, mirror):
    mirror.start()
    mirror.start()
    assert store.subscriber_count == 1


async def test_cancel_handle_releases_subscription_once(store, mirror):
    cancel = mirror.start()
    await settle()
    assert store.subscriber_count == 1

    cancel()
    cancel()
    assert store.subscriber_count == 0
    assert not mirror.active


async def test_notifications_after_stop_are_ignored(store, mirror):
    mirror.start()
    await settle()
    store.put("a", doc("Alpha", 1))
    mirror.stop()
    await settle()

    assert mirror.entries == ()


async def test_subscribe_failure_is_a_visible_error_state(store, mirror):
    store.subscribe_error = ConnectionError("store unreachable")
    listener = RecordingListener()
    mirror.subscribe(listener.on_snapshot, listener.on_error)

    mirror.start()

    assert mirror.status == "error"
    assert isinstance(mirror.error, SubscriptionError)
    assert len(listener.errors) == 1
    assert listener.snapshots == []


async def test_subscription_dropped_later_keeps_last_snapshot(store, mirror):
    store.put("a", doc("Alpha", 1))
    listener = RecordingListener()
    mirror.subscribe(listener.on_snapshot, listener.on_error)
    mirror.start()
    await settle()

    store.fail_subscriptions(ConnectionError("connection reset"))

    assert mirror.status == "error"
    assert [e.name for e in mirror.entries] == ["Alpha"]
    assert store.subscriber_count == 0
    assert len(listener.errors) == 1


async def test_error_is_delivered_to_late_subscribers(store, mirror):
    store.subscribe_error = ConnectionError("store unreachable")
    mirror.start()

    listener = RecordingListener()
    mirror.subscribe(listener.on_snapshot, listener.on_error)

    assert len(listener.errors) == 1


async def test_restart_recovers_from_error(store, mirror):
    store.subscribe_error = ConnectionError("store unreachable")
    mirror.start()
    assert mirror.status == "error"

    store.subscribe_error = None
    store.put("a", doc("Alpha", 1))
    mirror.restart()
    await settle()

    assert mirror.status == "ready"
    assert mirror.error is None
    assert [e.name for e in mirror.entries] == ["Alpha"]


async def test_failing_listener_does_not_block_others(store, mirror):
    def broken(entries):
        raise RuntimeError("boom")

    listener = RecordingListener()
    mirror.subscribe(broken)
    mirror.subscribe(listener.on_snapshot)
    mirror.start()
    await settle()

    assert listener.snapshots == [[]]


async def test_snapshot_is_immutable_tuple(store, mirror):
    store.put("a", doc("Alpha", 1))
    mirror.start()
    await settle()

    assert isinstance(mirror.entries, tuple)


class UnorderedStore(EntryStore):
    """Store that delivers duplicates out of order."""

    def __init__(self, entries):
        self.entries = entries

    def subscribe_ordered_by_creation(self, on_snapshot, on_error=None):
        on_snapshot(self.entries)
        return lambda: None


async def test_dedupes_and_orders_whatever_the_store_sends():
    store = UnorderedStore(
        [
            make_entry("a", "Alpha", minutes=1),
            make_entry("b", "Beta", minutes=5),
            make_entry("a", "Alpha v2", minutes=1),
            make_entry("c", "Pending", minutes=None),
        ]
    )
    mirror = LiveCollectionMirror(store)
    mirror.start()

    assert [e.name for e in mirror.entries] == ["Pending", "Beta", "Alpha v2"]


def test_dedupe_last_wins_at_first_position():
    entries = [make_entry("a", "A1"), make_entry("b", "B"), make_entry("a", "A2")]
    assert [e.name for e in dedupe_by_id(entries)] == ["A2", "B"]
