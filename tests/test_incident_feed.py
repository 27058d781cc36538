import asyncio
import threading

from incident_hub.models.incident import FeedStatus
from incident_hub.services.incident_feed import IncidentFeedCache
from incident_hub.stores.memory_store import MemoryIncidentStore


class FlakyStore(MemoryIncidentStore):
    """Memory store whose reads can be switched to fail."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail = False
        self.reads = 0

    def fetch_incidents(self):
        self.reads += 1
        if self.fail:
            raise ConnectionError("backend unreachable")
        return super().fetch_incidents()


class GatedStore(MemoryIncidentStore):
    """Each read blocks until its gate opens, so completion order can be forced."""

    def __init__(self, gates, failing=()):
        super().__init__()
        self.gates = gates
        self.failing = set(failing)
        self.calls = 0
        self._calls_lock = threading.Lock()

    def fetch_incidents(self):
        with self._calls_lock:
            index = self.calls
            self.calls += 1
        self.gates[index].wait(timeout=5)
        if index in self.failing:
            raise ConnectionError(f"read-{index} failed")
        return [{"id": f"read-{index}", "incident_type": "water"}]


def ids(incidents):
    return [incident.id for incident in incidents]


def test_start_loads_newest_first(store):
    async def scenario():
        cache = IncidentFeedCache(store)
        snapshot = await cache.start()
        cache.stop()
        return snapshot

    snapshot = asyncio.run(scenario())
    assert snapshot.status == FeedStatus.OK
    assert snapshot.last_updated is not None
    assert ids(snapshot.incidents) == ["i5", "i4", "i3", "i2", "i1"]
    assert snapshot.incidents[0].jurisdiction_name == "eThekwini"


def test_change_notification_replaces_cache_with_fresh_read(store):
    async def scenario():
        cache = IncidentFeedCache(store)
        await cache.start()

        store.insert_incident({"id": "i6", "incident_type": "roads", "created_at": "2024-06-01T00:00:00Z"})
        await cache.settle()
        after_insert = ids(cache.current())

        store.delete_incident("i1")
        store.update_incident("i2", {"status": "resolved"})
        await cache.settle()
        after_delete = cache.current()

        cache.stop()
        return after_insert, after_delete

    after_insert, after_delete = asyncio.run(scenario())
    assert after_insert == ["i6", "i5", "i4", "i3", "i2", "i1"]
    assert ids(after_delete) == ["i6", "i5", "i4", "i3", "i2"]
    assert after_delete[-1].status.value == "resolved"


def test_current_matches_store_exactly_after_notification(store):
    async def scenario():
        cache = IncidentFeedCache(store)
        await cache.start()
        for incident_id in ["i1", "i2", "i3", "i4", "i5"]:
            store.delete_incident(incident_id)
        await cache.settle()
        cached = cache.current()
        cache.stop()
        return cached

    assert asyncio.run(scenario()) == []


def test_failed_read_keeps_last_known_incidents():
    store = FlakyStore(incidents={"a": {"incident_type": "water", "created_at": "2024-01-01T00:00:00Z"}})

    async def scenario():
        cache = IncidentFeedCache(store)
        await cache.start()
        first = cache.snapshot()

        store.fail = True
        stale = await cache.refresh()

        store.fail = False
        recovered = await cache.refresh()
        cache.stop()
        return first, stale, recovered

    first, stale, recovered = asyncio.run(scenario())
    assert stale.status == FeedStatus.STALE
    assert ids(stale.incidents) == ["a"]
    assert "backend unreachable" in stale.error
    assert stale.last_updated == first.last_updated

    assert recovered.status == FeedStatus.OK
    assert recovered.error is None


def test_failed_read_is_not_retried_automatically():
    store = FlakyStore()
    store.fail = True

    async def scenario():
        cache = IncidentFeedCache(store)
        snapshot = await cache.start()
        await asyncio.sleep(0.05)
        await cache.settle()
        cache.stop()
        return snapshot

    snapshot = asyncio.run(scenario())
    assert snapshot.status == FeedStatus.STALE
    assert snapshot.incidents == []
    assert store.reads == 1


def test_listeners_receive_snapshots_and_failures_are_isolated(store):
    received = []

    def broken_listener(snapshot):
        raise RuntimeError("listener bug")

    async def scenario():
        cache = IncidentFeedCache(store)
        cache.on_change(broken_listener)
        remove = cache.on_change(lambda snapshot: received.append(len(snapshot.incidents)))
        await cache.start()
        store.insert_incident({"id": "i6", "incident_type": "water"})
        await cache.settle()
        remove()
        store.insert_incident({"id": "i7", "incident_type": "water"})
        await cache.settle()
        cache.stop()

    asyncio.run(scenario())
    assert received == [5, 6]


def test_stop_cancels_subscription_and_discards_late_reads(store):
    async def scenario():
        cache = IncidentFeedCache(store)
        await cache.start()
        cache.stop()
        store.insert_incident({"id": "i6", "incident_type": "water"})
        await cache.settle()
        await cache.refresh()
        return cache.current()

    assert "i6" not in ids(asyncio.run(scenario()))


def test_older_read_finishing_last_does_not_overwrite_newer_one():
    gates = [threading.Event(), threading.Event()]
    store = GatedStore(gates)

    async def scenario():
        cache = IncidentFeedCache(store)
        first = asyncio.ensure_future(cache.refresh())
        await asyncio.sleep(0.05)
        second = asyncio.ensure_future(cache.refresh())
        await asyncio.sleep(0.05)

        gates[1].set()
        await second
        gates[0].set()
        await first
        return cache.current()

    assert ids(asyncio.run(scenario())) == ["read-1"]


def test_notifications_from_other_threads_are_applied_on_the_loop(store):
    async def scenario():
        cache = IncidentFeedCache(store)
        await cache.start()
        writer = threading.Thread(
            target=store.insert_incident,
            args=({"id": "i6", "incident_type": "water", "created_at": "2024-07-01T00:00:00Z"},),
        )
        writer.start()
        writer.join()
        await asyncio.sleep(0.05)
        await cache.settle()
        cache.stop()
        return ids(cache.current())

    assert asyncio.run(scenario())[0] == "i6"


def test_older_read_finishing_last_does_not_hide_newer_failure():
    gates = [threading.Event(), threading.Event()]
    store = GatedStore(gates, failing={1})

    async def scenario():
        cache = IncidentFeedCache(store)
        first = asyncio.ensure_future(cache.refresh())
        await asyncio.sleep(0.05)
        second = asyncio.ensure_future(cache.refresh())
        await asyncio.sleep(0.05)

        gates[1].set()
        await second
        gates[0].set()
        await first
        return cache.snapshot()

    snapshot = asyncio.run(scenario())
    assert snapshot.status == FeedStatus.STALE
    assert snapshot.incidents == []
    assert "read-1 failed" in snapshot.error


def test_malformed_row_does_not_drop_the_rest_of_the_feed():
    store = MemoryIncidentStore(incidents={
        "good": {"incident_type": "water", "created_at": "2024-05-02T00:00:00Z"},
        "bad": {
            "incident_type": "roads", "location_lat": "n/a", "location_lng": 18.4,
            "title": {"text": "nested"}, "jurisdiction_name": 42,
            "created_at": "2024-05-01T00:00:00Z",
        },
    })

    async def scenario():
        cache = IncidentFeedCache(store)
        snapshot = await cache.start()
        cache.stop()
        return snapshot

    snapshot = asyncio.run(scenario())
    assert snapshot.status == FeedStatus.OK
    assert ids(snapshot.incidents) == ["good", "bad"]
    bad = snapshot.incidents[1]
    assert bad.coordinates is None
    assert bad.title == ""


def test_unreadable_row_is_skipped():
    class GarbageStore(MemoryIncidentStore):
        def fetch_incidents(self):
            return [{"id": "ok", "incident_type": "water"}, "not a row"]

    async def scenario():
        cache = IncidentFeedCache(GarbageStore())
        snapshot = await cache.start()
        cache.stop()
        return snapshot

    snapshot = asyncio.run(scenario())
    assert snapshot.status == FeedStatus.OK
    assert ids(snapshot.incidents) == ["ok"]
