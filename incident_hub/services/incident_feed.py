"""
Incident Feed Cache - in-memory copy of the incident table for the session.

Lifecycle:
1. start(): one bulk read (newest first), then subscribe to the store's
   change stream
2. Any change notification re-runs the full bulk read and replaces the
   cache wholesale (no incremental patching, no conflict resolution)
3. stop(): cancel the subscription; reads that land afterwards are dropped

Failure policy:
- A failed read keeps the last-known incidents and marks the feed stale
- No automatic retry: the next notification or refresh() recovers
- Nothing is raised to readers; snapshot() reports the stale state

Concurrency:
- All cache writes happen on the event loop that called start()
- Store notifications may arrive on any thread and are marshalled onto it
- Blocking store reads run in the loop's default executor
- When reads overlap, a read that started before the newest completed one
  (successful or failed) is discarded, so results from two reads are never
  mixed and a newer failure is never masked by an older success
- A malformed row is skipped and logged; the rest of the read is kept
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional, Set

from incident_hub.models.incident import FeedSnapshot, FeedStatus, Incident
from incident_hub.stores.base import IncidentStore, Unsubscribe
from incident_hub.utils.timestamps import utc_now

logger = logging.getLogger(__name__)

FeedListener = Callable[[FeedSnapshot], None]


class IncidentFeedCache:

    def __init__(self, store: IncidentStore):
        self.store = store
        self._incidents: List[Incident] = []
        self._status = FeedStatus.LOADING
        self._last_updated: Optional[datetime] = None
        self._error: Optional[str] = None
        self._listeners: List[FeedListener] = []
        self._unsubscribe: Optional[Unsubscribe] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._pending: Set[asyncio.Task] = set()
        self._reads_started = 0
        self._last_completed_read = 0
        self._closed = False

    @property
    def running(self) -> bool:
        return self._loop is not None and not self._closed

    async def start(self) -> FeedSnapshot:
        """Load the feed and begin following store changes."""
        self._loop = asyncio.get_running_loop()
        self._closed = False
        snapshot = await self.refresh()

        try:
            self._unsubscribe = self.store.subscribe(self._on_store_change)
        except Exception as e:
            logger.warning(f"Incident change subscription failed; feed will not update live: {e}")
            self._status = FeedStatus.STALE
            self._error = f"Change subscription failed: {e}"
            snapshot = self.snapshot()
            self._notify_listeners(snapshot)
        return snapshot

    def stop(self) -> None:
        """Cancel the subscription. In-flight reads finish but are discarded."""
        self._closed = True
        if self._unsubscribe is not None:
            try:
                self._unsubscribe()
            except Exception as e:
                logger.warning(f"Failed to cancel incident change subscription: {e}")
            self._unsubscribe = None
        self._listeners.clear()

    def current(self) -> List[Incident]:
        """The cached incidents, newest first. Returns a new list each call."""
        return list(self._incidents)

    def snapshot(self) -> FeedSnapshot:
        return FeedSnapshot(
            status=self._status,
            incidents=list(self._incidents),
            last_updated=self._last_updated,
            error=self._error,
        )

    def on_change(self, listener: FeedListener) -> Callable[[], None]:
        """
        Register a listener called with a fresh snapshot after every read
        (successful or not). Returns a function that removes it.
        """
        self._listeners.append(listener)

        def remove():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def refresh(self) -> FeedSnapshot:
        """
        Run one bulk read and replace the cache with it.
        Never raises; failures leave the previous incidents in place.
        """
        self._reads_started += 1
        read_number = self._reads_started
        loop = asyncio.get_running_loop()

        try:
            rows = await loop.run_in_executor(None, self.store.fetch_incidents)
        except Exception as e:
            if self._closed or read_number < self._last_completed_read:
                return self.snapshot()
            self._last_completed_read = read_number
            logger.warning(
                f"Incident feed read failed; keeping {len(self._incidents)} cached incidents: {e}",
                exc_info=True,
            )
            self._status = FeedStatus.STALE
            self._error = str(e) or e.__class__.__name__
            snapshot = self.snapshot()
            self._notify_listeners(snapshot)
            return snapshot

        if self._closed:
            logger.debug("Dropping incident read that completed after the feed stopped")
            return self.snapshot()
        if read_number < self._last_completed_read:
            logger.debug(f"Dropping incident read #{read_number}; #{self._last_completed_read} already completed")
            return self.snapshot()

        incidents = self._convert_rows(rows)
        self._incidents = incidents
        self._last_completed_read = read_number
        self._status = FeedStatus.OK
        self._error = None
        self._last_updated = utc_now()
        logger.info(f"Incident feed refreshed: {len(incidents)} incidents")

        snapshot = self.snapshot()
        self._notify_listeners(snapshot)
        return snapshot

    async def settle(self) -> None:
        """Wait until every notification-triggered refresh has finished."""
        await asyncio.sleep(0)
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def _convert_rows(self, rows) -> List[Incident]:
        incidents = []
        for row in rows:
            try:
                incidents.append(Incident.from_row(row))
            except Exception as e:
                row_id = row.get("id") if isinstance(row, dict) else None
                logger.warning(f"Skipping malformed incident row {row_id}: {e}")
        return incidents

    def _on_store_change(self, *args, **kwargs) -> None:
        loop = self._loop
        if loop is None or self._closed or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._schedule_refresh)

    def _schedule_refresh(self) -> None:
        if self._closed:
            return
        task = asyncio.ensure_future(self.refresh())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _notify_listeners(self, snapshot: FeedSnapshot) -> None:
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Incident feed listener failed: {e}", exc_info=True)
