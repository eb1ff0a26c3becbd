"""
Dashboard Feed - live-updating admin dashboard.

Holds one in-memory slice per source collection. Whenever ANY slice changes
the whole dashboard is recomputed and pushed to subscribers:

    users ----------\
    jobs ------------+--> replace(slice) --> build_dashboard() --> listeners
    applications ---/
    eventRegistrations

There is no cross-collection consistency: a new application can show up
before the job it points at. Slices are swapped whole, never mutated, so a
recompute always sees complete lists even while a watcher is replacing one.

Watching uses MongoDB change streams (requires a replica set). Every change
event re-reads the affected collection; there is no per-document delta.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional

from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from unisphere.db.mongodb import DASHBOARD_SOURCES
from unisphere.schemas.schemas import DashboardResponse, DashboardSnapshot
from unisphere.services.activity_service import (
    ActivityPolicy,
    DEFAULT_POLICY,
    build_dashboard,
    utc_now,
)
from unisphere.services.mongo_service import (
    SNAPSHOT_FIELDS,
    fetch_records,
    get_source_collections,
    load_snapshot,
)

logger = logging.getLogger(__name__)

Listener = Callable[[DashboardResponse], None]


class DashboardFeed:
    """
    Keeps the four source slices and the latest dashboard built from them.

    Usage:
        feed = DashboardFeed()
        feed.subscribe(lambda dashboard: ...)
        feed.load()
        feed.start()    # one watcher thread per collection
        ...
        feed.stop()
    """

    def __init__(
        self,
        collections: Optional[Dict[str, Collection]] = None,
        policy: ActivityPolicy = DEFAULT_POLICY,
        clock: Callable = utc_now,
        max_workers: Optional[int] = None
    ):
        self._collections = collections
        self.policy = policy
        self._clock = clock
        self._max_workers = max_workers

        self._slices: Dict[str, list] = {key: [] for key in DASHBOARD_SOURCES}
        self._listeners: List[Listener] = []
        self._threads: List[threading.Thread] = []
        self._streams: list = []
        self._streams_lock = threading.Lock()
        self._stopped = threading.Event()

        self.latest: Optional[DashboardResponse] = None

    @property
    def collections(self) -> Dict[str, Collection]:
        if self._collections is None:
            self._collections = get_source_collections()
        return self._collections

    @property
    def snapshot(self) -> DashboardSnapshot:
        """Whatever each slice currently holds."""
        return DashboardSnapshot(**{
            SNAPSHOT_FIELDS[key]: records for key, records in self._slices.items()
        })

    @property
    def is_watching(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)

    # --------------------------------------------------------
    # Subscribers
    # --------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> DashboardResponse:
        dashboard = build_dashboard(self.snapshot, now=self._clock(), policy=self.policy)
        self.latest = dashboard
        for listener in list(self._listeners):
            listener(dashboard)
        return dashboard

    # --------------------------------------------------------
    # Updates
    # --------------------------------------------------------

    def replace(self, key: str, records: list) -> DashboardResponse:
        """Swap one slice and recompute everything."""
        if key not in self._slices:
            raise KeyError(f"Unknown dashboard source: {key}")
        self._slices[key] = list(records)
        return self._publish()

    def refresh(self, key: str) -> DashboardResponse:
        """Re-read one collection from the database."""
        return self.replace(key, fetch_records(key, self.collections[key]))

    def load(self) -> DashboardResponse:
        """Initial load: all four collections in parallel, one recompute."""
        snapshot = load_snapshot(self.collections, self._max_workers)
        for key, field in SNAPSHOT_FIELDS.items():
            self._slices[key] = getattr(snapshot, field)
        logger.info(
            "Dashboard feed loaded: %d students, %d jobs, %d applications, %d registrations",
            len(snapshot.students), len(snapshot.jobs),
            len(snapshot.applications), len(snapshot.registrations)
        )
        return self._publish()

    # --------------------------------------------------------
    # Change streams
    # --------------------------------------------------------

    def watch(self, key: str) -> None:
        """
        Block on a change stream for one collection, refreshing its slice on
        every change. Returns when stop() is called or the stream fails.
        """
        collection = self.collections[key]
        try:
            with collection.watch() as stream:
                # stop() may have run while the stream was opening
                with self._streams_lock:
                    if self._stopped.is_set():
                        return
                    self._streams.append(stream)
                for _change in stream:
                    if self._stopped.is_set():
                        break
                    self.refresh(key)
        except PyMongoError as e:
            if not self._stopped.is_set():
                logger.error("Change stream for %s ended: %s", key, e)

    def start(self) -> None:
        """Watch every source collection on its own daemon thread."""
        self._stopped.clear()
        for key in DASHBOARD_SOURCES:
            thread = threading.Thread(
                target=self.watch, args=(key,), name=f"dashboard-watch-{key}", daemon=True
            )
            thread.start()
            self._threads.append(thread)
        logger.info("Watching %d collections for dashboard updates", len(self._threads))

    def stop(self, timeout: float = 5.0) -> None:
        """
        Stop listening: close every open stream and wait for the watcher
        threads to exit. An update already being recomputed still completes.
        """
        self._stopped.set()
        with self._streams_lock:
            streams, self._streams = self._streams, []
        for stream in streams:
            try:
                stream.close()
            except PyMongoError as e:
                logger.debug("Closing change stream failed: %s", e)

        for thread in self._threads:
            if thread is not threading.current_thread():
                thread.join(timeout)
        self._threads = [thread for thread in self._threads if thread.is_alive()]
        if self._threads:
            logger.warning(
                "Dashboard watchers still running after stop: %s",
                ", ".join(thread.name for thread in self._threads)
            )


# ============================================================
# APP-WIDE FEED
# ============================================================

_feed: Optional[DashboardFeed] = None


def get_dashboard_feed() -> Optional[DashboardFeed]:
    """The running feed, or None when live updates are disabled."""
    return _feed


def set_dashboard_feed(feed: Optional[DashboardFeed]) -> None:
    global _feed
    _feed = feed


def get_dashboard_snapshot() -> DashboardSnapshot:
    """
    FastAPI dependency - the snapshot a request should be computed from.

    Served from the live feed while it is watching, otherwise read fresh.
    """
    feed = get_dashboard_feed()
    if feed is not None and feed.is_watching:
        return feed.snapshot
    return load_snapshot()
