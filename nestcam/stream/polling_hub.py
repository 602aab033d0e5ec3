"""
Timer driven feeds shared between any number of subscribers.

Each PolledFeed issues one fetch per tick no matter how many subscribers are
attached, and fans the result out to all of them. The timer thread only runs
while at least one subscriber is attached; when the last one leaves, the
timer stops and any remembered state is dropped.
"""

import threading
import logging
from typing import Any, Callable, List, Optional, Sequence

from nestcam.errors import FailureStreakError

# Marks "no previous result" for the distinct comparator
_UNSET = object()


def same_event_count(previous: Sequence, current: Sequence) -> bool:
    """Two event lists count as unchanged when they have the same length."""
    return len(previous) == len(current)


def latest_event(events: Sequence) -> Optional[Any]:
    """Newest event of a chronologically ordered list, or None if empty."""
    return events[-1] if events else None


class Subscription:
    """Handle for one subscriber of a PolledFeed"""

    def __init__(self, feed: "PolledFeed", on_next: Callable[[Any], Any],
                 on_error: Optional[Callable[[Exception], Any]] = None,
                 on_complete: Optional[Callable[[], Any]] = None):
        self._feed = feed
        self._on_next = on_next
        self._on_error = on_error
        self._on_complete = on_complete
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def unsubscribe(self):
        """Detach from the feed. Calling it more than once is harmless."""
        self._feed._detach(self)

    def _call(self, callback, *args):
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as e:
            self._feed.logger.error(f"Error in {self._feed.name} subscriber callback: {e}")

    def _next(self, value):
        if not self._closed:
            self._call(self._on_next, value)

    def _error(self, error: Exception, final: bool = False):
        # Released subscribers still hear why their feed ended
        if not self._closed or final:
            self._call(self._on_error, error)

    def _complete(self):
        self._call(self._on_complete)


class PolledFeed:
    """Multicast, refcounted feed over a periodic fetch"""

    def __init__(self, name: str, fetch: Callable[[], Any], interval: float,
                 comparator: Optional[Callable[[Any, Any], bool]] = None,
                 selector: Optional[Callable[[Any], Any]] = None,
                 max_consecutive_failures: int = 0):
        """
        Args:
            name: Feed name used in logs and errors
            fetch: Called once per tick; its result goes to every subscriber
            interval: Seconds between ticks
            comparator: Returns True when two consecutive results are the same;
                unchanged results are not delivered
            selector: Projects a result to the value handed to subscribers;
                None projections are not delivered
            max_consecutive_failures: Failed ticks in a row that end the feed
                with FailureStreakError (0 disables)
        """
        self.name = name
        self.fetch = fetch
        self.interval = interval
        self.comparator = comparator
        self.selector = selector
        self.max_consecutive_failures = max_consecutive_failures
        self.logger = logging.getLogger(__name__)

        self._lock = threading.Lock()
        self._subscribers: List[Subscription] = []
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._generation = 0
        self._last_value = _UNSET
        self._failures = 0

    @property
    def is_active(self) -> bool:
        return self._stop_event is not None

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, on_next: Callable[[Any], Any],
                  on_error: Optional[Callable[[Exception], Any]] = None,
                  on_complete: Optional[Callable[[], Any]] = None) -> Subscription:
        """Attach a subscriber, starting the timer if it is the first one"""
        subscription = Subscription(self, on_next, on_error, on_complete)
        with self._lock:
            self._subscribers.append(subscription)
            if len(self._subscribers) == 1:
                self._start()
        self.logger.info(f"Creating subscription to {self.name}")
        return subscription

    def tick(self):
        """Run one fetch-and-distribute cycle now. Does nothing while idle."""
        with self._lock:
            if not self._subscribers:
                return
            generation = self._generation
        self._tick(generation)

    def stop(self):
        """Complete every subscriber and return to idle"""
        with self._lock:
            subscribers = self._release_all()
        for subscription in subscribers:
            subscription._complete()

    def _start(self):
        # Caller holds the lock
        self._generation += 1
        self._last_value = _UNSET
        self._failures = 0
        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._run, args=(stop_event, self._generation),
            name=f"nestcam-{self.name}", daemon=True
        )
        self._thread.start()
        self.logger.debug(f"Started {self.name} timer every {self.interval}s")

    def _teardown(self):
        # Caller holds the lock
        if self._stop_event is not None:
            self._stop_event.set()
            self.logger.debug(f"Stopped {self.name} timer")
        self._stop_event = None
        self._thread = None
        self._last_value = _UNSET
        self._failures = 0

    def _release_all(self) -> List[Subscription]:
        # Caller holds the lock
        subscribers = list(self._subscribers)
        self._subscribers.clear()
        for subscription in subscribers:
            subscription._closed = True
        self._teardown()
        return subscribers

    def _detach(self, subscription: Subscription):
        with self._lock:
            if subscription not in self._subscribers:
                return
            self._subscribers.remove(subscription)
            subscription._closed = True
            if not self._subscribers:
                self._teardown()

    def _run(self, stop_event: threading.Event, generation: int):
        while not stop_event.wait(self.interval):
            self._tick(generation)

    def _tick(self, generation: int):
        try:
            result = self.fetch()
        except Exception as e:
            self._fail(generation, e)
            return

        with self._lock:
            # A tick that outlived its activation delivers to nobody
            if generation != self._generation or not self._subscribers:
                return
            self._failures = 0
            if self.comparator is not None:
                if self._last_value is not _UNSET and self.comparator(self._last_value, result):
                    return
                self._last_value = result
            subscribers = list(self._subscribers)

        value = self.selector(result) if self.selector is not None else result
        if value is None:
            return
        for subscription in subscribers:
            subscription._next(value)

    def _fail(self, generation: int, error: Exception):
        with self._lock:
            if generation != self._generation or not self._subscribers:
                return
            self._failures += 1
            failures = self._failures
            exhausted = 0 < self.max_consecutive_failures <= failures
            if exhausted:
                subscribers = self._release_all()
            else:
                subscribers = list(self._subscribers)

        self.logger.warning(f"{self.name} tick failed ({failures} in a row): {error}")
        for subscription in subscribers:
            subscription._error(error, final=exhausted)

        if exhausted:
            terminal = FailureStreakError(self.name, failures)
            self.logger.error(str(terminal))
            for subscription in subscribers:
                subscription._error(terminal, final=True)
                subscription._complete()


class PollingHub:
    """Owns the snapshot feed and the event feed"""

    def __init__(self, snapshot_fetch: Callable[[], bytes], events_fetch: Callable[[], list],
                 snapshot_interval_ms: int = 5000, event_interval_ms: int = 3000,
                 max_consecutive_failures: int = 0):
        self.snapshots = PolledFeed(
            "snapshots", snapshot_fetch, snapshot_interval_ms / 1000,
            max_consecutive_failures=max_consecutive_failures
        )
        self.events = PolledFeed(
            "events", events_fetch, event_interval_ms / 1000,
            comparator=same_event_count, selector=latest_event,
            max_consecutive_failures=max_consecutive_failures
        )

    def subscribe_to_snapshots(self, on_snapshot, on_error=None, on_complete=None) -> Subscription:
        return self.snapshots.subscribe(on_snapshot, on_error, on_complete)

    def subscribe_to_events(self, on_event, on_error=None, on_complete=None) -> Subscription:
        return self.events.subscribe(on_event, on_error, on_complete)

    def stop(self):
        self.snapshots.stop()
        self.events.stop()
