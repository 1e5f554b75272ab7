"""Periodic schedule refresh where the most recently started fetch wins."""

import logging
import threading
from typing import Callable

from cache_strategy import CacheStrategy, schedule_cache_key
from match_fetcher import ScheduleResult

logger = logging.getLogger(__name__)

FetchFunction = Callable[[str, str], ScheduleResult]
TargetFunction = Callable[[], tuple[str, str]]


class ScheduleRefresher:
    """
    Runs schedule fetches and keeps only the newest one's result per key.

    Fetches may overlap (a timer tick while a user-triggered refresh is in
    flight). Each fetch takes a generation number for its team/event key
    when it starts; when it finishes, its result is cached only if no newer
    fetch for the same key has started since. Fetches for different keys
    never supersede each other.
    """

    def __init__(self, fetch: FetchFunction, cache: CacheStrategy,
                 interval: float):
        self.fetch = fetch
        self.cache = cache
        self.interval = interval
        self._lock = threading.Lock()
        self._generations: dict[str, int] = {}
        self._timer = None
        self._target = None

    def begin(self, key: str) -> int:
        """Start a new fetch generation for key and return its token."""

        with self._lock:
            self._generations[key] = self._generations.get(key, 0) + 1
            return self._generations[key]

    def complete(self, token: int, key: str,
                 result: ScheduleResult) -> ScheduleResult | None:
        """Cache the result unless a newer fetch for key has begun."""

        with self._lock:
            latest = self._generations.get(key, 0)
            if token != latest:
                logger.debug('Discarding stale schedule for %s (fetch %d < %d)',
                             key, token, latest)
                return None
            self.cache.update(key, result)
            return result

    def refresh(self, team_number: str,
                event_code: str) -> ScheduleResult | None:
        """
        Fetch now and cache the result.

        Returns:
            The result, or None when a newer fetch for the same team and
            event superseded this one.
        """

        key = schedule_cache_key(team_number, event_code)
        token = self.begin(key)
        result = self.fetch(team_number, event_code)
        return self.complete(token, key, result)

    def start(self, target: TargetFunction):
        """
        Refresh every interval seconds until stopped.

        Args:
            target: returns the (team number, event code) to refresh, read
                again on every tick so settings changes are picked up.
        """

        self.stop()
        self._target = target
        self._schedule()

    def stop(self):
        """Cancel the periodic refresh; in-flight fetches are not interrupted."""

        with self._lock:
            self._target = None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    @property
    def running(self) -> bool:
        return self._timer is not None

    def _schedule(self):
        with self._lock:
            if self._target is None:
                return
            self._timer = threading.Timer(self.interval, self._tick)
            self._timer.daemon = True
            self._timer.start()

    def _tick(self):
        target = self._target
        if target is None:
            return
        try:
            team_number, event_code = target()
            if team_number and event_code:
                self.refresh(team_number, event_code)
        finally:
            self._schedule()
