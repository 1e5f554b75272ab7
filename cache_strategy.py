"""Cache-related behavior for the app."""

from abc import ABC, abstractmethod

from flask import Flask

from match_fetcher import ScheduleResult


def schedule_cache_key(team_number: str, event_code: str) -> str:
    return f'{team_number}:{event_code.lower()}'


class CacheStrategy(ABC):
    """Abstract base class for caching fetched schedules."""

    @abstractmethod
    def invalidate(self, key: str):
        """Invalidate the cache for the given team/event key."""

        raise NotImplementedError

    @abstractmethod
    def update(self, key: str, result: ScheduleResult):
        """Update the cache for the given key to point to the given result."""

        raise NotImplementedError

    @abstractmethod
    def retrieve(self, key: str) -> ScheduleResult | None:
        """Retrieve the cache entry (or None) for the given key."""

        raise NotImplementedError

    @abstractmethod
    def debug_info(self):
        """Get information for dev testing to watch the cache happening."""

        raise NotImplementedError


class InMemoryCacheStrategy(CacheStrategy):
    """Simple in-memory caching of the latest schedule per team/event."""

    def __init__(self):
        self.cache = {}

    def invalidate(self, key: str):
        """Invalidate the cache for the given key."""

        if key in self.cache:
            del self.cache[key]

    def update(self, key: str, result: ScheduleResult):
        """Update the cache for the given key to point to the given result."""

        self.cache[key] = result

    def retrieve(self, key: str) -> ScheduleResult | None:
        """Retrieve the cache entry (or None) for the given key."""

        return self.cache.get(key, None)

    def debug_info(self):
        """Get information for dev testing to watch the cache happening."""

        return {
            key: {
                'matches': len(result.matches),
                'error': result.error
            }
            for key, result in self.cache.items()
        }


def get_cache_strategy(app: Flask | None) -> CacheStrategy:
    """
    Factory function to get a cache strategy based on the environment.

    Args:
        app (Flask|None): the Flask app to base caching on (None if testing)

    Returns:
        subclass of CacheStrategy to use for caching
    """

    return InMemoryCacheStrategy()
