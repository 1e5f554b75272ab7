"""Storage-related functionality for the app."""

from abc import ABC, abstractmethod
from dataclasses import asdict
import json
import logging
import os

from flask import Flask, has_app_context
from flask_sqlalchemy import SQLAlchemy

from schema import AppSettings, Battery, BatteryAssignment

logger = logging.getLogger(__name__)

BATTERIES_KEY = 'frc-batteries'
ASSIGNMENTS_KEY = 'frc-battery-assignments'
SETTINGS_KEY = 'frc-app-settings'

db = SQLAlchemy()


class StoredValue(db.Model):
    """One persisted collection, serialized as JSON."""

    __tablename__ = 'stored_values'

    key = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.Text, nullable=False)


class StorageStrategy(ABC):
    """
    Abstract base for storage behavior.

    The tracker persists three independent collections (battery roster,
    assignment list, settings) under fixed keys. Subclasses only provide
    raw key/value access; (de)serialization lives here.
    """

    @abstractmethod
    def start_transaction(self):
        """Begin a transaction."""

        raise NotImplementedError()

    @abstractmethod
    def end_transaction(self):
        """Commit/end a transaction."""

        raise NotImplementedError()

    @abstractmethod
    def debug_info(self):
        """Get arbitrary debug information (not for production)."""

        raise NotImplementedError()

    @abstractmethod
    def _read(self, key: str) -> str | None:
        """Subclass must override to read a raw stored value (or None)."""

        raise NotImplementedError()

    @abstractmethod
    def _write(self, key: str, value: str):
        """Subclass must override to store a raw value."""

        raise NotImplementedError()

    def load_batteries(self) -> list[Battery]:
        """Get the battery roster (empty if never saved)."""

        return [
            Battery.from_dict(item)
            for item in self.__load_json(BATTERIES_KEY, [])
        ]

    def save_batteries(self, batteries: list[Battery]):
        self.__save_json(BATTERIES_KEY, [asdict(b) for b in batteries])

    def load_assignments(self) -> list[BatteryAssignment]:
        """Get the assignment list (empty if never saved)."""

        return [
            BatteryAssignment.from_dict(item)
            for item in self.__load_json(ASSIGNMENTS_KEY, [])
        ]

    def save_assignments(self, assignments: list[BatteryAssignment]):
        self.__save_json(ASSIGNMENTS_KEY, [asdict(a) for a in assignments])

    def load_settings(self) -> AppSettings:
        """Get the settings (defaults if never saved)."""

        return AppSettings.from_dict(self.__load_json(SETTINGS_KEY, {}))

    def save_settings(self, settings: AppSettings):
        self.__save_json(SETTINGS_KEY, asdict(settings))

    def __load_json(self, key: str, default):
        raw = self._read(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning('Ignoring malformed stored value for %s', key)
            return default

    def __save_json(self, key: str, value):
        self._write(key, json.dumps(value))


class InMemoryStorageStrategy(StorageStrategy):
    """Storage strategy that keeps everything in a process-local dict."""

    def __init__(self):
        # TODO: not shared across gunicorn workers, document or replace
        self.values = {}

    def start_transaction(self):
        """Does nothing."""

        pass

    def end_transaction(self):
        """Does nothing."""

        pass

    def debug_info(self):
        """Get the stored collections in printable form."""

        return {key: json.loads(value) for key, value in self.values.items()}

    def _read(self, key: str) -> str | None:
        return self.values.get(key, None)

    def _write(self, key: str, value: str):
        self.values[key] = value


class DatabaseStorageStrategy(StorageStrategy):
    """Storage strategy backed by a SQL database via Flask-SQLAlchemy."""

    def __init__(self, app: Flask, database_uri: str):
        app.config['SQLALCHEMY_DATABASE_URI'] = database_uri

        self.app = app
        self.db = db
        self.db.init_app(app)
        self._context = None
        with app.app_context():
            self.db.create_all()

    def start_transaction(self):
        # outside of a request there is no app context for the session yet
        if not has_app_context():
            self._context = self.app.app_context()
            self._context.push()

    def end_transaction(self):
        try:
            self.db.session.commit()
        except Exception:
            self.db.session.rollback()
            raise
        finally:
            if self._context is not None:
                self._context.pop()
                self._context = None

    def debug_info(self):
        return {'message': 'using real DB instead of in-memory'}

    def _read(self, key: str) -> str | None:
        if has_app_context():
            stored = self.db.session.get(StoredValue, key)
        else:
            with self.app.app_context():
                stored = self.db.session.get(StoredValue, key)
        return stored.value if stored else None

    def _write(self, key: str, value: str):
        self.db.session.merge(StoredValue(key=key, value=value))


def get_storage_strategy(app: Flask | None) -> StorageStrategy:
    """
    Factory function to get a storage strategy based on the current environment.

    By default, it gets a manual testing friendly in-memory storage strategy.
    If a 'TRACKER_DB' connection string is present, it gets a database
    storage strategy.

    Args:
        app (Flask|None): the Flask app (None if unit testing)

    Returns:
        The new storage strategy instance.
    """

    if not app:
        return UnitTestingStorageStrategy()
    if 'TRACKER_DB' in os.environ:
        return DatabaseStorageStrategy(app, os.environ['TRACKER_DB'])

    return InMemoryStorageStrategy()


UnitTestingStorageStrategy = InMemoryStorageStrategy
