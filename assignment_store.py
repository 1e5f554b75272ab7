"""Battery roster, match assignments and settings, with persistence."""

import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable

from schema import (AppSettings, Battery, BatteryAssignment, BatteryComment,
                    BatteryStats)
from storage_strategy import StorageStrategy

logger = logging.getLogger(__name__)

ISSUE_WORDS = ('issue', 'problem', 'fail')


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def has_issues(battery: Battery) -> bool:
    """Faulty, or any comment mentions an issue/problem/failure."""

    if battery.is_faulty:
        return True
    return any(word in comment.text.lower() for comment in battery.comments
               for word in ISSUE_WORDS)


class AssignmentStore:
    """
    Owns the tracker state and is the only place it is mutated.

    Operations on unknown battery or match ids are silent no-ops; mutators
    return whether anything changed. Every change is written back through
    the storage strategy. Mutators hold a lock, since request handlers run
    on several threads.
    """

    def __init__(self,
                 storage: StorageStrategy,
                 clock: Callable[[], str] = utc_now_iso):
        self.storage = storage
        self.clock = clock
        self._lock = threading.RLock()
        self._batteries = storage.load_batteries()
        self._assignments = storage.load_assignments()
        self._settings = storage.load_settings()

    @property
    def batteries(self) -> list[Battery]:
        return list(self._batteries)

    @property
    def assignments(self) -> list[BatteryAssignment]:
        return list(self._assignments)

    @property
    def settings(self) -> AppSettings:
        return self._settings

    def get_battery(self, battery_id: str) -> Battery | None:
        for battery in self._batteries:
            if battery.id == battery_id:
                return battery
        return None

    def add_battery(self, battery: Battery) -> bool:
        with self._lock:
            if self.get_battery(battery.id):
                return False
            self._batteries = [*self._batteries, battery]
            self.__persist(batteries=True)
        logger.info('Added battery %s', battery.id)
        return True

    def remove_battery(self, battery_id: str) -> bool:
        """Remove a battery together with all of its assignments."""

        with self._lock:
            if not self.get_battery(battery_id):
                return False
            self._batteries = [
                b for b in self._batteries if b.id != battery_id
            ]
            self._assignments = [
                a for a in self._assignments if a.battery_id != battery_id
            ]
            self.__persist(batteries=True, assignments=True)
        logger.info('Removed battery %s', battery_id)
        return True

    def set_faulty(self, battery_id: str, is_faulty: bool) -> bool:
        return self.__update_battery(
            battery_id, lambda b: replace(b, is_faulty=is_faulty))

    def append_comment(self, battery_id: str, comment: BatteryComment) -> bool:
        return self.__update_battery(
            battery_id,
            lambda b: replace(b, comments=[*b.comments, comment]))

    def comments_for(self, battery_id: str) -> list[BatteryComment]:
        battery = self.get_battery(battery_id)
        return list(battery.comments) if battery else []

    def assign(self, match_id: str,
               battery_id: str) -> BatteryAssignment | None:
        """
        Assign a battery to a match, replacing any earlier assignment.

        Returns:
            The new assignment, or None when the battery is not on the roster.
        """

        with self._lock:
            if not self.get_battery(battery_id):
                return None
            assignment = BatteryAssignment(match_id=match_id,
                                           battery_id=battery_id,
                                           timestamp=self.clock())
            self._assignments = [
                a for a in self._assignments if a.match_id != match_id
            ] + [assignment]
            self.__persist(assignments=True)
            return assignment

    def unassign(self, match_id: str) -> bool:
        with self._lock:
            remaining = [
                a for a in self._assignments if a.match_id != match_id
            ]
            if len(remaining) == len(self._assignments):
                return False
            self._assignments = remaining
            self.__persist(assignments=True)
            return True

    def assignment_for(self, match_id: str) -> BatteryAssignment | None:
        for assignment in self._assignments:
            if assignment.match_id == match_id:
                return assignment
        return None

    def battery_for_match(self, match_id: str) -> Battery | None:
        assignment = self.assignment_for(match_id)
        return self.get_battery(assignment.battery_id) if assignment else None

    def assignments_for_battery(self,
                                battery_id: str) -> list[BatteryAssignment]:
        return [a for a in self._assignments if a.battery_id == battery_id]

    def update_settings(self, settings: AppSettings):
        with self._lock:
            self._settings = settings
            self.__persist(settings=True)

    def stats(self) -> BatteryStats:
        with self._lock:
            batteries = list(self._batteries)
            assigned = len(self._assignments)
        total = len(batteries)
        return BatteryStats(total=total,
                            assigned=assigned,
                            available=total - assigned,
                            with_issues=sum(
                                1 for b in batteries if has_issues(b)))

    def __update_battery(self, battery_id: str, change) -> bool:
        with self._lock:
            for index, battery in enumerate(self._batteries):
                if battery.id == battery_id:
                    batteries = list(self._batteries)
                    batteries[index] = change(battery)
                    self._batteries = batteries
                    self.__persist(batteries=True)
                    return True
            return False

    def __persist(self, batteries=False, assignments=False, settings=False):
        self.storage.start_transaction()
        if batteries:
            self.storage.save_batteries(self._batteries)
        if assignments:
            self.storage.save_assignments(self._assignments)
        if settings:
            self.storage.save_settings(self._settings)
        self.storage.end_transaction()
