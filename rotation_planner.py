"""Round-robin auto-assignment of batteries to unassigned matches."""

import logging
import threading

from assignment_store import AssignmentStore
from schema import BatteryAssignment, Match

logger = logging.getLogger(__name__)


class AutoAssignRefused(Exception):
    """Auto-assignment cannot run; the message is meant for the user."""


def compute_preview(order: list[str],
                    unassigned_matches: list[Match]) -> dict[str, str]:
    """
    Map each unassigned match to a battery, cycling through the order.

    With order [A, B] and matches m1, m2, m3 the preview is
    {m1: A, m2: B, m3: A}. Empty when either input is empty.
    """

    if not order or not unassigned_matches:
        return {}
    return {
        match.id: order[index % len(order)]
        for index, match in enumerate(unassigned_matches)
    }


def find_unassigned_matches(matches: list[Match],
                            assignments: list[BatteryAssignment],
                            limit: int | None = None) -> list[Match]:
    assigned = {a.match_id for a in assignments}
    unassigned = [m for m in matches if m.id not in assigned]
    return unassigned if limit is None else unassigned[:limit]


class RotationPlanner:
    """
    Rotation order plus the preview it produces over unassigned matches.

    The preview is recomputed from scratch whenever the order or the
    match/assignment inputs change. Mutators hold a lock, since request
    handlers run on several threads.
    """

    def __init__(self, store: AssignmentStore, limit: int | None = None):
        self.store = store
        self.limit = limit
        self._lock = threading.Lock()
        self._order = []
        self._unassigned = []
        self._preview = {}

    @property
    def order(self) -> list[str]:
        return list(self._order)

    @property
    def unassigned_matches(self) -> list[Match]:
        return list(self._unassigned)

    @property
    def preview(self) -> dict[str, str]:
        return dict(self._preview)

    def append(self, battery_id: str) -> bool:
        """Add a working battery to the end of the rotation."""

        battery = self.store.get_battery(battery_id)
        with self._lock:
            if (battery is None or battery.is_faulty
                    or battery_id in self._order):
                return False
            self._order = [*self._order, battery_id]
            self.__update_preview()
            return True

    def remove(self, battery_id: str) -> bool:
        with self._lock:
            if battery_id not in self._order:
                return False
            self._order = [b for b in self._order if b != battery_id]
            self.__update_preview()
            return True

    def reorder(self, from_index: int, to_index: int):
        """Move the battery at from_index so it ends up at to_index."""

        with self._lock:
            if not 0 <= from_index < len(self._order):
                raise IndexError(f'No battery at position {from_index}')
            if not 0 <= to_index < len(self._order):
                raise IndexError(
                    f'Position {to_index} is outside the rotation')
            order = list(self._order)
            order.insert(to_index, order.pop(from_index))
            self._order = order
            self.__update_preview()

    def refresh(self, matches: list[Match],
                assignments: list[BatteryAssignment]):
        """Recompute unassigned matches and the preview from current data."""

        with self._lock:
            self._order = [
                battery_id for battery_id in self._order
                if self.store.get_battery(battery_id) is not None
            ]
            self._unassigned = find_unassigned_matches(
                matches, assignments, self.limit)
            self.__update_preview()

    def commit(self) -> dict[str, str]:
        """
        Assign every previewed match its battery.

        Each assignment is applied on its own; a failure part way leaves the
        earlier ones in place. Batteries removed since the preview was built
        are skipped.

        Raises:
            AutoAssignRefused: nothing to assign.
        """

        with self._lock:
            if not self._order:
                raise AutoAssignRefused(
                    'Please select at least one battery for the rotation '
                    'order.')
            if not self._unassigned:
                raise AutoAssignRefused(
                    'All matches already have batteries assigned.')
            if not self._preview:
                raise AutoAssignRefused('No assignments to apply.')

            committed = {}
            for match_id, battery_id in self._preview.items():
                if self.store.assign(match_id, battery_id) is not None:
                    committed[match_id] = battery_id

            logger.info('Assigned %d matches with %d batteries in rotation',
                        len(committed), len(self._order))

            self._unassigned = [
                m for m in self._unassigned if m.id not in committed
            ]
            self.__update_preview()
            return committed

    def __update_preview(self):
        self._preview = compute_preview(self._order, self._unassigned)
