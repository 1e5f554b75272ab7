"""Tests for assignment_store.py."""

import threading
import unittest
from unittest.mock import patch

from assignment_store import AssignmentStore, has_issues
from schema import AppSettings, Battery, BatteryComment, BatteryStats
from storage_strategy import InMemoryStorageStrategy


def battery(battery_id, **kwargs):
    return Battery(id=battery_id,
                   voltage=12.8,
                   capacity=18.0,
                   date_added='2024-03-01T00:00:00+00:00',
                   **kwargs)


def comment(text, match_id='2024flta_qm1'):
    return BatteryComment(match_id=match_id,
                          text=text,
                          timestamp='2024-03-04T15:00:00+00:00')


class FakeClock:

    def __init__(self):
        self.ticks = 0

    def __call__(self):
        self.ticks += 1
        return f'2024-03-04T10:00:{self.ticks:02d}+00:00'


class AssignmentStoreTests(unittest.TestCase):
    """Tests for assignment_store.py"""

    def setUp(self):
        self.storage = InMemoryStorageStrategy()
        self.store = AssignmentStore(self.storage, clock=FakeClock())

    def test_starts_empty_with_default_settings(self):
        self.assertEqual(self.store.batteries, [])
        self.assertEqual(self.store.assignments, [])
        self.assertEqual(self.store.settings, AppSettings())

    def test_add_battery(self):
        res = self.store.add_battery(battery('B1'))

        self.assertTrue(res)
        self.assertEqual(self.store.batteries, [battery('B1')])

    def test_add_battery_duplicate_is_ignored(self):
        self.store.add_battery(battery('B1'))

        res = self.store.add_battery(battery('B1', brand='Other'))

        self.assertFalse(res)
        self.assertEqual(self.store.batteries, [battery('B1')])

    def test_assign_last_write_wins(self):
        self.store.add_battery(battery('B1'))
        self.store.add_battery(battery('B2'))
        self.store.assign('m1', 'B1')
        self.store.assign('m1', 'B2')

        res = [a for a in self.store.assignments if a.match_id == 'm1']

        self.assertEqual(len(res), 1)
        self.assertEqual(res[0].battery_id, 'B2')
        self.assertEqual(res[0].timestamp, '2024-03-04T10:00:02+00:00')

    def test_same_battery_on_many_matches(self):
        self.store.add_battery(battery('B1'))
        self.store.assign('m1', 'B1')
        self.store.assign('m2', 'B1')

        res = self.store.assignments_for_battery('B1')

        self.assertEqual([a.match_id for a in res], ['m1', 'm2'])

    def test_assign_unknown_battery_is_noop(self):
        res = self.store.assign('m1', 'ghost')

        self.assertIsNone(res)
        self.assertEqual(self.store.assignments, [])
        self.assertEqual(
            self.store.stats(),
            BatteryStats(total=0, assigned=0, available=0, with_issues=0))

    def test_concurrent_assigns_keep_one_per_match(self):
        for battery_id in ('B1', 'B2'):
            self.store.add_battery(battery(battery_id))
        store = AssignmentStore(self.storage)

        def assign_repeatedly(battery_id):
            for _ in range(200):
                store.assign('m1', battery_id)

        threads = [
            threading.Thread(target=assign_repeatedly, args=(battery_id, ))
            for battery_id in ('B1', 'B2', 'B1', 'B2')
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(store.assignments), 1)
        self.assertEqual(len(AssignmentStore(self.storage).assignments), 1)

    def test_unassign(self):
        self.store.add_battery(battery('B1'))
        self.store.assign('m1', 'B1')

        self.assertTrue(self.store.unassign('m1'))
        self.assertIsNone(self.store.assignment_for('m1'))

    def test_unassign_unknown_match_is_noop(self):
        self.store.add_battery(battery('B1'))
        self.store.assign('m1', 'B1')

        res = self.store.unassign('nope')

        self.assertFalse(res)
        self.assertEqual(len(self.store.assignments), 1)

    def test_remove_battery_cascades_assignments(self):
        self.store.add_battery(battery('B1'))
        self.store.add_battery(battery('B2'))
        self.store.assign('m1', 'B1')
        self.store.assign('m2', 'B2')

        self.store.remove_battery('B1')

        self.assertIsNone(self.store.assignment_for('m1'))
        self.assertIsNotNone(self.store.assignment_for('m2'))
        self.assertEqual([b.id for b in self.store.batteries], ['B2'])

    def test_remove_unknown_battery_is_noop(self):
        self.assertFalse(self.store.remove_battery('nope'))

    def test_set_faulty(self):
        self.store.add_battery(battery('B1'))

        self.store.set_faulty('B1', True)

        self.assertTrue(self.store.get_battery('B1').is_faulty)

    def test_set_faulty_unknown_battery_is_noop(self):
        self.assertFalse(self.store.set_faulty('nope', True))

    def test_append_comment_keeps_order(self):
        self.store.add_battery(battery('B1'))

        self.store.append_comment('B1', comment('first'))
        self.store.append_comment('B1', comment('second'))

        self.assertEqual([c.text for c in self.store.comments_for('B1')],
                         ['first', 'second'])

    def test_comments_for_unknown_battery(self):
        self.assertEqual(self.store.comments_for('nope'), [])

    def test_battery_for_match(self):
        self.store.add_battery(battery('B1'))
        self.store.assign('m1', 'B1')

        self.assertEqual(self.store.battery_for_match('m1').id, 'B1')
        self.assertIsNone(self.store.battery_for_match('m2'))

    def test_update_settings(self):
        settings = AppSettings(team_number='254', event_code='2024cmptx')

        self.store.update_settings(settings)

        self.assertEqual(self.store.settings, settings)

    def test_state_survives_reload(self):
        self.store.add_battery(battery('B1'))
        self.store.append_comment('B1', comment('fine'))
        self.store.assign('m1', 'B1')
        self.store.update_settings(AppSettings(team_number='254'))

        reloaded = AssignmentStore(self.storage)

        self.assertEqual(reloaded.batteries, self.store.batteries)
        self.assertEqual(reloaded.assignments, self.store.assignments)
        self.assertEqual(reloaded.settings.team_number, '254')

    @patch('storage_strategy.InMemoryStorageStrategy.end_transaction')
    @patch('storage_strategy.InMemoryStorageStrategy.start_transaction')
    def test_mutations_are_transactional(self, mock_start, mock_end):
        self.store.add_battery(battery('B1'))
        mock_start.reset_mock()
        mock_end.reset_mock()

        self.store.assign('m1', 'B1')

        mock_start.assert_called_once()
        mock_end.assert_called_once()

    def test_stats(self):
        self.store.add_battery(battery('B1'))
        self.store.add_battery(battery('B2', is_faulty=True))
        self.store.add_battery(battery('B3'))
        self.store.append_comment('B3', comment('Connector PROBLEM'))
        self.store.assign('m1', 'B1')

        res = self.store.stats()

        self.assertEqual(
            res, BatteryStats(total=3, assigned=1, available=2, with_issues=2))

    def test_has_issues(self):
        self.assertTrue(has_issues(battery('B1', is_faulty=True)))
        self.assertTrue(
            has_issues(battery('B1', comments=[comment('brownout failure')])))
        self.assertFalse(has_issues(battery('B1',
                                            comments=[comment('all good')])))


if __name__ == '__main__':
    unittest.main()
