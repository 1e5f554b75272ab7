"""Tests for mock_schedule.py."""

import random
import unittest

from mock_schedule import generate_mock_matches
from schema import MatchType


class MockScheduleTests(unittest.TestCase):
    """Tests for mock_schedule.py"""

    def test_regional_shape(self):
        res = generate_mock_matches('10219', 'flta', random.Random(3))

        self.assertEqual([m.id for m in res], [
            'flta_qm1', 'flta_qm2', 'flta_qm3', 'flta_qm4', 'flta_qm5',
            'flta_qm6', 'flta_qm7', 'flta_qm8', 'flta_sf1m1', 'flta_sf1m2',
            'flta_sf2m1', 'flta_sf2m2', 'flta_f1m1', 'flta_f1m2'
        ])
        self.assertTrue(all(m.division is None for m in res))
        self.assertTrue(all(m.team_ranking == 12 for m in res))

    def test_team_slots_and_winners(self):
        res = generate_mock_matches('10219', 'flta', random.Random(3))

        quals = res[:8]
        self.assertIn('10219', quals[0].teams['blue'])  # qual 1 is odd
        self.assertIn('10219', quals[1].teams['red'])
        self.assertEqual([m.is_completed for m in quals],
                         [True] * 4 + [False] * 4)
        self.assertEqual([m.winner for m in quals[:4]],
                         ['blue', 'red', 'tie', 'red'])
        self.assertTrue(all(m.winner is None for m in quals[4:]))
        self.assertTrue(all(len(m.teams['red']) == 3 for m in res))
        self.assertTrue(all(len(m.teams['blue']) == 3 for m in res))

        semis = res[8:12]
        self.assertEqual([m.is_completed for m in semis],
                         [True, False, False, False])
        self.assertEqual(semis[0].winner, 'red')
        self.assertEqual(semis[2].description, 'Semifinal 2')

        finals = res[12:]
        self.assertEqual([m.winner for m in finals], ['red', None])
        self.assertEqual(finals[1].description, 'Final Match 2')

    def test_structure_is_repeatable(self):
        first = generate_mock_matches('10219', 'flta')
        second = generate_mock_matches('10219', 'flta')

        def shape(matches):
            return [(m.id, m.match_type, m.is_completed, m.winner)
                    for m in matches]

        self.assertEqual(shape(first), shape(second))

    def test_championship_adds_einstein(self):
        res = generate_mock_matches('10219', '2024cmptx', random.Random(3))

        self.assertEqual(len(res), 16)
        einstein = res[-2:]
        self.assertEqual([m.match_type for m in einstein],
                         [MatchType.EINSTEIN] * 2)
        self.assertEqual([m.division for m in einstein],
                         ['Einstein', 'Einstein'])
        self.assertEqual(einstein[0].description, 'Einstein Final 1')
        self.assertEqual(res[0].division, 'Archimedes')

    def test_division_code_uses_division_name(self):
        res = generate_mock_matches('10219', '2024hop', random.Random(3))

        self.assertEqual(res[0].division, 'Hopper')


if __name__ == '__main__':
    unittest.main()
