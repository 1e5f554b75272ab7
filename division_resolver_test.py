"""Tests for division_resolver.py."""

import unittest
from unittest.mock import Mock

from division_resolver import ProbeOutcome, find_team_division, probe_division
from tba_client import ProviderError, TBAClient


def client_with(matches_by_event):
    """Client whose match queries answer from a dict; missing keys raise."""

    client = Mock(spec=TBAClient)

    def team_event_matches(team_number, event_key):
        if event_key not in matches_by_event:
            raise ProviderError('404')
        return matches_by_event[event_key]

    client.team_event_matches.side_effect = team_event_matches
    return client


class DivisionResolverTests(unittest.TestCase):
    """Tests for division_resolver.py"""

    def test_probe_division_found(self):
        client = client_with({'2024cur': [{'key': 'm'}]})

        res = probe_division(client, '10219', '2024cur')

        self.assertIs(res.outcome, ProbeOutcome.FOUND)
        self.assertEqual(res.matches, [{'key': 'm'}])

    def test_probe_division_empty(self):
        client = client_with({'2024cur': []})

        res = probe_division(client, '10219', '2024cur')

        self.assertIs(res.outcome, ProbeOutcome.EMPTY)

    def test_probe_division_error_is_not_raised(self):
        client = client_with({})

        res = probe_division(client, '10219', '2024cur')

        self.assertIs(res.outcome, ProbeOutcome.ERROR)
        self.assertIsNotNone(res.error)

    def test_find_team_division_first_hit_short_circuits(self):
        client = client_with({
            '2024arc': [],
            '2024cur': [],
            '2024dal': [{
                'key': 'x'
            }],
            '2024gal': [{
                'key': 'y'
            }],
        })

        res = find_team_division(client, '10219', '2024')

        self.assertEqual(res.code, '2024dal')
        self.assertEqual(res.name, 'Daly')
        queried = [c.args[1] for c in client.team_event_matches.call_args_list]
        self.assertEqual(queried, ['2024arc', '2024cur', '2024dal'])

    def test_find_team_division_continues_past_errors(self):
        client = client_with({'2024mil': [{'key': 'x'}]})

        res = find_team_division(client, '10219', '2024')

        self.assertEqual(res.name, 'Milstein')
        outcomes = [p.outcome for p in res.probes]
        self.assertEqual(outcomes, [ProbeOutcome.ERROR] * 6 +
                         [ProbeOutcome.FOUND])

    def test_find_team_division_not_found(self):
        client = client_with({'2024arc': []})

        res = find_team_division(client, '10219', '2024')

        self.assertIsNone(res.code)
        self.assertIsNone(res.name)
        self.assertFalse(res.found)
        self.assertEqual(len(res.probes), 8)


if __name__ == '__main__':
    unittest.main()
