"""Tests for tba_client.py."""

import unittest
from unittest.mock import MagicMock, patch

import requests

from config import Config
from tba_client import ProviderError, TBAClient


def fake_response(status_code=200, body=None, bad_json=False):
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = 'OK' if status_code == 200 else 'Unauthorized'
    if bad_json:
        resp.json.side_effect = ValueError('no json')
    else:
        resp.json.return_value = body
    return resp


class TBAClientTests(unittest.TestCase):
    """Tests for tba_client.py"""

    def setUp(self):
        self.config = Config(tba_base_url='https://tba.test/api/v3',
                             default_api_key='default-key',
                             request_timeout=3.0)

    @patch('tba_client.requests.get')
    def test_request_uses_user_key(self, mock_get):
        mock_get.return_value = fake_response(body=[])
        client = TBAClient('user-key', self.config)

        client.request('/events/2024')

        args, kwargs = mock_get.call_args
        self.assertEqual(args, ('https://tba.test/api/v3/events/2024', ))
        self.assertEqual(kwargs['headers']['X-TBA-Auth-Key'], 'user-key')
        self.assertEqual(kwargs['timeout'], 3.0)

    @patch('tba_client.requests.get')
    def test_request_falls_back_to_default_key(self, mock_get):
        mock_get.return_value = fake_response(body=[])
        client = TBAClient('', self.config)

        client.request('/events/2024')

        _, kwargs = mock_get.call_args
        self.assertEqual(kwargs['headers']['X-TBA-Auth-Key'], 'default-key')

    @patch('tba_client.requests.get')
    def test_request_without_any_key_omits_header(self, mock_get):
        mock_get.return_value = fake_response(body=[])
        client = TBAClient(None, Config(default_api_key=''))

        client.request('/events/2024')

        _, kwargs = mock_get.call_args
        self.assertNotIn('X-TBA-Auth-Key', kwargs['headers'])

    @patch('tba_client.requests.get')
    def test_request_non_200_raises(self, mock_get):
        mock_get.return_value = fake_response(status_code=401)
        client = TBAClient('k', self.config)

        with self.assertRaises(ProviderError):
            client.request('/events/2024')

    @patch('tba_client.requests.get')
    def test_request_network_error_raises(self, mock_get):
        mock_get.side_effect = requests.ConnectionError('down')
        client = TBAClient('k', self.config)

        with self.assertRaises(ProviderError):
            client.request('/events/2024')

    @patch('tba_client.requests.get')
    def test_request_bad_json_raises(self, mock_get):
        mock_get.return_value = fake_response(bad_json=True)
        client = TBAClient('k', self.config)

        with self.assertRaises(ProviderError):
            client.request('/events/2024')

    @patch('tba_client.requests.get')
    def test_team_event_matches_endpoint(self, mock_get):
        mock_get.return_value = fake_response(body=[{'key': '2024flta_qm1'}])
        client = TBAClient('k', self.config)

        res = client.team_event_matches('10219', '2024flta')

        self.assertEqual(res, [{'key': '2024flta_qm1'}])
        args, _ = mock_get.call_args
        self.assertEqual(
            args,
            ('https://tba.test/api/v3/team/frc10219/event/2024flta/matches', ))

    @patch('tba_client.requests.get')
    def test_team_event_matches_rejects_non_list(self, mock_get):
        mock_get.return_value = fake_response(body={'Error': 'nope'})
        client = TBAClient('k', self.config)

        with self.assertRaises(ProviderError):
            client.team_event_matches('10219', '2024flta')

    @patch('tba_client.requests.get')
    def test_team_event_status_allows_null(self, mock_get):
        mock_get.return_value = fake_response(body=None)
        client = TBAClient('k', self.config)

        res = client.team_event_status('10219', '2024flta')

        self.assertIsNone(res)

    @patch('tba_client.requests.get')
    def test_team_events_endpoint(self, mock_get):
        mock_get.return_value = fake_response(body=[])
        client = TBAClient('k', self.config)

        client.team_events('10219', 2024)

        args, _ = mock_get.call_args
        self.assertEqual(
            args, ('https://tba.test/api/v3/team/frc10219/events/2024', ))


if __name__ == '__main__':
    unittest.main()
