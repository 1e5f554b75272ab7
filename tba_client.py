"""Thin client for The Blue Alliance v3 API."""

import logging
from typing import Any

import requests

from config import Config

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """The Blue Alliance was unreachable or answered with something unusable."""


class TBAClient:
    """
    Issues the handful of read-only queries the tracker needs.

    The user's own API key wins; otherwise the configured default key is sent.
    """

    def __init__(self, api_key: str | None = None, config: Config | None = None):
        self.config = config or Config()
        self.api_key = api_key or self.config.default_api_key

    def headers(self) -> dict:
        headers = {'Accept': 'application/json'}
        if self.api_key:
            headers['X-TBA-Auth-Key'] = self.api_key
        return headers

    def request(self, endpoint: str) -> Any:
        """
        GET an endpoint and decode the JSON body.

        Args:
            endpoint (str): path below the API base, e.g. '/events/2024'

        Returns:
            The decoded JSON document.

        Raises:
            ProviderError: on network failure, non-200 status or bad JSON.
        """

        url = f'{self.config.tba_base_url}{endpoint}'
        try:
            resp = requests.get(url,
                                headers=self.headers(),
                                timeout=self.config.request_timeout)
        except requests.RequestException as e:
            logger.error('TBA request failed for %s: %s', endpoint, e)
            raise ProviderError(f'TBA request failed: {e}') from e

        if resp.status_code != 200:
            logger.error('TBA API error: %s %s for endpoint %s',
                         resp.status_code, resp.reason, endpoint)
            raise ProviderError(
                f'TBA API error: {resp.status_code} {resp.reason}')

        try:
            return resp.json()
        except ValueError as e:
            logger.error('TBA returned malformed JSON for %s', endpoint)
            raise ProviderError('TBA returned malformed JSON') from e

    def _request_list(self, endpoint: str) -> list:
        data = self.request(endpoint)
        if not isinstance(data, list):
            raise ProviderError(f'Expected a list from {endpoint}')
        return data

    def team_event_matches(self, team_number: str, event_key: str) -> list:
        """Raw match records for a team at an event."""

        return self._request_list(
            f'/team/frc{team_number}/event/{event_key}/matches')

    def team_event_status(self, team_number: str,
                          event_key: str) -> dict | None:
        """Raw status (ranking) record for a team at an event, if any."""

        data = self.request(f'/team/frc{team_number}/event/{event_key}/status')
        if data is not None and not isinstance(data, dict):
            raise ProviderError('Expected an object for team status')
        return data

    def team_events(self, team_number: str, year: str | int) -> list:
        return self._request_list(f'/team/frc{team_number}/events/{year}')

    def events(self, year: str | int) -> list:
        return self._request_list(f'/events/{year}')
