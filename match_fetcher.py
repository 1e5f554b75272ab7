"""Fetching a team's schedule, upcoming matches and events from TBA."""

import logging
import random
from dataclasses import dataclass, field, replace
from datetime import date, datetime

from division_resolver import find_team_division
from event_codes import (division_name_from_code, event_year,
                         format_event_code, is_championship_event,
                         is_division_code, is_overall_championship)
from match_normalizer import TBD, normalize_match, sort_raw_matches
from mock_schedule import MOCK_EVENTS, generate_mock_matches
from schema import BatteryAssignment, EventSummary, Match, UpcomingMatch
from tba_client import ProviderError, TBAClient

logger = logging.getLogger(__name__)

UPCOMING_TIME_TBD = 'Time TBD'


@dataclass(frozen=True)
class ScheduleResult:
    matches: list[Match] = field(default_factory=list)
    error: str | None = None  # set when mock data was substituted
    team_division: str | None = None

    @property
    def used_mock_data(self) -> bool:
        return self.error is not None


def _einstein_matches(client: TBAClient, team_number: str, year: str) -> list:
    """Einstein matches are optional: failures are ignored."""

    try:
        return client.team_event_matches(team_number, f'{year}cmptx')
    except ProviderError:
        logger.info('No Einstein matches found')
        return []


def _team_ranking(client: TBAClient, team_number: str,
                  event_code: str) -> int | None:
    """The team's qualification rank; None on any failure or odd shape."""

    try:
        status = client.team_event_status(team_number, event_code)
    except ProviderError as e:
        logger.warning('Could not fetch team ranking: %s', e)
        return None

    qual = status.get('qual') if isinstance(status, dict) else None
    ranking = qual.get('ranking') if isinstance(qual, dict) else None
    rank = ranking.get('rank') if isinstance(ranking, dict) else None
    if rank is not None and not isinstance(rank, int):
        logger.warning('Ignoring malformed team ranking %r', rank)
        return None
    return rank


def _collect_raw_matches(client: TBAClient, team_number: str,
                         event_code: str) -> tuple[list, str | None]:
    """
    Issue the queries for an event and return (raw matches, division).

    Codes containing 'cmp' that are neither the overall championship nor
    a division (district and state championships such as '2024necmp') are
    queried as ordinary events rather than producing an empty schedule.
    """

    if not is_championship_event(event_code):
        return client.team_event_matches(team_number, event_code), None

    year = event_year(event_code)

    if is_overall_championship(event_code):
        division = find_team_division(client, team_number, year)
        if not division.found:
            return client.team_event_matches(team_number, event_code), None

        logger.info('Fetching division matches from %s', division.code)
        raw_matches = client.team_event_matches(team_number, division.code)
        raw_matches = raw_matches + _einstein_matches(client, team_number,
                                                      year)
        return raw_matches, division.name

    if is_division_code(event_code):
        raw_matches = client.team_event_matches(team_number, event_code)
        raw_matches = raw_matches + _einstein_matches(client, team_number,
                                                      year)
        return raw_matches, division_name_from_code(event_code)

    # other 'cmp' events (district/state championships) have no divisions
    return client.team_event_matches(team_number, event_code), None


def fetch_schedule(client: TBAClient,
                   team_number: str | None,
                   event_code: str | None,
                   today: date | None = None,
                   rng: random.Random | None = None) -> ScheduleResult:
    """
    Fetch and normalize every match of a team at an event.

    Championship events are resolved to the team's division (probing each
    division when only the championship is named) and merged with Einstein
    matches. Any provider failure on a required query replaces the whole
    result with a mock schedule; the error is reported in the result rather
    than raised.

    Args:
        client (TBAClient): provider client
        team_number (str|None): e.g. '10219'
        event_code (str|None): e.g. 'flta' or '2024cmptx'
        today (date|None): reference date for year-less event codes
        rng (Random|None): randomness for mock filler teams

    Returns:
        ScheduleResult with matches in schedule order.
    """

    if not team_number or not event_code:
        logger.info('Missing team number or event code, no matches')
        return ScheduleResult()

    try:
        formatted = format_event_code(event_code, today)
        logger.info('Fetching matches for team %s at event %s', team_number,
                    formatted)

        raw_matches, team_division = _collect_raw_matches(
            client, team_number, formatted)
        logger.info('Fetched %d matches from TBA', len(raw_matches))

        ranking = _team_ranking(client, team_number, formatted)

        matches = [
            normalize_match(raw, team_number, formatted, team_division)
            for raw in sort_raw_matches(raw_matches)
        ]
        if ranking:
            matches = [replace(m, team_ranking=ranking) for m in matches]

        return ScheduleResult(matches, team_division=team_division)
    except (ProviderError, KeyError, TypeError, AttributeError, ValueError,
            OverflowError, OSError) as e:
        logger.warning(
            'Error fetching matches for team %s at %s, falling back to '
            'mock data: %s', team_number, event_code, e)
        return ScheduleResult(generate_mock_matches(team_number, event_code,
                                                    rng),
                              error=f'Could not load matches from TBA: {e}')


def fetch_matches(client: TBAClient,
                  team_number: str | None,
                  event_code: str | None,
                  today: date | None = None,
                  rng: random.Random | None = None) -> list[Match]:
    """Matches only; see fetch_schedule."""

    return fetch_schedule(client, team_number, event_code, today, rng).matches


def _is_upcoming(match: Match, now: datetime) -> bool:
    if match.date == TBD:
        return True
    if match.is_completed:
        return False
    try:
        scheduled = datetime.strptime(f'{match.date} {match.time}',
                                      '%m/%d/%Y %I:%M %p')
    except ValueError:
        return True
    return scheduled > now


def upcoming_matches(matches: list[Match],
                     assignments: list[BatteryAssignment],
                     now: datetime | None = None,
                     limit: int = 3) -> list[UpcomingMatch]:
    """The next few unplayed matches, each with its assigned battery."""

    now = now or datetime.now()
    battery_by_match = {a.match_id: a.battery_id for a in assignments}

    upcoming = [m for m in matches if _is_upcoming(m, now)][:limit]
    return [
        UpcomingMatch(id=m.id,
                      match_number=m.match_number,
                      time=UPCOMING_TIME_TBD if m.time == TBD else m.time,
                      assigned_battery=battery_by_match.get(m.id))
        for m in upcoming
    ]


def fetch_events(client: TBAClient,
                 team_number: str | None = None,
                 today: date | None = None) -> list[EventSummary]:
    """
    Events of the current season, for a team when one is given.

    Falls back to a short fixed list when the provider is unavailable.
    """

    year = (today or date.today()).year
    try:
        if team_number:
            events = client.team_events(team_number, year)
        else:
            events = client.events(year)

        events = sorted(events, key=lambda e: e['start_date'])
        summaries = []
        for event in events:
            start = date.fromisoformat(event['start_date'])
            summaries.append(
                EventSummary(id=event['key'],
                             name=event.get('short_name') or event['name'],
                             date=f'{start.month}/{start.day}/{start.year}'))
        logger.info('Fetched %d events from TBA', len(summaries))
        return summaries
    except (ProviderError, KeyError, TypeError, ValueError) as e:
        logger.warning('Error fetching events, falling back to mock events: %s',
                       e)
        return list(MOCK_EVENTS)
