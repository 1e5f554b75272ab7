"""Conversion of raw TBA match records into Match objects."""

import logging
from datetime import datetime, tzinfo
from functools import cmp_to_key

from event_codes import (division_name_from_code, is_championship_event,
                         is_einstein_event_key)
from schema import Match, MatchType

logger = logging.getLogger(__name__)

TBD = 'TBD'
TEAM_KEY_PREFIX = 'frc'

COMP_LEVEL_TYPES = {
    'qm': MatchType.QUALIFICATION,
    'sf': MatchType.SEMIFINAL,
    'f': MatchType.FINAL,
    'ef': MatchType.EINSTEIN,
}

COMP_LEVEL_ORDER = {'qm': 1, 'sf': 2, 'f': 3, 'ef': 4}
UNKNOWN_LEVEL_ORDER = 5

WINNERS = {'red': 'red', 'blue': 'blue', '': 'tie'}


def _team_numbers(team_keys: list[str]) -> list[str]:
    return [key.replace(TEAM_KEY_PREFIX, '', 1) for key in team_keys]


def best_time(raw: dict) -> int | None:
    """Actual time, else predicted, else scheduled (epoch seconds)."""

    return raw.get('actual_time') or raw.get('predicted_time') or raw.get(
        'time') or None


def format_match_time(timestamp: int | None,
                      tz: tzinfo | None = None) -> tuple[str, str]:
    """Render an epoch timestamp as (M/D/YYYY, HH:MM AM) in local time."""

    if not timestamp:
        return TBD, TBD
    try:
        moment = datetime.fromtimestamp(timestamp, tz)
    except (OverflowError, OSError, ValueError):
        logger.warning('Unrenderable match timestamp %r', timestamp)
        return TBD, TBD
    return (f'{moment.month}/{moment.day}/{moment.year}',
            moment.strftime('%I:%M %p'))


def match_type_for(raw: dict) -> str:
    if is_einstein_event_key(raw.get('event_key')):
        return MatchType.EINSTEIN
    return COMP_LEVEL_TYPES.get(raw.get('comp_level'), MatchType.UNKNOWN)


def describe_match(raw: dict, match_type: str) -> str:
    match_number = raw.get('match_number')
    comp_level = raw.get('comp_level')

    if match_type == MatchType.SEMIFINAL:
        return f'Semifinal {raw.get("set_number")}'
    if match_type == MatchType.FINAL:
        return f'Final Match {match_number}'
    if match_type == MatchType.EINSTEIN:
        if comp_level == 'f':
            return f'Einstein Final {match_number}'
        if comp_level == 'sf':
            return f'Einstein Semifinal {match_number}'
        if comp_level == 'ef':
            if raw.get('set_number') == 1:
                return f'Einstein Final {match_number}'
            return f'Einstein Semifinal {match_number}'
        return f'Einstein Match {match_number}'

    return f'{match_type} Match {match_number}'


def _alliance_points(score_breakdown: dict, color: str) -> float:
    alliance = score_breakdown.get(color) or {}
    return alliance.get('totalPoints') or 0


def is_completed(raw: dict) -> bool:
    """Played if it has an actual time or either alliance scored."""

    if raw.get('actual_time'):
        return True
    score_breakdown = raw.get('score_breakdown')
    if not score_breakdown:
        return False
    return (_alliance_points(score_breakdown, 'red') > 0
            or _alliance_points(score_breakdown, 'blue') > 0)


def team_ranking_for(raw: dict, team_number: str) -> int | None:
    team_key = f'{TEAM_KEY_PREFIX}{team_number}'
    for ranking in raw.get('team_rankings') or []:
        if ranking.get('team_key') == team_key:
            return ranking.get('rank')
    return None


def normalize_match(raw: dict,
                    team_number: str,
                    event_code: str,
                    team_division: str | None = None,
                    tz: tzinfo | None = None) -> Match:
    """
    Convert one raw TBA match record into a Match.

    Args:
        raw (dict): the match record as returned by TBA
        team_number (str): the tracked team, without the 'frc' prefix
        event_code (str): formatted event code the schedule was fetched for
        team_division (str|None): the team's division name, if known
        tz (tzinfo|None): timezone for date/time rendering (local if None)

    Returns:
        The normalized Match.
    """

    alliances = raw.get('alliances') or {}
    red = _team_numbers((alliances.get('red') or {}).get('team_keys', []))
    blue = _team_numbers((alliances.get('blue') or {}).get('team_keys', []))

    match_date, match_time = format_match_time(best_time(raw), tz)

    match_type = match_type_for(raw)
    event_key = raw.get('event_key')

    division = None
    if is_championship_event(event_code):
        if match_type == MatchType.EINSTEIN or is_einstein_event_key(
                event_key):
            division = 'Einstein'
        elif team_division:
            division = team_division
        else:
            division = division_name_from_code(event_key or event_code)

    completed = is_completed(raw)
    winner = None
    if completed:
        winner = WINNERS.get(raw.get('winning_alliance'))

    return Match(id=raw['key'],
                 match_number=raw.get('match_number'),
                 match_type=match_type,
                 description=describe_match(raw, match_type),
                 date=match_date,
                 time=match_time,
                 teams={
                     'red': red,
                     'blue': blue
                 },
                 division=division,
                 winner=winner,
                 team_ranking=team_ranking_for(raw, team_number),
                 is_completed=completed)


def compare_raw_matches(a: dict, b: dict) -> int:
    """
    Total order on raw records: Einstein-event matches last, then
    competition level, set number (when both have one), match number and
    best-available time.
    """

    a_einstein = is_einstein_event_key(a.get('event_key'))
    b_einstein = is_einstein_event_key(b.get('event_key'))
    if a_einstein != b_einstein:
        return 1 if a_einstein else -1

    level_diff = (COMP_LEVEL_ORDER.get(a.get('comp_level'), UNKNOWN_LEVEL_ORDER)
                  - COMP_LEVEL_ORDER.get(b.get('comp_level'),
                                         UNKNOWN_LEVEL_ORDER))
    if level_diff:
        return level_diff

    a_set, b_set = a.get('set_number'), b.get('set_number')
    if a_set is not None and b_set is not None and a_set != b_set:
        return a_set - b_set

    match_diff = (a.get('match_number') or 0) - (b.get('match_number') or 0)
    if match_diff:
        return match_diff

    return (best_time(a) or 0) - (best_time(b) or 0)


def sort_raw_matches(raw_matches: list[dict]) -> list[dict]:
    return sorted(raw_matches, key=cmp_to_key(compare_raw_matches))
