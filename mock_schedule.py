"""Stand-in schedule used when The Blue Alliance cannot be reached."""

import logging
import random

from event_codes import (division_name_from_code, is_championship_event,
                         is_division_code)
from schema import EventSummary, Match, MatchType

logger = logging.getLogger(__name__)

ALLIANCE_SIZE = 3
MOCK_TEAM_RANKING = 12
DEFAULT_MOCK_DIVISION = 'Archimedes'

MOCK_EVENTS = [
    EventSummary(id='2024flta', name='Tallahassee Regional', date='2024-03-04'),
    EventSummary(id='2024flor', name='Orlando Regional', date='2024-03-11'),
    EventSummary(id='2024flmi', name='Miami Regional', date='2024-03-18'),
    EventSummary(id='2024txhou',
                 name='Houston Championship',
                 date='2024-04-19'),
]


def _fill_alliance(alliance: list[str], rng: random.Random) -> list[str]:
    while len(alliance) < ALLIANCE_SIZE:
        alliance.append(str(rng.randint(1000, 9999)))
    return alliance


def generate_mock_matches(team_number: str,
                          event_code: str,
                          rng: random.Random | None = None) -> list[Match]:
    """
    Build a fixed-shape schedule for a team.

    8 qualification matches, two semifinal sets of two matches, two finals
    and, for championship events, two Einstein matches. Where the tracked
    team plays and which matches are completed is fixed; the other teams
    are random.
    """

    rng = rng or random.Random()
    logger.info('Generating mock matches for team %s at event %s',
                team_number, event_code)

    championship = is_championship_event(event_code)
    division = None
    if championship:
        if is_division_code(event_code):
            division = division_name_from_code(event_code)
        else:
            division = DEFAULT_MOCK_DIVISION

    matches = []

    for i in range(1, 9):
        red = _fill_alliance([team_number] if i % 2 == 0 else [], rng)
        blue = _fill_alliance([team_number] if i % 2 == 1 else [], rng)
        completed = i <= 4

        winner = None
        if completed:
            if i % 3 == 0:
                winner = 'tie'
            else:
                winner = 'red' if team_number in red else 'blue'

        matches.append(
            Match(id=f'{event_code}_qm{i}',
                  match_number=i,
                  match_type=MatchType.QUALIFICATION,
                  description=f'Qualification Match {i}',
                  date='2024-03-04',
                  time=f'{9 + i // 2}:{"30" if i % 2 == 0 else "00"} AM',
                  teams={
                      'red': red,
                      'blue': blue
                  },
                  division=division,
                  winner=winner,
                  team_ranking=MOCK_TEAM_RANKING,
                  is_completed=completed))

    for set_number in (1, 2):
        for match_number in (1, 2):
            first = set_number == 1 and match_number == 1
            red = _fill_alliance([team_number] if first else [], rng)
            blue = _fill_alliance([], rng)
            matches.append(
                Match(id=f'{event_code}_sf{set_number}m{match_number}',
                      match_number=match_number,
                      match_type=MatchType.SEMIFINAL,
                      description=f'Semifinal {set_number}',
                      date='2024-03-05',
                      time=
                      f'{1 + set_number}:{"00" if match_number == 1 else "30"} PM',
                      teams={
                          'red': red,
                          'blue': blue
                      },
                      division=division,
                      winner='red' if first else None,
                      team_ranking=MOCK_TEAM_RANKING,
                      is_completed=first))

    for match_number in (1, 2):
        first = match_number == 1
        red = _fill_alliance([team_number] if first else [], rng)
        blue = _fill_alliance([], rng)
        matches.append(
            Match(id=f'{event_code}_f1m{match_number}',
                  match_number=match_number,
                  match_type=MatchType.FINAL,
                  description=f'Final Match {match_number}',
                  date='2024-03-05',
                  time=f'4:{"00" if first else "30"} PM',
                  teams={
                      'red': red,
                      'blue': blue
                  },
                  division=division,
                  winner='red' if first else None,
                  team_ranking=MOCK_TEAM_RANKING,
                  is_completed=first))

    if championship:
        for match_number in (1, 2):
            matches.append(
                Match(id=f'{event_code}_ef1m{match_number}',
                      match_number=match_number,
                      match_type=MatchType.EINSTEIN,
                      description=f'Einstein Final {match_number}',
                      date='2024-03-06',
                      time=f'2:{"00" if match_number == 1 else "30"} PM',
                      teams={
                          'red': _fill_alliance([], rng),
                          'blue': _fill_alliance([], rng)
                      },
                      division='Einstein',
                      team_ranking=MOCK_TEAM_RANKING))

    return matches
