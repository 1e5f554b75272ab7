"""Search and filtering of a fetched schedule."""

from event_codes import EINSTEIN_MARKER
from schema import BatteryAssignment, Match, MatchType

STATUS_FILTERS = ('all', 'assigned', 'unassigned', 'completed')

TYPE_FILTERS = {
    'qualification': MatchType.QUALIFICATION,
    'semifinal': MatchType.SEMIFINAL,
    'final': MatchType.FINAL,
}


def is_einstein_match(match: Match) -> bool:
    return match.match_type == MatchType.EINSTEIN or EINSTEIN_MARKER in match.id


def matches_search(match: Match, search: str) -> bool:
    search = search.lower()
    return (search in str(match.match_number)
            or search in match.description.lower()
            or bool(match.division and search in match.division.lower()))


def filter_matches(matches: list[Match],
                   assignments: list[BatteryAssignment],
                   search: str = '',
                   status: str = 'all',
                   match_type: str = 'all') -> list[Match]:
    """
    Narrow a schedule down the way the schedule page does.

    Einstein matches are only listed under 'all' and 'einstein'.
    """

    assigned = {a.match_id for a in assignments}

    result = []
    for match in matches:
        if search and not matches_search(match, search):
            continue
        if status == 'assigned' and match.id not in assigned:
            continue
        if status == 'unassigned' and match.id in assigned:
            continue
        if status == 'completed' and not match.is_completed:
            continue

        if is_einstein_match(match):
            if match_type not in ('all', 'einstein'):
                continue
        elif match_type != 'all' and TYPE_FILTERS.get(
                match_type) != match.match_type:
            continue

        result.append(match)
    return result


def divisions(matches: list[Match]) -> list[str]:
    """Distinct divisions, in schedule order."""

    seen = []
    for match in matches:
        if match.division and match.division not in seen:
            seen.append(match.division)
    return seen
