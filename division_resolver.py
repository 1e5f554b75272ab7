"""Find which championship division a team is playing in."""

import enum
import logging
from dataclasses import dataclass, field

from event_codes import all_division_codes_for_year, division_name_from_code
from tba_client import ProviderError, TBAClient

logger = logging.getLogger(__name__)


class ProbeOutcome(enum.Enum):
    FOUND = 'found'
    EMPTY = 'empty'
    ERROR = 'error'


@dataclass(frozen=True)
class DivisionProbe:
    code: str
    outcome: ProbeOutcome
    matches: list = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class TeamDivision:
    code: str | None
    name: str | None
    probes: list[DivisionProbe] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.code is not None


def probe_division(client: TBAClient, team_number: str,
                   division_code: str) -> DivisionProbe:
    """Ask the provider for the team's matches at one division event."""

    try:
        matches = client.team_event_matches(team_number, division_code)
    except ProviderError as e:
        logger.info('No matches found in %s (%s)', division_code, e)
        return DivisionProbe(division_code, ProbeOutcome.ERROR, error=str(e))

    if matches:
        return DivisionProbe(division_code, ProbeOutcome.FOUND, matches)
    return DivisionProbe(division_code, ProbeOutcome.EMPTY)


def find_team_division(client: TBAClient, team_number: str,
                       year: str | int) -> TeamDivision:
    """
    Probe each primary division of a championship year in order.

    The first division with at least one match for the team wins and the
    remaining divisions are not queried. Failed probes count as empty.

    Returns:
        TeamDivision with code/name set, or both None when the team was not
        found in any division. Not finding the team is a normal outcome.
    """

    logger.info('Finding division for team %s at %s championship',
                team_number, year)

    probes = []
    for division_code in all_division_codes_for_year(year):
        probe = probe_division(client, team_number, division_code)
        probes.append(probe)
        if probe.outcome is ProbeOutcome.FOUND:
            name = division_name_from_code(division_code)
            logger.info('Found team %s in division %s (%s)', team_number,
                        name, division_code)
            return TeamDivision(division_code, name, probes)

    logger.info('Could not find division for team %s', team_number)
    return TeamDivision(None, None, probes)
