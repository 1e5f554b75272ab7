"""Classification of event codes (year prefixes, championships, divisions)."""

import re
from datetime import date

YEAR_PREFIXED_CODE = re.compile(r'^\d{4}[a-z0-9]+$')
LEADING_YEAR = re.compile(r'^\d{4}')

DIVISION_CODES = ('arc', 'cur', 'dal', 'gal', 'hop', 'joh', 'mil', 'new',
                  'cars', 'carv', 'dar', 'roe', 'tur')

PRIMARY_DIVISION_CODES = ('arc', 'cur', 'dal', 'gal', 'hop', 'joh', 'mil',
                          'new')

# Iteration order matters for the substring fallback in
# division_name_from_code: the first contained code wins.
DIVISION_NAMES = {
    'arc': 'Archimedes',
    'cur': 'Curie',
    'dal': 'Daly',
    'gal': 'Galileo',
    'hop': 'Hopper',
    'joh': 'Johnson',
    'mil': 'Milstein',
    'new': 'Newton',
    'cars': 'Carson',
    'carv': 'Carver',
    'dar': 'Darwin',
    'roe': 'Roebling',
    'tur': 'Turing',
    'ein': 'Einstein',
    'cmptx': 'Championship',
    'cmpmi': 'Championship',
}

EINSTEIN_MARKER = 'cmptx'
CHAMPIONSHIP_MARKERS = ('cmp', 'cmptx', 'cmpmi')
OVERALL_CHAMPIONSHIP_MARKERS = ('cmptx', 'cmpmi')


def format_event_code(event_code: str, today: date | None = None) -> str:
    """
    Normalize an event code to its year-prefixed, lower-case form.

    Args:
        event_code (str): e.g. 'flta' or '2024FLTA'
        today (date|None): reference date for the year prefix

    Returns:
        The code unchanged (but lower-cased) when it already carries a year,
        otherwise the code prefixed with the current year.
    """

    lowered = event_code.lower()
    if YEAR_PREFIXED_CODE.match(lowered):
        return lowered

    today = today or date.today()
    return f'{today.year:04d}{lowered}'


def strip_year(event_code: str) -> str:
    """Remove a leading 4-digit year, if any."""

    return LEADING_YEAR.sub('', event_code)


def event_year(formatted_event_code: str) -> str:
    """Year part of a formatted event code."""

    return formatted_event_code[:4]


def is_division_code(event_code: str) -> bool:
    """True if the code (year optional) names a championship division."""

    return strip_year(event_code).lower() in DIVISION_CODES


def is_championship_event(event_code: str) -> bool:
    """True for championship codes and championship division codes."""

    return (any(marker in event_code for marker in CHAMPIONSHIP_MARKERS)
            or is_division_code(event_code))


def is_overall_championship(event_code: str) -> bool:
    """True if the code names the whole championship rather than a division."""

    return any(marker in event_code for marker in OVERALL_CHAMPIONSHIP_MARKERS)


def is_einstein_event_key(event_key: str | None) -> bool:
    return bool(event_key) and EINSTEIN_MARKER in event_key


def division_name_from_code(event_code: str) -> str | None:
    """
    Get the division name an event code refers to.

    Exact matches on the year-less code win. Otherwise the first table entry
    whose code is a substring of the year-less code is used, so an unrelated
    code that happens to contain e.g. 'new' maps to Newton.
    """

    remainder = strip_year(event_code).lower()
    if remainder in DIVISION_NAMES:
        return DIVISION_NAMES[remainder]

    for code, name in DIVISION_NAMES.items():
        if code in remainder:
            return name

    return None


def all_division_codes_for_year(year: str | int) -> list[str]:
    """The eight primary division event codes for a championship year."""

    return [f'{year}{code}' for code in PRIMARY_DIVISION_CODES]
