"""Data models for the battery tracker."""

from dataclasses import dataclass, field


class MatchType:
    QUALIFICATION = 'Qualification'
    SEMIFINAL = 'Semifinal'
    FINAL = 'Final'
    EINSTEIN = 'Einstein'
    UNKNOWN = 'Unknown'


@dataclass(frozen=True)
class BatteryComment:
    match_id: str
    text: str
    timestamp: str  # ISO-8601

    @classmethod
    def from_dict(cls, data: dict) -> 'BatteryComment':
        return cls(match_id=data['match_id'],
                   text=data['text'],
                   timestamp=data['timestamp'])


@dataclass(frozen=True)
class Battery:
    id: str  # user-assigned, unique
    voltage: float
    capacity: float  # amp-hours
    date_added: str  # ISO-8601
    brand: str | None = None
    is_faulty: bool = False
    comments: list[BatteryComment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> 'Battery':
        return cls(id=data['id'],
                   voltage=data['voltage'],
                   capacity=data['capacity'],
                   date_added=data['date_added'],
                   brand=data.get('brand', None),
                   is_faulty=data.get('is_faulty', False),
                   comments=[
                       BatteryComment.from_dict(c)
                       for c in data.get('comments', [])
                   ])


@dataclass(frozen=True)
class BatteryAssignment:
    match_id: str  # at most one assignment per match
    battery_id: str
    timestamp: str  # ISO-8601

    @classmethod
    def from_dict(cls, data: dict) -> 'BatteryAssignment':
        return cls(match_id=data['match_id'],
                   battery_id=data['battery_id'],
                   timestamp=data['timestamp'])


@dataclass(frozen=True)
class Match:
    id: str  # provider key, e.g. 2024flta_qm12
    match_number: int
    match_type: str  # one of MatchType
    description: str
    date: str  # 'TBD' when unknown
    time: str  # 'TBD' when unknown
    teams: dict[str, list[str]]  # 'red' / 'blue'
    division: str | None = None
    winner: str | None = None  # red | blue | tie, only when completed
    team_ranking: int | None = None
    is_completed: bool = False


@dataclass(frozen=True)
class UpcomingMatch:
    id: str
    match_number: int
    time: str
    assigned_battery: str | None = None


@dataclass(frozen=True)
class EventSummary:
    id: str
    name: str
    date: str


@dataclass(frozen=True)
class AppSettings:
    team_number: str = '10219'
    event_code: str = ''
    api_key: str = ''
    dark_mode: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> 'AppSettings':
        defaults = cls()
        return cls(team_number=data.get('team_number', defaults.team_number),
                   event_code=data.get('event_code', defaults.event_code),
                   api_key=data.get('api_key', defaults.api_key),
                   dark_mode=data.get('dark_mode', defaults.dark_mode))


@dataclass(frozen=True)
class BatteryStats:
    total: int
    assigned: int
    available: int
    with_issues: int
