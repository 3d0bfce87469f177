"""Plain data types shared by the fixture generator, standings engine and
tournament engine. Nothing in here performs I/O."""
import enum
from dataclasses import dataclass, field
from datetime import date, time
from typing import Optional


class TournamentFormat(enum.Enum):
    ROUND_ROBIN = "round_robin"
    KNOCKOUT = "knockout"


class OutcomeKind(enum.Enum):
    NORMAL = "normal"
    PENALTIES = "penalties"
    WALKOVER = "walkover"


class TieBreaker(enum.Enum):
    POINTS = "points"
    GOAL_DIFFERENCE = "goal_difference"
    GOALS_FOR = "goals_for"
    GOALS_AGAINST = "goals_against"
    WINS = "wins"
    AWAY_GOALS = "away_goals"
    HEAD_TO_HEAD_POINTS = "head_to_head_points"
    HEAD_TO_HEAD_GOAL_DIFFERENCE = "head_to_head_goal_difference"
    HEAD_TO_HEAD_GOALS_FOR = "head_to_head_goals_for"


class PenaltyTally(enum.Enum):
    """How a shoot-out is written into the won/drawn/lost columns."""

    DRAW = "draw"
    WIN_LOSS = "win_loss"


class TeamStatus(enum.Enum):
    REGISTERED = "registered"
    CONFIRMED = "confirmed"
    WITHDRAWN = "withdrawn"


@dataclass(frozen=True)
class Team:
    id: object
    name: str
    rival_group: Optional[str] = None
    status: TeamStatus = TeamStatus.CONFIRMED
    unavailable_dates: frozenset = frozenset()

    def is_rival_of(self, other):
        return (
            self.rival_group is not None
            and other is not None
            and self.rival_group == other.rival_group
        )


@dataclass(frozen=True)
class TimeSlot:
    day_of_week: int  # date.weekday(): Monday == 0
    start_time: time
    end_time: time
    capacity: int = 1
    id: object = None


@dataclass(frozen=True)
class Venue:
    id: object
    name: str
    slots: tuple = ()
    blocked_dates: frozenset = frozenset()

    def slots_on(self, weekday):
        return sorted(
            (s for s in self.slots if s.day_of_week == weekday),
            key=lambda s: (s.start_time, s.end_time),
        )


@dataclass(frozen=True)
class Constraints:
    minimum_rest_days: int = 0
    maximum_matches_per_day: Optional[int] = None
    preferred_days: tuple = ()
    blackout_dates: frozenset = frozenset()
    derby_spacing: int = 0


@dataclass(frozen=True)
class PointsSystem:
    win: int = 3
    draw: int = 1
    loss: int = 0
    win_penalties: int = 2
    walkover: int = 3
    penalty_tally: PenaltyTally = PenaltyTally.DRAW


DEFAULT_TIE_BREAKERS = (
    TieBreaker.POINTS,
    TieBreaker.GOAL_DIFFERENCE,
    TieBreaker.GOALS_FOR,
)


@dataclass(frozen=True)
class TournamentConfig:
    format: TournamentFormat = TournamentFormat.ROUND_ROBIN
    legs: int = 1
    min_teams: int = 2
    max_teams: int = 64
    venues: tuple = ()
    constraints: Constraints = field(default_factory=Constraints)
    points_system: PointsSystem = field(default_factory=PointsSystem)
    tie_breakers: tuple = DEFAULT_TIE_BREAKERS

    @property
    def slot_count(self):
        return sum(len(v.slots) for v in self.venues)


@dataclass
class MatchResult:
    home_goals: int = 0
    away_goals: int = 0
    outcome: OutcomeKind = OutcomeKind.NORMAL
    winner_id: object = None  # shoot-out winner or team awarded the walkover


@dataclass
class Match:
    home_team_id: object
    away_team_id: object
    round_number: int
    venue_id: object = None
    slot_id: object = None
    scheduled_date: Optional[date] = None
    start_time: Optional[time] = None
    leg: int = 1
    bracket_position: Optional[int] = None
    result: Optional[MatchResult] = None
    id: object = None

    @property
    def team_ids(self):
        return tuple(t for t in (self.home_team_id, self.away_team_id) if t is not None)

    @property
    def is_placeholder(self):
        return self.home_team_id is None or self.away_team_id is None

    def describe(self):
        home = self.home_team_id if self.home_team_id is not None else "TBD"
        away = self.away_team_id if self.away_team_id is not None else "TBD"
        return f"round {self.round_number}: {home} vs {away}"

    def __repr__(self):
        return f"<Match {self.describe()} on {self.scheduled_date}>"


@dataclass
class Round:
    number: int
    name: str
    matches: list = field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass
class Schedule:
    rounds: list = field(default_factory=list)
    matches: list = field(default_factory=list)
    warnings: list = field(default_factory=list)


@dataclass
class TeamRecord:
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0


@dataclass
class StandingRow:
    team_id: object
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    points: int = 0
    rank: int = 0
    penalty_wins: int = 0
    penalty_losses: int = 0
    walkovers_awarded: int = 0
    walkovers_conceded: int = 0
    home: TeamRecord = field(default_factory=TeamRecord)
    away: TeamRecord = field(default_factory=TeamRecord)
    form: list = field(default_factory=list)


@dataclass
class Tournament:
    id: object
    name: str
    config: TournamentConfig
    teams: list = field(default_factory=list)
    status: str = "draft"


@dataclass
class ReadinessReport:
    is_ready: bool
    issues: list = field(default_factory=list)
    warnings: list = field(default_factory=list)

    def to_dict(self):
        return {
            "is_ready": self.is_ready,
            "issues": list(self.issues),
            "warnings": list(self.warnings),
        }
