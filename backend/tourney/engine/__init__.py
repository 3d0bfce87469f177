from tourney.engine.errors import (
    BlockingConstraint,
    ConfigError,
    ConstraintUnsatisfiableError,
    EngineError,
    ScheduleExistsError,
    TournamentNotFoundError,
)
from tourney.engine.fixture_generator import FixtureGenerator, round_robin_pairings, validate_config
from tourney.engine.repository import InMemoryTournamentRepository, TournamentRepository
from tourney.engine.standings import compute_standings, points_awarded
from tourney.engine.tournament_engine import TournamentEngine
from tourney.engine.types import (
    Constraints,
    Match,
    MatchResult,
    OutcomeKind,
    PenaltyTally,
    PointsSystem,
    ReadinessReport,
    Round,
    Schedule,
    StandingRow,
    Team,
    TeamStatus,
    TieBreaker,
    TimeSlot,
    Tournament,
    TournamentConfig,
    TournamentFormat,
    Venue,
)

__all__ = [
    "BlockingConstraint",
    "ConfigError",
    "ConstraintUnsatisfiableError",
    "EngineError",
    "ScheduleExistsError",
    "TournamentNotFoundError",
    "FixtureGenerator",
    "round_robin_pairings",
    "validate_config",
    "InMemoryTournamentRepository",
    "TournamentRepository",
    "compute_standings",
    "points_awarded",
    "TournamentEngine",
    "Constraints",
    "Match",
    "MatchResult",
    "OutcomeKind",
    "PenaltyTally",
    "PointsSystem",
    "ReadinessReport",
    "Round",
    "Schedule",
    "StandingRow",
    "Team",
    "TeamStatus",
    "TieBreaker",
    "TimeSlot",
    "Tournament",
    "TournamentConfig",
    "TournamentFormat",
    "Venue",
]
