from tourney.schemas.tournament import (
    TournamentSchema,
    VenueSchema,
    TimeSlotSchema,
    CreateTournamentSchema,
    ConstraintsSchema,
    PointsSystemSchema,
    ReadinessQuerySchema,
)
from tourney.schemas.team import TeamSchema, CreateTeamSchema
from tourney.schemas.match import (
    MatchSchema,
    RoundSchema,
    GenerateFixturesSchema,
    SubmitResultSchema,
    ScheduleSchema,
)
from tourney.schemas.standing import StandingRowSchema

__all__ = [
    "TournamentSchema",
    "VenueSchema",
    "TimeSlotSchema",
    "CreateTournamentSchema",
    "ConstraintsSchema",
    "PointsSystemSchema",
    "ReadinessQuerySchema",
    "TeamSchema",
    "CreateTeamSchema",
    "MatchSchema",
    "RoundSchema",
    "GenerateFixturesSchema",
    "SubmitResultSchema",
    "ScheduleSchema",
    "StandingRowSchema",
]
