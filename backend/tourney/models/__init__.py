from tourney.models.tournament import Tournament, TournamentStatus, tournament_teams
from tourney.models.team import Team
from tourney.models.venue import Venue, TimeSlot
from tourney.models.round import Round
from tourney.models.match import Match, MatchStatus

__all__ = [
    "Tournament",
    "TournamentStatus",
    "tournament_teams",
    "Team",
    "Venue",
    "TimeSlot",
    "Round",
    "Match",
    "MatchStatus",
]
