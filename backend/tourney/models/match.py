from tourney.extensions import db
from tourney.engine.types import OutcomeKind
from datetime import datetime, timezone
import enum


class MatchStatus(enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"


class Match(db.Model):
    __tablename__ = "matches"

    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(
        db.Integer, db.ForeignKey("tournaments.id"), nullable=False
    )
    round_id = db.Column(db.Integer, db.ForeignKey("rounds.id"), nullable=False)
    round_number = db.Column(db.Integer, nullable=False)
    # Null until a knockout winner advances into the slot
    home_team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    away_team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    venue_id = db.Column(db.Integer, db.ForeignKey("venues.id"), nullable=True)
    slot_id = db.Column(db.Integer, db.ForeignKey("time_slots.id"), nullable=True)
    match_date = db.Column(db.Date, nullable=True)
    kickoff = db.Column(db.Time, nullable=True)
    leg = db.Column(db.Integer, nullable=False, default=1)
    bracket_position = db.Column(db.Integer, nullable=True)
    status = db.Column(
        db.Enum(MatchStatus), nullable=False, default=MatchStatus.SCHEDULED
    )
    home_score = db.Column(db.Integer, nullable=True)
    away_score = db.Column(db.Integer, nullable=True)
    outcome = db.Column(db.Enum(OutcomeKind), nullable=True)
    winner_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    venue = db.relationship("Venue")
    winner = db.relationship("Team", foreign_keys=[winner_id])

    def __repr__(self):
        return f"<Match {self.home_team_id} vs {self.away_team_id}>"
