from tourney.extensions import db
from tourney.engine.types import TournamentFormat
from datetime import datetime, timezone
import enum


class TournamentStatus(enum.Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


tournament_teams = db.Table(
    "tournament_teams",
    db.Column(
        "tournament_id",
        db.Integer,
        db.ForeignKey("tournaments.id"),
        primary_key=True,
    ),
    db.Column(
        "team_id", db.Integer, db.ForeignKey("teams.id"), primary_key=True
    ),
)


class Tournament(db.Model):
    __tablename__ = "tournaments"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    format = db.Column(
        db.Enum(TournamentFormat), nullable=False, default=TournamentFormat.ROUND_ROBIN
    )
    status = db.Column(
        db.Enum(TournamentStatus), nullable=False, default=TournamentStatus.DRAFT
    )
    legs = db.Column(db.Integer, nullable=False, default=1)
    min_teams = db.Column(db.Integer, nullable=False, default=2)
    max_teams = db.Column(db.Integer, nullable=False, default=64)
    # Serialised engine settings, see tourney.services.repository
    constraints = db.Column(db.JSON, nullable=False, default=dict)
    points_system = db.Column(db.JSON, nullable=False, default=dict)
    tie_breakers = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    teams = db.relationship(
        "Team",
        secondary=tournament_teams,
        backref="tournaments",
        lazy="dynamic",
        order_by="Team.id",
    )
    venues = db.relationship(
        "Venue", backref="tournament", order_by="Venue.id", cascade="all, delete-orphan"
    )
    rounds = db.relationship(
        "Round", backref="tournament", lazy="dynamic", order_by="Round.number"
    )
    matches = db.relationship("Match", backref="tournament", lazy="dynamic")

    def __repr__(self):
        return f"<Tournament {self.name}>"
