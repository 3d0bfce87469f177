from tourney.extensions import db
from tourney.engine.types import TeamStatus
from datetime import datetime, timezone


class Team(db.Model):
    __tablename__ = "teams"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    rival_group = db.Column(db.String(100), nullable=True)
    status = db.Column(
        db.Enum(TeamStatus), nullable=False, default=TeamStatus.REGISTERED
    )
    unavailable_dates = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    home_matches = db.relationship(
        "Match", foreign_keys="Match.home_team_id", backref="home_team", lazy="dynamic"
    )
    away_matches = db.relationship(
        "Match", foreign_keys="Match.away_team_id", backref="away_team", lazy="dynamic"
    )

    def __repr__(self):
        return f"<Team {self.name}>"
