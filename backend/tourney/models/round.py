from tourney.extensions import db


class Round(db.Model):
    __tablename__ = "rounds"

    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(
        db.Integer, db.ForeignKey("tournaments.id"), nullable=False
    )
    number = db.Column(db.Integer, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)

    matches = db.relationship(
        "Match", backref="round", order_by="Match.id", lazy="dynamic"
    )

    # A second concurrent save of the same schedule fails here
    __table_args__ = (
        db.UniqueConstraint("tournament_id", "number", name="uq_round_tournament_number"),
    )

    def __repr__(self):
        return f"<Round {self.number} of tournament {self.tournament_id}>"
