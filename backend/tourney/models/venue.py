from tourney.extensions import db


class Venue(db.Model):
    __tablename__ = "venues"

    id = db.Column(db.Integer, primary_key=True)
    tournament_id = db.Column(
        db.Integer, db.ForeignKey("tournaments.id"), nullable=False
    )
    name = db.Column(db.String(200), nullable=False)
    blocked_dates = db.Column(db.JSON, nullable=False, default=list)

    slots = db.relationship(
        "TimeSlot", backref="venue", order_by="TimeSlot.id", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Venue {self.name}>"


class TimeSlot(db.Model):
    __tablename__ = "time_slots"

    id = db.Column(db.Integer, primary_key=True)
    venue_id = db.Column(db.Integer, db.ForeignKey("venues.id"), nullable=False)
    day_of_week = db.Column(db.Integer, nullable=False)  # Monday == 0
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    capacity = db.Column(db.Integer, nullable=False, default=1)

    def __repr__(self):
        return f"<TimeSlot {self.day_of_week} {self.start_time}>"
