from tourney.extensions import ma
from tourney.models.tournament import Tournament
from tourney.models.venue import Venue, TimeSlot
from tourney.engine.types import PenaltyTally, TieBreaker, TournamentFormat
from tourney.schemas.team import TeamSchema, CreateTeamSchema
from marshmallow import Schema, fields, validate


class TimeSlotSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = TimeSlot
        include_fk = True


class VenueSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Venue
        include_fk = True

    slots = ma.Nested(TimeSlotSchema, many=True, dump_only=True)


class TournamentSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Tournament
        load_instance = True
        include_fk = True

    format = fields.Function(lambda obj: obj.format.value if obj.format else None)
    status = fields.Function(lambda obj: obj.status.value if obj.status else None)
    venues = ma.Nested(VenueSchema, many=True, dump_only=True)
    teams = fields.Method("get_teams", dump_only=True)

    def get_teams(self, obj):
        return TeamSchema(many=True, only=("id", "name", "status", "rival_group")).dump(
            obj.teams.all()
        )


# ── Input ────────────────────────────────────────────────────────────────


class TimeSlotInputSchema(Schema):
    day_of_week = fields.Integer(required=True, validate=validate.Range(min=0, max=6))
    start_time = fields.Time(required=True)
    end_time = fields.Time(required=True)
    capacity = fields.Integer(load_default=1)


class VenueInputSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    slots = fields.List(fields.Nested(TimeSlotInputSchema), load_default=list)
    blocked_dates = fields.List(fields.Date(), load_default=list)


class ConstraintsSchema(Schema):
    minimum_rest_days = fields.Integer(load_default=0)
    maximum_matches_per_day = fields.Integer(load_default=None, allow_none=True)
    preferred_days = fields.List(
        fields.Integer(validate=validate.Range(min=0, max=6)), load_default=list
    )
    blackout_dates = fields.List(fields.Date(), load_default=list)
    derby_spacing = fields.Integer(load_default=0)


class PointsSystemSchema(Schema):
    win = fields.Integer(load_default=3)
    draw = fields.Integer(load_default=1)
    loss = fields.Integer(load_default=0)
    win_penalties = fields.Integer(load_default=2)
    walkover = fields.Integer(load_default=3)
    penalty_tally = fields.String(
        load_default=PenaltyTally.DRAW.value,
        validate=validate.OneOf([p.value for p in PenaltyTally]),
    )


class CreateTournamentSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    format = fields.String(
        load_default=TournamentFormat.ROUND_ROBIN.value,
        validate=validate.OneOf([f.value for f in TournamentFormat]),
    )
    # Range checks on legs and team counts are reported by the engine
    legs = fields.Integer(load_default=1)
    min_teams = fields.Integer(load_default=2)
    max_teams = fields.Integer(load_default=64)
    venues = fields.List(fields.Nested(VenueInputSchema), load_default=list)
    constraints = fields.Nested(ConstraintsSchema, load_default=None)
    points_system = fields.Nested(PointsSystemSchema, load_default=None)
    tie_breakers = fields.List(
        fields.String(validate=validate.OneOf([t.value for t in TieBreaker])),
        load_default=None,
    )
    teams = fields.List(fields.Nested(CreateTeamSchema), load_default=list)


class ReadinessQuerySchema(Schema):
    start_date = fields.Date(load_default=None)
    end_date = fields.Date(load_default=None)
