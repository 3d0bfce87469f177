from tourney.extensions import ma
from tourney.models.match import Match
from tourney.models.round import Round
from tourney.engine.types import OutcomeKind
from marshmallow import Schema, fields, validate, validates_schema, ValidationError


class MatchSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Match
        load_instance = True
        include_fk = True

    status = fields.Function(lambda obj: obj.status.value if obj.status else None)
    outcome = fields.Function(lambda obj: obj.outcome.value if obj.outcome else None)
    home_team = ma.Nested("TeamSchema", only=("id", "name"), dump_only=True)
    away_team = ma.Nested("TeamSchema", only=("id", "name"), dump_only=True)
    winner = ma.Nested("TeamSchema", only=("id", "name"), dump_only=True)
    venue = ma.Nested("VenueSchema", only=("id", "name"), dump_only=True)


class RoundSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Round
        include_fk = True

    matches = fields.Method("get_matches", dump_only=True)

    def get_matches(self, obj):
        return MatchSchema(many=True, exclude=("tournament_id",)).dump(obj.matches.all())


class GenerateFixturesSchema(Schema):
    start_date = fields.Date(required=True)
    end_date = fields.Date(load_default=None)
    dry_run = fields.Boolean(load_default=False)

    @validates_schema
    def validate_window(self, data, **kwargs):
        end = data.get("end_date")
        if end is not None and end < data["start_date"]:
            raise ValidationError("end_date must not be before start_date", "end_date")


class SubmitResultSchema(Schema):
    home_score = fields.Integer(required=True, validate=validate.Range(min=0))
    away_score = fields.Integer(required=True, validate=validate.Range(min=0))
    outcome = fields.String(
        load_default=OutcomeKind.NORMAL.value,
        validate=validate.OneOf([o.value for o in OutcomeKind]),
    )
    winner_id = fields.Integer(load_default=None, allow_none=True)

    @validates_schema
    def validate_outcome(self, data, **kwargs):
        outcome = data.get("outcome")
        if outcome == OutcomeKind.NORMAL.value:
            return
        if data.get("winner_id") is None:
            raise ValidationError(f"winner_id is required for a {outcome} result", "winner_id")
        if outcome == OutcomeKind.PENALTIES.value and data["home_score"] != data["away_score"]:
            raise ValidationError("a shoot-out follows a drawn match", "outcome")


# ── Engine output ────────────────────────────────────────────────────────


class ScheduledMatchSchema(Schema):
    id = fields.Raw()
    round_number = fields.Integer()
    leg = fields.Integer()
    bracket_position = fields.Integer(allow_none=True)
    home_team_id = fields.Raw()
    away_team_id = fields.Raw()
    venue_id = fields.Raw()
    slot_id = fields.Raw()
    scheduled_date = fields.Date()
    start_time = fields.Time()


class ScheduledRoundSchema(Schema):
    number = fields.Integer()
    name = fields.String()
    start_date = fields.Date()
    end_date = fields.Date()
    matches = fields.List(fields.Nested(ScheduledMatchSchema))


class ScheduleSchema(Schema):
    rounds = fields.List(fields.Nested(ScheduledRoundSchema))
    warnings = fields.List(fields.String())
    match_count = fields.Function(lambda obj: len(obj.matches))
