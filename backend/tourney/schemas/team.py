from tourney.extensions import ma
from tourney.models.team import Team
from tourney.engine.types import TeamStatus
from marshmallow import Schema, fields, validate


class TeamSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Team
        load_instance = True

    status = fields.Function(lambda obj: obj.status.value if obj.status else None)


class CreateTeamSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    rival_group = fields.String(
        load_default=None, allow_none=True, validate=validate.Length(max=100)
    )
    status = fields.String(
        load_default=TeamStatus.CONFIRMED.value,
        validate=validate.OneOf([TeamStatus.REGISTERED.value, TeamStatus.CONFIRMED.value]),
    )
    unavailable_dates = fields.List(fields.Date(), load_default=list)
