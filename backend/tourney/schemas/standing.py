from marshmallow import Schema, fields


class TeamRecordSchema(Schema):
    played = fields.Integer()
    won = fields.Integer()
    drawn = fields.Integer()
    lost = fields.Integer()
    goals_for = fields.Integer()
    goals_against = fields.Integer()


class StandingRowSchema(Schema):
    rank = fields.Integer()
    team_id = fields.Raw()
    played = fields.Integer()
    won = fields.Integer()
    drawn = fields.Integer()
    lost = fields.Integer()
    goals_for = fields.Integer()
    goals_against = fields.Integer()
    goal_difference = fields.Integer()
    points = fields.Integer()
    penalty_wins = fields.Integer()
    penalty_losses = fields.Integer()
    walkovers_awarded = fields.Integer()
    walkovers_conceded = fields.Integer()
    home = fields.Nested(TeamRecordSchema)
    away = fields.Nested(TeamRecordSchema)
    form = fields.List(fields.String())
