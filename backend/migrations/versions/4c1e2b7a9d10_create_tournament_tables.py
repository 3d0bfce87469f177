"""create tournament tables

Revision ID: 4c1e2b7a9d10
Revises:
Create Date: 2026-10-17 09:12:31.402117

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c1e2b7a9d10'
down_revision = None
branch_labels = None
depends_on = None


tournamentformat_enum = sa.Enum('ROUND_ROBIN', 'KNOCKOUT', name='tournamentformat')
tournamentstatus_enum = sa.Enum(
    'DRAFT', 'SCHEDULED', 'ACTIVE', 'COMPLETED', 'CANCELLED', name='tournamentstatus'
)
teamstatus_enum = sa.Enum('REGISTERED', 'CONFIRMED', 'WITHDRAWN', name='teamstatus')
matchstatus_enum = sa.Enum('SCHEDULED', 'COMPLETED', name='matchstatus')
outcomekind_enum = sa.Enum('NORMAL', 'PENALTIES', 'WALKOVER', name='outcomekind')


def upgrade():
    op.create_table(
        'tournaments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('format', tournamentformat_enum, nullable=False),
        sa.Column('status', tournamentstatus_enum, nullable=False),
        sa.Column('legs', sa.Integer(), nullable=False),
        sa.Column('min_teams', sa.Integer(), nullable=False),
        sa.Column('max_teams', sa.Integer(), nullable=False),
        sa.Column('constraints', sa.JSON(), nullable=False),
        sa.Column('points_system', sa.JSON(), nullable=False),
        sa.Column('tie_breakers', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('rival_group', sa.String(length=100), nullable=True),
        sa.Column('status', teamstatus_enum, nullable=False),
        sa.Column('unavailable_dates', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'tournament_teams',
        sa.Column('tournament_id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id']),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id']),
        sa.PrimaryKeyConstraint('tournament_id', 'team_id'),
    )
    op.create_table(
        'venues',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tournament_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('blocked_dates', sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'time_slots',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('venue_id', sa.Integer(), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['venue_id'], ['venues.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'rounds',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tournament_id', sa.Integer(), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tournament_id', 'number', name='uq_round_tournament_number'),
    )
    op.create_table(
        'matches',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tournament_id', sa.Integer(), nullable=False),
        sa.Column('round_id', sa.Integer(), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('home_team_id', sa.Integer(), nullable=True),
        sa.Column('away_team_id', sa.Integer(), nullable=True),
        sa.Column('venue_id', sa.Integer(), nullable=True),
        sa.Column('slot_id', sa.Integer(), nullable=True),
        sa.Column('match_date', sa.Date(), nullable=True),
        sa.Column('kickoff', sa.Time(), nullable=True),
        sa.Column('leg', sa.Integer(), nullable=False),
        sa.Column('bracket_position', sa.Integer(), nullable=True),
        sa.Column('status', matchstatus_enum, nullable=False),
        sa.Column('home_score', sa.Integer(), nullable=True),
        sa.Column('away_score', sa.Integer(), nullable=True),
        sa.Column('outcome', outcomekind_enum, nullable=True),
        sa.Column('winner_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id']),
        sa.ForeignKeyConstraint(['round_id'], ['rounds.id']),
        sa.ForeignKeyConstraint(['home_team_id'], ['teams.id']),
        sa.ForeignKeyConstraint(['away_team_id'], ['teams.id']),
        sa.ForeignKeyConstraint(['venue_id'], ['venues.id']),
        sa.ForeignKeyConstraint(['slot_id'], ['time_slots.id']),
        sa.ForeignKeyConstraint(['winner_id'], ['teams.id']),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade():
    op.drop_table('matches')
    op.drop_table('rounds')
    op.drop_table('time_slots')
    op.drop_table('venues')
    op.drop_table('tournament_teams')
    op.drop_table('teams')
    op.drop_table('tournaments')

    bind = op.get_bind()
    for enum_type in (
        outcomekind_enum,
        matchstatus_enum,
        teamstatus_enum,
        tournamentstatus_enum,
        tournamentformat_enum,
    ):
        enum_type.drop(bind, checkfirst=True)
