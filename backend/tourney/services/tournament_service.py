import logging

from flask import current_app

from tourney.extensions import db
from tourney.events import event_bus
from tourney.models.tournament import Tournament as TournamentModel
from tourney.engine.tournament_engine import TournamentEngine, active_teams
from tourney.services.repository import (
    SqlAlchemyTournamentRepository,
    config_from_payload,
    team_from_payload,
)

logger = logging.getLogger(__name__)


def get_engine():
    """Engine bound to the request's database session and app settings."""
    return TournamentEngine(
        SqlAlchemyTournamentRepository(),
        horizon_days=current_app.config["SCHEDULING_HORIZON_DAYS"],
        max_backtracks=current_app.config["SCHEDULING_MAX_BACKTRACKS"],
    )


def create_tournament(data):
    config = config_from_payload(data)
    teams = [team_from_payload(t) for t in data.get("teams", ())]
    tournament, error = get_engine().create_tournament(config, teams, name=data["name"])
    if error:
        return None, error
    return db.session.get(TournamentModel, tournament.id), None


def register_team(tournament_id, data):
    """Add a team before fixtures exist. Returns ``(team, error)``."""
    repository = SqlAlchemyTournamentRepository()
    tournament = repository.load_tournament(tournament_id)
    if tournament is None:
        return None, "Tournament not found"

    if repository.has_schedule(tournament_id):
        return None, "Teams cannot be added after fixtures are generated"

    teams = active_teams(tournament.teams)
    if len(teams) >= tournament.config.max_teams:
        return None, f"Tournament is full ({tournament.config.max_teams} teams)"

    name = data["name"].strip().lower()
    if any(t.name.strip().lower() == name for t in tournament.teams):
        return None, f"A team named '{data['name']}' is already registered"

    team = repository.add_team(tournament_id, team_from_payload(data))
    logger.info("Registered team %s in tournament %s", team.id, tournament_id)
    return team, None


def check_readiness(tournament_id, start_date=None, end_date=None):
    return get_engine().validate_tournament_readiness(tournament_id, start_date, end_date)


def generate_fixtures(tournament_id, start_date, end_date=None, dry_run=False):
    schedule, error = get_engine().generate_fixtures(
        tournament_id, start_date, end_date, persist=not dry_run
    )
    if error:
        return None, error

    if not dry_run:
        event_bus.publish("fixtures_generated", {
            "tournament_id": tournament_id,
            "round_count": len(schedule.rounds),
            "match_count": len(schedule.matches),
        })
    return schedule, None


def get_standings(tournament_id):
    """Ranked standing rows. Returns ``(rows, error)``."""
    if db.session.get(TournamentModel, tournament_id) is None:
        return None, "Tournament not found"
    return get_engine().get_standings(tournament_id), None
