"""Flask-SQLAlchemy implementation of the engine's repository protocol,
plus the conversions between database rows and engine dataclasses."""
import logging
from dataclasses import replace
from datetime import date

from sqlalchemy.exc import IntegrityError

from tourney.extensions import db
from tourney.models.tournament import Tournament as TournamentModel, TournamentStatus
from tourney.models.team import Team as TeamModel
from tourney.models.venue import Venue as VenueModel, TimeSlot as TimeSlotModel
from tourney.models.round import Round as RoundModel
from tourney.models.match import Match as MatchModel, MatchStatus
from tourney.engine.errors import ScheduleExistsError
from tourney.engine.types import (
    DEFAULT_TIE_BREAKERS,
    Constraints,
    Match,
    MatchResult,
    OutcomeKind,
    PenaltyTally,
    PointsSystem,
    Round,
    Team,
    TeamStatus,
    TieBreaker,
    TimeSlot,
    Tournament,
    TournamentConfig,
    TournamentFormat,
    Venue,
)

logger = logging.getLogger(__name__)


def _dates(values):
    return frozenset(v if isinstance(v, date) else date.fromisoformat(v) for v in values or ())


def _iso(values):
    return sorted(d.isoformat() for d in values)


# ── JSON columns ─────────────────────────────────────────────────────────


def constraints_to_dict(constraints):
    return {
        "minimum_rest_days": constraints.minimum_rest_days,
        "maximum_matches_per_day": constraints.maximum_matches_per_day,
        "preferred_days": list(constraints.preferred_days),
        "blackout_dates": _iso(constraints.blackout_dates),
        "derby_spacing": constraints.derby_spacing,
    }


def constraints_from_dict(data):
    data = data or {}
    return Constraints(
        minimum_rest_days=data.get("minimum_rest_days", 0),
        maximum_matches_per_day=data.get("maximum_matches_per_day"),
        preferred_days=tuple(data.get("preferred_days", ())),
        blackout_dates=_dates(data.get("blackout_dates")),
        derby_spacing=data.get("derby_spacing", 0),
    )


def points_system_to_dict(points_system):
    return {
        "win": points_system.win,
        "draw": points_system.draw,
        "loss": points_system.loss,
        "win_penalties": points_system.win_penalties,
        "walkover": points_system.walkover,
        "penalty_tally": points_system.penalty_tally.value,
    }


def points_system_from_dict(data):
    if not data:
        return PointsSystem()
    return PointsSystem(
        win=data.get("win", 3),
        draw=data.get("draw", 1),
        loss=data.get("loss", 0),
        win_penalties=data.get("win_penalties", 2),
        walkover=data.get("walkover", 3),
        penalty_tally=PenaltyTally(data.get("penalty_tally", PenaltyTally.DRAW.value)),
    )


def tie_breakers_from_list(values):
    if not values:
        return DEFAULT_TIE_BREAKERS
    return tuple(TieBreaker(v) for v in values)


# ── Request payloads ─────────────────────────────────────────────────────


def team_from_payload(data):
    return Team(
        id=None,
        name=data["name"],
        rival_group=data.get("rival_group"),
        status=TeamStatus(data.get("status", TeamStatus.CONFIRMED.value)),
        unavailable_dates=_dates(data.get("unavailable_dates")),
    )


def config_from_payload(data):
    """Build a ``TournamentConfig`` from ``CreateTournamentSchema`` output."""
    venues = tuple(
        Venue(
            id=None,
            name=v["name"],
            slots=tuple(
                TimeSlot(
                    day_of_week=s["day_of_week"],
                    start_time=s["start_time"],
                    end_time=s["end_time"],
                    capacity=s.get("capacity", 1),
                )
                for s in v.get("slots", ())
            ),
            blocked_dates=_dates(v.get("blocked_dates")),
        )
        for v in data.get("venues", ())
    )
    return TournamentConfig(
        format=TournamentFormat(data.get("format", TournamentFormat.ROUND_ROBIN.value)),
        legs=data.get("legs", 1),
        min_teams=data.get("min_teams", 2),
        max_teams=data.get("max_teams", 64),
        venues=venues,
        constraints=constraints_from_dict(data.get("constraints")),
        points_system=points_system_from_dict(data.get("points_system")),
        tie_breakers=tie_breakers_from_list(data.get("tie_breakers")),
    )


# ── Rows to engine types ─────────────────────────────────────────────────


def team_from_model(team):
    return Team(
        id=team.id,
        name=team.name,
        rival_group=team.rival_group,
        status=team.status,
        unavailable_dates=_dates(team.unavailable_dates),
    )


def venue_from_model(venue):
    return Venue(
        id=venue.id,
        name=venue.name,
        slots=tuple(
            TimeSlot(
                day_of_week=s.day_of_week,
                start_time=s.start_time,
                end_time=s.end_time,
                capacity=s.capacity,
                id=s.id,
            )
            for s in venue.slots
        ),
        blocked_dates=_dates(venue.blocked_dates),
    )


def config_from_model(tournament):
    return TournamentConfig(
        format=tournament.format,
        legs=tournament.legs,
        min_teams=tournament.min_teams,
        max_teams=tournament.max_teams,
        venues=tuple(venue_from_model(v) for v in tournament.venues),
        constraints=constraints_from_dict(tournament.constraints),
        points_system=points_system_from_dict(tournament.points_system),
        tie_breakers=tie_breakers_from_list(tournament.tie_breakers),
    )


def match_from_model(match):
    result = None
    if match.status == MatchStatus.COMPLETED:
        result = MatchResult(
            home_goals=match.home_score or 0,
            away_goals=match.away_score or 0,
            outcome=match.outcome or OutcomeKind.NORMAL,
            winner_id=match.winner_id,
        )
    return Match(
        id=match.id,
        home_team_id=match.home_team_id,
        away_team_id=match.away_team_id,
        round_number=match.round_number,
        venue_id=match.venue_id,
        slot_id=match.slot_id,
        scheduled_date=match.match_date,
        start_time=match.kickoff,
        leg=match.leg,
        bracket_position=match.bracket_position,
        result=result,
    )


class SqlAlchemyTournamentRepository:
    """Repository over the application database session."""

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def _get(self, tournament_id):
        return self.session.get(TournamentModel, tournament_id)

    def load_tournament(self, tournament_id):
        model = self._get(tournament_id)
        if model is None:
            return None
        return Tournament(
            id=model.id,
            name=model.name,
            config=config_from_model(model),
            teams=[team_from_model(t) for t in model.teams],
            status=model.status.value,
        )

    def load_teams(self, tournament_id):
        model = self._get(tournament_id)
        if model is None:
            return []
        return [team_from_model(t) for t in model.teams]

    def load_config(self, tournament_id):
        model = self._get(tournament_id)
        return config_from_model(model) if model else None

    def save_tournament(self, tournament):
        """Insert the tournament with its venues and teams and write the
        generated ids back onto ``tournament``."""
        config = tournament.config
        model = TournamentModel(
            id=tournament.id,
            name=tournament.name,
            format=config.format,
            legs=config.legs,
            min_teams=config.min_teams,
            max_teams=config.max_teams,
            constraints=constraints_to_dict(config.constraints),
            points_system=points_system_to_dict(config.points_system),
            tie_breakers=[t.value for t in config.tie_breakers],
            status=TournamentStatus.DRAFT,
        )
        for venue in config.venues:
            model.venues.append(
                VenueModel(
                    name=venue.name,
                    blocked_dates=_iso(venue.blocked_dates),
                    slots=[
                        TimeSlotModel(
                            day_of_week=s.day_of_week,
                            start_time=s.start_time,
                            end_time=s.end_time,
                            capacity=s.capacity,
                        )
                        for s in venue.slots
                    ],
                )
            )
        self.session.add(model)

        team_models = [self._team_model(t) for t in tournament.teams]
        for team_model in team_models:
            model.teams.append(team_model)

        self.session.commit()

        tournament.id = model.id
        tournament.teams = [team_from_model(t) for t in team_models]
        tournament.config = config_from_model(model)
        return model.id

    def _team_model(self, team):
        if team.id is not None:
            existing = self.session.get(TeamModel, team.id)
            if existing is not None:
                return existing
        team_model = TeamModel(
            name=team.name,
            rival_group=team.rival_group,
            status=team.status,
            unavailable_dates=_iso(team.unavailable_dates),
        )
        self.session.add(team_model)
        return team_model

    def add_team(self, tournament_id, team):
        """Register one more team; returns the stored ``Team``."""
        model = self._get(tournament_id)
        team_model = self._team_model(team)
        model.teams.append(team_model)
        self.session.commit()
        return replace(team, id=team_model.id)

    def has_schedule(self, tournament_id):
        return (
            self.session.query(RoundModel.id)
            .filter_by(tournament_id=tournament_id)
            .first()
            is not None
        )

    def save_schedule(self, tournament_id, rounds, matches):
        """Write every round and match in one transaction.

        The unique (tournament_id, number) constraint on rounds turns a
        concurrent second save into an ``IntegrityError``, reported as
        ``ScheduleExistsError`` after rollback.
        """
        if self.has_schedule(tournament_id):
            raise ScheduleExistsError(tournament_id)

        stored = []
        try:
            for rnd in rounds:
                round_model = RoundModel(
                    tournament_id=tournament_id,
                    number=rnd.number,
                    name=rnd.name,
                    start_date=rnd.start_date,
                    end_date=rnd.end_date,
                )
                self.session.add(round_model)
                self.session.flush()
                for match in rnd.matches:
                    match_model = MatchModel(
                        tournament_id=tournament_id,
                        round_id=round_model.id,
                        round_number=rnd.number,
                        home_team_id=match.home_team_id,
                        away_team_id=match.away_team_id,
                        venue_id=match.venue_id,
                        slot_id=match.slot_id,
                        match_date=match.scheduled_date,
                        kickoff=match.start_time,
                        leg=match.leg,
                        bracket_position=match.bracket_position,
                        status=MatchStatus.SCHEDULED,
                    )
                    self.session.add(match_model)
                    stored.append((match, match_model))

            tournament = self._get(tournament_id)
            tournament.status = TournamentStatus.SCHEDULED
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            if self.has_schedule(tournament_id):
                raise ScheduleExistsError(tournament_id)
            raise
        except Exception:
            self.session.rollback()
            raise

        for match, match_model in stored:
            match.id = match_model.id
        logger.debug("Stored %d matches for tournament %s", len(stored), tournament_id)
        return True

    def load_rounds(self, tournament_id):
        rounds = []
        query = (
            self.session.query(RoundModel)
            .filter_by(tournament_id=tournament_id)
            .order_by(RoundModel.number)
        )
        for round_model in query:
            rounds.append(
                Round(
                    number=round_model.number,
                    name=round_model.name,
                    matches=[match_from_model(m) for m in round_model.matches],
                    start_date=round_model.start_date,
                    end_date=round_model.end_date,
                )
            )
        return rounds

    def load_results(self, tournament_id):
        query = (
            self.session.query(MatchModel)
            .filter_by(tournament_id=tournament_id, status=MatchStatus.COMPLETED)
            .order_by(MatchModel.match_date, MatchModel.id)
        )
        return [match_from_model(m) for m in query]
