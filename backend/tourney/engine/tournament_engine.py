import logging
from datetime import timedelta

from tourney.engine.errors import (
    ConfigError,
    EngineError,
    ScheduleExistsError,
    TournamentNotFoundError,
)
from tourney.engine.fixture_generator import (
    DEFAULT_HORIZON_DAYS,
    DEFAULT_MAX_BACKTRACKS,
    FixtureGenerator,
    validate_config,
)
from tourney.engine.standings import compute_standings
from tourney.engine.types import (
    TeamStatus,
    Tournament,
    TournamentFormat,
    ReadinessReport,
)

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def active_teams(teams):
    """Teams that take part in scheduling: everyone who has not withdrawn."""
    return [t for t in teams if t.status != TeamStatus.WITHDRAWN]


def expected_match_count(config, team_count):
    if team_count < 2:
        return 0
    if config.format == TournamentFormat.KNOCKOUT:
        # n - 1 ties, every tie but the final played over ``legs`` matches
        return (team_count - 2) * config.legs + 1
    return config.legs * team_count * (team_count - 1) // 2


def window_capacity(config, start_date, end_date):
    """Upper bound on matches the venues can host between two dates."""
    constraints = config.constraints
    total = 0
    day = start_date
    while day <= end_date:
        if day not in constraints.blackout_dates:
            day_total = sum(
                slot.capacity
                for venue in config.venues
                if day not in venue.blocked_dates
                for slot in venue.slots_on(day.weekday())
            )
            if constraints.maximum_matches_per_day is not None:
                day_total = min(day_total, constraints.maximum_matches_per_day)
            total += day_total
        day += timedelta(days=1)
    return total


class TournamentEngine:
    """Facade over fixture generation and standings.

    Methods that can fail return ``(result, error)``: exactly one of the two
    is None and ``error`` is an ``EngineError`` the caller can branch on.
    """

    def __init__(self, repository, horizon_days=DEFAULT_HORIZON_DAYS,
                 max_backtracks=DEFAULT_MAX_BACKTRACKS):
        self.repository = repository
        self.horizon_days = horizon_days
        self.max_backtracks = max_backtracks

    def create_tournament(self, config, teams, name=None, tournament_id=None):
        """Validate and store a new tournament.

        ``tournament_id`` keeps a caller-chosen id; without one the
        repository assigns it.
        """
        issues = validate_config(config, active_teams(teams))
        if tournament_id is not None and self.repository.load_tournament(tournament_id) is not None:
            issues.append(f"tournament {tournament_id} already exists")
        if issues:
            return None, ConfigError(issues)

        tournament = Tournament(
            id=tournament_id,
            name=name or "Tournament",
            config=config,
            teams=list(teams),
        )
        self.repository.save_tournament(tournament)
        logger.info(
            "Created tournament %s with %d teams (%s, %d leg(s))",
            tournament.id, len(teams), config.format.value, config.legs,
        )
        return tournament, None

    def validate_tournament_readiness(self, tournament_id, start_date=None, end_date=None):
        """Collect everything that stops fixtures from being generated.

        Never raises: a missing tournament or a failing repository is
        reported as an issue so it can be shown to the organiser.
        """
        try:
            tournament = self.repository.load_tournament(tournament_id)
            if tournament is None:
                return ReadinessReport(False, [f"tournament {tournament_id} not found"])
            registered = self.repository.load_teams(tournament_id)
            config = self.repository.load_config(tournament_id)
            scheduled = self.repository.has_schedule(tournament_id)
        except Exception as e:
            logger.exception("Readiness check failed for tournament %s", tournament_id)
            return ReadinessReport(False, [f"could not load tournament: {e}"])

        teams = active_teams(registered)
        issues = validate_config(config, teams)
        if scheduled:
            issues.append("fixtures already generated")

        warnings = []
        if config.format == TournamentFormat.ROUND_ROBIN and len(teams) % 2 != 0:
            warnings.append("odd number of teams will result in bye rounds")

        unconfirmed = [t for t in teams if t.status != TeamStatus.CONFIRMED]
        if unconfirmed:
            warnings.append(f"{len(unconfirmed)} team(s) not yet confirmed")

        slot_days = {s.day_of_week for v in config.venues for s in v.slots}
        for day in config.constraints.preferred_days:
            if day not in slot_days:
                warnings.append(f"preferred day {WEEKDAY_NAMES[day]} has no time slots")

        if start_date is not None and not issues:
            end = end_date or start_date + timedelta(days=self.horizon_days - 1)
            needed = expected_match_count(config, len(teams))
            available = window_capacity(config, start_date, end)
            if available < needed:
                warnings.append(
                    f"only {available} match slots between {start_date} and {end}, "
                    f"{needed} matches needed"
                )

        return ReadinessReport(not issues, issues, warnings)

    def generate_fixtures(self, tournament_id, start_date, end_date=None, persist=True):
        """Generate and, unless ``persist`` is False, store the schedule.

        Regeneration is refused once a schedule exists; the repository
        enforces the same rule inside its transaction so two concurrent
        requests cannot both succeed.
        """
        tournament = self.repository.load_tournament(tournament_id)
        if tournament is None:
            return None, TournamentNotFoundError(tournament_id)

        if persist and self.repository.has_schedule(tournament_id):
            return None, ScheduleExistsError(tournament_id)

        teams = active_teams(self.repository.load_teams(tournament_id))
        config = self.repository.load_config(tournament_id)
        generator = FixtureGenerator(
            config,
            horizon_days=self.horizon_days,
            max_backtracks=self.max_backtracks,
        )
        try:
            schedule = generator.generate(teams, start_date, end_date)
        except EngineError as e:
            return None, e

        if persist:
            try:
                self.repository.save_schedule(tournament_id, schedule.rounds, schedule.matches)
            except ScheduleExistsError as e:
                return None, e
            logger.info(
                "Saved %d matches in %d rounds for tournament %s",
                len(schedule.matches), len(schedule.rounds), tournament_id,
            )
        return schedule, None

    def get_standings(self, tournament_id):
        """Ranked table from the recorded results; empty before any result."""
        results = self.repository.load_results(tournament_id)
        if not results:
            return []

        config = self.repository.load_config(tournament_id)
        team_ids = [t.id for t in active_teams(self.repository.load_teams(tournament_id))]
        return compute_standings(
            results,
            team_ids=team_ids,
            points_system=config.points_system,
            tie_breakers=config.tie_breakers,
        )
