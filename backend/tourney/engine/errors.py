import enum


class BlockingConstraint(enum.Enum):
    SLOT_CAPACITY = "slot_capacity"
    DAILY_MATCH_LIMIT = "maximum_matches_per_day"
    TEAM_DATE_CLASH = "team_already_playing"
    REST_DAYS = "minimum_rest_days"
    DERBY_SPACING = "derby_spacing"
    BLACKOUT_DATE = "blackout_date"
    VENUE_UNAVAILABLE = "venue_unavailable"
    TEAM_UNAVAILABLE = "team_unavailable"
    BRACKET_ORDER = "bracket_order"
    SEARCH_HORIZON = "search_horizon"
    SEARCH_BUDGET = "search_budget"


class EngineError(Exception):
    """Base class for typed engine failures.

    Engine failures are returned to callers as data (the second item of a
    ``(result, error)`` pair) as well as raised inside the pure modules.
    """

    code = "engine_error"

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"error": self.message, "code": self.code}


class ConfigError(EngineError):
    """Structurally invalid configuration: wrong team count, no venues or
    slots, bad legs. Detected before any scheduling work."""

    code = "config_error"

    def __init__(self, issues):
        if isinstance(issues, str):
            issues = [issues]
        self.issues = list(issues)
        super().__init__("; ".join(self.issues))

    def to_dict(self):
        data = super().to_dict()
        data["issues"] = list(self.issues)
        return data


class ConstraintUnsatisfiableError(EngineError):
    """No legal (date, venue, slot) exists for ``match`` within the search
    window. ``constraint`` is the rule that rejected most candidates."""

    code = "constraint_unsatisfiable"

    def __init__(self, match, constraint, rejections=None):
        self.match = match
        self.constraint = constraint
        self.rejections = dict(rejections or {})
        super().__init__(
            f"Cannot place match {match.describe()}: blocked by {constraint.value}"
        )

    def to_dict(self):
        data = super().to_dict()
        data["match"] = {
            "round_number": self.match.round_number,
            "home_team_id": self.match.home_team_id,
            "away_team_id": self.match.away_team_id,
            "leg": self.match.leg,
        }
        data["constraint"] = self.constraint.value
        data["rejections"] = {k.value: v for k, v in self.rejections.items()}
        return data


class ScheduleExistsError(EngineError):
    code = "schedule_exists"

    def __init__(self, tournament_id):
        self.tournament_id = tournament_id
        super().__init__(f"Fixtures already generated for tournament {tournament_id}")


class TournamentNotFoundError(EngineError):
    code = "not_found"

    def __init__(self, tournament_id):
        self.tournament_id = tournament_id
        super().__init__(f"Tournament {tournament_id} not found")
