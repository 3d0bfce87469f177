import logging
from types import SimpleNamespace

from tourney.extensions import db
from tourney.events import event_bus
from tourney.models.match import Match, MatchStatus
from tourney.models.tournament import TournamentStatus
from tourney.engine.types import OutcomeKind

logger = logging.getLogger(__name__)


def _tie_legs(match):
    """All legs of the knockout tie ``match`` belongs to, first leg first."""
    return (
        Match.query.filter_by(
            tournament_id=match.tournament_id,
            bracket_position=match.bracket_position,
        )
        .order_by(Match.leg)
        .all()
    )


def _leaves_tie_level(match, data, outcome, winner_id):
    """True when ``data`` completes the tie without deciding it."""
    others = [leg for leg in _tie_legs(match) if leg.id != match.id]
    if any(leg.status != MatchStatus.COMPLETED for leg in others):
        return False

    pending = SimpleNamespace(
        leg=match.leg,
        home_team_id=match.home_team_id,
        away_team_id=match.away_team_id,
        home_score=data["home_score"],
        away_score=data["away_score"],
        outcome=outcome,
        winner_id=winner_id,
    )
    legs = sorted(others + [pending], key=lambda leg: leg.leg)
    return tie_winner(legs) is None


def record_result(match_id, data):
    """Store the outcome of a played (or awarded) match.

    Status: SCHEDULED -> COMPLETED. Knockout winners move into the next
    tie once it is decided. Returns ``(match, error)``.
    """
    match = db.session.get(Match, match_id)

    if not match:
        return None, "Match not found"

    if match.status != MatchStatus.SCHEDULED:
        return None, "A result has already been recorded for this match"

    if match.home_team_id is None or match.away_team_id is None:
        return None, "Both teams must be decided before a result is recorded"

    outcome = OutcomeKind(data.get("outcome", OutcomeKind.NORMAL.value))
    winner_id = data.get("winner_id")
    if outcome == OutcomeKind.NORMAL:
        winner_id = None
    elif winner_id not in (match.home_team_id, match.away_team_id):
        return None, "winner_id must be one of the two teams in this match"

    if match.bracket_position is not None and _leaves_tie_level(match, data, outcome, winner_id):
        return None, "Knockout tie ended level, record the shoot-out winner"

    match.home_score = data["home_score"]
    match.away_score = data["away_score"]
    match.outcome = outcome
    match.winner_id = winner_id
    match.status = MatchStatus.COMPLETED

    remaining = Match.query.filter_by(
        tournament_id=match.tournament_id, status=MatchStatus.SCHEDULED
    ).count()
    tournament = match.tournament
    tournament.status = TournamentStatus.COMPLETED if remaining == 0 else TournamentStatus.ACTIVE
    db.session.commit()

    logger.info(
        "Result recorded for match %s: %s-%s (%s)",
        match.id, match.home_score, match.away_score, outcome.value,
    )

    event_bus.publish("result_recorded", {
        "match_id": match.id,
        "tournament_id": match.tournament_id,
        "home_team_id": match.home_team_id,
        "away_team_id": match.away_team_id,
        "home_score": match.home_score,
        "away_score": match.away_score,
        "outcome": outcome.value,
        "winner_id": winner_id,
    })

    event_bus.publish("standings_updated", {
        "tournament_id": match.tournament_id,
    })

    if match.bracket_position is not None:
        advance_bracket_winner(match)

    if remaining == 0:
        event_bus.publish("tournament_completed", {
            "tournament_id": match.tournament_id,
        })

    return match, None


def _leg_winner(match):
    if match.outcome in (OutcomeKind.PENALTIES, OutcomeKind.WALKOVER):
        return match.winner_id
    if match.home_score > match.away_score:
        return match.home_team_id
    if match.away_score > match.home_score:
        return match.away_team_id
    return None


def tie_winner(legs):
    """Winner of a completed tie, on aggregate over two legs."""
    if len(legs) == 1:
        return _leg_winner(legs[0])

    first, second = legs
    for leg in legs:
        if leg.outcome == OutcomeKind.WALKOVER:
            return leg.winner_id

    # leg 1 home side is leg 2 away side
    team_a, team_b = first.home_team_id, first.away_team_id
    aggregate_a = first.home_score + second.away_score
    aggregate_b = first.away_score + second.home_score
    if aggregate_a > aggregate_b:
        return team_a
    if aggregate_b > aggregate_a:
        return team_b
    if second.outcome == OutcomeKind.PENALTIES:
        return second.winner_id
    return None


def advance_bracket_winner(match):
    """Write the winner of a finished tie into the parent tie.

    The lower child position feeds the parent's first-leg home side.
    Returns the parent matches that were updated.
    """
    if match.bracket_position is None or match.bracket_position == 1:
        return []

    legs = _tie_legs(match)
    if any(leg.status != MatchStatus.COMPLETED for leg in legs):
        return []

    winner_id = tie_winner(legs)
    if winner_id is None:
        logger.warning(
            "Tie at bracket position %s of tournament %s is level, winner not advanced",
            match.bracket_position, match.tournament_id,
        )
        return []

    parent_bp = match.bracket_position // 2
    is_home = match.bracket_position % 2 == 0
    parents = Match.query.filter_by(
        tournament_id=match.tournament_id,
        bracket_position=parent_bp,
    ).all()

    for parent in parents:
        # Second legs swap home and away
        home_side = is_home if parent.leg == 1 else not is_home
        if home_side:
            parent.home_team_id = winner_id
        else:
            parent.away_team_id = winner_id
    db.session.commit()

    event_bus.publish("bracket_updated", {
        "tournament_id": match.tournament_id,
        "bracket_position": parent_bp,
        "team_id": winner_id,
    })
    return parents
