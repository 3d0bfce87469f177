from datetime import date
from itertools import groupby

from tourney.engine.types import (
    DEFAULT_TIE_BREAKERS,
    OutcomeKind,
    PenaltyTally,
    PointsSystem,
    StandingRow,
    TieBreaker,
)

FORM_LENGTH = 5


def _decided_winner(match):
    """Team id credited with a shoot-out or walkover, or None if the result
    does not name one of the two teams."""
    winner = match.result.winner_id
    if winner in (match.home_team_id, match.away_team_id):
        return winner
    return None


def points_awarded(match, points_system):
    """Return ``(home_points, away_points)`` for a completed match."""
    result = match.result
    winner = _decided_winner(match)

    if result.outcome == OutcomeKind.WALKOVER and winner is not None:
        if winner == match.home_team_id:
            return points_system.walkover, 0
        return 0, points_system.walkover

    if result.outcome == OutcomeKind.PENALTIES and winner is not None:
        if winner == match.home_team_id:
            return points_system.win_penalties, points_system.loss
        return points_system.loss, points_system.win_penalties

    if result.home_goals > result.away_goals:
        return points_system.win, points_system.loss
    if result.home_goals < result.away_goals:
        return points_system.loss, points_system.win
    return points_system.draw, points_system.draw


def _record_form(row, letter):
    row.form.insert(0, letter)
    del row.form[FORM_LENGTH:]


def _tally(row, record, letter):
    row.played += 1
    record.played += 1
    if letter == "W":
        row.won += 1
        record.won += 1
    elif letter == "L":
        row.lost += 1
        record.lost += 1
    else:
        row.drawn += 1
        record.drawn += 1
    _record_form(row, letter)


def _apply_result(rows, match, points_system):
    home = rows.setdefault(match.home_team_id, StandingRow(team_id=match.home_team_id))
    away = rows.setdefault(match.away_team_id, StandingRow(team_id=match.away_team_id))
    result = match.result
    home_points, away_points = points_awarded(match, points_system)
    home.points += home_points
    away.points += away_points
    winner = _decided_winner(match)

    # Walkovers are excluded from goals for/against
    if result.outcome == OutcomeKind.WALKOVER and winner is not None:
        home_won = winner == match.home_team_id
        _tally(home, home.home, "W" if home_won else "L")
        _tally(away, away.away, "L" if home_won else "W")
        if home_won:
            home.walkovers_awarded += 1
            away.walkovers_conceded += 1
        else:
            away.walkovers_awarded += 1
            home.walkovers_conceded += 1
        return

    home.goals_for += result.home_goals
    home.goals_against += result.away_goals
    home.home.goals_for += result.home_goals
    home.home.goals_against += result.away_goals
    away.goals_for += result.away_goals
    away.goals_against += result.home_goals
    away.away.goals_for += result.away_goals
    away.away.goals_against += result.home_goals

    if result.outcome == OutcomeKind.PENALTIES and winner is not None:
        home_won = winner == match.home_team_id
        if home_won:
            home.penalty_wins += 1
            away.penalty_losses += 1
        else:
            away.penalty_wins += 1
            home.penalty_losses += 1
        if points_system.penalty_tally == PenaltyTally.WIN_LOSS:
            _tally(home, home.home, "W" if home_won else "L")
            _tally(away, away.away, "L" if home_won else "W")
        else:
            _tally(home, home.home, "D")
            _tally(away, away.away, "D")
        return

    if result.home_goals > result.away_goals:
        _tally(home, home.home, "W")
        _tally(away, away.away, "L")
    elif result.home_goals < result.away_goals:
        _tally(home, home.home, "L")
        _tally(away, away.away, "W")
    else:
        _tally(home, home.home, "D")
        _tally(away, away.away, "D")


def _head_to_head(rows, matches, points_system):
    """Mini-table of the matches played among ``rows`` only."""
    team_ids = {r.team_id for r in rows}
    mini = {tid: StandingRow(team_id=tid) for tid in team_ids}
    for match in matches:
        if match.home_team_id in team_ids and match.away_team_id in team_ids:
            _apply_result(mini, match, points_system)
    for row in mini.values():
        row.goal_difference = row.goals_for - row.goals_against
    return mini


def _criterion_values(criterion, rows, matches, points_system):
    """Map team id → comparable value for one criterion; higher ranks first."""
    if criterion == TieBreaker.POINTS:
        return {r.team_id: r.points for r in rows}
    if criterion == TieBreaker.GOAL_DIFFERENCE:
        return {r.team_id: r.goal_difference for r in rows}
    if criterion == TieBreaker.GOALS_FOR:
        return {r.team_id: r.goals_for for r in rows}
    if criterion == TieBreaker.GOALS_AGAINST:
        return {r.team_id: -r.goals_against for r in rows}
    if criterion == TieBreaker.WINS:
        return {r.team_id: r.won for r in rows}
    if criterion == TieBreaker.AWAY_GOALS:
        return {r.team_id: r.away.goals_for for r in rows}

    mini = _head_to_head(rows, matches, points_system)
    if criterion == TieBreaker.HEAD_TO_HEAD_POINTS:
        return {tid: m.points for tid, m in mini.items()}
    if criterion == TieBreaker.HEAD_TO_HEAD_GOAL_DIFFERENCE:
        return {tid: m.goal_difference for tid, m in mini.items()}
    return {tid: m.goals_for for tid, m in mini.items()}


def _split_ties(rows, matches, criteria, points_system):
    """Order ``rows`` by the first criterion, then break each remaining tie
    with the following ones. Returns the ordered groups of rows that are
    still tied after every criterion."""
    if len(rows) <= 1 or not criteria:
        return [rows]

    criterion, remaining = criteria[0], criteria[1:]
    values = _criterion_values(criterion, rows, matches, points_system)
    ordered = sorted(rows, key=lambda r: values[r.team_id], reverse=True)

    groups = []
    for _value, group in groupby(ordered, key=lambda r: values[r.team_id]):
        groups.extend(_split_ties(list(group), matches, remaining, points_system))
    return groups


def compute_standings(matches, team_ids=(), points_system=None,
                      tie_breakers=DEFAULT_TIE_BREAKERS):
    """Build the ranked table from completed matches.

    Only matches carrying a result count. Teams listed in ``team_ids``
    without a completed match appear with all-zero rows, and when
    ``team_ids`` is given matches involving any other team are left out.
    Rows that are still level once every tie-breaker has been applied
    share a rank (1, 2, 2, 4) and keep their input order.
    """
    points_system = points_system or PointsSystem()
    criteria = [TieBreaker(tb) for tb in tie_breakers]

    rows = {}
    for tid in team_ids:
        rows.setdefault(tid, StandingRow(team_id=tid))

    completed = [m for m in matches if m.result is not None and not m.is_placeholder]
    if team_ids:
        completed = [
            m for m in completed
            if m.home_team_id in rows and m.away_team_id in rows
        ]
    completed.sort(key=lambda m: (m.scheduled_date or date.min, m.round_number))
    for match in completed:
        _apply_result(rows, match, points_system)

    for row in rows.values():
        row.goal_difference = row.goals_for - row.goals_against

    table = []
    position = 1
    for group in _split_ties(list(rows.values()), completed, criteria, points_system):
        for row in group:
            row.rank = position
            table.append(row)
        position += len(group)
    return table
