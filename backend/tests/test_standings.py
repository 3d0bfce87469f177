"""Tests for the standings table: points, tallies, tie-breakers and ranks."""
from datetime import date

from tourney.engine.standings import compute_standings, points_awarded
from tourney.engine.types import (
    Match,
    MatchResult,
    OutcomeKind,
    PenaltyTally,
    PointsSystem,
    TieBreaker,
)

A, B, C, D = "A", "B", "C", "D"


def played(home, away, home_goals, away_goals, round_number=1, day=None,
           outcome=OutcomeKind.NORMAL, winner_id=None):
    return Match(
        home_team_id=home,
        away_team_id=away,
        round_number=round_number,
        scheduled_date=day,
        result=MatchResult(home_goals, away_goals, outcome, winner_id),
    )


def by_team(table):
    return {row.team_id: row for row in table}


class TestPoints:
    def test_normal_results(self):
        ps = PointsSystem()
        assert points_awarded(played(A, B, 2, 0), ps) == (3, 0)
        assert points_awarded(played(A, B, 0, 1), ps) == (0, 3)
        assert points_awarded(played(A, B, 1, 1), ps) == (1, 1)

    def test_penalty_win(self):
        match = played(A, B, 1, 1, outcome=OutcomeKind.PENALTIES, winner_id=B)
        assert points_awarded(match, PointsSystem(win_penalties=2, loss=0)) == (0, 2)

    def test_walkover(self):
        match = played(A, B, 0, 0, outcome=OutcomeKind.WALKOVER, winner_id=A)
        assert points_awarded(match, PointsSystem(walkover=3)) == (3, 0)

    def test_unknown_winner_falls_back_to_score(self):
        match = played(A, B, 1, 1, outcome=OutcomeKind.PENALTIES, winner_id="Z")
        assert points_awarded(match, PointsSystem()) == (1, 1)


class TestComputeStandings:
    def test_example_table(self):
        matches = [played(A, B, 2, 0), played(C, D, 1, 1)]
        table = compute_standings(
            matches,
            team_ids=[A, B, C, D],
            points_system=PointsSystem(win=3, draw=1, loss=0),
        )

        assert [row.team_id for row in table] == [A, C, D, B]
        assert [row.rank for row in table] == [1, 2, 2, 4]
        rows = by_team(table)
        assert (rows[A].points, rows[A].goal_difference) == (3, 2)
        assert (rows[C].points, rows[C].goal_difference) == (1, 0)
        assert (rows[D].points, rows[D].goal_difference) == (1, 0)
        assert (rows[B].points, rows[B].goal_difference) == (0, -2)

    def test_empty_input(self):
        assert compute_standings([]) == []

    def test_registered_team_without_matches(self):
        table = compute_standings([played(A, B, 1, 0)], team_ids=[A, B, C])
        rows = by_team(table)
        assert rows[C].played == 0
        assert rows[C].rank == 2
        assert rows[B].rank == 3

    def test_matches_with_unlisted_teams_ignored(self):
        matches = [played(A, B, 1, 0), played(C, A, 3, 0)]
        table = compute_standings(matches, team_ids=[A, B])
        rows = by_team(table)
        assert set(rows) == {A, B}
        assert rows[A].played == 1
        assert rows[A].goals_against == 0

    def test_unplayed_and_placeholder_matches_ignored(self):
        pending = Match(home_team_id=A, away_team_id=C, round_number=2)
        placeholder = Match(
            home_team_id=None, away_team_id=B, round_number=2,
            result=MatchResult(1, 0),
        )
        table = compute_standings([played(A, B, 1, 0), pending, placeholder])
        rows = by_team(table)
        assert rows[A].played == 1
        assert rows[B].played == 1
        assert C not in rows

    def test_points_conservation(self):
        ps = PointsSystem()
        matches = [
            played(A, B, 3, 1),
            played(C, D, 0, 0),
            played(A, C, 1, 2),
            played(B, D, 2, 2),
        ]
        table = compute_standings(matches, points_system=ps)
        expected = sum(sum(points_awarded(m, ps)) for m in matches)
        assert sum(row.points for row in table) == expected
        assert sum(row.goals_for for row in table) == sum(row.goals_against for row in table)

    def test_idempotent(self):
        matches = [played(A, B, 2, 1), played(C, D, 0, 3), played(A, D, 1, 1)]

        def snapshot():
            return [
                (r.team_id, r.rank, r.points, r.goal_difference, list(r.form))
                for r in compute_standings(matches, team_ids=[A, B, C, D])
            ]

        assert snapshot() == snapshot()

    def test_home_and_away_split(self):
        table = compute_standings([played(A, B, 2, 1), played(B, A, 0, 0, round_number=2)])
        rows = by_team(table)
        assert (rows[A].home.won, rows[A].home.goals_for) == (1, 2)
        assert (rows[A].away.drawn, rows[A].away.played) == (1, 1)
        assert (rows[B].away.lost, rows[B].away.goals_against) == (1, 2)
        assert rows[B].home.drawn == 1


class TestOutcomes:
    def test_walkover_excluded_from_goals(self):
        match = played(A, B, 3, 0, outcome=OutcomeKind.WALKOVER, winner_id=A)
        rows = by_team(compute_standings([match]))
        assert rows[A].points == 3
        assert rows[A].goals_for == 0
        assert rows[A].won == 1
        assert rows[A].walkovers_awarded == 1
        assert rows[B].walkovers_conceded == 1
        assert rows[B].lost == 1

    def test_penalties_counted_as_draw_by_default(self):
        match = played(A, B, 1, 1, outcome=OutcomeKind.PENALTIES, winner_id=A)
        rows = by_team(compute_standings([match]))
        assert rows[A].points == 2
        assert rows[B].points == 0
        assert rows[A].drawn == rows[B].drawn == 1
        assert rows[A].penalty_wins == 1
        assert rows[B].penalty_losses == 1
        assert rows[A].goals_for == 1

    def test_penalties_as_win_loss(self):
        match = played(A, B, 1, 1, outcome=OutcomeKind.PENALTIES, winner_id=A)
        ps = PointsSystem(penalty_tally=PenaltyTally.WIN_LOSS)
        rows = by_team(compute_standings([match], points_system=ps))
        assert rows[A].won == 1
        assert rows[B].lost == 1
        assert rows[A].form == ["W"]


class TestForm:
    def test_form_newest_first(self):
        matches = [
            played(A, B, 1, 0, round_number=1, day=date(2026, 1, 3)),
            played(A, C, 0, 0, round_number=2, day=date(2026, 1, 10)),
            played(D, A, 2, 0, round_number=3, day=date(2026, 1, 17)),
        ]
        rows = by_team(compute_standings(list(reversed(matches))))
        assert rows[A].form == ["L", "D", "W"]

    def test_form_keeps_last_five(self):
        matches = [
            played(A, B, 1, 0, round_number=n, day=date(2026, 1, n))
            for n in range(1, 8)
        ]
        matches.append(played(A, B, 0, 1, round_number=8, day=date(2026, 1, 8)))
        rows = by_team(compute_standings(matches))
        assert rows[A].form == ["L", "W", "W", "W", "W"]


class TestTieBreakers:
    def test_goal_difference_then_goals_for(self):
        matches = [
            played(A, C, 3, 1),
            played(B, D, 2, 0),
            played(A, B, 0, 0, round_number=2),
        ]
        table = compute_standings(matches)
        # A and B both +2 on 4 points, A scored more
        assert [r.team_id for r in table[:2]] == [A, B]
        assert [r.rank for r in table[:2]] == [1, 2]

    def test_order_is_caller_supplied(self):
        matches = [played(A, C, 1, 0), played(B, D, 4, 0), played(A, B, 1, 0, round_number=2)]
        goals_first = compute_standings(
            matches, tie_breakers=[TieBreaker.GOALS_FOR, TieBreaker.POINTS]
        )
        points_first = compute_standings(
            matches, tie_breakers=[TieBreaker.POINTS, TieBreaker.GOALS_FOR]
        )
        assert goals_first[0].team_id == B
        assert points_first[0].team_id == A

    def test_head_to_head_uses_tied_teams_only(self):
        matches = [
            played(A, B, 0, 1),
            played(A, C, 5, 0),
            played(B, D, 0, 2),
            played(C, D, 0, 0),
        ]
        # A and B finish on 3 points; A has the better goal difference
        # but B won their meeting
        criteria = [TieBreaker.POINTS, TieBreaker.HEAD_TO_HEAD_POINTS, TieBreaker.GOAL_DIFFERENCE]
        table = compute_standings(matches, tie_breakers=criteria)
        order = [r.team_id for r in table]
        assert order.index(B) < order.index(A)

        table = compute_standings(matches, tie_breakers=[TieBreaker.POINTS, TieBreaker.GOAL_DIFFERENCE])
        order = [r.team_id for r in table]
        assert order.index(A) < order.index(B)

    def test_goals_against_prefers_fewer(self):
        matches = [played(A, C, 2, 2), played(B, D, 0, 0)]
        table = compute_standings(
            matches, team_ids=[A, B, C, D],
            tie_breakers=[TieBreaker.POINTS, TieBreaker.GOALS_AGAINST],
        )
        assert table[0].team_id == B
        assert table[0].rank == 1

    def test_accepts_string_criteria(self):
        table = compute_standings([played(A, B, 0, 1)], tie_breakers=["points"])
        assert table[0].team_id == B
