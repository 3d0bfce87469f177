import json

from tourney.events import event_bus
from tourney.extensions import db
from tourney.models.match import Match, MatchStatus

from factories import tournament_payload


def _create(client, **overrides):
    resp = client.post("/api/tournaments", json=tournament_payload(**overrides))
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["tournament"]


def _generate(client, tournament_id, **body):
    body.setdefault("start_date", "2026-01-03")
    return client.post(f"/api/tournaments/{tournament_id}/fixtures", json=body)


def _fixtures(client, tournament_id):
    return client.get(f"/api/tournaments/{tournament_id}/fixtures").get_json()["rounds"]


def test_health_check(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "healthy"


# ─── Tournaments ──────────────────────────────────────────────────────────────


def test_create_tournament(client):
    tournament = _create(client)
    assert tournament["name"] == "Coast League"
    assert tournament["format"] == "round_robin"
    assert tournament["status"] == "draft"
    assert len(tournament["teams"]) == 4
    assert tournament["teams"][0]["status"] == "confirmed"
    slots = tournament["venues"][0]["slots"]
    assert [s["day_of_week"] for s in slots] == [5, 6]
    assert slots[0]["start_time"] == "14:00:00"


def test_create_tournament_validation_error(client):
    resp = client.post("/api/tournaments", json={"venues": []})
    assert resp.status_code == 400
    data = resp.get_json()
    assert data["error"] == "Validation failed"
    assert "name" in data["messages"]


def test_create_tournament_config_error(client):
    resp = client.post("/api/tournaments", json=tournament_payload(team_count=1, legs=3))
    assert resp.status_code == 400
    data = resp.get_json()
    assert data["code"] == "config_error"
    assert "need at least 2 teams, have 1" in data["issues"]
    assert "invalid legs 3, must be 1 or 2" in data["issues"]


def test_get_tournament(client):
    tournament = _create(client)
    resp = client.get(f"/api/tournaments/{tournament['id']}")
    assert resp.status_code == 200
    assert resp.get_json()["tournament"]["id"] == tournament["id"]


def test_get_tournament_not_found(client):
    resp = client.get("/api/tournaments/9999")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


# ─── Teams ────────────────────────────────────────────────────────────────────


def test_register_team(client):
    tournament = _create(client)
    resp = client.post(
        f"/api/tournaments/{tournament['id']}/teams",
        json={"name": "Bandari", "rival_group": "coast", "unavailable_dates": ["2026-01-10"]},
    )
    assert resp.status_code == 201
    assert resp.get_json()["team"]["name"] == "Bandari"

    tournament = client.get(f"/api/tournaments/{tournament['id']}").get_json()["tournament"]
    assert len(tournament["teams"]) == 5


def test_register_duplicate_team(client):
    tournament = _create(client)
    resp = client.post(f"/api/tournaments/{tournament['id']}/teams", json={"name": "club 1"})
    assert resp.status_code == 409
    assert "already registered" in resp.get_json()["error"]


def test_register_team_when_full(client):
    tournament = _create(client, max_teams=4)
    resp = client.post(f"/api/tournaments/{tournament['id']}/teams", json={"name": "Extra"})
    assert resp.status_code == 409


def test_register_team_unknown_tournament(client):
    resp = client.post("/api/tournaments/9999/teams", json={"name": "Nobody"})
    assert resp.status_code == 404


def test_register_team_after_fixtures(client):
    tournament = _create(client)
    _generate(client, tournament["id"])
    resp = client.post(f"/api/tournaments/{tournament['id']}/teams", json={"name": "Late"})
    assert resp.status_code == 409


# ─── Readiness & scheduling ───────────────────────────────────────────────────


def test_readiness(client):
    tournament = _create(client, team_count=5)
    resp = client.get(f"/api/tournaments/{tournament['id']}/readiness")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["is_ready"] is True
    assert data["issues"] == []
    assert "odd number of teams will result in bye rounds" in data["warnings"]


def test_readiness_unknown_tournament(client):
    data = client.get("/api/tournaments/9999/readiness").get_json()
    assert data["is_ready"] is False
    assert data["issues"] == ["tournament 9999 not found"]


def test_generate_fixtures(client):
    tournament = _create(client)
    resp = _generate(client, tournament["id"])
    assert resp.status_code == 201
    schedule = resp.get_json()["schedule"]
    assert schedule["match_count"] == 6
    assert len(schedule["rounds"]) == 3
    first = schedule["rounds"][0]["matches"][0]
    assert first["scheduled_date"] == "2026-01-03"
    assert first["start_time"] == "14:00:00"
    assert isinstance(first["id"], int)

    rounds = _fixtures(client, tournament["id"])
    assert [r["name"] for r in rounds] == ["Round 1", "Round 2", "Round 3"]
    assert rounds[0]["matches"][0]["home_team"]["name"] == "Club 1"
    assert rounds[0]["matches"][0]["status"] == "scheduled"

    tournament = client.get(f"/api/tournaments/{tournament['id']}").get_json()["tournament"]
    assert tournament["status"] == "scheduled"


def test_generate_fixtures_twice(client):
    tournament = _create(client)
    _generate(client, tournament["id"])
    resp = _generate(client, tournament["id"])
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "schedule_exists"
    assert Match.query.count() == 6


def test_generate_fixtures_dry_run(client):
    tournament = _create(client)
    resp = _generate(client, tournament["id"], dry_run=True)
    assert resp.status_code == 200
    assert resp.get_json()["schedule"]["match_count"] == 6
    assert Match.query.count() == 0
    assert _fixtures(client, tournament["id"]) == []


def test_generate_fixtures_unsatisfiable(client):
    venues = [{
        "name": "Tiny Ground",
        "slots": [{"day_of_week": 5, "start_time": "14:00:00", "end_time": "16:00:00", "capacity": 1}],
    }]
    tournament = _create(client, venues=venues)
    resp = _generate(client, tournament["id"], end_date="2026-01-09")
    assert resp.status_code == 422
    data = resp.get_json()
    assert data["code"] == "constraint_unsatisfiable"
    assert data["constraint"] == "slot_capacity"
    assert Match.query.count() == 0


def test_generate_fixtures_bad_window(client):
    tournament = _create(client)
    resp = _generate(client, tournament["id"], end_date="2026-01-01")
    assert resp.status_code == 400
    assert "end_date" in resp.get_json()["messages"]


def test_generate_fixtures_unknown_tournament(client):
    resp = _generate(client, 9999)
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "not_found"


# ─── Results & standings ──────────────────────────────────────────────────────


def test_submit_result_and_standings(client):
    tournament = _create(client)
    _generate(client, tournament["id"])
    first, second = _fixtures(client, tournament["id"])[0]["matches"]

    resp = client.post(f"/api/matches/{first['id']}/result", json={"home_score": 2, "away_score": 0})
    assert resp.status_code == 200
    assert resp.get_json()["match"]["status"] == "completed"
    client.post(f"/api/matches/{second['id']}/result", json={"home_score": 1, "away_score": 1})

    resp = client.get(f"/api/tournaments/{tournament['id']}/standings")
    assert resp.status_code == 200
    standings = resp.get_json()["standings"]
    assert [row["rank"] for row in standings] == [1, 2, 2, 4]
    assert standings[0]["team_name"] == first["home_team"]["name"]
    assert standings[0]["points"] == 3
    assert standings[0]["form"] == ["W"]
    assert standings[0]["home"]["won"] == 1
    assert standings[-1]["goal_difference"] == -2


def test_standings_empty_before_results(client):
    tournament = _create(client)
    resp = client.get(f"/api/tournaments/{tournament['id']}/standings")
    assert resp.status_code == 200
    assert resp.get_json()["standings"] == []


def test_standings_unknown_tournament(client):
    assert client.get("/api/tournaments/9999/standings").status_code == 404


def test_result_recorded_once(client):
    tournament = _create(client)
    _generate(client, tournament["id"])
    match = _fixtures(client, tournament["id"])[0]["matches"][0]
    client.post(f"/api/matches/{match['id']}/result", json={"home_score": 1, "away_score": 0})
    resp = client.post(f"/api/matches/{match['id']}/result", json={"home_score": 3, "away_score": 0})
    assert resp.status_code == 400
    assert db.session.get(Match, match["id"]).home_score == 1


def test_result_unknown_match(client):
    resp = client.post("/api/matches/9999/result", json={"home_score": 1, "away_score": 0})
    assert resp.status_code == 404


def test_penalties_need_winner(client):
    resp = client.post(
        "/api/matches/1/result",
        json={"home_score": 1, "away_score": 1, "outcome": "penalties"},
    )
    assert resp.status_code == 400
    assert "winner_id" in resp.get_json()["messages"]


def test_walkover_result(client):
    tournament = _create(client)
    _generate(client, tournament["id"])
    match = _fixtures(client, tournament["id"])[0]["matches"][0]
    resp = client.post(
        f"/api/matches/{match['id']}/result",
        json={"home_score": 0, "away_score": 0, "outcome": "walkover",
              "winner_id": match["away_team_id"]},
    )
    assert resp.status_code == 200
    assert resp.get_json()["match"]["outcome"] == "walkover"

    standings = client.get(f"/api/tournaments/{tournament['id']}/standings").get_json()["standings"]
    assert standings[0]["team_id"] == match["away_team_id"]
    assert standings[0]["walkovers_awarded"] == 1
    assert standings[0]["goals_for"] == 0


def test_winner_must_play_in_match(client):
    tournament = _create(client)
    _generate(client, tournament["id"])
    match = _fixtures(client, tournament["id"])[0]["matches"][0]
    resp = client.post(
        f"/api/matches/{match['id']}/result",
        json={"home_score": 0, "away_score": 0, "outcome": "walkover", "winner_id": 9999},
    )
    assert resp.status_code == 400


# ─── Knockout ─────────────────────────────────────────────────────────────────


def test_knockout_winners_advance(client):
    tournament = _create(client, format="knockout")
    resp = _generate(client, tournament["id"])
    assert resp.status_code == 201
    semis, final = _fixtures(client, tournament["id"])
    assert final["name"] == "Final"
    final_match = final["matches"][0]
    assert final_match["home_team_id"] is None

    resp = client.post(f"/api/matches/{final_match['id']}/result", json={"home_score": 1, "away_score": 0})
    assert resp.status_code == 400

    top, bottom = semis["matches"]
    client.post(f"/api/matches/{top['id']}/result", json={"home_score": 0, "away_score": 2})
    resp = client.post(
        f"/api/matches/{bottom['id']}/result",
        json={"home_score": 1, "away_score": 1, "outcome": "penalties",
              "winner_id": bottom["home_team_id"]},
    )
    assert resp.status_code == 200

    final_row = db.session.get(Match, final_match["id"])
    assert final_row.home_team_id == top["away_team_id"]
    assert final_row.away_team_id == bottom["home_team_id"]
    assert final_row.status == MatchStatus.SCHEDULED


def test_knockout_draw_needs_shootout(client):
    tournament = _create(client, format="knockout")
    _generate(client, tournament["id"])
    match = _fixtures(client, tournament["id"])[0]["matches"][0]
    resp = client.post(f"/api/matches/{match['id']}/result", json={"home_score": 1, "away_score": 1})
    assert resp.status_code == 400
    assert "shoot-out" in resp.get_json()["error"]


def test_two_legged_tie_level_on_aggregate_needs_shootout(client):
    tournament = _create(client, format="knockout", legs=2)
    _generate(client, tournament["id"])
    first, second = (
        Match.query.filter_by(tournament_id=tournament["id"], bracket_position=2)
        .order_by(Match.leg)
        .all()
    )
    first_id, second_id = first.id, second.id

    # A level first leg is fine while the return leg is still to come
    resp = client.post(f"/api/matches/{first_id}/result", json={"home_score": 1, "away_score": 1})
    assert resp.status_code == 200

    resp = client.post(f"/api/matches/{second_id}/result", json={"home_score": 0, "away_score": 0})
    assert resp.status_code == 400
    assert "shoot-out" in resp.get_json()["error"]
    assert db.session.get(Match, second_id).status == MatchStatus.SCHEDULED

    resp = client.post(
        f"/api/matches/{second_id}/result",
        json={"home_score": 0, "away_score": 0, "outcome": "penalties",
              "winner_id": second.home_team_id},
    )
    assert resp.status_code == 200
    final = Match.query.filter_by(tournament_id=tournament["id"], bracket_position=1).one()
    assert final.home_team_id == second.home_team_id


# ─── Events ───────────────────────────────────────────────────────────────────


def test_events_published(client):
    tournament = _create(client)
    q = event_bus.subscribe()
    _generate(client, tournament["id"])
    match = _fixtures(client, tournament["id"])[0]["matches"][0]
    client.post(f"/api/matches/{match['id']}/result", json={"home_score": 1, "away_score": 0})

    types = []
    while not q.empty():
        types.append(json.loads(q.get_nowait())["type"])
    assert types == ["fixtures_generated", "result_recorded", "standings_updated"]
    event_bus.unsubscribe(q)
