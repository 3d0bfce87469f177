from flask import Blueprint, request, jsonify, Response

from tourney.extensions import db, limiter
from tourney.models.tournament import Tournament
from tourney.models.round import Round
from tourney.models.match import Match
from tourney.schemas import (
    TournamentSchema,
    CreateTournamentSchema,
    ReadinessQuerySchema,
    TeamSchema,
    CreateTeamSchema,
    MatchSchema,
    RoundSchema,
    GenerateFixturesSchema,
    SubmitResultSchema,
    ScheduleSchema,
    StandingRowSchema,
)
from tourney.services.tournament_service import (
    create_tournament,
    register_team,
    check_readiness,
    generate_fixtures,
    get_standings,
)
from tourney.services.match_service import record_result

api_bp = Blueprint("api", __name__)

# Schema instances
tournament_schema = TournamentSchema()
create_tournament_schema = CreateTournamentSchema()
readiness_query_schema = ReadinessQuerySchema()

team_schema = TeamSchema()
create_team_schema = CreateTeamSchema()

match_schema = MatchSchema()
rounds_schema = RoundSchema(many=True)
generate_fixtures_schema = GenerateFixturesSchema()
submit_result_schema = SubmitResultSchema()
schedule_schema = ScheduleSchema()

standings_schema = StandingRowSchema(many=True)


# ─── Tournaments ──────────────────────────────────────────────────────────────

@api_bp.route("/tournaments", methods=["POST"])
@limiter.limit("30 per minute")
def create_tournament_route():
    data = create_tournament_schema.load(request.get_json())
    tournament, error = create_tournament(data)
    if error:
        # Rendered by the EngineError handler
        raise error
    return jsonify({"tournament": tournament_schema.dump(tournament)}), 201


@api_bp.route("/tournaments/<int:tournament_id>", methods=["GET"])
def get_tournament(tournament_id):
    tournament = db.get_or_404(Tournament, tournament_id)
    return jsonify({"tournament": tournament_schema.dump(tournament)}), 200


@api_bp.route("/tournaments/<int:tournament_id>/teams", methods=["POST"])
def register_team_route(tournament_id):
    data = create_team_schema.load(request.get_json())
    team, error = register_team(tournament_id, data)
    if error:
        return jsonify({"error": error}), 404 if "not found" in error.lower() else 409
    return jsonify({
        "team": {
            "id": team.id,
            "name": team.name,
            "rival_group": team.rival_group,
            "status": team.status.value,
        }
    }), 201


@api_bp.route("/tournaments/<int:tournament_id>/readiness", methods=["GET"])
def readiness_route(tournament_id):
    query = readiness_query_schema.load(request.args)
    report = check_readiness(tournament_id, query["start_date"], query["end_date"])
    return jsonify(report.to_dict()), 200


# ─── Scheduling ───────────────────────────────────────────────────────────────

@api_bp.route("/tournaments/<int:tournament_id>/fixtures", methods=["POST"])
@limiter.limit("10 per minute")
def generate_fixtures_route(tournament_id):
    data = generate_fixtures_schema.load(request.get_json())
    schedule, error = generate_fixtures(
        tournament_id, data["start_date"], data["end_date"], data["dry_run"]
    )
    if error:
        raise error
    return jsonify({
        "message": "Fixtures previewed" if data["dry_run"] else "Fixtures generated",
        "schedule": schedule_schema.dump(schedule),
    }), 200 if data["dry_run"] else 201


@api_bp.route("/tournaments/<int:tournament_id>/fixtures", methods=["GET"])
def get_fixtures(tournament_id):
    db.get_or_404(Tournament, tournament_id)
    rounds = Round.query.filter_by(tournament_id=tournament_id).order_by(Round.number).all()
    return jsonify({"rounds": rounds_schema.dump(rounds)}), 200


# ─── Results & standings ──────────────────────────────────────────────────────

@api_bp.route("/matches/<int:match_id>", methods=["GET"])
def get_match(match_id):
    match = db.get_or_404(Match, match_id)
    return jsonify({"match": match_schema.dump(match)}), 200


@api_bp.route("/matches/<int:match_id>/result", methods=["POST"])
def submit_result_route(match_id):
    data = submit_result_schema.load(request.get_json())
    match, error = record_result(match_id, data)
    if error:
        return jsonify({"error": error}), 404 if "not found" in error.lower() else 400
    return jsonify({"match": match_schema.dump(match)}), 200


@api_bp.route("/tournaments/<int:tournament_id>/standings", methods=["GET"])
def get_standings_route(tournament_id):
    rows, error = get_standings(tournament_id)
    if error:
        return jsonify({"error": error}), 404

    tournament = db.session.get(Tournament, tournament_id)
    names = {t.id: t.name for t in tournament.teams}
    standings = standings_schema.dump(rows)
    for row in standings:
        row["team_name"] = names.get(row["team_id"])
    return jsonify({"standings": standings}), 200


# ─── SSE Event Stream ─────────────────────────────────────────────────────────

@api_bp.route("/events/stream", methods=["GET"])
@limiter.exempt
def event_stream():
    import queue as _queue
    from tourney.events import event_bus

    def generate():
        q = event_bus.subscribe()
        try:
            while True:
                try:
                    msg = q.get(timeout=30)
                    yield f"data: {msg}\n\n"
                except _queue.Empty:
                    yield ": keepalive\n\n"
        except GeneratorExit:
            pass
        finally:
            event_bus.unsubscribe(q)

    return Response(
        generate(),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )
