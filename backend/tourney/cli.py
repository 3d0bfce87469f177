from datetime import time

import click
from flask.cli import AppGroup

from tourney.services.tournament_service import (
    create_tournament,
    generate_fixtures,
    get_standings,
)

fixtures_cli = AppGroup("fixtures", help="Fixture scheduling commands.")

DEMO_TEAMS = [
    ("Gor Mahia", "nairobi"),
    ("AFC Leopards", "nairobi"),
    ("Tusker", "nairobi"),
    ("Bandari", "coast"),
    ("Mombasa Stars", "coast"),
    ("Kakamega Homeboyz", None),
    ("Nzoia Sugar", None),
    ("Ulinzi Stars", None),
]

DEMO_VENUES = [
    {
        "name": "Kasarani",
        "slots": [
            {"day_of_week": 5, "start_time": time(15, 0), "end_time": time(17, 0), "capacity": 1},
            {"day_of_week": 6, "start_time": time(15, 0), "end_time": time(17, 0), "capacity": 1},
        ],
    },
    {
        "name": "Nyayo",
        "slots": [
            {"day_of_week": 5, "start_time": time(13, 0), "end_time": time(15, 0), "capacity": 1},
            {"day_of_week": 6, "start_time": time(13, 0), "end_time": time(15, 0), "capacity": 1},
            {"day_of_week": 2, "start_time": time(18, 0), "end_time": time(20, 0), "capacity": 1},
        ],
    },
]


@fixtures_cli.command("seed-demo")
@click.option("--format", "fmt", default="round_robin",
              type=click.Choice(["round_robin", "knockout"]))
@click.option("--legs", default=2, show_default=True)
def seed_demo(fmt, legs):
    """Create a demo tournament with eight teams and two venues."""
    tournament, error = create_tournament({
        "name": f"Demo {fmt.replace('_', ' ').title()}",
        "format": fmt,
        "legs": legs,
        "venues": DEMO_VENUES,
        "constraints": {
            "minimum_rest_days": 2,
            "preferred_days": [5, 6],
            "derby_spacing": 1,
        },
        "teams": [
            {"name": name, "rival_group": group, "status": "confirmed"}
            for name, group in DEMO_TEAMS
        ],
    })
    if error:
        raise click.ClickException(error.message)
    click.echo(f"Created tournament {tournament.id}: {tournament.name}")


@fixtures_cli.command("generate")
@click.argument("tournament_id", type=int)
@click.argument("start_date", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--end-date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--dry-run", is_flag=True, help="Print the schedule without saving it.")
def generate(tournament_id, start_date, end_date, dry_run):
    """Generate fixtures for a tournament."""
    schedule, error = generate_fixtures(
        tournament_id,
        start_date.date(),
        end_date.date() if end_date else None,
        dry_run=dry_run,
    )
    if error:
        raise click.ClickException(error.message)

    for rnd in schedule.rounds:
        click.echo(f"{rnd.name} ({rnd.start_date} - {rnd.end_date})")
        for match in rnd.matches:
            home = match.home_team_id if match.home_team_id is not None else "TBD"
            away = match.away_team_id if match.away_team_id is not None else "TBD"
            click.echo(
                f"  {match.scheduled_date} {match.start_time:%H:%M}  "
                f"{home} vs {away}  @ venue {match.venue_id}"
            )
    for warning in schedule.warnings:
        click.echo(f"warning: {warning}", err=True)
    verb = "Previewed" if dry_run else "Generated"
    click.echo(f"{verb} {len(schedule.matches)} matches in {len(schedule.rounds)} rounds.")


@fixtures_cli.command("standings")
@click.argument("tournament_id", type=int)
def standings(tournament_id):
    """Print the current table."""
    rows, error = get_standings(tournament_id)
    if error:
        raise click.ClickException(error)
    if not rows:
        click.echo("No results recorded yet.")
        return

    click.echo(f"{'#':>3} {'team':>6} {'P':>3} {'W':>3} {'D':>3} {'L':>3} {'GD':>4} {'Pts':>4}")
    for row in rows:
        click.echo(
            f"{row.rank:>3} {row.team_id:>6} {row.played:>3} {row.won:>3} {row.drawn:>3} "
            f"{row.lost:>3} {row.goal_difference:>4} {row.points:>4}"
        )
