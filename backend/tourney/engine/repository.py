"""Persistence boundary of the engine.

The tournament engine never holds a database handle; it talks to storage
through the small set of methods below. ``InMemoryTournamentRepository``
is a complete implementation for scripts and tests; the Flask-SQLAlchemy
one lives in ``tourney.services.repository``.
"""
import copy
import itertools
import threading
from typing import Protocol, runtime_checkable

from tourney.engine.errors import ScheduleExistsError


@runtime_checkable
class TournamentRepository(Protocol):
    def load_tournament(self, tournament_id):
        """Return the ``Tournament`` or None."""

    def load_teams(self, tournament_id):
        """Return the registered ``Team`` list in registration order."""

    def load_config(self, tournament_id):
        """Return the ``TournamentConfig``."""

    def save_tournament(self, tournament):
        """Store a new tournament and return its id."""

    def has_schedule(self, tournament_id):
        """True once rounds and matches were saved for the tournament."""

    def save_schedule(self, tournament_id, rounds, matches):
        """Store rounds and matches atomically: all rows or none.

        Raises ``ScheduleExistsError`` when a schedule is already stored.
        """

    def load_results(self, tournament_id):
        """Return the matches that carry a result."""


class InMemoryTournamentRepository:
    def __init__(self):
        self._tournaments = {}
        self._schedules = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def load_tournament(self, tournament_id):
        return self._tournaments.get(tournament_id)

    def load_teams(self, tournament_id):
        tournament = self._tournaments.get(tournament_id)
        return list(tournament.teams) if tournament else []

    def load_config(self, tournament_id):
        tournament = self._tournaments.get(tournament_id)
        return tournament.config if tournament else None

    def save_tournament(self, tournament):
        with self._lock:
            if tournament.id is None:
                tournament.id = next(self._ids)
            self._tournaments[tournament.id] = tournament
        return tournament.id

    def has_schedule(self, tournament_id):
        return tournament_id in self._schedules

    def save_schedule(self, tournament_id, rounds, matches):
        # Copies keep later mutation by the caller out of the stored rows;
        # every match belongs to exactly one round
        rounds = copy.deepcopy(rounds)
        stored = [m for rnd in rounds for m in rnd.matches]
        with self._lock:
            if tournament_id in self._schedules:
                raise ScheduleExistsError(tournament_id)
            for number, match in enumerate(stored, start=1):
                match.id = (tournament_id, number)
            self._schedules[tournament_id] = (rounds, stored)
        return True

    def load_matches(self, tournament_id):
        _rounds, matches = self._schedules.get(tournament_id, ([], []))
        return list(matches)

    def load_rounds(self, tournament_id):
        rounds, _matches = self._schedules.get(tournament_id, ([], []))
        return list(rounds)

    def record_result(self, match_id, result):
        """Attach a result to a stored match. Stands in for the external
        match-reporting functionality."""
        tournament_id = match_id[0]
        for match in self.load_matches(tournament_id):
            if match.id == match_id:
                match.result = result
                return match
        return None

    def load_results(self, tournament_id):
        return [m for m in self.load_matches(tournament_id) if m.result is not None]
