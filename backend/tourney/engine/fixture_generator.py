import logging
import math
from collections import Counter, defaultdict, namedtuple
from datetime import timedelta

from tourney.engine.errors import (
    BlockingConstraint,
    ConfigError,
    ConstraintUnsatisfiableError,
)
from tourney.engine.types import Match, Round, Schedule, TournamentFormat

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 365
DEFAULT_MAX_BACKTRACKS = 5000

Placement = namedtuple("Placement", ["day", "venue", "slot"])


# ── Configuration checks ─────────────────────────────────────────────────────

def validate_config(config, teams):
    """Return the structural problems that prevent generation.

    An empty list means the search may start. Messages are meant to be
    shown to a tournament organiser as-is.
    """
    issues = []
    count = len(teams)

    if config.min_teams > config.max_teams:
        issues.append(
            f"minimum teams ({config.min_teams}) is greater than maximum teams ({config.max_teams})"
        )
    if count < config.min_teams:
        issues.append(f"need at least {config.min_teams} teams, have {count}")
    if count > config.max_teams:
        issues.append(f"at most {config.max_teams} teams allowed, have {count}")
    if count < 2 and config.min_teams < 2:
        issues.append(f"need at least 2 teams to schedule matches, have {count}")

    # Teams not stored yet have no id and are told apart by name
    seen_ids = set()
    seen_names = set()
    for team in teams:
        if team.id is not None:
            if team.id in seen_ids:
                issues.append(f"team {team.id} is registered more than once")
            seen_ids.add(team.id)
            continue
        name = team.name.strip().lower()
        if name in seen_names:
            issues.append(f"team '{team.name}' is registered more than once")
        seen_names.add(name)

    if config.legs not in (1, 2):
        issues.append(f"invalid legs {config.legs}, must be 1 or 2")

    if not config.venues:
        issues.append("no venues configured")
    elif config.slot_count == 0:
        issues.append("no time slots configured")

    for venue in config.venues:
        for slot in venue.slots:
            label = f"{venue.name} slot {slot.start_time:%H:%M}"
            if slot.capacity < 1:
                issues.append(f"{label} has capacity {slot.capacity}, must be at least 1")
            if not 0 <= slot.day_of_week <= 6:
                issues.append(f"{label} has invalid day of week {slot.day_of_week}")
            if slot.end_time <= slot.start_time:
                issues.append(f"{label} ends before it starts")

    constraints = config.constraints
    if constraints.minimum_rest_days < 0:
        issues.append("minimum rest days cannot be negative")
    if constraints.derby_spacing < 0:
        issues.append("derby spacing cannot be negative")
    if constraints.maximum_matches_per_day is not None and constraints.maximum_matches_per_day < 1:
        issues.append("maximum matches per day must be at least 1")

    return issues


# ── Pairing ──────────────────────────────────────────────────────────────────

def round_robin_pairings(team_ids, legs=1):
    """Pair teams with the circle method.

    Returns a list of rounds, each a list of ``(home, away)`` tuples. With
    an odd number of teams a bye is added and the team drawn against it
    sits the round out. The second leg repeats the first with home and
    away swapped.
    8 teams → 7 rounds of 4 matches per leg.
    """
    slots = list(team_ids)
    if len(slots) % 2 != 0:
        slots.append(None)

    n = len(slots)
    half = n // 2
    fixed = slots[0]
    rotating = slots[1:]

    first_leg = []
    for r in range(n - 1):
        # The fixed team alternates home and away to keep venues balanced
        pairs = [(fixed, rotating[0]) if r % 2 == 0 else (rotating[0], fixed)]
        for i in range(1, half):
            pairs.append((rotating[i], rotating[n - 1 - i]))
        first_leg.append([(h, a) for h, a in pairs if h is not None and a is not None])
        rotating = [rotating[-1]] + rotating[:-1]

    rounds = list(first_leg)
    if legs == 2:
        rounds.extend([(a, h) for h, a in pairs] for pairs in first_leg)
    return rounds


def _next_power_of_2(n):
    return 1 << (n - 1).bit_length()


def _knockout_round_name(round_number, bracket_size):
    remaining = bracket_size // (2 ** (round_number - 1))
    names = {
        2: "Final",
        4: "Semi-Finals",
        8: "Quarter-Finals",
        16: "Round of 16",
    }
    return names.get(remaining, f"Round {round_number}")


# ── Placement state ──────────────────────────────────────────────────────────

def _slot_key(venue, slot, day):
    # Identity, not value: venues and slots need not carry database ids
    return id(venue), id(slot), day


class _PlacementState:
    """Bookings made so far. Every booking can be undone exactly."""

    def __init__(self):
        self.slot_use = Counter()
        self.day_use = Counter()
        self.team_dates = defaultdict(Counter)
        self.derby_dates = defaultdict(Counter)
        self.placed = {}

    def book(self, index, match, placement, derby):
        self.placed[index] = placement
        self.slot_use[_slot_key(placement.venue, placement.slot, placement.day)] += 1
        self.day_use[placement.day] += 1
        for team_id in match.team_ids:
            self.team_dates[team_id][placement.day] += 1
            if derby:
                self.derby_dates[team_id][placement.day] += 1

    def release(self, index, match, derby):
        placement = self.placed.pop(index)
        self.slot_use[_slot_key(placement.venue, placement.slot, placement.day)] -= 1
        self.day_use[placement.day] -= 1
        for team_id in match.team_ids:
            self.team_dates[team_id][placement.day] -= 1
            if derby:
                self.derby_dates[team_id][placement.day] -= 1


# ── Generator ────────────────────────────────────────────────────────────────

class FixtureGenerator:
    """Turn teams and a tournament configuration into dated fixtures.

    Generation is all-or-nothing: either every match gets a date, venue
    and slot satisfying the constraints, or ``ConstraintUnsatisfiableError``
    is raised and nothing is returned. Identical inputs always produce the
    identical schedule.
    """

    def __init__(self, config, horizon_days=DEFAULT_HORIZON_DAYS,
                 max_backtracks=DEFAULT_MAX_BACKTRACKS):
        self.config = config
        self.constraints = config.constraints
        self.horizon_days = horizon_days
        self.max_backtracks = max_backtracks
        self._teams = {}
        self._dates = []
        self._feeders = {}
        self._derby = {}

    def generate(self, teams, start_date, end_date=None):
        issues = validate_config(self.config, teams)
        if issues:
            raise ConfigError(issues)

        if end_date is None:
            end_date = start_date + timedelta(days=self.horizon_days - 1)
        if end_date < start_date:
            raise ConfigError(f"end date {end_date} is before start date {start_date}")

        self._teams = {t.id: t for t in teams}
        self._dates = self._candidate_dates(start_date, end_date)
        self._feeders = {}

        if self.config.format == TournamentFormat.KNOCKOUT:
            rounds, matches, warnings = self._build_knockout(teams)
        else:
            rounds, matches, warnings = self._build_round_robin(teams)

        self._derby = {
            i: self._is_derby(m) for i, m in enumerate(matches)
        }
        state = self._place_all(matches)

        for index, match in enumerate(matches):
            placement = state.placed[index]
            match.scheduled_date = placement.day
            match.venue_id = placement.venue.id
            match.slot_id = placement.slot.id
            match.start_time = placement.slot.start_time

        for rnd in rounds:
            days = [m.scheduled_date for m in rnd.matches]
            rnd.start_date = min(days) if days else None
            rnd.end_date = max(days) if days else None

        logger.debug(
            "Scheduled %d matches in %d rounds between %s and %s",
            len(matches), len(rounds),
            min(m.scheduled_date for m in matches) if matches else None,
            max(m.scheduled_date for m in matches) if matches else None,
        )
        return Schedule(rounds=rounds, matches=matches, warnings=warnings)

    # ── Match construction ───────────────────────────────────────────────

    def _build_round_robin(self, teams):
        team_ids = [t.id for t in teams]
        pairings = round_robin_pairings(team_ids, self.config.legs)
        rounds_per_leg = len(pairings) // self.config.legs

        rounds = []
        matches = []
        for number, pairs in enumerate(pairings, start=1):
            leg = 1 if number <= rounds_per_leg else 2
            if leg == 1:
                name = f"Round {number}"
            else:
                name = f"Round {number - rounds_per_leg} (Return)"
            rnd = Round(number=number, name=name)
            for home_id, away_id in pairs:
                match = Match(
                    home_team_id=home_id,
                    away_team_id=away_id,
                    round_number=number,
                    leg=leg,
                )
                rnd.matches.append(match)
                matches.append(match)
            rounds.append(rnd)

        warnings = []
        if len(teams) % 2 != 0:
            warnings.append("Odd number of teams: one team has a bye each round")
        return rounds, matches, warnings

    def _build_knockout(self, teams):
        """Single-elimination bracket, positions numbered as a binary heap
        (1 = final, 2-3 = semi-finals, ...). Leaves hold the first-round
        ties; byes go to the first-listed teams and are written straight
        into the parent tie."""
        n = len(teams)
        bracket_size = _next_power_of_2(n)
        num_rounds = int(math.log2(bracket_size))
        num_byes = bracket_size - n
        leaf_start = bracket_size // 2

        bye_teams = teams[:num_byes]
        playing = teams[num_byes:]

        # position -> [home_id, away_id]; a leaf holding a bye has no tie
        slots = {bp: [None, None] for bp in range(1, bracket_size)}
        real_ties = set(range(1, leaf_start))
        for i, team in enumerate(bye_teams):
            bp = leaf_start + i
            slots[bp // 2][bp % 2] = team.id
        for k, bp in enumerate(range(leaf_start + num_byes, bracket_size)):
            slots[bp] = [playing[2 * k].id, playing[2 * k + 1].id]
            real_ties.add(bp)

        rounds = {}
        tie_matches = {}
        for bp in sorted(real_ties, key=lambda p: (-int(math.log2(p)), p)):
            depth = int(math.log2(bp))
            number = num_rounds - depth
            legs = 1 if bp == 1 else self.config.legs
            home_id, away_id = slots[bp]
            rnd = rounds.setdefault(
                number, Round(number=number, name=_knockout_round_name(number, bracket_size))
            )
            tie_matches[bp] = []
            for leg in range(1, legs + 1):
                if leg == 1:
                    h, a = home_id, away_id
                else:
                    h, a = away_id, home_id
                match = Match(
                    home_team_id=h,
                    away_team_id=a,
                    round_number=number,
                    leg=leg,
                    bracket_position=bp,
                )
                rnd.matches.append(match)
                tie_matches[bp].append(match)

        ordered_rounds = [rounds[k] for k in sorted(rounds)]
        matches = [m for rnd in ordered_rounds for m in rnd.matches]
        position = {id(m): i for i, m in enumerate(matches)}

        self._feeders = {}
        for bp, legs in tie_matches.items():
            feeders = []
            for child in (2 * bp, 2 * bp + 1):
                if child in tie_matches:
                    feeders.extend(position[id(m)] for m in tie_matches[child])
            for leg_index, match in enumerate(legs):
                own = feeders + [position[id(m)] for m in legs[:leg_index]]
                if own:
                    self._feeders[position[id(match)]] = own

        warnings = []
        if num_byes:
            warnings.append(f"{num_byes} team(s) receive a first-round bye")
        return ordered_rounds, matches, warnings

    # ── Candidate search ─────────────────────────────────────────────────

    def _candidate_dates(self, start_date, end_date):
        """Dates on which at least one venue has a slot.

        Weeks counted from ``start_date`` are searched in order; inside a
        week preferred days come before the others.
        """
        weekdays = {s.day_of_week for v in self.config.venues for s in v.slots}
        preferred = set(self.constraints.preferred_days)
        days = []
        day = start_date
        while day <= end_date:
            if day.weekday() in weekdays:
                days.append(day)
            day += timedelta(days=1)
        return sorted(
            days,
            key=lambda d: ((d - start_date).days // 7, d.weekday() not in preferred, d),
        )

    def _is_derby(self, match):
        if match.is_placeholder:
            return False
        home = self._teams[match.home_team_id]
        away = self._teams[match.away_team_id]
        return home.is_rival_of(away)

    def _rest_gap(self):
        return max(1, self.constraints.minimum_rest_days)

    def _not_before(self, index, state):
        feeders = self._feeders.get(index)
        if not feeders:
            return None
        latest = max(state.placed[f].day for f in feeders)
        return latest + timedelta(days=self._rest_gap())

    def _team_conflict(self, index, match, day, state):
        rest = self.constraints.minimum_rest_days
        for team_id in match.team_ids:
            team = self._teams[team_id]
            if day in team.unavailable_dates:
                return BlockingConstraint.TEAM_UNAVAILABLE
            booked = state.team_dates[team_id]
            if booked[day]:
                return BlockingConstraint.TEAM_DATE_CLASH
            if rest > 1 and any(
                count and abs((day - other).days) < rest
                for other, count in booked.items()
            ):
                return BlockingConstraint.REST_DAYS

        spacing = self.constraints.derby_spacing
        if self._derby[index] and spacing > 0:
            for team_id in match.team_ids:
                if any(
                    count and abs((day - other).days) < spacing
                    for other, count in state.derby_dates[team_id].items()
                ):
                    return BlockingConstraint.DERBY_SPACING
        return None

    def _candidates(self, index, match, state, rejections):
        """Yield legal placements for one match in search order.

        Checks are evaluated lazily against ``state``; the caller only
        resumes this generator after undoing everything booked since it
        last yielded, so the state it sees is unchanged.
        """
        blackout = self.constraints.blackout_dates
        cap = self.constraints.maximum_matches_per_day
        not_before = self._not_before(index, state)
        for day in self._dates:
            if not_before is not None and day < not_before:
                rejections[BlockingConstraint.BRACKET_ORDER] += 1
                continue
            if day in blackout:
                rejections[BlockingConstraint.BLACKOUT_DATE] += 1
                continue
            conflict = self._team_conflict(index, match, day, state)
            if conflict is not None:
                rejections[conflict] += 1
                continue
            if cap is not None and state.day_use[day] >= cap:
                rejections[BlockingConstraint.DAILY_MATCH_LIMIT] += 1
                continue

            for venue in self.config.venues:
                slots = venue.slots_on(day.weekday())
                if not slots:
                    continue
                if day in venue.blocked_dates:
                    rejections[BlockingConstraint.VENUE_UNAVAILABLE] += 1
                    continue
                for slot in slots:
                    if state.slot_use[_slot_key(venue, slot, day)] >= slot.capacity:
                        rejections[BlockingConstraint.SLOT_CAPACITY] += 1
                        continue
                    yield Placement(day, venue, slot)

    def _place_all(self, matches):
        """Depth-first placement with an explicit stack of candidate iterators.

        Match ``i`` is only revisited after every match after it has been
        released, so each iterator resumes against the state it was
        suspended in.
        """
        state = _PlacementState()
        iterators = [None] * len(matches)
        rejections = [None] * len(matches)
        deepest_index = -1
        deepest_rejections = Counter()
        backtracks = 0
        index = 0

        while index < len(matches):
            if iterators[index] is None:
                rejections[index] = Counter()
                iterators[index] = self._candidates(
                    index, matches[index], state, rejections[index]
                )

            placement = next(iterators[index], None)
            if placement is not None:
                state.book(index, matches[index], placement, self._derby[index])
                index += 1
                continue

            if index >= deepest_index:
                deepest_index = index
                deepest_rejections = Counter(rejections[index])
            iterators[index] = None

            if index == 0 or backtracks >= self.max_backtracks:
                raise self._failure(
                    matches[deepest_index], deepest_rejections,
                    budget_exhausted=index > 0,
                )

            backtracks += 1
            index -= 1
            state.release(index, matches[index], self._derby[index])

        if backtracks:
            logger.debug("Placement needed %d backtracks", backtracks)
        return state

    def _failure(self, match, rejections, budget_exhausted=False):
        if rejections:
            constraint = rejections.most_common(1)[0][0]
        elif budget_exhausted:
            constraint = BlockingConstraint.SEARCH_BUDGET
        else:
            constraint = BlockingConstraint.SEARCH_HORIZON
        if budget_exhausted:
            rejections = Counter(rejections)
            rejections[BlockingConstraint.SEARCH_BUDGET] += 1
        logger.warning(
            "Fixture generation failed at %s (%s)", match.describe(), constraint.value
        )
        return ConstraintUnsatisfiableError(match, constraint, rejections)
