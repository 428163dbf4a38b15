"""Weekly workout streaks and the monthly leaderboard.

A week (ISO-8601, Monday to Sunday) "qualifies" once it holds at least
``QUALIFYING_WEEK_MIN_WORKOUTS`` workouts. Streaks are runs of consecutive
qualifying weeks:

- longest streak: the longest run anywhere in the user's history;
- current streak: the run ending at the most recent *completed* qualifying
  week. The week in progress never counts until it is over.

Everything here is pure: callers pass dates (and monthly counts) in and get
results back. The queries that feed these functions live in
``app.services.workout_history``.
"""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, tzinfo
from typing import Any

from app.core.constants import (
    CURRENT_STREAK_MAX_WEEKS,
    CURRENT_STREAK_SEARCH_WEEKS,
    LEADERBOARD_MIN_MONTHLY_WORKOUTS,
    QUALIFYING_WEEK_MIN_WORKOUTS,
    WEEKS_PER_YEAR,
)

logger = logging.getLogger(__name__)

# ISO strings ("2024-03-04", "2024-03-04T18:30:00Z"), dates or datetimes
WorkoutDate = str | date | datetime

_WEEK_KEY_RE = re.compile(r"^(\d{4})-W(\d{2})$")

# Sorts before every real key; the walk back from 0001-W01 ends here
BEFORE_FIRST_WEEK_KEY = "0000-W00"


@dataclass(frozen=True)
class StreakResult:
    current_streak: int = 0
    longest_streak: int = 0


@dataclass(frozen=True)
class LeaderboardCandidate:
    """One user's input to the leaderboard.

    ``details`` is display metadata (username, email, quote) passed through untouched.
    """

    user_id: str
    monthly_workout_count: int
    workout_dates: Sequence[WorkoutDate] = ()
    details: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: str
    workout_count: int
    current_streak: int
    longest_streak: int
    rank: int = 0
    details: dict[str, Any] = field(default_factory=dict)


# ── Dates & week keys ────────────────────────────────────────────────────

def to_local_date(value: WorkoutDate, tz: tzinfo | None = None) -> date | None:
    """Parse one workout date down to a calendar day.

    Timezone-aware timestamps are moved into ``tz`` first (when given), then the
    time of day is dropped. Returns None for anything that cannot be parsed.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return value
    elif isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            logger.warning("Skipping unparseable workout date: %r", value)
            return None
    else:
        logger.warning("Skipping workout date of type %s: %r", type(value).__name__, value)
        return None

    if tz is not None and dt.tzinfo is not None:
        try:
            dt = dt.astimezone(tz)
        except OverflowError:
            logger.warning("Skipping out-of-range workout date: %r", value)
            return None
    return dt.date()


def format_week_key(year: int, week: int) -> str:
    return f"{year:04d}-W{week:02d}"


def parse_week_key(week_key: str) -> tuple[int, int]:
    """'2024-W09' -> (2024, 9). Raises ValueError for anything else."""
    match = _WEEK_KEY_RE.match(week_key)
    if not match:
        raise ValueError(f"Invalid week key: {week_key!r}")
    return int(match.group(1)), int(match.group(2))


def iso_weeks_in_year(year: int) -> int:
    """52 or 53. Dec 28 always falls in the last ISO week of its year."""
    return date(year, 12, 28).isocalendar()[1]


def compute_week_key(day: date) -> str:
    """ISO-8601 week key for a calendar day, e.g. '2024-W10'.

    Week 1 is the week holding the year's first Thursday, so the key's year is
    the year of that week's Thursday: 2024-12-30 is '2025-W01'.
    """
    if isinstance(day, datetime):
        day = day.date()
    thursday = day + timedelta(days=4 - day.isoweekday())
    year_start = date(thursday.year, 1, 1)
    week = math.ceil(((thursday - year_start).days + 1) / 7)
    return format_week_key(thursday.year, week)


def previous_week_key(week_key: str, exact: bool = False) -> str:
    """The week key one week before ``week_key``.

    Week 1 wraps to week 52 of the previous year. With ``exact=True`` it wraps
    to that year's real last ISO week instead (53 in long years).
    Nothing precedes 0001-W01: its previous key is BEFORE_FIRST_WEEK_KEY, which
    is its own predecessor.
    """
    year, week = parse_week_key(week_key)
    if year < 1:
        return BEFORE_FIRST_WEEK_KEY
    week -= 1
    if week < 1:
        year -= 1
        if year < 1:
            return BEFORE_FIRST_WEEK_KEY
        week = iso_weeks_in_year(year) if exact else WEEKS_PER_YEAR
    return format_week_key(year, week)


# ── Streaks ──────────────────────────────────────────────────────────────

def group_by_week(workout_dates: Iterable[WorkoutDate], tz: tzinfo | None = None) -> dict[str, int]:
    """Count workouts per ISO week. Unparseable dates are skipped."""
    counts: Counter[str] = Counter()
    for value in workout_dates:
        day = to_local_date(value, tz)
        if day is None:
            continue
        counts[compute_week_key(day)] += 1
    return dict(counts)


def qualifying_weeks(
    week_counts: Mapping[str, int],
    min_workouts: int = QUALIFYING_WEEK_MIN_WORKOUTS,
) -> list[str]:
    """Week keys with enough workouts, oldest first.

    Plain string order is chronological: keys are year-prefixed and zero-padded.
    """
    return sorted(week for week, count in week_counts.items() if count >= min_workouts)


def longest_streak(weeks: Sequence[str], exact: bool = False) -> int:
    """Longest run of consecutive weeks in a sorted list of qualifying week keys."""
    if not weeks:
        return 0
    longest = run = 1
    for prev, curr in zip(weeks, weeks[1:]):
        if previous_week_key(curr, exact) == prev:
            run += 1
            longest = max(longest, run)
        else:
            run = 1
    return longest


def current_streak(weeks: Iterable[str], today: date, exact: bool = False) -> int:
    """Run of consecutive qualifying weeks ending at the latest completed one.

    The search starts at the week before ``today``'s week and looks back at most
    CURRENT_STREAK_SEARCH_WEEKS weeks; the walk from there stops at the first gap
    or after CURRENT_STREAK_MAX_WEEKS weeks.
    """
    qualifying = set(weeks)
    if not qualifying:
        return 0

    check = previous_week_key(compute_week_key(today), exact)
    most_recent: str | None = None
    for _ in range(CURRENT_STREAK_SEARCH_WEEKS):
        if check in qualifying:
            most_recent = check
            break
        check = previous_week_key(check, exact)
    if most_recent is None:
        return 0

    streak = 1
    check = most_recent
    for _ in range(CURRENT_STREAK_MAX_WEEKS):
        check = previous_week_key(check, exact)
        if check not in qualifying:
            break
        streak += 1
    return streak


def calculate_streaks(
    workout_dates: Iterable[WorkoutDate],
    today: date | None = None,
    tz: tzinfo | None = None,
    min_workouts: int = QUALIFYING_WEEK_MIN_WORKOUTS,
    exact_iso_weeks: bool = False,
) -> StreakResult:
    """
    Current and longest weekly streak for one user's workout dates (any order).
    ``today`` defaults to the current day in ``tz``. Empty input, or input where
    no week qualifies, gives StreakResult(0, 0).
    """
    dates = list(workout_dates)
    if not dates:
        return StreakResult()

    weeks = qualifying_weeks(group_by_week(dates, tz), min_workouts)
    if not weeks:
        return StreakResult()

    if today is None:
        today = datetime.now(tz).date()
    return StreakResult(
        current_streak=current_streak(weeks, today, exact_iso_weeks),
        longest_streak=longest_streak(weeks, exact_iso_weeks),
    )


def latest_workout_date(workout_dates: Iterable[WorkoutDate], tz: tzinfo | None = None) -> date | None:
    days = [d for d in (to_local_date(v, tz) for v in workout_dates) if d is not None]
    return max(days) if days else None


# ── Leaderboard ──────────────────────────────────────────────────────────

def assign_ranks(entries: list[LeaderboardEntry]) -> list[LeaderboardEntry]:
    """Competition ranking over entries sorted by workout_count descending.

    Ties share a rank; the next distinct count takes its 1-based position,
    so a two-way tie for first gives ranks 1, 1, 3.
    """
    ranked: list[LeaderboardEntry] = []
    for position, entry in enumerate(entries, start=1):
        prev = ranked[-1] if ranked else None
        if prev is not None and entry.workout_count == prev.workout_count:
            ranked.append(replace(entry, rank=prev.rank))
        else:
            ranked.append(replace(entry, rank=position))
    return ranked


def build_leaderboard(
    candidates: Iterable[LeaderboardCandidate],
    today: date | None = None,
    tz: tzinfo | None = None,
    min_workouts: int = QUALIFYING_WEEK_MIN_WORKOUTS,
    exact_iso_weeks: bool = False,
    min_monthly_workouts: int = LEADERBOARD_MIN_MONTHLY_WORKOUTS,
) -> list[LeaderboardEntry]:
    """
    Rank users by this month's workout count, highest first, with their streaks.
    Users below ``min_monthly_workouts`` are left out. Equal counts keep their
    input order and share a rank.
    """
    if today is None:
        today = datetime.now(tz).date()

    entries: list[LeaderboardEntry] = []
    for candidate in candidates:
        if candidate.monthly_workout_count < min_monthly_workouts:
            continue
        streak = calculate_streaks(
            candidate.workout_dates,
            today=today,
            tz=tz,
            min_workouts=min_workouts,
            exact_iso_weeks=exact_iso_weeks,
        )
        entries.append(
            LeaderboardEntry(
                user_id=candidate.user_id,
                workout_count=candidate.monthly_workout_count,
                current_streak=streak.current_streak,
                longest_streak=streak.longest_streak,
                details=dict(candidate.details or {}),
            )
        )

    entries.sort(key=lambda e: e.workout_count, reverse=True)
    return assign_ranks(entries)


def leaderboard_from_counts(
    monthly_counts: Mapping[str, int],
    dates_by_user: Mapping[str, Sequence[WorkoutDate]],
    details_by_user: Mapping[str, Mapping[str, Any]] | None = None,
    **options: Any,
) -> list[LeaderboardEntry]:
    """Mapping form of build_leaderboard.

    When ``details_by_user`` is given, users missing from it are dropped
    before ranking.
    """
    candidates = []
    for user_id, count in monthly_counts.items():
        details = None
        if details_by_user is not None:
            details = details_by_user.get(user_id)
            if details is None:
                logger.debug("Leaderboard: no user record for %s, skipping", user_id)
                continue
        candidates.append(
            LeaderboardCandidate(
                user_id=user_id,
                monthly_workout_count=count,
                workout_dates=dates_by_user.get(user_id, ()),
                details=details,
            )
        )
    return build_leaderboard(candidates, **options)
