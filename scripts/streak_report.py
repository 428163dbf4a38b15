"""Print weekly streaks (and this month's leaderboard) straight from the database.

    python scripts/streak_report.py            # every user + leaderboard
    python scripts/streak_report.py USER_ID    # one user
"""

import asyncio
import os
import sys
from datetime import datetime

# Add parent directory to path so we can import app modules
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from app.core.config import get_settings
from app.db.session import async_session_maker, engine
from app.services.workout_history import load_leaderboard, load_streaks


async def main(user_id: str | None = None):
    settings = get_settings()
    today = datetime.now(settings.tzinfo).date()
    print(f"Streaks as of {today} ({settings.timezone})")

    async with async_session_maker() as session:
        streaks = await load_streaks(session, settings, today, user_ids=[user_id] if user_id else None)
        if user_id and user_id not in streaks:
            print(f"{user_id}: no workout logs")
        for uid, (result, last_day) in sorted(streaks.items(), key=lambda item: item[0]):
            print(
                f"{uid}: current={result.current_streak} longest={result.longest_streak} "
                f"last_workout={last_day}"
            )

        if not user_id:
            print(f"\nLeaderboard {today:%Y-%m}")
            for entry in await load_leaderboard(session, settings, today):
                name = entry.details.get("username") or entry.details.get("email")
                print(f"  #{entry.rank} {name}: {entry.workout_count} workouts")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))
