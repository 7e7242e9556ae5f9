"""Daily study goal and consecutive-day streak tracking."""
import logging
from datetime import date, timedelta
from typing import Callable

from prep_ace.errors import ValidationError
from prep_ace.models import StreakState
from prep_ace.notices import ERROR, INFO, SUCCESS, Notifier, log_notifier
from prep_ace.store import STREAK_KEY, PersistentStore, read_json, write_json

logger = logging.getLogger(__name__)


def streak_from_dict(data) -> StreakState:
    """Build StreakState from persisted data, defaulting anything malformed."""
    if not isinstance(data, dict):
        return StreakState()
    streak = data.get("current_streak")
    last = data.get("last_completion_date")
    goal = data.get("daily_goal")
    if isinstance(streak, bool) or not isinstance(streak, int) or streak < 0:
        streak = 0
    try:
        if last is not None:
            last = date.fromisoformat(last).isoformat()
    except (TypeError, ValueError):
        last = None
    return StreakState(
        current_streak=streak,
        last_completion_date=last,
        daily_goal=goal if isinstance(goal, str) else "",
        goal_achieved_today=data.get("goal_achieved_today") is True,
    )


class StreakTracker:
    def __init__(
        self,
        store: PersistentStore,
        notify: Notifier = log_notifier,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.notify = notify
        self.today = today

    def load(self) -> StreakState:
        """Load the streak, clearing yesterday's achievement flag on a new day."""
        state = streak_from_dict(read_json(self.store, STREAK_KEY))
        if state.goal_achieved_today and state.last_completion_date != self.today().isoformat():
            state.goal_achieved_today = False
            self._save(state)
        return state

    def set_goal(self, text: str) -> StreakState:
        goal = (text or "").strip()
        if not goal:
            raise ValidationError("Please enter a goal.")
        state = self.load()
        state.daily_goal = goal
        state.goal_achieved_today = False
        self._save(state)
        self.notify(f"Goal set: {goal}", SUCCESS)
        return state

    def achieve_goal(self) -> bool:
        """Mark today's goal achieved. Returns False when nothing changed."""
        state = self.load()
        if not state.daily_goal:
            self.notify("Please set a daily goal first.", ERROR)
            return False
        today = self.today()
        today_iso = today.isoformat()
        if state.goal_achieved_today and state.last_completion_date == today_iso:
            self.notify("You've already achieved your goal for today!", INFO)
            return False

        yesterday_iso = (today - timedelta(days=1)).isoformat()
        if state.last_completion_date == yesterday_iso:
            state.current_streak += 1
        elif state.last_completion_date != today_iso:
            state.current_streak = 1
        else:
            state.current_streak = max(state.current_streak, 1)

        state.last_completion_date = today_iso
        state.goal_achieved_today = True
        self._save(state)
        logger.info("Daily goal achieved, streak now %d", state.current_streak)
        self.notify(f"Goal Achieved! Your streak is now {state.current_streak}.", SUCCESS)
        return True

    def reset(self) -> None:
        self._save(StreakState())

    def _save(self, state: StreakState) -> None:
        write_json(self.store, STREAK_KEY, state.to_dict())
