"""Badge catalog and award engine."""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from prep_ace.models import EarnedBadge, StreakState, UserStats
from prep_ace.notices import SUCCESS, Notifier, log_notifier
from prep_ace.points import PointsLedger
from prep_ace.stats import StatsTracker
from prep_ace.store import BADGES_KEY, PersistentStore, read_json, write_json
from prep_ace.streak import StreakTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BadgeDefinition:
    id: str
    name: str
    description: str
    category: str  # Quiz | Streak | Points | Feature Usage
    criteria: Callable[[UserStats, int, StreakState], bool]


BADGE_DEFINITIONS = (
    BadgeDefinition("quiz_novice", "Quiz Novice", "Complete your first quiz.", "Quiz",
                    lambda stats, points, streak: stats.total_quizzes_completed >= 1),
    BadgeDefinition("quiz_adept", "Quiz Adept", "Complete 5 quizzes.", "Quiz",
                    lambda stats, points, streak: stats.total_quizzes_completed >= 5),
    BadgeDefinition("quiz_master", "Quiz Master", "Complete 10 quizzes.", "Quiz",
                    lambda stats, points, streak: stats.total_quizzes_completed >= 10),
    BadgeDefinition("streak_starter_3", "Streak Starter", "Achieve a 3-day study streak.", "Streak",
                    lambda stats, points, streak: streak.current_streak >= 3),
    BadgeDefinition("streak_keeper_7", "Streak Keeper", "Achieve a 7-day study streak.", "Streak",
                    lambda stats, points, streak: streak.current_streak >= 7),
    BadgeDefinition("points_earner_250", "Points Earner", "Earn 250 total points.", "Points",
                    lambda stats, points, streak: points >= 250),
    BadgeDefinition("points_collector_1000", "Points Collector", "Earn 1000 total points.", "Points",
                    lambda stats, points, streak: points >= 1000),
    BadgeDefinition("topic_explorer_3", "Topic Explorer", "Complete quizzes on 3 unique topics.",
                    "Feature Usage",
                    lambda stats, points, streak: len(stats.unique_quiz_topics_completed) >= 3),
    BadgeDefinition("flashcard_fan_3", "Flashcard Fan", "Generate 3 flashcard sets.", "Feature Usage",
                    lambda stats, points, streak: stats.total_flashcard_sets_generated >= 3),
    BadgeDefinition("all_rounder_1", "Prep Ace All-Rounder", "Use both quizzes and flashcards.",
                    "Feature Usage",
                    lambda stats, points, streak: stats.total_quizzes_completed > 0
                    and stats.total_flashcard_sets_generated > 0),
)

BADGES_BY_ID = {badge.id: badge for badge in BADGE_DEFINITIONS}


def _badges_from_list(data) -> list[EarnedBadge]:
    if not isinstance(data, list):
        return []
    badges = []
    for entry in data:
        if isinstance(entry, dict) and isinstance(entry.get("badge_id"), str):
            badges.append(EarnedBadge(entry["badge_id"], str(entry.get("earned_at", ""))))
    return badges


class BadgeEngine:
    def __init__(
        self,
        store: PersistentStore,
        stats: StatsTracker,
        points: PointsLedger,
        streak: StreakTracker,
        notify: Notifier = log_notifier,
        now: Callable[[], datetime] = datetime.now,
        definitions=BADGE_DEFINITIONS,
    ) -> None:
        self.store = store
        self.stats = stats
        self.points = points
        self.streak = streak
        self.notify = notify
        self.now = now
        self.definitions = tuple(definitions)

    def get_earned(self) -> list[EarnedBadge]:
        return _badges_from_list(read_json(self.store, BADGES_KEY, []))

    def earned_ids(self) -> set:
        return {badge.badge_id for badge in self.get_earned()}

    def check_and_award(self) -> list[EarnedBadge]:
        """Award every badge whose criteria now hold. Returns the newly earned ones."""
        stats = self.stats.get()
        points = self.points.get()
        streak = self.streak.load()
        already = self.earned_ids()
        awarded = []
        for badge in self.definitions:
            if badge.id in already:
                continue
            if badge.criteria(stats, points, streak):
                earned = self.award(badge.id)
                if earned is not None:
                    awarded.append(earned)
        return awarded

    def award(self, badge_id: str):
        """Append ``badge_id`` unless it is already earned. Returns the new EarnedBadge or None."""
        badges = self.get_earned()
        if any(badge.badge_id == badge_id for badge in badges):
            return None
        earned = EarnedBadge(badge_id, self.now().isoformat())
        badges.append(earned)
        write_json(self.store, BADGES_KEY, [badge.to_dict() for badge in badges])
        definition = BADGES_BY_ID.get(badge_id)
        name = definition.name if definition else badge_id
        logger.info("Badge unlocked: %s", badge_id)
        self.notify(f"Badge Unlocked: {name}!", SUCCESS)
        return earned

    def board(self) -> list[dict]:
        """Every definition with its earned timestamp (None while locked)."""
        earned = {badge.badge_id: badge.earned_at for badge in self.get_earned()}
        return [
            {
                "id": badge.id,
                "name": badge.name,
                "description": badge.description,
                "category": badge.category,
                "earned_at": earned.get(badge.id),
            }
            for badge in self.definitions
        ]

    def reset(self) -> None:
        write_json(self.store, BADGES_KEY, [])
