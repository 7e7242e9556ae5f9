"""Usage counters feeding the badge criteria."""
from typing import Optional

from prep_ace.models import UserStats
from prep_ace.store import STATS_KEY, PersistentStore, read_json, write_json


def _count(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return 0
    return value


def _unique_topics(value) -> list:
    if not isinstance(value, list):
        return []
    topics = []
    for topic in value:
        if isinstance(topic, str) and topic not in topics:
            topics.append(topic)
    return topics


def stats_from_dict(data) -> UserStats:
    """Build UserStats from persisted data, defaulting anything malformed."""
    if not isinstance(data, dict):
        return UserStats()
    return UserStats(
        total_quizzes_completed=_count(data.get("total_quizzes_completed")),
        unique_quiz_topics_completed=_unique_topics(data.get("unique_quiz_topics_completed")),
        total_flashcard_sets_generated=_count(data.get("total_flashcard_sets_generated")),
    )


class StatsTracker:
    def __init__(self, store: PersistentStore) -> None:
        self.store = store

    def get(self) -> UserStats:
        return stats_from_dict(read_json(self.store, STATS_KEY, {}))

    def update(
        self,
        quiz_completed: bool = False,
        topic: Optional[str] = None,
        subject: Optional[str] = None,
        flashcard_set_generated: bool = False,
    ) -> UserStats:
        """Apply one action to the counters and persist them.

        ``subject`` is accepted for callers that report it but is not tracked.
        """
        stats = self.get()
        if quiz_completed:
            stats.total_quizzes_completed += 1
            if topic and topic not in stats.unique_quiz_topics_completed:
                stats.unique_quiz_topics_completed.append(topic)
        if flashcard_set_generated:
            stats.total_flashcard_sets_generated += 1
        write_json(self.store, STATS_KEY, stats.to_dict())
        return stats

    def reset(self) -> None:
        write_json(self.store, STATS_KEY, UserStats().to_dict())
