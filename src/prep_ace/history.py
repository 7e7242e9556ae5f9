"""Quiz attempt history."""
import logging

from prep_ace.models import QuizAttemptResult
from prep_ace.store import QUIZ_HISTORY_KEY, PersistentStore, read_json, write_json

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class QuizHistory:
    """Attempts kept oldest-first in the store, capped at ``limit`` entries."""

    def __init__(self, store: PersistentStore, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        self.store = store
        self.limit = limit

    def _raw(self) -> list:
        data = read_json(self.store, QUIZ_HISTORY_KEY, [])
        return data if isinstance(data, list) else []

    def append(self, result: QuizAttemptResult) -> None:
        entries = self._raw()
        entries.append(result.to_dict())
        if self.limit and len(entries) > self.limit:
            entries = entries[-self.limit:]
        write_json(self.store, QUIZ_HISTORY_KEY, entries)

    def recent(self) -> list[QuizAttemptResult]:
        """All readable attempts, newest first."""
        attempts = []
        for entry in self._raw():
            try:
                attempts.append(QuizAttemptResult.from_dict(entry))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping unreadable quiz history entry")
        attempts.reverse()
        return attempts

    def __len__(self) -> int:
        return len(self._raw())

    def clear(self) -> None:
        self.store.remove(QUIZ_HISTORY_KEY)
