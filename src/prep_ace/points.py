"""Running points total."""
import logging

from prep_ace.store import POINTS_KEY, PersistentStore

logger = logging.getLogger(__name__)


class PointsLedger:
    def __init__(self, store: PersistentStore) -> None:
        self.store = store

    def get(self) -> int:
        raw = self.store.get(POINTS_KEY)
        if raw is None:
            return 0
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning("Stored points value %r is not an integer; using 0", raw)
            return 0

    def add(self, amount: int) -> int:
        total = self.get() + amount
        self.store.set(POINTS_KEY, str(total))
        return total

    def reset(self) -> None:
        self.store.set(POINTS_KEY, "0")
