"""Bulk and scoped clearing of locally stored data."""
import logging

from prep_ace.errors import ValidationError
from prep_ace.store import (
    BADGES_KEY, BOOKMARKS_KEY, CHAT_SUPPORT_KEY, CURRENT_AFFAIRS_CACHE_KEY, FLASHCARD_CACHE_KEY,
    LANGUAGE_KEY, POINTS_KEY, QA_CHAT_KEY, QUIZ_CACHE_KEY, QUIZ_HISTORY_KEY, SOLVER_CACHE_KEY,
    STATS_KEY, STREAK_KEY, STUDY_PLAN_CACHE_KEY, TUTOR_SESSION_KEY, PersistentStore,
)

logger = logging.getLogger(__name__)

CLEAR_GROUPS = {
    "chats": (QA_CHAT_KEY, CHAT_SUPPORT_KEY, TUTOR_SESSION_KEY),
    "quiz": (QUIZ_CACHE_KEY, QUIZ_HISTORY_KEY, FLASHCARD_CACHE_KEY),
    "plan": (STUDY_PLAN_CACHE_KEY, SOLVER_CACHE_KEY),
    "current_affairs": (CURRENT_AFFAIRS_CACHE_KEY,),
    "bookmarks": (BOOKMARKS_KEY,),
    "streak": (STREAK_KEY,),
    "progress": (STATS_KEY, BADGES_KEY, POINTS_KEY),
}

ALL_KEYS = tuple(key for keys in CLEAR_GROUPS.values() for key in keys) + (LANGUAGE_KEY,)


def _remove(store: PersistentStore, keys) -> list[str]:
    present = set(store.keys())
    removed = []
    for key in keys:
        if key in present:
            store.remove(key)
            removed.append(key)
    return removed


def clear_group(store: PersistentStore, group: str) -> list[str]:
    """Remove the keys of one group. Returns the keys that were present."""
    if group not in CLEAR_GROUPS:
        raise ValidationError(f"Unknown data group: {group}")
    removed = _remove(store, CLEAR_GROUPS[group])
    logger.info("Cleared %s data (%d keys)", group, len(removed))
    return removed


def clear_all(store: PersistentStore) -> list[str]:
    """Remove every key the application writes, including the language preference."""
    removed = _remove(store, ALL_KEYS)
    logger.info("Cleared all local data (%d keys)", len(removed))
    return removed
