"""Persistent key-value store with change subscriptions.

Every tracker takes a ``PersistentStore`` instead of touching storage
directly. Values are JSON strings; ``read_json`` never raises on bad data.
"""
import json
import logging
from datetime import datetime
from typing import Any, Callable, Optional

from prep_ace.db import get_connection, init_db

logger = logging.getLogger(__name__)

# Store keys
LANGUAGE_KEY = "user_language_preference"
POINTS_KEY = "user_points"
STATS_KEY = "user_stats"
BADGES_KEY = "earned_badges"
STREAK_KEY = "study_streak"
QUIZ_HISTORY_KEY = "quiz_history"
QUIZ_CACHE_KEY = "quiz_generator_cache"
FLASHCARD_CACHE_KEY = "flashcard_generator_cache"
STUDY_PLAN_CACHE_KEY = "study_planner_cache"
SOLVER_CACHE_KEY = "solver_cache"
QA_CHAT_KEY = "qa_chat_messages"
CHAT_SUPPORT_KEY = "chat_support_messages"
TUTOR_SESSION_KEY = "topic_tutor_session"
CURRENT_AFFAIRS_CACHE_KEY = "current_affairs_cache"
BOOKMARKS_KEY = "bookmarks"

Listener = Callable[[str, Optional[str]], None]


class PersistentStore:
    """Synchronous string-keyed store.

    Subclasses implement ``_read``, ``_write``, ``_delete`` and ``keys``.
    Writes through the store notify subscribers with ``(key, new_value)``;
    ``new_value`` is None for removals.
    """

    def __init__(self) -> None:
        self._listeners: list[tuple[Optional[str], Listener]] = []

    def get(self, key: str) -> Optional[str]:
        return self._read(key)

    def set(self, key: str, value: str) -> None:
        self._write(key, value)
        self._notify(key, value)

    def remove(self, key: str) -> None:
        self._delete(key)
        self._notify(key, None)

    def keys(self) -> list[str]:
        raise NotImplementedError

    def subscribe(self, listener: Listener, key: Optional[str] = None) -> Callable[[], None]:
        """Register a change listener, optionally for one key. Returns an unsubscribe callable."""
        entry = (key, listener)
        self._listeners.append(entry)

        def unsubscribe() -> None:
            if entry in self._listeners:
                self._listeners.remove(entry)

        return unsubscribe

    def _notify(self, key: str, value: Optional[str]) -> None:
        for wanted, listener in list(self._listeners):
            if wanted is None or wanted == key:
                listener(key, value)

    def _read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, key: str, value: str) -> None:
        raise NotImplementedError

    def _delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(PersistentStore):
    """Dict-backed store, used by tests and throwaway sessions."""

    def __init__(self, initial: Optional[dict] = None) -> None:
        super().__init__()
        self._data: dict[str, str] = dict(initial or {})

    def keys(self) -> list[str]:
        return list(self._data)

    def _read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def _write(self, key: str, value: str) -> None:
        self._data[key] = value

    def _delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqliteStore(PersistentStore):
    """Store backed by the ``kv_store`` table of a SQLite file.

    Several processes may share one file. ``refresh`` re-reads the table and
    notifies listeners about keys another process changed since the last read.
    """

    def __init__(self, db_path: str) -> None:
        super().__init__()
        self.db_path = db_path
        init_db(db_path)
        self._snapshot: dict[str, str] = self._read_all()

    def keys(self) -> list[str]:
        return list(self._read_all())

    def refresh(self) -> list[str]:
        """Notify listeners of external changes. Returns the changed keys."""
        current = self._read_all()
        changed = [
            key for key in set(current) | set(self._snapshot)
            if current.get(key) != self._snapshot.get(key)
        ]
        self._snapshot = current
        for key in sorted(changed):
            self._notify(key, current.get(key))
        return changed

    def _read_all(self) -> dict[str, str]:
        conn = get_connection(self.db_path)
        rows = conn.execute("SELECT key, value FROM kv_store").fetchall()
        conn.close()
        return {row["key"]: row["value"] for row in rows}

    def _read(self, key: str) -> Optional[str]:
        conn = get_connection(self.db_path)
        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        conn.close()
        return row["value"] if row else None

    def _write(self, key: str, value: str) -> None:
        conn = get_connection(self.db_path)
        conn.execute(
            "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
            (key, value, datetime.now().isoformat()),
        )
        conn.commit()
        conn.close()
        self._snapshot[key] = value

    def _delete(self, key: str) -> None:
        conn = get_connection(self.db_path)
        conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        conn.commit()
        conn.close()
        self._snapshot.pop(key, None)


def read_json(store: PersistentStore, key: str, default: Any = None) -> Any:
    """Decode the JSON value at ``key``, falling back to ``default`` when absent or corrupt."""
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring corrupt value stored under %r", key)
        return default


def write_json(store: PersistentStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value))
