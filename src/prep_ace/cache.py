"""Generated content cached together with the language it was produced in."""
import logging
from typing import Any, Optional

from prep_ace.store import PersistentStore, read_json, write_json

logger = logging.getLogger(__name__)


class LanguageCache:
    """One cache slot under ``key`` holding ``{config, artifact, language}``.

    A read under a different language than the write is treated as a miss;
    content is never translated or repaired here.
    """

    def __init__(self, store: PersistentStore, key: str) -> None:
        self.store = store
        self.key = key

    def save(self, config: Any, artifact: Any, language: str) -> None:
        write_json(self.store, self.key, {"config": config, "artifact": artifact, "language": language})

    def load(self, current_language: str) -> Optional[Any]:
        entry = self._entry()
        if entry is None or entry.get("artifact") is None:
            return None
        if entry.get("language") != current_language:
            logger.debug("Cache %s holds %r content, wanted %r", self.key, entry.get("language"), current_language)
            return None
        return entry["artifact"]

    def load_config(self) -> Optional[Any]:
        entry = self._entry()
        return entry.get("config") if entry else None

    def language(self) -> Optional[str]:
        entry = self._entry()
        return entry.get("language") if entry else None

    def clear(self) -> None:
        if self.store.get(self.key) is not None:
            self.store.remove(self.key)

    def _entry(self) -> Optional[dict]:
        entry = read_json(self.store, self.key)
        if entry is None:
            return None
        if not isinstance(entry, dict):
            logger.warning("Dropping malformed cache entry under %r", self.key)
            self.store.remove(self.key)
            return None
        return entry
