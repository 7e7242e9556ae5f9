"""Bookmarked assistant replies from the chat features."""
import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from prep_ace.models import Bookmark, ChatMessage
from prep_ace.store import BOOKMARKS_KEY, PersistentStore, read_json, write_json

logger = logging.getLogger(__name__)

QA_CHAT_SOURCE = "AI Q&A Chat"
TOPIC_TUTOR_SOURCE = "Topic AI Tutor"
CHAT_SUPPORT_SOURCE = "Chat Support (General)"
SOURCES = (QA_CHAT_SOURCE, TOPIC_TUTOR_SOURCE, CHAT_SUPPORT_SOURCE)

MISSING_PROMPT = "User's question context not found."


def _bookmark_from_dict(data) -> Optional[Bookmark]:
    if not isinstance(data, dict):
        return None
    try:
        context = data.get("context")
        return Bookmark(
            bookmark_id=str(data["bookmark_id"]),
            original_message_id=str(data["original_message_id"]),
            assistant_response=str(data["assistant_response"]),
            user_prompt=str(data.get("user_prompt") or MISSING_PROMPT),
            source=str(data["source"]),
            bookmarked_at=str(data.get("bookmarked_at", "")),
            context=context if isinstance(context, dict) else None,
        )
    except KeyError:
        return None


def preceding_prompt(message: ChatMessage, history: list) -> str:
    """The user message that came before ``message`` in ``history``."""
    ids = [m.id for m in history]
    if message.id not in ids:
        return MISSING_PROMPT
    for earlier in reversed(history[:ids.index(message.id)]):
        if earlier.role == "user":
            return earlier.content
    return MISSING_PROMPT


class Bookmarks:
    def __init__(self, store: PersistentStore, now: Callable[[], datetime] = datetime.now) -> None:
        self.store = store
        self.now = now

    def get(self) -> list[Bookmark]:
        """Stored bookmarks in the order they were added."""
        data = read_json(self.store, BOOKMARKS_KEY, [])
        if not isinstance(data, list):
            return []
        bookmarks = []
        for entry in data:
            bookmark = _bookmark_from_dict(entry)
            if bookmark is None:
                logger.warning("Skipping unreadable bookmark")
                continue
            bookmarks.append(bookmark)
        return bookmarks

    def recent(self) -> list[Bookmark]:
        return sorted(self.get(), key=lambda b: b.bookmarked_at, reverse=True)

    def add(
        self,
        message: ChatMessage,
        history: list,
        source: str,
        context: Optional[dict] = None,
    ) -> Bookmark:
        """Bookmark an assistant reply. Returns the existing bookmark for a duplicate."""
        bookmarks = self.get()
        for bookmark in bookmarks:
            if (bookmark.original_message_id == message.id and bookmark.source == source
                    and bookmark.assistant_response == message.content):
                return bookmark
        bookmark = Bookmark(
            bookmark_id=f"bookmark_{uuid.uuid4().hex}",
            original_message_id=message.id,
            assistant_response=message.content,
            user_prompt=preceding_prompt(message, history),
            source=source,
            bookmarked_at=self.now().isoformat(),
            context=context,
        )
        bookmarks.append(bookmark)
        self._save(bookmarks)
        return bookmark

    def remove(self, bookmark_id: str) -> bool:
        bookmarks = self.get()
        kept = [b for b in bookmarks if b.bookmark_id != bookmark_id]
        if len(kept) == len(bookmarks):
            return False
        self._save(kept)
        return True

    def find(self, original_message_id: str, source: str) -> Optional[str]:
        for bookmark in self.get():
            if bookmark.original_message_id == original_message_id and bookmark.source == source:
                return bookmark.bookmark_id
        return None

    def is_bookmarked(self, original_message_id: str, source: str) -> bool:
        return self.find(original_message_id, source) is not None

    def toggle(
        self,
        message: ChatMessage,
        history: list,
        source: str,
        context: Optional[dict] = None,
    ) -> bool:
        """Bookmark the message, or remove its bookmark. Returns True if it is now bookmarked."""
        existing = self.find(message.id, source)
        if existing is not None:
            self.remove(existing)
            return False
        self.add(message, history, source, context)
        return True

    def _save(self, bookmarks: list) -> None:
        write_json(self.store, BOOKMARKS_KEY, [b.to_dict() for b in bookmarks])
