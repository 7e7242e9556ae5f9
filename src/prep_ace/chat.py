"""Conversational assistants: general Q&A, chat support and the topic tutor.

Each conversation is persisted under its own store key so it survives
restarts. The last ``CONTEXT_MESSAGES`` messages are sent along with every
question. A failed reply is stored as an apology so the user can see which
question went unanswered.
"""
import logging
import uuid
from typing import Optional

from prep_ace.bookmarks import CHAT_SUPPORT_SOURCE, QA_CHAT_SOURCE, TOPIC_TUTOR_SOURCE
from prep_ace.errors import ValidationError
from prep_ace.generator import Generator
from prep_ace.language import LanguagePreference
from prep_ace.models import ChatMessage
from prep_ace.notices import ERROR, Notifier, log_notifier
from prep_ace.store import (
    CHAT_SUPPORT_KEY, QA_CHAT_KEY, TUTOR_SESSION_KEY, PersistentStore, read_json, write_json,
)

logger = logging.getLogger(__name__)

CONTEXT_MESSAGES = 10
FALLBACK_REPLY = "Sorry, I couldn't process your request at the moment."


def messages_from_list(data) -> list[ChatMessage]:
    if not isinstance(data, list):
        return []
    messages = []
    for entry in data:
        if (isinstance(entry, dict) and entry.get("role") in ("user", "assistant")
                and isinstance(entry.get("content"), str)):
            messages.append(ChatMessage(str(entry.get("id") or uuid.uuid4().hex), entry["role"], entry["content"]))
    return messages


class ChatSession:
    key = ""
    source = ""

    def __init__(
        self,
        store: PersistentStore,
        generator: Generator,
        language: LanguagePreference,
        notify: Notifier = log_notifier,
    ) -> None:
        self.store = store
        self.generator = generator
        self.language = language
        self.notify = notify

    def messages(self) -> list[ChatMessage]:
        return messages_from_list(read_json(self.store, self.key, []))

    def last_reply(self) -> Optional[ChatMessage]:
        for message in reversed(self.messages()):
            if message.role == "assistant":
                return message
        return None

    def ask(self, question: str) -> ChatMessage:
        """Send a question and store both it and the reply. Returns the reply."""
        question = (question or "").strip()
        if not question:
            raise ValidationError("Please enter a question.")
        history = self.messages()
        previous = [{"role": m.role, "content": m.content} for m in history[-CONTEXT_MESSAGES:]]
        user_message = ChatMessage(uuid.uuid4().hex, "user", question)
        try:
            answer = self._reply(question, previous, self.language.get())
        except Exception as exc:
            logger.exception("%s reply failed", self.source)
            self.notify(str(exc) or "Failed to get response from AI.", ERROR)
            answer = FALLBACK_REPLY
        reply = ChatMessage(uuid.uuid4().hex, "assistant", answer)
        self._save(history + [user_message, reply])
        return reply

    def clear(self) -> None:
        if self.store.get(self.key) is not None:
            self.store.remove(self.key)

    def _save(self, messages: list) -> None:
        write_json(self.store, self.key, [m.to_dict() for m in messages])

    def _reply(self, question: str, previous: list, language: str) -> str:
        raise NotImplementedError


class QAChat(ChatSession):
    key = QA_CHAT_KEY
    source = QA_CHAT_SOURCE

    def _reply(self, question, previous, language):
        return self.generator.answer_question(question, previous, language)


class SupportChat(ChatSession):
    key = CHAT_SUPPORT_KEY
    source = CHAT_SUPPORT_SOURCE

    def _reply(self, question, previous, language):
        return self.generator.clarify_question(question, previous, language)


class TopicTutor(ChatSession):
    """Tutor chat focused on one subject and topic.

    Only the current selection's conversation is kept; picking another topic
    starts over.
    """

    key = TUTOR_SESSION_KEY
    source = TOPIC_TUTOR_SOURCE

    def _entry(self) -> dict:
        entry = read_json(self.store, self.key, {})
        return entry if isinstance(entry, dict) else {}

    def selection(self) -> Optional[dict]:
        entry = self._entry()
        subject, topic = entry.get("subject"), entry.get("topic")
        if isinstance(subject, str) and isinstance(topic, str) and subject and topic:
            return {"subject": subject, "topic": topic}
        return None

    def select(self, subject: str, topic: str) -> dict:
        subject, topic = (subject or "").strip(), (topic or "").strip()
        if not subject or not topic:
            raise ValidationError("Please select both subject and topic.")
        selection = {"subject": subject, "topic": topic}
        if self.selection() != selection:
            write_json(self.store, self.key, dict(selection, messages=[]))
        return selection

    def messages(self) -> list[ChatMessage]:
        return messages_from_list(self._entry().get("messages"))

    def ask(self, question: str) -> ChatMessage:
        if self.selection() is None:
            raise ValidationError("Please select both subject and topic.")
        return super().ask(question)

    def _save(self, messages: list) -> None:
        entry = dict(self.selection() or {}, messages=[m.to_dict() for m in messages])
        write_json(self.store, self.key, entry)

    def _reply(self, question, previous, language):
        selection = self.selection()
        return self.generator.clarify_question(
            question, previous, language, subject=selection["subject"], topic=selection["topic"],
        )
