import pytest

from prep_ace.bookmarks import (
    MISSING_PROMPT, QA_CHAT_SOURCE, TOPIC_TUTOR_SOURCE, Bookmarks, preceding_prompt,
)
from prep_ace.models import ChatMessage
from prep_ace.store import BOOKMARKS_KEY, read_json, write_json


HISTORY = [
    ChatMessage("m1", "user", "What is inertia?"),
    ChatMessage("m2", "assistant", "Resistance to a change in motion."),
    ChatMessage("m3", "assistant", "Newton's first law describes it."),
    ChatMessage("m4", "user", "And momentum?"),
    ChatMessage("m5", "assistant", "Mass times velocity."),
]


@pytest.fixture
def bookmarks(store, clock):
    return Bookmarks(store, now=clock.now)


def test_preceding_prompt():
    assert preceding_prompt(HISTORY[2], HISTORY) == "What is inertia?"
    assert preceding_prompt(HISTORY[4], HISTORY) == "And momentum?"
    assert preceding_prompt(HISTORY[0], HISTORY) == MISSING_PROMPT
    assert preceding_prompt(ChatMessage("x", "assistant", "?"), HISTORY) == MISSING_PROMPT


def test_add_bookmark(bookmarks, store):
    bookmark = bookmarks.add(HISTORY[1], HISTORY, QA_CHAT_SOURCE)
    assert bookmark.bookmark_id.startswith("bookmark_")
    assert bookmark.original_message_id == "m2"
    assert bookmark.user_prompt == "What is inertia?"
    assert bookmark.bookmarked_at == "2025-03-10T09:30:00"
    assert len(read_json(store, BOOKMARKS_KEY)) == 1


def test_add_duplicate_returns_existing(bookmarks):
    first = bookmarks.add(HISTORY[1], HISTORY, QA_CHAT_SOURCE)
    second = bookmarks.add(HISTORY[1], HISTORY, QA_CHAT_SOURCE)
    assert second == first
    assert len(bookmarks.get()) == 1


def test_same_message_from_another_source_is_separate(bookmarks):
    bookmarks.add(HISTORY[1], HISTORY, QA_CHAT_SOURCE)
    bookmarks.add(HISTORY[1], HISTORY, TOPIC_TUTOR_SOURCE, {"subject": "General Science", "topic": "Physics"})
    assert len(bookmarks.get()) == 2
    tutor_bookmark = bookmarks.get()[1]
    assert tutor_bookmark.context == {"subject": "General Science", "topic": "Physics"}


def test_find_and_remove(bookmarks):
    bookmark = bookmarks.add(HISTORY[4], HISTORY, QA_CHAT_SOURCE)
    assert bookmarks.find("m4", QA_CHAT_SOURCE) is None
    assert bookmarks.find("m5", QA_CHAT_SOURCE) == bookmark.bookmark_id
    assert bookmarks.is_bookmarked("m5", QA_CHAT_SOURCE)
    assert bookmarks.remove(bookmark.bookmark_id)
    assert not bookmarks.remove(bookmark.bookmark_id)
    assert bookmarks.get() == []


def test_toggle(bookmarks):
    assert bookmarks.toggle(HISTORY[2], HISTORY, QA_CHAT_SOURCE)
    assert bookmarks.is_bookmarked("m3", QA_CHAT_SOURCE)
    assert not bookmarks.toggle(HISTORY[2], HISTORY, QA_CHAT_SOURCE)
    assert bookmarks.get() == []


def test_recent_is_newest_first(store, clock):
    bookmarks = Bookmarks(store, now=clock.now)
    bookmarks.add(HISTORY[1], HISTORY, QA_CHAT_SOURCE)
    clock.day = clock.day.replace(day=12)
    bookmarks.add(HISTORY[4], HISTORY, QA_CHAT_SOURCE)
    assert [b.original_message_id for b in bookmarks.recent()] == ["m5", "m2"]


def test_unreadable_entries_are_skipped(bookmarks, store):
    write_json(store, BOOKMARKS_KEY, [
        {"bookmark_id": "b1"},
        "junk",
        {
            "bookmark_id": "b2", "original_message_id": "m2", "assistant_response": "Answer",
            "source": QA_CHAT_SOURCE, "bookmarked_at": "2025-03-10T09:30:00",
        },
    ])
    [bookmark] = bookmarks.get()
    assert bookmark.bookmark_id == "b2"
    assert bookmark.user_prompt == MISSING_PROMPT


def test_non_list_value_reads_as_empty(bookmarks, store):
    write_json(store, BOOKMARKS_KEY, {"oops": True})
    assert bookmarks.get() == []
