"""Tests for quiz attempt history."""
from prep_ace.history import QuizHistory
from prep_ace.models import AnsweredQuestion, GeneratedQuestion, QuizAttemptResult, QuizConfig
from prep_ace.store import QUIZ_HISTORY_KEY, read_json, write_json


def attempt(n, topic="Percentage", score=3, total=5):
    question = GeneratedQuestion("Q?", ("A", "B", "C"), "A")
    return QuizAttemptResult(
        id=f"attempt-{n}",
        timestamp=f"2025-03-{n:02d}T10:00:00",
        config=QuizConfig("Mathematics", topic, total),
        questions=(AnsweredQuestion(question, "A", True),),
        score=score,
        total_questions=total,
        accuracy=round(score / total * 100, 1),
        points_earned=score * 10,
        language="en",
    )


def test_empty_history(store):
    history = QuizHistory(store)
    assert history.recent() == []
    assert len(history) == 0


def test_recent_is_newest_first(store):
    history = QuizHistory(store)
    for n in (1, 2, 3):
        history.append(attempt(n))
    assert [a.id for a in history.recent()] == ["attempt-3", "attempt-2", "attempt-1"]


def test_attempt_survives_storage(store):
    history = QuizHistory(store)
    history.append(attempt(4, score=4))
    stored = history.recent()[0]
    assert stored == attempt(4, score=4)


def test_history_is_capped(store):
    history = QuizHistory(store, limit=3)
    for n in range(1, 6):
        history.append(attempt(n))
    assert len(history) == 3
    assert [a.id for a in history.recent()] == ["attempt-5", "attempt-4", "attempt-3"]


def test_unreadable_entries_skipped(store):
    write_json(store, QUIZ_HISTORY_KEY, [{"id": "broken"}, attempt(2).to_dict()])
    assert [a.id for a in QuizHistory(store).recent()] == ["attempt-2"]


def test_non_list_history_reads_empty(store):
    store.set(QUIZ_HISTORY_KEY, '{"id": "x"}')
    history = QuizHistory(store)
    assert history.recent() == []
    history.append(attempt(1))
    assert len(read_json(store, QUIZ_HISTORY_KEY)) == 1


def test_clear(store):
    history = QuizHistory(store)
    history.append(attempt(1))
    history.clear()
    assert store.get(QUIZ_HISTORY_KEY) is None
