from datetime import date, datetime
from types import SimpleNamespace

import pytest

from prep_ace.badges import BadgeEngine
from prep_ace.generator import Generator
from prep_ace.history import QuizHistory
from prep_ace.language import LanguagePreference
from prep_ace.points import PointsLedger
from prep_ace.stats import StatsTracker
from prep_ace.store import MemoryStore
from prep_ace.streak import StreakTracker


def make_questions(count, options=4):
    """Well-formed provider output; the first option is always correct."""
    return [
        {
            "question": f"Question {i}?",
            "options": [f"Option {i}{letter}" for letter in "ABCD"[:options]],
            "answer": f"Option {i}A",
            "explanation": f"Option {i}A is correct.",
        }
        for i in range(1, count + 1)
    ]


class FakeGenerator(Generator):
    def __init__(self):
        self.questions = make_questions(5)
        self.flashcards = [
            {"term": "SI unit of power", "definition": "Watt"},
            {"term": "SI unit of force", "definition": "Newton"},
            {"term": "SI unit of charge", "definition": "Coulomb"},
        ]
        self.solution = {"solutions": "Q1: 2 + 2 = 4", "answer_key": "1. 4"}
        self.plan = {
            "plan_title": "Three Month Plan",
            "overview": "Cover every subject twice.",
            "weekly_breakdown": [
                {"week": "Week 1-4", "focus_areas": ["Mathematics"], "suggested_activities": ["Daily drills"]},
            ],
            "tips_for_success": ["Sleep well"],
        }
        self.answer = "Speed is distance divided by time."
        self.current_affairs = {"summary": "India hosted the G20 summit."}
        self.error = None
        self.calls = []

    def _answer(self, kind, value, *args):
        self.calls.append((kind,) + args)
        if self.error is not None:
            raise self.error
        return value

    def generate_quiz(self, config, language):
        return self._answer("quiz", self.questions, config, language)

    def generate_flashcards(self, subject, topic, count, language):
        return self._answer("flashcards", self.flashcards, subject, topic, count, language)

    def solve_paper(self, paper, language):
        return self._answer("solve", self.solution, paper, language)

    def generate_study_plan(self, request, language):
        return self._answer("plan", self.plan, request, language)

    def answer_question(self, question, previous_messages, language):
        return self._answer("qa", self.answer, question, previous_messages, language)

    def clarify_question(self, question, previous_messages, language, subject=None, topic=None):
        return self._answer("clarify", self.answer, question, previous_messages, language, subject, topic)

    def summarize_current_affairs(self, category, language):
        return self._answer("current_affairs", self.current_affairs, category, language)


class Clock:
    """Settable stand-in for date.today / datetime.now."""

    def __init__(self, day):
        self.day = day

    def __call__(self):
        return self.day

    def now(self):
        return datetime(self.day.year, self.day.month, self.day.day, 9, 30)


class Notices(list):
    def __call__(self, message, level="info"):
        self.append((message, level))

    @property
    def messages(self):
        return [message for message, _ in self]


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_prep_ace.db")
    return db_path


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def clock():
    return Clock(date(2025, 3, 10))


@pytest.fixture
def notices():
    return Notices()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def language(store):
    return LanguagePreference(store)


@pytest.fixture
def progress(store, clock, notices):
    points = PointsLedger(store)
    stats = StatsTracker(store)
    streak = StreakTracker(store, notices, today=clock)
    badges = BadgeEngine(store, stats, points, streak, notices, now=clock.now)
    history = QuizHistory(store)
    return SimpleNamespace(points=points, stats=stats, streak=streak, badges=badges, history=history)
