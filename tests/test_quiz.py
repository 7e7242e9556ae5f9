# tests/test_quiz.py
import pytest

from conftest import make_questions
from prep_ace.errors import GenerationError, ValidationError
from prep_ace.models import QuizConfig
from prep_ace.quiz import (
    CONFIGURING, RESULTS, TAKING, QuizSession, grade, parse_questions, validate_quiz_config,
)
from prep_ace.store import QUIZ_CACHE_KEY, read_json, write_json

CONFIG = QuizConfig(subject="Mathematics", topic="Percentage", num_questions=5, difficulty="Easy")


@pytest.fixture
def session(store, generator, progress, language, notices, clock):
    return QuizSession(
        store, generator, progress.points, progress.stats, progress.badges, progress.history,
        language, notices, now=clock.now,
    )


def ready(session, config=CONFIG):
    session.configure(config)
    assert session.generate() is True
    return session


def answer_all(session, correct):
    for i, question in enumerate(session.questions):
        option = question.answer if i < correct else next(o for o in question.options if o != question.answer)
        session.select_answer(i, option)


def test_validate_quiz_config_accepts_bounds():
    validate_quiz_config(QuizConfig("Mathematics", "Percentage", 5))
    validate_quiz_config(QuizConfig("Mathematics", "Percentage", 10))


@pytest.mark.parametrize("config, message", [
    (QuizConfig("", "Percentage", 5), "subject"),
    (QuizConfig("Mathematics", "  ", 5), "topic"),
    (QuizConfig("Mathematics", "Percentage", 4), "between 5 and 10"),
    (QuizConfig("Mathematics", "Percentage", 11), "between 5 and 10"),
    (QuizConfig("Mathematics", "Percentage", 5, difficulty="Extreme"), "Difficulty"),
])
def test_validate_quiz_config_rejects(config, message):
    with pytest.raises(ValidationError, match=message):
        validate_quiz_config(config)


def test_new_session_is_configuring(session):
    assert session.state == CONFIGURING
    assert session.questions == []
    assert session.current_question is None


def test_generate_starts_taking(session, generator):
    ready(session)
    assert session.state == TAKING
    assert len(session.questions) == 5
    assert session.user_answers == [None] * 5
    assert session.current_index == 0
    assert generator.calls[0] == ("quiz", CONFIG, "en")


def test_generate_uses_selected_language(session, language, generator):
    language.set("hi")
    ready(session)
    assert generator.calls[0][2] == "hi"
    assert session.language_at_generation == "hi"


def test_generate_validates_config_first(session, generator):
    session.update_config(subject="Mathematics")
    with pytest.raises(ValidationError, match="topic"):
        session.generate()
    assert generator.calls == []
    assert session.state == CONFIGURING


def test_generate_drops_invalid_questions(session, generator):
    questions = make_questions(3)
    questions[1]["answer"] = "Not an option"
    questions[2]["options"] = ["Only", "Two"]
    generator.questions = questions
    ready(session)
    assert len(session.questions) == 1
    assert all(q.answer in q.options for q in session.questions)


def test_generate_with_no_valid_questions_stays_configuring(session, generator, notices):
    generator.questions = []
    session.configure(CONFIG)
    assert session.generate() is False
    assert session.state == CONFIGURING
    assert "couldn't generate questions" in notices.messages[-1]


def test_generate_failure_reverts_to_configuring(session, generator, notices):
    generator.error = GenerationError("Provider unavailable")
    session.configure(CONFIG)
    assert session.generate() is False
    assert session.state == CONFIGURING
    assert session.questions == []
    assert notices[-1] == ("Provider unavailable", "error")


def test_generate_unexpected_error_is_caught(session, generator):
    generator.error = RuntimeError("socket closed")
    session.configure(CONFIG)
    assert session.generate() is False
    assert session.state == CONFIGURING


def test_generate_caches_questions_with_language(session, store):
    ready(session)
    entry = read_json(store, QUIZ_CACHE_KEY)
    assert entry["language"] == "en"
    assert entry["config"]["topic"] == "Percentage"
    assert len(entry["artifact"]) == 5


def test_select_answer_records_option(session):
    ready(session)
    option = session.questions[2].options[1]
    session.select_answer(2, option)
    assert session.user_answers[2] == option
    assert session.answered_count == 1


def test_select_answer_rejects_unknown_option(session):
    ready(session)
    with pytest.raises(ValidationError):
        session.select_answer(0, "Made up")


def test_select_answer_rejects_bad_index(session):
    ready(session)
    with pytest.raises(ValidationError):
        session.select_answer(5, session.questions[0].answer)


def test_select_answer_requires_taking(session):
    with pytest.raises(ValidationError):
        session.select_answer(0, "anything")


def test_navigate_clamps(session):
    ready(session)
    assert session.navigate(-1) == 0
    for _ in range(10):
        session.navigate(1)
    assert session.current_index == 4
    assert session.navigate(-1) == 3


def test_submit_all_correct(session, progress):
    ready(session)
    answer_all(session, correct=5)
    result = session.submit()
    assert result.score == 5
    assert result.points_earned == 50
    assert result.accuracy == 100.0
    assert session.state == RESULTS
    assert progress.points.get() == 50
    assert len(progress.history) == 1


def test_submit_partial_score(session, progress):
    ready(session)
    answer_all(session, correct=3)
    result = session.submit()
    assert result.score == 3
    assert result.points_earned == 30
    assert [q.is_correct for q in result.questions] == [True, True, True, False, False]


def test_submit_unanswered_counts_as_incorrect(session):
    ready(session)
    session.select_answer(0, session.questions[0].answer)
    result = session.submit()
    assert result.score == 1
    assert result.questions[1].user_answer is None
    assert result.questions[1].is_correct is False


def test_submit_updates_stats_and_badges(session, progress):
    ready(session)
    answer_all(session, correct=5)
    session.submit()
    stats = progress.stats.get()
    assert stats.total_quizzes_completed == 1
    assert stats.unique_quiz_topics_completed == ["Percentage"]
    assert "quiz_novice" in progress.badges.earned_ids()


def test_submit_records_config_snapshot_and_language(session, language):
    language.set("mr")
    ready(session)
    result = session.submit()
    assert result.config == CONFIG
    assert result.language == "mr"
    assert result.timestamp.startswith("2025-03-10")


def test_submit_requires_taking(session):
    with pytest.raises(ValidationError):
        session.submit()


def test_submit_twice_is_rejected(session, progress):
    ready(session)
    session.submit()
    with pytest.raises(ValidationError):
        session.submit()
    assert len(progress.history) == 1


def test_new_quiz_after_results(session):
    ready(session)
    session.submit()
    session.new_quiz()
    assert session.state == CONFIGURING
    assert session.config == CONFIG
    assert session.questions == []


def test_reset_from_taking(session):
    ready(session)
    session.reset()
    assert session.state == CONFIGURING
    assert session.user_answers == []


def test_update_config_subject_change_clears_topic(session):
    session.update_config(subject="Mathematics", topic="Percentage")
    session.update_config(subject="General Awareness")
    assert session.config.subject == "General Awareness"
    assert session.config.topic == ""


def test_update_config_discards_questions(session):
    ready(session)
    session.update_config(difficulty="Hard")
    assert session.state == CONFIGURING
    assert session.questions == []


def test_configure_same_config_keeps_questions(session):
    ready(session)
    session.configure(CONFIG)
    assert session.state == TAKING
    assert len(session.questions) == 5


def test_configure_different_config_discards_questions(session):
    ready(session)
    session.configure(QuizConfig("Mathematics", "Decimals", 5))
    assert session.state == CONFIGURING
    assert session.questions == []


def test_language_change_resets_active_quiz(session, language, notices):
    ready(session)
    language.set("hi")
    assert session.on_language_change("hi") is True
    assert session.state == CONFIGURING
    assert "Language changed" in notices.messages[-1]


def test_language_change_notifies_once(session, language, notices):
    session.watch_language()
    ready(session)
    language.set("hi")
    language.set("te")
    assert sum("Language changed" in m for m in notices.messages) == 1
    assert session.state == CONFIGURING


def test_language_change_without_quiz_is_silent(session, language, notices):
    session.watch_language()
    language.set("hi")
    assert notices == []


def test_restore_resumes_cached_quiz(store, session, generator, progress, language, notices):
    ready(session)
    fresh = QuizSession(
        store, generator, progress.points, progress.stats, progress.badges, progress.history,
        language, notices,
    )
    assert fresh.restore() is True
    assert fresh.state == TAKING
    assert fresh.config == CONFIG
    assert fresh.user_answers == [None] * 5


def test_restore_ignores_other_language(store, session, generator, progress, language, notices):
    ready(session)
    language.set("gu")
    fresh = QuizSession(
        store, generator, progress.points, progress.stats, progress.badges, progress.history,
        language, notices,
    )
    assert fresh.restore() is False
    assert fresh.state == CONFIGURING
    assert fresh.config == CONFIG
    assert read_json(store, QUIZ_CACHE_KEY)["artifact"] is None


def test_restore_after_submit_has_no_questions(store, session, generator, progress, language, notices):
    ready(session)
    session.submit()
    fresh = QuizSession(
        store, generator, progress.points, progress.stats, progress.badges, progress.history,
        language, notices,
    )
    assert fresh.restore() is False
    assert fresh.config == CONFIG


def test_restore_rejects_out_of_range_config(store, session, generator, progress, language, notices):
    ready(session)
    entry = read_json(store, QUIZ_CACHE_KEY)
    entry["config"]["num_questions"] = 99
    write_json(store, QUIZ_CACHE_KEY, entry)
    fresh = QuizSession(
        store, generator, progress.points, progress.stats, progress.badges, progress.history,
        language, notices,
    )
    assert fresh.restore() is False
    assert fresh.config == QuizConfig()
    assert fresh.state == CONFIGURING
    assert fresh.questions == []


def test_clear_forgets_config_without_writing(store, session):
    ready(session)
    store.remove(QUIZ_CACHE_KEY)
    session.clear()
    assert session.state == CONFIGURING
    assert session.config == QuizConfig()
    assert session.questions == []
    assert store.get(QUIZ_CACHE_KEY) is None


def test_parse_questions_handles_non_list():
    assert parse_questions({"questions": []}) == []
    assert parse_questions(None) == []


def test_grade_compares_exact_answer():
    questions = parse_questions(make_questions(2))
    graded = grade(questions, ["Option 1A", "option 2a"])
    assert [q.is_correct for q in graded] == [True, False]
