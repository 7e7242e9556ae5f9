"""Quiz session: configure, generate, take, and grade a generated quiz.

The session moves through ``configuring -> generating -> taking -> results``.
Answers are collected for every question and graded together on submit;
grading then feeds points, stats, badges and the attempt history.
"""
import dataclasses
import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from prep_ace.badges import BadgeEngine
from prep_ace.cache import LanguageCache
from prep_ace.errors import InvalidQuestionError, ValidationError
from prep_ace.generator import Generator
from prep_ace.history import QuizHistory
from prep_ace.language import LanguagePreference
from prep_ace.models import (
    DIFFICULTIES, EXPLANATION_STYLES, AnsweredQuestion, GeneratedQuestion, QuizAttemptResult,
    QuizConfig,
)
from prep_ace.notices import ERROR, INFO, SUCCESS, WARNING, Notifier, log_notifier
from prep_ace.points import PointsLedger
from prep_ace.stats import StatsTracker
from prep_ace.store import QUIZ_CACHE_KEY, PersistentStore

logger = logging.getLogger(__name__)

CONFIGURING = "configuring"
GENERATING = "generating"
TAKING = "taking"
RESULTS = "results"

MIN_QUESTIONS = 5
MAX_QUESTIONS = 10
POINTS_PER_CORRECT = 10


def validate_quiz_config(config: QuizConfig) -> QuizConfig:
    if not config.subject.strip():
        raise ValidationError("Please select a subject.")
    if not config.topic.strip():
        raise ValidationError("Please select a topic.")
    if not MIN_QUESTIONS <= config.num_questions <= MAX_QUESTIONS:
        raise ValidationError(f"Number of questions must be between {MIN_QUESTIONS} and {MAX_QUESTIONS}.")
    if config.difficulty not in DIFFICULTIES:
        raise ValidationError(f"Difficulty must be one of {', '.join(DIFFICULTIES)}.")
    if config.explanation_style not in EXPLANATION_STYLES:
        raise ValidationError(f"Explanation style must be one of {', '.join(EXPLANATION_STYLES)}.")
    return config


def parse_questions(items) -> list[GeneratedQuestion]:
    """Keep the well-formed questions from provider output, dropping the rest."""
    if not isinstance(items, list):
        return []
    questions = []
    for position, item in enumerate(items, 1):
        try:
            questions.append(GeneratedQuestion.from_dict(item))
        except InvalidQuestionError as exc:
            logger.warning("Rejected generated question %d: %s", position, exc)
    return questions


def grade(questions: list, user_answers: list) -> list[AnsweredQuestion]:
    return [
        AnsweredQuestion(question, answer, answer == question.answer)
        for question, answer in zip(questions, user_answers)
    ]


class QuizSession:
    def __init__(
        self,
        store: PersistentStore,
        generator: Generator,
        points: PointsLedger,
        stats: StatsTracker,
        badges: BadgeEngine,
        history: QuizHistory,
        language: LanguagePreference,
        notify: Notifier = log_notifier,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.generator = generator
        self.points = points
        self.stats = stats
        self.badges = badges
        self.history = history
        self.language = language
        self.notify = notify
        self.now = now
        self.cache = LanguageCache(store, QUIZ_CACHE_KEY)

        self.state = CONFIGURING
        self.config = QuizConfig()
        self.questions: list[GeneratedQuestion] = []
        self.user_answers: list[Optional[str]] = []
        self.current_index = 0
        self.language_at_generation: Optional[str] = None
        self.last_result: Optional[QuizAttemptResult] = None

    @property
    def current_question(self) -> Optional[GeneratedQuestion]:
        if not self.questions:
            return None
        return self.questions[self.current_index]

    @property
    def answered_count(self) -> int:
        return sum(1 for answer in self.user_answers if answer is not None)

    def configure(self, config: QuizConfig) -> QuizConfig:
        validate_quiz_config(config)
        if config != self.config:
            self._discard()
            self.state = CONFIGURING
        self.config = config
        self._remember_config()
        return config

    def update_config(self, **changes) -> QuizConfig:
        """Apply a form edit. Changing the subject clears the topic."""
        if "subject" in changes and changes["subject"] != self.config.subject:
            changes.setdefault("topic", "")
        self.config = dataclasses.replace(self.config, **changes)
        self._discard()
        self.state = CONFIGURING
        self._remember_config()
        return self.config

    def generate(self, language: Optional[str] = None) -> bool:
        """Generate questions for the current config. Returns True once the quiz can be taken."""
        if self.state == GENERATING:
            return False
        validate_quiz_config(self.config)
        language = language or self.language.get()
        self._discard()
        self.state = GENERATING
        try:
            items = self.generator.generate_quiz(self.config, language)
        except Exception as exc:
            logger.exception("Quiz generation failed for %s / %s", self.config.subject, self.config.topic)
            self.notify(str(exc) or "Failed to generate questions.", ERROR)
            self.state = CONFIGURING
            return False

        questions = parse_questions(items)
        if not questions:
            self.notify(
                "The AI couldn't generate questions for the given inputs. "
                "Try different topics or subjects.",
                WARNING,
            )
            self.state = CONFIGURING
            return False

        self._start(questions, language)
        self.cache.save(self.config.to_dict(), [q.to_dict() for q in questions], language)
        logger.info("Generated %d questions on %s (%s)", len(questions), self.config.topic, language)
        return True

    def select_answer(self, index: int, option: str) -> None:
        self._require(TAKING)
        if not 0 <= index < len(self.questions):
            raise ValidationError(f"No question at position {index + 1}.")
        if option not in self.questions[index].options:
            raise ValidationError(f"{option!r} is not one of the options.")
        self.user_answers[index] = option

    def navigate(self, direction: int) -> int:
        if self.questions:
            step = (direction > 0) - (direction < 0)
            self.current_index = min(max(self.current_index + step, 0), len(self.questions) - 1)
        return self.current_index

    def submit(self) -> QuizAttemptResult:
        self._require(TAKING)
        answered = grade(self.questions, self.user_answers)
        score = sum(1 for question in answered if question.is_correct)
        total = len(answered)
        points_earned = score * POINTS_PER_CORRECT
        result = QuizAttemptResult(
            id=uuid.uuid4().hex,
            timestamp=self.now().isoformat(),
            config=self.config,
            questions=tuple(answered),
            score=score,
            total_questions=total,
            accuracy=round(score / total * 100, 1) if total else 0.0,
            points_earned=points_earned,
            language=self.language_at_generation or self.language.get(),
        )

        self.points.add(points_earned)
        self.stats.update(quiz_completed=True, topic=self.config.topic, subject=self.config.subject)
        self.badges.check_and_award()
        self.history.append(result)

        self.last_result = result
        self.state = RESULTS
        self._remember_config()
        self.notify(
            f"Quiz submitted! You scored {score}/{total} and earned {points_earned} points.", SUCCESS,
        )
        return result

    def new_quiz(self) -> None:
        self._require(RESULTS)
        self.reset()

    def reset(self) -> None:
        self._discard()
        self.state = CONFIGURING
        self._remember_config()

    def clear(self) -> None:
        """Forget the quiz and its config without writing to the store."""
        self._discard()
        self.state = CONFIGURING
        self.config = QuizConfig()
        self.last_result = None

    def restore(self) -> bool:
        """Reload the last config, and its questions if they match the current language."""
        data = self.cache.load_config()
        if isinstance(data, dict):
            try:
                self.config = validate_quiz_config(QuizConfig.from_dict(data))
            except (TypeError, ValueError, ValidationError):
                logger.warning("Ignoring unreadable cached quiz config")
                self.config = QuizConfig()
                return False
        language = self.language.get()
        artifact = self.cache.load(language)
        if artifact is None:
            if self.cache.language() not in (None, language):
                self._remember_config()
            return False
        questions = parse_questions(artifact)
        if not questions:
            return False
        self._start(questions, language)
        return True

    def on_language_change(self, language: str) -> bool:
        """Drop questions generated in another language. Returns True if the session was reset."""
        if self.language_at_generation is None or language == self.language_at_generation:
            return False
        self.reset()
        self.notify("Language changed. Please regenerate the quiz for the new language.", INFO)
        return True

    def watch_language(self) -> Callable[[], None]:
        return self.language.subscribe(self.on_language_change)

    def _start(self, questions: list, language: str) -> None:
        self.questions = list(questions)
        self.user_answers = [None] * len(questions)
        self.current_index = 0
        self.language_at_generation = language
        self.last_result = None
        self.state = TAKING

    def _discard(self) -> None:
        self.questions = []
        self.user_answers = []
        self.current_index = 0
        self.language_at_generation = None

    def _remember_config(self) -> None:
        self.cache.save(self.config.to_dict(), None, self.language.get())

    def _require(self, state: str) -> None:
        if self.state != state:
            raise ValidationError(f"Quiz is {self.state}, expected {state}.")
