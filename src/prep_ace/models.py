"""Data classes for the quiz and progress domain model."""
from dataclasses import dataclass, field
from typing import Optional

from prep_ace.errors import InvalidQuestionError

DIFFICULTIES = ("Easy", "Medium", "Hard")
EXPLANATION_STYLES = ("Standard", "Simple", "Detailed", "Analogy")
MIN_OPTIONS = 3
MAX_OPTIONS = 4


@dataclass(frozen=True)
class QuizConfig:
    subject: str = ""
    topic: str = ""
    num_questions: int = 5
    difficulty: str = "Medium"
    explanation_style: str = "Standard"

    def to_dict(self) -> dict:
        return {
            "subject": self.subject,
            "topic": self.topic,
            "num_questions": self.num_questions,
            "difficulty": self.difficulty,
            "explanation_style": self.explanation_style,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QuizConfig":
        return cls(
            subject=str(data.get("subject") or ""),
            topic=str(data.get("topic") or ""),
            num_questions=int(data.get("num_questions", 5)),
            difficulty=str(data.get("difficulty") or "Medium"),
            explanation_style=str(data.get("explanation_style") or "Standard"),
        )


@dataclass(frozen=True)
class GeneratedQuestion:
    question: str
    options: tuple
    answer: str
    explanation: str = ""

    def validate(self) -> "GeneratedQuestion":
        """Raise InvalidQuestionError unless the question is well formed."""
        if not self.question.strip():
            raise InvalidQuestionError("Question text is empty.")
        if not MIN_OPTIONS <= len(self.options) <= MAX_OPTIONS:
            raise InvalidQuestionError(
                f"Expected {MIN_OPTIONS}-{MAX_OPTIONS} options, got {len(self.options)}."
            )
        if any(not option.strip() for option in self.options):
            raise InvalidQuestionError("Options must not be empty.")
        if len(set(self.options)) != len(self.options):
            raise InvalidQuestionError("Options must be unique.")
        if self.answer not in self.options:
            raise InvalidQuestionError(f"Answer {self.answer!r} is not one of the options.")
        return self

    def to_dict(self) -> dict:
        return {
            "question": self.question,
            "options": list(self.options),
            "answer": self.answer,
            "explanation": self.explanation,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GeneratedQuestion":
        """Build and validate a question from decoded provider output."""
        if not isinstance(data, dict):
            raise InvalidQuestionError("Question entry is not an object.")
        options = data.get("options")
        if not isinstance(options, (list, tuple)) or not all(isinstance(o, str) for o in options):
            raise InvalidQuestionError("Options must be a list of strings.")
        question = data.get("question")
        answer = data.get("answer")
        if not isinstance(question, str) or not isinstance(answer, str):
            raise InvalidQuestionError("Question and answer must be strings.")
        return cls(
            question=question.strip(),
            options=tuple(o.strip() for o in options),
            answer=answer.strip(),
            explanation=str(data.get("explanation") or "").strip(),
        ).validate()


@dataclass(frozen=True)
class AnsweredQuestion:
    question: GeneratedQuestion
    user_answer: Optional[str]
    is_correct: bool

    def to_dict(self) -> dict:
        data = self.question.to_dict()
        data["user_answer"] = self.user_answer
        data["is_correct"] = self.is_correct
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AnsweredQuestion":
        question = GeneratedQuestion(
            question=data["question"],
            options=tuple(data["options"]),
            answer=data["answer"],
            explanation=data.get("explanation", ""),
        )
        return cls(question, data.get("user_answer"), bool(data.get("is_correct")))


@dataclass(frozen=True)
class QuizAttemptResult:
    id: str
    timestamp: str
    config: QuizConfig
    questions: tuple
    score: int
    total_questions: int
    accuracy: float
    points_earned: int
    language: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "config": self.config.to_dict(),
            "questions": [q.to_dict() for q in self.questions],
            "score": self.score,
            "total_questions": self.total_questions,
            "accuracy": self.accuracy,
            "points_earned": self.points_earned,
            "language": self.language,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QuizAttemptResult":
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            config=QuizConfig.from_dict(data["config"]),
            questions=tuple(AnsweredQuestion.from_dict(q) for q in data["questions"]),
            score=int(data["score"]),
            total_questions=int(data["total_questions"]),
            accuracy=float(data["accuracy"]),
            points_earned=int(data["points_earned"]),
            language=data.get("language", "en"),
        )


@dataclass
class UserStats:
    total_quizzes_completed: int = 0
    unique_quiz_topics_completed: list = field(default_factory=list)
    total_flashcard_sets_generated: int = 0

    def to_dict(self) -> dict:
        return {
            "total_quizzes_completed": self.total_quizzes_completed,
            "unique_quiz_topics_completed": list(self.unique_quiz_topics_completed),
            "total_flashcard_sets_generated": self.total_flashcard_sets_generated,
        }


@dataclass(frozen=True)
class EarnedBadge:
    badge_id: str
    earned_at: str

    def to_dict(self) -> dict:
        return {"badge_id": self.badge_id, "earned_at": self.earned_at}


@dataclass
class StreakState:
    current_streak: int = 0
    last_completion_date: Optional[str] = None  # YYYY-MM-DD
    daily_goal: str = ""
    goal_achieved_today: bool = False

    def to_dict(self) -> dict:
        return {
            "current_streak": self.current_streak,
            "last_completion_date": self.last_completion_date,
            "daily_goal": self.daily_goal,
            "goal_achieved_today": self.goal_achieved_today,
        }


@dataclass(frozen=True)
class Flashcard:
    term: str
    definition: str

    def to_dict(self) -> dict:
        return {"term": self.term, "definition": self.definition}


@dataclass(frozen=True)
class ChatMessage:
    id: str
    role: str  # "user" | "assistant"
    content: str

    def to_dict(self) -> dict:
        return {"id": self.id, "role": self.role, "content": self.content}


@dataclass(frozen=True)
class Bookmark:
    bookmark_id: str
    original_message_id: str
    assistant_response: str
    user_prompt: str
    source: str
    bookmarked_at: str
    context: Optional[dict] = None  # {"subject": ..., "topic": ...} for the topic tutor

    def to_dict(self) -> dict:
        return {
            "bookmark_id": self.bookmark_id,
            "original_message_id": self.original_message_id,
            "assistant_response": self.assistant_response,
            "user_prompt": self.user_prompt,
            "source": self.source,
            "bookmarked_at": self.bookmarked_at,
            "context": self.context,
        }
