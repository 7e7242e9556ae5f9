"""Question-paper solver, study planner and current-affairs summaries.

Each is a one-shot generator whose latest result is kept in a
language-scoped cache until the language changes or the user clears it.
"""
import logging
from typing import Callable, Optional

from prep_ace.cache import LanguageCache
from prep_ace.errors import GenerationError, ValidationError
from prep_ace.generator import Generator
from prep_ace.language import LanguagePreference
from prep_ace.notices import ERROR, INFO, Notifier, log_notifier
from prep_ace.store import (
    CURRENT_AFFAIRS_CACHE_KEY, SOLVER_CACHE_KEY, STUDY_PLAN_CACHE_KEY, PersistentStore,
)

logger = logging.getLogger(__name__)


def _text(data: dict, field: str) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise GenerationError(f"The AI response is missing {field}.")
    return value.strip()


def _strings(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


class CachedTool:
    cache_key = ""
    name = "content"

    def __init__(
        self,
        store: PersistentStore,
        generator: Generator,
        language: LanguagePreference,
        notify: Notifier = log_notifier,
    ) -> None:
        self.generator = generator
        self.language = language
        self.notify = notify
        self.cache = LanguageCache(store, self.cache_key)

    def cached(self) -> Optional[dict]:
        return self.cache.load(self.language.get())

    def cached_request(self) -> Optional[dict]:
        return self.cache.load_config()

    def clear(self) -> None:
        self.cache.clear()

    def on_language_change(self, language: str) -> bool:
        stored = self.cache.language()
        if stored is None or stored == language or self.cache.load(stored) is None:
            return False
        self.cache.clear()
        self.notify(f"Language changed. Please regenerate the {self.name} for the new language.", INFO)
        return True

    def watch_language(self) -> Callable[[], None]:
        return self.language.subscribe(self.on_language_change)

    def _run(self, request: dict, call: Callable[[str], dict], normalize: Callable[[dict], dict]):
        language = self.language.get()
        try:
            result = normalize(call(language))
        except Exception as exc:
            logger.exception("%s generation failed", self.name)
            self.notify(str(exc) or f"Failed to generate the {self.name}.", ERROR)
            return None
        self.cache.save(request, result, language)
        return result


class QuestionSolver(CachedTool):
    cache_key = SOLVER_CACHE_KEY
    name = "solution"

    def solve(self, paper: str) -> Optional[dict]:
        paper = (paper or "").strip()
        if not paper:
            raise ValidationError("Please enter the question paper text.")
        return self._run(
            {"paper": paper},
            lambda language: self.generator.solve_paper(paper, language),
            self._normalize,
        )

    @staticmethod
    def _normalize(data: dict) -> dict:
        return {"solutions": _text(data, "solutions"), "answer_key": _text(data, "answer_key")}


class StudyPlanner(CachedTool):
    cache_key = STUDY_PLAN_CACHE_KEY
    name = "study plan"

    def plan(
        self,
        target_exam: str = "RRB NTPC 2025",
        months: Optional[int] = None,
        hours_per_week: Optional[int] = None,
        subjects: Optional[list] = None,
    ) -> Optional[dict]:
        if not (target_exam or "").strip():
            raise ValidationError("Please enter the target exam.")
        if months is not None and months <= 0:
            raise ValidationError("Study duration must be a positive number of months.")
        if hours_per_week is not None and hours_per_week <= 0:
            raise ValidationError("Hours per week must be positive.")
        request = {
            "target_exam": target_exam.strip(),
            "months": months,
            "hours_per_week": hours_per_week,
            "subjects": _strings(subjects or []),
        }
        return self._run(
            request,
            lambda language: self.generator.generate_study_plan(request, language),
            self._normalize,
        )

    @staticmethod
    def _normalize(data: dict) -> dict:
        weeks = []
        for entry in data.get("weekly_breakdown") or []:
            if isinstance(entry, dict) and isinstance(entry.get("week"), str):
                weeks.append({
                    "week": entry["week"].strip(),
                    "focus_areas": _strings(entry.get("focus_areas")),
                    "suggested_activities": _strings(entry.get("suggested_activities")),
                })
        if not weeks:
            raise GenerationError("The AI response has no weekly breakdown.")
        return {
            "plan_title": _text(data, "plan_title"),
            "overview": _text(data, "overview"),
            "weekly_breakdown": weeks,
            "tips_for_success": _strings(data.get("tips_for_success")),
        }


CATEGORIES = (
    "General",
    "National",
    "International",
    "Sports",
    "Science & Technology",
    "Economy",
    "Awards & Honors",
    "Summits & Conferences",
)


class CurrentAffairs(CachedTool):
    cache_key = CURRENT_AFFAIRS_CACHE_KEY
    name = "current affairs"

    def summarize(self, category: str = "General") -> Optional[dict]:
        if category not in CATEGORIES:
            raise ValidationError(f"Category must be one of {', '.join(CATEGORIES)}.")
        return self._run(
            {"category": category},
            lambda language: self.generator.summarize_current_affairs(category, language),
            self._normalize,
        )

    @staticmethod
    def _normalize(data: dict) -> dict:
        return {"summary": _text(data, "summary")}
