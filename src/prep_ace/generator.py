"""Content generation through a large-language-model provider.

``Generator`` is the interface the sessions depend on; ``GeminiGenerator``
binds it to Google Gemini. Callers re-validate everything returned here.
"""
import json
import logging
from typing import Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from prep_ace.errors import GenerationError
from prep_ace.language import language_name
from prep_ace.models import QuizConfig

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"

TRANSIENT_ERRORS = (
    google_exceptions.ResourceExhausted,
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.InternalServerError,
)

QUIZ_PROMPT = """You are an expert question setter for the RRB NTPC exam.
Write the response in {language} if possible. If not, English is acceptable.

Create {num_questions} multiple choice questions.
Subject: {subject}
Topic: {topic}
Difficulty: {difficulty}
Explanation style: {explanation_style}

Each question has 4 distinct options and exactly one correct answer.
The "answer" field must repeat the text of the correct option exactly.

Return only JSON in this format:
{{"questions": [{{"question": "...", "options": ["...", "...", "...", "..."],
"answer": "...", "explanation": "..."}}]}}
"""

FLASHCARD_PROMPT = """You create educational flashcards for RRB NTPC exam preparation.
Write the flashcards in {language} if possible. If not, English is acceptable.

Generate {count} flashcards.
Subject: {subject}
Topic: {topic}

Each flashcard has a short "term" and a concise "definition", both plain text.
Return only JSON in this format:
{{"flashcards": [{{"term": "...", "definition": "..."}}]}}
"""

SOLVER_PROMPT = """You are an expert tutor for the RRB NTPC exam.
Write the response in {language} if possible. If not, English is acceptable.

Solve every question in the paper below with step-by-step working, then give
a compact answer key.

Paper:
{paper}

Return only JSON in this format:
{{"solutions": "...", "answer_key": "..."}}
"""

STUDY_PLAN_PROMPT = """You are a study coach preparing a candidate for {target_exam}.
Write the plan in {language} if possible. If not, English is acceptable.

Study duration: {months}
Hours per week: {hours}
Subjects to focus on: {subjects}

Return only JSON in this format:
{{"plan_title": "...", "overview": "...",
"weekly_breakdown": [{{"week": "...", "focus_areas": ["..."], "suggested_activities": ["..."]}}],
"tips_for_success": ["..."]}}
"""


QA_CHAT_PROMPT = """You are a helpful AI assistant for RRB NTPC exam aspirants.
Answer the user's question directly and accurately. If it is outside the scope
of RRB NTPC preparation or general knowledge for such exams, say so politely.
Write the response in {language} if possible. If not, English is acceptable.
{history}
Current question:
User: {question}

Return only JSON in this format:
{{"answer": "..."}}
"""

TUTOR_PROMPT = """You are an AI tutor helping students understand and solve RRB NTPC problems.
Clarify the student's question and guide them towards the solution instead of
giving the answer away. Use the previous messages to judge what they already understand.
Write the response in {language} if possible. If not, English is acceptable.
{focus}
Question: {question}
{history}
Return only JSON in this format:
{{"answer": "..."}}
"""

CURRENT_AFFAIRS_PROMPT = """You are a current affairs expert.
Summarise recent (last 1-2 weeks) current affairs relevant to the RRB NTPC 2025 exam.
Category: {category}
Write the summary in {language} if possible. If not, English is acceptable.
Keep it factual, brief and easy to revise from, as bullet points or short paragraphs.
Prioritise events of national and international importance relevant to India.

Return only JSON in this format:
{{"summary": "..."}}
"""


class TransientGenerationError(GenerationError):
    """Provider error worth retrying (rate limit, timeout, 5xx)."""


def parse_json_response(text: str):
    """Decode a model reply, tolerating a surrounding Markdown code fence."""
    content = (text or "").strip()
    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    try:
        return json.loads(content.strip())
    except ValueError as exc:
        raise GenerationError("The AI returned a response that is not valid JSON.") from exc


def _items(data, field: str) -> list:
    if isinstance(data, dict):
        data = data.get(field)
    if not isinstance(data, list):
        raise GenerationError(f"The AI response has no {field} list.")
    return data


def _conversation(messages, user_label: str, assistant_label: str) -> str:
    if not messages:
        return ""
    lines = ["Previous conversation:"]
    for message in messages:
        label = user_label if message.get("role") == "user" else assistant_label
        lines.append(f"{label}: {message.get('content', '')}")
    return "\n".join(lines) + "\n"


def _text_field(data, field: str) -> str:
    value = data.get(field) if isinstance(data, dict) else None
    if not isinstance(value, str) or not value.strip():
        raise GenerationError(f"The AI response has no {field}.")
    return value.strip()


class Generator:
    """Interface of the generation collaborator."""

    def generate_quiz(self, config: QuizConfig, language: str) -> list:
        raise NotImplementedError

    def generate_flashcards(self, subject: str, topic: str, count: int, language: str) -> list:
        raise NotImplementedError

    def solve_paper(self, paper: str, language: str) -> dict:
        raise NotImplementedError

    def generate_study_plan(self, request: dict, language: str) -> dict:
        raise NotImplementedError

    def answer_question(self, question: str, previous_messages: list, language: str) -> str:
        raise NotImplementedError

    def clarify_question(
        self,
        question: str,
        previous_messages: list,
        language: str,
        subject: Optional[str] = None,
        topic: Optional[str] = None,
    ) -> str:
        raise NotImplementedError

    def summarize_current_affairs(self, category: str, language: str) -> dict:
        raise NotImplementedError


class GeminiGenerator(Generator):
    def __init__(self, api_key: str, model_name: str = DEFAULT_MODEL) -> None:
        if not api_key:
            raise GenerationError("GEMINI_API_KEY is not set.")
        genai.configure(api_key=api_key)
        self.model_name = model_name
        self.model = genai.GenerativeModel(model_name)

    @retry(
        retry=retry_if_exception_type(TransientGenerationError),
        wait=wait_exponential(multiplier=1, min=1, max=20),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    def _complete(self, prompt: str) -> str:
        try:
            response = self.model.generate_content(prompt)
        except TRANSIENT_ERRORS as exc:
            logger.warning("Transient error from %s: %s", self.model_name, exc)
            raise TransientGenerationError(str(exc)) from exc
        except google_exceptions.GoogleAPIError as exc:
            raise GenerationError(f"The AI provider rejected the request: {exc}") from exc
        try:
            return response.text
        except ValueError as exc:
            # Raised when the reply was blocked and carries no text parts.
            raise GenerationError("The AI returned an empty response.") from exc

    def _generate_json(self, prompt: str):
        return parse_json_response(self._complete(prompt))

    def generate_quiz(self, config: QuizConfig, language: str) -> list:
        prompt = QUIZ_PROMPT.format(language=language_name(language), **config.to_dict())
        return _items(self._generate_json(prompt), "questions")

    def generate_flashcards(self, subject: str, topic: str, count: int, language: str) -> list:
        prompt = FLASHCARD_PROMPT.format(
            language=language_name(language), subject=subject, topic=topic, count=count,
        )
        return _items(self._generate_json(prompt), "flashcards")

    def solve_paper(self, paper: str, language: str) -> dict:
        data = self._generate_json(SOLVER_PROMPT.format(language=language_name(language), paper=paper))
        if not isinstance(data, dict):
            raise GenerationError("The AI response is not an object.")
        return data

    def generate_study_plan(self, request: dict, language: str) -> dict:
        prompt = STUDY_PLAN_PROMPT.format(
            language=language_name(language),
            target_exam=request.get("target_exam", "RRB NTPC"),
            months=f"{request['months']} months" if request.get("months") else "not specified",
            hours=request.get("hours_per_week") or "not specified",
            subjects=", ".join(request.get("subjects") or []) or "all subjects",
        )
        data = self._generate_json(prompt)
        if not isinstance(data, dict):
            raise GenerationError("The AI response is not an object.")
        return data

    def answer_question(self, question: str, previous_messages: list, language: str) -> str:
        prompt = QA_CHAT_PROMPT.format(
            language=language_name(language),
            history=_conversation(previous_messages, "User", "Assistant"),
            question=question,
        )
        return _text_field(self._generate_json(prompt), "answer")

    def clarify_question(
        self,
        question: str,
        previous_messages: list,
        language: str,
        subject: Optional[str] = None,
        topic: Optional[str] = None,
    ) -> str:
        if subject:
            focus = f"The student is focusing on Subject: {subject}"
            focus += f", Topic: {topic}. " if topic else ". "
            focus += "Tailor your guidance accordingly."
        else:
            focus = "You are acting as a general AI tutor."
        prompt = TUTOR_PROMPT.format(
            language=language_name(language),
            focus=focus,
            question=question,
            history=_conversation(previous_messages, "Student", "Tutor"),
        )
        return _text_field(self._generate_json(prompt), "answer")

    def summarize_current_affairs(self, category: str, language: str) -> dict:
        prompt = CURRENT_AFFAIRS_PROMPT.format(language=language_name(language), category=category)
        data = self._generate_json(prompt)
        if not isinstance(data, dict):
            raise GenerationError("The AI response is not an object.")
        return data
