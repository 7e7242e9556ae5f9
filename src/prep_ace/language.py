"""Preferred language for generated content."""
from typing import Callable

from prep_ace.errors import ValidationError
from prep_ace.store import LANGUAGE_KEY, PersistentStore

DEFAULT_LANGUAGE = "en"

SUPPORTED_LANGUAGES = {
    "en": "English",
    "hi": "Hindi (हिन्दी)",
    "mr": "Marathi (मराठी)",
    "te": "Telugu (తెలుగు)",
    "kn": "Kannada (ಕನ್ನಡ)",
    "gu": "Gujarati (ગુજરાતી)",
}


def language_name(code: str) -> str:
    return SUPPORTED_LANGUAGES.get(code, code)


class LanguagePreference:
    def __init__(self, store: PersistentStore) -> None:
        self.store = store

    def get(self) -> str:
        code = self.store.get(LANGUAGE_KEY)
        return code if code in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE

    def set(self, code: str) -> str:
        code = (code or "").strip().lower()
        if code not in SUPPORTED_LANGUAGES:
            raise ValidationError(f"Unsupported language: {code!r}")
        self.store.set(LANGUAGE_KEY, code)
        return code

    def subscribe(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Call ``callback(code)`` whenever the stored preference changes."""
        return self.store.subscribe(lambda key, value: callback(self.get()), key=LANGUAGE_KEY)
