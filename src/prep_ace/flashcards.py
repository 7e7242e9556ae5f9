"""Generated flashcard decks."""
import logging
from typing import Callable, Optional

from prep_ace.badges import BadgeEngine
from prep_ace.cache import LanguageCache
from prep_ace.errors import ValidationError
from prep_ace.generator import Generator
from prep_ace.language import LanguagePreference
from prep_ace.models import Flashcard
from prep_ace.notices import ERROR, INFO, SUCCESS, WARNING, Notifier, log_notifier
from prep_ace.stats import StatsTracker
from prep_ace.store import FLASHCARD_CACHE_KEY, PersistentStore

logger = logging.getLogger(__name__)

CONFIGURING = "configuring"
GENERATING = "generating"
VIEWING = "viewing"

MIN_FLASHCARDS = 3
MAX_FLASHCARDS = 15


def parse_flashcards(items) -> list[Flashcard]:
    if not isinstance(items, list):
        return []
    cards = []
    for item in items:
        if not isinstance(item, dict):
            continue
        term = item.get("term")
        definition = item.get("definition")
        if isinstance(term, str) and isinstance(definition, str) and term.strip() and definition.strip():
            cards.append(Flashcard(term.strip(), definition.strip()))
        else:
            logger.warning("Rejected malformed flashcard: %r", item)
    return cards


class FlashcardSession:
    def __init__(
        self,
        store: PersistentStore,
        generator: Generator,
        stats: StatsTracker,
        badges: BadgeEngine,
        language: LanguagePreference,
        notify: Notifier = log_notifier,
    ) -> None:
        self.generator = generator
        self.stats = stats
        self.badges = badges
        self.language = language
        self.notify = notify
        self.cache = LanguageCache(store, FLASHCARD_CACHE_KEY)

        self.state = CONFIGURING
        self.subject = ""
        self.topic = ""
        self.num_flashcards = 5
        self.cards: list[Flashcard] = []
        self.current_index = 0
        self.flipped = False
        self.language_at_generation: Optional[str] = None

    @property
    def current_card(self) -> Optional[Flashcard]:
        return self.cards[self.current_index] if self.cards else None

    def config(self) -> dict:
        return {"subject": self.subject, "topic": self.topic, "num_flashcards": self.num_flashcards}

    def configure(self, subject: str, topic: str, num_flashcards: int = 5) -> dict:
        if not (subject or "").strip():
            raise ValidationError("Please select a subject.")
        if not (topic or "").strip():
            raise ValidationError("Please select a topic.")
        if not MIN_FLASHCARDS <= num_flashcards <= MAX_FLASHCARDS:
            raise ValidationError(
                f"Number of flashcards must be between {MIN_FLASHCARDS} and {MAX_FLASHCARDS}."
            )
        self.subject, self.topic, self.num_flashcards = subject.strip(), topic.strip(), num_flashcards
        self.reset()
        return self.config()

    def generate(self, language: Optional[str] = None) -> bool:
        if self.state == GENERATING:
            return False
        if not self.subject or not self.topic:
            raise ValidationError("Please choose a subject and topic first.")
        language = language or self.language.get()
        self._discard()
        self.state = GENERATING
        try:
            items = self.generator.generate_flashcards(self.subject, self.topic, self.num_flashcards, language)
        except Exception as exc:
            logger.exception("Flashcard generation failed for %s / %s", self.subject, self.topic)
            self.notify(str(exc) or "Failed to generate flashcards.", ERROR)
            self.state = CONFIGURING
            return False

        cards = parse_flashcards(items)
        if not cards:
            self.notify("The AI couldn't generate flashcards for this topic. Try another one.", WARNING)
            self.state = CONFIGURING
            return False

        self._start(cards, language)
        self.cache.save(self.config(), [card.to_dict() for card in cards], language)
        self.stats.update(flashcard_set_generated=True)
        self.badges.check_and_award()
        self.notify(f"{len(cards)} flashcards generated!", SUCCESS)
        return True

    def flip(self) -> bool:
        if self.cards:
            self.flipped = not self.flipped
        return self.flipped

    def navigate(self, direction: int) -> int:
        if self.cards:
            step = (direction > 0) - (direction < 0)
            self.current_index = min(max(self.current_index + step, 0), len(self.cards) - 1)
            self.flipped = False
        return self.current_index

    def reset(self) -> None:
        self._discard()
        self.state = CONFIGURING
        self.cache.save(self.config(), None, self.language.get())

    def clear(self) -> None:
        """Forget the deck and its config without writing to the store."""
        self._discard()
        self.state = CONFIGURING
        self.subject, self.topic, self.num_flashcards = "", "", 5

    def restore(self) -> bool:
        config = self.cache.load_config()
        if isinstance(config, dict):
            self.subject = str(config.get("subject") or "")
            self.topic = str(config.get("topic") or "")
            count = config.get("num_flashcards")
            if isinstance(count, int) and MIN_FLASHCARDS <= count <= MAX_FLASHCARDS:
                self.num_flashcards = count
        language = self.language.get()
        cards = parse_flashcards(self.cache.load(language))
        if not cards:
            if self.cache.language() not in (None, language):
                self.reset()
            return False
        self._start(cards, language)
        return True

    def on_language_change(self, language: str) -> bool:
        if self.language_at_generation is None or language == self.language_at_generation:
            return False
        self.reset()
        self.notify("Language changed. Please regenerate flashcards for the new language.", INFO)
        return True

    def watch_language(self) -> Callable[[], None]:
        return self.language.subscribe(self.on_language_change)

    def _start(self, cards: list, language: str) -> None:
        self.cards = list(cards)
        self.current_index = 0
        self.flipped = False
        self.language_at_generation = language
        self.state = VIEWING

    def _discard(self) -> None:
        self.cards = []
        self.current_index = 0
        self.flipped = False
        self.language_at_generation = None
