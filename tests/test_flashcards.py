"""Tests for generated flashcard decks."""
import pytest

from prep_ace.errors import GenerationError, ValidationError
from prep_ace.flashcards import CONFIGURING, VIEWING, FlashcardSession, parse_flashcards
from prep_ace.store import FLASHCARD_CACHE_KEY, read_json


@pytest.fixture
def deck(store, generator, progress, language, notices):
    return FlashcardSession(store, generator, progress.stats, progress.badges, language, notices)


def test_configure_validates(deck):
    with pytest.raises(ValidationError, match="subject"):
        deck.configure("", "Physics", 5)
    with pytest.raises(ValidationError, match="topic"):
        deck.configure("General Science", " ", 5)
    with pytest.raises(ValidationError, match="between 3 and 15"):
        deck.configure("General Science", "Physics", 2)
    with pytest.raises(ValidationError, match="between 3 and 15"):
        deck.configure("General Science", "Physics", 16)


def test_generate_requires_configuration(deck):
    with pytest.raises(ValidationError):
        deck.generate()


def test_generate_shows_first_card(deck, generator, notices):
    deck.configure("General Science", "Physics", 3)
    assert deck.generate() is True
    assert deck.state == VIEWING
    assert deck.current_card.term == "SI unit of power"
    assert deck.flipped is False
    assert generator.calls[0] == ("flashcards", "General Science", "Physics", 3, "en")
    assert notices.messages[-1] == "3 flashcards generated!"


def test_generate_counts_flashcard_set(deck, progress):
    deck.configure("General Science", "Physics", 3)
    deck.generate()
    deck.generate()
    assert progress.stats.get().total_flashcard_sets_generated == 2


def test_generate_failure_returns_to_configuring(deck, generator, notices, progress):
    generator.error = GenerationError("Rate limited")
    deck.configure("General Science", "Physics", 3)
    assert deck.generate() is False
    assert deck.state == CONFIGURING
    assert notices[-1] == ("Rate limited", "error")
    assert progress.stats.get().total_flashcard_sets_generated == 0


def test_generate_empty_result_warns(deck, generator, notices):
    generator.flashcards = [{"term": "", "definition": "nothing"}]
    deck.configure("General Science", "Physics", 3)
    assert deck.generate() is False
    assert deck.state == CONFIGURING
    assert notices[-1][1] == "warning"


def test_flip_and_navigate(deck):
    deck.configure("General Science", "Physics", 3)
    deck.generate()
    assert deck.flip() is True
    assert deck.navigate(1) == 1
    assert deck.flipped is False
    deck.navigate(1)
    assert deck.navigate(1) == 2
    assert deck.navigate(-5) == 1


def test_generate_caches_deck(deck, store):
    deck.configure("General Science", "Physics", 3)
    deck.generate()
    entry = read_json(store, FLASHCARD_CACHE_KEY)
    assert entry["language"] == "en"
    assert entry["config"] == {"subject": "General Science", "topic": "Physics", "num_flashcards": 3}
    assert len(entry["artifact"]) == 3


def test_restore_same_language(deck, store, generator, progress, language, notices):
    deck.configure("General Science", "Physics", 3)
    deck.generate()
    fresh = FlashcardSession(store, generator, progress.stats, progress.badges, language, notices)
    assert fresh.restore() is True
    assert fresh.state == VIEWING
    assert fresh.topic == "Physics"
    assert len(fresh.cards) == 3


def test_restore_other_language_keeps_config_only(deck, store, generator, progress, language, notices):
    deck.configure("General Science", "Physics", 3)
    deck.generate()
    language.set("kn")
    fresh = FlashcardSession(store, generator, progress.stats, progress.badges, language, notices)
    assert fresh.restore() is False
    assert fresh.state == CONFIGURING
    assert fresh.subject == "General Science"
    assert fresh.num_flashcards == 3


def test_language_change_resets_deck(deck, language, notices):
    deck.watch_language()
    deck.configure("General Science", "Physics", 3)
    deck.generate()
    language.set("hi")
    assert deck.state == CONFIGURING
    assert deck.cards == []
    assert "regenerate flashcards" in notices.messages[-1]


def test_clear_forgets_deck_without_writing(deck, store):
    deck.configure("General Science", "Physics", 3)
    deck.generate()
    store.remove(FLASHCARD_CACHE_KEY)
    deck.clear()
    assert deck.state == CONFIGURING
    assert deck.cards == []
    assert (deck.subject, deck.topic, deck.num_flashcards) == ("", "", 5)
    assert store.get(FLASHCARD_CACHE_KEY) is None


def test_parse_flashcards_skips_malformed():
    cards = parse_flashcards([
        {"term": "Ohm", "definition": "Unit of resistance"},
        {"term": "Volt"},
        "Ampere",
    ])
    assert [card.term for card in cards] == ["Ohm"]
