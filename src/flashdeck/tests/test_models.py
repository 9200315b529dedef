"""Tests for card and status models."""
import pytest

from flashdeck.models.card import (
    Card,
    CardType,
    LangVocabContent,
    QuoteContent,
    VocabContent,
    card_id,
    hash32,
)
from flashdeck.models.status import LangVocabStatus, VocabStatus, all_passed, rolling_complete


def test_hash32_empty_string():
    """Test that an empty string hashes to zero."""
    assert hash32("") == 0


def test_hash32_known_values():
    """Test the rolling hash against known values."""
    assert hash32("a") == 97
    assert hash32("ab") == 97 * 31 + 98
    assert hash32("hello") == 99162322


def test_hash32_wraps_to_signed_32_bits():
    """Test that the hash overflows like a signed 32-bit integer."""
    assert hash32("polygenelubricants") == -2147483648
    long_text = "spaced repetition " * 50
    assert -2**31 <= hash32(long_text) < 2**31


def test_card_id_per_type():
    """Test that ids are derived from the key fields of each type."""
    vocab = VocabContent(question="hond", answer="dog", incorrect=["cat"])
    lang = LangVocabContent(words=["hond", "dog"])
    quote = QuoteContent(quote="Carpe diem")

    assert card_id(vocab, CardType.VOCAB) == f"vocab-{hash32('honddog')}"
    assert card_id(lang, CardType.LANG_VOCAB) == f"lang_vocab-{hash32('honddog')}"
    assert card_id(quote, CardType.QUOTE) == f"quote-{hash32('Carpe diem')}"


def test_card_id_ignores_non_key_fields():
    """Test that the same key fields always produce the same id."""
    first = VocabContent(question="kat", answer="cat", incorrect=["dog", "cow", "pig"])
    second = VocabContent(question="kat", answer="cat", incorrect=["owl"], description="animal")
    assert card_id(first, CardType.VOCAB) == card_id(second, CardType.VOCAB)


def test_card_from_dict_defaults():
    """Test card creation from a plain dict without id, level or schedule."""
    card = Card.from_dict({
        "type": "vocab",
        "content": {"question": "huis", "answer": "house", "incorrect": ["tree", "car", "boat"]},
    })

    assert card.id == f"vocab-{hash32('huishouse')}"
    assert card.level == 0
    assert card.schedule is None
    assert card.content.incorrect == ["tree", "car", "boat"]


def test_card_from_dict_reads_legacy_audio():
    """Test that audio under files.aud is picked up."""
    card = Card.from_dict({
        "type": "lang_vocab",
        "content": {"words": ["boom", "tree"], "incorrect": [["huis"], ["house"]]},
        "files": {"aud": ["boom.mp3"]},
    })

    assert card.audio_file(0) == "boom.mp3"
    assert card.audio_file(1) is None
    assert card.audio_files() == ["boom.mp3"]


def test_card_dict_conversion_keeps_scheduling():
    """Test that to_dict/from_dict keep level and schedule."""
    content = LangVocabContent(words=["fiets", "bike"], lang=["nl", "en"])
    card = Card(id=card_id(content, CardType.LANG_VOCAB), type=CardType.LANG_VOCAB,
                content=content, level=4, schedule=321)

    restored = Card.from_dict(card.to_dict())

    assert restored == card


def test_card_from_dict_unknown_type():
    """Test that unknown card types are rejected."""
    with pytest.raises(ValueError):
        Card.from_dict({"type": "cloze", "content": {}})


@pytest.mark.parametrize("history, expected", [
    ([], False),
    ([True, True], False),
    ([True, True, True], True),
    ([True, False, True, True, True], True),
    ([True, True, True, False], False),
    ([False, True, True], False),
])
def test_rolling_complete(history, expected):
    """Test the rolling window of three correct answers."""
    assert rolling_complete(history, 3) is expected


@pytest.mark.parametrize("history, expected", [
    ([True, True, True], True),
    ([True, False, True, True, True], False),
    ([False], False),
])
def test_all_passed(history, expected):
    """Test that any mistake means the card did not pass."""
    assert all_passed(history) is expected


def test_fresh_statuses():
    """Test initial status values."""
    vocab = VocabStatus()
    lang = LangVocabStatus()

    assert vocab.history == [] and not vocab.completed and not vocab.passed
    assert lang.history == [[], []]
    assert lang.l1 == 0 and lang.l2 == 1
