"""Card data model and content-derived card ids."""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Union
import logging


logger = logging.getLogger(__name__)


class CardType(Enum):
    """Available card types."""
    VOCAB = "vocab"  # Single direction multiple choice
    LANG_VOCAB = "lang_vocab"  # Word pair tested in both directions
    QUOTE = "quote"  # Placeholder, no presentation yet


# Card types imported from a card store
SUPPORTED_CARD_TYPES = frozenset([CardType.VOCAB, CardType.LANG_VOCAB])


def hash32(text: str) -> int:
    """Simple 32-bit rolling hash of a string (h = h * 31 + code unit)."""
    value = 0
    if not text:
        return value
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        value = ((value << 5) - value + code) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


@dataclass
class VocabContent:
    """Question with a single correct answer and a pool of distractors."""
    question: str
    answer: str
    incorrect: List[str] = field(default_factory=list)
    description: str = ""
    audio: List[str] = field(default_factory=list)

    def key(self) -> str:
        return self.question + self.answer


@dataclass
class LangVocabContent:
    """Word pair; index 0 and 1 are the two languages."""
    words: List[str]
    incorrect: List[List[str]] = field(default_factory=lambda: [[], []])
    audio: List[Optional[str]] = field(default_factory=lambda: [None, None])
    lang: List[str] = field(default_factory=lambda: ["", ""])
    description: str = ""

    def key(self) -> str:
        return self.words[0] + self.words[1]


@dataclass
class QuoteContent:
    """Quote card content."""
    quote: str
    author: str = ""
    description: str = ""

    def key(self) -> str:
        return self.quote


CardContent = Union[VocabContent, LangVocabContent, QuoteContent]

CONTENT_TYPES = {
    CardType.VOCAB: VocabContent,
    CardType.LANG_VOCAB: LangVocabContent,
    CardType.QUOTE: QuoteContent,
}


def card_id(content: CardContent, card_type: CardType) -> str:
    """Build the content-derived id of a card."""
    return f"{card_type.value}-{hash32(content.key())}"


def content_from_dict(card_type: CardType, data: Dict[str, Any]) -> CardContent:
    """Create the content dataclass for a card type from a plain dict."""
    if card_type == CardType.VOCAB:
        return VocabContent(
            question=data["question"],
            answer=data["answer"],
            incorrect=list(data.get("incorrect", [])),
            description=data.get("description", ""),
            audio=list(data.get("audio") or []),
        )
    if card_type == CardType.LANG_VOCAB:
        audio = list(data.get("audio") or [None, None])
        return LangVocabContent(
            words=list(data["words"]),
            incorrect=[list(side) for side in data.get("incorrect", [[], []])],
            audio=audio + [None] * (2 - len(audio)),
            lang=list(data.get("lang", ["", ""])),
            description=data.get("description", ""),
        )
    return QuoteContent(
        quote=data["quote"],
        author=data.get("author", ""),
        description=data.get("description", ""),
    )


@dataclass
class Card:
    """A single learnable unit with scheduling metadata."""
    id: str
    type: CardType
    content: CardContent
    level: int = 0
    schedule: Optional[int] = None

    def audio_file(self, index: int = 0) -> Optional[str]:
        """Audio clip for a side of the card, if any."""
        audio = getattr(self.content, "audio", None) or []
        if index < len(audio):
            return audio[index]
        return None

    def audio_files(self) -> List[str]:
        """All audio clips attached to the card."""
        return [path for path in getattr(self.content, "audio", None) or [] if path]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dict for storage."""
        return {
            "id": self.id,
            "type": self.type.value,
            "level": self.level,
            "schedule": self.schedule,
            "content": asdict(self.content),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Card':
        """Create a Card from a plain dict, deriving the id when missing."""
        card_type = CardType(data["type"])
        raw_content = dict(data.get("content", {}))
        # Older decks keep audio under files.aud
        if "audio" not in raw_content and data.get("files", {}).get("aud"):
            raw_content["audio"] = data["files"]["aud"]
        content = content_from_dict(card_type, raw_content)
        return cls(
            id=data.get("id") or card_id(content, card_type),
            type=card_type,
            content=content,
            level=data.get("level") or 0,
            schedule=data.get("schedule"),
        )


@dataclass
class CardStore:
    """Initial card set plus the opaque history map (retired and seen ids)."""
    cards: List[Card] = field(default_factory=list)
    all: Dict[str, Any] = field(default_factory=dict)
