"""Models for practice session data structures."""
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Dict, List, Optional, Union

from flashdeck.models.card import CardType
from flashdeck.models.status import CardStatus


CANCEL_SESSION = "cancel_session"
SKIP_CARD = "skip_card"
# Leave the hand without touching level or schedule
RELEASE_CARD = "release_card"

# What a strategy resolves to for one presentation of a card
Outcome = Union[None, str, CardStatus]


@dataclass(frozen=True)
class SessionToken:
    """Identifies one presentation of one card within one session."""
    session_id: str
    generation: int


@dataclass
class Session:
    """Hand, backlog and per-card status of a running session."""
    id: str
    hand: List[str] = field(default_factory=list)
    additional: List[str] = field(default_factory=list)  # next card is popped from the end
    completed: List[str] = field(default_factory=list)
    status: Dict[str, CardStatus] = field(default_factory=dict)
    retired: List[str] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def total(self) -> int:
        return len(self.hand) + len(self.additional) + len(self.completed)


@dataclass(frozen=True)
class CardPrompt:
    """Everything a renderer needs to show the live card."""
    token: SessionToken
    card_id: str
    card_type: CardType
    question: str
    choices: List[str]
    description: str = ""
    question_language: str = ""
    answer_language: str = ""
    has_audio: bool = False
    completed_count: int = 0
    total_count: int = 0


@dataclass(frozen=True)
class AnswerReveal:
    """Result of an answer, shown before the session moves on."""
    token: SessionToken
    card_id: str
    answer: str
    correct_answer: str
    is_correct: bool


@dataclass(frozen=True)
class SessionSummary:
    """Shown on the completion screen."""
    session_id: Optional[str]
    total: int = 0
    completed: int = 0
    remaining: int = 0
    retired: List[str] = field(default_factory=list)
    cancelled: bool = False
