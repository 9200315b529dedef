"""Test configuration."""
import asyncio
import itertools
import os
from pathlib import Path
from typing import Callable, List, Optional

import pytest
from dotenv import load_dotenv
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from flashdeck.config import SessionSettings, ensure_directories
from flashdeck.models.card import (
    Card,
    CardType,
    LangVocabContent,
    QuoteContent,
    VocabContent,
    card_id,
)
from flashdeck.models.session_models import AnswerReveal, CardPrompt, SessionSummary
from flashdeck.services.adapters import AudioAdapter, DisplayAdapter
from flashdeck.services.registry import CardRegistry
from flashdeck.services.session_engine import SessionEngine

fake = Faker()
_counter = itertools.count()

TODAY = 1000


def unique_word() -> str:
    return f"{fake.word()}{next(_counter)}"


class ScriptedDisplay(DisplayAdapter):
    """Display that answers each prompt according to a policy.

    The policy gets the prompt and its 1-based number and returns one of
    "correct", "wrong", "skip", "cancel" or None (let the countdown run out).
    """

    def __init__(self, registry: CardRegistry, policy: Optional[Callable[[CardPrompt, int], Optional[str]]] = None):
        self.registry = registry
        self.policy = policy or (lambda prompt, number: "correct")
        self.engine: Optional[SessionEngine] = None
        self.acknowledge_mistakes = True
        self.prompts: List[CardPrompt] = []
        self.reveals: List[AnswerReveal] = []
        self.summaries: List[SessionSummary] = []
        self.hand_sizes: List[int] = []
        self.events: List[tuple] = []
        self.countdowns: List[float] = []

    def correct_answer(self, prompt: CardPrompt) -> str:
        card = self.registry.get(prompt.card_id)
        if card.type == CardType.LANG_VOCAB:
            words = card.content.words
            return words[1] if prompt.question == words[0] else words[0]
        return card.content.answer

    def wrong_answer(self, prompt: CardPrompt) -> str:
        correct = self.correct_answer(prompt)
        return next(choice for choice in prompt.choices if choice != correct)

    async def show_card(self, prompt: CardPrompt) -> None:
        self.prompts.append(prompt)
        self.events.append(("show", prompt.card_id))
        self.hand_sizes.append(len(self.engine.session.hand))
        action = self.policy(prompt, len(self.prompts))
        loop = asyncio.get_running_loop()
        if action == "correct":
            loop.call_soon(self.engine.answer, prompt.token, self.correct_answer(prompt))
        elif action == "wrong":
            loop.call_soon(self.engine.answer, prompt.token, self.wrong_answer(prompt))
        elif action == "skip":
            loop.call_soon(self.engine.skip, prompt.token)
        elif action == "cancel":
            loop.call_soon(self.engine.cancel_session)

    async def reveal_answer(self, reveal: AnswerReveal) -> None:
        self.reveals.append(reveal)
        self.events.append(("reveal", reveal.card_id))
        if not reveal.is_correct and self.acknowledge_mistakes:
            asyncio.get_running_loop().call_soon(self.engine.acknowledge, reveal.token)

    async def show_done(self, summary: SessionSummary) -> None:
        self.summaries.append(summary)
        self.events.append(("done", summary.session_id))

    def countdown_started(self, token, seconds: float) -> None:
        self.countdowns.append(seconds)


class RecordingAudio(AudioAdapter):
    """Audio adapter that records calls instead of playing anything."""

    def __init__(self):
        self.preloaded = {}
        self.unloaded: List[str] = []
        self.played: List[tuple] = []
        self.stopped: List[str] = []

    def preload(self, card_id: str, files: List[str]) -> None:
        self.preloaded[card_id] = list(files)

    def unload(self, card_id: str) -> None:
        self.unloaded.append(card_id)

    async def play(self, card_id: str, path: str) -> None:
        self.played.append((card_id, path))
        await asyncio.sleep(0)

    def stop(self, card_id: str) -> None:
        self.stopped.append(card_id)


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    # Ensure test directories exist
    ensure_directories()

    yield


@pytest.fixture
def fast_settings() -> SessionSettings:
    """Session settings without real-time delays."""
    return SessionSettings(
        hand_count=3,
        completion_window=3,
        choice_count=4,
        card_timeout=5.0,
        success_delay=0,
        max_replay=2,
        replay_start_delay=0,
        replay_pause=0,
        question_audio_pause=0,
    )


@pytest.fixture
def make_vocab_card() -> Callable[..., Card]:
    """Factory for valid vocab cards."""
    def make(level: int = 0, schedule: int = TODAY, audio: Optional[List[str]] = None) -> Card:
        content = VocabContent(
            question=unique_word(),
            answer=unique_word(),
            incorrect=[unique_word() for _ in range(4)],
            description=fake.sentence(),
            audio=audio or [],
        )
        return Card(
            id=card_id(content, CardType.VOCAB),
            type=CardType.VOCAB,
            content=content,
            level=level,
            schedule=schedule,
        )
    return make


@pytest.fixture
def make_lang_card() -> Callable[..., Card]:
    """Factory for valid lang_vocab cards."""
    def make(level: int = 0, schedule: int = TODAY, audio: Optional[List[str]] = None) -> Card:
        content = LangVocabContent(
            words=[unique_word(), unique_word()],
            incorrect=[[unique_word() for _ in range(3)], [unique_word() for _ in range(3)]],
            audio=audio or [None, None],
            lang=["en", "nl"],
        )
        return Card(
            id=card_id(content, CardType.LANG_VOCAB),
            type=CardType.LANG_VOCAB,
            content=content,
            level=level,
            schedule=schedule,
        )
    return make


@pytest.fixture
def make_quote_card() -> Callable[..., Card]:
    """Factory for quote cards."""
    def make(level: int = 0, schedule: int = TODAY) -> Card:
        content = QuoteContent(quote=fake.sentence(), author=fake.name())
        return Card(
            id=card_id(content, CardType.QUOTE),
            type=CardType.QUOTE,
            content=content,
            level=level,
            schedule=schedule,
        )
    return make


@pytest.fixture
def registry() -> CardRegistry:
    """Empty registry."""
    return CardRegistry(choice_count=4)


@pytest.fixture
def audio() -> RecordingAudio:
    return RecordingAudio()


@pytest.fixture
def display(registry: CardRegistry) -> ScriptedDisplay:
    return ScriptedDisplay(registry)


@pytest.fixture
def engine(registry: CardRegistry, display: ScriptedDisplay, audio: RecordingAudio,
           fast_settings: SessionSettings) -> SessionEngine:
    """Engine wired to the scripted display with a fixed day."""
    engine = SessionEngine(
        registry,
        display,
        audio=audio,
        session_settings=fast_settings,
        levels=[1, 2, 4, 10, 25, 60, 150],
        clock=lambda: TODAY,
    )
    display.engine = engine
    return engine
