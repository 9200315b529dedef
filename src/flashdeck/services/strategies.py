"""Per card type presentation and completion logic."""
import asyncio
import logging
import random
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple, Type, final

from flashdeck.config import SessionSettings
from flashdeck.models.card import Card, CardType
from flashdeck.models.session_models import (
    CANCEL_SESSION,
    RELEASE_CARD,
    SKIP_CARD,
    AnswerReveal,
    CardPrompt,
    Outcome,
)
from flashdeck.models.status import (
    CardStatus,
    LangVocabStatus,
    QuoteStatus,
    VocabStatus,
    all_passed,
    rolling_complete,
)
from flashdeck.services.adapters import AudioAdapter, DisplayAdapter
from flashdeck.services.presentation import CardPresentation, EventKind
from flashdeck import monitoring


logger = logging.getLogger(__name__)


def get_all_subclasses(cls):
    """Get all subclasses of a class."""
    all_subclasses = []
    for subclass in cls.__subclasses__():
        all_subclasses.append(subclass)
        all_subclasses.extend(get_all_subclasses(subclass))
    return all_subclasses


class BaseCardStrategy(ABC):
    """Base class for all card type strategies."""

    """Fields and methods that must be implemented by subclasses."""
    type: Optional[CardType] = None

    @abstractmethod
    def new_status(self) -> CardStatus:
        """Fresh status for a card entering the hand."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    async def present(self, presentation: CardPresentation,
                      completed_count: int = 0, total_count: int = 0) -> Outcome:
        """Show the card and resolve to exactly one outcome."""
        raise NotImplementedError("Subclasses must implement this method")

    """Fields and methods that must not be overridden by subclasses."""

    @final
    def __init__(self, display: DisplayAdapter, audio: AudioAdapter, session_settings: SessionSettings):
        self.display = display
        self.audio = audio
        self.settings = session_settings

    @final
    async def _play(self, card_id: str, clip: str) -> None:
        """Play a clip; audio problems never block the card."""
        try:
            await self.audio.play(card_id, clip)
        except Exception as e:
            logger.warning(f"Could not play {clip} for card {card_id}: {e}")

    @final
    def _stop_audio(self, card_id: str) -> None:
        try:
            self.audio.stop(card_id)
        except Exception as e:
            logger.warning(f"Could not stop audio for card {card_id}: {e}")


class ChoiceCardStrategy(BaseCardStrategy):
    """Multiple choice card: answer, reveal, then advance or wait for acknowledgement."""

    @abstractmethod
    def question_text(self, card: Card, status: CardStatus) -> str:
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def correct_answer(self, card: Card, status: CardStatus) -> str:
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def incorrect_answers(self, card: Card, status: CardStatus) -> List[str]:
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def update_status(self, status: CardStatus, is_correct: bool) -> CardStatus:
        """Record an answer and recompute completed/passed."""
        raise NotImplementedError("Subclasses must implement this method")

    def question_audio(self, card: Card, status: CardStatus) -> Optional[str]:
        return card.audio_file(0)

    def answer_audio(self, card: Card, status: CardStatus) -> Optional[str]:
        return card.audio_file(0)

    def languages(self, card: Card, status: CardStatus) -> Tuple[str, str]:
        return "", ""

    @final
    def choices(self, card: Card, status: CardStatus) -> List[str]:
        """Correct answer plus random distractors, shuffled."""
        correct = self.correct_answer(card, status)
        pool = list(dict.fromkeys(a for a in self.incorrect_answers(card, status) if a != correct))
        choices = random.sample(pool, min(len(pool), self.settings.choice_count - 1))
        choices.append(correct)
        random.shuffle(choices)
        return choices

    @final
    def build_prompt(self, presentation: CardPresentation, completed_count: int = 0,
                     total_count: int = 0) -> CardPrompt:
        """Create the prompt for the live card."""
        card, status = presentation.card, presentation.status
        question_language, answer_language = self.languages(card, status)
        return CardPrompt(
            token=presentation.token,
            card_id=card.id,
            card_type=card.type,
            question=self.question_text(card, status),
            choices=self.choices(card, status),
            description=card.content.description,
            question_language=question_language,
            answer_language=answer_language,
            has_audio=self.question_audio(card, status) is not None,
            completed_count=completed_count,
            total_count=total_count,
        )

    @final
    def _start_countdown(self, presentation: CardPresentation) -> None:
        presentation.start_countdown(self.settings.card_timeout)
        self.display.countdown_started(presentation.token, self.settings.card_timeout)

    @final
    async def _play_question(self, presentation: CardPresentation, clip: str) -> None:
        """Play the question clip, start the countdown, then play it again."""
        card_id = presentation.card.id
        await self._play(card_id, clip)
        if not presentation.answering:
            return
        await asyncio.sleep(self.settings.question_audio_pause)
        if not presentation.answering:
            return
        self._start_countdown(presentation)
        await self._play(card_id, clip)

    @final
    async def _replay_answer(self, presentation: CardPresentation, clip: str) -> None:
        """Repeat the correct answer's clip until the user acknowledges it."""
        card_id = presentation.card.id
        await asyncio.sleep(self.settings.replay_start_delay)
        for _ in range(self.settings.max_replay):
            if not presentation.acknowledging:
                return
            await self._play(card_id, clip)
            await asyncio.sleep(self.settings.replay_pause)

    async def present(self, presentation: CardPresentation,
                      completed_count: int = 0, total_count: int = 0) -> Outcome:
        card, status = presentation.card, presentation.status
        prompt = self.build_prompt(presentation, completed_count, total_count)
        correct = self.correct_answer(card, status)
        answer_clip = self.answer_audio(card, status)

        await self.display.show_card(prompt)
        question_clip = self.question_audio(card, status)
        if question_clip:
            presentation.spawn(self._play_question(presentation, question_clip))
        else:
            self._start_countdown(presentation)

        event = await presentation.next_event()
        self._stop_audio(card.id)
        if event.kind == EventKind.CANCEL:
            return CANCEL_SESSION
        if event.kind == EventKind.SKIP:
            logger.debug(f"Card {card.id} skipped")
            return SKIP_CARD

        is_correct = event.value == correct
        self.update_status(status, is_correct)
        monitoring.answers.labels(card_type=card.type.value, result="correct" if is_correct else "wrong").inc()
        logger.debug(f"Card {card.id} answered {'correctly' if is_correct else 'wrongly'}: {status}")

        await self.display.reveal_answer(AnswerReveal(
            token=presentation.token,
            card_id=card.id,
            answer=event.value,
            correct_answer=correct,
            is_correct=is_correct,
        ))

        if is_correct:
            await asyncio.sleep(self.settings.success_delay)
            if presentation.cancelled:
                return CANCEL_SESSION
            return status

        presentation.expect_acknowledgement()
        if answer_clip:
            presentation.spawn(self._replay_answer(presentation, answer_clip))
        event = await presentation.next_event()
        self._stop_audio(card.id)
        if event.kind == EventKind.CANCEL:
            return CANCEL_SESSION
        return status


class VocabStrategy(ChoiceCardStrategy):
    """Single direction multiple choice."""
    type: CardType = CardType.VOCAB

    def new_status(self) -> VocabStatus:
        return VocabStatus()

    def question_text(self, card: Card, status: VocabStatus) -> str:
        return card.content.question

    def correct_answer(self, card: Card, status: VocabStatus) -> str:
        return card.content.answer

    def incorrect_answers(self, card: Card, status: VocabStatus) -> List[str]:
        return card.content.incorrect

    def update_status(self, status: VocabStatus, is_correct: bool) -> VocabStatus:
        status.history.append(is_correct)
        status.completed = rolling_complete(status.history, self.settings.completion_window)
        status.passed = all_passed(status.history)
        return status


class LangVocabStrategy(ChoiceCardStrategy):
    """Word pair tested in one direction, then the other."""
    type: CardType = CardType.LANG_VOCAB

    def new_status(self) -> LangVocabStatus:
        return LangVocabStatus()

    def question_text(self, card: Card, status: LangVocabStatus) -> str:
        return card.content.words[status.l1]

    def correct_answer(self, card: Card, status: LangVocabStatus) -> str:
        return card.content.words[status.l2]

    def incorrect_answers(self, card: Card, status: LangVocabStatus) -> List[str]:
        return card.content.incorrect[status.l2]

    def question_audio(self, card: Card, status: LangVocabStatus) -> Optional[str]:
        return card.audio_file(status.l1)

    def answer_audio(self, card: Card, status: LangVocabStatus) -> Optional[str]:
        return card.audio_file(status.l2)

    def languages(self, card: Card, status: LangVocabStatus) -> Tuple[str, str]:
        lang = card.content.lang
        return lang[status.l1], lang[status.l2]

    def update_status(self, status: LangVocabStatus, is_correct: bool) -> LangVocabStatus:
        history = status.history[status.l1]
        history.append(is_correct)
        status.completed = rolling_complete(history, self.settings.completion_window)
        status.passed = all_passed(history)
        if status.completed and status.l1 == 0:
            # Mastered one way, now test the other way
            status.completed = False
            status.l1 = 1
        return status


class QuoteStrategy(BaseCardStrategy):
    """Placeholder for quote cards.

    Quote cards have no presentation yet. The card is released from the hand
    so the session does not stall; its level and schedule are left as they are.
    """
    type: CardType = CardType.QUOTE

    def new_status(self) -> QuoteStatus:
        return QuoteStatus()

    async def present(self, presentation: CardPresentation,
                      completed_count: int = 0, total_count: int = 0) -> Outcome:
        logger.warning(f"Quote card {presentation.card.id} cannot be presented yet, releasing it")
        return RELEASE_CARD


def get_strategy_classes() -> Dict[CardType, Type[BaseCardStrategy]]:
    """Map every card type to the strategy class handling it."""
    strategies = {}
    for strategy_class in get_all_subclasses(BaseCardStrategy):
        if strategy_class.type is None:
            continue
        strategies[strategy_class.type] = strategy_class
    return strategies
