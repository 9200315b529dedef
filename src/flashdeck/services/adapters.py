"""Contracts for the display and audio collaborators of the session engine."""
import logging
from abc import ABC, abstractmethod
from typing import List

from flashdeck.models.session_models import AnswerReveal, CardPrompt, SessionSummary, SessionToken


logger = logging.getLogger(__name__)


class DisplayAdapter(ABC):
    """Renders cards and feeds user input back into the engine.

    Input goes through the engine: `engine.answer(token, text)`,
    `engine.acknowledge(token)`, `engine.skip(token)` and
    `engine.cancel_session()`. Events carrying a stale token are ignored.
    """

    @abstractmethod
    async def show_card(self, prompt: CardPrompt) -> None:
        """Render the live card and start accepting input for it."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    async def reveal_answer(self, reveal: AnswerReveal) -> None:
        """Show whether the answer was right and which choice was correct."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    async def show_done(self, summary: SessionSummary) -> None:
        """Show the completion screen."""
        raise NotImplementedError("Subclasses must implement this method")

    def countdown_started(self, token: SessionToken, seconds: float) -> None:
        """Called when the auto-skip countdown of the live card starts."""
        pass


class AudioAdapter(ABC):
    """Preloads and plays pronunciation clips. Best effort only."""

    @abstractmethod
    def preload(self, card_id: str, files: List[str]) -> None:
        """Prepare the clips of a card entering the hand."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def unload(self, card_id: str) -> None:
        """Release the clips of a card leaving the hand."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    async def play(self, card_id: str, path: str) -> None:
        """Play a clip and return when it has finished."""
        raise NotImplementedError("Subclasses must implement this method")

    def stop(self, card_id: str) -> None:
        """Stop any clip of the card that is still playing."""
        pass


class NullAudioAdapter(AudioAdapter):
    """Audio adapter used when no audio subsystem is available."""

    def preload(self, card_id: str, files: List[str]) -> None:
        logger.debug(f"No audio subsystem, not preloading {len(files)} clips for {card_id}")

    def unload(self, card_id: str) -> None:
        pass

    async def play(self, card_id: str, path: str) -> None:
        pass
