"""Session engine: hand rotation, per-card display cycle and rescheduling."""
import logging
import random
import uuid
from typing import Callable, Dict, Iterable, List, Optional

from flashdeck.config import SessionSettings, settings
from flashdeck.exceptions import ConfigurationError, SessionError
from flashdeck.models.card import Card, CardType
from flashdeck.models.session_models import (
    CANCEL_SESSION,
    RELEASE_CARD,
    SKIP_CARD,
    Outcome,
    Session,
    SessionSummary,
    SessionToken,
)
from flashdeck.services import scheduler
from flashdeck.services.adapters import AudioAdapter, DisplayAdapter, NullAudioAdapter
from flashdeck.services.presentation import CardPresentation
from flashdeck.services.registry import CardRegistry
from flashdeck.services.strategies import BaseCardStrategy, get_strategy_classes
from flashdeck import monitoring


logger = logging.getLogger(__name__)


class SessionEngine:
    """Runs one practice session at a time over the cards of a registry."""

    def __init__(
        self,
        registry: CardRegistry,
        display: DisplayAdapter,
        audio: Optional[AudioAdapter] = None,
        session_settings: Optional[SessionSettings] = None,
        levels: Optional[List[int]] = None,
        clock: Optional[Callable[[], int]] = None,
        strategies: Optional[Dict[CardType, BaseCardStrategy]] = None,
    ):
        """Initialize the engine. `clock` returns the current day bucket."""
        self.registry = registry
        self.display = display
        self.audio = audio if audio is not None else NullAudioAdapter()
        self.settings = session_settings if session_settings is not None else settings.session
        self.levels = levels if levels is not None else settings.scheduling.levels
        self.clock = clock if clock is not None else scheduler.today
        self.session: Optional[Session] = None
        self._live: Optional[CardPresentation] = None
        self._generation = 0

        if strategies is None:
            strategies = {
                card_type: strategy_class(self.display, self.audio, self.settings)
                for card_type, strategy_class in get_strategy_classes().items()
            }
        missing = [card_type.value for card_type in CardType if card_type not in strategies]
        if missing:
            raise ConfigurationError(f"No strategy for card types: {', '.join(missing)}")
        self.strategies = strategies

    @property
    def running(self) -> bool:
        return self.session is not None

    @property
    def live_token(self) -> Optional[SessionToken]:
        """Token of the card currently accepting input, if any."""
        return self._live.token if self._live is not None else None

    async def start_session(self, due_ids: Optional[Iterable[str]] = None) -> Optional[SessionSummary]:
        """Start a session with `due_ids`, or with all due cards shuffled.

        Returns the summary once the session ends, or None when there was
        nothing to practise.
        """
        if self.session is not None:
            raise SessionError(f"Session {self.session.id} is already running")

        if due_ids is None:
            due_ids = scheduler.cards_due(self.registry, self.clock())
            random.shuffle(due_ids)
        due_ids = list(dict.fromkeys(due_ids))
        unknown = [card_id for card_id in due_ids if card_id not in self.registry]
        if unknown:
            logger.warning(f"Dropping {len(unknown)} unknown card ids from the session: {', '.join(unknown)}")
            due_ids = [card_id for card_id in due_ids if card_id in self.registry]
        if not due_ids:
            logger.info("No cards due, not starting a session")
            return None

        hand_count = self.settings.hand_count
        session = Session(id=uuid.uuid4().hex, additional=due_ids[hand_count:])
        self.session = session
        monitoring.sessions_started.inc()
        logger.info(f"Starting session {session.id} with {len(due_ids)} cards")

        for card_id in due_ids[:hand_count]:
            self.add_card_to_hand(card_id)
        self._refill_hand(session)
        return await self.display_next_card()

    def add_card_to_hand(self, card_id: Optional[str]) -> bool:
        """Put a card in the hand with a fresh status and preload its audio.

        Returns False when the card did not enter the hand.
        """
        if not card_id or self.session is None:
            return False
        card = self.registry.get(card_id)
        if card is None:
            logger.warning(f"Card {card_id} is not active, not adding it to the hand")
            return False

        self.session.hand.append(card_id)
        self.session.status[card_id] = self.strategies[card.type].new_status()
        monitoring.hand_size.set(len(self.session.hand))
        try:
            self.audio.preload(card_id, card.audio_files())
        except Exception as e:
            logger.warning(f"Could not preload audio for card {card_id}: {e}")
        return True

    def _refill_hand(self, session: Session) -> None:
        """Pull backlog cards into the hand until it is full or the backlog is empty."""
        while session.additional and len(session.hand) < self.settings.hand_count:
            self.add_card_to_hand(session.additional.pop())

    def remove_card_from_hand(self, card_id: str, passed: bool, reschedule: bool = True) -> None:
        """Take a finished card out of the hand, rescheduling it unless told not to."""
        session = self.session
        if session is None or card_id not in session.hand:
            return
        card = self.registry.get(card_id)
        if reschedule and card is not None and not scheduler.reschedule(
            self.registry, card, passed, day=self.clock(), levels=self.levels
        ):
            session.retired.append(card_id)

        session.hand.remove(card_id)
        session.status.pop(card_id, None)
        session.completed.append(card_id)
        monitoring.hand_size.set(len(session.hand))
        self._unload_audio(card_id)
        if reschedule:
            logger.info(f"Card {card_id} completed ({'passed' if passed else 'failed'})")
        else:
            logger.info(f"Card {card_id} released without rescheduling")

    async def display_next_card(self) -> SessionSummary:
        """Show the head of the hand until the hand is empty or the session ends."""
        session = self.session
        while session is not None and session.hand:
            card_id = session.hand[0]
            card = self.registry.get(card_id)
            if card is None:
                logger.warning(f"Card {card_id} disappeared from the registry, dropping it")
                session.hand.pop(0)
                session.status.pop(card_id, None)
                self._refill_hand(session)
                continue

            outcome = await self._present(session, card)

            if self.session is not session or outcome is None or outcome == CANCEL_SESSION:
                return await self._finish(session, cancelled=True)

            if outcome == RELEASE_CARD:
                self.remove_card_from_hand(card_id, passed=False, reschedule=False)
                self._refill_hand(session)
            elif outcome == SKIP_CARD or not outcome.completed:
                session.hand.append(session.hand.pop(0))
            else:
                self.remove_card_from_hand(card_id, outcome.passed)
                self._refill_hand(session)

        if session is None:
            return await self._finish(None, cancelled=True)
        return await self._finish(session, cancelled=False)

    async def _present(self, session: Session, card: Card) -> Outcome:
        """Hand the card to its strategy and wait for one outcome."""
        self._generation += 1
        presentation = CardPresentation(
            SessionToken(session.id, self._generation), card, session.status[card.id]
        )
        self._live = presentation
        strategy = self.strategies[card.type]
        try:
            return await strategy.present(presentation, len(session.completed), session.total)
        except Exception:
            logger.exception(f"Error presenting card {card.id}, ending session {session.id}")
            if self.session is session:
                self.session = None
            for card_id in session.hand:
                self._unload_audio(card_id)
            monitoring.hand_size.set(0)
            monitoring.sessions_finished.labels(reason="error").inc()
            raise
        finally:
            self._live = None
            await presentation.close()
            monitoring.card_display_duration.labels(card_type=card.type.value).observe(presentation.elapsed())

    async def _finish(self, session: Optional[Session], cancelled: bool) -> SessionSummary:
        """Return to idle and show the completion screen."""
        if session is None:
            summary = SessionSummary(session_id=None, cancelled=cancelled)
        else:
            if self.session is session:
                self.session = None
            for card_id in session.hand:
                self._unload_audio(card_id)
            summary = SessionSummary(
                session_id=session.id,
                total=session.total,
                completed=len(session.completed),
                remaining=len(session.hand) + len(session.additional),
                retired=list(session.retired),
                cancelled=cancelled,
            )
            monitoring.sessions_finished.labels(reason="cancelled" if cancelled else "completed").inc()
            logger.info(
                f"Session {session.id} {'cancelled' if cancelled else 'finished'}: "
                f"{summary.completed}/{summary.total} cards completed"
            )
        monitoring.hand_size.set(0)
        await self.display.show_done(summary)
        return summary

    def _unload_audio(self, card_id: str) -> None:
        try:
            self.audio.unload(card_id)
        except Exception as e:
            logger.warning(f"Could not unload audio for card {card_id}: {e}")

    def _live_for(self, token: SessionToken) -> Optional[CardPresentation]:
        live = self._live
        if live is None or live.token != token:
            logger.debug(f"Ignoring event for stale token {token}")
            return None
        return live

    def answer(self, token: SessionToken, text: str) -> bool:
        """Answer the live card. Returns False if the event was ignored."""
        live = self._live_for(token)
        return live.answer(text) if live is not None else False

    def acknowledge(self, token: SessionToken) -> bool:
        """Confirm the correct answer of the live card after a mistake."""
        live = self._live_for(token)
        return live.acknowledge() if live is not None else False

    def skip(self, token: SessionToken) -> bool:
        """Skip the live card; it goes to the back of the hand."""
        live = self._live_for(token)
        return live.skip() if live is not None else False

    def cancel_session(self) -> bool:
        """End the running session. Safe to call more than once."""
        if self.session is None:
            return False
        logger.info(f"Cancelling session {self.session.id}")
        self.session = None
        self._generation += 1
        if self._live is not None:
            self._live.cancel()
        return True

    async def add_cards(self, cards: Iterable[Card], force_session: bool = False) -> List[Card]:
        """Add unseen cards; optionally practise exactly those cards right away."""
        added = self.registry.add_cards(cards, day=self.clock())
        if force_session and added:
            await self.start_session([card.id for card in added])
        return added
