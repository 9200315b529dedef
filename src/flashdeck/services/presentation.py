"""Live state of the card at the head of the hand."""
import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Coroutine, Optional, Set

from flashdeck.models.card import Card
from flashdeck.models.session_models import SessionToken
from flashdeck.models.status import CardStatus


logger = logging.getLogger(__name__)


class EventKind(Enum):
    """Input events a live card can receive."""
    ANSWER = "answer"  # User picked a choice
    ACKNOWLEDGE = "acknowledge"  # User confirmed the correct answer after a mistake
    SKIP = "skip"  # Countdown ran out or user skipped
    CANCEL = "cancel"  # Session cancelled


class Phase(Enum):
    """Which events the live card accepts."""
    ANSWERING = "answering"
    REVEALING = "revealing"
    ACKNOWLEDGING = "acknowledging"
    DONE = "done"


@dataclass(frozen=True)
class PresentationEvent:
    """An accepted input event."""
    kind: EventKind
    value: Optional[str] = None


class CardPresentation:
    """One presentation of one card.

    Owns the auto-skip countdown and any background audio tasks of the card.
    Every callback checks the phase first, so once the outcome is resolved
    (or the session cancelled) late timers and replays do nothing.
    """

    def __init__(self, token: SessionToken, card: Card, status: CardStatus):
        self.token = token
        self.card = card
        self.status = status
        self.phase = Phase.ANSWERING
        self.cancelled = False
        self.started = time.monotonic()
        self._events: asyncio.Queue = asyncio.Queue()
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def done(self) -> bool:
        return self.phase == Phase.DONE

    @property
    def answering(self) -> bool:
        return self.phase == Phase.ANSWERING

    @property
    def acknowledging(self) -> bool:
        return self.phase == Phase.ACKNOWLEDGING

    def _accept(self, kind: EventKind, value: Optional[str] = None) -> None:
        self._cancel_timer()
        self.phase = Phase.REVEALING
        self._events.put_nowait(PresentationEvent(kind, value))

    def answer(self, text: str) -> bool:
        """Submit an answer. Ignored unless the card is waiting for one."""
        if not self.answering:
            logger.debug(f"Ignoring answer for card {self.card.id} in phase {self.phase.value}")
            return False
        self._accept(EventKind.ANSWER, text)
        return True

    def skip(self) -> bool:
        """Skip the card without answering."""
        if not self.answering:
            return False
        self._accept(EventKind.SKIP)
        return True

    def expect_acknowledgement(self) -> None:
        """Wait for the user to confirm the correct answer."""
        if not self.done:
            self.phase = Phase.ACKNOWLEDGING

    def acknowledge(self) -> bool:
        """Confirm the correct answer after a mistake."""
        if not self.acknowledging:
            return False
        self._accept(EventKind.ACKNOWLEDGE)
        return True

    def cancel(self) -> bool:
        """Cancel the presentation. Safe to call more than once."""
        if self.done:
            return False
        self.cancelled = True
        self.phase = Phase.DONE
        self._cancel_timer()
        for task in self._tasks:
            task.cancel()
        self._events.put_nowait(PresentationEvent(EventKind.CANCEL))
        return True

    async def next_event(self) -> PresentationEvent:
        """Wait for the next accepted event."""
        return await self._events.get()

    def start_countdown(self, seconds: float) -> None:
        """Skip the card if no answer arrives within `seconds`."""
        if not self.answering:
            return
        self._cancel_timer()
        self._timer = asyncio.get_running_loop().call_later(seconds, self._on_timeout)

    def _on_timeout(self) -> None:
        self._timer = None
        if not self.answering:
            return
        logger.debug(f"Card {self.card.id} timed out")
        self.skip()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def spawn(self, coro: Coroutine) -> Optional[asyncio.Task]:
        """Run a background step owned by this card."""
        if self.done:
            coro.close()
            return None
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def elapsed(self) -> float:
        return time.monotonic() - self.started

    async def close(self) -> None:
        """Invalidate the card and wait for its background tasks to stop."""
        self.phase = Phase.DONE
        self._cancel_timer()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
