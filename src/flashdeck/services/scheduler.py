"""Due-date scheduling over the spaced repetition level table."""
import logging
import time
from typing import List, Optional

from flashdeck.config import settings
from flashdeck.models.card import Card
from flashdeck import monitoring

logger = logging.getLogger(__name__)


def today(now: Optional[float] = None, bucket_seconds: Optional[int] = None) -> int:
    """Map wall-clock time (epoch seconds) to an integer day bucket."""
    if now is None:
        now = time.time()
    if bucket_seconds is None:
        bucket_seconds = settings.scheduling.day_bucket_seconds
    return round(now / bucket_seconds)


def cards_due(registry, day: Optional[int] = None) -> List[str]:
    """Return ids of all active cards scheduled for `day` or earlier."""
    if day is None:
        day = today()
    return [card.id for card in registry.cards.values() if card.schedule <= day]


def reschedule(
    registry,
    card: Card,
    passed: bool,
    day: Optional[int] = None,
    levels: Optional[List[int]] = None,
) -> bool:
    """Advance or reset the card's level and schedule.

    Returns True when the card stays active, False when it was retired
    because the level table is exhausted.
    """
    if day is None:
        day = today()
    if levels is None:
        levels = settings.scheduling.levels

    if passed:
        card.level += 1
    else:
        card.level = 0
    monitoring.cards_rescheduled.labels(result="passed" if passed else "failed").inc()

    if card.level < len(levels):
        card.schedule = day + levels[card.level]
        logger.debug(f"Card {card.id} moved to level {card.level}, due on {card.schedule}")
        return True

    registry.retire(card.id, day)
    monitoring.cards_retired.inc()
    logger.info(f"Card {card.id} retired on {day}")
    return False
