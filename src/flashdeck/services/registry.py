"""Registry of active cards and the retired/seen history."""
import logging
from typing import Any, Dict, Iterable, List, Optional

from flashdeck.config import settings
from flashdeck.exceptions import CardValidationError
from flashdeck.models.card import (
    Card,
    CardContent,
    CardStore,
    CardType,
    LangVocabContent,
    QuoteContent,
    SUPPORTED_CARD_TYPES,
    VocabContent,
    card_id,
)
from flashdeck.services import scheduler
from flashdeck import monitoring

logger = logging.getLogger(__name__)


def validate_card(card: Card, choice_count: Optional[int] = None) -> None:
    """Check that a card can be presented, raise CardValidationError if not."""
    if choice_count is None:
        choice_count = settings.session.choice_count
    distractors = choice_count - 1
    content = card.content

    if card.type == CardType.VOCAB:
        if not isinstance(content, VocabContent):
            raise CardValidationError(f"Card {card.id}: vocab card without vocab content")
        if not content.question or not content.answer:
            raise CardValidationError(f"Card {card.id}: question and answer are required")
        pool = {answer for answer in content.incorrect if answer != content.answer}
        if len(pool) < distractors:
            raise CardValidationError(
                f"Card {card.id}: {len(pool)} incorrect answers, {distractors} required"
            )
    elif card.type == CardType.LANG_VOCAB:
        if not isinstance(content, LangVocabContent):
            raise CardValidationError(f"Card {card.id}: lang_vocab card without word pair content")
        if len(content.words) != 2 or not all(content.words):
            raise CardValidationError(f"Card {card.id}: exactly two words are required")
        if len(content.incorrect) != 2:
            raise CardValidationError(f"Card {card.id}: one incorrect list per direction is required")
        for side, answers in enumerate(content.incorrect):
            pool = {answer for answer in answers if answer != content.words[side]}
            if len(pool) < distractors:
                raise CardValidationError(
                    f"Card {card.id}: {len(pool)} incorrect answers for side {side}, {distractors} required"
                )
    elif card.type == CardType.QUOTE:
        if not isinstance(content, QuoteContent) or not content.quote:
            raise CardValidationError(f"Card {card.id}: quote text is required")

    if card.level < 0:
        raise CardValidationError(f"Card {card.id}: level cannot be negative")


class CardRegistry:
    """Owns the active card map and the history map."""

    def __init__(
        self,
        cards: Optional[Dict[str, Card]] = None,
        history: Optional[Dict[str, Any]] = None,
        choice_count: Optional[int] = None,
    ):
        """Initialize the registry with already imported cards and history."""
        self.cards: Dict[str, Card] = cards if cards is not None else {}
        self.history: Dict[str, Any] = history if history is not None else {}
        self.choice_count = choice_count if choice_count is not None else settings.session.choice_count

    @classmethod
    def from_store(cls, store: CardStore, day: Optional[int] = None,
                   choice_count: Optional[int] = None) -> 'CardRegistry':
        """Import supported cards from a card store."""
        if day is None:
            day = scheduler.today()
        registry = cls(history=store.all, choice_count=choice_count)
        for card in store.cards:
            if card.type not in SUPPORTED_CARD_TYPES:
                logger.debug(f"Skipping card {card.id} of unsupported type {card.type.value}")
                continue
            if card.schedule is None:
                card.schedule = day
            if not card.level:
                card.level = 0
            try:
                validate_card(card, registry.choice_count)
            except CardValidationError as e:
                logger.error(f"Skipping invalid card: {e}")
                continue
            registry.cards[card.id] = card
        logger.info(f"Imported {len(registry.cards)} of {len(store.cards)} cards, {len(registry.history)} in history")
        return registry

    def __len__(self) -> int:
        return len(self.cards)

    def __contains__(self, card_id: str) -> bool:
        return card_id in self.cards

    def get(self, card_id: str) -> Optional[Card]:
        """Get an active card by id."""
        return self.cards.get(card_id)

    def card_found(self, card: Card) -> bool:
        """True if the card is active or was seen before."""
        return card.id in self.cards or card.id in self.history

    def new_card(self, content: CardContent, card_type: CardType) -> Card:
        """Build a card with a content-derived id and default scheduling."""
        card = Card(
            id=card_id(content, card_type),
            type=card_type,
            content=content,
            level=0,
            schedule=scheduler.today(),
        )
        validate_card(card, self.choice_count)
        return card

    def add_cards(self, cards: Iterable[Card], day: Optional[int] = None) -> List[Card]:
        """Add unseen cards at level 0, due on `day`. Returns the cards added."""
        if day is None:
            day = scheduler.today()
        added = []
        for card in cards:
            if self.card_found(card):
                logger.debug(f"Card {card.id} already known, ignoring")
                continue
            try:
                validate_card(card, self.choice_count)
            except CardValidationError as e:
                logger.error(f"Not adding invalid card: {e}")
                continue
            card.level = 0
            card.schedule = day
            self.cards[card.id] = card
            added.append(card)
        monitoring.cards_added.inc(len(added))
        logger.info(f"Added {len(added)} new cards")
        return added

    def retire(self, card_id: str, day: int) -> None:
        """Remove a card from the active set and record its retirement day."""
        self.cards.pop(card_id, None)
        self.history[card_id] = day
