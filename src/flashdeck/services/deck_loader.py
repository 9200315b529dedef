"""Load card decks from JSON files."""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from flashdeck.models.card import Card, CardStore


logger = logging.getLogger(__name__)


def parse_deck(data: Dict[str, Any]) -> CardStore:
    """Build a CardStore from a `{"cards": [...], "all": {...}}` document."""
    cards = []
    for index, raw_card in enumerate(data.get("cards", [])):
        try:
            cards.append(Card.from_dict(raw_card))
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Skipping malformed card #{index}: {e!r}")
    return CardStore(cards=cards, all=dict(data.get("all") or {}))


def load_deck(path: Union[str, Path]) -> CardStore:
    """Read a deck file."""
    path = Path(path)
    logger.info(f"Loading deck from {path}")
    with path.open(encoding="utf-8") as f:
        data = json.load(f)
    return parse_deck(data)
