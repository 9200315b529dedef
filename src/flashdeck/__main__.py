"""Main entry point: report the state of a deck."""
import logging
import sys
from pathlib import Path

from flashdeck.config import ensure_directories, settings
from flashdeck.logging_config import setup_logging
from flashdeck.monitoring import start_monitoring
from flashdeck.services import scheduler
from flashdeck.services.deck_loader import load_deck
from flashdeck.services.registry import CardRegistry


logger = logging.getLogger("flashdeck")


def main(argv=None) -> int:
    """Load a deck and log how many cards are active, due and retired."""
    argv = sys.argv[1:] if argv is None else argv
    deck_path = Path(argv[0]) if argv else settings.paths.decks_dir / "deck.json"

    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)
        logger.info(f"Metrics exposed on port {settings.monitoring.port}")

    if not deck_path.exists():
        logger.error(f"Deck file {deck_path} not found")
        return 1

    registry = CardRegistry.from_store(load_deck(deck_path))
    day = scheduler.today()
    due = scheduler.cards_due(registry, day)
    logger.info(f"Day {day}: {len(registry)} active cards, {len(due)} due, {len(registry.history)} in history")
    for card_id in sorted(due):
        card = registry.get(card_id)
        logger.info(f"  {card_id} (level {card.level}, due {card.schedule})")
    return 0


if __name__ == "__main__":
    ensure_directories()
    setup_logging("Starting flashdeck ...")
    sys.exit(main())
