"""Monitoring configuration for flashdeck."""
from prometheus_client import Counter, Gauge, Histogram, start_http_server

# Session metrics
sessions_started = Counter(
    "flashdeck_sessions_started_total",
    "Total number of practice sessions started",
)

sessions_finished = Counter(
    "flashdeck_sessions_finished_total",
    "Total number of practice sessions finished",
    ["reason"],
)

hand_size = Gauge(
    "flashdeck_hand_size",
    "Number of cards currently in the hand",
)

card_display_duration = Histogram(
    "flashdeck_card_display_seconds",
    "Time from showing a card to its outcome in seconds",
    ["card_type"],
    buckets=[1, 2, 4, 6, 10, 30, 60],
)

# Answer metrics
answers = Counter(
    "flashdeck_answers_total",
    "Total number of answers given",
    ["card_type", "result"],
)

# Scheduling metrics
cards_rescheduled = Counter(
    "flashdeck_cards_rescheduled_total",
    "Total number of cards rescheduled after leaving the hand",
    ["result"],
)

cards_retired = Counter(
    "flashdeck_cards_retired_total",
    "Total number of cards that exhausted the level table",
)

# Card management metrics
cards_added = Counter(
    "flashdeck_cards_added_total",
    "Total number of cards added to the registry",
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
