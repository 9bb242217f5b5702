"""Monitoring configuration for the bot."""
from prometheus_client import Counter, Gauge, Histogram, start_http_server

# Session metrics
active_sessions = Gauge(
    "polbot_active_sessions",
    "Number of chats with armed delivery timers",
)

# Delivery metrics
cards_delivered = Counter(
    "polbot_cards_delivered_total",
    "Total number of flashcards delivered by the cycle scheduler",
)

cycles_armed = Counter(
    "polbot_cycles_armed_total",
    "Total number of delivery cycles armed",
)

messages_failed = Counter(
    "polbot_messages_failed_total",
    "Total number of messages Telegram refused or failed to deliver",
    ["error_type"],
)

# Generation metrics
generation_requests = Counter(
    "polbot_generation_requests_total",
    "Total number of flashcard generation requests",
    ["status"],
)

generation_duration = Histogram(
    "polbot_generation_duration_seconds",
    "Duration of flashcard generation calls in seconds",
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

daily_refreshes = Counter(
    "polbot_daily_refreshes_total",
    "Total number of daily refresh runs",
    ["status"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
