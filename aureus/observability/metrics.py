"""Prometheus metrics for Aureus."""

from prometheus_client import Counter, Gauge

# Generation metrics
GENERATION_REQUESTS = Counter(
    "aureus_generation_requests_total",
    "Generation requests by final outcome",
    labelnames=["outcome"],
)

GENERATION_CHUNKS = Counter(
    "aureus_generation_chunks_total",
    "Chunks received from the generation source",
)

REASONING_SEGMENTS_REMOVED = Counter(
    "aureus_reasoning_segments_removed_total",
    "Complete reasoning segments excised from responses",
)

# Feed metrics
FEED_SUBSCRIPTIONS = Counter(
    "aureus_feed_subscriptions_total",
    "Message feeds established",
)

ACTIVE_FEEDS = Gauge(
    "aureus_active_feeds",
    "Message feeds currently live",
)

# Error metrics
PERSISTENCE_ERRORS = Counter(
    "aureus_persistence_errors_total",
    "Failed attempts to persist a turn",
    labelnames=["sender"],
)

SUBMISSIONS_IGNORED = Counter(
    "aureus_submissions_ignored_total",
    "Submissions that produced no generation request",
    labelnames=["reason"],
)
