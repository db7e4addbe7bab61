from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

SESSION_TRANSITIONS_TOTAL = Counter(
    "parlor_session_transitions_total",
    "Total number of session lifecycle transitions.",
    ["transition"],
)

LEDGER_REJECTIONS_TOTAL = Counter(
    "parlor_ledger_rejections_total",
    "Total number of rejected ledger commands by error code.",
    ["operation", "code"],
)

TABLE_STATUS_CHANGES_TOTAL = Counter(
    "parlor_table_status_changes_total",
    "Total number of manual table status changes.",
    ["status"],
)

SESSION_BILLED_AMOUNT = Histogram(
    "parlor_session_billed_amount",
    "Final amount charged per closed session.",
    buckets=(0, 50, 100, 200, 300, 500, 750, 1000, 2000, 5000),
)

SESSION_BILLED_MINUTES = Histogram(
    "parlor_session_billed_minutes",
    "Billed minutes per closed session.",
    buckets=(1, 15, 30, 60, 90, 120, 180, 240, 360),
)

SESSIONS_CLOSED_AMOUNT_TOTAL = Counter(
    "parlor_sessions_closed_amount_total",
    "Sum of amounts charged for closed sessions.",
    ["category", "payment_method"],
)

BROADCAST_SUBSCRIBERS = Gauge(
    "parlor_broadcast_subscribers",
    "Current number of live event subscribers.",
)

BROADCAST_EVENTS_TOTAL = Counter(
    "parlor_broadcast_events_total",
    "Total number of events published to subscribers.",
    ["event_type"],
)

BROADCAST_PRUNED_TOTAL = Counter(
    "parlor_broadcast_pruned_total",
    "Total number of subscribers removed by the broadcaster.",
    ["reason"],
)

LIGHT_REQUESTS_TOTAL = Counter(
    "parlor_light_requests_total",
    "Total number of light control requests by outcome.",
    ["action", "outcome"],
)

LIGHT_REQUEST_SECONDS = Histogram(
    "parlor_light_request_seconds",
    "Duration of light control requests.",
)


def record_transition(transition: str) -> None:
    SESSION_TRANSITIONS_TOTAL.labels(transition=transition).inc()


def record_rejection(operation: str, code: str) -> None:
    LEDGER_REJECTIONS_TOTAL.labels(operation=operation, code=code).inc()


def record_table_status_change(status: str) -> None:
    TABLE_STATUS_CHANGES_TOTAL.labels(status=status).inc()


def record_session_closed(
    category: str,
    payment_method: str,
    amount: int,
    billed_minutes: int,
) -> None:
    SESSION_BILLED_AMOUNT.observe(amount)
    SESSION_BILLED_MINUTES.observe(billed_minutes)
    SESSIONS_CLOSED_AMOUNT_TOTAL.labels(category=category, payment_method=payment_method).inc(
        amount
    )


def record_subscriber_count(count: int) -> None:
    BROADCAST_SUBSCRIBERS.set(count)


def record_broadcast(event_type: str) -> None:
    BROADCAST_EVENTS_TOTAL.labels(event_type=event_type).inc()


def record_subscriber_pruned(reason: str) -> None:
    BROADCAST_PRUNED_TOTAL.labels(reason=reason).inc()


def record_light_request(action: str, outcome: str, duration_seconds: float) -> None:
    LIGHT_REQUESTS_TOTAL.labels(action=action, outcome=outcome).inc()
    LIGHT_REQUEST_SECONDS.observe(max(duration_seconds, 0.0))
