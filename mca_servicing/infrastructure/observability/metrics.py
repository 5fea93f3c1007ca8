"""Prometheus metrics for schedule previews, payback generation and webhook performance"""

from prometheus_client import Counter, Histogram

# Schedule metrics
schedule_preview_counter = Counter(
    "mca_schedule_preview_total",
    "Payback schedule previews calculated",
    ["frequency", "outcome"],  # outcome: complete | partial | empty
)

# Payback metrics
payback_generated_counter = Counter(
    "mca_payback_generated_total",
    "Paybacks generated from payback plans",
    ["frequency"],
)

payback_generated_amount_counter = Counter(
    "mca_payback_generated_cents_total",
    "Amount of generated paybacks in cents",
    ["portion"],  # funded | fee
)

plan_stopped_counter = Counter(
    "mca_payback_plan_completed_total",
    "Payback plans stopped after their last scheduled payback",
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "webhook_latency_seconds",
    "Payment webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "webhook_failures_total",
    "Failed webhook deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_schedule_preview(frequency: str, next_payback_date: str, scheduled_end_date: str) -> None:
    """Record how many previews produced both, one or neither calculated date"""
    if next_payback_date and scheduled_end_date:
        outcome = "complete"
    elif next_payback_date or scheduled_end_date:
        outcome = "partial"
    else:
        outcome = "empty"
    schedule_preview_counter.labels(frequency=frequency or "unknown", outcome=outcome).inc()


def record_generated_payback(frequency: str, funded_amount_cents: int, fee_amount_cents: int) -> None:
    """Record a generated payback and how it was split"""
    payback_generated_counter.labels(frequency=frequency).inc()
    payback_generated_amount_counter.labels(portion="funded").inc(max(funded_amount_cents, 0))
    payback_generated_amount_counter.labels(portion="fee").inc(max(fee_amount_cents, 0))
