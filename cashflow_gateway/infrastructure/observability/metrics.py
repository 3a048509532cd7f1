"""Prometheus metrics for monitoring settlement savings and webhook performance"""

from prometheus_client import Counter, Histogram

# Optimization metrics
optimization_counter = Counter(
    "cashflow_optimization_total",
    "Total settlement optimizations run",
    ["outcome"],  # reduced | unchanged | increased
)

settlements_per_run_histogram = Histogram(
    "cashflow_settlements_per_run",
    "Settlement transfers emitted per optimization",
    buckets=[0, 1, 2, 5, 10, 25, 50, 100],
)

unsettled_debtors_counter = Counter(
    "cashflow_unsettled_debtors_total",
    "Debtors left without a compatible creditor",
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "webhook_latency_seconds",
    "Ledger webhook response time",
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


def record_optimization(original_count: int, optimized_count: int, unsettled_debtors: int) -> None:
    """Record how much a run reduced the transfer count"""
    if optimized_count < original_count:
        outcome = "reduced"
    elif optimized_count == original_count:
        outcome = "unchanged"
    else:
        outcome = "increased"

    optimization_counter.labels(outcome=outcome).inc()
    settlements_per_run_histogram.observe(optimized_count)
    if unsettled_debtors:
        unsettled_debtors_counter.inc(unsettled_debtors)
