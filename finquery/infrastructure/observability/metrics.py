"""Prometheus metrics for query outcomes, cache efficiency and data source health"""

from prometheus_client import Counter, Histogram

# Query metrics
query_counter = Counter(
    "finquery_queries_total",
    "Total queries answered",
    ["operation", "outcome"],  # outcome: success | error code
)

query_duration_histogram = Histogram(
    "finquery_query_duration_seconds",
    "Time to answer a query, including fetch",
    ["operation"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Cache metrics
cache_lookup_counter = Counter(
    "finquery_cache_lookups_total",
    "Result cache lookups",
    ["result"],  # hit | miss
)

# Data source metrics
fetch_retry_counter = Counter(
    "finquery_fetch_retries_total",
    "Fetch attempts retried after a transient failure",
)

fetch_failure_counter = Counter(
    "finquery_fetch_failures_total",
    "Fetches that failed after retries",
    ["code"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_query(operation: str, outcome: str, duration_seconds: float) -> None:
    """Record query count and latency"""
    query_counter.labels(operation=operation, outcome=outcome).inc()
    query_duration_histogram.labels(operation=operation).observe(duration_seconds)


def record_cache_lookup(hit: bool) -> None:
    cache_lookup_counter.labels(result="hit" if hit else "miss").inc()
