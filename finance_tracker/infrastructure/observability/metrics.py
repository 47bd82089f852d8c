"""Prometheus metrics for parsing, LLM calls, auth and transaction activity"""

from prometheus_client import Counter, Histogram

# Parsing metrics
parse_counter = Counter(
    "finance_parse_total",
    "Transaction texts parsed",
    ["backend", "outcome"],  # heuristic | llm ; success | failure
)

parse_confidence_histogram = Histogram(
    "finance_parse_confidence",
    "Confidence of parsed transactions",
    buckets=[0.5, 0.6, 0.7, 0.8, 0.9, 0.95, 1.0],
)

# LLM metrics
llm_call_counter = Counter(
    "llm_calls_total",
    "LLM calls by outcome",
    ["outcome"],  # LLMOk | RateLimited | QuotaExhausted | LLMFailure
)

llm_latency_histogram = Histogram(
    "llm_latency_seconds",
    "LLM response time",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# Auth metrics
auth_failure_counter = Counter(
    "auth_failures_total",
    "Rejected requests by reason",
    ["reason"],  # missing | invalid | provider_unavailable | forbidden
)

# Transaction metrics
transaction_mutation_counter = Counter(
    "finance_transaction_mutations_total",
    "Transaction writes",
    ["operation"],  # created | updated | deleted
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_parse(backend: str, success: bool, confidence: float | None = None) -> None:
    """Record parse outcome and, on success, its confidence"""
    parse_counter.labels(backend=backend, outcome="success" if success else "failure").inc()
    if success and confidence is not None:
        parse_confidence_histogram.observe(confidence)
