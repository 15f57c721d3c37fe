"""Prometheus metrics for monitoring debt processing and collaborator performance"""

from prometheus_client import Counter, Histogram

# Debt lifecycle metrics
debts_created_counter = Counter(
    "ledgerly_debts_created_total",
    "Debts created",
    ["role"],  # institutional | lent | borrowed
)

debts_settled_counter = Counter(
    "ledgerly_debts_settled_total",
    "Debts whose balance reached zero",
    ["reason"],  # catch_up | payoff | repayment | batch
)

# Catch-up metrics
catch_up_updates_counter = Counter(
    "ledgerly_catch_up_updates_total",
    "Scheduled updates generated by catch-up",
)

catch_up_outcome_counter = Counter(
    "ledgerly_catch_up_debts_total",
    "Debts visited by catch-up",
    ["outcome"],  # applied | skipped | conflict | failed
)

catch_up_conflict_counter = Counter(
    "ledgerly_catch_up_conflicts_total",
    "Conditional schedule updates that lost a race",
)

# Repayment metrics
batch_item_counter = Counter(
    "ledgerly_batch_items_total",
    "Per-debt outcomes of batch repayments",
    ["outcome"],  # applied | skipped | failed
)

payment_conflict_counter = Counter(
    "ledgerly_payment_conflicts_total",
    "Conditional balance updates that lost a race",
    ["kind"],
)

repaid_cents_counter = Counter(
    "ledgerly_repaid_cents_total",
    "Cash repaid through payoff, repayment and batch operations",
    ["kind"],
)

# Transaction service metrics
transaction_latency_histogram = Histogram(
    "transaction_service_latency_seconds",
    "Transaction service response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

transaction_failure_counter = Counter(
    "transaction_service_failures_total",
    "Failed transaction service calls",
)

# Account service metrics
account_lookup_failures_counter = Counter(
    "account_lookup_failures_total",
    "Failed account service calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_repayment(kind: str, amount_cents: int, settled: bool) -> None:
    """Record repaid cash and, when the balance hit zero, the settlement"""
    repaid_cents_counter.labels(kind=kind).inc(amount_cents)
    if settled:
        debts_settled_counter.labels(reason=kind).inc()
