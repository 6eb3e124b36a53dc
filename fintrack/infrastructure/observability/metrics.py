"""Prometheus metrics for purchase authorizations, payments and invoice recomputes"""

from decimal import Decimal

from prometheus_client import Counter, Histogram

# Purchase metrics
purchase_counter = Counter(
    "fintrack_purchase_total",
    "Card purchase authorization attempts",
    ["outcome"],  # authorized | declined
)

purchase_amount_bucket_counter = Counter(
    "fintrack_purchase_amount_bucket",
    "Authorized card purchases by amount bucket",
    ["bucket"],  # 0-100, 100-500, 500-2000, 2000+
)

installment_plan_counter = Counter(
    "fintrack_installment_plans_total",
    "Installment plans created",
)

# Invoice metrics
payment_counter = Counter(
    "fintrack_invoice_payments_total",
    "Invoice payments applied",
    ["status"],  # paid | partial
)

invoice_recompute_counter = Counter(
    "fintrack_invoice_recompute_total",
    "Invoice totals recomputed from their charges",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_purchase(authorized: bool, amount: Decimal, installment_count: int = 1) -> None:
    """Record purchase authorization metrics and amount distribution"""
    outcome = "authorized" if authorized else "declined"
    purchase_counter.labels(outcome=outcome).inc()

    if not authorized:
        return

    if installment_count > 1:
        installment_plan_counter.inc()

    if amount <= 100:
        bucket = "0-100"
    elif amount <= 500:
        bucket = "100-500"
    elif amount <= 2000:
        bucket = "500-2000"
    else:
        bucket = "2000+"

    purchase_amount_bucket_counter.labels(bucket=bucket).inc()


def record_payment(status: str) -> None:
    payment_counter.labels(status=status).inc()
