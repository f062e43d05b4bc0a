from prometheus_client import Counter, Histogram

# Business Metrics
upsell_price_lookups_total = Counter(
    "upsell_price_lookups_total",
    "Upstream price lookups per product",
    ["result"] # Labels: 'ok', 'no_price', 'error'
)

upsell_price_cache_total = Counter(
    "upsell_price_cache_total",
    "Price cache outcomes",
    ["outcome"] # Labels: 'hit', 'miss', 'coalesced'
)

upsell_checkout_sessions_total = Counter(
    "upsell_checkout_sessions_total",
    "Checkout sessions requested",
    ["kind", "status"] # kind: 'upsell', 'bundle'; status: 'success', 'failed'
)

upsell_checkout_duration_seconds = Histogram(
    "upsell_checkout_duration_seconds",
    "Checkout session creation duration in seconds",
    ["kind"]
)

upsell_credit_amount_cents = Histogram(
    "upsell_credit_amount_cents",
    "Credit granted toward bundle purchases, in minor units",
    buckets=(0, 500, 1000, 2500, 5000, 10000, 25000, 50000)
)

upsell_saga_compensation_total = Counter(
    "upsell_saga_compensation_total",
    "Total saga compensations triggered",
    ["step_name"] # Labels: 'create_coupon', 'create_promotion_code'
)
