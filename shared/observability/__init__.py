from .setup import setup_observability
from .metrics import (
    upsell_price_lookups_total,
    upsell_price_cache_total,
    upsell_checkout_sessions_total,
    upsell_checkout_duration_seconds,
    upsell_credit_amount_cents,
    upsell_saga_compensation_total
)
