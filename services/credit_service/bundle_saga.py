"""
Steps for minting a one-time credit and opening the bundle checkout.

ctx keys read: gateway, credit, currency, customer_id, session_params, metadata
ctx keys written: coupon_id, promotion_code_id, promotion_code, session
"""
from .saga import SagaOrchestrator

# --- ACTIONS ---

async def create_coupon(ctx: dict):
    if ctx["credit"] <= 0:
        return
    ctx["coupon_id"] = await ctx["gateway"].create_coupon(
        amount_off=ctx["credit"],
        currency=ctx["currency"],
        metadata=ctx["metadata"],
    )

async def create_promotion_code(ctx: dict):
    coupon_id = ctx.get("coupon_id")
    if not coupon_id:
        return
    promo = await ctx["gateway"].create_promotion_code(
        coupon_id,
        customer_id=ctx.get("customer_id"),
        metadata=ctx["metadata"],
    )
    ctx["promotion_code_id"] = promo["id"]
    ctx["promotion_code"] = promo["code"]

async def create_checkout_session(ctx: dict):
    params = dict(ctx["session_params"])
    if ctx.get("promotion_code_id"):
        params["discounts"] = [{"promotion_code": ctx["promotion_code_id"]}]
        params.pop("allow_promotion_codes", None)
    ctx["session"] = await ctx["gateway"].create_checkout_session(params)


# --- COMPENSATIONS (Rollbacks) ---

async def rollback_coupon(ctx: dict):
    coupon_id = ctx.get("coupon_id")
    if coupon_id:
        await ctx["gateway"].delete_coupon(coupon_id)

async def rollback_promotion_code(ctx: dict):
    promotion_code_id = ctx.get("promotion_code_id")
    if promotion_code_id:
        await ctx["gateway"].deactivate_promotion_code(promotion_code_id)


# --- BUILDER FACTORY ---

def build_bundle_saga() -> SagaOrchestrator:
    saga = SagaOrchestrator()
    saga.add_step("create_coupon", create_coupon, rollback_coupon)
    saga.add_step("create_promotion_code", create_promotion_code, rollback_promotion_code)
    saga.add_step("create_checkout_session", create_checkout_session, None) # Last step, nothing after it to fail
    return saga
