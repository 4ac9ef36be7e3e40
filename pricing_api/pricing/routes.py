# pricing_api/pricing/routes.py
from __future__ import annotations
from flask import current_app, request, jsonify

from ..utils.api import api_ok, api_error
from ..utils.clock import now_utc
from ..services.pricing_service import (
    PricingInputError,
    get_discount_message,
    get_unlock_message,
    resolve_price,
    validate_amount,
)
from ..services.promotion_service import (
    amount_to_unlock,
    is_promotion_applicable,
    is_valid_promotion_code,
    parse_timestamp,
    promotion_from_record,
    promotion_rejection_reason,
)
from ..services.order_totals_service import group_by_business, line_item_from_payload, price_order
from . import bp

# ---- standard API response format ------------------------------------------
def ok(msg, data=None, status=200):
    r = jsonify(api_ok(msg, data)); r.status_code = status; return r
def err(msg, status=400, data=None):
    r = jsonify(api_error(msg, data)); r.status_code = status; return r

# ---- helpers ---------------------------------------------------------------

def _payload() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise PricingInputError("request body must be a JSON object")
    return data

def _request_now(data: dict):
    """One clock reading per request: pinned from the body when allowed, else the server clock."""
    raw = data.get("now")
    if raw is None or not current_app.config["PRICING_ALLOW_CLIENT_NOW"]:
        return now_utc()
    now = parse_timestamp(raw)
    if now is None:
        raise PricingInputError("now must be an ISO-8601 timestamp")
    return now

@bp.errorhandler(PricingInputError)
def _bad_input(e):
    current_app.logger.info("pricing request rejected: %s", e)
    return err(str(e), 400)

# ---- routes ----------------------------------------------------------------

@bp.post("/quote")
def quote():
    data = _payload()
    if data.get("base_price") is None:
        return err("base_price is required", 400)

    resolution = resolve_price(
        data.get("base_price"),
        data.get("quantity", 1),
        promotion_from_record(data.get("promotion")),
        data.get("deal") if isinstance(data.get("deal"), str) else None,
        _request_now(data),
    )
    return ok("ok", {
        **resolution.as_api(),
        "message": get_discount_message(resolution.applied_discount),
    })

@bp.post("/order")
def order_totals():
    data = _payload()
    raw_items = data.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        return err("items must be a non-empty list", 422)

    items = [line_item_from_payload(p) for p in raw_items]
    now = _request_now(data)
    totals = price_order(
        items,
        tax=data.get("tax", 0),
        shipping=data.get("shipping", 0),
        commission=data.get("commission", 0),
        now=now,
    )

    # one summary per dispensary for multi-seller carts; charges stay order-level
    by_business = []
    for business_id, group in group_by_business(items).items():
        sub = price_order(group, now=now).as_api()["money"]
        by_business.append({
            "business_id": business_id,
            "subtotal": sub["subtotal"],
            "discount_total": sub["discount_total"],
            "total": sub["total"],
        })
    return ok("ok", {**totals.as_api(), "by_business": by_business})

@bp.post("/promotions/check")
def check_promotion():
    data = _payload()
    code = data.get("code")
    if code is not None and not is_valid_promotion_code(code):
        return err("Invalid promotion code format. Codes must be 3-20 alphanumeric characters.", 422)

    promo = promotion_from_record(data.get("promotion"))
    subtotal = validate_amount("subtotal", data.get("subtotal", 0))
    now = _request_now(data)

    needed = amount_to_unlock(promo, subtotal, now)
    return ok("ok", {
        "applicable": is_promotion_applicable(promo, subtotal, now),
        "reason": promotion_rejection_reason(promo, subtotal, now),
        "amount_to_unlock": float(needed) if needed is not None else None,
        "message": get_unlock_message(promo, subtotal, now),
    })
