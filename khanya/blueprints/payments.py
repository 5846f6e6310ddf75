# khanya/blueprints/payments.py
from flask import Blueprint, jsonify

from ..services import get_services
from ..utils.auth import admin_required
from ..utils.http import json_body

payments_bp = Blueprint("payments", __name__)


@payments_bp.post("/initialize-paystack-payment")
def initialize_paystack_payment():
    """Start a Paystack transaction for an order (amount in rand)."""
    data = json_body()
    result = get_services().payments.initialize_payment(
        email=data.get("email"),
        amount=data.get("amount"),
        order_number=data.get("order_number"),
        callback_url=data.get("callback_url"),
    )
    return jsonify({"success": True, **result})


@payments_bp.post("/verify-paystack-payment")
def verify_paystack_payment():
    """Verify a transaction; an unpaid transaction is still a 200."""
    data = json_body()
    result = get_services().payments.verify_payment(
        data.get("reference"), skip_order_update=bool(data.get("skip_order_update")),
    )
    return jsonify(result)


@payments_bp.post("/fix-order-payment")
def fix_order_payment():
    # no admin check here, unlike the other admin endpoints
    data = json_body()
    order = get_services().payments.fix_payment(data.get("order_number"))
    return jsonify({"success": True, "order": order})


@payments_bp.post("/update-payment-status")
@admin_required
def update_payment_status():
    """Record an EFT, cash or refund against an order and tell the customer."""
    data = json_body()
    result = get_services().payments.update_payment_status(
        data.get("order_id"),
        data.get("new_payment_status"),
        amount_paid=data.get("amount_paid"),
        refund_reason=data.get("refund_reason"),
    )
    return jsonify({"success": True, **result})
