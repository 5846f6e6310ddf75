# khanya/blueprints/orders.py
from flask import Blueprint, jsonify

from ..services import get_services
from ..utils.auth import admin_required
from ..utils.http import json_body

orders_bp = Blueprint("orders", __name__)


@orders_bp.post("/create-order")
def create_order():
    order = get_services().orders.create_order(json_body())
    return jsonify({"success": True, "order": order})


@orders_bp.post("/track-order")
def track_order():
    """Customer lookup by email or phone, optionally one order number."""
    data = json_body()
    orders = get_services().tracking.track_orders(
        email=data.get("email"), phone=data.get("phone"), order_number=data.get("order_number"),
    )
    return jsonify({"success": True, "orders": orders})


@orders_bp.post("/send-order-note")
@admin_required
def send_order_note():
    data = json_body()
    result = get_services().orders.send_order_note(data.get("order_id"), data.get("note"))
    return jsonify({"success": True, **result})


@orders_bp.post("/update-order-status")
@admin_required
def update_order_status():
    data = json_body()
    order = get_services().orders.update_order_status(
        data.get("order_id"),
        data.get("new_status"),
        payment_status=data.get("payment_status"),
        note=data.get("note"),
    )
    return jsonify({"success": True, "order": order})
