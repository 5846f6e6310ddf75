# khanya/blueprints/notifications.py
from flask import Blueprint, jsonify

from ..services import get_services
from ..services.notification_service import SALES_NOTIFICATION_FIELDS
from ..utils.http import json_body

notifications_bp = Blueprint("notifications", __name__)


@notifications_bp.post("/send-contact-email")
def send_contact_email():
    """Website contact form -> sales inbox."""
    data = json_body()
    get_services().notifications.send_contact_enquiry(
        name=data.get("name") or "",
        phone=data.get("phone") or "",
        email=data.get("email") or "",
        bales=str(data.get("bales") or ""),
        method=data.get("method") or "",
        address=data.get("address"),
    )
    return jsonify({"success": True, "message": "Email sent successfully"})


@notifications_bp.post("/send-sales-notification")
def send_sales_notification():
    """Storefront activity alert to the sales team."""
    data = json_body()
    details = {field: data.get(field) for field in SALES_NOTIFICATION_FIELDS}
    get_services().notifications.send_sales_notification(data.get("type"), **details)
    return jsonify({"success": True})
