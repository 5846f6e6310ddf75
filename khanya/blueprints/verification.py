# khanya/blueprints/verification.py
from flask import Blueprint, jsonify

from ..services import get_services
from ..utils.http import json_body

verification_bp = Blueprint("verification", __name__)


@verification_bp.post("/send-verification-pin")
def send_verification_pin():
    """Issue a PIN by email or SMS."""
    data = json_body()
    result = get_services().verification.request_pin(
        method=data.get("method"), email=data.get("email"), phone=data.get("phone"),
    )
    return jsonify({"success": True, **result})


@verification_bp.post("/verify-pin")
def verify_pin():
    data = json_body()
    result = get_services().verification.verify_pin(
        data.get("pin"), method=data.get("method"), email=data.get("email"), phone=data.get("phone"),
    )
    return jsonify({"success": True, **result})
