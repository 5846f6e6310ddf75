# khanya/blueprints/metrics.py
from flask import Blueprint, jsonify

from ..services import get_services
from ..utils.auth import admin_required
from ..utils.http import json_body

metrics_bp = Blueprint("metrics", __name__)


@metrics_bp.post("/track-bale-metric")
def track_bale_metric():
    data = json_body()
    get_services().metrics.track(data.get("baleId"), data.get("metricType"))
    return jsonify({"success": True})


@metrics_bp.post("/reset-bale-metrics")
@admin_required
def reset_bale_metrics():
    get_services().metrics.reset()
    return jsonify({"success": True, "message": "Metrics reset successfully"})


@metrics_bp.post("/get-bale-metrics")
@admin_required
def get_bale_metrics():
    return jsonify({"success": True, "metrics": get_services().metrics.list_metrics()})
