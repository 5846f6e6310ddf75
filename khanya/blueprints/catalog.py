# khanya/blueprints/catalog.py
from flask import Blueprint, jsonify

from ..services import get_services
from ..utils.auth import admin_required
from ..utils.http import json_body

catalog_bp = Blueprint("catalog", __name__)


@catalog_bp.route("/get-bales", methods=["GET", "POST"])
def get_bales():
    """Active bales for the storefront."""
    return jsonify({"success": True, "bales": get_services().catalog.get_bales()})


@catalog_bp.route("/get-bale-products", methods=["GET", "POST"])
def get_bale_products():
    """Legacy catalog: categories and products."""
    return jsonify({"success": True, **get_services().catalog.get_bale_products()})


def _manage(entity: str):
    result = get_services().catalog.manage(entity, json_body())
    return jsonify({"success": True, **result})


@catalog_bp.post("/manage-categories")
@admin_required
def manage_categories():
    return _manage("categories")


@catalog_bp.post("/manage-products")
@admin_required
def manage_products():
    return _manage("products")


@catalog_bp.post("/manage-product-images")
@admin_required
def manage_product_images():
    return _manage("product_images")


@catalog_bp.post("/manage-product-categories")
@admin_required
def manage_product_categories():
    return _manage("product_categories")


@catalog_bp.post("/manage-bales")
@admin_required
def manage_bales():
    return _manage("bales")


@catalog_bp.post("/manage-bale-items")
@admin_required
def manage_bale_items():
    return _manage("bale_items")


@catalog_bp.post("/manage-stock-items")
@admin_required
def manage_stock_items():
    return _manage("stock_items")
