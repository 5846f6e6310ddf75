from datetime import timedelta

import pytest

from khanya.utils.clock import utcnow


@pytest.mark.parametrize("phone", ["0821234567", "+27821234567", "27821234567", "082 123 4567"])
def test_track_by_phone_matches_stored_format(client, make_order, phone):
    make_order("KH2610190001", phone="27821234567")
    resp = client.post("/api/track-order", json={"phone": phone})
    assert resp.status_code == 200
    orders = resp.get_json()["orders"]
    assert [o["order_number"] for o in orders] == ["KH2610190001"]


def test_track_by_email_is_case_insensitive(client, make_order):
    make_order("KH2610190001", email="thandi@example.com")
    resp = client.post("/api/track-order", json={"email": "Thandi@Example.COM"})
    assert resp.status_code == 200
    assert len(resp.get_json()["orders"]) == 1


def test_orders_newest_first_history_oldest_first(client, make_order):
    now = utcnow()
    make_order("KH2610190001", created_at=now - timedelta(days=2), items=[(1, 1)])
    make_order("KH2610190002", created_at=now, history=["new_order", "packing", "shipped"])

    orders = client.post("/api/track-order", json={"email": "thandi@example.com"}).get_json()["orders"]
    assert [o["order_number"] for o in orders] == ["KH2610190002", "KH2610190001"]
    assert [h["status"] for h in orders[0]["order_status_history"]] == ["new_order", "packing", "shipped"]
    assert orders[1]["order_items"][0]["product_name"] == "Bale 1"


def test_order_number_narrows_result(client, make_order):
    make_order("KH2610190001")
    make_order("KH2610190002")
    resp = client.post("/api/track-order", json={"email": "thandi@example.com", "order_number": "KH2610190002"})
    assert [o["order_number"] for o in resp.get_json()["orders"]] == ["KH2610190002"]


def test_no_orders_is_not_found(client, make_order):
    make_order("KH2610190001")
    resp = client.post("/api/track-order", json={"email": "someone@example.com"})
    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "error": "No orders found"}


@pytest.mark.parametrize("body", [{}, {"email": "a@example.com", "phone": "0821234567"}])
def test_exactly_one_identity_required(client, body):
    resp = client.post("/api/track-order", json=body)
    assert resp.status_code == 400
