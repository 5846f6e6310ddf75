from datetime import timedelta

from khanya.models import db, EmailVerification
from khanya.services.verification_service import generate_pin
from khanya.utils.clock import utcnow


def _issued_pin(app, **identity):
    with app.app_context():
        record = (
            EmailVerification.query.filter_by(**identity)
            .order_by(EmailVerification.id.desc()).first()
        )
        return record.pin_code


def test_generate_pin_is_six_digits():
    for _ in range(50):
        pin = generate_pin()
        assert len(pin) == 6 and pin.isdigit()
        assert 100000 <= int(pin) <= 999999


def test_email_pin_round_trip(app, client, email):
    resp = client.post("/api/send-verification-pin", json={"method": "email", "email": "Thandi@Example.com"})
    assert resp.status_code == 200
    assert resp.get_json()["success"] is True

    pin = _issued_pin(app, email="thandi@example.com")
    pin_mail = email.sent[0]
    assert pin_mail["to"] == "Thandi@Example.com"
    assert pin_mail["subject"] == f"{pin} - Your Verification PIN - Khanya"
    # sales alert follows the PIN
    assert email.subjects()[1] == "Customer requested verification PIN"

    resp = client.post("/api/verify-pin", json={"method": "email", "email": "thandi@example.com", "pin": pin})
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "verified": True}

    # a consumed PIN cannot be used again
    resp = client.post("/api/verify-pin", json={"method": "email", "email": "thandi@example.com", "pin": pin})
    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "error": "Invalid or expired PIN"}


def test_sms_pin_uses_normalized_number(app, client, sms):
    resp = client.post("/api/send-verification-pin", json={"method": "sms", "phone": "082 123 4567"})
    assert resp.status_code == 200

    pin = _issued_pin(app, phone="27821234567")
    assert sms.sent == [("27821234567", f"Khanya code: {pin}. Expires in 10 min.")]

    resp = client.post("/api/verify-pin", json={"method": "sms", "phone": "+27821234567", "pin": pin})
    assert resp.get_json()["verified"] is True


def test_expired_pin_is_rejected(app, client):
    with app.app_context():
        db.session.add(EmailVerification(
            email="late@example.com", pin_code="123456",
            expires_at=utcnow() - timedelta(seconds=1),
        ))
        db.session.commit()

    resp = client.post("/api/verify-pin", json={"method": "email", "email": "late@example.com", "pin": "123456"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid or expired PIN"


def test_each_request_creates_a_new_record(app, client):
    for _ in range(2):
        client.post("/api/send-verification-pin", json={"method": "email", "email": "a@example.com"})
    with app.app_context():
        assert EmailVerification.query.filter_by(email="a@example.com").count() == 2


def test_invalid_email_is_rejected(client, email):
    resp = client.post("/api/send-verification-pin", json={"method": "email", "email": "not-an-email"})
    assert resp.status_code == 400
    assert email.sent == []


def test_invalid_phone_creates_no_record(app, client, sms):
    resp = client.post("/api/send-verification-pin", json={"method": "sms", "phone": "0821"})
    assert resp.status_code == 400
    assert "Invalid phone number format" in resp.get_json()["error"]
    with app.app_context():
        assert EmailVerification.query.count() == 0
    assert sms.sent == []


def test_unconfigured_provider_is_a_server_error(app, client, sms):
    sms.configured = False
    resp = client.post("/api/send-verification-pin", json={"method": "sms", "phone": "0821234567"})
    assert resp.status_code == 500
    assert resp.get_json()["success"] is False
    with app.app_context():
        assert EmailVerification.query.count() == 0


def test_delivery_failure_propagates(client, email):
    email.fail = True
    resp = client.post("/api/send-verification-pin", json={"method": "email", "email": "a@example.com"})
    assert resp.status_code == 500
    assert resp.get_json()["error"].startswith("Email delivery failed")


def test_sales_alert_failure_does_not_fail_pin_request(client, email, monkeypatch):
    sent = []

    def send_only_pin(sender, to, subject, html, reply_to=None, text=None):
        if "Verification PIN" not in subject:
            raise RuntimeError("sales inbox down")
        sent.append(subject)
        return "msg"

    monkeypatch.setattr(email, "send_email", send_only_pin)
    resp = client.post("/api/send-verification-pin", json={"method": "email", "email": "a@example.com"})
    assert resp.status_code == 200
    assert len(sent) == 1


def test_pin_expires_ten_minutes_after_issue(app, client):
    before = utcnow()
    client.post("/api/send-verification-pin", json={"method": "email", "email": "a@example.com"})
    after = utcnow()
    with app.app_context():
        record = EmailVerification.query.filter_by(email="a@example.com").one()
        assert before + timedelta(minutes=10) <= record.expires_at <= after + timedelta(minutes=10)


def test_most_recent_matching_pin_is_consumed(app, client):
    now = utcnow()
    with app.app_context():
        # newest record inserted first so the lower id belongs to it
        newest = EmailVerification(
            email="a@example.com", pin_code="123456", created_at=now,
            expires_at=now + timedelta(minutes=10),
        )
        older = EmailVerification(
            email="a@example.com", pin_code="123456", created_at=now - timedelta(minutes=5),
            expires_at=now + timedelta(minutes=5),
        )
        db.session.add(newest)
        db.session.commit()
        db.session.add(older)
        db.session.commit()
        newest_id, older_id = newest.id, older.id

    resp = client.post("/api/verify-pin", json={"method": "email", "email": "a@example.com", "pin": "123456"})
    assert resp.get_json()["verified"] is True

    with app.app_context():
        assert db.session.get(EmailVerification, newest_id).verified is True
        assert db.session.get(EmailVerification, older_id).verified is False
