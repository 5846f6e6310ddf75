import pytest

from khanya.config import Settings
from khanya.errors import ConfigurationError, DeliveryError, UpstreamRejected
from khanya.main import create_app
from khanya.models import db, UserRole
from khanya.models.connector_manager import ConnectorManager


class FakeConnector:
    configured = True

    @property
    def is_configured(self):
        return self.configured

    def require_configured(self):
        if not self.configured:
            raise ConfigurationError(f"{type(self).__name__} service not configured")


class FakeEmail(FakeConnector):
    def __init__(self):
        self.sent = []
        self.fail = False

    def send_email(self, sender, to, subject, html, reply_to=None, text=None):
        self.require_configured()
        if self.fail:
            raise DeliveryError("Email delivery failed: rejected")
        self.sent.append({
            "from": sender, "to": to, "subject": subject, "html": html,
            "reply_to": reply_to, "text": text,
        })
        return f"msg_{len(self.sent)}"

    def subjects(self):
        return [m["subject"] for m in self.sent]


class FakeSMS(FakeConnector):
    def __init__(self):
        self.sent = []

    def send_sms(self, destination, message):
        self.require_configured()
        self.sent.append((destination, message))
        return {"ok": True}


class FakePaystack(FakeConnector):
    def __init__(self):
        self.initialized = []
        self.verify_payload = {"status": True, "message": "Verification successful",
                               "data": {"status": "success", "amount": 45000}}
        self.reject_init = None

    def initialize_transaction(self, email, amount_minor, reference, callback_url=None):
        self.require_configured()
        if self.reject_init:
            raise UpstreamRejected(self.reject_init)
        self.initialized.append({"email": email, "amount": amount_minor,
                                 "reference": reference, "callback_url": callback_url})
        return {"authorization_url": f"https://checkout.paystack.com/{reference}",
                "access_code": "ac_123", "reference": reference}

    def verify_transaction(self, reference):
        self.require_configured()
        data = dict(self.verify_payload.get("data") or {})
        data["reference"] = data.get("reference") or reference
        return {**self.verify_payload, "data": data}


class FakeAuth(FakeConnector):
    def __init__(self):
        self.tokens = {}

    def get_user(self, token):
        return self.tokens.get(token)


@pytest.fixture
def connectors():
    manager = ConnectorManager()
    manager.register_connector("paystack", FakePaystack())
    manager.register_connector("email", FakeEmail())
    manager.register_connector("sms", FakeSMS())
    manager.register_connector("auth", FakeAuth())
    return manager


@pytest.fixture
def app(connectors):
    app = create_app(Settings(database_url="sqlite://", testing=True), connector_manager=connectors)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield


@pytest.fixture
def email(connectors):
    return connectors.get_connector("email")


@pytest.fixture
def sms(connectors):
    return connectors.get_connector("sms")


@pytest.fixture
def paystack(connectors):
    return connectors.get_connector("paystack")


@pytest.fixture
def admin_headers(app, connectors):
    connectors.get_connector("auth").tokens["admin-token"] = {"id": "admin-1", "email": "admin@khanya.store"}
    with app.app_context():
        db.session.add(UserRole(user_id="admin-1", role="admin"))
        db.session.commit()
    return {"Authorization": "Bearer admin-token"}


@pytest.fixture
def user_headers(connectors):
    connectors.get_connector("auth").tokens["user-token"] = {"id": "user-1", "email": "shopper@example.com"}
    return {"Authorization": "Bearer user-token"}


@pytest.fixture
def make_order(app):
    """Insert an order directly; returns its id."""
    from datetime import timedelta
    from decimal import Decimal

    from khanya.models import Order, OrderItem, OrderStatusHistory
    from khanya.utils.clock import utcnow

    def _make(order_number="KH2610190001", email="thandi@example.com", phone="27821234567",
              created_at=None, items=(), history=()):
        created_at = created_at or utcnow()
        with app.app_context():
            order = Order(
                order_number=order_number,
                customer_name="Thandi Mokoena",
                customer_email=email,
                customer_phone=phone,
                delivery_address="12 Long Street",
                delivery_city="Cape Town",
                delivery_province="Western Cape",
                delivery_postal_code="8001",
                payment_method="card",
                total_amount=Decimal("450.00"),
                created_at=created_at,
            )
            for product_id, quantity in items:
                order.items.append(OrderItem(
                    product_id=product_id, product_name=f"Bale {product_id}",
                    quantity=quantity, price_per_unit=Decimal("450.00"),
                    subtotal=Decimal("450.00") * quantity,
                ))
            for offset, status in enumerate(history):
                order.status_history.append(OrderStatusHistory(
                    status=status, changed_at=created_at + timedelta(minutes=offset),
                ))
            db.session.add(order)
            db.session.commit()
            return order.id

    return _make
