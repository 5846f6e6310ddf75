# khanya/models/order.py
import uuid

from . import db
from ..utils.clock import utcnow


def _uuid() -> str:
    return str(uuid.uuid4())


def _money(value) -> float:
    return float(value) if value is not None else 0.0


def _iso(value):
    return value.isoformat() if value is not None else None


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    order_number = db.Column(db.String(64), unique=True, nullable=False)
    customer_name = db.Column(db.String(255), nullable=False)
    customer_email = db.Column(db.String(255), nullable=False, index=True)
    customer_phone = db.Column(db.String(32), default="", index=True)
    delivery_address = db.Column(db.Text, default="")
    delivery_city = db.Column(db.String(120), default="")
    delivery_province = db.Column(db.String(120), default="")
    delivery_postal_code = db.Column(db.String(16), default="")
    payment_method = db.Column(db.String(32), default="")
    total_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    amount_paid = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    payment_status = db.Column(db.String(32), nullable=False, default="pending")
    payment_tracking_status = db.Column(db.String(32), nullable=False, default="Awaiting payment")
    refund_reason = db.Column(db.Text)
    order_status = db.Column(db.String(32), nullable=False, default="new_order")
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    items = db.relationship(
        "OrderItem", backref="order", lazy=True, order_by="OrderItem.id",
        cascade="all, delete-orphan",
    )
    status_history = db.relationship(
        "OrderStatusHistory", backref="order", lazy=True,
        order_by="OrderStatusHistory.changed_at", cascade="all, delete-orphan",
    )

    def to_dict(self, include_items: bool = False, include_history: bool = False):
        data = {
            "id": self.id,
            "order_number": self.order_number,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "delivery_address": self.delivery_address,
            "delivery_city": self.delivery_city,
            "delivery_province": self.delivery_province,
            "delivery_postal_code": self.delivery_postal_code,
            "payment_method": self.payment_method,
            "total_amount": _money(self.total_amount),
            "amount_paid": _money(self.amount_paid),
            "payment_status": self.payment_status,
            "payment_tracking_status": self.payment_tracking_status,
            "refund_reason": self.refund_reason,
            "order_status": self.order_status,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if include_items:
            data["order_items"] = [i.to_dict() for i in self.items]
        if include_history:
            history = sorted(self.status_history, key=lambda h: h.changed_at)
            data["order_status_history"] = [h.to_dict() for h in history]
        return data

    def __repr__(self):
        return f"<Order id={self.id} number={self.order_number!r}>"


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(36), db.ForeignKey("orders.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, nullable=False)
    product_name = db.Column(db.String(255), nullable=False)
    product_image = db.Column(db.String(512), default="")
    quantity = db.Column(db.Integer, nullable=False, default=1)
    price_per_unit = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    subtotal = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    def to_dict(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "product_image": self.product_image,
            "quantity": self.quantity,
            "price_per_unit": _money(self.price_per_unit),
            "subtotal": _money(self.subtotal),
        }


class OrderStatusHistory(db.Model):
    __tablename__ = "order_status_history"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(36), db.ForeignKey("orders.id"), nullable=False, index=True)
    status = db.Column(db.String(32), nullable=False)
    notes = db.Column(db.Text)
    changed_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "status": self.status,
            "notes": self.notes,
            "changed_at": _iso(self.changed_at),
        }
