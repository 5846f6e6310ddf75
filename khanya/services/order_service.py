"""
Checkout and order administration.
"""

import logging
import secrets
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..errors import NotFound, ValidationError
from ..models import db, Bale, Order, OrderItem, OrderStatusHistory
from ..utils.clock import utcnow

logger = logging.getLogger(__name__)

REQUIRED_CUSTOMER_FIELDS = (
    'customer_name', 'customer_email', 'customer_phone',
    'delivery_address', 'delivery_city', 'delivery_province',
    'delivery_postal_code', 'payment_method',
)


def generate_order_number() -> str:
    """KH + date + four random digits, e.g. KH2610190427."""
    return f"KH{utcnow():%y%m%d}{secrets.randbelow(10000):04d}"


class OrderService:

    def __init__(self, dispatcher):
        self.dispatcher = dispatcher

    def _unique_order_number(self) -> str:
        for _ in range(10):
            number = generate_order_number()
            if not Order.query.filter_by(order_number=number).first():
                return number
        raise RuntimeError("Could not allocate a unique order number")

    @staticmethod
    def _get_order(order_id) -> Order:
        order = db.session.get(Order, str(order_id)) if order_id else None
        if order is None:
            raise NotFound("Order not found")
        return order

    def create_order(self, data: dict) -> dict:
        """
        Persist an order and its lines from the checkout form.
        Confirmation emails are best-effort.
        """
        # postal code and phone may arrive as JSON numbers
        fields = {
            f: '' if data.get(f) is None else str(data[f]).strip()
            for f in REQUIRED_CUSTOMER_FIELDS
        }
        missing = [f for f in REQUIRED_CUSTOMER_FIELDS if not fields[f]]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        raw_items = data.get('items') or []
        if not isinstance(raw_items, list) or not raw_items:
            raise ValidationError("Order must contain at least one item")

        items = []
        total = Decimal("0")
        for raw in raw_items:
            try:
                quantity = int(raw.get('quantity') or 0)
                price = Decimal(str(raw.get('price_per_unit')))
                product_id = int(raw.get('product_id'))
            except (AttributeError, TypeError, ValueError, InvalidOperation):
                raise ValidationError("Invalid order item")
            if quantity <= 0 or price < 0 or not raw.get('product_name'):
                raise ValidationError("Invalid order item")
            subtotal = price * quantity
            total += subtotal
            items.append(OrderItem(
                product_id=product_id,
                product_name=raw['product_name'],
                product_image=raw.get('product_image') or '',
                quantity=quantity,
                price_per_unit=price,
                subtotal=subtotal,
            ))

        order = Order(
            order_number=self._unique_order_number(),
            customer_name=fields['customer_name'],
            customer_email=fields['customer_email'].lower(),
            customer_phone=fields['customer_phone'],
            delivery_address=fields['delivery_address'],
            delivery_city=fields['delivery_city'],
            delivery_province=fields['delivery_province'],
            delivery_postal_code=fields['delivery_postal_code'],
            payment_method=fields['payment_method'],
            total_amount=total,
            items=items,
        )
        db.session.add(order)
        db.session.commit()
        logger.info(f"Order {order.order_number} created, total R{total}")

        self.dispatcher.send_order_confirmation(order)
        return order.to_dict(include_items=True)

    def send_order_note(self, order_id, note: str) -> dict:
        if not order_id or not note:
            raise ValidationError("Order ID and note are required")
        order = self._get_order(order_id)

        db.session.add(OrderStatusHistory(order_id=order.id, status='note', notes=note, changed_at=utcnow()))
        db.session.commit()

        email_sent, sms_sent = self.dispatcher.send_order_note(order, note)
        logger.info(f"Order note sent: {order.order_number} email={email_sent} sms={sms_sent}")
        return {'emailSent': email_sent, 'smsSent': sms_sent}

    def update_order_status(self, order_id, new_status: str, payment_status: Optional[str] = None,
                            note: Optional[str] = None) -> dict:
        """
        Move an order to a new status and log it in the history.
        Setting ``payment_status`` to "paid" takes the ordered bales out of stock.
        """
        if not order_id or not new_status:
            raise ValidationError("Order ID and status are required")
        order = self._get_order(order_id)

        order.order_status = new_status
        if payment_status:
            order.payment_status = payment_status
        db.session.add(OrderStatusHistory(
            order_id=order.id, status=new_status, notes=note or None, changed_at=utcnow(),
        ))

        if payment_status == 'paid':
            self._deduct_bale_stock(order)

        db.session.commit()
        logger.info(f"Order {order.order_number} moved to {new_status}")

        self.dispatcher.send_status_update(order, new_status)
        return order.to_dict(include_items=True, include_history=True)

    @staticmethod
    def _deduct_bale_stock(order: Order):
        for item in order.items:
            bale = db.session.get(Bale, item.product_id)
            if bale is None:
                logger.error(f"Bale {item.product_id} of order {order.order_number} not found")
                continue
            before = bale.quantity_in_stock or 0
            bale.quantity_in_stock = max(0, before - item.quantity)
            logger.info(f"Updated bale {bale.id}: {before} -> {bale.quantity_in_stock}")
