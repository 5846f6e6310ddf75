"""
Payment gateway adapter: Paystack transactions reconciled into orders.
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from ..errors import NotFound, ReconciliationGap, ValidationError
from ..models import db, Order
from ..utils.clock import utcnow

logger = logging.getLogger(__name__)


class PaymentTrackingStatus:
    """Values of ``orders.payment_tracking_status``."""
    AWAITING_PAYMENT = "Awaiting payment"
    PARTIALLY_PAID = "Partially Paid"
    FULLY_PAID = "Fully Paid"
    REFUNDED = "Refunded"

    ALL = (AWAITING_PAYMENT, PARTIALLY_PAID, FULLY_PAID, REFUNDED)


def to_minor_units(amount) -> int:
    """Rand -> cents, rounded half up."""
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError("Invalid amount")
    if not value.is_finite() or value <= 0:
        raise ValidationError("Invalid amount")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount_minor) -> Decimal:
    return (Decimal(int(amount_minor or 0)) / Decimal(100)).quantize(Decimal("0.01"))


class PaymentService:
    """
    Per order: Awaiting payment -> (initialize) -> pending at Paystack ->
    (verify, success) -> Fully Paid. A failed verification leaves the order
    untouched. Nothing moves without an explicit call.
    """

    def __init__(self, paystack, dispatcher):
        self.paystack = paystack
        self.dispatcher = dispatcher

    def initialize_payment(self, email: str, amount, order_number: str,
                           callback_url: Optional[str] = None) -> dict:
        """
        Args:
            email: customer email
            amount: amount in rand
            order_number: our order number, sent as the Paystack reference
            callback_url: optional return URL

        Returns:
            dict: authorization_url, access_code, reference
        """
        if not email or not amount or not order_number:
            raise ValidationError("Missing required fields: email, amount, order_number")

        amount_minor = to_minor_units(amount)
        logger.info(f"Initializing Paystack payment for order {order_number}, amount R{amount}")
        data = self.paystack.initialize_transaction(
            email=email, amount_minor=amount_minor, reference=order_number,
            callback_url=callback_url,
        )
        return {
            'authorization_url': data.get('authorization_url'),
            'access_code': data.get('access_code'),
            'reference': data.get('reference') or order_number,
        }

    def verify_payment(self, reference: str, skip_order_update: bool = False) -> dict:
        """
        Verify a transaction and, unless told otherwise, mark its order paid.

        An unsuccessful transaction is a normal outcome (``payment_verified``
        false). A confirmed payment whose order could not be updated is
        reported with ``order_updated`` false and a support message.
        """
        if not reference:
            raise ValidationError("Missing reference")

        logger.info(f"Verifying Paystack payment {reference}, skip_order_update={skip_order_update}")
        payload = self.paystack.verify_transaction(reference)
        data = payload.get('data') or {}

        if not payload.get('status') or data.get('status') != 'success':
            logger.warning(f"Payment {reference} not successful: {payload.get('message')}")
            return {
                'success': False,
                'payment_verified': False,
                'error': payload.get('message') or "Payment verification failed",
                'status': data.get('status') or 'unknown',
            }

        amount = from_minor_units(data.get('amount'))
        order_number = data.get('reference') or reference

        if skip_order_update:
            logger.info(f"Payment {order_number} verified, R{amount}, order update skipped")
            return {
                'success': True,
                'payment_verified': True,
                'amount': float(amount),
                'reference': order_number,
            }

        try:
            order = self._mark_fully_paid(order_number, amount)
        except ReconciliationGap as gap:
            logger.critical(
                f"RECONCILIATION GAP: payment {gap.reference} captured (R{gap.amount}) "
                f"but the order was not updated"
            )
            return {
                'success': True,
                'payment_verified': True,
                'order_updated': False,
                'error': gap.message,
                'amount': float(amount),
                'reference': order_number,
            }

        logger.info(f"Order {order_number} updated - payment confirmed: R{amount}")
        return {
            'success': True,
            'payment_verified': True,
            'order_updated': True,
            'amount': float(amount),
            'reference': order_number,
            'order_id': order.id,
        }

    def _mark_fully_paid(self, order_number: str, amount: Decimal) -> Order:
        try:
            result = db.session.execute(
                update(Order)
                .where(Order.order_number == order_number)
                .values(
                    payment_tracking_status=PaymentTrackingStatus.FULLY_PAID,
                    amount_paid=amount,
                    payment_status='paid',
                    updated_at=utcnow(),
                )
            )
            if result.rowcount != 1:
                db.session.rollback()
                raise ReconciliationGap(order_number, amount)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise ReconciliationGap(order_number, amount) from exc
        return Order.query.filter_by(order_number=order_number).first()

    def fix_payment(self, order_number: str) -> dict:
        """
        Reset an order to unpaid, used to unwind a bad reconciliation by hand.
        Callers are not authenticated.
        """
        if not order_number:
            raise ValidationError("Order number is required")

        order = Order.query.filter_by(order_number=order_number).first()
        if order is None:
            raise NotFound("Order not found")

        logger.warning(f"Resetting payment of order {order_number} (was R{order.amount_paid})")
        order.amount_paid = 0
        order.payment_tracking_status = PaymentTrackingStatus.AWAITING_PAYMENT
        db.session.commit()
        return order.to_dict()

    def update_payment_status(self, order_id, new_status: str, amount_paid=None,
                              refund_reason: Optional[str] = None) -> dict:
        """
        Admin move of an order's payment tracking status (EFT, cash, refunds).

        Args:
            order_id: order primary key
            new_status: one of ``PaymentTrackingStatus.ALL``
            amount_paid: optional new amount paid, in rand
            refund_reason: optional reason stored with a refund

        Returns:
            dict: notification outcome, previous and new status, updated order
        """
        if not order_id or not new_status:
            raise ValidationError("order_id and new_payment_status are required")
        if new_status not in PaymentTrackingStatus.ALL:
            raise ValidationError(f"Invalid payment status: {new_status}")

        order = db.session.get(Order, str(order_id))
        if order is None:
            raise NotFound("Order not found")

        paid = None
        if amount_paid is not None:
            try:
                paid = Decimal(str(amount_paid))
            except (InvalidOperation, ValueError):
                raise ValidationError("Invalid amount_paid")
            if not paid.is_finite() or paid < 0:
                raise ValidationError("Invalid amount_paid")

        previous_status = order.payment_tracking_status
        order.payment_tracking_status = new_status
        if paid is not None:
            order.amount_paid = paid
        if refund_reason is not None:
            order.refund_reason = refund_reason
        db.session.commit()
        logger.info(f"Payment status of {order.order_number}: {previous_status} -> {new_status}")

        if new_status == PaymentTrackingStatus.AWAITING_PAYMENT:
            email_sent, sms_sent = False, False
            message = "Payment status updated (no notification for Awaiting payment status)"
        else:
            email_sent, sms_sent = self.dispatcher.send_payment_status(order, new_status)
            if email_sent and sms_sent:
                message = "Payment status updated and notifications sent via email and SMS"
            elif email_sent:
                message = "Payment status updated and email sent (SMS failed)"
            elif sms_sent:
                message = "Payment status updated and SMS sent (email failed)"
            else:
                message = "Payment status updated (notifications failed)"

        return {
            'message': message,
            'emailSent': email_sent,
            'smsSent': sms_sent,
            'previousStatus': previous_status,
            'newStatus': new_status,
            'order': order.to_dict(),
        }
