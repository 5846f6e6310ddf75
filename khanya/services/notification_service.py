"""
Notification dispatcher: transactional email and SMS for the storefront.
"""

import logging
from typing import Optional, Tuple

from flask import render_template

from ..errors import ValidationError
from ..utils.phone import to_sms_destination

logger = logging.getLogger(__name__)

SALES_NOTIFICATION_SUBJECTS = {
    'page_visit': "Customer viewing View Order Bales page",
    'add_to_cart': "Customer added bale to cart",
    'view_cart': "Customer viewing cart",
    'proceed_checkout': "Customer proceeding to checkout",
    'pin_request': "Customer requested verification PIN",
    'pin_verified': "Customer successfully verified PIN",
}

SALES_NOTIFICATION_FIELDS = (
    'bale_name', 'bale_price', 'cart_total', 'cart_count', 'email', 'phone', 'method',
)

STATUS_LABELS = {
    'new_order': "New Order",
    'packing': "Packing",
    'shipped': "Shipped",
    'delivered': "Delivered",
}

STATUS_SUBJECTS = {
    'new_order': "Order Confirmation - {number}",
    'packing': "Order Being Packed! {number}",
    'shipped': "Your Order is On Its Way! {number}",
    'delivered': "Order Delivered Successfully! {number}",
}

PAYMENT_SUBJECTS = {
    'Refunded': "Refund Processed - Order {number}",
    'Fully Paid': "Payment Confirmed - Order {number}",
    'Partially Paid': "Partial Payment Received - Order {number}",
}

# order status as worded in payment SMS
PAYMENT_ORDER_LABELS = {
    'new_order': "awaiting packing",
    'packing': "being packed",
    'shipped': "shipped",
    'delivered': "delivered",
}

BANK_DETAILS = {
    'bank': "FNB",
    'account': "63173001256",
    'branch': "250655",
    'ewallet': "083 305 4532",
}

SMS_MAX_LENGTH = 150


class NotificationDispatcher:
    """
    Stateless fan-out to the email and SMS providers.

    The ``send_*`` methods propagate provider failures; callers that treat a
    message as a side channel use the methods documented as best-effort,
    which log and swallow the failure instead.
    """

    def __init__(self, email_connector, sms_connector, settings):
        self.email = email_connector
        self.sms = sms_connector
        self.settings = settings

    @staticmethod
    def _configured(connector) -> bool:
        return bool(getattr(connector, 'is_configured', True))

    @property
    def email_configured(self) -> bool:
        return self._configured(self.email)

    @property
    def sms_configured(self) -> bool:
        return self._configured(self.sms)

    def require_channel(self, method: str):
        """Fail early with ConfigurationError when the channel's provider is not set up."""
        connector = self.sms if method == 'sms' else self.email
        connector.require_configured()

    # -- primitives -------------------------------------------------------

    def send_email(self, to, subject: str, html: str, reply_to: Optional[str] = None,
                   text: Optional[str] = None) -> str:
        return self.email.send_email(
            sender=self.settings.mail_from, to=to, subject=subject, html=html,
            reply_to=reply_to, text=text,
        )

    def send_sms(self, phone: str, message: str):
        return self.sms.send_sms(to_sms_destination(phone), message)

    # -- verification -----------------------------------------------------

    def send_pin(self, method: str, pin: str, email: Optional[str] = None,
                 phone: Optional[str] = None, ttl_minutes: int = 10):
        """Deliver a verification PIN; the PIN is the deliverable, so failures propagate."""
        if method == 'email':
            html = render_template('email/verification_pin.html', pin=pin, ttl_minutes=ttl_minutes)
            self.send_email(email, f"{pin} - Your Verification PIN - Khanya", html)
            logger.info(f"PIN sent to email {email}")
        else:
            self.send_sms(phone, f"Khanya code: {pin}. Expires in {ttl_minutes} min.")
            logger.info(f"PIN sent to phone {phone}")

    # -- internal sales alerts ----------------------------------------------

    def send_sales_notification(self, kind: str, **details) -> str:
        subject = SALES_NOTIFICATION_SUBJECTS.get(kind)
        if subject is None:
            raise ValidationError(f"Unknown notification type: {kind}")
        context = {field: details.get(field) for field in SALES_NOTIFICATION_FIELDS}
        html = render_template('email/sales_notification.html', kind=kind, subject=subject, **context)
        logger.info(f"Sending {kind} notification email")
        return self.send_email(self.settings.sales_email, subject, html)

    def notify_sales_quietly(self, kind: str, **details) -> bool:
        """Best-effort sales alert: failures are logged and never raised."""
        try:
            self.send_sales_notification(kind, **details)
            return True
        except Exception as exc:
            logger.error(f"Error sending sales notification ({kind}): {exc}")
            return False

    # -- customer facing --------------------------------------------------

    def send_contact_enquiry(self, name: str, phone: str, email: str, bales: str,
                             method: str, address: Optional[str] = None) -> str:
        lines = [
            f"Name: {name}",
            f"Phone: {phone}",
            f"Email: {email}",
            f"Number of bales: {bales}",
            f"Delivery or collect: {method}",
        ]
        if method == 'delivery':
            lines.append(f"Delivery address: {address or ''}")
        text = "\n".join(lines) + "\n\n---\nThis enquiry was submitted via the Khanya website contact form."
        html = render_template(
            'email/contact_enquiry.html', name=name, phone=phone, email=email,
            bales=bales, method=method, address=address or '',
        )
        return self.send_email(
            self.settings.sales_email, "New Khanya website enquiry", html,
            reply_to=email or None, text=text,
        )

    def send_order_note(self, order, note: str) -> Tuple[bool, bool]:
        """
        Best-effort note to the customer by email and SMS.

        Returns:
            Tuple[bool, bool]: (email sent, SMS sent)
        """
        email_sent = False
        sms_sent = False

        if self.email_configured:
            try:
                html = render_template('email/order_note.html', order=order, note=note)
                self.send_email(order.customer_email, f"Order Update - {order.order_number}", html)
                email_sent = True
            except Exception as exc:
                logger.error(f"Failed to send note email for {order.order_number}: {exc}")

        if self.sms_configured and order.customer_phone:
            try:
                self.send_sms(order.customer_phone, f"Khanya: {note}")
                sms_sent = True
            except Exception as exc:
                logger.error(f"Failed to send note SMS for {order.order_number}: {exc}")

        return email_sent, sms_sent

    def send_order_confirmation(self, order) -> bool:
        """Best-effort confirmation to the customer and the orders inbox."""
        if not self.email_configured:
            logger.warning(f"Email not configured, no confirmation for {order.order_number}")
            return False
        try:
            self.send_email(
                order.customer_email, f"Order Confirmation - {order.order_number}",
                render_template('email/order_confirmation.html', order=order),
            )
            self.send_email(
                self.settings.orders_email, f"New Order - {order.order_number}",
                render_template('email/new_order_sales.html', order=order),
            )
            return True
        except Exception as exc:
            logger.error(f"Failed to send confirmation emails for {order.order_number}: {exc}")
            return False

    def send_status_update(self, order, new_status: str) -> bool:
        """Best-effort status email to the customer."""
        if not self.email_configured:
            return False
        label = STATUS_LABELS.get(new_status, new_status)
        subject = STATUS_SUBJECTS.get(new_status, "Order Update - {number}").format(number=order.order_number)
        try:
            html = render_template('email/order_status.html', order=order, status=new_status, label=label)
            self.send_email(order.customer_email, subject, html)
            return True
        except Exception as exc:
            logger.error(f"Failed to send status email for {order.order_number}: {exc}")
            return False

    @staticmethod
    def _payment_sms(order, status: str) -> str:
        number = order.order_number
        total = float(order.total_amount or 0)
        paid = float(order.amount_paid or 0)
        if status == 'Refunded':
            text = f"Order {number}: Your refund has been processed. Contact sales@khanya.store for queries. - Khanya"
        elif status == 'Fully Paid':
            label = PAYMENT_ORDER_LABELS.get(order.order_status, "processing")
            text = f"Order {number}: Payment of R{total:.0f} confirmed! Your order is {label}. Thank you! - Khanya"
        else:
            text = (f"Order {number}: R{paid:.0f} received. R{max(total - paid, 0):.0f} still due. "
                    f"Pay {BANK_DETAILS['bank']} {BANK_DETAILS['account']} ref {number} - Khanya")
        return text[:SMS_MAX_LENGTH]

    def send_payment_status(self, order, status: str) -> Tuple[bool, bool]:
        """
        Best-effort payment update to the customer by email and SMS.

        Returns:
            Tuple[bool, bool]: (email sent, SMS sent)
        """
        email_sent = False
        sms_sent = False
        email = order.customer_email or ''

        if self.email_configured and '@' in email and '.' in email:
            total = order.total_amount or 0
            paid = order.amount_paid or 0
            try:
                html = render_template(
                    'email/payment_status.html', order=order, status=status,
                    total=total, paid=paid, outstanding=max(total - paid, 0), bank=BANK_DETAILS,
                )
                subject = PAYMENT_SUBJECTS.get(status, "Payment Update - Order {number}")
                self.send_email(email, subject.format(number=order.order_number), html)
                email_sent = True
            except Exception as exc:
                logger.error(f"Failed to send payment email for {order.order_number}: {exc}")

        if self.sms_configured and order.customer_phone:
            try:
                self.send_sms(order.customer_phone, self._payment_sms(order, status))
                sms_sent = True
            except Exception as exc:
                logger.error(f"Failed to send payment SMS for {order.order_number}: {exc}")

        return email_sent, sms_sent
