"""
PIN issuance and validation proving control of an email address or phone number.
"""

import logging
import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy import update

from ..errors import InvalidOrExpiredPin, ValidationError
from ..models import db, EmailVerification
from ..utils.clock import utcnow
from ..utils.phone import normalize_phone, to_sms_destination

logger = logging.getLogger(__name__)

METHODS = ('email', 'sms')


def generate_pin() -> str:
    """Six ASCII digits in the range 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


class VerificationService:
    """
    Issues one-time PINs and consumes them.

    There is no attempt throttling on verification; a PIN can be guessed by
    brute force within its lifetime.
    """

    def __init__(self, dispatcher, ttl_minutes: int = 10):
        self.dispatcher = dispatcher
        self.ttl_minutes = ttl_minutes

    def request_pin(self, method: str, email: Optional[str] = None,
                    phone: Optional[str] = None) -> dict:
        """
        Create a fresh PIN record and deliver the code.

        Args:
            method: "email" or "sms"
            email: address the PIN is sent to when method is "email"
            phone: number the PIN is sent to when method is "sms"

        Returns:
            dict: confirmation message

        Raises:
            ValidationError: bad method, email or phone
            ConfigurationError: the delivery provider is not configured
            DeliveryError: the provider refused the message
        """
        email = (email or '').strip()
        phone = (phone or '').strip()

        if method not in METHODS:
            raise ValidationError("method must be 'email' or 'sms'")
        if method == 'email' and (not email or '@' not in email):
            raise ValidationError("Invalid email address")
        if method == 'sms':
            if not phone:
                raise ValidationError("Phone number is required for SMS verification")
            to_sms_destination(phone)

        self.dispatcher.require_channel(method)

        pin = generate_pin()
        record = EmailVerification(
            email=email.lower() if email else None,
            phone=normalize_phone(phone) if phone else None,
            pin_code=pin,
            expires_at=utcnow() + timedelta(minutes=self.ttl_minutes),
            verified=False,
        )
        db.session.add(record)
        db.session.commit()

        self.dispatcher.send_pin(method, pin, email=email, phone=phone, ttl_minutes=self.ttl_minutes)
        logger.info(f"PIN issued to {email or phone} via {method}")

        self.dispatcher.notify_sales_quietly(
            'pin_request', email=email or None, phone=phone or None, method=method,
        )

        return {
            'message': "PIN sent to your email" if method == 'email' else "PIN sent to your phone",
        }

    def verify_pin(self, pin, method: Optional[str] = None, email: Optional[str] = None,
                   phone: Optional[str] = None) -> dict:
        """
        Consume the most recent usable PIN matching identity and code.

        Raises:
            ValidationError: identity or PIN missing
            InvalidOrExpiredPin: no unverified, unexpired record matches
        """
        email = (email or '').strip().lower()
        phone = (phone or '').strip()
        pin = str(pin).strip() if pin is not None else ''

        if method is None:
            method = 'sms' if phone and not email else 'email'
        if method not in METHODS:
            raise ValidationError("method must be 'email' or 'sms'")

        if method == 'email':
            if not email or not pin:
                raise ValidationError("Email and PIN are required")
            identity = EmailVerification.email == email
        else:
            if not phone or not pin:
                raise ValidationError("Phone and PIN are required")
            identity = EmailVerification.phone == normalize_phone(phone)

        now = utcnow()
        record = (
            EmailVerification.query
            .filter(identity)
            .filter(EmailVerification.pin_code == pin)
            .filter(EmailVerification.verified.is_(False))
            .filter(EmailVerification.expires_at > now)
            .order_by(EmailVerification.created_at.desc(), EmailVerification.id.desc())
            .first()
        )
        if record is None:
            raise InvalidOrExpiredPin()

        # flip only if still unverified so a code cannot authorize twice
        result = db.session.execute(
            update(EmailVerification)
            .where(EmailVerification.id == record.id, EmailVerification.verified.is_(False))
            .values(verified=True)
        )
        if result.rowcount != 1:
            db.session.rollback()
            raise InvalidOrExpiredPin()
        db.session.commit()

        logger.info(f"PIN verified for {email or phone}")
        return {'verified': True}
