"""
Order tracking for customers, by email or phone number.
"""

import logging
from typing import List, Optional

from sqlalchemy import func

from ..errors import MissingIdentity, NotFound
from ..models import Order
from ..utils.phone import phone_lookup_candidates

logger = logging.getLogger(__name__)


class TrackingService:
    """Finds a customer's orders with their items and status history."""

    def track_orders(self, email: Optional[str] = None, phone: Optional[str] = None,
                     order_number: Optional[str] = None) -> List[dict]:
        """
        Args:
            email: customer email (exclusive with phone)
            phone: customer phone in any local or international format
            order_number: optional, narrows the result to one order

        Returns:
            List[dict]: newest order first; each order's history oldest first

        Raises:
            MissingIdentity: neither or both of email/phone supplied
            NotFound: nothing matched
        """
        email = (email or '').strip()
        phone = (phone or '').strip()
        if bool(email) == bool(phone):
            raise MissingIdentity("Provide either an email address or a phone number")

        query = Order.query
        if email:
            query = query.filter(func.lower(Order.customer_email) == email.lower())
        else:
            candidates = phone_lookup_candidates(phone)
            if not candidates:
                raise MissingIdentity("Provide either an email address or a phone number")
            query = query.filter(Order.customer_phone.in_(candidates))

        if order_number and order_number.strip():
            query = query.filter(Order.order_number == order_number.strip())

        orders = query.order_by(Order.created_at.desc()).all()
        if not orders:
            raise NotFound("No orders found")

        logger.info(f"Found {len(orders)} orders for {email or phone}")
        return [o.to_dict(include_items=True, include_history=True) for o in orders]
