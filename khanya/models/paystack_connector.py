"""
Connector for the Paystack transaction API.
"""

from typing import Any, Dict, Optional
from urllib.parse import quote
import logging

from .connector_base import BaseConnector, ConnectorConfig
from ..errors import UpstreamRejected

logger = logging.getLogger(__name__)

CURRENCY = "ZAR"


class PaystackConnector(BaseConnector):
    """
    Initializes and verifies card transactions.
    Amounts exchanged with Paystack are in minor units (cents).
    """

    def __init__(self, config: ConnectorConfig):
        super().__init__(config)
        self.secret_key = config.api_key
        self.config.base_url = config.base_url or "https://api.paystack.co"

    def _required_credentials(self) -> Dict[str, str]:
        return {'PAYSTACK_SECRET_KEY': self.secret_key}

    def _auth_headers(self) -> Dict[str, str]:
        return {'Authorization': f'Bearer {self.secret_key}'}

    def initialize_transaction(self, email: str, amount_minor: int, reference: str,
                               callback_url: Optional[str] = None) -> Dict[str, Any]:
        """
        Start a transaction at Paystack.

        Args:
            email: customer email
            amount_minor: amount in cents
            reference: our order number, used as the Paystack reference
            callback_url: where Paystack sends the customer afterwards

        Returns:
            Dict: Paystack ``data`` (authorization_url, access_code, reference)

        Raises:
            UpstreamRejected: Paystack answered with ``status: false``
        """
        self.require_configured()
        body = {
            'email': email,
            'amount': amount_minor,
            'currency': CURRENCY,
            'reference': reference,
            'metadata': {
                'order_number': reference,
                'custom_fields': [{
                    'display_name': 'Order Number',
                    'variable_name': 'order_number',
                    'value': reference,
                }],
            },
        }
        if callback_url:
            body['callback_url'] = callback_url

        response = self._make_request('POST', '/transaction/initialize',
                                      json=body, headers=self._auth_headers())
        payload = self._json(response)
        if not payload.get('status'):
            message = payload.get('message') or 'Failed to initialize payment'
            logger.error(f"Paystack rejected initialization of {reference}: {message}")
            raise UpstreamRejected(message)
        return payload.get('data') or {}

    def verify_transaction(self, reference: str) -> Dict[str, Any]:
        """
        Look a transaction up by reference.

        Returns:
            Dict: the raw Paystack payload (``status``, ``message``, ``data``);
            an unsuccessful transaction is a normal answer, not an error
        """
        self.require_configured()
        response = self._make_request(
            'GET', f"/transaction/verify/{quote(reference, safe='')}",
            headers=self._auth_headers(),
        )
        return self._json(response)
