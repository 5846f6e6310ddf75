"""
Connector for SMS delivery through the WinSMS JSON API.
"""

from typing import Any, Dict
import logging

from .connector_base import BaseConnector, ConnectorConfig
from ..errors import DeliveryError

logger = logging.getLogger(__name__)


class WinSMSConnector(BaseConnector):
    """Sends SMS to numbers already in 27XXXXXXXXX form."""

    def __init__(self, config: ConnectorConfig):
        super().__init__(config)
        self.api_key = config.api_key
        self.username = config.additional_config.get('username', '')
        self.config.base_url = config.base_url or "https://api.winsms.co.za/api/rest/v1"

    def _required_credentials(self) -> Dict[str, str]:
        return {'WINSMS_API_KEY': self.api_key, 'WINSMS_USERNAME': self.username}

    def send_sms(self, destination: str, message: str) -> Dict[str, Any]:
        """
        Send one SMS. The message is not truncated here.

        Args:
            destination: number in 27XXXXXXXXX form
            message: text to send

        Returns:
            Dict: WinSMS response body

        Raises:
            ConfigurationError: WinSMS credentials missing
            DeliveryError: WinSMS refused the message
        """
        self.require_configured()
        body = {
            'message': message,
            'recipients': [{'mobileNumber': destination}],
        }
        logger.info(f"Sending SMS via WinSMS to {destination} ({len(message)} chars)")
        response = self._make_request(
            'POST', '/sms/outgoing/send',
            json=body,
            headers={'Content-Type': 'application/json', 'AUTHORIZATION': self.api_key},
        )
        data = self._json(response)
        if not response.ok:
            detail = data.get('message') or response.text
            raise DeliveryError(f"WinSMS API error: {detail}")
        return data
