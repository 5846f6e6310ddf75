"""
Connector for transactional email through Resend.
"""

from typing import Dict, List, Optional, Union
import logging

import resend

from .connector_base import BaseConnector, ConnectorConfig
from ..errors import DeliveryError

logger = logging.getLogger(__name__)


class ResendConnector(BaseConnector):
    """Sends HTML email through the Resend SDK."""

    def __init__(self, config: ConnectorConfig):
        super().__init__(config)
        self.api_key = (config.api_key or "").strip()
        self.config.base_url = config.base_url or "https://api.resend.com"
        # the SDK reads a module-level key; one key serves every send
        if self.api_key:
            resend.api_key = self.api_key

    def _required_credentials(self) -> Dict[str, str]:
        return {'RESEND_API_KEY': self.api_key}

    def send_email(self, sender: str, to: Union[str, List[str]], subject: str, html: str,
                   reply_to: Optional[str] = None, text: Optional[str] = None) -> str:
        """
        Send one email.

        Args:
            sender: "Name <address>" of the sender
            to: recipient address or list of addresses
            subject: subject line
            html: rendered HTML body
            reply_to: optional reply-to address
            text: optional plain-text body

        Returns:
            str: the Resend message id

        Raises:
            ConfigurationError: RESEND_API_KEY missing
            DeliveryError: Resend refused the message
        """
        self.require_configured()
        params = {
            'from': sender,
            'to': [to] if isinstance(to, str) else list(to),
            'subject': subject,
            'html': html,
        }
        if reply_to:
            params['reply_to'] = reply_to
        if text:
            params['text'] = text

        try:
            response = resend.Emails.send(params)
        except Exception as exc:
            logger.error(f"Resend failed for {params['to']}: {exc}")
            raise DeliveryError(f"Email delivery failed: {exc}") from exc

        message_id = response.get('id') if isinstance(response, dict) else None
        if not message_id:
            raise DeliveryError(f"Email delivery failed: {response}")
        logger.info(f"Email '{subject}' sent to {params['to']} ({message_id})")
        return message_id
