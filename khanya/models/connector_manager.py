"""
Connector manager.
Holds the provider connectors of one application instance.
"""

from typing import Any, Dict, List, Optional
import logging

from .connector_base import BaseConnector, ConnectorConfig
from .paystack_connector import PaystackConnector
from .resend_connector import ResendConnector
from .supabase_auth_connector import SupabaseAuthConnector
from .winsms_connector import WinSMSConnector

logger = logging.getLogger(__name__)


class ConnectorManager:
    """
    Central registry for provider connectors.
    Services receive their connectors from here at construction time.
    """

    def __init__(self):
        self.connectors: Dict[str, Any] = {}

    def register_connector(self, name: str, connector) -> None:
        """
        Register (or replace) a connector.

        Args:
            name: unique connector name
            connector: connector instance
        """
        self.connectors[name] = connector
        logger.info(f"Connector {name} registered")

    def get_connector(self, name: str) -> Optional[Any]:
        return self.connectors.get(name)

    def list_connectors(self) -> List[Dict[str, Any]]:
        """
        Returns:
            List[Dict]: connector information, without credentials
        """
        out = []
        for name, connector in self.connectors.items():
            if isinstance(connector, BaseConnector):
                info = connector.get_connector_info()
                configured = connector.is_configured
            else:
                info = {'name': name}
                configured = True
            out.append({'name': name, 'info': info, 'configured': configured})
        return out


def build_connector_manager(settings) -> ConnectorManager:
    """Create the default connectors from the application settings."""
    manager = ConnectorManager()
    manager.register_connector('paystack', PaystackConnector(ConnectorConfig(
        name='Paystack',
        api_key=settings.paystack_secret_key,
        base_url=settings.paystack_base_url,
        timeout=settings.http_timeout,
    )))
    manager.register_connector('email', ResendConnector(ConnectorConfig(
        name='Resend',
        api_key=settings.resend_api_key,
        timeout=settings.http_timeout,
    )))
    manager.register_connector('sms', WinSMSConnector(ConnectorConfig(
        name='WinSMS',
        api_key=settings.winsms_api_key,
        base_url=settings.winsms_base_url,
        timeout=settings.http_timeout,
        additional_config={'username': settings.winsms_username},
    )))
    manager.register_connector('auth', SupabaseAuthConnector(ConnectorConfig(
        name='Supabase Auth',
        api_key=settings.supabase_service_role_key,
        base_url=settings.supabase_url,
        timeout=settings.http_timeout,
    )))
    return manager
