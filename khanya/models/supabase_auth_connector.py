"""
Connector resolving access tokens against the hosted auth service.
"""

from typing import Any, Dict, Optional
import logging

from .connector_base import BaseConnector, ConnectorConfig

logger = logging.getLogger(__name__)


class SupabaseAuthConnector(BaseConnector):
    """Turns a bearer token into the authenticated user, or None."""

    def __init__(self, config: ConnectorConfig):
        super().__init__(config)
        self.service_key = config.api_key

    def _required_credentials(self) -> Dict[str, str]:
        return {'SUPABASE_URL': self.config.base_url, 'SUPABASE_SERVICE_ROLE_KEY': self.service_key}

    def get_user(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Args:
            token: the caller's access token

        Returns:
            Dict: the user (with ``id``), or None when the token is not valid
        """
        self.require_configured()
        response = self._make_request(
            'GET', '/auth/v1/user',
            headers={'apikey': self.service_key, 'Authorization': f'Bearer {token}'},
        )
        if response.status_code != 200:
            logger.info(f"Token rejected by auth service ({response.status_code})")
            return None
        user = self._json(response)
        return user or None
