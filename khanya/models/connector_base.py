"""
Abstract base class for third-party API connectors.
Defines the shared HTTP session, credential checks and request helper.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict
import logging

import requests

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


class ConnectorStatus(Enum):
    """Connector status"""
    ACTIVE = "active"
    NOT_CONFIGURED = "not_configured"


@dataclass
class ConnectorConfig:
    """Base configuration for connectors"""
    name: str
    api_key: str = ""
    api_secret: str = ""
    base_url: str = ""
    timeout: int = 30
    additional_config: Dict[str, Any] = field(default_factory=dict)


class BaseConnector(ABC):
    """
    Base class for every provider connector.
    Requests are sent once; there is no retry policy.
    """

    def __init__(self, config: ConnectorConfig):
        self.config = config
        self.session = requests.Session()
        self._setup_session()

    def _setup_session(self):
        """Initial HTTP session setup"""
        self.session.headers.update({
            'User-Agent': f'Khanya-Connector/{self.config.name}',
            'Accept': 'application/json',
        })

    @abstractmethod
    def _required_credentials(self) -> Dict[str, str]:
        """
        Credentials this connector cannot work without.

        Returns:
            Dict: environment variable name -> configured value
        """

    @property
    def status(self) -> ConnectorStatus:
        return ConnectorStatus.ACTIVE if self.is_configured else ConnectorStatus.NOT_CONFIGURED

    @property
    def is_configured(self) -> bool:
        return all(self._required_credentials().values())

    def require_configured(self):
        """
        Raises:
            ConfigurationError: if any required credential is missing
        """
        missing = [name for name, value in self._required_credentials().items() if not value]
        if missing:
            logger.error(f"{self.config.name} not configured, missing: {', '.join(missing)}")
            raise ConfigurationError(f"{self.config.name} service not configured")

    def _make_request(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Send an HTTP request to the provider.

        Args:
            method: HTTP method (GET, POST, ...)
            path: path appended to the connector base URL
            **kwargs: extra arguments for requests

        Returns:
            requests.Response: the provider response, whatever its status
        """
        url = f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"
        kwargs.setdefault('timeout', self.config.timeout)
        response = self.session.request(method, url, **kwargs)
        logger.info(f"{self.config.name} {method} {path} -> {response.status_code}")
        return response

    @staticmethod
    def _json(response: requests.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def get_connector_info(self) -> Dict[str, Any]:
        """
        Connector information, safe to expose (no secrets).

        Returns:
            Dict: connector information
        """
        return {
            'name': self.config.name,
            'status': self.status.value,
            'base_url': self.config.base_url,
            'timeout': self.config.timeout,
        }
