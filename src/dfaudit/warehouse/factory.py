"""
Warehouse client factory for creating clients based on configuration.
"""

from typing import Dict, Type
import logging

from .base import WarehouseClient
from .bigquery_client import BigQueryWarehouseClient
from ..config import WarehouseConfig
from ..exceptions import ConfigurationError


logger = logging.getLogger(__name__)


class WarehouseClientFactory:
    """Factory for creating warehouse clients from the configured provider."""

    # Registry of available client implementations
    _CLIENT_REGISTRY: Dict[str, Type[WarehouseClient]] = {
        "bigquery": BigQueryWarehouseClient,
    }

    @classmethod
    def create_client(cls, config: WarehouseConfig) -> WarehouseClient:
        """
        Create a warehouse client for the configured provider.

        Raises:
            ConfigurationError: If the provider is unknown or the client
                cannot be constructed
        """
        provider = config.provider.lower()

        if provider not in cls._CLIENT_REGISTRY:
            raise ConfigurationError(
                f"Unsupported warehouse provider: {provider}. "
                f"Available providers: {cls.get_supported_providers()}"
            )

        client_class = cls._CLIENT_REGISTRY[provider]

        try:
            if client_class is BigQueryWarehouseClient:
                client = BigQueryWarehouseClient(location=config.location)
            else:
                client = client_class()
            logger.debug(f"Created warehouse client {client!r}")
            return client
        except Exception as e:
            logger.error(f"Failed to create {provider} warehouse client: {e}")
            raise ConfigurationError(
                f"Failed to create {provider} warehouse client: {e}"
            ) from e

    @classmethod
    def get_supported_providers(cls) -> list[str]:
        return list(cls._CLIENT_REGISTRY.keys())

    @classmethod
    def register_provider(
        cls,
        provider_name: str,
        client_class: Type[WarehouseClient],
    ) -> None:
        """
        Register a custom warehouse client provider.

        Raises:
            ConfigurationError: If the class doesn't implement WarehouseClient
        """
        if not issubclass(client_class, WarehouseClient):
            raise ConfigurationError(
                f"Client class {client_class} must inherit from WarehouseClient"
            )

        cls._CLIENT_REGISTRY[provider_name.lower()] = client_class
        logger.info(f"Registered warehouse provider: {provider_name}")

    @classmethod
    def unregister_provider(cls, provider_name: str) -> None:
        cls._CLIENT_REGISTRY.pop(provider_name.lower(), None)
