"""
Abstract base class for warehouse clients.

This module provides the interface the inventory collector and the deletion
workflow use to talk to a table warehouse.
"""

from abc import ABC, abstractmethod
from typing import List
import logging


logger = logging.getLogger(__name__)


class WarehouseClient(ABC):
    """
    Abstract base class for all warehouse clients.

    Namespaces are projects, containers are datasets and leaves are tables.
    Listing failures must raise WarehouseAccessError and deletion failures
    must raise DeletionError.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    async def list_containers(self, namespace: str) -> List[str]:
        """
        List dataset ids in a project.

        Raises:
            WarehouseAccessError: If the project cannot be listed
        """
        pass

    @abstractmethod
    async def list_leaves(self, namespace: str, container: str) -> List[str]:
        """
        List table ids in a dataset.

        Raises:
            WarehouseAccessError: If the dataset cannot be listed
        """
        pass

    @abstractmethod
    async def delete_leaf(self, namespace: str, container: str, leaf: str) -> None:
        """
        Delete a single table.

        Raises:
            DeletionError: If the table cannot be deleted
        """
        pass

    @abstractmethod
    async def delete_container(self, namespace: str, container: str) -> None:
        """
        Delete an empty dataset.

        Raises:
            DeletionError: If the dataset cannot be deleted
        """
        pass

    async def close(self) -> None:
        """Release any underlying connections."""
        pass

    async def __aenter__(self) -> "WarehouseClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
