"""
Warehouse inventory collection for dfaudit.
"""

import logging
from typing import Iterable

from .exceptions import WarehouseAccessError
from .resources import InventorySnapshot
from .warehouse.base import WarehouseClient


logger = logging.getLogger(__name__)


class InventoryCollector:
    """Lists every table under a set of projects, one call at a time."""

    def __init__(self, client: WarehouseClient):
        self.client = client

    async def collect(self, namespaces: Iterable[str]) -> InventorySnapshot:
        """
        Build a snapshot of all tables in the given projects.

        Datasets with no tables do not appear in the snapshot.

        Raises:
            WarehouseAccessError: If any project or dataset cannot be listed.
                No partial snapshot is returned.
        """
        snapshot = InventorySnapshot()

        for namespace in namespaces:
            containers = await self._call(
                self.client.list_containers, namespace, namespace=namespace
            )
            logger.info(f"Scanning {len(containers)} datasets in project {namespace}")

            for container in containers:
                leaves = await self._call(
                    self.client.list_leaves,
                    namespace,
                    container,
                    namespace=namespace,
                    container=container,
                )
                for leaf in leaves:
                    snapshot.add(namespace, container, leaf)

        logger.info(f"Collected {snapshot.leaf_count} tables from the warehouse")
        return snapshot

    async def _call(self, method, *args, namespace: str, container: str = None):
        try:
            return await method(*args)
        except WarehouseAccessError:
            raise
        except Exception as e:
            location = f"{namespace}.{container}" if container else namespace
            logger.error(f"Unexpected error listing {location}: {e}")
            raise WarehouseAccessError(
                f"Failed to list {location}",
                namespace=namespace,
                container=container,
                cause=e,
            ) from e
