"""
BigQuery warehouse client.

Uses google-cloud-bigquery with Application Default Credentials. The SDK is
blocking, so each call runs in a worker thread; calls are still issued one at
a time by the callers. Credentials refresh lazily inside any call, and auth
failures are wrapped the same way as API errors.
"""

import asyncio
from typing import Dict, List, Optional

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import bigquery

from .base import WarehouseClient
from ..exceptions import DeletionError, WarehouseAccessError


class BigQueryWarehouseClient(WarehouseClient):
    """Warehouse client backed by one ``bigquery.Client`` per project."""

    def __init__(self, location: Optional[str] = None):
        super().__init__()
        self.location = location
        self._clients: Dict[str, bigquery.Client] = {}

    def _get_client(self, project_id: str) -> bigquery.Client:
        client = self._clients.get(project_id)
        if client is None:
            try:
                client = bigquery.Client(project=project_id, location=self.location)
            except GoogleAuthError as e:
                raise WarehouseAccessError(
                    "Could not create BigQuery client", namespace=project_id, cause=e
                ) from e
            self._clients[project_id] = client
        return client

    def _list_dataset_ids(self, project_id: str) -> List[str]:
        client = self._get_client(project_id)
        return [dataset.dataset_id for dataset in client.list_datasets(project=project_id)]

    def _list_table_ids(self, project_id: str, dataset_id: str) -> List[str]:
        client = self._get_client(project_id)
        return [table.table_id for table in client.list_tables(f"{project_id}.{dataset_id}")]

    async def list_containers(self, namespace: str) -> List[str]:
        try:
            dataset_ids = await asyncio.to_thread(self._list_dataset_ids, namespace)
        except (GoogleAPIError, GoogleAuthError) as e:
            self.logger.error(f"Error listing datasets in project {namespace}: {e}")
            raise WarehouseAccessError(
                "Failed to list datasets", namespace=namespace, cause=e
            ) from e

        self.logger.debug(f"Project {namespace} has {len(dataset_ids)} datasets")
        return dataset_ids

    async def list_leaves(self, namespace: str, container: str) -> List[str]:
        try:
            return await asyncio.to_thread(self._list_table_ids, namespace, container)
        except (GoogleAPIError, GoogleAuthError) as e:
            self.logger.error(f"Error listing tables in {namespace}.{container}: {e}")
            raise WarehouseAccessError(
                "Failed to list tables", namespace=namespace, container=container, cause=e
            ) from e

    async def delete_leaf(self, namespace: str, container: str, leaf: str) -> None:
        table_path = f"{namespace}.{container}.{leaf}"
        try:
            client = self._get_client(namespace)
            await asyncio.to_thread(client.delete_table, table_path, not_found_ok=False)
        except (GoogleAPIError, GoogleAuthError, WarehouseAccessError) as e:
            self.logger.error(f"Error deleting table {table_path}: {e}")
            raise DeletionError(namespace, container, leaf, cause=e) from e

    async def delete_container(self, namespace: str, container: str) -> None:
        dataset_path = f"{namespace}.{container}"
        try:
            client = self._get_client(namespace)
            # Never cascade: the dataset must already be empty.
            await asyncio.to_thread(
                client.delete_dataset,
                dataset_path,
                delete_contents=False,
                not_found_ok=False,
            )
        except (GoogleAPIError, GoogleAuthError, WarehouseAccessError) as e:
            self.logger.error(f"Error deleting dataset {dataset_path}: {e}")
            raise DeletionError(namespace, container, cause=e) from e

    async def close(self) -> None:
        for client in self._clients.values():
            client.close()
        self._clients.clear()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(location={self.location!r}, "
            f"projects={list(self._clients)})"
        )
