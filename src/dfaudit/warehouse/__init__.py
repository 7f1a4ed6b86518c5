"""
Warehouse client system for dfaudit.

This package provides the listing/deletion interface the audit runs against,
with a BigQuery implementation.
"""

from .base import WarehouseClient
from .bigquery_client import BigQueryWarehouseClient
from .factory import WarehouseClientFactory

__all__ = [
    "WarehouseClient",
    "BigQueryWarehouseClient",
    "WarehouseClientFactory",
]
