"""
dfaudit: find BigQuery tables that a Dataform project does not manage.

dfaudit compares the tables declared in Dataform's compiled graph with the
tables that exist in the targeted GCP projects, reports the difference and can
delete it.
"""

__version__ = "0.1.0"

from .exceptions import (
    DfauditError,
    ConfigurationError,
    ManifestReadError,
    WarehouseAccessError,
    InvalidExclusionPatternError,
    DeletionError,
)
from .resources import ResourceManifest, InventorySnapshot, UnmanagedSet
from .reconciler import ExclusionRule, reconcile

__all__ = [
    "__version__",
    "DfauditError",
    "ConfigurationError",
    "ManifestReadError",
    "WarehouseAccessError",
    "InvalidExclusionPatternError",
    "DeletionError",
    "ResourceManifest",
    "InventorySnapshot",
    "UnmanagedSet",
    "ExclusionRule",
    "reconcile",
]
