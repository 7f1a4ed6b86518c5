"""
End-to-end audit pipeline: manifest -> inventory -> unmanaged set.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .inventory import InventoryCollector
from .manifest import extract_manifest
from .reconciler import ExclusionRule, ReconciliationSummary, partition
from .resources import InventorySnapshot, ResourceManifest, UnmanagedSet
from .warehouse.base import WarehouseClient


logger = logging.getLogger(__name__)


@dataclass
class AuditResult:
    """Inputs and output of one audit run."""

    manifest: ResourceManifest
    inventory: InventorySnapshot
    unmanaged: UnmanagedSet
    summary: ReconciliationSummary


class AuditRunner:
    """
    Runs one audit against a warehouse.

    Failure order: a bad exclusion pattern or manifest fails before any
    warehouse call; any listing failure aborts the whole run.
    """

    def __init__(self, client: WarehouseClient, exclusion: ExclusionRule):
        self.client = client
        self.exclusion = exclusion

    async def run(self, manifest_path: Union[str, Path]) -> AuditResult:
        compiled = self.exclusion.compile()
        manifest = extract_manifest(manifest_path)

        collector = InventoryCollector(self.client)
        inventory = await collector.collect(manifest.namespaces())

        unmanaged, summary = partition(manifest, inventory, compiled)
        logger.info(
            f"Audit complete: {summary.unmanaged_tables} unmanaged, "
            f"{summary.managed_tables} managed, {summary.excluded_tables} excluded"
        )

        return AuditResult(
            manifest=manifest,
            inventory=inventory,
            unmanaged=unmanaged,
            summary=summary,
        )
