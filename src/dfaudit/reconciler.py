"""
Reconciliation of declared Dataform tables against the warehouse inventory.

The audit scope is always the set of projects named by the manifest; a
project that only shows up in the inventory is never visited.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Set, Tuple, Union

from .exceptions import InvalidExclusionPatternError
from .resources import InventorySnapshot, ResourceManifest, UnmanagedSet


logger = logging.getLogger(__name__)


@dataclass
class ExclusionRule:
    """Table names that must never be reported, by pattern or exact match."""

    name_patterns: List[str] = field(default_factory=list)
    exact_names: Set[str] = field(default_factory=set)

    def compile(self) -> "CompiledExclusion":
        """
        Compile every pattern once.

        Raises:
            InvalidExclusionPatternError: If any pattern is not a valid regex
        """
        compiled = []
        for pattern in self.name_patterns:
            # An empty pattern would match every table.
            if not pattern:
                continue
            try:
                compiled.append(re.compile(pattern))
            except re.error as e:
                raise InvalidExclusionPatternError(pattern, cause=e) from e

        return CompiledExclusion(patterns=compiled, exact_names=frozenset(self.exact_names))


@dataclass(frozen=True)
class CompiledExclusion:
    """An ExclusionRule with its patterns compiled."""

    patterns: List[re.Pattern]
    exact_names: frozenset

    def matches(self, leaf: str) -> bool:
        if leaf in self.exact_names:
            return True
        return any(pattern.search(leaf) for pattern in self.patterns)


@dataclass
class ReconciliationSummary:
    """Counts describing one reconciliation."""

    projects: int
    inventory_tables: int
    managed_tables: int
    excluded_tables: int
    unmanaged_tables: int


def partition(
    manifest: ResourceManifest,
    inventory: InventorySnapshot,
    exclusion: Union[ExclusionRule, CompiledExclusion],
) -> Tuple[UnmanagedSet, ReconciliationSummary]:
    """
    Walk the audited inventory once, collecting the unmanaged tables and
    counting every table as managed, excluded or unmanaged.

    Exclusion wins over declaration. Output follows inventory order and is
    not sorted.

    Raises:
        InvalidExclusionPatternError: If ``exclusion`` has an invalid pattern
    """
    if isinstance(exclusion, ExclusionRule):
        exclusion = exclusion.compile()

    unmanaged = UnmanagedSet()
    inventory_tables = managed = excluded = 0

    for namespace in manifest.namespaces():
        for container in inventory.containers(namespace):
            for leaf in inventory.leaves(namespace, container):
                inventory_tables += 1
                if exclusion.matches(leaf):
                    excluded += 1
                elif manifest.contains(namespace, container, leaf):
                    managed += 1
                else:
                    unmanaged.add(namespace, container, leaf)

    summary = ReconciliationSummary(
        projects=len(manifest.namespaces()),
        inventory_tables=inventory_tables,
        managed_tables=managed,
        excluded_tables=excluded,
        unmanaged_tables=unmanaged.leaf_count,
    )
    logger.debug(
        f"Reconciled {summary.projects} projects: "
        f"{summary.unmanaged_tables} unmanaged tables"
    )
    return unmanaged, summary


def reconcile(
    manifest: ResourceManifest,
    inventory: InventorySnapshot,
    exclusion: Union[ExclusionRule, CompiledExclusion],
) -> UnmanagedSet:
    """
    Compute the tables present in ``inventory`` that are neither excluded
    nor declared in ``manifest`` at the same project and dataset.

    Raises:
        InvalidExclusionPatternError: If ``exclusion`` has an invalid pattern
    """
    unmanaged, _ = partition(manifest, inventory, exclusion)
    return unmanaged


def summarize(
    manifest: ResourceManifest,
    inventory: InventorySnapshot,
    exclusion: Union[ExclusionRule, CompiledExclusion],
) -> ReconciliationSummary:
    """Partition the audited inventory into managed, excluded and unmanaged counts."""
    _, summary = partition(manifest, inventory, exclusion)
    return summary
