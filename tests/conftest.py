"""
Pytest configuration and shared fixtures for dfaudit tests.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest

from dfaudit.exceptions import DeletionError, WarehouseAccessError
from dfaudit.warehouse.base import WarehouseClient


class FakeWarehouseClient(WarehouseClient):
    """In-memory warehouse: ``{project: {dataset: [table, ...]}}``."""

    def __init__(
        self,
        tables: Optional[Dict[str, Dict[str, List[str]]]] = None,
        failing_tables: Optional[Set[Tuple[str, str, str]]] = None,
        failing_datasets: Optional[Set[Tuple[str, str]]] = None,
        unreachable_projects: Optional[Set[str]] = None,
    ):
        super().__init__()
        self.tables = {
            project: {dataset: list(leaves) for dataset, leaves in datasets.items()}
            for project, datasets in (tables or {}).items()
        }
        self.failing_tables = failing_tables or set()
        self.failing_datasets = failing_datasets or set()
        self.unreachable_projects = unreachable_projects or set()
        self.calls: List[Tuple[Any, ...]] = []
        self.closed = False

    async def list_containers(self, namespace: str) -> List[str]:
        self.calls.append(("list_containers", namespace))
        if namespace in self.unreachable_projects or namespace not in self.tables:
            raise WarehouseAccessError("Failed to list datasets", namespace=namespace)
        return list(self.tables[namespace])

    async def list_leaves(self, namespace: str, container: str) -> List[str]:
        self.calls.append(("list_leaves", namespace, container))
        try:
            return list(self.tables[namespace][container])
        except KeyError:
            raise WarehouseAccessError(
                "Failed to list tables", namespace=namespace, container=container
            )

    async def delete_leaf(self, namespace: str, container: str, leaf: str) -> None:
        self.calls.append(("delete_leaf", namespace, container, leaf))
        if (namespace, container, leaf) in self.failing_tables:
            raise DeletionError(namespace, container, leaf)
        self.tables[namespace][container].remove(leaf)

    async def delete_container(self, namespace: str, container: str) -> None:
        self.calls.append(("delete_container", namespace, container))
        if (namespace, container) in self.failing_datasets:
            raise DeletionError(namespace, container)
        del self.tables[namespace][container]

    async def close(self) -> None:
        self.closed = True

    def calls_named(self, name: str) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]


def manifest_item(
    database: str, schema: str, name: str, disabled: Optional[bool] = None
) -> Dict[str, Any]:
    """A compiled-graph action as Dataform emits it."""
    item: Dict[str, Any] = {
        "target": {"database": database, "schema": schema, "name": name},
        "type": "table",
    }
    if disabled is not None:
        item["disabled"] = disabled
    return item


@pytest.fixture
def fake_client_factory():
    """Build FakeWarehouseClient instances."""
    return FakeWarehouseClient


@pytest.fixture
def compiled_graph() -> Dict[str, Any]:
    """A compiled graph with two projects, a disabled table and an assertion."""
    return {
        "projectConfig": {"defaultDatabase": "proj1", "defaultSchema": "ds1"},
        "tables": [
            manifest_item("proj1", "ds1", "tableA"),
            manifest_item("proj1", "ds1", "tableC", disabled=True),
            manifest_item("proj1", "ds2", "orders"),
            manifest_item("proj2", "reporting", "daily_sales", disabled=False),
        ],
        "assertions": [
            manifest_item("proj1", "dataform_assertions", "tableA_not_null"),
        ],
        "operations": [],
    }


@pytest.fixture
def write_manifest(tmp_path: Path):
    """Write a compiled graph to a temporary JSON file and return its path."""
    def _write(data: Any, name: str = "dataform_output.json") -> Path:
        path = tmp_path / name
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def manifest_file(write_manifest, compiled_graph) -> Path:
    return write_manifest(compiled_graph)
