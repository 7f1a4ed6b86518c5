"""
Hierarchical resource index for dfaudit.

Tables are grouped as ``project -> dataset -> table``. The same tree shape is
used for the declared manifest, the warehouse inventory and the unmanaged
result so they can be compared and serialized uniformly.
"""

import json
from typing import Any, Dict, Iterator, List, Mapping, Tuple

from .exceptions import FrozenTreeError


ResourcePath = Tuple[str, str, str]


class ResourceTree:
    """
    Three-level ordered index of leaf resource names.

    Levels keep insertion order. Leaves are stored as dict keys so that
    re-adding a known leaf is a no-op while the first-seen order is kept.
    """

    def __init__(self) -> None:
        self._tree: Dict[str, Dict[str, Dict[str, None]]] = {}
        self._frozen = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> "ResourceTree":
        """Build a tree from ``{namespace: {container: [leaf, ...]}}``."""
        tree = cls()
        for namespace, containers in data.items():
            for container, leaves in containers.items():
                for leaf in leaves:
                    tree.add(namespace, container, leaf)
        return tree

    def add(self, namespace: str, container: str, leaf: str) -> None:
        """Insert a leaf, creating its namespace and container on first use."""
        if self._frozen:
            raise FrozenTreeError(
                f"Cannot add {namespace}.{container}.{leaf} to a frozen {type(self).__name__}"
            )
        containers = self._tree.setdefault(namespace, {})
        containers.setdefault(container, {})[leaf] = None

    def freeze(self) -> "ResourceTree":
        """Reject further additions and return self."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def contains(self, namespace: str, container: str, leaf: str) -> bool:
        """Check whether a leaf exists at the exact namespace/container path."""
        return leaf in self._tree.get(namespace, {}).get(container, {})

    def has_namespace(self, namespace: str) -> bool:
        return namespace in self._tree

    def namespaces(self) -> List[str]:
        return list(self._tree)

    def containers(self, namespace: str) -> List[str]:
        return list(self._tree.get(namespace, {}))

    def leaves(self, namespace: str, container: str) -> List[str]:
        return list(self._tree.get(namespace, {}).get(container, {}))

    def iter_leaves(self) -> Iterator[ResourcePath]:
        """Yield every ``(namespace, container, leaf)`` in insertion order."""
        for namespace, containers in self._tree.items():
            for container, leaves in containers.items():
                for leaf in leaves:
                    yield namespace, container, leaf

    @property
    def leaf_count(self) -> int:
        return sum(
            len(leaves)
            for containers in self._tree.values()
            for leaves in containers.values()
        )

    def to_dict(self) -> Dict[str, Dict[str, List[str]]]:
        """Plain nested representation with leaves as lists."""
        return {
            namespace: {
                container: list(leaves) for container, leaves in containers.items()
            }
            for namespace, containers in self._tree.items()
        }

    def to_json(self, indent: int = 4) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __bool__(self) -> bool:
        return bool(self._tree)

    def __len__(self) -> int:
        return self.leaf_count

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResourceTree):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()!r})"


class ResourceManifest(ResourceTree):
    """Tables declared (and not disabled) by the Dataform project."""


class InventorySnapshot(ResourceTree):
    """Tables found in the warehouse for the audited projects."""


class UnmanagedSet(ResourceTree):
    """Tables present in the warehouse but neither declared nor excluded."""
