"""
Extraction of declared BigQuery tables from Dataform compile output.

``dataform compile --json`` emits the compiled graph with ``tables`` and
``assertions`` arrays. Every enabled item's ``target`` names a table the
Dataform project owns.
"""

import json
import logging
from pathlib import Path
from typing import List, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ManifestReadError
from .resources import ResourceManifest


logger = logging.getLogger(__name__)


class ManifestTarget(BaseModel):
    """Fully qualified BigQuery location of a compiled action."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    database: str = Field(..., description="GCP project id")
    dataset: str = Field(..., alias="schema", description="BigQuery dataset")
    name: str = Field(..., description="Table or view name")


class ManifestItem(BaseModel):
    """A table or assertion from the compiled graph."""

    model_config = ConfigDict(extra="ignore")

    target: ManifestTarget
    disabled: bool = Field(False, description="Declared but not materialized")


class CompiledGraph(BaseModel):
    """The subset of Dataform's compiled graph dfaudit relies on."""

    model_config = ConfigDict(extra="ignore")

    tables: List[ManifestItem]
    assertions: List[ManifestItem]

    @property
    def items(self) -> List[ManifestItem]:
        return [*self.tables, *self.assertions]


class ManifestExtractor:
    """Builds a ResourceManifest from a compiled graph file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> CompiledGraph:
        """
        Read and validate the compiled graph.

        Raises:
            ManifestReadError: If the file is missing, not JSON, or lacks
                the ``tables``/``assertions`` arrays
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ManifestReadError(str(self.path), "file not found", e) from e
        except OSError as e:
            raise ManifestReadError(str(self.path), "file is not readable", e) from e
        except json.JSONDecodeError as e:
            raise ManifestReadError(str(self.path), "invalid JSON", e) from e

        try:
            return CompiledGraph.model_validate(data)
        except ValidationError as e:
            raise ManifestReadError(
                str(self.path), "unexpected compiled graph structure", e
            ) from e

    def extract(self) -> ResourceManifest:
        """Return the frozen manifest of enabled tables and assertions."""
        graph = self.load()
        manifest = ResourceManifest()
        disabled = 0

        for item in graph.items:
            if item.disabled:
                disabled += 1
                continue
            target = item.target
            manifest.add(target.database, target.dataset, target.name)

        logger.info(
            f"Loaded {manifest.leaf_count} declared tables across "
            f"{len(manifest.namespaces())} projects from {self.path} "
            f"({disabled} disabled items ignored)"
        )
        return manifest.freeze()


def extract_manifest(path: Union[str, Path]) -> ResourceManifest:
    """Shortcut for ``ManifestExtractor(path).extract()``."""
    return ManifestExtractor(path).extract()
