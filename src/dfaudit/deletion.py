"""
Deletion workflow for unmanaged tables.

Tables are deleted strictly one at a time in the order of the unmanaged set.
After a dataset's tables have been handled the dataset is listed again and
deleted when nothing is left in it. The live listing is authoritative: tables
outside the audit (excluded, declared or skipped) keep their dataset alive.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import click
from rich.console import Console
from rich.markup import escape

from .exceptions import DeletionError, WarehouseAccessError
from .resources import UnmanagedSet
from .warehouse.base import WarehouseClient


logger = logging.getLogger(__name__)


class DeletionState(str, Enum):
    """Lifecycle of a single table in the deletion workflow."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    DELETING = "deleting"
    DELETED = "deleted"
    SKIPPED = "skipped"
    FAILED = "failed"


class ConfirmationPrompt(ABC):
    """Asks the operator whether a table may be deleted."""

    @abstractmethod
    def confirm(self, message: str) -> bool:
        pass


class ConsoleConfirmationPrompt(ConfirmationPrompt):
    """Interactive prompt; only an exact, case-insensitive ``yes`` approves."""

    def confirm(self, message: str) -> bool:
        try:
            answer = click.prompt(
                message, default="", show_default=False, prompt_suffix=""
            )
        except click.exceptions.Abort:
            # click folds Ctrl-C and a closed stdin into Abort.
            raise KeyboardInterrupt from None
        return answer.lower() == "yes"


class AutoApprovePrompt(ConfirmationPrompt):
    """Approves everything without asking."""

    def confirm(self, message: str) -> bool:
        return True


@dataclass
class LeafOutcome:
    """Final state of one table."""

    namespace: str
    container: str
    leaf: str
    state: DeletionState = DeletionState.PENDING
    error: Optional[str] = None

    @property
    def path(self) -> str:
        return f"{self.namespace}.{self.container}.{self.leaf}"


@dataclass
class ContainerOutcome:
    """Result of the empty-dataset check for one dataset."""

    namespace: str
    container: str
    remaining: Optional[int] = None
    deleted: bool = False
    error: Optional[str] = None

    @property
    def path(self) -> str:
        return f"{self.namespace}.{self.container}"


@dataclass
class DeletionReport:
    """Everything the deletion workflow did, in processing order."""

    leaves: List[LeafOutcome] = field(default_factory=list)
    containers: List[ContainerOutcome] = field(default_factory=list)
    aborted_at: Optional[str] = None

    def _with_state(self, state: DeletionState) -> List[LeafOutcome]:
        return [outcome for outcome in self.leaves if outcome.state == state]

    @property
    def deleted(self) -> List[LeafOutcome]:
        return self._with_state(DeletionState.DELETED)

    @property
    def skipped(self) -> List[LeafOutcome]:
        return self._with_state(DeletionState.SKIPPED)

    @property
    def failed(self) -> List[LeafOutcome]:
        return self._with_state(DeletionState.FAILED)

    @property
    def containers_deleted(self) -> List[ContainerOutcome]:
        return [c for c in self.containers if c.deleted]

    @property
    def container_failures(self) -> List[ContainerOutcome]:
        return [c for c in self.containers if c.error]

    @property
    def has_failures(self) -> bool:
        return bool(self.failed or self.container_failures)

    @property
    def aborted(self) -> bool:
        return self.aborted_at is not None

    def get(self, namespace: str, container: str, leaf: str) -> Optional[LeafOutcome]:
        for outcome in self.leaves:
            if (outcome.namespace, outcome.container, outcome.leaf) == (
                namespace,
                container,
                leaf,
            ):
                return outcome
        return None


class DeletionWorkflow:
    """Deletes unmanaged tables, then any dataset they leave empty."""

    def __init__(
        self,
        client: WarehouseClient,
        prompt: Optional[ConfirmationPrompt] = None,
        console: Optional[Console] = None,
    ):
        self.client = client
        self.prompt = prompt or ConsoleConfirmationPrompt()
        self.console = console or Console()
        self.report = DeletionReport()

    async def delete_all(
        self, unmanaged: UnmanagedSet, auto_approve: bool = False
    ) -> DeletionReport:
        """
        Delete every table in ``unmanaged``.

        A failed table or dataset deletion is recorded and processing moves
        on. On interrupt or cancellation the report records where the run
        stopped and the exception is re-raised; ``self.report`` stays
        available to the caller.
        """
        self.report = DeletionReport()
        current: Optional[str] = None

        try:
            for namespace in unmanaged.namespaces():
                for container in unmanaged.containers(namespace):
                    for leaf in unmanaged.leaves(namespace, container):
                        current = f"{namespace}.{container}.{leaf}"
                        await self._process_leaf(namespace, container, leaf, auto_approve)

                    current = f"{namespace}.{container}"
                    await self._cleanup_container(namespace, container)
        except (KeyboardInterrupt, asyncio.CancelledError):
            self.report.aborted_at = current
            logger.warning(f"Deletion aborted at {current}")
            raise

        logger.info(
            f"Deletion finished: {len(self.report.deleted)} deleted, "
            f"{len(self.report.skipped)} skipped, {len(self.report.failed)} failed, "
            f"{len(self.report.containers_deleted)} datasets removed"
        )
        return self.report

    async def _process_leaf(
        self, namespace: str, container: str, leaf: str, auto_approve: bool
    ) -> None:
        outcome = LeafOutcome(namespace, container, leaf)
        self.report.leaves.append(outcome)

        approved = auto_approve or self.prompt.confirm(
            f"Are you sure you want to delete table {outcome.path}? (yes/no): "
        )
        outcome.state = DeletionState.APPROVED if approved else DeletionState.DENIED

        if not approved:
            outcome.state = DeletionState.SKIPPED
            self.console.print(f"Skipping deletion of table {escape(outcome.path)}\n")
            return

        outcome.state = DeletionState.DELETING
        self.console.print(f"Deleting table {escape(outcome.path)}...")
        try:
            await self.client.delete_leaf(namespace, container, leaf)
        except DeletionError as e:
            outcome.state = DeletionState.FAILED
            outcome.error = str(e)
            logger.error(f"Could not delete table {outcome.path}: {e}")
            self.console.print(f"[red]Failed to delete table {escape(outcome.path)}: {escape(str(e))}[/red]\n")
            return

        outcome.state = DeletionState.DELETED
        self.console.print(f"Table {escape(outcome.path)} deleted.\n")

    async def _cleanup_container(self, namespace: str, container: str) -> None:
        outcome = ContainerOutcome(namespace, container)
        self.report.containers.append(outcome)

        try:
            remaining = await self.client.list_leaves(namespace, container)
        except WarehouseAccessError as e:
            outcome.error = str(e)
            logger.error(f"Could not re-list dataset {outcome.path}: {e}")
            return

        outcome.remaining = len(remaining)
        if remaining:
            logger.debug(f"Dataset {outcome.path} still holds {len(remaining)} tables")
            return

        self.console.print(f"Dataset {escape(outcome.path)} is empty. Deleting dataset...")
        try:
            await self.client.delete_container(namespace, container)
        except DeletionError as e:
            outcome.error = str(e)
            logger.error(f"Could not delete dataset {outcome.path}: {e}")
            self.console.print(f"[red]Failed to delete dataset {escape(outcome.path)}: {escape(str(e))}[/red]\n")
            return

        outcome.deleted = True
        self.console.print(f"Dataset {escape(outcome.path)} deleted.\n")
