"""
Command-line interface for dfaudit.
"""

import asyncio
import sys
from functools import wraps
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .audit import AuditRunner
from .config import AuditConfig
from .deletion import (
    AutoApprovePrompt,
    ConsoleConfirmationPrompt,
    DeletionReport,
    DeletionWorkflow,
)
from .exceptions import DfauditError
from .logging_setup import setup_logging
from .warehouse.factory import WarehouseClientFactory


console = Console()

BANNER_WIDTH = 29
EXIT_INTERRUPTED = 130


def handle_errors(func):
    """Decorator to handle errors gracefully in CLI commands."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DfauditError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
            sys.exit(1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted by user[/yellow]")
            sys.exit(EXIT_INTERRUPTED)
        except Exception as e:
            console.print(f"[red]Unexpected error:[/red] {escape(str(e))}", highlight=False)
            if "--debug" in sys.argv:
                console.print_exception()
            sys.exit(1)
    return wrapper


def _banner(title: str) -> None:
    stars = "*" * BANNER_WIDTH
    console.print()
    console.print(f"{stars} {title} {stars}", highlight=False)


@click.group()
@click.version_option(__version__)
@click.option(
    "--debug", is_flag=True, help="Enable debug mode"
)
@click.pass_context
def main(ctx, debug):
    """dfaudit: find BigQuery tables that Dataform does not manage."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@main.command()
@click.option(
    "--dataform-output-file",
    "-d",
    type=click.Path(),
    required=True,
    help="Path to the Dataform compile output JSON file",
)
@click.option(
    "--table-names-to-ignore",
    "-n",
    default="",
    envvar="BQ_TABLE_NAMES_TO_IGNORE",
    help="Comma-separated list of BigQuery table names to ignore",
)
@click.option(
    "--table-regex-to-ignore",
    "-r",
    default="",
    envvar="BQ_TABLE_REGEX_TO_IGNORE",
    help="Regex pattern for BigQuery table names to ignore",
)
@click.option(
    "--delete-unmanaged",
    "-u",
    is_flag=True,
    help="Delete unmanaged BigQuery tables",
)
@click.option(
    "--auto-approve",
    "-a",
    is_flag=True,
    help="Automatically approve deletion of unmanaged tables",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Optional configuration file path",
)
@click.option(
    "--output-file",
    "-o",
    type=click.Path(),
    help="Also write the unmanaged tables JSON to this file",
)
@click.pass_context
@handle_errors
def audit(
    ctx,
    dataform_output_file: str,
    table_names_to_ignore: str,
    table_regex_to_ignore: str,
    delete_unmanaged: bool,
    auto_approve: bool,
    config: Optional[str],
    output_file: Optional[str],
):
    """List, and optionally delete, tables Dataform does not manage."""
    if not Path(dataform_output_file).exists():
        console.print(f"[red]File not found:[/red] {dataform_output_file}", highlight=False)
        sys.exit(1)

    audit_config = AuditConfig.from_yaml(config) if config else AuditConfig()
    audit_config = audit_config.with_overrides(
        table_names=table_names_to_ignore.split(",") if table_names_to_ignore else [],
        table_pattern=table_regex_to_ignore or None,
        delete=delete_unmanaged,
        auto_approve=auto_approve,
    )
    setup_logging(audit_config.logging, debug=ctx.obj.get("debug", False))

    exclusion = audit_config.exclusions.to_rule()
    # Fail on a bad pattern before creating any warehouse client.
    exclusion.compile()

    client = WarehouseClientFactory.create_client(audit_config.warehouse)
    prompt = (
        AutoApprovePrompt()
        if audit_config.deletion.auto_approve
        else ConsoleConfirmationPrompt()
    )
    workflow = DeletionWorkflow(client, prompt=prompt, console=console)

    async def run_audit() -> int:
        async with client:
            console.print("Starting to list unmanaged Dataform tables...")
            result = await AuditRunner(client, exclusion).run(dataform_output_file)
            unmanaged = result.unmanaged

            if output_file:
                Path(output_file).write_text(unmanaged.to_json(), encoding="utf-8")

            if not unmanaged:
                _banner("NO UNMANAGED TABLES")
                console.print("No unmanaged tables found.")
                return 0

            _banner("UNMANAGED TABLES")
            console.print("Unmanaged Tables:")
            click.echo(unmanaged.to_json())

            if not audit_config.deletion.enabled:
                return 0

            _banner("DELETION PROCESS")
            console.print()
            console.print("Starting to delete unmanaged tables...")
            report = await workflow.delete_all(
                unmanaged, auto_approve=audit_config.deletion.auto_approve
            )
            _display_deletion_report(report)
            return 1 if report.has_failures else 0

    try:
        exit_code = asyncio.run(run_audit())
    except KeyboardInterrupt:
        report = workflow.report
        if report.aborted:
            console.print(f"\n[yellow]Deletion aborted at {escape(report.aborted_at)}[/yellow]")
            _display_deletion_report(report)
        raise

    sys.exit(exit_code)


@main.command(name="compile")
@click.option(
    "--project-dir",
    "-p",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    help="Dataform project directory",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="dataform_output.json",
    help="Where to write the compiled graph",
)
@click.option(
    "--executable",
    default="dataform",
    help="Dataform CLI executable",
)
@handle_errors
def compile_command(project_dir: str, output: str, executable: str):
    """Run `dataform compile --json` and save the result."""
    from .compiler import compile_project

    path = asyncio.run(compile_project(project_dir, output, executable))
    console.print(f"[green]✓[/green] Compiled graph written to {path}")


def _display_deletion_report(report: DeletionReport) -> None:
    """Display a summary of a deletion run."""
    table = Table(title="Deletion Summary")
    table.add_column("Resource", style="cyan")
    table.add_column("Result", style="magenta")
    table.add_column("Error", style="red")

    for outcome in report.leaves:
        table.add_row(escape(outcome.path), outcome.state.value, escape(outcome.error or ""))
    for container in report.containers:
        if container.deleted:
            table.add_row(escape(container.path), "dataset deleted", "")
        elif container.error:
            table.add_row(escape(container.path), "dataset failed", escape(container.error))

    console.print(table)
    console.print(
        f"Deleted: [green]{len(report.deleted)}[/green]  "
        f"Skipped: [yellow]{len(report.skipped)}[/yellow]  "
        f"Failed: [red]{len(report.failed)}[/red]  "
        f"Datasets removed: [green]{len(report.containers_deleted)}[/green]"
    )


if __name__ == "__main__":
    main()
