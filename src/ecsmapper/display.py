"""Terminal rendering of batch results and mapping rows."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ecsmapper.processing.payload import render_scalar

if TYPE_CHECKING:
    from ecsmapper.reconciliation import MappingsTable
    from ecsmapper.typing.models import ResultRow

console = Console()

NOT_IMPLEMENTED_ADVISORY = (
    "The backend doesn't expose /mappings yet. Add a route that selects from field_mapping "
    "and returns { items, total } to enable this view."
)


def results_table(rows: list[ResultRow]) -> Table:
    """Build the batch results table.

    Args:
        rows (list[ResultRow]): Display rows.

    Returns:
        Table: Rich table, one line per result.
    """
    table = Table(title="Results")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Mapped Field", style="green")
    table.add_column("Type")
    table.add_column("Confidence", justify="right", style="magenta")
    table.add_column("ECS Ver")
    table.add_column("Rationale", ratio=1)
    table.add_column("DB")
    table.add_column("Sourcetype", style="dim")

    for row in rows:
        table.add_row(
            row.field,
            row.mapped_field_name,
            row.mapping_type,
            row.confidence,
            row.ecs_version,
            row.rationale,
            row.db_status,
            row.sourcetype,
        )
    return table


def mappings_table(table_state: MappingsTable) -> Table:
    """Build the mappings table for the filtered rows of the loaded page.

    Args:
        table_state (MappingsTable): Table state.

    Returns:
        Table: Rich table with a caption holding the pagination summary.
    """
    table = Table(title="Mappings List", caption=table_state.status_line())
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Sourcetype")
    table.add_column("Source Field", style="green")
    table.add_column("Mapped Field", style="green")
    table.add_column("Mapped Field (_)")
    table.add_column("Type")
    table.add_column("Confidence", justify="right", style="magenta")
    table.add_column("Human Verified")
    table.add_column("Created", style="dim")

    rows = table_state.filtered()
    for row in rows:
        table.add_row(
            str(row.id),
            row.sourcetype,
            row.source_field,
            row.mapped_field_name,
            table_state.underscore_name(row),
            row.mapping_type.to_str(),
            "-" if row.confidence is None else render_scalar(row.confidence),
            "yes" if row.human_verified else "no",
            row.created_at,
        )
    if not rows and not table_state.loading:
        table.add_row("", "Waiting for backend /mappings..." if table_state.not_implemented else "No records.")
    return table


def print_results(rows: list[ResultRow]) -> None:
    """Print batch results."""
    console.print(results_table(rows))


def print_mappings(table_state: MappingsTable) -> None:
    """Print the mappings table, preceded by the advisory when /mappings is missing."""
    if table_state.not_implemented:
        console.print(Panel(NOT_IMPLEMENTED_ADVISORY, border_style="yellow"))
    console.print(mappings_table(table_state))


def print_error(message: str) -> None:
    """Print a user-facing error line."""
    console.print(message, style="red", markup=False)
