"""Rich-based output utilities for the splitpr CLI."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from splitpr.patch.partition import Group

# Shared console instance; diagnostics go to stderr so stdout stays clean
console = Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    """Print an error message in red.

    Args:
        message: The error message to display.
    """
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def print_info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[dim]{escape(message)}[/dim]")


def print_groups(groups: list[Group], title: str = "Groups") -> None:
    """Print a summary table of partition groups."""
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Label")
    table.add_column("Files")
    table.add_column("+", justify="right", style="green")
    table.add_column("-", justify="right", style="red")

    for i, group in enumerate(groups, start=1):
        files = group.patch.files
        table.add_row(
            str(i),
            escape(group.label),
            "\n".join(escape(fd.path) + (" (binary)" if fd.binary else "") for fd in files),
            str(sum(fd.added for fd in files)),
            str(sum(fd.removed for fd in files)),
        )
    console.print(table)
