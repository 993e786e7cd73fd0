"""Summary of one import run: counts plus everything that was skipped."""

from pydantic import BaseModel, Field


class ImportReport(BaseModel):
    """Result of a registration import besides the workshops themselves.

    A successful import with partial data loss only shows up here and in the
    log; the parse itself does not fail for skipped rows or cells.
    """

    event_name: str = ""
    attendee_count: int = 0
    workshop_count: int = 0
    selection_count: int = 0
    skipped_periods: list[str] = Field(default_factory=list)   # sheet names
    warnings: list[str] = Field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        """True if nothing was skipped."""
        return not self.skipped_periods and not self.warnings

    def print_rich(self) -> None:
        """Print the report via Rich."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_clean:
            status = "[bold green]✓ IMPORTED[/bold green]"
        else:
            status = "[bold yellow]✓ IMPORTED WITH WARNINGS[/bold yellow]"

        lines = [
            status,
            f"Attendees: {self.attendee_count} | Workshops: {self.workshop_count} | "
            f"Selections: {self.selection_count}",
        ]
        if self.skipped_periods:
            lines.append("\n[yellow bold]Skipped periods (sheet missing):[/yellow bold]")
            for name in self.skipped_periods:
                lines.append(f"  [yellow]• {name}[/yellow]")
        if self.warnings:
            lines.append("\n[yellow bold]Warnings:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")

        title = f"Import: {self.event_name}" if self.event_name else "Import"
        console.print(Panel("\n".join(lines), title=title, border_style="cyan"))
