"""WinterAdventurer: workshop roster from registration exports.

Usage:
  python main.py parse <export.xlsx>             Parse workshops and show a summary
  python main.py parse <export.xlsx> --json-out  Also save the workshops as JSON
  python main.py dump <export.xlsx>              Structural dump for schema work
  python main.py schema show                     Show the active schema
  python main.py schema export <out.yaml>        Export the schema as YAML
  python main.py timeslots <slots.yaml>          Check a timeslot list
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()


def _load_schema_or_abort(schema_path: Optional[Path]):
    """Loads the given or bundled schema, aborts with a message on errors."""
    from config.manager import SchemaManager, load_default_schema
    from data.errors import SchemaValidationError

    try:
        if schema_path is None:
            return load_default_schema()
        return SchemaManager().load(schema_path)
    except SchemaValidationError as e:
        console.print(f"[red bold]Schema could not be loaded:[/red bold]\n{e}")
        sys.exit(1)


# ─── PARSE ────────────────────────────────────────────────────────────────────

@click.command("parse")
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.option("--schema", "schema_path", type=click.Path(exists=True, path_type=Path),
              default=None, help="Custom event schema (JSON or YAML).")
@click.option("--json-out", type=click.Path(path_type=Path), default=None,
              help="Save the parsed workshops as JSON.")
def cmd_parse(file: Path, schema_path: Optional[Path], json_out: Optional[Path]):
    """Parses a registration export into workshops."""
    from data.errors import ExcelParsingError
    from data.excel_import import import_from_excel

    schema = _load_schema_or_abort(schema_path)
    console.print(f"[bold]Importing:[/bold] {file}")
    try:
        workshops, report = import_from_excel(file, schema)
    except ExcelParsingError as e:
        console.print(f"[red bold]Import failed:[/red bold]\n{e}")
        sys.exit(1)

    table = Table(title="Workshops", box=box.ROUNDED)
    table.add_column("Period")
    table.add_column("Workshop")
    table.add_column("Leader")
    table.add_column("Days")
    table.add_column("1st choice", justify="right")
    table.add_column("Backup", justify="right")
    for w in workshops:
        table.add_row(
            w.period.display_name, w.name, w.leader, w.duration.description,
            str(len(w.first_choices)), str(len(w.backups)),
        )
    console.print(table)
    report.print_rich()

    if json_out is not None:
        json_out.parent.mkdir(parents=True, exist_ok=True)
        payload = [json.loads(w.model_dump_json()) for w in workshops]
        with open(json_out, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        console.print(f"[green]✓[/green] Workshops saved: {json_out}")


# ─── DUMP ─────────────────────────────────────────────────────────────────────

@click.command("dump")
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.option("--output", "-o", type=click.Path(path_type=Path),
              default=Path("output/structure.json"), help="Output JSON path.")
def cmd_dump(file: Path, output: Path):
    """Writes a structural dump (sheets, headers, sample row) of a workbook."""
    from data.errors import ExcelParsingError
    from data.structure_dump import write_structure_dump
    from data.workbook import WorkbookTable

    try:
        workbook = WorkbookTable.open(file)
    except ExcelParsingError as e:
        console.print(f"[red bold]Could not open file:[/red bold]\n{e}")
        sys.exit(1)

    structure = write_structure_dump(workbook, output)
    table = Table(title="Worksheets", box=box.ROUNDED)
    table.add_column("Sheet")
    table.add_column("Range")
    table.add_column("Headers")
    for sheet in structure.worksheets:
        headers = ", ".join(h.value for h in sheet.headers if h.value)
        table.add_row(sheet.name, sheet.dimensions or "[dim]empty[/dim]", headers)
    console.print(table)
    console.print(f"[green]✓[/green] Structure written: {output}")


# ─── SCHEMA ───────────────────────────────────────────────────────────────────

@click.group("schema")
def cmd_schema():
    """Show or export the event schema."""


@cmd_schema.command("show")
@click.option("--schema", "schema_path", type=click.Path(exists=True, path_type=Path),
              default=None, help="Custom event schema (JSON or YAML).")
def schema_show(schema_path: Optional[Path]):
    """Shows the sheet and column layout of the schema."""
    schema = _load_schema_or_abort(schema_path)

    console.print(Panel(
        f"[bold]{schema.event_name}[/bold]  |  {schema.total_days} days  |  "
        f"{len(schema.period_sheets)} periods\n"
        f"Workshop cells: {schema.workshop_format.pattern}"
        + (f"\n[dim]{schema.workshop_format.description}[/dim]"
           if schema.workshop_format.description else ""),
        title="Event schema",
        border_style="cyan",
    ))

    roster = schema.class_selection_sheet
    table = Table(title=f"Roster: {roster.sheet_name}", box=box.ROUNDED)
    table.add_column("Field")
    table.add_column("Column")
    for role, ref in roster.columns.items():
        table.add_row(role, str(ref))
    console.print(table)

    for period in schema.period_sheets:
        t = Table(title=f"Period: {period.sheet_name}", box=box.ROUNDED)
        t.add_column("Workshop column")
        t.add_column("Days")
        for wc in period.workshop_columns:
            t.add_row(wc.column_name, f"{wc.start_day}-{wc.end_day}")
        console.print(t)


@cmd_schema.command("export")
@click.argument("output", type=click.Path(path_type=Path))
@click.option("--schema", "schema_path", type=click.Path(exists=True, path_type=Path),
              default=None, help="Custom event schema (JSON or YAML).")
def schema_export(output: Path, schema_path: Optional[Path]):
    """Exports the schema as commented YAML."""
    from config.manager import SchemaManager

    schema = _load_schema_or_abort(schema_path)
    SchemaManager().save(schema, output)
    console.print(f"[green]✓[/green] Schema exported: {output}")


# ─── TIMESLOTS ────────────────────────────────────────────────────────────────

@click.command("timeslots")
@click.argument("file", type=click.Path(exists=True, path_type=Path))
def cmd_timeslots(file: Path):
    """Checks a YAML/JSON timeslot list for gaps in configuration and overlaps."""
    from analysis.timeslot_validator import load_timeslots, validate_timeslots
    from data.errors import SchemaValidationError

    try:
        timeslots = load_timeslots(file)
    except SchemaValidationError as e:
        console.print(f"[red bold]Timeslots could not be loaded:[/red bold]\n{e}")
        sys.exit(1)

    table = Table(title="Timeslots", box=box.ROUNDED)
    table.add_column("Label")
    table.add_column("Time")
    table.add_column("Period")
    for slot in timeslots:
        table.add_row(slot.label or slot.id, slot.time_range or "[dim]-[/dim]",
                      "yes" if slot.is_period else "")
    console.print(table)

    result = validate_timeslots(timeslots)
    result.print_rich()
    if not result.is_valid:
        sys.exit(1)


# ─── MAIN CLI ─────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging.")
def cli(verbose: bool):
    """WinterAdventurer: workshop roster from registration exports.

    Start with: python main.py parse <export.xlsx>
    """
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


cli.add_command(cmd_parse)
cli.add_command(cmd_dump)
cli.add_command(cmd_schema)
cli.add_command(cmd_timeslots)


if __name__ == "__main__":
    cli()
