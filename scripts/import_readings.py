#!/usr/bin/env python3
"""
CLI script to import activity readings from CSV files.

Each file needs activity, year, month and value columns.

Usage:
    # Import one file
    python scripts/import_readings.py carbon_reporting/test/test_data/activity_readings.csv

    # Clear existing readings before importing
    python scripts/import_readings.py readings_2022.csv readings_2023.csv --clear

    # Import against another environment
    python scripts/import_readings.py readings.csv --config production.toml
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path so we can import carbon_reporting modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from carbon_reporting.core.config import get_config
from carbon_reporting.database.base import get_db_url, get_engine_kw
from carbon_reporting.database.session_manager.db_session import Database
from carbon_reporting.pydantic_models.activity_reading import ReadingImportResponse
from carbon_reporting.services.importers.reading_importer import ReadingImporter
from carbon_reporting.utils.constants import ConfigFile
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

console = Console()

MAX_ISSUES_SHOWN = 5


def print_header(text: str, style: str = "bold cyan"):
    """Print a formatted header using Rich Panel."""
    console.print(
        Panel(
            Text(text, justify="center", style=style),
            border_style="cyan",
            padding=(1, 2),
        )
    )


def print_config(args):
    config_table = Table(show_header=False, box=None, padding=(0, 2))
    config_table.add_column("Setting", style="bold yellow")
    config_table.add_column("Value", style="green")

    config_table.add_row("📁 Files", ", ".join(args.files))
    config_table.add_row("⚙️  Config", args.config)
    config_table.add_row("🗑️  Clear Existing", "Yes" if args.clear else "No")

    console.print(config_table)
    console.print()


def print_results(results: dict[str, ReadingImportResponse]):
    """Print per-file import counts and the first rejected rows."""
    print_header("IMPORT STATISTICS", "bold green")

    stats_table = Table(show_header=True, box=None, padding=(0, 2))
    stats_table.add_column("File", style="bold cyan", width=40)
    stats_table.add_column("Imported", justify="right", style="bold green")
    stats_table.add_column("Rejected", justify="right", style="bold red")

    for file_name, result in results.items():
        stats_table.add_row(file_name, str(result.imported), str(result.rejected))

    console.print(stats_table)
    console.print()

    for file_name, result in results.items():
        if not result.issues:
            continue
        console.print(
            Panel(
                f"[yellow]⚠️  {result.rejected} rows rejected in {file_name}[/yellow]",
                border_style="yellow",
            )
        )
        for issue in result.issues[:MAX_ISSUES_SHOWN]:
            console.print(
                f"  row {issue.row_index + 1}: [dim]{issue.field}: {issue.message}[/dim]"
            )
        if len(result.issues) > MAX_ISSUES_SHOWN:
            console.print(f"  [dim]... and {len(result.issues) - MAX_ISSUES_SHOWN} more[/dim]")
        console.print()


async def main():
    """Main entry point for the import script."""
    parser = argparse.ArgumentParser(description="Import activity readings from CSV files")
    parser.add_argument("files", nargs="+", help="CSV files to import")
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete all stored readings before importing",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=ConfigFile.DEVELOPMENT,
        help=f"Configuration file name (default: {ConfigFile.DEVELOPMENT})",
    )

    args = parser.parse_args()

    print_header("READING IMPORT", "bold cyan")
    print_config(args)

    try:
        config = get_config(args.config)
        Database.init(get_db_url(config), engine_kw=get_engine_kw(config))
        logger.info("Database initialized")

        results = {}
        with console.status("[bold cyan]Importing readings...", spinner="dots") as status:
            async with ReadingImporter() as importer:
                for index, file_path in enumerate(args.files):
                    status.update(f"[bold yellow]Importing {file_path}...")
                    results[Path(file_path).name] = await importer.import_file(
                        file_path, clear_existing=args.clear and index == 0
                    )

        print_results(results)

        console.print(
            Panel(
                Text("✅ IMPORT COMPLETED SUCCESSFULLY", justify="center"),
                border_style="bold green",
                style="bold green",
            )
        )

    except Exception as e:
        logger.error(f"Import failed: {e}", exc_info=True)

        console.print()
        console.print(
            Panel(
                f"[bold red]❌ IMPORT FAILED[/bold red]\n\n[red]{e!s}[/red]",
                border_style="bold red",
            )
        )
        console.print()
        sys.exit(1)

    finally:
        await Database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
