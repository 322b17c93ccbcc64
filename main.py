"""
Command line entry point for the Care Home Rota Scheduling System.

Loads a CSV data directory, fills a week from each home's weekly template,
scans the week for conflicts and exports an Excel workbook per home.
"""
import argparse
import sys
from datetime import date, timedelta
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from agents.base_agent import BaseAgent
from agents.coordinator import RotaCoordinatorAgent
from agents.data_loader import DataLoaderAgent
from communication.message_bus import MessageBus
from config import config, health_checker
from models.schedule import TEMPLATE_LIBRARY
from models.errors import RotaError


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Care Home Rota Scheduling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --week 2025-01-06                 # Fill, scan and export every home
  python main.py --week 2025-01-06 --home H1       # One home only
  python main.py --home H1 --apply-template three-shift --service care
  python main.py --check                           # Health checks only
        """
    )
    parser.add_argument('--data-dir', default=config.data_dir,
                        help='Directory holding the CSV data files')
    parser.add_argument('--output-dir', default=config.output_dir,
                        help='Directory for exported workbooks')
    parser.add_argument('--week', type=date.fromisoformat,
                        help='First day of the week to process (YYYY-MM-DD, default: next Monday)')
    parser.add_argument('--home', action='append', dest='homes',
                        help='Home id to process (repeatable, default: all active homes)')
    parser.add_argument('--apply-template', choices=sorted(TEMPLATE_LIBRARY),
                        help='Apply a library template to the selected homes before filling')
    parser.add_argument('--service', help='Service id used with --apply-template')
    parser.add_argument('--no-export', action='store_true',
                        help='Skip the Excel export')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Suppress agent console output')
    parser.add_argument('--check', '-c', action='store_true',
                        help='Run health checks and exit')

    args = parser.parse_args(argv)
    if args.apply_template and not args.service:
        parser.error("--apply-template requires --service")
    return args


def next_monday(today: Optional[date] = None) -> date:
    today = today or date.today()
    return today + timedelta(days=(7 - today.weekday()) % 7 or 7)


def run_checks(console: Console, data_dir: str, output_dir: str) -> bool:
    status = health_checker.run_all_checks(data_dir, output_dir)
    table = Table(title=f"Health: {status['status']}")
    table.add_column("Check", style="cyan")
    table.add_column("OK")
    table.add_column("Message")
    for check in status["checks"]:
        table.add_row(check["name"], "✅" if check["healthy"] else "❌", check["message"])
    console.print(table)
    return status["status"] == "healthy"


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = parse_args(argv)
    console = Console()

    if args.check:
        return 0 if run_checks(console, args.data_dir, args.output_dir) else 1

    log_file = BaseAgent.setup_file_logging(config.log_dir)
    message_bus = MessageBus(verbose=config.verbose and not args.quiet)

    try:
        store = DataLoaderAgent(message_bus, args.data_dir).execute()
    except FileNotFoundError as e:
        console.print(f"[red]❌ {e}[/red]")
        return 1

    coordinator = RotaCoordinatorAgent(message_bus, store, config)
    week_start = args.week or next_monday()
    homes = args.homes or sorted(h.id for h in store.homes.values() if h.is_active)

    summary = Table(title=f"Rota week of {week_start}")
    summary.add_column("Home", style="cyan")
    summary.add_column("Shifts created", justify="right")
    summary.add_column("Already present", justify="right")
    summary.add_column("Conflicts", justify="right")
    summary.add_column("Workbook")

    exit_code = 0
    try:
        for home_id in homes:
            try:
                if args.apply_template:
                    coordinator.apply_template_library(home_id, args.apply_template, args.service)
                result = coordinator.execute(
                    home_id=home_id,
                    week_start=week_start,
                    output_path=None if args.no_export else args.output_dir,
                )
            except RotaError as e:
                console.print(f"[red]❌ {home_id}: {e.message}[/red]")
                exit_code = 1
                continue

            report = result["materialization"]
            conflicts = result["conflicts"]
            summary.add_row(
                home_id,
                f"{report.succeeded}/{report.total}",
                str(report.skipped),
                str(len(conflicts.findings)),
                result["export_file"] or "-",
            )
            if report.failed or not conflicts.is_clean:
                exit_code = exit_code or 2
    finally:
        coordinator.shutdown()

    console.print(summary)
    if message_bus.verbose:
        message_bus.print_summary()
    console.print(f"[dim]📝 Log file: {log_file}[/dim]")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
