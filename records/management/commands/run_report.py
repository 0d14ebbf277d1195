"""Print any catalogue report from the command line."""
from __future__ import annotations

import json

from django.core.management.base import BaseCommand, CommandError

from records.reports import REPORTS, UnknownReport, run_report


def _parse_filter(text: str) -> tuple[str, str]:
    name, sep, value = text.partition("=")
    if not sep or not name.strip():
        raise CommandError(f"Filters look like name=value, got {text!r}")
    return name.strip(), value.strip()


class Command(BaseCommand):
    help = "Run a report by slug or name and print its rows"

    def add_arguments(self, parser):
        parser.add_argument("report", nargs="?", help="Report slug or display name; omit with --list")
        parser.add_argument(
            "-f",
            "--filter",
            action="append",
            default=[],
            dest="filters",
            help="Filter as name=value, e.g. -f gender=Female -f semesterId=Fall2024",
        )
        parser.add_argument("--decimals", type=int, default=2, help="Decimal places for numeric cells")
        parser.add_argument("--json", action="store_true", help="Emit the API payload as JSON")
        parser.add_argument("--list", action="store_true", help="List the available reports")

    def handle(self, *args, **options):
        if options["list"] or not options["report"]:
            for report in REPORTS:
                filters = ", ".join(report.filter_names) or "-"
                self.stdout.write(f"{report.slug:36} {report.name} [filters: {filters}]")
            return

        filters = dict(_parse_filter(text) for text in options["filters"])
        try:
            result = run_report(options["report"], filters)
        except UnknownReport as exc:
            raise CommandError(f"Unknown report {options['report']!r}") from exc

        decimals = options["decimals"]
        if options["json"]:
            self.stdout.write(json.dumps(result.as_payload(decimals), indent=2))
            return

        self.stdout.write(self.style.SUCCESS(result.report.name))
        self.print_table(result.headers, result.rounded(decimals))
        self.stdout.write(f"{len(result)} row(s)")

    def print_table(self, headers, rows):
        cells = [[("N/A" if value is None else str(value)) for value in row] for row in rows]
        widths = [len(header) for header in headers]
        for row in cells:
            widths = [max(width, len(cell)) for width, cell in zip(widths, row)]
        self.stdout.write(" | ".join(header.ljust(width) for header, width in zip(headers, widths)))
        self.stdout.write("-+-".join("-" * width for width in widths))
        for row in cells:
            self.stdout.write(" | ".join(cell.ljust(width) for cell, width in zip(row, widths)))
