"""Human-readable rendering of an ``AnalysisReport``."""

from io import StringIO

from rich.rule import Rule
from rich.table import Table
from rich.markup import escape
from rich.console import Console

from qtimigrator.analysis.report import AnalysisReport


TRUNCATE_AT = 50


def truncate(value: str) -> str:
    if len(value) > TRUNCATE_AT:
        return value[: TRUNCATE_AT - 3] + "..."
    return value


class ReportRenderer:
    """Renders a report as plain text; detail grows with verbosity (0-3)."""

    def __init__(self, verbosity: int = 1, width: int = 100):
        self.verbosity = verbosity
        self.width = width

    def render(self, report: AnalysisReport) -> str:
        buffer = StringIO()
        console = Console(file=buffer, width=self.width, color_system=None, highlight=False, emoji=False)

        self._header(console, report)
        self._summary(console, report)
        if report.errors:
            self._errors(console, report)
        if report.warnings and self.verbosity >= 1:
            self._warnings(console, report)
        if report.details and self.verbosity >= 2:
            self._details(console, report)
        self._footer(console, report)
        return buffer.getvalue()

    @staticmethod
    def _prefix(item_id) -> str:
        return escape(f"[Item: {item_id}] ") if item_id else ""

    def _header(self, console: Console, report: AnalysisReport) -> None:
        console.print(Rule("QTI Migration Analysis Report", characters="="))
        console.print(f"Migration Path: QTI {escape(report.source_version)} → QTI {escape(report.target_version)}")
        console.print(Rule(characters="="))

    def _summary(self, console: Console, report: AnalysisReport) -> None:
        table = Table(title="SUMMARY", show_header=False, title_justify="left")
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("Status", "BLOCKED" if report.has_errors() else "READY")
        table.add_row("Total Items", str(report.total_items))
        table.add_row("Compatible Items", str(report.compatible_items))
        table.add_row("Items Requiring Attention", str(report.incompatible_items))
        table.add_row("Errors", str(len(report.errors)))
        table.add_row("Warnings", str(len(report.warnings)))
        console.print(table)

    def _errors(self, console: Console, report: AnalysisReport) -> None:
        console.print("\n[bold]ERRORS (Migration Blockers)[/bold]")
        for index, error in enumerate(report.errors, start=1):
            console.print(f"{index}. {self._prefix(error.item_id)}{escape(error.message)}")
            if error.element_path:
                console.print(f"   Path: {escape(error.element_path)}")
            if error.fatal:
                console.print("   This error must be resolved before migration can proceed.")

    def _warnings(self, console: Console, report: AnalysisReport) -> None:
        console.print("\n[bold]WARNINGS[/bold]")
        for index, warning in enumerate(report.warnings, start=1):
            console.print(f"{index}. {self._prefix(warning.item_id)}{escape(warning.message)}")
            if warning.element_path:
                console.print(f"   Path: {escape(warning.element_path)}")
            if warning.suggestion:
                console.print(f"   → {escape(warning.suggestion)}")

    def _details(self, console: Console, report: AnalysisReport) -> None:
        console.print("\n[bold]MIGRATION DETAILS[/bold]")
        for action, details in report.by_action().items():
            console.print(f"\n{action.value.title()} Actions ({len(details)}):")
            for index, detail in enumerate(details, start=1):
                console.print(f"{index}. {self._prefix(detail.item_id)}{escape(detail.description)}")
                if self.verbosity >= 3:
                    if detail.element_path:
                        console.print(f"   Path: {escape(detail.element_path)}")
                    if detail.old_value:
                        console.print(f"   Old: {escape(truncate(detail.old_value))}")
                    if detail.new_value:
                        console.print(f"   New: {escape(truncate(detail.new_value))}")

    def _footer(self, console: Console, report: AnalysisReport) -> None:
        console.print()
        console.print(Rule(characters="="))
        if report.has_errors():
            console.print("MIGRATION BLOCKED: Please resolve the errors listed above before proceeding.")
        elif report.warnings:
            console.print("Migration can proceed. Please review warnings for potential issues.")
        else:
            console.print("Migration can proceed without issues.")
        if self.verbosity < 3 and (report.warnings or report.details):
            console.print("\nTip: Use -v 2 or -v 3 for more detailed information.")
        console.print(Rule(characters="="))
