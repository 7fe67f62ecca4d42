"""Rich console rendering of verification and rebuild output."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from pkg_sec.models import Finding, FindingSeverity, ScanResult, VerificationResult


SECTION_TITLES = {
    "npmrc": "Verifying .npmrc Security Configuration",
    "integrity": "Verifying package-lock.json Integrity Hashes",
    "audit": "Running Security Audit",
    "signatures": "Checking Package Signature Verification",
    "trusted": "Validating trusted-packages.json",
}

SEVERITY_STYLES = {
    FindingSeverity.CRITICAL: ("✗", "red"),
    FindingSeverity.HIGH: ("✗", "red"),
    FindingSeverity.WARNING: ("⚠", "yellow"),
    FindingSeverity.INFO: ("✓", "green"),
}


class ConsoleReporter:
    """Sectioned, coloured report written to a rich Console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def banner(self, title: str, style: str = "blue") -> None:
        self.console.print()
        self.console.print(f"[bold {style}]{title}[/bold {style}]")
        self.console.print(f"[{style}]{'=' * len(title)}[/{style}]")

    def section(self, title: str) -> None:
        self.console.print()
        self.console.print(Rule(f"[cyan]{title}[/cyan]", style="cyan"))

    def start_check(self, check_name: str) -> None:
        self.section(SECTION_TITLES.get(check_name, check_name))

    def finding(self, finding: Finding) -> None:
        icon, color = SEVERITY_STYLES.get(finding.severity, ("•", "white"))
        self.console.print(f"[{color}]{icon} {escape(finding.title)}[/{color}]", highlight=False)
        if finding.description:
            for line in finding.description.splitlines():
                self.console.print(f"    {escape(line)}", highlight=False)
        if finding.recommendation and finding.severity != FindingSeverity.INFO:
            self.console.print(f"    [green]Fix:[/green] {escape(finding.recommendation)}", highlight=False)

    def check_result(self, result: ScanResult) -> None:
        for finding in result.findings:
            self.finding(finding)

    def summary(self, result: VerificationResult) -> None:
        """Print the per-check verdict table and the overall verdict."""
        self.section("Verification Summary")

        table = Table(show_header=True, header_style="bold")
        table.add_column("Check", style="cyan")
        table.add_column("Status")
        table.add_column("Warnings", justify="right")

        for name, check in result.results.items():
            if not check.passed:
                status = "[red]FAILED[/red]"
            elif check.has_warnings:
                status = "[yellow]PASSED (warnings)[/yellow]"
            else:
                status = "[green]PASSED[/green]"
            table.add_row(name, status, str(check.warning_count))

        self.console.print(table)

        duration = result.metadata.get("duration_seconds")
        if duration is not None:
            self.console.print(f"Verification Duration: {duration:.2f}s")

        self.console.print()
        if result.passed:
            self.console.print("[green]✓ All security verifications passed![/green]")
        else:
            failed = ", ".join(result.failed_checks)
            self.console.print(f"[red]✗ Some verifications failed ({failed}). Review output above.[/red]")

    def ok(self, message: str) -> None:
        self.console.print(f"[green]✓ {escape(message)}[/green]", highlight=False)

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow]⚠ {escape(message)}[/yellow]", highlight=False)

    def fail(self, message: str) -> None:
        self.console.print(f"[red]✗ {escape(message)}[/red]", highlight=False)

    def info(self, message: str, style: Optional[str] = None) -> None:
        if style:
            self.console.print(f"[{style}]{escape(message)}[/{style}]", highlight=False)
        else:
            self.console.print(escape(message), highlight=False)
