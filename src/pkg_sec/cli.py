# Copyright (c) 2025 DriftCop Project
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""CLI interface for pkg-sec."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from pkg_sec import __version__
from pkg_sec.config import load_config
from pkg_sec.exceptions import PkgSecError
from pkg_sec.models import RebuildResult
from pkg_sec.npm import NpmCli
from pkg_sec.reporters import ConsoleReporter, generate_report, ReportFormat
from pkg_sec.trust import TrustedScriptRunner
from pkg_sec.verifier import PackageVerifier

app = typer.Typer(
    name="pkg-sec",
    help="Supply-chain verification and trusted script execution for npm projects",
    rich_markup_mode="markdown"
)
console = Console()

logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)]
)
logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"pkg-sec version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True
    )
) -> None:
    """pkg-sec - verify dependencies, then run install scripts for trusted packages only."""
    pass


def _set_verbose(verbose: bool) -> None:
    if verbose:
        logging.getLogger("pkg_sec").setLevel(logging.DEBUG)


@app.command()
def verify(
    path: Path = typer.Option(Path("."), "--path", "-p", help="Project directory"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write a report file"),
    format: ReportFormat = typer.Option(ReportFormat.JSON, "--format", "-f", help="Report file format"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
) -> None:
    """Verify lockfile integrity, audit results, signatures, .npmrc and the trust policy."""
    _set_verbose(verbose)
    reporter = ConsoleReporter(console)

    try:
        cfg = load_config(path)
    except ValueError as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        raise typer.Exit(1)

    reporter.banner("🔒 Package Integrity Verification")

    verifier = PackageVerifier(path, NpmCli(cfg.npm_bin, cwd=str(path)), cfg)
    result = verifier.verify(on_start=reporter.start_check, on_result=reporter.check_result)

    reporter.summary(result)

    if output:
        try:
            output.write_text(generate_report(result, format))
        except OSError as e:
            console.print(f"[red]Error writing report: {escape(str(e))}[/red]")
            raise typer.Exit(1)
        console.print(f"\n[green]Report saved to: {output}[/green]")

    raise typer.Exit(0 if result.passed else 1)


@app.command()
def run_trusted(
    path: Path = typer.Option(Path("."), "--path", "-p", help="Project directory"),
    timeout: Optional[int] = typer.Option(None, "--timeout", "-t", help="Per-package rebuild timeout in seconds"),
    dry_run: bool = typer.Option(False, "--dry-run", help="List packages that would be rebuilt"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
) -> None:
    """Run `npm rebuild` only for installed packages listed in trusted-packages.json."""
    _set_verbose(verbose)
    reporter = ConsoleReporter(console)

    try:
        cfg = load_config(path)
    except ValueError as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        raise typer.Exit(1)

    reporter.banner("🔐 Selective Script Execution for Trusted Packages", style="cyan")

    runner = TrustedScriptRunner(path, NpmCli(cfg.npm_bin, cwd=str(path)), cfg)

    try:
        plan = runner.plan()
    except PkgSecError as e:
        reporter.fail(str(e))
        raise typer.Exit(1)

    trusted = plan.policy.packages
    reporter.info(f"Trusted packages configured: {len(trusted)}")
    for entry in plan.policy.complete_entries:
        reporter.info(f"  • {entry.name} - {entry.reason}", style="green")
    for finding in plan.findings:
        reporter.finding(finding)

    if not plan.to_rebuild:
        console.print()
        reporter.ok("No trusted packages require rebuild.")
        raise typer.Exit(0)

    console.print()
    if dry_run:
        reporter.info(f"Would rebuild {len(plan.to_rebuild)} trusted package(s):", style="cyan")
        for package in plan.to_rebuild:
            reporter.info(f"  {package}")
        raise typer.Exit(0)

    reporter.info(f"Rebuilding {len(plan.to_rebuild)} trusted package(s)...", style="cyan")

    def on_start(package: str) -> None:
        reporter.info(f"  Rebuilding: {package}", style="yellow")

    def on_result(result: RebuildResult) -> None:
        if result.success:
            reporter.ok(f"  {result.package} rebuilt successfully")
        else:
            reporter.fail(f"  Failed to rebuild {result.package}: {result.error}")

    report = runner.run(plan, timeout=timeout, on_start=on_start, on_result=on_result)

    if not report.success:
        if report.skipped:
            reporter.warn(f"Skipped {len(report.skipped)} remaining package(s): {', '.join(report.skipped)}")
        raise typer.Exit(1)

    console.print()
    reporter.ok("All trusted package scripts executed successfully")
    raise typer.Exit(0)


if __name__ == "__main__":
    app()
