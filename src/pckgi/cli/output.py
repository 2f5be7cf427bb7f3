"""
Rich terminal output helpers for CLI.

Provides functions for printing search results, package reports and
comparisons using the Rich library.
"""

from typing import Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pckgi.core.models import CompareResult, HealthStatus, PackageReport, SearchResult
from pckgi.core.scoring import format_number

# Console instance for all output
console = Console()

# Console for diagnostics, kept off stdout so exports stay clean
err_console = Console(stderr=True)

DESCRIPTION_WIDTH = 80


def get_status_style(status: HealthStatus) -> str:
    """Get Rich style string for a health status."""
    styles = {
        HealthStatus.EXCELLENT: "bold green",
        HealthStatus.GOOD: "green",
        HealthStatus.FAIR: "yellow",
        HealthStatus.POOR: "yellow",
        HealthStatus.CRITICAL: "red",
        HealthStatus.DEPRECATED: "bold red",
        HealthStatus.VULNERABLE: "bold red",
    }
    return styles.get(status, "white")


def _truncate(text: str, width: int = DESCRIPTION_WIDTH) -> str:
    return text if len(text) <= width else text[:width] + "..."


def print_search_results(results: Sequence[SearchResult], title: str = "Search Results") -> None:
    """Print a ranked table of search results.

    Args:
        results: SearchResult objects in display order.
        title: Table title.
    """
    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("#", style="dim", justify="right")
    table.add_column("Package", style="cyan", no_wrap=True)
    table.add_column("Version", style="dim")
    table.add_column("Score", justify="right", style="yellow")
    table.add_column("Author")
    table.add_column("Description")

    for rank, result in enumerate(results, start=1):
        description = Text(_truncate(result.description))
        if result.keywords:
            tags = " ".join(f"#{k}" for k in result.keywords[:3])
            description.append(f"\n{tags}", style="cyan")

        table.add_row(
            str(rank),
            escape(result.name),
            escape(f"v{result.version}"),
            f"{result.score.final}%",
            escape(result.author),
            description,
        )

    console.print()
    console.print(table)


def print_package_report(report: PackageReport) -> None:
    """Print a detailed report for a single package.

    Args:
        report: PackageReport to display.
    """
    health = report.health
    status_style = get_status_style(health.status)

    title = f"[bold]{escape(report.name)}[/] [dim]v{escape(report.version)}[/]"
    console.print()
    console.print(Panel(title, subtitle=f"Health: [{status_style}]{health.status.value}[/]"))
    console.print(report.description, markup=False)

    console.print("\n[bold cyan]Package Information[/]")
    console.print(f"  Author: {escape(report.author)}")
    console.print(f"  License: {escape(report.license)}")
    if report.last_update:
        console.print(
            f"  Last update: {report.last_update.strftime('%Y-%m-%d')} "
            f"({report.days_since_update} days ago)"
        )
    if report.created_at:
        console.print(f"  Created: {report.created_at.strftime('%Y-%m-%d')}")
    console.print(f"  Versions: {report.total_versions}")
    console.print(f"  Maintainers: {report.maintainers}")

    console.print("\n[bold cyan]Downloads[/]")
    console.print(f"  Weekly: {report.downloads.weekly_formatted}")
    console.print(f"  Monthly: {report.downloads.monthly_formatted}")

    console.print("\n[bold cyan]Health Scores[/]")
    console.print(f"  Overall: [{status_style}]{health.final * 100:.0f}[/] / 100")
    console.print(f"  Quality: {health.quality}")
    console.print(f"  Popularity: {health.popularity}")
    console.print(f"  Maintenance: {health.maintenance}")

    if report.deprecated:
        console.print(f"\n[bold red]Deprecated:[/] {escape(report.deprecated_message or '')}")

    counts = report.dependency_counts
    console.print(
        f"\n[bold cyan]Dependencies[/] "
        f"(prod {counts.prod}, dev {counts.dev}, peer {counts.peer})"
    )
    for dep in report.dependencies:
        console.print(f"  - {escape(dep.name)} [dim]{escape(dep.version)}[/]")

    if report.links:
        console.print("\n[bold cyan]Links[/]")
        for label, url in report.links.items():
            console.print(f"  {label.capitalize()}: {escape(url)}")

    if report.bundle_info.has_types:
        console.print("\n[green]+[/] Ships TypeScript types")

    console.print()


def print_comparison(results: Sequence[CompareResult]) -> None:
    """Print a side-by-side comparison table.

    Args:
        results: CompareResult objects, one per requested package.
    """
    table = Table(
        title="Package Comparison",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("Package", style="cyan", no_wrap=True)
    table.add_column("Version", style="dim")
    table.add_column("Health")
    table.add_column("Quality", justify="right")
    table.add_column("Popularity", justify="right")
    table.add_column("Maint.", justify="right")
    table.add_column("Weekly", justify="right")
    table.add_column("Updated", justify="right")

    for result in results:
        if not result.success or result.report is None:
            table.add_row(
                escape(result.name),
                "-",
                Text("error", style="bold red"),
                "-",
                "-",
                "-",
                "-",
                Text(result.error or "", style="red"),
            )
            continue

        report = result.report
        health = report.health
        table.add_row(
            escape(report.name),
            escape(report.version),
            Text(health.status.value, style=get_status_style(health.status)),
            str(health.quality),
            str(health.popularity),
            str(health.maintenance),
            format_number(report.downloads.weekly),
            f"{report.days_since_update}d ago",
        )

    console.print()
    console.print(table)

    succeeded = [r for r in results if r.success]
    console.print()
    console.print(f"[bold]Summary:[/] {len(results)} packages")
    console.print(f"  [green]Scanned:[/] {len(succeeded)}")
    console.print(f"  [red]Failed:[/] {len(results) - len(succeeded)}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[bold red]Error:[/] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    err_console.print(f"[bold green]Success:[/] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[bold yellow]Warning:[/] {escape(message)}")


def print_info(message: str) -> None:
    """Print an info message."""
    err_console.print(f"[cyan]Info:[/] {escape(message)}")
