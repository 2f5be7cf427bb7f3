"""
Main CLI entry point for pckgi.

Provides commands for searching the npm registry, scanning and comparing
packages, and listing trending packages.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Sequence

import click
from rich.logging import RichHandler

from pckgi import __version__
from pckgi.cli.output import (
    err_console,
    print_comparison,
    print_error,
    print_info,
    print_package_report,
    print_search_results,
    print_success,
    print_warning,
)
from pckgi.config import ScannerConfig
from pckgi.core.exceptions import PckgiError
from pckgi.reports.formatters import get_formatter
from pckgi.scanner import Scanner, ScanOptions, SearchOptions

# Defaults for interactive use; the library defaults are 5s / 2 retries
CLI_TIMEOUT = 10.0
CLI_RETRIES = 3

FORMAT_CHOICES = ["table", "json", "csv", "markdown"]

format_option = click.option(
    "--format", "-f", "output_format",
    type=click.Choice(FORMAT_CHOICES),
    default="table",
    help="Output format.",
)
output_option = click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, writable=True),
    help="Write the export to a file (json, csv or markdown formats only).",
)


def setup_logging(debug: bool) -> None:
    """Route pckgi log records through Rich on stderr."""
    handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=debug)
    logger = logging.getLogger("pckgi")
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False


def run_scanner(ctx: click.Context, operation: Callable[[Scanner], Awaitable[Any]]) -> Any:
    """Run one scanner operation in a fresh event loop and close the scanner."""

    async def runner() -> Any:
        async with Scanner(ctx.obj["config"]) as scanner:
            return await operation(scanner)

    return asyncio.run(runner())


def check_output(output_format: str, output: Optional[str]) -> None:
    """Reject --output for the table view, which only prints to the terminal."""
    if output and output_format == "table":
        raise click.BadParameter(
            "needs --format json, csv or markdown",
            param_hint="'--output'",
        )


def emit(ctx: click.Context, formatted: str, output: Optional[str]) -> None:
    """Write an export to a file or stdout."""
    if output:
        try:
            Path(output).write_text(formatted, encoding="utf-8")
        except OSError as e:
            fail(ctx, e)
            return
        print_success(f"Report written to {output}")
    else:
        click.echo(formatted, nl=not formatted.endswith("\n"))


def fail(ctx: click.Context, error: Exception) -> None:
    """Report a command failure and exit with status 1."""
    print_error(str(error))
    if ctx.obj.get("debug"):
        err_console.print_exception()
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="pckgi")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=CLI_TIMEOUT,
    show_default=True,
    envvar="PCKGI_TIMEOUT",
    help="Seconds allowed per HTTP attempt.",
)
@click.option(
    "--retries",
    type=click.IntRange(min=0),
    default=CLI_RETRIES,
    show_default=True,
    envvar="PCKGI_RETRIES",
    help="Retries after a failed request.",
)
@click.option(
    "--registry-url",
    envvar="PCKGI_REGISTRY_URL",
    help="npm registry base URL.",
)
@click.option(
    "--api-url",
    envvar="PCKGI_API_URL",
    help="npm downloads API base URL.",
)
@click.option("--debug", is_flag=True, envvar="PCKGI_DEBUG", help="Show debug logging and tracebacks.")
@click.pass_context
def cli(
    ctx: click.Context,
    timeout: float,
    retries: int,
    registry_url: Optional[str],
    api_url: Optional[str],
    debug: bool,
) -> None:
    """pckgi - npm package scanner.

    Search the npm registry, inspect package health, and compare
    packages side by side.
    """
    setup_logging(debug)
    ctx.ensure_object(dict)
    ctx.obj["config"] = ScannerConfig().with_overrides(
        timeout=timeout,
        retries=retries,
        registry_url=registry_url,
        api_url=api_url,
    )
    ctx.obj["debug"] = debug


@cli.command()
@click.argument("query")
@click.option("--limit", "-l", type=click.IntRange(min=1), default=10, show_default=True,
              help="Maximum number of results.")
@click.option("--include-unstable", is_flag=True, help="Include pre-release versions.")
@click.option("--quality", type=click.FloatRange(0, 1), default=0.5, show_default=True,
              help="Ranking weight for quality.")
@click.option("--popularity", type=click.FloatRange(0, 1), default=0.5, show_default=True,
              help="Ranking weight for popularity.")
@click.option("--maintenance", type=click.FloatRange(0, 1), default=0.5, show_default=True,
              help="Ranking weight for maintenance.")
@format_option
@output_option
@click.pass_context
def search(
    ctx: click.Context,
    query: str,
    limit: int,
    include_unstable: bool,
    quality: float,
    popularity: float,
    maintenance: float,
    output_format: str,
    output: Optional[str],
) -> None:
    """Search the registry for packages matching QUERY.

    \b
    Examples:
        pckgi search react --limit 5
        pckgi search "http client" -f csv -o results.csv
    """
    check_output(output_format, output)
    options = SearchOptions(
        limit=limit,
        quality=quality,
        popularity=popularity,
        maintenance=maintenance,
        include_unstable=include_unstable,
    )

    try:
        results = run_scanner(ctx, lambda scanner: scanner.search(query, options))
    except PckgiError as e:
        fail(ctx, e)
        return

    if output_format != "table":
        emit(ctx, get_formatter(output_format).format_search(results), output)
        return

    if not results:
        print_warning(f'No packages found for "{query}"')
        return
    print_search_results(results, title=f"Found {len(results)} packages for '{query}'")


@cli.command(name="scan")
@click.argument("package")
@click.option("--no-deps", is_flag=True, help="Omit the dependency list.")
@click.option("--no-downloads", is_flag=True, help="Skip download count requests.")
@format_option
@output_option
@click.pass_context
def scan_command(
    ctx: click.Context,
    package: str,
    no_deps: bool,
    no_downloads: bool,
    output_format: str,
    output: Optional[str],
) -> None:
    """Show a detailed health report for PACKAGE.

    \b
    Examples:
        pckgi scan lodash
        pckgi scan @types/node -f json
    """
    check_output(output_format, output)
    options = ScanOptions(
        include_downloads=not no_downloads,
        include_dependencies=not no_deps,
    )

    try:
        report = run_scanner(ctx, lambda scanner: scanner.scan(package, options))
    except PckgiError as e:
        fail(ctx, e)
        return

    if output_format != "table":
        emit(ctx, get_formatter(output_format).format_reports([report]), output)
        return

    print_package_report(report)


cli.add_command(scan_command, name="info")


@cli.command()
@click.argument("packages")
@format_option
@output_option
@click.pass_context
def compare(
    ctx: click.Context,
    packages: str,
    output_format: str,
    output: Optional[str],
) -> None:
    """Compare comma-separated PACKAGES side by side.

    \b
    Examples:
        pckgi compare react,vue,angular
        pckgi compare express,koa,fastify -f markdown
    """
    check_output(output_format, output)
    names = parse_package_list(packages)
    if len(names) < 2:
        raise click.BadParameter(
            "need at least 2 packages (use a comma-separated list)",
            param_hint="PACKAGES",
        )

    try:
        results = run_scanner(ctx, lambda scanner: scanner.compare(names))
    except PckgiError as e:
        fail(ctx, e)
        return

    if output_format != "table":
        emit(ctx, get_formatter(output_format).format_comparison(results), output)
        return

    print_comparison(results)


@cli.command()
@click.option("--limit", "-l", type=click.IntRange(min=1), default=10, show_default=True,
              help="Maximum number of packages.")
@format_option
@output_option
@click.pass_context
def trending(
    ctx: click.Context,
    limit: int,
    output_format: str,
    output: Optional[str],
) -> None:
    """Show top-scoring packages across popular topics."""
    check_output(output_format, output)
    if output_format == "table":
        print_info("Fetching trending packages...")

    try:
        results = run_scanner(ctx, lambda scanner: scanner.trending(limit))
    except PckgiError as e:
        fail(ctx, e)
        return

    if output_format != "table":
        emit(ctx, get_formatter(output_format).format_search(results), output)
        return

    if not results:
        print_warning("No trending packages found.")
        return
    print_search_results(results, title="Trending packages")


def parse_package_list(value: str) -> Sequence[str]:
    """Split a comma-separated package list, dropping blanks."""
    return [name.strip() for name in value.split(",") if name.strip()]


if __name__ == "__main__":
    cli()
