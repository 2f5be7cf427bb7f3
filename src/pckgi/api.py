"""
High-level programmatic API for pckgi.

This module provides simple, async-friendly functions for common operations.
Each call opens a Scanner, runs one operation and closes it again; for
repeated calls with a shared cache, use ``Scanner`` directly.

Example:
    import asyncio
    from pckgi import scan, search

    async def main():
        results = await search("http client", limit=5)
        for r in results:
            print(f"{r.name}: {r.score.final}")

        report = await scan("lodash")
        print(f"{report.name}: {report.health.status}")

    asyncio.run(main())
"""

import asyncio
from typing import Any

from pckgi.config import ScannerConfig
from pckgi.core.models import CompareResult, PackageReport, SearchResult
from pckgi.scanner import Scanner, ScanOptions, SearchOptions


async def search(
    query: str,
    *,
    limit: int = 10,
    include_unstable: bool = False,
    config: ScannerConfig | None = None,
) -> list[SearchResult]:
    """Search the npm registry.

    Args:
        query: Free-text search query.
        limit: Maximum number of results (the registry caps this at 250).
        include_unstable: Keep results whose latest version is a prerelease.
        config: Optional scanner configuration.

    Returns:
        List of SearchResult objects.

    Example:
        >>> import asyncio
        >>> from pckgi import search
        >>> results = asyncio.run(search("react", limit=3))
        >>> [r.name for r in results]
        ['react', 'react-dom', 'react-router']
    """
    async with Scanner(config) as scanner:
        return await scanner.search(
            query, SearchOptions(limit=limit, include_unstable=include_unstable)
        )


async def scan(
    package: str,
    *,
    include_downloads: bool = True,
    include_dependencies: bool = True,
    config: ScannerConfig | None = None,
) -> PackageReport:
    """Scan a single package.

    Args:
        package: Package name (e.g., "lodash", "@types/node").
        include_downloads: Fetch weekly and monthly download counts.
        include_dependencies: Include the runtime dependency list.
        config: Optional scanner configuration.

    Returns:
        PackageReport for the latest version.

    Example:
        >>> import asyncio
        >>> from pckgi import scan
        >>> report = asyncio.run(scan("express"))
        >>> print(report.health.status)
        excellent
    """
    async with Scanner(config) as scanner:
        return await scanner.scan(
            package,
            ScanOptions(
                include_downloads=include_downloads,
                include_dependencies=include_dependencies,
            ),
        )


async def compare(
    packages: list[str],
    *,
    config: ScannerConfig | None = None,
) -> list[CompareResult]:
    """Scan several packages concurrently.

    Example:
        >>> import asyncio
        >>> from pckgi import compare
        >>> results = asyncio.run(compare(["react", "vue"]))
        >>> [r.success for r in results]
        [True, True]
    """
    async with Scanner(config) as scanner:
        return await scanner.compare(packages)


async def trending(
    limit: int = 10,
    *,
    config: ScannerConfig | None = None,
) -> list[SearchResult]:
    """Return top-scoring packages across popular queries."""
    async with Scanner(config) as scanner:
        return await scanner.trending(limit)


def search_sync(query: str, **kwargs: Any) -> list[SearchResult]:
    """Synchronous wrapper for search().

    For use in non-async contexts. Runs a new event loop.
    """
    return asyncio.run(search(query, **kwargs))


def scan_sync(package: str, **kwargs: Any) -> PackageReport:
    """Synchronous wrapper for scan().

    Example:
        >>> from pckgi import scan_sync
        >>> report = scan_sync("lodash")
        >>> print(report.downloads.weekly_formatted)
    """
    return asyncio.run(scan(package, **kwargs))


def compare_sync(packages: list[str], **kwargs: Any) -> list[CompareResult]:
    """Synchronous wrapper for compare()."""
    return asyncio.run(compare(packages, **kwargs))


def trending_sync(limit: int = 10, **kwargs: Any) -> list[SearchResult]:
    """Synchronous wrapper for trending()."""
    return asyncio.run(trending(limit, **kwargs))
