"""
pckgi - npm package scanner

Searches the npm registry, scans packages for age, downloads and
deprecation, and scores their health. Results can be exported as JSON,
CSV or Markdown.

Quick Start:
    >>> import asyncio
    >>> from pckgi import scan
    >>> report = asyncio.run(scan("lodash"))
    >>> print(f"{report.name}: {report.health.status}")
    lodash: good

    # Or use synchronous API:
    >>> from pckgi import scan_sync
    >>> report = scan_sync("left-pad")
    >>> if report.deprecated:
    ...     print(report.deprecated_message)
"""

__version__ = "0.1.0"

# High-level API (recommended for most users)
from pckgi.api import (
    compare,
    compare_sync,
    scan,
    scan_sync,
    search,
    search_sync,
    trending,
    trending_sync,
)

# Core components (for advanced usage)
from pckgi.cache.memory import ResultCache
from pckgi.collectors.http import HttpClient
from pckgi.config import ScannerConfig

# Exceptions
from pckgi.core.exceptions import (
    CompareError,
    FetchError,
    FetchTimeoutError,
    HttpStatusError,
    PackageNotFoundError,
    PckgiError,
    ScanError,
    SearchError,
    ValidationError,
)

# Data models
from pckgi.core.models import (
    CompareResult,
    HealthScore,
    HealthStatus,
    PackageReport,
    SearchResult,
    VersionInfo,
)
from pckgi.core.scoring import (
    calculate_health,
    calculate_maintenance_score,
    calculate_popularity_score,
    format_number,
    parse_version,
)
from pckgi.scanner import Scanner, ScanOptions, SearchOptions, create_scanner

__all__ = [
    # Version
    "__version__",
    # High-level API
    "search",
    "search_sync",
    "scan",
    "scan_sync",
    "compare",
    "compare_sync",
    "trending",
    "trending_sync",
    # Scanner
    "Scanner",
    "ScannerConfig",
    "ScanOptions",
    "SearchOptions",
    "create_scanner",
    "HttpClient",
    "ResultCache",
    # Models
    "CompareResult",
    "HealthScore",
    "HealthStatus",
    "PackageReport",
    "SearchResult",
    "VersionInfo",
    # Scoring
    "calculate_health",
    "calculate_maintenance_score",
    "calculate_popularity_score",
    "format_number",
    "parse_version",
    # Exceptions
    "PckgiError",
    "FetchError",
    "FetchTimeoutError",
    "HttpStatusError",
    "PackageNotFoundError",
    "SearchError",
    "ScanError",
    "CompareError",
    "ValidationError",
]
