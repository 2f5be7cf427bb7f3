"""
Core module for pckgi.

Contains data models, scoring utilities, validation and exceptions.
"""

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
from pckgi.core.models import (
    BundleInfo,
    CompareResult,
    Dependency,
    DependencyCounts,
    DownloadStats,
    HealthScore,
    HealthStatus,
    PackageReport,
    SearchResult,
    SearchScore,
    VersionInfo,
)
from pckgi.core.scoring import (
    HealthCalculator,
    calculate_health,
    calculate_maintenance_score,
    calculate_popularity_score,
    format_number,
    parse_version,
)

__all__ = [
    # Models
    "BundleInfo",
    "CompareResult",
    "Dependency",
    "DependencyCounts",
    "DownloadStats",
    "HealthScore",
    "HealthStatus",
    "PackageReport",
    "SearchResult",
    "SearchScore",
    "VersionInfo",
    # Scoring
    "HealthCalculator",
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
