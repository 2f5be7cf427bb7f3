"""
Core data models for pckgi.

This module defines the records produced by the scanner: search results,
package reports, health scores and comparison outcomes. All records are
immutable and expose ``to_dict()`` for JSON/CSV/Markdown export.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class HealthStatus(Enum):
    """Health labels assigned by the scoring utilities."""

    EXCELLENT = "excellent"  # score >= 80
    GOOD = "good"  # score >= 60
    FAIR = "fair"  # score >= 40
    POOR = "poor"  # score >= 20
    CRITICAL = "critical"  # score < 20
    DEPRECATED = "deprecated"  # Deprecated in the registry
    VULNERABLE = "vulnerable"  # Known vulnerabilities

    def __str__(self) -> str:
        return self.value

    @property
    def is_concerning(self) -> bool:
        """Return True if this status needs attention."""
        return self in (
            HealthStatus.POOR,
            HealthStatus.CRITICAL,
            HealthStatus.DEPRECATED,
            HealthStatus.VULNERABLE,
        )


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 registry timestamp into an aware datetime."""
    if not isinstance(value, str) or not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _iso_date(value: datetime | None) -> str | None:
    return value.date().isoformat() if value else None


@dataclass(frozen=True)
class VersionInfo:
    """A parsed semantic version."""

    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    def __str__(self) -> str:
        result = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            result += f"-{self.prerelease}"
        if self.build:
            result += f"+{self.build}"
        return result

    @property
    def is_stable(self) -> bool:
        """Return True if there is no prerelease tag."""
        return self.prerelease is None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "major": self.major,
            "minor": self.minor,
            "patch": self.patch,
            "prerelease": self.prerelease,
            "build": self.build,
            "is_stable": self.is_stable,
        }


@dataclass(frozen=True)
class SearchScore:
    """Registry search score, each component scaled to 0-100."""

    final: int = 0
    quality: int = 0
    popularity: int = 0
    maintenance: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "final": self.final,
            "quality": self.quality,
            "popularity": self.popularity,
            "maintenance": self.maintenance,
        }


@dataclass(frozen=True)
class SearchResult:
    """A single package returned by a registry search."""

    name: str
    description: str
    version: str
    version_info: VersionInfo | None
    author: str
    keywords: tuple[str, ...] = ()
    license: str = "Unknown"
    score: SearchScore = field(default_factory=SearchScore)
    links: dict[str, str] = field(default_factory=dict)
    published_at: datetime | None = None

    def __str__(self) -> str:
        return f"{self.name}@{self.version} ({self.score.final})"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "version_info": self.version_info.to_dict() if self.version_info else None,
            "author": self.author,
            "keywords": list(self.keywords),
            "license": self.license,
            "score": self.score.to_dict(),
            "links": dict(self.links),
            "published_at": self.published_at.isoformat() if self.published_at else None,
        }


@dataclass(frozen=True)
class DownloadStats:
    """Download counts for the last week and month."""

    weekly: int = 0
    monthly: int = 0

    @property
    def weekly_formatted(self) -> str:
        from pckgi.core.scoring import format_number

        return format_number(self.weekly)

    @property
    def monthly_formatted(self) -> str:
        from pckgi.core.scoring import format_number

        return format_number(self.monthly)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "weekly": self.weekly,
            "monthly": self.monthly,
            "weekly_formatted": self.weekly_formatted,
            "monthly_formatted": self.monthly_formatted,
        }


@dataclass(frozen=True)
class HealthScore:
    """Health assessment of a package.

    ``quality``, ``popularity`` and ``maintenance`` are 0-100; ``final``
    is their mean scaled to 0-1.
    """

    status: HealthStatus
    quality: int
    popularity: int
    maintenance: int
    final: float

    def __str__(self) -> str:
        return f"{self.status.value} ({self.final:.2f})"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status.value,
            "quality": self.quality,
            "popularity": self.popularity,
            "maintenance": self.maintenance,
            "final": self.final,
        }


@dataclass(frozen=True)
class Dependency:
    """A runtime dependency declared by the latest manifest."""

    name: str
    version: str
    version_info: VersionInfo | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "version": self.version,
            "version_info": self.version_info.to_dict() if self.version_info else None,
        }


@dataclass(frozen=True)
class DependencyCounts:
    """Number of declared dependencies by kind."""

    prod: int = 0
    dev: int = 0
    peer: int = 0
    total: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"prod": self.prod, "dev": self.dev, "peer": self.peer, "total": self.total}


@dataclass(frozen=True)
class BundleInfo:
    """Entry points and packaging hints from the latest manifest."""

    has_types: bool = False
    main: str | None = None
    module: str | None = None
    exports: Any = None
    files: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "has_types": self.has_types,
            "main": self.main,
            "module": self.module,
            "exports": self.exports,
            "files": self.files,
        }


@dataclass(frozen=True)
class PackageReport:
    """Complete scan report for a single package."""

    name: str
    version: str
    version_info: VersionInfo | None
    description: str
    author: str
    license: str
    created_at: datetime | None
    last_update: datetime | None
    days_since_update: int
    package_age: int
    downloads: DownloadStats
    health: HealthScore
    deprecated: bool = False
    deprecated_message: str | None = None
    total_versions: int = 0
    dependencies: tuple[Dependency, ...] = ()
    dependency_counts: DependencyCounts = field(default_factory=DependencyCounts)
    maintainers: int = 0
    keywords: tuple[str, ...] = ()
    homepage: str | None = None
    repository: str | None = None
    bugs: str | None = None
    links: dict[str, str] = field(default_factory=dict)
    bundle_info: BundleInfo = field(default_factory=BundleInfo)

    def __str__(self) -> str:
        return f"{self.name}@{self.version}: {self.health}"

    @property
    def needs_attention(self) -> bool:
        """Return True if this package needs attention."""
        return self.deprecated or self.health.status.is_concerning

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "version": self.version,
            "version_info": self.version_info.to_dict() if self.version_info else None,
            "description": self.description,
            "author": self.author,
            "license": self.license,
            "created_at": _iso_date(self.created_at),
            "last_update": _iso_date(self.last_update),
            "days_since_update": self.days_since_update,
            "package_age": self.package_age,
            "downloads": self.downloads.to_dict(),
            "health": self.health.to_dict(),
            "deprecated": self.deprecated,
            "deprecated_message": self.deprecated_message,
            "total_versions": self.total_versions,
            "dependencies": [dep.to_dict() for dep in self.dependencies],
            "dependency_counts": self.dependency_counts.to_dict(),
            "maintainers": self.maintainers,
            "keywords": list(self.keywords),
            "homepage": self.homepage,
            "repository": self.repository,
            "bugs": self.bugs,
            "links": dict(self.links),
            "bundle_info": self.bundle_info.to_dict(),
        }


@dataclass(frozen=True)
class CompareResult:
    """Outcome of scanning one package during a comparison."""

    name: str
    success: bool
    report: PackageReport | None = None
    error: str | None = None

    def __str__(self) -> str:
        if self.success and self.report:
            return str(self.report)
        return f"{self.name}: {self.error}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "success": self.success,
            "data": self.report.to_dict() if self.report else None,
            "error": self.error,
        }
