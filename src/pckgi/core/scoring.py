"""
Scoring utilities for package health.

Pure, deterministic functions that turn registry metrics (days since the
last release, weekly downloads, deprecation) into 0-100 scores, plus the
version and number helpers used when building reports.
"""

import re
from typing import Any, NamedTuple

from pckgi.core.models import HealthScore, HealthStatus, VersionInfo

_SEMVER_PATTERN = re.compile(
    r"(\d+)\.(\d+)\.(\d+)"
    r"(?:-([a-zA-Z0-9-]+(?:\.[a-zA-Z0-9-]+)*))?"
    r"(?:\+([a-zA-Z0-9-]+(?:\.[a-zA-Z0-9-]+)*))?",
    re.ASCII,
)

# (days exceeded, penalty), largest threshold first
AGE_PENALTIES = ((1095, 60), (730, 40), (365, 20))

# (downloads below, penalty), smallest threshold first
DOWNLOAD_PENALTIES = ((10, 30), (100, 15), (1000, 5))

STATUS_THRESHOLDS = (
    (80, HealthStatus.EXCELLENT),
    (60, HealthStatus.GOOD),
    (40, HealthStatus.FAIR),
    (20, HealthStatus.POOR),
)

# (weekly downloads at least, score)
POPULARITY_BREAKPOINTS = (
    (1_000_000, 100),
    (100_000, 90),
    (10_000, 80),
    (1_000, 70),
    (100, 60),
    (10, 50),
)
POPULARITY_FLOOR = 30

# (days exceeded, score), largest threshold first
MAINTENANCE_STEPS = ((730, 30), (365, 60), (180, 80), (90, 90))
FEW_VERSIONS_THRESHOLD = 3
FEW_VERSIONS_PENALTY = 10


class HealthResult(NamedTuple):
    """Status label and 0-100 score from ``calculate_health``."""

    status: HealthStatus
    score: int


def _status_for(score: int) -> HealthStatus:
    for threshold, status in STATUS_THRESHOLDS:
        if score >= threshold:
            return status
    return HealthStatus.CRITICAL


def calculate_health(
    days_since_update: int,
    downloads: int,
    is_deprecated: bool,
    has_vulnerabilities: bool = False,
) -> HealthResult:
    """Calculate a package's health from its age and download count.

    Deprecation and known vulnerabilities short-circuit the calculation.
    Otherwise the score starts at 100 and loses at most one age penalty
    and one download penalty.

    Args:
        days_since_update: Days since the latest version was published.
        downloads: Weekly download count.
        is_deprecated: Whether the latest version is deprecated.
        has_vulnerabilities: Whether known vulnerabilities affect the package.

    Returns:
        HealthResult with the status label and score.
    """
    if is_deprecated:
        return HealthResult(HealthStatus.DEPRECATED, 0)
    if has_vulnerabilities:
        return HealthResult(HealthStatus.VULNERABLE, 20)

    score = 100

    for days, penalty in AGE_PENALTIES:
        if days_since_update > days:
            score -= penalty
            break

    for limit, penalty in DOWNLOAD_PENALTIES:
        if downloads < limit:
            score -= penalty
            break

    return HealthResult(_status_for(score), score)


def calculate_popularity_score(downloads: int) -> int:
    """Map weekly downloads onto a stepped 30-100 popularity score."""
    for minimum, score in POPULARITY_BREAKPOINTS:
        if downloads >= minimum:
            return score
    return POPULARITY_FLOOR


def calculate_maintenance_score(days_since_update: int, total_versions: int) -> int:
    """Calculate a maintenance score from release recency and history.

    Args:
        days_since_update: Days since the latest version was published.
        total_versions: Number of published versions.

    Returns:
        Score between 0 and 100.
    """
    score = 100
    for days, stepped in MAINTENANCE_STEPS:
        if days_since_update > days:
            score = stepped
            break

    if total_versions < FEW_VERSIONS_THRESHOLD:
        score -= FEW_VERSIONS_PENALTY

    return max(0, score)


def parse_version(version: Any) -> VersionInfo | None:
    """Parse a ``MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]`` string.

    Returns None for anything that is not a strict semantic version,
    including ranges such as ``^1.2.3``.
    """
    if not isinstance(version, str):
        return None

    match = _SEMVER_PATTERN.fullmatch(version)
    if not match:
        return None

    return VersionInfo(
        major=int(match.group(1)),
        minor=int(match.group(2)),
        patch=int(match.group(3)),
        prerelease=match.group(4),
        build=match.group(5),
    )


def format_number(num: float) -> str:
    """Abbreviate a count: 1500 -> '1.5K', 2500000 -> '2.5M'."""
    if num >= 1e9:
        return f"{num / 1e9:.1f}B"
    if num >= 1e6:
        return f"{num / 1e6:.1f}M"
    if num >= 1e3:
        return f"{num / 1e3:.1f}K"
    return str(int(num))


class HealthCalculator:
    """Combine the scoring utilities into a HealthScore.

    ``quality`` is the ``calculate_health`` score; ``popularity`` and
    ``maintenance`` are computed independently; ``final`` is the mean of
    the three scaled to 0-1.
    """

    def calculate(
        self,
        days_since_update: int,
        downloads: int,
        is_deprecated: bool,
        total_versions: int,
        has_vulnerabilities: bool = False,
    ) -> HealthScore:
        """Calculate the health score for a package.

        Args:
            days_since_update: Days since the latest version was published.
            downloads: Weekly download count.
            is_deprecated: Whether the latest version is deprecated.
            total_versions: Number of published versions.
            has_vulnerabilities: Whether known vulnerabilities affect the package.

        Returns:
            HealthScore with status, component scores and final score.
        """
        health = calculate_health(
            days_since_update, downloads, is_deprecated, has_vulnerabilities
        )
        popularity = calculate_popularity_score(downloads)
        maintenance = calculate_maintenance_score(days_since_update, total_versions)

        final = round((health.score + popularity + maintenance) / 300, 2)

        return HealthScore(
            status=health.status,
            quality=health.score,
            popularity=popularity,
            maintenance=maintenance,
            final=final,
        )
