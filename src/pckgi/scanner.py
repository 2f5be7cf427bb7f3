"""
Scanner facade for the npm registry.

Provides the main Scanner class that coordinates HTTP fetches, caching and
health scoring to produce search results, package reports and
comparisons.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

import aiohttp

from pckgi.cache.memory import ResultCache
from pckgi.collectors.http import HttpClient
from pckgi.config import ScannerConfig
from pckgi.core.exceptions import (
    CompareError,
    FetchError,
    HttpStatusError,
    PackageNotFoundError,
    PckgiError,
    ScanError,
    SearchError,
)
from pckgi.core.models import (
    BundleInfo,
    CompareResult,
    Dependency,
    DependencyCounts,
    DownloadStats,
    PackageReport,
    SearchResult,
    SearchScore,
    parse_timestamp,
)
from pckgi.core.scoring import HealthCalculator, parse_version
from pckgi.core.validation import encode_package_name_for_url, validate_package_name

logger = logging.getLogger(__name__)

# Maximum page size accepted by the registry search endpoint
MAX_SEARCH_SIZE = 250

TRENDING_QUERIES = ("react", "vue", "angular", "nodejs", "typescript", "javascript")
TRENDING_PER_QUERY = 5

SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class SearchOptions:
    """Options for ``Scanner.search``.

    ``quality``, ``popularity`` and ``maintenance`` are the registry's
    ranking weights (0-1).
    """

    limit: int = 10
    quality: float = 0.5
    popularity: float = 0.5
    maintenance: float = 0.5
    include_unstable: bool = False


@dataclass(frozen=True)
class ScanOptions:
    """Options for ``Scanner.scan`` and ``Scanner.compare``."""

    include_downloads: bool = True
    include_dependencies: bool = True


def _extract_person(value: Any) -> Optional[str]:
    """Extract a name from an npm person field (string or object)."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        return value.get("name") or value.get("username") or None
    return None


def _extract_license(value: Any) -> Optional[str]:
    """Extract a license identifier from the various npm formats."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        return value.get("type") or value.get("name")
    if isinstance(value, list) and value:
        return _extract_license(value[0])
    return None


def _extract_url(value: Any) -> Optional[str]:
    """Extract a URL from a repository/bugs field.

    Handles ``{"url": ...}`` objects, ``git+https://...git`` URLs and the
    ``github:owner/repo`` shorthand.
    """
    if isinstance(value, dict):
        value = value.get("url")
    if not isinstance(value, str) or not value:
        return None

    url = value
    if url.startswith("git+"):
        url = url[len("git+"):]
    if url.startswith("git://"):
        url = "https://" + url[len("git://"):]
    if url.startswith("github:"):
        url = f"https://github.com/{url[len('github:'):]}"
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return url


def _days_between(earlier: Optional[datetime], now: datetime) -> int:
    if earlier is None:
        return 0
    return max(0, int((now - earlier).total_seconds() // SECONDS_PER_DAY))


class Scanner:
    """Query the npm registry and build scored results.

    Owns the HTTP client, the result cache and the health calculator.
    Use as an async context manager, or call ``close()`` when done.
    """

    def __init__(
        self,
        config: Optional[ScannerConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """Initialize the scanner.

        Args:
            config: Scanner configuration; defaults to ``ScannerConfig()``.
            session: Optional aiohttp session to share with the caller.
        """
        self.config = config or ScannerConfig()
        self.client = HttpClient(
            session,
            timeout=self.config.timeout,
            retries=self.config.retries,
            user_agent=self.config.user_agent,
        )
        self.cache = ResultCache(ttl=self.config.cache_ttl)
        self.calculator = HealthCalculator()

    async def close(self) -> None:
        """Close the HTTP session if the scanner owns it."""
        await self.client.close()

    async def __aenter__(self) -> "Scanner":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def clear_cache(self) -> None:
        """Drop every cached result."""
        count = self.cache.clear()
        logger.debug("Cleared %d cached results", count)

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        options: Optional[SearchOptions] = None,
    ) -> list[SearchResult]:
        """Search the registry.

        Args:
            query: Free-text search query.
            options: Search options; defaults to ``SearchOptions()``.

        Returns:
            List of SearchResult, in registry ranking order.

        Raises:
            SearchError: If the search request fails.
        """
        options = options or SearchOptions()

        cache_key = ResultCache.make_key("search", query, options)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit for %s", cache_key)
            return list(cached)

        params = {
            "text": query,
            "size": min(options.limit, MAX_SEARCH_SIZE),
            "quality": options.quality,
            "popularity": options.popularity,
            "maintenance": options.maintenance,
        }

        try:
            response = await self.client.get(
                f"{self.config.registry_url}/-/v1/search", params=params
            )
            objects = (response.data or {}).get("objects") or []
            results = [self._parse_search_object(obj) for obj in objects]
        except (PckgiError, AttributeError, TypeError, ValueError) as e:
            raise SearchError(query, details=str(e)) from e

        if not options.include_unstable:
            # Unparseable versions have no stability verdict and are kept
            results = [
                r for r in results
                if r.version_info is None or r.version_info.is_stable
            ]

        self.cache.set(cache_key, tuple(results))
        return results

    def _parse_search_object(self, obj: dict[str, Any]) -> SearchResult:
        """Convert one entry of the search response into a SearchResult."""
        pkg = obj.get("package") or {}
        score = obj.get("score") or {}
        detail = score.get("detail") or {}
        version = pkg.get("version") or ""

        return SearchResult(
            name=pkg.get("name", ""),
            description=pkg.get("description") or "No description available",
            version=version,
            version_info=parse_version(version),
            author=(
                _extract_person(pkg.get("author"))
                or _extract_person(pkg.get("publisher"))
                or "Unknown"
            ),
            keywords=tuple(pkg.get("keywords") or ()),
            license=_extract_license(pkg.get("license")) or "Unknown",
            score=SearchScore(
                final=round((score.get("final") or 0) * 100),
                quality=round((detail.get("quality") or 0) * 100),
                popularity=round((detail.get("popularity") or 0) * 100),
                maintenance=round((detail.get("maintenance") or 0) * 100),
            ),
            links=dict(pkg.get("links") or {}),
            published_at=parse_timestamp(pkg.get("date")),
        )

    # ------------------------------------------------------------------
    # Scan
    # ------------------------------------------------------------------

    async def scan(
        self,
        package_name: str,
        options: Optional[ScanOptions] = None,
    ) -> PackageReport:
        """Build a detailed report for a single package.

        Fetches the package document and, if requested, the weekly and
        monthly download counts concurrently. Download failures count as
        zero downloads.

        Args:
            package_name: npm package name, optionally scoped.
            options: Scan options; defaults to ``ScanOptions()``.

        Returns:
            PackageReport for the latest version.

        Raises:
            PackageNotFoundError: If the package or its latest version is missing.
            ScanError: If the scan fails for any other reason.
        """
        options = options or ScanOptions()

        cache_key = ResultCache.make_key("scan", package_name, options)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit for %s", cache_key)
            return cached

        try:
            name = validate_package_name(package_name)
            encoded = encode_package_name_for_url(name)

            fetches = [self.client.get(f"{self.config.registry_url}/{encoded}")]
            if options.include_downloads:
                fetches.append(self._fetch_downloads("last-week", encoded))
                fetches.append(self._fetch_downloads("last-month", encoded))

            # Every fetch settles before returning, so none outlives the scan
            results = await asyncio.gather(*fetches, return_exceptions=True)
            for outcome in results:
                if isinstance(outcome, BaseException):
                    raise outcome
            package_data = results[0].data or {}
            weekly, monthly = (results[1], results[2]) if options.include_downloads else (0, 0)

            report = self._build_report(
                package_name, package_data, DownloadStats(weekly, monthly), options
            )

        except PackageNotFoundError:
            raise
        except HttpStatusError as e:
            if e.status_code == 404:
                raise PackageNotFoundError(package_name) from e
            raise ScanError(package_name, details=str(e)) from e
        except (PckgiError, AttributeError, TypeError, ValueError) as e:
            raise ScanError(package_name, details=str(e)) from e

        self.cache.set(cache_key, report)
        return report

    async def _fetch_downloads(self, period: str, encoded_name: str) -> int:
        """Fetch a download count, returning 0 on any failure."""
        url = f"{self.config.api_url}/downloads/point/{period}/{encoded_name}"
        try:
            response = await self.client.get(url)
            return int((response.data or {}).get("downloads") or 0)
        except (FetchError, AttributeError, TypeError, ValueError) as e:
            logger.debug("Download count unavailable for %s: %s", url, e)
            return 0

    def _build_report(
        self,
        package_name: str,
        data: dict[str, Any],
        downloads: DownloadStats,
        options: ScanOptions,
    ) -> PackageReport:
        """Assemble a PackageReport from the registry package document."""
        latest = (data.get("dist-tags") or {}).get("latest")
        versions = data.get("versions") or {}
        manifest = versions.get(latest) if latest else None
        if not latest or not manifest:
            raise PackageNotFoundError(package_name, details="Package has no valid versions")

        times = data.get("time") or {}
        created_at = parse_timestamp(times.get("created"))
        last_update = parse_timestamp(times.get(latest)) or parse_timestamp(times.get("modified"))

        now = self._now()
        days_since_update = _days_between(last_update, now)
        package_age = _days_between(created_at, now)

        deprecated_message = manifest.get("deprecated")
        is_deprecated = bool(deprecated_message)

        health = self.calculator.calculate(
            days_since_update=days_since_update,
            downloads=downloads.weekly,
            is_deprecated=is_deprecated,
            total_versions=len(versions),
        )

        dependencies = manifest.get("dependencies") or {}
        dev_dependencies = manifest.get("devDependencies") or {}
        peer_dependencies = manifest.get("peerDependencies") or {}

        dependency_list: tuple[Dependency, ...] = ()
        if options.include_dependencies:
            dependency_list = tuple(
                Dependency(name=dep, version=str(spec), version_info=parse_version(spec))
                for dep, spec in dependencies.items()
            )

        homepage = manifest.get("homepage") or data.get("homepage")
        repository = _extract_url(manifest.get("repository") or data.get("repository"))
        bugs = _extract_url(manifest.get("bugs") or data.get("bugs"))
        name = data.get("name") or package_name

        links = {"npm": f"https://www.npmjs.com/package/{name}"}
        for key, url in (("homepage", homepage), ("repository", repository), ("bugs", bugs)):
            if url:
                links[key] = url

        return PackageReport(
            name=name,
            version=latest,
            version_info=parse_version(latest),
            description=data.get("description") or manifest.get("description") or "No description",
            author=(
                _extract_person(manifest.get("author"))
                or _extract_person(data.get("author"))
                or "Unknown"
            ),
            license=(
                _extract_license(manifest.get("license"))
                or _extract_license(data.get("license"))
                or "Unknown"
            ),
            created_at=created_at,
            last_update=last_update,
            days_since_update=days_since_update,
            package_age=package_age,
            downloads=downloads,
            health=health,
            deprecated=is_deprecated,
            deprecated_message=str(deprecated_message) if is_deprecated else None,
            total_versions=len(versions),
            dependencies=dependency_list,
            dependency_counts=DependencyCounts(
                prod=len(dependencies),
                dev=len(dev_dependencies),
                peer=len(peer_dependencies),
                total=len({**dependencies, **dev_dependencies, **peer_dependencies}),
            ),
            maintainers=len(data.get("maintainers") or ()),
            keywords=tuple(data.get("keywords") or manifest.get("keywords") or ()),
            homepage=homepage,
            repository=repository,
            bugs=bugs,
            links=links,
            bundle_info=BundleInfo(
                has_types=bool(manifest.get("types") or manifest.get("typings")),
                main=manifest.get("main"),
                module=manifest.get("module"),
                exports=manifest.get("exports"),
                files=len(manifest.get("files") or ()),
            ),
        )

    # ------------------------------------------------------------------
    # Compare / trending
    # ------------------------------------------------------------------

    async def compare(
        self,
        package_names: Iterable[str],
        options: Optional[ScanOptions] = None,
    ) -> list[CompareResult]:
        """Scan several packages concurrently.

        A failing package never aborts the batch; its CompareResult
        carries the error message instead of a report.

        Args:
            package_names: Names to scan.
            options: Scan options applied to every package.

        Returns:
            One CompareResult per name, in input order.

        Raises:
            CompareError: If no package names were given.
        """
        names = list(package_names)
        if not names:
            raise CompareError(details="No package names given")

        outcomes = await asyncio.gather(
            *(self.scan(name, options) for name in names),
            return_exceptions=True,
        )

        results = []
        for name, outcome in zip(names, outcomes):
            if isinstance(outcome, PackageReport):
                results.append(CompareResult(name=name, success=True, report=outcome))
            elif isinstance(outcome, Exception):
                logger.debug("Comparison entry %s failed: %s", name, outcome)
                results.append(CompareResult(name=name, success=False, error=str(outcome)))
            else:
                # CancelledError and other BaseExceptions are not per-item failures
                raise outcome
        return results

    async def trending(
        self,
        limit: int = 10,
        queries: Iterable[str] = TRENDING_QUERIES,
    ) -> list[SearchResult]:
        """Collect top-scoring packages across a set of popular queries.

        Queries run one after another; a failing query is skipped.

        Args:
            limit: Maximum number of packages to return.
            queries: Search queries to aggregate.

        Returns:
            Unique SearchResults sorted by final score, best first.
        """
        unique: dict[str, SearchResult] = {}
        for query in queries:
            try:
                results = await self.search(query, SearchOptions(limit=TRENDING_PER_QUERY))
            except SearchError as e:
                logger.warning("Skipping trending query %r: %s", query, e)
                continue
            for result in results:
                unique.setdefault(result.name, result)

        ranked = sorted(unique.values(), key=lambda r: r.score.final, reverse=True)
        return ranked[:limit]


def create_scanner(**options: Any) -> Scanner:
    """Create a Scanner from keyword options.

    Accepts any ``ScannerConfig`` field (``timeout``, ``retries``,
    ``cache_ttl``, ``registry_url``, ``api_url``, ``user_agent``); ``None``
    values keep the default.
    """
    return Scanner(ScannerConfig().with_overrides(**options))
