"""
Tests for the Scanner facade.
"""

import asyncio

import pytest

from conftest import API, REGISTRY
from pckgi.collectors.http import FetchResponse
from pckgi.core.exceptions import (
    CompareError,
    FetchError,
    FetchTimeoutError,
    HttpStatusError,
    PackageNotFoundError,
    ScanError,
    SearchError,
)
from pckgi.core.models import HealthStatus, PackageReport
from pckgi.scanner import MAX_SEARCH_SIZE, Scanner, ScanOptions, SearchOptions

SEARCH_URL = f"{REGISTRY}/-/v1/search"


class TestSearch:
    """Tests for Scanner.search."""

    @pytest.mark.asyncio
    async def test_maps_results(self, scanner, router, mock_search_response):
        """Test registry objects become SearchResults with 0-100 scores."""
        router.add(SEARCH_URL, mock_search_response)

        results = await scanner.search("http")

        first = results[0]
        assert first.name == "fast-http"
        assert first.description == "Fast HTTP client"
        assert first.author == "Alice"
        assert first.keywords == ("http", "client")
        assert first.license == "MIT"
        assert first.score.final == 88
        assert first.score.quality == 90
        assert first.score.popularity == 80
        assert first.score.maintenance == 70
        assert first.links["npm"].endswith("/fast-http")
        assert first.published_at.year == 2024

    @pytest.mark.asyncio
    async def test_request_parameters(self, scanner, router, mock_search_response):
        """Test query text, size and weights are sent."""
        router.add(SEARCH_URL, mock_search_response)

        await scanner.search("http", SearchOptions(limit=5, quality=0.9))

        params = scanner.client.get.await_args.kwargs["params"]
        assert params == {
            "text": "http",
            "size": 5,
            "quality": 0.9,
            "popularity": 0.5,
            "maintenance": 0.5,
        }

    @pytest.mark.asyncio
    async def test_size_clamped(self, scanner, router):
        """Test the page size never exceeds the registry maximum."""
        router.add(SEARCH_URL, {"objects": []})

        await scanner.search("x", SearchOptions(limit=1000))

        params = scanner.client.get.await_args.kwargs["params"]
        assert params["size"] == MAX_SEARCH_SIZE

    @pytest.mark.asyncio
    async def test_filters_unstable(self, scanner, router, mock_search_response):
        """Test prerelease versions are dropped by default."""
        router.add(SEARCH_URL, mock_search_response)

        names = [r.name for r in await scanner.search("http")]

        assert "http-next" not in names
        # an unparseable version has no stability verdict
        assert "http-legacy" in names

    @pytest.mark.asyncio
    async def test_include_unstable(self, scanner, router, mock_search_response):
        """Test prerelease versions are kept on request."""
        router.add(SEARCH_URL, mock_search_response)

        results = await scanner.search("http", SearchOptions(include_unstable=True))

        unstable = next(r for r in results if r.name == "http-next")
        assert unstable.author == "bob"
        assert unstable.description == "No description available"
        assert [r.name for r in results] == ["fast-http", "http-next", "http-legacy"]

    @pytest.mark.asyncio
    async def test_cached(self, scanner, router, mock_search_response):
        """Test repeated searches are served from the cache."""
        router.add(SEARCH_URL, mock_search_response)

        first = await scanner.search("http")
        second = await scanner.search("http")

        assert first == second
        assert scanner.client.get.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_results_cached(self, scanner, router):
        """Test an empty result list is cached too."""
        router.add(SEARCH_URL, {"objects": []})

        assert await scanner.search("zzz") == []
        assert await scanner.search("zzz") == []
        assert scanner.client.get.await_count == 1

    @pytest.mark.asyncio
    async def test_different_options_not_shared(self, scanner, router, mock_search_response):
        """Test different options use different cache entries."""
        router.add(SEARCH_URL, mock_search_response)

        await scanner.search("http", SearchOptions(limit=5))
        await scanner.search("http", SearchOptions(limit=6))

        assert scanner.client.get.await_count == 2

    @pytest.mark.asyncio
    async def test_fetch_failure(self, scanner, router, network_error):
        """Test transport failures raise SearchError."""
        router.add(SEARCH_URL, network_error)

        with pytest.raises(SearchError, match="Connection reset"):
            await scanner.search("http")

    @pytest.mark.asyncio
    async def test_malformed_body(self, scanner, router):
        """Test an unexpected body shape raises SearchError."""
        router.add(SEARCH_URL, ["not", "an", "object"])

        with pytest.raises(SearchError):
            await scanner.search("http")

    @pytest.mark.asyncio
    async def test_failure_not_cached(self, scanner, router, network_error, mock_search_response):
        """Test a failed search is retried on the next call."""
        router.add(SEARCH_URL, network_error)
        with pytest.raises(SearchError):
            await scanner.search("http")

        router.add(SEARCH_URL, mock_search_response)
        assert await scanner.search("http")


class TestScan:
    """Tests for Scanner.scan."""

    @pytest.mark.asyncio
    async def test_report(self, scanner, registered_package):
        """Test a full report is assembled from metadata and downloads."""
        report = await scanner.scan(registered_package)

        assert isinstance(report, PackageReport)
        assert report.name == "left-pad-plus"
        assert report.version == "2.1.0"
        assert report.version_info.is_stable
        assert report.description == "String left pad"
        assert report.author == "Jane Doe"
        assert report.license == "MIT"
        assert 29 <= report.days_since_update <= 30
        assert 999 <= report.package_age <= 1000
        assert report.downloads.weekly == 15000
        assert report.downloads.monthly == 60000
        assert report.downloads.weekly_formatted == "15.0K"
        assert report.total_versions == 4
        assert report.maintainers == 2
        assert report.keywords == ("pad", "string")
        assert report.deprecated is False

    @pytest.mark.asyncio
    async def test_health(self, scanner, registered_package):
        """Test the health score reflects recency and downloads."""
        report = await scanner.scan(registered_package)

        assert report.health.status == HealthStatus.EXCELLENT
        assert report.health.quality == 100
        assert report.health.popularity == 80
        assert report.health.maintenance == 100
        assert report.health.final == pytest.approx(0.93)
        assert not report.needs_attention

    @pytest.mark.asyncio
    async def test_dependencies(self, scanner, registered_package):
        """Test dependency counts and the runtime dependency list."""
        report = await scanner.scan(registered_package)

        counts = report.dependency_counts
        assert (counts.prod, counts.dev, counts.peer) == (2, 2, 1)
        # lodash appears in both prod and dev
        assert counts.total == 4
        deps = {d.name: d for d in report.dependencies}
        assert deps["lodash"].version == "^4.17.21"
        assert deps["lodash"].version_info is None
        assert str(deps["chalk"].version_info) == "5.3.0"

    @pytest.mark.asyncio
    async def test_links_and_bundle(self, scanner, registered_package):
        """Test repository URLs are normalised and bundle hints read."""
        report = await scanner.scan(registered_package)

        assert report.repository == "https://github.com/example/left-pad-plus"
        assert report.bugs == "https://github.com/example/left-pad-plus/issues"
        assert report.links == {
            "npm": "https://www.npmjs.com/package/left-pad-plus",
            "homepage": "https://example.com/left-pad-plus",
            "repository": "https://github.com/example/left-pad-plus",
            "bugs": "https://github.com/example/left-pad-plus/issues",
        }
        assert report.bundle_info.has_types is True
        assert report.bundle_info.main == "index.js"
        assert report.bundle_info.files == 3

    @pytest.mark.asyncio
    async def test_no_dependencies_option(self, scanner, registered_package):
        """Test the dependency list can be omitted while counts remain."""
        report = await scanner.scan(registered_package, ScanOptions(include_dependencies=False))

        assert report.dependencies == ()
        assert report.dependency_counts.prod == 2

    @pytest.mark.asyncio
    async def test_no_downloads_option(self, scanner, router, registered_package):
        """Test download endpoints are skipped on request."""
        report = await scanner.scan(registered_package, ScanOptions(include_downloads=False))

        assert report.downloads.weekly == 0
        assert all(not url.startswith(API) for url in router.calls)

    @pytest.mark.asyncio
    async def test_download_failure_counts_as_zero(self, scanner, router, mock_packument):
        """Test an unavailable download count does not fail the scan."""
        router.add(f"{REGISTRY}/left-pad-plus", mock_packument)
        router.add(
            f"{API}/downloads/point/last-week/left-pad-plus",
            FetchTimeoutError("https://api.test", 5.0),
        )

        report = await scanner.scan("left-pad-plus")

        assert report.downloads.weekly == 0
        assert report.downloads.monthly == 0
        assert report.health.popularity == 30

    @pytest.mark.asyncio
    async def test_scoped_package_url(self, scanner, router, mock_packument):
        """Test scoped names are encoded in the metadata URL."""
        router.add(f"{REGISTRY}/@scope%2Fpkg", {**mock_packument, "name": "@scope/pkg"})

        report = await scanner.scan("@scope/pkg")

        assert report.name == "@scope/pkg"
        assert f"{API}/downloads/point/last-week/@scope%2Fpkg" in router.calls

    @pytest.mark.asyncio
    async def test_deprecated(self, scanner, router, mock_packument):
        """Test a deprecated latest version is reported."""
        mock_packument["versions"]["2.1.0"]["deprecated"] = "Use right-pad instead"
        router.add(f"{REGISTRY}/left-pad-plus", mock_packument)

        report = await scanner.scan("left-pad-plus")

        assert report.deprecated is True
        assert report.deprecated_message == "Use right-pad instead"
        assert report.health.status == HealthStatus.DEPRECATED
        assert report.needs_attention

    @pytest.mark.asyncio
    async def test_missing_timestamps(self, scanner, router, mock_packument):
        """Test missing timestamps give zero days."""
        mock_packument["time"] = {}
        router.add(f"{REGISTRY}/left-pad-plus", mock_packument)

        report = await scanner.scan("left-pad-plus")

        assert report.last_update is None
        assert report.days_since_update == 0
        assert report.package_age == 0

    @pytest.mark.asyncio
    async def test_not_found(self, scanner):
        """Test a 404 raises PackageNotFoundError."""
        with pytest.raises(PackageNotFoundError, match="'ghost-pkg' not found"):
            await scanner.scan("ghost-pkg")

    @pytest.mark.asyncio
    async def test_no_latest_version(self, scanner, router):
        """Test a document without a latest version counts as not found."""
        router.add(f"{REGISTRY}/empty-pkg", {"name": "empty-pkg", "versions": {}})

        with pytest.raises(PackageNotFoundError, match="no valid versions"):
            await scanner.scan("empty-pkg")

    @pytest.mark.asyncio
    async def test_server_error(self, scanner, router):
        """Test non-404 statuses raise ScanError."""
        router.add(f"{REGISTRY}/flaky", HttpStatusError(f"{REGISTRY}/flaky", 500, "Server Error"))

        with pytest.raises(ScanError, match="HTTP 500"):
            await scanner.scan("flaky")

    @pytest.mark.asyncio
    async def test_network_error(self, scanner, router, network_error):
        """Test transport failures raise ScanError."""
        router.add(f"{REGISTRY}/flaky", network_error)

        with pytest.raises(ScanError):
            await scanner.scan("flaky")

    @pytest.mark.asyncio
    async def test_invalid_name(self, scanner):
        """Test invalid names fail before any request."""
        with pytest.raises(ScanError, match="Validation failed"):
            await scanner.scan("../etc/passwd")
        scanner.client.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cached(self, scanner, registered_package):
        """Test a second scan is served from the cache."""
        first = await scanner.scan(registered_package)
        calls = scanner.client.get.await_count

        second = await scanner.scan(registered_package)

        assert second is first
        assert scanner.client.get.await_count == calls

    @pytest.mark.asyncio
    async def test_fetches_overlap(self, scanner, router, registered_package):
        """Test metadata and both download counts are requested concurrently."""
        in_flight = 0
        peak = 0

        async def slow_get(url, params=None, headers=None):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return await router(url, params, headers)

        scanner.client.get.side_effect = slow_get

        report = await scanner.scan(registered_package)

        assert report.downloads.weekly == 15000
        assert peak == 3

    @pytest.mark.asyncio
    async def test_metadata_failure_waits_for_downloads(self, scanner, router, network_error):
        """Test no download request is left running after a failed scan."""
        router.add(f"{REGISTRY}/flaky", network_error)
        finished = []

        async def get(url, params=None, headers=None):
            if url.startswith(API):
                await asyncio.sleep(0.02)
                finished.append(url)
            return await router(url, params, headers)

        scanner.client.get.side_effect = get

        with pytest.raises(ScanError):
            await scanner.scan("flaky")

        assert len(finished) == 2


class TestCompare:
    """Tests for Scanner.compare."""

    @pytest.mark.asyncio
    async def test_partial_failure(self, scanner, registered_package):
        """Test failures are reported per package without aborting."""
        results = await scanner.compare([registered_package, "missing-pkg"])

        assert [r.name for r in results] == ["left-pad-plus", "missing-pkg"]
        assert results[0].success is True
        assert results[0].report.version == "2.1.0"
        assert results[1].success is False
        assert results[1].report is None
        assert "not found" in results[1].error

    @pytest.mark.asyncio
    async def test_all_fail(self, scanner):
        """Test a batch where every scan fails still returns results."""
        results = await scanner.compare(["nope-a", "nope-b"])

        assert [r.success for r in results] == [False, False]

    @pytest.mark.asyncio
    async def test_empty(self, scanner):
        """Test an empty list raises CompareError."""
        with pytest.raises(CompareError):
            await scanner.compare([])

    @pytest.mark.asyncio
    async def test_to_dict_shape(self, scanner, registered_package):
        """Test serialized results expose name, success, data and error."""
        results = await scanner.compare([registered_package, "missing-pkg"])

        ok, failed = (r.to_dict() for r in results)
        assert ok["data"]["name"] == "left-pad-plus"
        assert ok["error"] is None
        assert failed["data"] is None
        assert failed["success"] is False


class TestTrending:
    """Tests for Scanner.trending."""

    @staticmethod
    def search_body(*entries):
        return {
            "objects": [
                {"package": {"name": name, "version": "1.0.0"}, "score": {"final": final}}
                for name, final in entries
            ]
        }

    @pytest.mark.asyncio
    async def test_dedup_and_sort(self, scanner):
        """Test results across queries are de-duplicated and ranked."""
        bodies = {
            "react": self.search_body(("react", 0.9), ("shared", 0.5)),
            "vue": self.search_body(("vue", 0.8), ("shared", 0.5)),
            "angular": FetchError(SEARCH_URL, "boom"),
        }

        async def fake_get(url, params=None, headers=None):
            body = bodies[params["text"]]
            if isinstance(body, Exception):
                raise body
            return FetchResponse(data=body, status=200)

        scanner.client.get.side_effect = fake_get

        results = await scanner.trending(limit=10, queries=("react", "vue", "angular"))

        assert [r.name for r in results] == ["react", "vue", "shared"]
        sizes = {c.kwargs["params"]["size"] for c in scanner.client.get.await_args_list}
        assert sizes == {5}

    @pytest.mark.asyncio
    async def test_limit(self, scanner, router):
        """Test the result list is truncated to the limit."""
        router.add(SEARCH_URL, self.search_body(("a", 0.9), ("b", 0.8), ("c", 0.7)))

        results = await scanner.trending(limit=2, queries=("one",))

        assert [r.name for r in results] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_all_queries_fail(self, scanner, router, network_error):
        """Test trending returns an empty list when every query fails."""
        router.add(SEARCH_URL, network_error)

        assert await scanner.trending() == []


class TestLifecycle:
    """Tests for cache clearing and session handling."""

    @pytest.mark.asyncio
    async def test_clear_cache(self, scanner, registered_package):
        """Test clearing the cache forces fresh requests."""
        await scanner.scan(registered_package)
        calls = scanner.client.get.await_count

        scanner.clear_cache()
        await scanner.scan(registered_package)

        assert len(scanner.cache) == 1
        assert scanner.client.get.await_count == calls * 2

    @pytest.mark.asyncio
    async def test_shared_session_left_open(self, fake_session_factory):
        """Test a caller-provided session survives the scanner."""
        session = fake_session_factory([])
        async with Scanner(session=session):
            pass
        assert session.closed is False

    @pytest.mark.asyncio
    async def test_compare_runs_concurrently(self, scanner, router, mock_packument):
        """Test compare overlaps its scans."""
        in_flight = 0
        peak = 0

        async def slow_get(url, params=None, headers=None):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return await router(url, params, headers)

        router.add(f"{REGISTRY}/left-pad-plus", mock_packument)
        router.add(f"{REGISTRY}/other-pkg", {**mock_packument, "name": "other-pkg"})
        scanner.client.get.side_effect = slow_get

        results = await scanner.compare(
            ["left-pad-plus", "other-pkg"], ScanOptions(include_downloads=False)
        )

        assert all(r.success for r in results)
        assert peak == 2
