"""
Pytest fixtures and configuration for pckgi tests.

Provides mock registry responses, a fake aiohttp session and a scanner
whose HTTP client is routed to canned responses.
"""

from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock

import pytest

from pckgi.collectors.http import FetchResponse
from pckgi.config import ScannerConfig
from pckgi.core.exceptions import FetchError, HttpStatusError
from pckgi.core.models import (
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
from pckgi.scanner import Scanner

REGISTRY = "https://registry.test"
API = "https://api.test"


def iso_days_ago(days: int) -> str:
    """ISO timestamp ``days`` days before now, in registry format."""
    dt = datetime.now(timezone.utc) - timedelta(days=days)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.000Z")


# =============================================================================
# Mock API Response Fixtures
# =============================================================================


@pytest.fixture
def mock_packument() -> dict[str, Any]:
    """Create a mock registry package document."""
    return {
        "name": "left-pad-plus",
        "description": "String left pad",
        "dist-tags": {"latest": "2.1.0", "next": "3.0.0-beta.1"},
        "versions": {
            "1.0.0": {"name": "left-pad-plus", "version": "1.0.0"},
            "2.0.0": {"name": "left-pad-plus", "version": "2.0.0"},
            "2.1.0": {
                "name": "left-pad-plus",
                "version": "2.1.0",
                "author": {"name": "Jane Doe", "email": "jane@example.com"},
                "license": "MIT",
                "homepage": "https://example.com/left-pad-plus",
                "repository": {
                    "type": "git",
                    "url": "git+https://github.com/example/left-pad-plus.git",
                },
                "bugs": {"url": "https://github.com/example/left-pad-plus/issues"},
                "dependencies": {"lodash": "^4.17.21", "chalk": "5.3.0"},
                "devDependencies": {"jest": "^29.0.0", "lodash": "^4.17.21"},
                "peerDependencies": {"react": ">=17"},
                "types": "index.d.ts",
                "main": "index.js",
                "module": "index.mjs",
                "files": ["index.js", "index.mjs", "index.d.ts"],
            },
            "3.0.0-beta.1": {"name": "left-pad-plus", "version": "3.0.0-beta.1"},
        },
        "time": {
            "created": iso_days_ago(1000),
            "modified": iso_days_ago(10),
            "1.0.0": iso_days_ago(1000),
            "2.0.0": iso_days_ago(400),
            "2.1.0": iso_days_ago(30),
            "3.0.0-beta.1": iso_days_ago(10),
        },
        "maintainers": [
            {"name": "jane", "email": "jane@example.com"},
            {"name": "john", "email": "john@example.com"},
        ],
        "keywords": ["pad", "string"],
    }


@pytest.fixture
def mock_search_response() -> dict[str, Any]:
    """Create a mock registry search response."""

    def entry(name: str, version: str, final: float, **package: Any) -> dict[str, Any]:
        return {
            "package": {
                "name": name,
                "version": version,
                "date": "2024-03-01T10:00:00.000Z",
                "links": {"npm": f"https://www.npmjs.com/package/{name}"},
                **package,
            },
            "score": {
                "final": final,
                "detail": {"quality": 0.9, "popularity": 0.8, "maintenance": 0.7},
            },
        }

    return {
        "objects": [
            entry(
                "fast-http",
                "4.2.0",
                0.876,
                description="Fast HTTP client",
                author={"name": "Alice"},
                keywords=["http", "client"],
                license="MIT",
            ),
            entry("http-next", "1.0.0-rc.2", 0.5, publisher={"username": "bob"}),
            entry("http-legacy", "latest-ish", 0.3),
        ],
        "total": 3,
    }


# =============================================================================
# Fake aiohttp Session
# =============================================================================


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse as an async context manager."""

    def __init__(self, status: int = 200, body: Any = None, reason: str = "OK"):
        self.status = status
        self.reason = reason
        self._body = body

    async def json(self, content_type: Any = None) -> Any:
        if isinstance(self._body, Exception):
            raise self._body
        return self._body

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class FakeSession:
    """Replays a list of outcomes; each item is a FakeResponse or an exception."""

    def __init__(self, outcomes: list[Any]):
        self.outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_session_factory():
    """Build a FakeSession from a list of outcomes."""
    return FakeSession


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Recording stand-in for the retry backoff sleep."""
    return AsyncMock()


# =============================================================================
# Scanner Fixtures
# =============================================================================


@pytest.fixture
def scanner_config() -> ScannerConfig:
    """Scanner configuration pointing at fake hosts."""
    return ScannerConfig(registry_url=REGISTRY + "/", api_url=API, retries=0)


class RegistryRouter:
    """Maps request URLs to canned FetchResponses or errors."""

    def __init__(self):
        self.routes: dict[str, Any] = {}
        self.calls: list[str] = []

    def add(self, url: str, outcome: Any) -> None:
        self.routes[url] = outcome

    async def __call__(self, url: str, params: Any = None, headers: Any = None) -> FetchResponse:
        self.calls.append(url)
        outcome = self.routes.get(url)
        if outcome is None:
            raise HttpStatusError(url, 404, "Not Found")
        if isinstance(outcome, Exception):
            raise outcome
        return FetchResponse(data=outcome, status=200)


@pytest.fixture
def router() -> RegistryRouter:
    """Create an empty registry router."""
    return RegistryRouter()


@pytest.fixture
def scanner(scanner_config: ScannerConfig, router: RegistryRouter) -> Scanner:
    """Create a scanner whose HTTP client answers from the router."""
    scanner = Scanner(scanner_config)
    scanner.client.get = AsyncMock(side_effect=router.__call__)
    return scanner


@pytest.fixture
def registered_package(router: RegistryRouter, mock_packument: dict[str, Any]) -> str:
    """Register left-pad-plus with metadata and download counts."""
    router.add(f"{REGISTRY}/left-pad-plus", mock_packument)
    router.add(f"{API}/downloads/point/last-week/left-pad-plus", {"downloads": 15000})
    router.add(f"{API}/downloads/point/last-month/left-pad-plus", {"downloads": 60000})
    return "left-pad-plus"


@pytest.fixture
def network_error() -> FetchError:
    """A generic network failure."""
    return FetchError("https://example.test", details="Connection reset by peer")


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def sample_search_result() -> SearchResult:
    """Create a sample search result."""
    return SearchResult(
        name="fast-http",
        description="Fast | tiny\nHTTP client",
        version="4.2.0",
        version_info=VersionInfo(4, 2, 0),
        author="Alice",
        keywords=("http", "client"),
        license="MIT",
        score=SearchScore(final=88, quality=90, popularity=80, maintenance=70),
        links={"npm": "https://www.npmjs.com/package/fast-http"},
        published_at=datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_report() -> PackageReport:
    """Create a sample package report."""
    return PackageReport(
        name="left-pad-plus",
        version="2.1.0",
        version_info=VersionInfo(2, 1, 0),
        description="String left pad",
        author="Jane Doe",
        license="MIT",
        created_at=datetime(2022, 1, 15, tzinfo=timezone.utc),
        last_update=datetime(2024, 5, 20, 8, 30, tzinfo=timezone.utc),
        days_since_update=30,
        package_age=900,
        downloads=DownloadStats(weekly=15000, monthly=60000),
        health=HealthScore(
            status=HealthStatus.EXCELLENT,
            quality=100,
            popularity=80,
            maintenance=100,
            final=0.93,
        ),
        total_versions=4,
        dependencies=(Dependency("chalk", "5.3.0", VersionInfo(5, 3, 0)),),
        dependency_counts=DependencyCounts(prod=1, dev=2, peer=0, total=3),
        maintainers=2,
        keywords=("pad",),
        links={"npm": "https://www.npmjs.com/package/left-pad-plus"},
    )
