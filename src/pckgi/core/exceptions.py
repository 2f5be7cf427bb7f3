"""
Custom exceptions for pckgi.
"""


class PckgiError(Exception):
    """Base exception for all pckgi errors."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class FetchError(PckgiError):
    """Raised when an HTTP request fails."""

    def __init__(self, url: str, details: str | None = None):
        super().__init__(f"Request failed: {url}", details=details)
        self.url = url


class HttpStatusError(FetchError):
    """Raised when the registry answers with a non-2xx status."""

    def __init__(self, url: str, status_code: int, reason: str = ""):
        super().__init__(url, details=f"HTTP {status_code}: {reason}".rstrip(": "))
        self.status_code = status_code
        self.reason = reason

    def __str__(self) -> str:
        return self.details or self.message


class FetchTimeoutError(FetchError):
    """Raised when a single request attempt exceeds its timeout."""

    def __init__(self, url: str, timeout: float):
        super().__init__(url, details=f"timed out after {timeout:g}s")
        self.timeout = timeout


class PackageNotFoundError(PckgiError):
    """Raised when a package cannot be found in the npm registry."""

    def __init__(self, package_name: str, details: str | None = None):
        super().__init__(
            f"Package '{package_name}' not found in npm registry",
            details=details,
        )
        self.package_name = package_name


class SearchError(PckgiError):
    """Raised when a registry search fails."""

    def __init__(self, query: str, details: str | None = None):
        super().__init__("Search failed", details=details)
        self.query = query


class ScanError(PckgiError):
    """Raised when a package scan fails for a reason other than absence."""

    def __init__(self, package_name: str, details: str | None = None):
        super().__init__("Scan failed", details=details)
        self.package_name = package_name


class CompareError(PckgiError):
    """Raised when a comparison cannot be started."""

    def __init__(self, details: str | None = None):
        super().__init__("Comparison failed", details=details)


class ValidationError(PckgiError):
    """Raised when data validation fails."""

    def __init__(self, field: str, value: str, reason: str):
        super().__init__(
            f"Validation failed for {field}",
            details=f"Value '{value}' is invalid: {reason}",
        )
        self.field = field
        self.value = value
        self.reason = reason
