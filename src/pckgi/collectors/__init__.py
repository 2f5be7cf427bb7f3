"""
Collectors for fetching data from the npm registry APIs.

This module provides the session-owning base class and the retrying
JSON HTTP client used by the scanner.
"""

from pckgi.collectors.base import Collector
from pckgi.collectors.http import FetchResponse, HttpClient

__all__ = [
    "Collector",
    "FetchResponse",
    "HttpClient",
]
