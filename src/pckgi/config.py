"""
Scanner configuration.

All tunables live in a single immutable ``ScannerConfig`` passed to the
scanner's constructor; there are no module-level mutable defaults.
"""

from dataclasses import dataclass, fields, replace
from typing import Any

from pckgi.cache.memory import ResultCache
from pckgi.collectors.base import DEFAULT_USER_AGENT
from pckgi.collectors.http import DEFAULT_RETRIES, DEFAULT_TIMEOUT
from pckgi.core.exceptions import ValidationError

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_API_URL = "https://api.npmjs.org"


@dataclass(frozen=True)
class ScannerConfig:
    """Configuration for a Scanner.

    Attributes:
        timeout: Seconds allowed for each HTTP attempt.
        retries: Retries after the first attempt (2 means 3 attempts).
        cache_ttl: Seconds a cached result stays valid.
        registry_url: Base URL for search and package metadata.
        api_url: Base URL for download counts.
        user_agent: User-Agent header sent with every request.
    """

    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES
    cache_ttl: float = ResultCache.DEFAULT_TTL
    registry_url: str = DEFAULT_REGISTRY_URL
    api_url: str = DEFAULT_API_URL
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValidationError("timeout", str(self.timeout), "must be positive")
        if self.retries < 0:
            raise ValidationError("retries", str(self.retries), "must not be negative")
        if self.cache_ttl < 0:
            raise ValidationError("cache_ttl", str(self.cache_ttl), "must not be negative")
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "registry_url", self.registry_url.rstrip("/"))
        object.__setattr__(self, "api_url", self.api_url.rstrip("/"))

    def with_overrides(self, **overrides: Any) -> "ScannerConfig":
        """Return a copy with the given fields replaced.

        ``None`` values are ignored so optional CLI flags can be passed
        straight through.

        Raises:
            TypeError: If an override does not name a config field.
        """
        names = {f.name for f in fields(self)}
        unknown = set(overrides) - names
        if unknown:
            raise TypeError(f"Unknown config option(s): {', '.join(sorted(unknown))}")
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self
