import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from collections.abc import Iterable, Mapping

from .errors import ConfigError
from .models import ALLOWED_METHODS, RequestSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StressConfig:
    """Validated, immutable settings for one run.

    Build it with :meth:`StressConfig.create`, which normalizes the method and
    raises :class:`ConfigError` for anything that would make the run
    meaningless. Nothing mutates it afterwards.
    """

    url: str
    method: str = "GET"
    total_requests: int = 10
    concurrency: int = 1
    interval_s: float = 0
    body: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    request_timeout_s: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def create(
        cls,
        url: str,
        method: str = "GET",
        total_requests: int = 10,
        concurrency: int = 1,
        interval_s: float = 0,
        body: str = "",
        headers: Mapping[str, str] | None = None,
        request_timeout_s: float | None = None,
    ) -> "StressConfig":
        method = (method or "").strip().upper()
        validate_config(url, method, total_requests, concurrency, interval_s)
        if request_timeout_s is not None and request_timeout_s <= 0:
            raise ConfigError("request timeout must be greater than 0")
        return cls(
            url=url.strip(),
            method=method,
            total_requests=total_requests,
            concurrency=concurrency,
            interval_s=interval_s,
            body=body or "",
            headers=dict(headers or {}),
            request_timeout_s=request_timeout_s,
        )

    def request_spec(self) -> RequestSpec:
        return RequestSpec(
            method=self.method, url=self.url, body=self.body, headers=self.headers
        )


def validate_config(
    url: str,
    method: str,
    total_requests: int,
    concurrency: int,
    interval_s: float,
) -> None:
    if not url or not url.strip():
        raise ConfigError("URL is required")

    if method.upper() not in ALLOWED_METHODS:
        raise ConfigError(
            f"invalid HTTP method: {method}. "
            f"Allowed methods are: {', '.join(ALLOWED_METHODS)}"
        )

    if total_requests <= 0:
        raise ConfigError("total requests must be greater than 0")

    if concurrency <= 0:
        raise ConfigError("concurrency must be greater than 0")

    if interval_s < 0:
        raise ConfigError("interval seconds cannot be negative")


def parse_header(raw: str) -> tuple[str, str]:
    """Split a ``"Key: Value"`` string on its first colon."""
    key, sep, value = raw.partition(":")
    key = key.strip()
    if not sep or not key:
        raise ConfigError(f"invalid header {raw!r}, expected 'Key: Value'")
    return key, value.strip()


def parse_headers(raw_headers: Iterable[str] | None) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in raw_headers or ():
        key, value = parse_header(raw)
        if key in headers:
            logger.debug(f"Header {key} given more than once, keeping last value")
        headers[key] = value
    return headers
