class HttpStressError(Exception):
    """Base class for errors raised by httpstress."""


class ConfigError(HttpStressError, ValueError):
    """Invalid run configuration. Raised before any request is dispatched."""


class AccountingError(HttpStressError, RuntimeError):
    """The number of folded outcomes does not match the number of dispatched tasks."""
