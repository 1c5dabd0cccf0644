import logging
import time

from multidict import CIMultiDict

from . import __version__
from .models import RequestSpec

logger = logging.getLogger(__name__)

# ────────────────────────────────
# Time Helpers
# ────────────────────────────────


def now() -> float:
    return time.perf_counter()


# ────────────────────────────────
# Request Headers
# ────────────────────────────────

USER_AGENT = f"httpstress/{__version__}"


def build_headers(spec: RequestSpec) -> CIMultiDict[str]:
    """Default headers first, then the caller's, overriding case-insensitively."""
    headers: CIMultiDict[str] = CIMultiDict()
    headers["User-Agent"] = USER_AGENT
    if spec.body:
        headers["Content-Type"] = "application/json"
    for key, value in spec.headers.items():
        if key in headers:
            logger.debug(f"Caller header overrides default {key}")
        headers[key] = value
    return headers
