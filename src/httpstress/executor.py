import logging

import aiohttp

from .models import FAILURE_STATUS, Outcome, RequestSpec
from .utils import now, build_headers

logger = logging.getLogger(__name__)


class RequestExecutor:
    """Issues one HTTP call per :meth:`execute` over a shared session.

    Any response counts as a result, whatever its status code. Every failure
    to get one is reported as ``FAILURE_STATUS`` with the time spent until the
    failure; nothing is raised to the caller.
    """

    def __init__(self, session: aiohttp.ClientSession) -> None:
        self.session = session

    async def execute(self, spec: RequestSpec, index: int) -> Outcome:
        headers = build_headers(spec)
        data = spec.body.encode("utf-8") if spec.body else None
        start = now()
        try:
            async with self.session.request(
                spec.method, spec.url, data=data, headers=headers
            ) as resp:
                # Status line and headers are in; the body is left unread.
                latency = now() - start
                status = resp.status
            logger.debug(f"Request {index + 1}: {spec.method} {spec.url} -> {status}")
            return Outcome(index=index, status=status, duration=latency)
        except aiohttp.InvalidURL as e:
            return self._failed(index, start, f"invalid URL {e}")
        except aiohttp.ClientConnectorError as e:
            return self._failed(index, start, f"connection error: {e}")
        except TimeoutError:
            return self._failed(index, start, "timeout")
        except aiohttp.ClientError as e:
            return self._failed(index, start, f"{type(e).__name__}: {e}")
        except Exception as e:
            return self._failed(
                index, start, f"unexpected error for {spec.url}: {e}", level=logging.ERROR
            )

    @staticmethod
    def _failed(
        index: int, start: float, reason: str, level: int = logging.WARNING
    ) -> Outcome:
        latency = now() - start
        logger.log(level, f"Request {index + 1} failed: {reason}")
        return Outcome(index=index, status=FAILURE_STATUS, duration=latency)
