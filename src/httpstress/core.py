import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Protocol

import aiohttp
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn, MofNCompleteColumn

from .aggregator import ResultAggregator
from .config import StressConfig
from .errors import AccountingError, ConfigError
from .executor import RequestExecutor
from .logging_config import get_console
from .metrics import compute_stats
from .models import MetricsCallback, Outcome, RequestSpec, RunSummary
from .utils import now

logger = logging.getLogger(__name__)


class Executor(Protocol):
    async def execute(self, spec: RequestSpec, index: int) -> Outcome: ...


class RequestDispatcher:
    def __init__(
        self,
        spec: RequestSpec,
        total_requests: int,
        concurrency: int = 1,
        interval_s: float = 0,
        executor: Executor | None = None,
        request_timeout_s: float | None = None,
        metrics_callback: MetricsCallback | None = None,
        use_progress_bar: bool = True,
        console: Console | None = None,
    ) -> None:
        if total_requests <= 0:
            raise ConfigError("total requests must be greater than 0")
        if concurrency <= 0:
            raise ConfigError("concurrency must be greater than 0")
        if interval_s < 0:
            raise ConfigError("interval seconds cannot be negative")

        self.spec = spec
        self.total_requests = total_requests
        self.concurrency = concurrency
        self.interval_s = interval_s
        self.executor = executor
        self.request_timeout_s = request_timeout_s
        self.metrics_callback = metrics_callback
        self.use_progress_bar = use_progress_bar
        self.console = console or get_console()

        # Tasks between admission and slot release
        self.in_flight = 0
        self.peak_in_flight = 0

        logger.info(
            f"Initialized dispatcher: {spec.method} {spec.url}, "
            f"requests={total_requests}, concurrency={concurrency}, "
            f"interval={interval_s}s"
        )

    @classmethod
    def from_config(cls, config: StressConfig, **kwargs) -> "RequestDispatcher":
        return cls(
            config.request_spec(),
            total_requests=config.total_requests,
            concurrency=config.concurrency,
            interval_s=config.interval_s,
            request_timeout_s=config.request_timeout_s,
            **kwargs,
        )

    # ────────────────────────────────
    # Executor Lifecycle
    # ────────────────────────────────

    @asynccontextmanager
    async def _executor_scope(self):
        if self.executor is not None:
            yield self.executor
            return

        # The semaphore is the only concurrency bound, so the pool is unlimited.
        connector = aiohttp.TCPConnector(limit=0)
        session_kwargs = {}
        if self.request_timeout_s is not None:
            session_kwargs["timeout"] = aiohttp.ClientTimeout(total=self.request_timeout_s)
        async with aiohttp.ClientSession(
            connector=connector, **session_kwargs
        ) as session:
            yield RequestExecutor(session)

    # ────────────────────────────────
    # Per-Task Logic
    # ────────────────────────────────

    async def _run_task(
        self,
        executor: Executor,
        aggregator: ResultAggregator,
        slots: asyncio.Semaphore,
        index: int,
    ) -> None:
        try:
            outcome = await executor.execute(self.spec, index)
            if outcome.failed:
                logger.info(f"Request {index + 1}: failed ({outcome.duration:.3f}s)")
            else:
                logger.info(
                    f"Request {index + 1}: status {outcome.status} ({outcome.duration:.3f}s)"
                )
            await aggregator.submit(outcome)
        finally:
            try:
                # The interval holds the slot after the request is done: it sets a
                # minimum occupancy per slot rather than spacing requests pool-wide.
                if self.interval_s > 0:
                    await asyncio.sleep(self.interval_s)
            finally:
                self.in_flight -= 1
                slots.release()

    # ────────────────────────────────
    # Main Runner
    # ────────────────────────────────

    async def run(self) -> RunSummary:
        logger.info("Starting stress run...")
        self.in_flight = 0
        self.peak_in_flight = 0

        progress = None
        task_id = None
        if self.use_progress_bar:
            progress = Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
                console=self.console,
            )
            progress.start()
            task_id = progress.add_task("[cyan]Requesting...", total=self.total_requests)

        def on_outcome(_outcome: Outcome) -> None:
            if progress is not None and task_id is not None:
                progress.advance(task_id)

        try:
            async with self._executor_scope() as executor:
                aggregator = ResultAggregator(on_outcome=on_outcome)
                aggregator.start()
                slots = asyncio.Semaphore(self.concurrency)
                tasks: list[asyncio.Task] = []

                t0 = now()
                for index in range(self.total_requests):
                    await slots.acquire()
                    self.in_flight += 1
                    self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
                    logger.debug(f"Admitted request {index + 1} (in flight: {self.in_flight})")
                    tasks.append(
                        asyncio.create_task(
                            self._run_task(executor, aggregator, slots, index)
                        )
                    )

                try:
                    await asyncio.gather(*tasks)
                except BaseException:
                    for task in tasks:
                        task.cancel()
                    await asyncio.gather(*tasks, return_exceptions=True)
                    await aggregator.abort()
                    raise
                stats = await aggregator.close()
                wall_time = now() - t0
        finally:
            if progress is not None:
                progress.stop()

        if stats.count != self.total_requests:
            raise AccountingError(
                f"folded {stats.count} outcomes for {self.total_requests} dispatched requests"
            )

        summary = RunSummary(
            wall_time=wall_time,
            stats=stats.snapshot(),
            total_requests=self.total_requests,
            concurrency=self.concurrency,
            peak_in_flight=self.peak_in_flight,
        )

        result = compute_stats(stats, self.metrics_callback)
        logger.info(
            f"Run completed: {result.success} responses, {result.errors} failures "
            f"in {wall_time:.3f}s, error_rate={result.error_rate * 100:.2f}%"
        )

        return summary
