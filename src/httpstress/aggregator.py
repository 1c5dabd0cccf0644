import asyncio
import logging

from .models import AggregateStats, Outcome, OutcomeHook

logger = logging.getLogger(__name__)

_DONE = object()


class ResultAggregator:
    """Folds outcomes from many producer tasks into one AggregateStats.

    Producers only ever put onto the queue; the consumer task started by
    :meth:`start` is the single writer of the counters. :meth:`close` must be
    called once every producer has finished: the end marker it enqueues sits
    behind every outcome already submitted, so the consumer drains them all
    before it stops.
    """

    def __init__(self, on_outcome: OutcomeHook | None = None) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._stats = AggregateStats()
        self._on_outcome = on_outcome
        self._task: asyncio.Task | None = None
        self._closed = False

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._consume())
            logger.debug("Aggregator started")

    async def submit(self, outcome: Outcome) -> None:
        if self._closed:
            raise RuntimeError("aggregator is closed")
        await self._queue.put(outcome)

    async def close(self) -> AggregateStats:
        if self._closed:
            raise RuntimeError("aggregator already closed")
        self._closed = True
        self.start()
        await self._queue.put(_DONE)
        await self._task
        logger.debug(f"Aggregator drained {self._stats.count} outcomes")
        return self._stats

    async def abort(self) -> None:
        """Stop the consumer without draining. Used when a run fails."""
        self._closed = True
        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            logger.debug(f"Aggregator aborted after {self._stats.count} outcomes")

    async def _consume(self) -> None:
        while True:
            item = await self._queue.get()
            if item is _DONE:
                break
            self._stats.record(item)
            if self._on_outcome is not None:
                self._on_outcome(item)
