from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any
from collections.abc import Callable, Mapping


# Status recorded for a request that never produced an HTTP response.
FAILURE_STATUS = -1

ALLOWED_METHODS = ("GET", "HEAD", "PATCH", "POST", "PUT", "DELETE")


@dataclass(frozen=True)
class RequestSpec:
    """The request every task sends. Shared read-only by all tasks of a run."""

    method: str
    url: str
    body: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))


@dataclass(frozen=True)
class Outcome:
    index: int
    status: int
    duration: float

    @property
    def failed(self) -> bool:
        return self.status == FAILURE_STATUS


@dataclass
class AggregateStats:
    status_counts: dict[int, int] = field(default_factory=dict)
    total_duration: float = 0.0
    count: int = 0
    durations: list[float] = field(default_factory=list)

    def record(self, outcome: Outcome) -> None:
        self.status_counts[outcome.status] = self.status_counts.get(outcome.status, 0) + 1
        self.total_duration += outcome.duration
        self.count += 1
        self.durations.append(outcome.duration)

    @property
    def failures(self) -> int:
        return self.status_counts.get(FAILURE_STATUS, 0)

    def snapshot(self) -> "StatsSnapshot":
        return StatsSnapshot(
            status_counts=MappingProxyType(dict(self.status_counts)),
            total_duration=self.total_duration,
            count=self.count,
            durations=tuple(self.durations),
        )


@dataclass(frozen=True)
class StatsSnapshot:
    """Read-only copy of AggregateStats taken when a run completes."""

    status_counts: Mapping[int, int]
    total_duration: float
    count: int
    durations: tuple[float, ...]

    @property
    def failures(self) -> int:
        return self.status_counts.get(FAILURE_STATUS, 0)


def average_duration(total_duration: float, count: int) -> float:
    if count <= 0:
        return 0.0
    return total_duration / count


@dataclass(frozen=True)
class RunSummary:
    wall_time: float
    stats: StatsSnapshot
    total_requests: int
    concurrency: int
    peak_in_flight: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.stats, AggregateStats):
            object.__setattr__(self, "stats", self.stats.snapshot())

    @property
    def average_duration(self) -> float:
        return average_duration(self.stats.total_duration, self.stats.count)


@dataclass
class Stats:
    total: int
    success: int
    errors: int
    mean: float | None
    std: float | None
    p50: float | None
    p90: float | None
    p95: float | None
    p99: float | None
    min: float | None
    max: float | None
    error_rate: float
    status_counts: dict[int, int]


# Metrics callback: callable accepting stats dict
MetricsCallback = Callable[[dict[str, Any]], None]

# Called by the aggregator once per folded outcome
OutcomeHook = Callable[[Outcome], None]
