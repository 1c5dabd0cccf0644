import math
import logging
from collections.abc import Callable
from .models import AggregateStats, Stats, StatsSnapshot, average_duration

logger = logging.getLogger(__name__)


def compute_stats(
    stats: AggregateStats | StatsSnapshot,
    metrics_callback: Callable[[dict], None] | None = None,
) -> Stats:
    """Derive latency statistics over every outcome, failures included."""
    total = stats.count
    errors = stats.failures
    success = total - errors
    logger.debug(f"Computing stats: total={total}, success={success}, errors={errors}")

    latencies = stats.durations
    n = len(latencies)
    if not total or n == 0:
        stats_dict = {
            "total": total,
            "success": success,
            "errors": errors,
            "mean": None,
            "std": None,
            "p50": None,
            "p90": None,
            "p95": None,
            "p99": None,
            "min": None,
            "max": None,
            "error_rate": errors / total if total else 0.0,
            "status_counts": dict(stats.status_counts),
        }
        if metrics_callback:
            metrics_callback(stats_dict)
        logger.info("No requests recorded. Returning empty stats.")
        return Stats(**stats_dict)

    mean = average_duration(stats.total_duration, total)
    sum_sq = sum(x * x for x in latencies)
    std = math.sqrt(max(0.0, (sum_sq / n) - (mean * mean)))

    sl = sorted(latencies)

    def pct(p):
        return sl[max(0, min(n - 1, int(p * (n - 1))))]

    stats_dict = {
        "total": total,
        "success": success,
        "errors": errors,
        "mean": mean,
        "std": std,
        "p50": pct(0.50),
        "p90": pct(0.90),
        "p95": pct(0.95),
        "p99": pct(0.99),
        "min": sl[0],
        "max": sl[-1],
        "error_rate": errors / total,
        "status_counts": dict(stats.status_counts),
    }

    if metrics_callback:
        metrics_callback(stats_dict)

    logger.debug(
        f"Stats computed: success={success}, errors={errors}, "
        f"mean={mean:.3f}s, p95={stats_dict['p95']:.3f}s"
    )

    return Stats(**stats_dict)
