from .metrics import compute_stats
from .models import FAILURE_STATUS, RunSummary

SUCCESS_STATUS = 200


def _ms(seconds: float | None) -> str:
    if seconds is None:
        return "n/a"
    return f"{seconds * 1000:.2f}ms"


def render_report(summary: RunSummary) -> str:
    """Render a run summary. Identical stats always give identical text."""
    counts = summary.stats.status_counts
    lines = [
        "--- Summary Report ---",
        f"Total time: {summary.wall_time:.3f}s",
        f"Total requests: {summary.total_requests}",
        f"Concurrency: {summary.concurrency} (peak in flight: {summary.peak_in_flight})",
        f"Average response time: {_ms(summary.average_duration)}",
        f"Status code {SUCCESS_STATUS}: {counts.get(SUCCESS_STATUS, 0)} response(s)",
    ]

    others = sorted(c for c in counts if c not in (SUCCESS_STATUS, FAILURE_STATUS))
    if others or FAILURE_STATUS in counts:
        lines.append("Requests with other status codes:")
        for code in others:
            lines.append(f"  Status code {code}: {counts[code]} response(s)")
        if FAILURE_STATUS in counts:
            lines.append(f"  Failed requests: {counts[FAILURE_STATUS]}")

    stats = compute_stats(summary.stats)
    lines.append(
        f"Latency: min={_ms(stats.min)} p50={_ms(stats.p50)} p90={_ms(stats.p90)} "
        f"p95={_ms(stats.p95)} p99={_ms(stats.p99)} max={_ms(stats.max)} std={_ms(stats.std)}"
    )
    lines.append(f"Error rate: {stats.error_rate * 100:.1f}%")
    return "\n".join(lines)


def render_latency_histogram(latencies: list[float], bins: int = 20) -> str:
    if not latencies:
        return "No latency data."
    lo, hi = min(latencies), max(latencies)
    if hi <= lo:
        return f"Histogram: single value {lo:.4f}s"

    width = 40
    counts = [0] * bins
    for x in latencies:
        j = int((x - lo) / (hi - lo) * bins)
        if j == bins:
            j -= 1
        counts[j] += 1

    peak = max(counts)
    lines = []
    for i, c in enumerate(counts):
        left = lo + (hi - lo) * (i / bins)
        right = lo + (hi - lo) * ((i + 1) / bins)
        bar = "#" * max(1, int((c / peak) * width)) if c else ""
        lines.append(f"{left:.3f}s - {right:.3f}s | {bar} ({c})")
    return "Latency Histogram\n" + "\n".join(lines)
