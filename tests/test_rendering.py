from httpstress.metrics import compute_stats
from httpstress.models import FAILURE_STATUS, AggregateStats, Outcome, RunSummary
from httpstress.rendering import render_latency_histogram, render_report


def make_summary(statuses, duration=0.01):
    stats = AggregateStats()
    for index, status in enumerate(statuses):
        stats.record(Outcome(index=index, status=status, duration=duration))
    return RunSummary(
        wall_time=1.5, stats=stats, total_requests=len(statuses), concurrency=2, peak_in_flight=2
    )


def test_histogram_empty():
    assert "No latency data" in render_latency_histogram([])


def test_histogram_single_value():
    assert "single value" in render_latency_histogram([0.2, 0.2])


def test_histogram_counts_every_sample():
    text = render_latency_histogram([0.1, 0.2, 0.3, 0.4], bins=2)
    assert text.startswith("Latency Histogram")
    assert "(2)" in text


def test_report_orders_status_codes():
    summary = make_summary([503, FAILURE_STATUS, 200, 404, 201, 200, FAILURE_STATUS])
    lines = render_report(summary).splitlines()

    assert "Status code 200: 2 response(s)" in lines
    others = [line.strip() for line in lines if line.startswith("  ")]
    assert others == [
        "Status code 201: 1 response(s)",
        "Status code 404: 1 response(s)",
        "Status code 503: 1 response(s)",
        "Failed requests: 2",
    ]


def test_report_is_deterministic_across_insertion_order():
    a = make_summary([500, 200, FAILURE_STATUS, 302])
    b = make_summary([FAILURE_STATUS, 302, 200, 500])
    assert render_report(a) == render_report(b)


def test_report_shows_zero_successes():
    text = render_report(make_summary([FAILURE_STATUS, FAILURE_STATUS]))
    assert "Status code 200: 0 response(s)" in text
    assert "Failed requests: 2" in text
    assert "Error rate: 100.0%" in text


def test_report_average_response_time():
    text = render_report(make_summary([200, 200], duration=0.25))
    assert "Average response time: 250.00ms" in text
    assert "Total requests: 2" in text


def test_compute_stats_empty():
    stats = compute_stats(AggregateStats())
    assert stats.total == 0
    assert stats.mean is None
    assert stats.error_rate == 0.0


def test_compute_stats_percentiles():
    agg = AggregateStats()
    for i in range(1, 101):
        agg.record(Outcome(index=i, status=200 if i <= 90 else FAILURE_STATUS, duration=i / 1000))
    stats = compute_stats(agg)
    assert stats.success == 90
    assert stats.errors == 10
    assert stats.min == 0.001
    assert stats.max == 0.1
    assert stats.p50 == 0.05
    assert abs(stats.mean - 0.0505) < 1e-9
    assert stats.error_rate == 0.1
