"""
Quick sanity run: a burst of GETs against a local endpoint.
Run: uv run examples/stress_local.py
"""
import asyncio
import os

from httpstress import RequestDispatcher, StressConfig, render_report


async def main():
    config = StressConfig.create(
        url=os.getenv("STRESS_URL", "http://localhost:8000/"),
        method="GET",
        total_requests=50,
        concurrency=5,
        headers={"Accept": "application/json"},
        request_timeout_s=float(os.getenv("HTTP_REQUEST_TIMEOUT_S", "10")),
    )
    summary = await RequestDispatcher.from_config(config).run()
    print("\n" + render_report(summary))

if __name__ == "__main__":
    asyncio.run(main())
