#!/usr/bin/env python3
# cli.py — command-line front end for httpstress

import argparse
import asyncio
import logging

from httpstress.config import StressConfig, parse_headers
from httpstress.core import RequestDispatcher
from httpstress.errors import ConfigError
from httpstress.logging_config import setup_logging
from httpstress.models import ALLOWED_METHODS
from httpstress.rendering import render_report, render_latency_histogram

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="httpstress",
        description=(
            "Stress test an HTTP API: send a number of requests at a fixed "
            "concurrency and report status codes and latencies."
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # Target
    parser.add_argument("-u", "--url", default="", help="Target URL (required)")
    parser.add_argument(
        "-X",
        "--method",
        default="GET",
        help=f"HTTP method: {', '.join(ALLOWED_METHODS)}",
    )
    parser.add_argument("-d", "--body", default="", help="Request body (for POST, PUT, PATCH)")
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        dest="headers",
        metavar="'KEY: VALUE'",
        help="Request header, may be repeated",
    )

    # Load shape
    parser.add_argument("-r", "--requests", type=int, default=10, help="Number of requests")
    parser.add_argument(
        "-c", "--concurrency", type=int, default=1, help="Number of concurrent requests"
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=int,
        default=0,
        help="Seconds a slot stays busy after its request completes",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds (HTTP client default when unset)",
    )

    # Output
    parser.add_argument(
        "--no-progress", action="store_true", help="Disable the progress bar"
    )
    parser.add_argument(
        "--histogram-bins",
        type=int,
        default=20,
        help="Bins in the latency histogram (0 disables it)",
    )

    # Logging & Debugging
    parser.add_argument("--debug", action="store_true", help="Enable debug-level logging")
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional file to write logs to (e.g., httpstress.log)",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> StressConfig:
    return StressConfig.create(
        url=args.url,
        method=args.method,
        total_requests=args.requests,
        concurrency=args.concurrency,
        interval_s=args.interval,
        body=args.body,
        headers=parse_headers(args.headers),
        request_timeout_s=args.timeout,
    )


async def run(args: argparse.Namespace) -> int:
    try:
        config = build_config(args)
    except ConfigError as e:
        logging.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG_ERROR

    print("Starting stress test...")
    print(
        f"URL: {config.url}, Method: {config.method}, "
        f"Requests: {config.total_requests}, Concurrency: {config.concurrency}"
    )
    if config.body:
        print(f"Body: {config.body}")

    dispatcher = RequestDispatcher.from_config(
        config, use_progress_bar=not args.no_progress
    )
    summary = await dispatcher.run()

    print("\n" + render_report(summary))
    if args.histogram_bins > 0:
        print()
        print(render_latency_histogram(summary.stats.durations, args.histogram_bins))
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    log_level = "DEBUG" if args.debug else "INFO"
    setup_logging(level=log_level, log_file=args.log_file)

    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
