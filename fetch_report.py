#!/usr/bin/env python3
import argparse
import logging
import sys
from typing import Dict, List, Optional

from fetchreport.config import DEFAULT_USER_AGENT, EXPECTED_SHAPES, FetchConfig
from fetchreport.fetcher import Fetcher, Reporter
from fetchreport.prometheus_exporter import PrometheusExporter
from fetchreport.storage import OutcomeLog


def parse_header(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"header must look like 'Name: value', got {raw!r}")
    return name.strip(), value.strip()


def positive_float(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number of seconds, got {raw!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {raw}")
    return value


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch JSON documents and report the parsed value or the failure.")
    parser.add_argument("urls", nargs="+", metavar="url", help="One or more locators to fetch.")
    parser.add_argument("--expect", choices=EXPECTED_SHAPES, default=None, help="Required top-level JSON shape.")
    parser.add_argument("--timeout", type=positive_float, default=None, help="Read timeout in seconds (default: none).")
    parser.add_argument("--connect-timeout", type=positive_float, default=None, help="Connect timeout in seconds (default: none).")
    parser.add_argument(
        "--header",
        dest="headers",
        action="append",
        type=parse_header,
        default=[],
        help="Extra request header as 'Name: value'. Repeatable.",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header to send.")
    parser.add_argument("--concurrency", type=int, default=4, help="Number of concurrent fetches.")
    parser.add_argument("--out", dest="output_path", default=None, help="Append outcome records to this JSONL file.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase logging verbosity.")
    parser.add_argument("--prometheus-port", type=int, default=0, help="Expose Prometheus metrics on this port (0 disables).")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    log_level = logging.WARNING
    if args.verbose == 1:
        log_level = logging.INFO
    elif args.verbose >= 2:
        log_level = logging.DEBUG
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(threadName)s %(message)s",
    )

    headers: Dict[str, str] = dict(args.headers)
    config = FetchConfig(
        user_agent=args.user_agent,
        connect_timeout=args.connect_timeout,
        read_timeout=args.timeout,
        concurrency=max(1, args.concurrency),
        max_connections=max(1, args.concurrency),
        expect=args.expect,
        headers=headers,
        output_path=args.output_path,
    )

    outcome_log = OutcomeLog(config.output_path) if config.output_path else None
    reporter = Reporter(outcome_log=outcome_log)
    fetcher = Fetcher(config)

    exporter = None
    try:
        if args.prometheus_port > 0:
            exporter = PrometheusExporter(fetcher.metrics, port=args.prometheus_port)
            exporter.start()
            logging.info("Prometheus metrics available at http://0.0.0.0:%d/metrics", args.prometheus_port)
        outcomes = fetcher.fetch_all(args.urls)
        for outcome in outcomes:
            reporter.report(outcome)
    finally:
        fetcher.close()
        if exporter:
            exporter.stop()
        if outcome_log:
            outcome_log.close()

    totals, elapsed = fetcher.metrics.snapshot()
    logging.info(
        "Finished. requests=%d, successes=%d, failures=%d, elapsed=%.2fs",
        totals.requests,
        totals.successes,
        totals.failures,
        elapsed,
    )
    return 0 if all(o.ok for o in outcomes) else 1


if __name__ == "__main__":
    sys.exit(main())
