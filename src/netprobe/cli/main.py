# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""netprobe CLI."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from typing import Any

from ..config import HttpSettings, load_http_settings
from ..errors import BatchInputError, DiagnosticError, NetProbeError
from ..http import create_default_http_client
from ..log import setup_logging
from ..models import BatchResult, Failure, Measurement, ProbeOutcome
from ..models.outcome import DownloadStats, HttpFetchStats, LatencyStats
from ..runtime import NetProbe

EXIT_OK = 0
EXIT_PROBE_FAILED = 1
EXIT_INPUT_ERROR = 2


def _ms_to_seconds(value: int | None) -> float | None:
    if value is None or value <= 0:
        return None
    return value / 1000.0


def _read_targets(positional: Sequence[str], targets_file: str | None) -> list[str]:
    targets = [item for item in positional if item.strip()]
    if targets_file:
        try:
            with open(targets_file, encoding="utf-8") as handle:
                targets.extend(line.strip() for line in handle if line.strip() and not line.lstrip().startswith("#"))
        except OSError as exc:
            raise BatchInputError(f"cannot read {targets_file}: {exc}") from exc
    return targets


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="netprobe network diagnostics (ping, tcp, http, throughput)")
    parser.add_argument("--json", action="store_true", help="Output JSON instead of human-friendly summary")
    parser.add_argument("--log-level", default=None, help="Logging level (default from NETPROBE_LOG_LEVEL)")
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (useful for lab/self-signed targets)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    ping = sub.add_parser("ping", help="ICMP echo with TCP fallback to port 80")
    ping.add_argument("host")
    ping.add_argument("--count", type=int, default=None)
    ping.add_argument("--timeout-ms", type=int, default=None)

    tcping = sub.add_parser("tcping", help="TCP connect check")
    tcping.add_argument("host")
    tcping.add_argument("--port", type=int, default=None)
    tcping.add_argument("--count", type=int, default=None)
    tcping.add_argument("--timeout-ms", type=int, default=None)

    fetch = sub.add_parser("fetch", help="Single HTTP GET with optional keyword search")
    fetch.add_argument("url")
    fetch.add_argument("--keyword", default=None)
    fetch.add_argument("--timeout-ms", type=int, default=None)

    speed = sub.add_parser("speed", help="HTTP download throughput test")
    speed.add_argument("url")
    speed.add_argument("--duration-s", type=float, default=None)

    bulk_ping = sub.add_parser("bulk-ping", help="Ping many hosts concurrently")
    bulk_ping.add_argument("hosts", nargs="*")
    bulk_ping.add_argument("--hosts-file", default=None, help="File with one host per line")
    bulk_ping.add_argument("--count", type=int, default=None)
    bulk_ping.add_argument("--timeout-ms", type=int, default=None)
    bulk_ping.add_argument("--concurrency", type=int, default=None)

    bulk_http = sub.add_parser("bulk-http", help="Fetch many URLs concurrently")
    bulk_http.add_argument("urls", nargs="*")
    bulk_http.add_argument("--urls-file", default=None, help="File with one URL per line")
    bulk_http.add_argument("--keyword", default=None)
    bulk_http.add_argument("--timeout-ms", type=int, default=None)
    bulk_http.add_argument("--concurrency", type=int, default=None)

    trace = sub.add_parser("traceroute", help="Run the system traceroute")
    trace.add_argument("host")
    trace.add_argument("--max-hops", type=int, default=None)
    trace.add_argument("--timeout-ms", type=int, default=None)

    dns = sub.add_parser("dns", help="Resolve A, MX, NS or TXT records")
    dns.add_argument("host")
    dns.add_argument("--type", dest="record_type", default="A")
    return parser


def _print_json(data: dict[str, Any] | Any) -> None:
    payload = data.to_dict() if hasattr(data, "to_dict") else data
    json.dump(payload, sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _fmt_ms(value: float | None) -> str:
    return "-" if value is None else f"{value:.1f}"


def _describe(outcome: ProbeOutcome) -> str:
    if isinstance(outcome, Failure):
        return f"FAILED [{outcome.category.value}] {outcome.cause}"
    stats = outcome.stats
    if isinstance(stats, LatencyStats):
        return (
            f"{outcome.method} sent={stats.packets_sent} recv={stats.packets_recv} "
            f"loss={stats.packet_loss:.1f}% rtt min/avg/max/stddev="
            f"{_fmt_ms(stats.min_rtt_ms)}/{_fmt_ms(stats.avg_rtt_ms)}/{_fmt_ms(stats.max_rtt_ms)}/{_fmt_ms(stats.stddev_ms)} ms"
        )
    if isinstance(stats, HttpFetchStats):
        keyword = " keyword=yes" if stats.has_keyword else ""
        return f"{outcome.method} status={stats.status_code} bytes={stats.bytes_read} time={stats.duration_ms:.0f}ms{keyword}"
    if isinstance(stats, DownloadStats):
        return (
            f"{outcome.method} status={stats.status_code} bytes={stats.bytes_downloaded} "
            f"time={stats.seconds:.2f}s throughput={stats.throughput_bps / 1_000_000:.2f} Mbit/s"
        )
    return str(outcome)


def _pretty_print(label: str, result: ProbeOutcome | BatchResult | Any) -> None:
    if isinstance(result, BatchResult):
        print(f"[netprobe] {result.method}: {len(result.succeeded)}/{len(result)} succeeded")
        for entry in result:
            print(f"- {entry.target}: {_describe(entry.outcome)}")
        return
    if isinstance(result, (Measurement, Failure)):
        print(f"[netprobe] {label}: {_describe(result)}")
        return
    payload = result.to_dict() if hasattr(result, "to_dict") else result
    if isinstance(payload, dict) and "output" in payload:
        print(payload["output"].rstrip())
        return
    print(payload)


def _run(args: argparse.Namespace, probe: NetProbe) -> tuple[str, Any]:
    timeout = _ms_to_seconds(getattr(args, "timeout_ms", None))
    if args.command == "ping":
        return args.host, probe.ping(args.host, count=args.count, timeout=timeout)
    if args.command == "tcping":
        return args.host, probe.tcping(args.host, port=args.port, count=args.count, timeout=timeout)
    if args.command == "fetch":
        return args.url, probe.fetch(args.url, keyword=args.keyword, timeout=timeout)
    if args.command == "speed":
        duration = args.duration_s if args.duration_s and args.duration_s > 0 else None
        return args.url, probe.speed_test(args.url, duration=duration)
    if args.command == "bulk-ping":
        hosts = _read_targets(args.hosts, args.hosts_file)
        return "bulk-ping", probe.bulk_ping(hosts, count=args.count, timeout=timeout, concurrency=args.concurrency)
    if args.command == "bulk-http":
        urls = _read_targets(args.urls, args.urls_file)
        return "bulk-http", probe.bulk_http(urls, keyword=args.keyword, timeout=timeout, concurrency=args.concurrency)
    if args.command == "traceroute":
        return args.host, probe.traceroute(args.host, max_hops=args.max_hops, timeout=timeout)
    return args.host, probe.dns(args.host, args.record_type)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    settings: HttpSettings = load_http_settings()
    if args.ignore_ssl_errors:
        settings.verify_ssl = False

    http_client = create_default_http_client(settings)

    try:
        with NetProbe(http_client=http_client) as probe:
            label, result = _run(args, probe)
    except DiagnosticError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_PROBE_FAILED
    except (NetProbeError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    if args.json:
        _print_json(result)
    else:
        _pretty_print(label, result)

    if isinstance(result, Failure):
        return EXIT_PROBE_FAILED
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
