from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from timeout_guard.analyzer import Analyzer
from timeout_guard.config import ConfigError, load_config
from timeout_guard.reporting import REPORT_FORMATS, render_report, write_report

EXIT_CLEAN = 0
EXIT_ISSUES_FOUND = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="timeout-guard",
        description="Find PHP HTTP calls (Guzzle, Symfony HttpClient, cURL) without a timeout",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser("scan", help="Scan a directory or file for missing timeouts")
    scan_parser.add_argument("path", nargs="?", default=".", help="Directory or PHP file to scan")
    scan_parser.add_argument("--format", choices=REPORT_FORMATS, default="text")
    scan_parser.add_argument("--config", default=None, help="JSON config file")
    scan_parser.add_argument("--output", default=None, help="Write the report to this file instead of stdout")
    scan_parser.add_argument("--jobs", type=int, default=None, help="Number of files analyzed in parallel")
    scan_parser.add_argument(
        "--exclude-dir",
        action="append",
        default=[],
        help="Directory name to skip (repeatable)",
    )
    scan_parser.add_argument("--verbose", action="store_true", help="Log every analyzed file to stderr")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "scan":
        try:
            config = load_config(args.config)
        except ConfigError as exc:
            parser.error(str(exc))
            return EXIT_USAGE

        scan = config.scan
        if args.jobs is not None:
            if args.jobs < 1:
                parser.error("--jobs must be a positive integer")
                return EXIT_USAGE
            scan = replace(scan, jobs=args.jobs)
        if args.exclude_dir:
            scan = replace(scan, exclude_dirs=tuple(scan.exclude_dirs) + tuple(args.exclude_dir))
        config = replace(config, scan=scan)

        target = Path(args.path)
        if not target.exists():
            parser.error(f"Path does not exist: {target}")
            return EXIT_USAGE

        report = Analyzer(config).run(target)
        content = render_report(report, args.format)

        if args.output:
            write_report(args.output, content)
        else:
            sys.stdout.write(content if content.endswith("\n") else content + "\n")

        return EXIT_ISSUES_FOUND if report.issues else EXIT_CLEAN

    parser.error(f"Unsupported command: {args.command}")
    return EXIT_USAGE


if __name__ == "__main__":
    raise SystemExit(main())
