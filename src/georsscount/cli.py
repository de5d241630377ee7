"""Command-line entrypoint.

Responsibilities (and nothing more):
- Parse arguments and fold them into Settings
- Configure structlog
- Run the scan job or the single-archive probe
- Map run-level failures to the exit status
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from georsscount import __version__
from georsscount.config import Settings
from georsscount.document import ParsedDocument
from georsscount.errors import GeoRssCountError
from georsscount.job import run_job
from georsscount.logs import setup_logging
from georsscount.output import write_output
from georsscount.records import expand_inputs, iter_archive_records

if TYPE_CHECKING:
    from collections.abc import Sequence

log = structlog.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="georsscount",
        description="Count GeoRSS feeds and their geo tags across web-archive captures.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)

    scan = commands.add_parser("scan", help="aggregate GeoRSS metrics per URL into TSV")
    scan.add_argument("inputs", nargs="+", help="WARC files, directories or glob patterns")
    scan.add_argument("-o", "--output", help='output file, "-" for stdout')
    scan.add_argument("-w", "--workers", type=int, help="worker processes")

    probe = commands.add_parser("probe", help="list GeoRSS responses in one archive")
    probe.add_argument("input", help="a single WARC file")

    return parser


def _load_settings(args: argparse.Namespace) -> Settings:
    overrides: dict = {}
    if getattr(args, "output", None) is not None:
        overrides["output"] = {"path": args.output}
    if getattr(args, "workers", None) is not None:
        overrides["job"] = {"workers": args.workers}
    settings = Settings()
    if not overrides:
        return settings
    # Merge over the loaded sections so flags only replace what they name
    merged = settings.model_dump()
    for section, values in overrides.items():
        merged[section].update(values)
    return Settings(**merged)


def _describe_invalid(exc: ValidationError) -> str:
    problems = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    return "invalid settings: " + "; ".join(problems)


def run_scan(args: argparse.Namespace, settings: Settings) -> int:
    paths = expand_inputs(args.inputs)
    result = run_job(paths, settings)
    write_output(result.rows, settings.output.path)
    return 0


def run_probe(args: argparse.Namespace, settings: Settings) -> int:
    """Print ``url,geo_tag_count`` for every GeoRSS response in one archive."""
    processed = 0
    for record in iter_archive_records(Path(args.input)):
        processed += 1
        if not record.is_response:
            continue
        try:
            doc = ParsedDocument(record.stream, url=record.url, scan=settings.scan)
            if doc.is_georss:
                print(f"{record.url},{doc.geo_tag_count}")
        except GeoRssCountError as exc:
            log.warning("record_failed", url=record.url, **exc.to_dict())
    print(f"{processed} records processed")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        settings = _load_settings(args)
    except ValidationError as exc:
        # Exits with status 2, like any other usage error
        parser.error(_describe_invalid(exc))
    setup_logging(settings.logging)

    log.info("georsscount_starting", version=__version__, command=args.command)
    try:
        if args.command == "scan":
            return run_scan(args, settings)
        return run_probe(args, settings)
    except GeoRssCountError as exc:
        log.error("run_aborted", **exc.to_dict())
        return 1


if __name__ == "__main__":
    sys.exit(main())
