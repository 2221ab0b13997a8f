"""Command-line interface for flows2fim."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from flows2fim import __version__
from flows2fim.clean import clean_temp_artifacts, format_clean_summary
from flows2fim.doctor import run_doctor
from flows2fim.errors import Flows2FimError
from flows2fim.fim import LIBRARY_TYPES, run_fim
from flows2fim.info import format_mosaic_info, inspect_mosaic
from flows2fim.logging_utils import LogOptions, configure_logging
from flows2fim.mosaic import OUTPUT_FORMATS, VIRTUAL_FORMAT

LOGGER = logging.getLogger("flows2fim.cli")

FIM_DESCRIPTION = """\
Given a control table and a FIM library folder, create a composite flood
inundation map for the control conditions. GDAL VSI paths can be used for the
library (not for the output), given GDAL has access to cloud credentials.

FIM library specification:
- All maps share CRS, resolution, data type, vertical units and nodata value.
- Folder structure:
    <lib>/<reach_id>/z_<stage with '.' as '_'>/f_<flow>.tif
    <lib>/<reach_id>/domain.tif (optional)
"""


def _output_format(value: str) -> str:
    fmt = value.upper()
    if fmt not in OUTPUT_FORMATS:
        raise argparse.ArgumentTypeError(
            f"invalid format {value!r} (choose from {', '.join(OUTPUT_FORMATS)})"
        )
    return fmt


def _add_fim_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the fim subcommand and its arguments."""
    fim = subparsers.add_parser(
        "fim",
        help="Create a composite FIM from a control table.",
        description=FIM_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    fim.add_argument(
        "--lib",
        required=True,
        help="Directory containing the FIM library (GDAL VSI paths allowed).",
    )
    fim.add_argument("-c", "--controls", required=True, help="Path to the controls CSV file.")
    fim.add_argument("-o", "--output", required=True, help="Output FIM file path.")
    fim.add_argument(
        "--fmt",
        type=_output_format,
        default=VIRTUAL_FORMAT,
        help="Output format: VRT, COG or GTIFF (case insensitive).",
    )
    fim.add_argument(
        "--with-domain",
        "--with_domain",
        dest="with_domain",
        action="store_true",
        help="Add each reach's domain.tif behind the FIMs.",
    )
    fim.add_argument(
        "--type",
        dest="library_type",
        choices=LIBRARY_TYPES,
        help="Library type; accepted for backward compatibility and ignored.",
    )


def _add_doctor_parser(subparsers: argparse._SubParsersAction) -> None:
    subparsers.add_parser("doctor", help="Check GDAL tools and Python dependencies.")


def _add_info_parser(subparsers: argparse._SubParsersAction) -> None:
    info = subparsers.add_parser("info", help="Summarize a composite FIM.")
    info.add_argument("path", help="Mosaic to inspect.")
    info.add_argument(
        "--sample",
        action="store_true",
        help="Read a decimated band to report the share of wet cells.",
    )
    info.add_argument("--json", action="store_true", help="Print metadata as JSON.")


def _add_clean_parser(subparsers: argparse._SubParsersAction) -> None:
    clean = subparsers.add_parser(
        "clean",
        help="Remove temporary files left by interrupted runs.",
    )
    clean.add_argument("output_dir", help="Directory that received FIM outputs.")
    clean.add_argument(
        "--confirm",
        action="store_true",
        help="Delete the files instead of listing them.",
    )
    clean.add_argument(
        "--temp-dir",
        help="Also scan this scratch directory for temporary file lists and VRTs.",
    )


def _add_version_parser(subparsers: argparse._SubParsersAction) -> None:
    subparsers.add_parser("version", help="Print the flows2fim version.")


def main(argv: list[str] | None = None) -> int:
    """Run the CLI entrypoint and return an exit code."""
    parser = argparse.ArgumentParser(
        prog="flows2fim",
        description="Composite flood inundation maps from FIM libraries",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (repeatable).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce log output to warnings and errors.",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as JSON on stderr.",
    )
    parser.add_argument(
        "--log-file",
        help="Optional path for JSON log output.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_fim_parser(subparsers)
    _add_doctor_parser(subparsers)
    _add_info_parser(subparsers)
    _add_clean_parser(subparsers)
    _add_version_parser(subparsers)

    args = parser.parse_args(argv)
    log_file_value = getattr(args, "log_file", None)
    log_options = LogOptions(
        verbose=getattr(args, "verbose", 0) or 0,
        quiet=bool(getattr(args, "quiet", False)),
        log_file=Path(log_file_value) if log_file_value else None,
        json_console=bool(getattr(args, "log_json", False)),
    )
    configure_logging(log_options)

    if args.command == "version":
        print(__version__)
        return 0
    if args.command == "fim":
        try:
            result = run_fim(
                library_root=args.lib,
                controls_path=Path(args.controls),
                output_path=args.output,
                output_format=args.fmt,
                with_domain=args.with_domain,
                library_type=args.library_type,
            )
        except Flows2FimError as exc:
            LOGGER.error("%s", exc)
            return 1
        print(f"Composite FIM created at {result.output_path}")
        return 0
    if args.command == "doctor":
        results = run_doctor()
        for check in results:
            LOGGER.info("%s: %s - %s", check.name, check.status, check.detail)
        if any(check.status == "error" for check in results):
            return 1
        return 0
    if args.command == "info":
        try:
            info = inspect_mosaic(args.path, sample=args.sample)
        except Flows2FimError as exc:
            LOGGER.error("%s", exc)
            return 1
        if args.json:
            print(json.dumps(info.as_dict(), indent=2))
        else:
            for line in format_mosaic_info(info):
                print(line)
        return 0
    if args.command == "clean":
        report = clean_temp_artifacts(
            Path(args.output_dir),
            temp_dir=Path(args.temp_dir) if args.temp_dir else None,
            dry_run=not args.confirm,
        )
        for line in format_clean_summary(report):
            LOGGER.info("%s", line)
        return 0

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
