"""
Command line front end.

    histsifter [-d] [-i] [-t DELIM] [--config FILE] index.dat

Records go to stdout, diagnostics to stderr (and the rotating log file when
``--log-dir`` or ``logs_dir`` is configured).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .core.app_version import get_app_version
from .core.config import AppConfig, load_app_config, load_config_file
from .core.enums import ScanMode, TimestampFormat
from .core.logging import configure_logging, get_logger
from .extractors._shared.extraction_warnings import ExtractionWarningCollector
from .extractors.exceptions import ConfigurationError, UnopenableSourceError
from .extractors.ie_legacy.index_dat import ByteSource, decode

LOGGER = get_logger("cli")

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_UNOPENABLE = 3

EXTRACTOR_NAME = "ie_index_dat"


def _parse_delimiter(value: str) -> str:
    """Accept escaped delimiters such as ``\\t`` or ``\\x1f`` from the shell."""
    if "\\" in value:
        try:
            return value.encode("ascii").decode("unicode_escape")
        except (UnicodeEncodeError, UnicodeDecodeError):
            return value
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="histsifter",
        description="Decode Internet Explorer index.dat activity records.",
    )
    parser.add_argument("filename", type=Path, help="index.dat file to decode")
    parser.add_argument("-d", dest="deleted", action="store_true", default=None,
                        help="Undelete activity records (scan every block)")
    parser.add_argument("-t", dest="delimiter", type=_parse_delimiter, default=None,
                        help="Field delimiter (TAB by default)")
    parser.add_argument("-i", dest="iso", action="store_true", default=None,
                        help="Use ISO 8601 format for time stamps")
    parser.add_argument("-V", "--version", action="version",
                        version=f"histsifter {get_app_version()}")
    parser.add_argument("--config", type=Path, default=None,
                        help="YAML configuration file")
    parser.add_argument("--log-dir", type=Path, default=None,
                        help="Directory for the rotating processing.log")
    parser.add_argument("--log-level", type=str.upper, default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Logging level (default from config, WARNING)")
    parser.add_argument("--hide-unknown", action="store_true",
                        help="Do not print empty lines for unrecognized records")
    parser.add_argument("--warnings-jsonl", type=Path, default=None,
                        help="Write corruption warnings as JSON lines")
    return parser


def _resolve_config(args: argparse.Namespace) -> AppConfig:
    if args.config is not None:
        return load_config_file(args.config)
    return load_app_config(Path.cwd())


def main(argv: Optional[List[str]] = None, stdout: Optional[TextIO] = None) -> int:
    args = build_parser().parse_args(argv)
    out = stdout if stdout is not None else sys.stdout

    try:
        config = _resolve_config(args)
    except ConfigurationError as exc:
        configure_logging()
        LOGGER.error("%s", exc)
        return EXIT_CONFIG_ERROR

    configure_logging(
        args.log_dir or config.logs_dir,
        level=(args.log_level or config.logging.level).upper(),
        max_bytes=config.logging.log_max_mb * 1024 * 1024,
        backup_count=config.logging.log_backup_count,
    )
    LOGGER.debug("Resolved configuration: %s", config.to_json())

    decoding = config.decoding
    mode = ScanMode.DELETED if args.deleted else decoding.scan_mode
    timestamp_format = TimestampFormat.ISO8601 if args.iso else decoding.timestamp_format
    delimiter = args.delimiter if args.delimiter is not None else decoding.delimiter
    include_unknown = decoding.include_unknown and not args.hide_unknown

    collector = ExtractionWarningCollector(
        extractor_name=EXTRACTOR_NAME, source_file=str(args.filename),
    )

    try:
        source = ByteSource.open(args.filename)
    except UnopenableSourceError as exc:
        LOGGER.error("%s", exc)
        return EXIT_UNOPENABLE

    LOGGER.info("History File: %s (mode=%s, format=%s)", args.filename, mode, timestamp_format)
    with source:
        stream = decode(
            source, mode, timestamp_format, delimiter,
            warnings=collector, max_hash_blocks=decoding.max_hash_blocks,
        )
        written = stream.write(out, include_unknown=include_unknown)

    LOGGER.info("Wrote %d records, %d warnings", written, collector.count)
    if args.warnings_jsonl is not None:
        collector.write_jsonl(args.warnings_jsonl)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
