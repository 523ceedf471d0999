#!/usr/bin/env python3
"""
Font Name Tool

Reads the name table of font files and prints the full font name (or any
other name string), independent of how the operating system labels the font.

Usage:
    fontname <subcommand> [options] FILES...

Subcommands:
    full    Full font name (nameID 4) of each font
    name    Any name identifier (--name-id N)
    dump    Every name record of each font
    raw     Resolve a name from raw name table dumps

Examples:
    fontname full ~/Fonts/ -r
    fontname name Inter.ttc --font-number 2 --name-id 1 --prefer "3,1;1,0"
    fontname full Broken.woff2 --backend fonttools --json
    fontname dump MyFont.otf --preset windows
    fontname raw name.bin --name-id 6

Exit status:
    0   every input resolved
    1   at least one input failed or had no matching record
    2   usage or configuration error
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import FontNameCore.core_console_styles as cs
from FontNameCore.core_config import (
    BACKEND_CHOICES,
    ConfigError,
    ExtractorConfig,
    load_config,
)
from FontNameCore.core_error_handling import (
    ErrorContext,
    ErrorInfo,
    ErrorTracker,
    NameNotFoundError,
    NameTableError,
    SourceUnavailableError,
)
from FontNameCore.core_file_collector import (
    RAW_TABLE_EXTENSIONS,
    collect_font_files,
    is_collection,
    missing_inputs,
)
from FontNameCore.core_font_names import (
    RAW_BACKEND,
    ResolvedName,
    list_font_names,
    resolve_font_name,
)
from FontNameCore.core_logging_config import (
    HandlerAPI,
    Verbosity,
    get_logger,
    print_summary,
    reset_metrics,
    setup_logging,
)
from FontNameCore.core_name_record import (
    NAME_ID_FULL_NAME,
    PLATFORM_NAMES,
    describe_name_id,
)
from FontNameCore.core_record_selection import (
    PRESETS,
    SelectionPolicy,
    parse_preference,
)

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _preference_arg(text: str):
    try:
        return parse_preference(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _u16_arg(text: str) -> int:
    try:
        value = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: '{text}'") from None
    if not 0 <= value <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"{value} does not fit in 16 bits")
    return value


def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("files", nargs="+", help="Font files or directories")

    selection = common.add_argument_group("record selection")
    selection.add_argument(
        "--prefer",
        type=_preference_arg,
        metavar="PAIRS",
        help='Platform/encoding pairs in priority order, e.g. "3,1;1,0"',
    )
    selection.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        help="Named preference list (default: default)",
    )
    selection.add_argument(
        "--ranked",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Honor preference order before on-disk record order "
        "(default: on for presets, off for --prefer)",
    )
    selection.add_argument(
        "--language",
        type=_u16_arg,
        metavar="LANG_ID",
        help="Only accept records with this language ID (e.g. 0x409)",
    )

    source = common.add_argument_group("table source")
    source.add_argument(
        "--backend",
        choices=BACKEND_CHOICES,
        help="How to read the font file (default: auto)",
    )
    source.add_argument(
        "--font-number",
        type=int,
        metavar="N",
        help="Font index inside a .ttc/.otc collection",
    )

    output = common.add_argument_group("output")
    output.add_argument(
        "--recursive",
        "-r",
        action="store_true",
        default=None,
        help="Process directories recursively",
    )
    output.add_argument(
        "--json",
        action="store_true",
        default=None,
        help="Print structured results and errors as JSON",
    )
    output.add_argument("--config", metavar="PATH", help="TOML configuration file")
    output.add_argument(
        "--verbose", "-v", action="store_true", help="Show more detail"
    )
    output.add_argument(
        "--quiet", "-q", action="store_true", help="Only show errors"
    )
    output.add_argument("--debug", action="store_true", help="Debug logging")
    return common


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="fontname",
        description="Read font names straight from the font's name table",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fontname full ~/Fonts/ -r
  fontname name Inter.ttc --font-number 2 --name-id 1 --prefer "3,1;1,0"
  fontname dump MyFont.otf --preset windows
  fontname raw name.bin --name-id 6 --json
        """,
    )
    subparsers = parser.add_subparsers(dest="subcommand", help="Available subcommands")
    common = _common_options()

    subparsers.add_parser(
        "full", parents=[common], help="Full font name (nameID 4) of each font"
    )

    name_parser = subparsers.add_parser(
        "name", parents=[common], help="Any name identifier"
    )
    name_parser.add_argument(
        "--name-id", "-n", type=_u16_arg, help="Name identifier (default: 4)"
    )

    subparsers.add_parser("dump", parents=[common], help="Every name record")

    raw_parser = subparsers.add_parser(
        "raw", parents=[common], help="Resolve a name from raw name table dumps"
    )
    raw_parser.add_argument(
        "--name-id", "-n", type=_u16_arg, help="Name identifier (default: 4)"
    )
    return parser


def _verbosity(args: argparse.Namespace) -> Verbosity:
    if args.debug:
        return Verbosity.DEBUG
    if args.quiet:
        return Verbosity.QUIET
    if args.verbose:
        return Verbosity.VERBOSE
    return Verbosity.BRIEF


def build_config(args: argparse.Namespace) -> ExtractorConfig:
    """
    File configuration with command-line flags applied on top.

    Raises:
        ConfigError: unreadable/invalid file or conflicting values
    """
    config = load_config(args.config)
    prefer = tuple(tuple(p) for p in args.prefer) if args.prefer else None
    config = config.merged(
        name_id=getattr(args, "name_id", None),
        preset=args.preset,
        prefer=prefer,
        ranked=args.ranked,
        language_id=args.language,
        backend=args.backend,
        font_number=args.font_number,
        json=args.json,
        recursive=args.recursive,
    )
    if args.subcommand == "full" and config.name_id != NAME_ID_FULL_NAME:
        logger.debug(f"'full' ignores name_id={config.name_id} from the config")
        config = config.merged(name_id=NAME_ID_FULL_NAME)
    return config


def _collect_inputs(files: List[str], recursive: bool, raw: bool) -> List[str]:
    if not raw:
        return collect_font_files(files, recursive=recursive)
    # Named dump files are taken whatever their extension
    explicit = [str(Path(f).resolve()) for f in files if Path(f).is_file()]
    directories = [f for f in files if Path(f).is_dir()]
    found = collect_font_files(
        directories, recursive=recursive, allowed_extensions=RAW_TABLE_EXTENSIONS
    )
    return sorted(set(explicit + found))


_SELECTION_FIELDS = ("preset", "prefer", "ranked", "language_id")


def _selection_configured(config: ExtractorConfig) -> bool:
    defaults = ExtractorConfig()
    return any(
        getattr(config, field) != getattr(defaults, field)
        for field in _SELECTION_FIELDS
    )


class NameRunner:
    """Resolves names for a batch of files and reports each outcome."""

    def __init__(
        self,
        config: ExtractorConfig,
        policy: SelectionPolicy,
        handler: HandlerAPI,
        backend: str,
    ):
        self.config = config
        self.policy = policy
        self.handler = handler
        self.backend = backend
        self.tracker = ErrorTracker()
        self.json_records: List[Dict[str, Any]] = []
        self.json_errors: List[Dict[str, Any]] = []
        self.failed = 0

    def record_error(self, path: str, error: NameTableError) -> None:
        self.failed += 1
        info = self.tracker.add_from_exception(None, error, filepath=path)
        self.json_errors.append(info.to_dict())
        if self.config.json:
            self.handler.metrics.increment("errors")
        else:
            self.handler.error(str(error), filename=path)

    def _record_missing(self, path: str, error: NameNotFoundError) -> None:
        self.failed += 1
        info = ErrorInfo.from_exception(None, error, filepath=path)
        self.json_errors.append(info.to_dict())
        if self.config.json:
            self.handler.metrics.increment("not_found")
        else:
            self.handler.not_found(path, str(error))

    def _record_resolved(self, path: str, result: ResolvedName) -> None:
        self.json_records.append(result.to_dict())
        if self.config.json:
            self.handler.metrics.increment("resolved")
            self.handler.metrics.track_backend(result.backend)
        else:
            self.handler.resolved(
                path, self.config.name_id, result.text, result.backend
            )

    def resolve(self, path: str) -> None:
        if not self.config.json:
            self.handler.parsing(path)
        try:
            result = resolve_font_name(
                path,
                self.config.name_id,
                self.policy,
                backend=self.backend,
                font_number=self.config.font_number,
            )
        except NameNotFoundError as e:
            self._record_missing(path, e)
        except NameTableError as e:
            self.record_error(path, e)
        else:
            self._record_resolved(path, result)

    def dump(self, path: str, policy: Optional[SelectionPolicy]) -> None:
        try:
            entries = list_font_names(
                path,
                policy,
                backend=self.backend,
                font_number=self.config.font_number,
            )
        except NameTableError as e:
            self.record_error(path, e)
            return

        self.handler.metrics.increment("resolved")
        if entries:
            self.handler.metrics.track_backend(entries[0].backend)
        if self.config.json:
            self.json_records.extend(entry.to_dict() for entry in entries)
            return
        _print_dump(path, entries)


def _print_dump(path: str, entries: List[ResolvedName]) -> None:
    table = cs.create_table(title=Path(path).name)
    if table is None:
        cs.emit(f"=== {Path(path).name} ===")
        for entry in entries:
            record = entry.record
            text = entry.text if entry.ok else f"<{entry.error.kind}>"
            cs.emit(
                f"{record.platform_id},{record.encoding_id} "
                f"0x{record.language_id:04x} {record.name_id:>5}  {text}"
            )
        return

    table.add_column("#", justify="right")
    table.add_column("Platform")
    table.add_column("Lang", justify="right")
    table.add_column("nameID", justify="right")
    table.add_column("Description")
    table.add_column("String", overflow="fold")
    for entry in entries:
        record = entry.record
        platform = PLATFORM_NAMES.get(record.platform_id, str(record.platform_id))
        text = (
            cs.fmt_value(entry.text)
            if entry.ok
            else cs.fmt_value(f"<{entry.error.kind}>", "error")
        )
        table.add_row(
            str(record.index),
            f"{platform} ({cs.fmt_pair(record.platform_id, record.encoding_id)})",
            f"0x{record.language_id:04x}",
            str(record.name_id),
            describe_name_id(record.name_id),
            text,
        )
    cs.get_console().print(table)


def _print_json(runner: NameRunner) -> None:
    payload = {
        "name_id": runner.config.name_id,
        "preference": str(runner.policy),
        "results": runner.json_records,
        "errors": runner.json_errors,
    }
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")


def run(args: argparse.Namespace) -> int:
    """Execute a parsed command line; returns the exit status."""
    verbosity = _verbosity(args)
    _, handler, _ = setup_logging(verbosity)
    metrics = reset_metrics()

    try:
        config = build_config(args)
        policy = config.policy()
    except ConfigError as e:
        cs.StatusIndicator("error").add_message("Configuration").with_explanation(
            str(e)
        ).emit()
        return EXIT_USAGE

    raw = args.subcommand == "raw"
    backend = RAW_BACKEND if raw else config.backend
    runner = NameRunner(config, policy, handler, backend)

    for missing in missing_inputs(args.files):
        runner.record_error(
            missing,
            SourceUnavailableError(
                f"No such file or directory: {missing}",
                context=ErrorContext.FILE_IO,
                path=missing,
            ),
        )

    files = _collect_inputs(args.files, config.recursive, raw)
    if not files and not runner.failed:
        handler.warning("No font files found")
        return EXIT_FAILED

    logger.info(f"Processing {len(files)} file(s) with policy [{policy}]")
    if config.font_number and not raw:
        for path in files:
            if is_collection(path):
                continue
            message = f"font number {config.font_number} ignored, not a collection"
            if config.json:
                logger.warning(f"{path}: {message}")
            else:
                handler.warning(message, filename=path)

    if args.subcommand == "dump":
        # Without selection options (flags or config) every record is listed
        explicit = args.preset is not None or _selection_configured(config)
        dump_policy = policy if explicit else None
        for path in files:
            runner.dump(path, dump_policy)
    else:
        for path in files:
            runner.resolve(path)

    if config.json:
        _print_json(runner)
    else:
        if len(files) > 1:
            print_summary(metrics)
        if verbosity >= Verbosity.VERBOSE:
            runner.tracker.print_summary()

    return EXIT_FAILED if runner.failed else EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.subcommand:
        parser.print_help()
        return EXIT_USAGE

    return run(args)


if __name__ == "__main__":
    sys.exit(main())
