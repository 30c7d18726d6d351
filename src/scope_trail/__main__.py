"""CLI entry-point for scope_trail.

Usage:
    python -m scope_trail <path>
    python -m scope_trail <path> --json
    python -m scope_trail <path> --out report.json [--ci]
    python -m scope_trail <path> --config .scope-trail.yml [--no-inner] [--no-orphans]
    python -m scope_trail <path> --fail-on-orphans
    python -m scope_trail validate <report.json> [schema_name]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import jsonschema
import yaml

from scope_trail import __version__
from scope_trail.contracts.load import DEFAULT_SCHEMA, validate_file
from scope_trail.core.config import ScanConfig
from scope_trail.core.runner import run_scan
from scope_trail.model.report import ScanReport
from scope_trail.utils.exit_codes import ExitCode
from scope_trail.utils.json_norm import stable_json_dumps

_KNOWN_COMMANDS = {"validate"}


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Log debug output to stderr.",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )


def _build_default_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="scope-trail",
        description="Report every Rust doc comment with the scope path it lives in.",
    )
    p.add_argument(
        "path",
        type=Path,
        help="Root directory (or single .rs file) to scan.",
    )
    p.add_argument(
        "--json",
        dest="json_out",
        action="store_true",
        default=False,
        help="Print the full report JSON to stdout.",
    )
    p.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Also write the report JSON to this file.",
    )
    p.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file (default: .scope-trail.yml in the scan root).",
    )
    p.add_argument(
        "--no-inner",
        dest="include_inner",
        action="store_false",
        default=None,
        help="Skip //! inner doc comments.",
    )
    p.add_argument(
        "--no-orphans",
        dest="include_orphans",
        action="store_false",
        default=None,
        help="Skip /// blocks that document nothing.",
    )
    p.add_argument(
        "--fail-on-orphans",
        action="store_true",
        default=False,
        help="Exit 1 when any orphan doc comment is found.",
    )
    p.add_argument(
        "--ci",
        "--deterministic",
        dest="ci_mode",
        action="store_true",
        default=False,
        help="Enable deterministic output (fixed run id and timestamp).",
    )
    _add_common(p)
    return p


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="scope-trail")
    _add_common(p)
    sub = p.add_subparsers(dest="command")

    # ── validate subcommand ─────────────────────────────────────────
    val_p = sub.add_parser(
        "validate",
        help="Validate a report JSON file against the bundled schema.",
    )
    val_p.add_argument("instance", type=Path, help="Path to the JSON file to validate.")
    val_p.add_argument(
        "schema_name",
        nargs="?",
        default=DEFAULT_SCHEMA,
        help=f"Schema filename (default: {DEFAULT_SCHEMA}).",
    )
    return p


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _load_config(args: argparse.Namespace) -> ScanConfig:
    if args.config is not None:
        config = ScanConfig.from_yaml(args.config, root=args.path).with_env()
    else:
        config = ScanConfig.discover(args.path)

    changes: dict = {"ci_mode": args.ci_mode}
    if args.include_inner is not None:
        changes["include_inner"] = args.include_inner
    if args.include_orphans is not None:
        changes["include_orphans"] = args.include_orphans
    if args.out is not None:
        changes["out_path"] = args.out
    return config.replace(**changes)


def format_text(report: ScanReport) -> str:
    """One line per annotation: ``path:line: <scope>: <summary>``."""
    lines = []
    for a in report.annotations:
        scope = a.scope or "<file>"
        lines.append(f"{a.location.path}:{a.location.line_start}: {scope}: {a.summary}")
    return "\n".join(lines)


def _handle_scan(args: argparse.Namespace) -> int:
    if not args.path.exists():
        print(f"error: path does not exist: {args.path}", file=sys.stderr)
        return ExitCode.ERROR
    try:
        config = _load_config(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"error: bad config: {e}", file=sys.stderr)
        return ExitCode.ERROR
    if args.fail_on_orphans and not config.include_orphans:
        print(
            "error: --fail-on-orphans needs orphan reporting, "
            "which --no-orphans or include_orphans: false turns off",
            file=sys.stderr,
        )
        return ExitCode.ERROR

    try:
        report = run_scan(config)
    except jsonschema.ValidationError as e:
        print(f"error: report failed its schema check: {e.message}", file=sys.stderr)
        return ExitCode.ERROR
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return ExitCode.ERROR

    if args.json_out:
        sys.stdout.write(stable_json_dumps(report.to_dict()))
    else:
        text = format_text(report)
        if text:
            print(text)

    if args.fail_on_orphans and report.orphans():
        print(
            f"error: {len(report.orphans())} doc comment(s) document nothing",
            file=sys.stderr,
        )
        return ExitCode.VIOLATION
    return ExitCode.SUCCESS


def _handle_validate(args: argparse.Namespace) -> int:
    try:
        validate_file(args.instance, args.schema_name)
    except (jsonschema.ValidationError, ValueError) as e:
        # Exit code contract:
        #   1 = schema violation
        #   2 = runtime / schema not found / unexpected error
        msg = e.message if isinstance(e, jsonschema.ValidationError) else str(e)
        print(f"FAIL: {msg}", file=sys.stderr)
        return ExitCode.VIOLATION
    except OSError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return ExitCode.ERROR
    print("OK")
    return ExitCode.SUCCESS


def main(argv: list[str] | None = None) -> int:
    """Entry-point; returns an ``ExitCode``."""
    effective_argv = list(argv) if argv is not None else sys.argv[1:]

    # A first positional that is not a subcommand is the path to scan.
    first_positional = next(
        (a for a in effective_argv if not a.startswith("-")), None
    )
    if first_positional and first_positional not in _KNOWN_COMMANDS:
        args = _build_default_parser().parse_args(effective_argv)
        args.command = None
    else:
        args = _build_parser().parse_args(effective_argv)
        if args.command is None:
            _build_default_parser().print_usage(sys.stderr)
            print("error: a path to scan is required", file=sys.stderr)
            return ExitCode.ERROR

    _configure_logging(args.verbose)

    if args.command == "validate":
        return _handle_validate(args)
    return _handle_scan(args)


if __name__ == "__main__":
    sys.exit(main())
