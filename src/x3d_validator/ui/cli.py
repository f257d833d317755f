"""Command-line interface router for x3d-validator."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from x3d_validator import __version__
from x3d_validator.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
)
from x3d_validator.config.schema import LOG_LEVELS, REPORT_FORMATS
from x3d_validator.doctype import DoctypeChecker, DoctypeUsageError
from x3d_validator.domain.errors import InputUnreadableError
from x3d_validator.domain.models import Document
from x3d_validator.observability import setup_logging, shutdown_logging
from x3d_validator.pipeline import create_pipeline, render_html
from x3d_validator.scanning import ValuesRegexChecker
from x3d_validator.ui.render import CLIRenderer, create_renderer


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="x3d-validator",
        description=(
            "x3d-validator — diagnostic checks for X3D scenes and HTML pages embedding them.\n\n"
            "Common workflows:\n"
            "  x3d-validator validate scene.x3d          Run every validation stage\n"
            "  x3d-validator doctype scene.x3d -f        Reset the DOCTYPE to final\n"
            "  x3d-validator values scene.x3d            Report malformed numeric values\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to TOML config (default: ./x3d_validator.toml if present).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        "-verbose",
        action="store_true",
        default=False,
        help="Show detailed output.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )
    common.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Log level for diagnostics written to stderr.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # validate ------------------------------------------------------------
    validate_parser = subparsers.add_parser(
        "validate",
        parents=[common],
        help="Run the full validation pipeline on a scene",
        description=(
            "Run well-formedness, DOCTYPE, DTD, schema, Schematron, conversion and\n"
            "value checks, printing one numbered report.\n\n"
            "Examples:\n"
            "  x3d-validator validate scene.x3d\n"
            "  x3d-validator validate page.html --format html > report.html\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    validate_parser.add_argument("path", help="Scene (.x3d) or HTML page to validate")
    validate_parser.add_argument(
        "--format",
        choices=REPORT_FORMATS,
        default=None,
        help="Report format (default: from config, text).",
    )
    validate_parser.add_argument(
        "--json", action="store_true", help="Emit per-stage results as JSON"
    )
    validate_parser.add_argument(
        "--allow-network",
        action="store_true",
        default=False,
        help="Allow DTD and schema loading to fetch remote resources.",
    )
    validate_parser.add_argument(
        "--schema", default=None, help="Local XML Schema (.xsd) used for schema validation."
    )
    validate_parser.add_argument(
        "--stylesheet-dir", default=None, help="Directory holding the X3D stylesheets."
    )
    validate_parser.set_defaults(handler=_cmd_validate)

    # doctype -------------------------------------------------------------
    doctype_parser = subparsers.add_parser(
        "doctype",
        parents=[common],
        help="Check the XML prolog and DOCTYPE, optionally rewriting it",
        description=(
            "Classify the DOCTYPE declaration of a scene and optionally convert it\n"
            "between the final and transitional families in place.\n\n"
            "Examples:\n"
            "  x3d-validator doctype scene.x3d\n"
            "  x3d-validator doctype scene.x3d --set-final\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    doctype_parser.add_argument("path", help="Scene file to check")
    doctype_parser.add_argument(
        "-f",
        "--set-final",
        "-setFinalDTD",
        dest="set_final",
        action="store_true",
        help="Rewrite a transitional DOCTYPE to the final one.",
    )
    doctype_parser.add_argument(
        "-t",
        "--set-transitional",
        "-setTransitionalDTD",
        dest="set_transitional",
        action="store_true",
        help="Rewrite a final DOCTYPE to the transitional one.",
    )
    doctype_parser.set_defaults(handler=_cmd_doctype)

    # values --------------------------------------------------------------
    values_parser = subparsers.add_parser(
        "values",
        parents=[common],
        help="Report malformed floats and leading-zero numbers",
    )
    values_parser.add_argument("path", help="Scene file to scan")
    values_parser.set_defaults(handler=_cmd_values)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show the effective configuration",
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    finally:
        shutdown_logging()
    return int(result)


def main(argv: Sequence[str] | None = None) -> int:
    """Compatibility wrapper for main-module wiring."""

    return run_cli(argv)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_validate(args: argparse.Namespace) -> int:
    config = _prepare(args, _validate_overrides(args))
    pipeline = create_pipeline(config, verbose=_flag(args, "verbose") or None)
    try:
        report = pipeline.run(args.path)
    except InputUnreadableError as exc:
        raise CLIError(str(exc), exit_code=3) from exc

    renderer = _get_renderer(args)
    if _flag(args, "json"):
        _emit_json(report.to_dict())
    elif config["report"]["format"] == "html":
        renderer.report(render_html(report))
    else:
        renderer.report(report.text)
    return 0


def _cmd_doctype(args: argparse.Namespace) -> int:
    _prepare(args, {})
    try:
        checker = DoctypeChecker(
            set_final=_flag(args, "set_final"),
            set_transitional=_flag(args, "set_transitional"),
            verbose=_flag(args, "verbose"),
        )
    except DoctypeUsageError as exc:
        raise CLIError(str(exc), exit_code=2) from exc

    try:
        outcome = checker.process_path(args.path)
    except InputUnreadableError as exc:
        raise CLIError(str(exc), exit_code=3) from exc

    renderer = _get_renderer(args)
    target = checker.requested_target
    if target is not None:
        renderer.text(f"set {target.value} X3D DTD: {Path(args.path).name}")
    renderer.report(outcome.log)
    if _flag(args, "verbose"):
        renderer.kv("declaration", outcome.variant.label())
        if outcome.written:
            renderer.ok("file rewritten")
    return 0


def _cmd_values(args: argparse.Namespace) -> int:
    _prepare(args, {})
    try:
        document = Document.load(args.path)
    except InputUnreadableError as exc:
        raise CLIError(str(exc), exit_code=3) from exc

    scan = ValuesRegexChecker(document).scan()
    renderer = _get_renderer(args)
    if scan.finding_count:
        renderer.report(scan.render())
    elif _flag(args, "verbose"):
        renderer.ok(f"no numeric value anomalies found in {document.name}")
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    config = _prepare(args, {})
    renderer = _get_renderer(args)
    renderer.text(json.dumps(json.loads(dump_effective_config(config)), indent=2, sort_keys=True))
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _prepare(args: argparse.Namespace, overrides: dict[str, object]) -> dict[str, Any]:
    overrides = {**overrides, "observability.log_level": getattr(args, "log_level", None)}
    config = _load_effective_config(args, overrides)
    setup_logging(config["observability"])
    structlog.get_logger(__name__).debug("config_loaded", command=args.command)
    return config


def _load_effective_config(
    args: argparse.Namespace, overrides: dict[str, object]
) -> dict[str, Any]:
    config_path = _optional_str(getattr(args, "config_path", None))
    try:
        return load_config(config_path, cli_overrides=overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _validate_overrides(args: argparse.Namespace) -> dict[str, object]:
    overrides: dict[str, object] = {
        "report.format": getattr(args, "format", None),
        "validation.allow_network": True if _flag(args, "allow_network") else None,
        "validation.schema_path": _absolute(getattr(args, "schema", None)),
        "transforms.stylesheet_dir": _absolute(getattr(args, "stylesheet_dir", None)),
    }
    if _flag(args, "verbose"):
        overrides["report.verbose"] = True
    return overrides


def _absolute(path_arg: object) -> str | None:
    text = _optional_str(path_arg)
    if text is None:
        return None
    return Path(text).expanduser().resolve().as_posix()


def _optional_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=_flag(args, "no_color"), verbose=_flag(args, "verbose"))


def _emit_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))


__all__ = ["CLIError", "build_parser", "main", "run_cli"]
