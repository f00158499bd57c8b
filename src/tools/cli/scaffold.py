"""Command line entry point for daily puzzle unit scaffolding."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Dict, List

from contracts.errors import ScaffoldError
from scaffold import workflow
from scaffold.settings import CLI_PREFIX, ENTRY_MODES, ScaffoldSettings, build_env, resolve_settings

_CONFIG_ENV = "PUZZLE_SCAFFOLD_CONFIG"
_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _cli_overrides(args: argparse.Namespace) -> Dict[str, str]:
    env: Dict[str, str] = {}
    for attr, suffix in (
        ("units_root", "UNITS_ROOT"),
        ("templates_dir", "TEMPLATES_DIR"),
        ("shared_lib", "SHARED_LIB"),
        ("entry_mode", "ENTRY_MODE"),
        ("package_manager", "PACKAGE_MANAGER"),
        ("journal_dir", "JOURNAL_DIR"),
    ):
        value = getattr(args, attr, None)
        if value is not None:
            env[CLI_PREFIX + suffix] = str(value)
    for attr, suffix in (("with_dependency", "REGISTER_DEPENDENCY"), ("rollback", "ROLLBACK")):
        value = getattr(args, attr, None)
        if value is not None:
            env[CLI_PREFIX + suffix] = "1" if value else "0"
    return env


def _settings(args: argparse.Namespace) -> ScaffoldSettings:
    return resolve_settings(args.config, build_env(_cli_overrides(args)))


def _print_report(verb: str, report: workflow.PrepareReport) -> None:
    print(f"{verb} {report.unit.name} at {report.unit}")
    for outcome in report.outcomes:
        detail = f" ({outcome.detail})" if outcome.detail else ""
        print(f"  {outcome.name}: {outcome.status}{detail}")


def cmd_prepare(args: argparse.Namespace) -> int:
    report = workflow.prepare(args.id, _settings(args))
    _print_report("Prepared", report)
    return 0


def cmd_install(args: argparse.Namespace) -> int:
    report = workflow.install(args.id, _settings(args))
    _print_report("Installed templates into", report)
    return 0


def cmd_test(args: argparse.Namespace) -> int:
    return workflow.run_unit_tests(args.id, _settings(args))


def cmd_run(args: argparse.Namespace) -> int:
    return workflow.run_unit(args.id, _settings(args), input_name=args.input)


def cmd_list(args: argparse.Namespace) -> int:
    units = workflow.list_units(_settings(args))
    print(json.dumps([unit.as_dict() for unit in units], indent=2, sort_keys=True))
    return 0


def _overrides_parser() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        default=os.environ.get(_CONFIG_ENV),
        help=f"Path to the TOML configuration (defaults to ${_CONFIG_ENV} or the bundled config.toml).",
    )
    parent.add_argument("--units-root", dest="units_root", help="Directory holding the units.")
    parent.add_argument("--templates-dir", dest="templates_dir", help="Directory holding the templates.")
    parent.add_argument("--shared-lib", dest="shared_lib", help="Shared library registered as a path dependency.")
    parent.add_argument("--package-manager", dest="package_manager", help="Package manager backend name.")
    parent.add_argument("--journal-dir", dest="journal_dir", help="Directory for the JSONL step journal.")
    parent.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity.")
    return parent


def _add_mutation_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--entry-mode",
        dest="entry_mode",
        choices=ENTRY_MODES,
        help="Copy the entry template (default) or hard link it.",
    )
    parser.add_argument(
        "--with-dependency",
        dest="with_dependency",
        action="store_true",
        help="Register the shared library as a local path dependency.",
    )
    parser.add_argument(
        "--without-dependency",
        dest="with_dependency",
        action="store_false",
        help="Skip dependency registration explicitly.",
    )
    parser.add_argument(
        "--rollback",
        dest="rollback",
        action="store_true",
        help="Undo completed steps when a later step fails.",
    )
    parser.add_argument(
        "--no-rollback",
        dest="rollback",
        action="store_false",
        help="Leave partial state on disk after a failure.",
    )
    parser.set_defaults(with_dependency=None, rollback=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="puzzle-scaffold",
        description="Scaffold and test daily puzzle units.",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    common = _overrides_parser()

    prepare = sub.add_parser("prepare", parents=[common], help="Create a unit and install its templates")
    prepare.add_argument("id", help="Puzzle identifier, e.g. 07")
    _add_mutation_flags(prepare)
    prepare.set_defaults(func=cmd_prepare)

    install = sub.add_parser("install", parents=[common], help="Install templates into an existing unit")
    install.add_argument("id")
    _add_mutation_flags(install)
    install.set_defaults(func=cmd_install)

    test = sub.add_parser("test", parents=[common], help="Run the unit's test suite")
    test.add_argument("id")
    test.set_defaults(func=cmd_test)

    run = sub.add_parser("run", parents=[common], help="Run the unit against a data file")
    run.add_argument("id")
    run.add_argument("--input", default=None, help="Data file inside the unit (default: first data file)")
    run.set_defaults(func=cmd_run)

    listing = sub.add_parser("list", parents=[common], help="List scaffolded units as JSON")
    listing.set_defaults(func=cmd_list)

    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=_LOG_FORMAT)


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    try:
        return args.func(args)
    except ScaffoldError as exc:
        step = exc.step or args.command
        print(f"error [{step}]: {exc}", file=sys.stderr)
        return exc.exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
