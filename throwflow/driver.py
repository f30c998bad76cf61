# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
throwflow command-line driver.

	throwflow check FILE... [--checked standard|strict|fatal] [-P checked:NAME] [--json] [-v]

Each file is parsed with the source front end and validated independently.
Findings are printed as `file:line:col: error: message` lines on stderr, or,
with --json, as a single `{"exit_code": n, "diagnostics": [...]}` object on
stdout. Exit status is 1 if any file produced a diagnostic.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from lark.exceptions import UnexpectedInput

from throwflow.checker.config import OPTIONS_HELP, CheckedConfig, ValidatorConfig, parse_checked_option, validate_options
from throwflow.core.diagnostics import Diagnostic
from throwflow.core.span import Span
from throwflow.errors import to_diagnostics
from throwflow.frontend import FrontendError, parse_source

logger = logging.getLogger(__name__)

ENV_CHECKED = "THROWFLOW_CHECKED"


def _configure_logging(verbosity: int) -> None:
	"""0 -> WARNING, 1 -> INFO, 2+ -> DEBUG, on stderr."""
	level = logging.WARNING
	if verbosity == 1:
		level = logging.INFO
	elif verbosity >= 2:
		level = logging.DEBUG
	handler = logging.StreamHandler(sys.stderr)
	handler.setFormatter(
		logging.Formatter(
			fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
			datefmt="%H:%M:%S",
		)
	)
	root = logging.getLogger("throwflow")
	root.setLevel(level)
	root.handlers[:] = [handler]


def _checked_arg(value: str) -> CheckedConfig:
	try:
		return CheckedConfig.from_name(value)
	except ValueError as err:
		raise argparse.ArgumentTypeError(str(err)) from None


def _parse_error_diagnostic(err: UnexpectedInput, path: Path) -> Diagnostic:
	line = getattr(err, "line", None)
	column = getattr(err, "column", None)
	span = Span(file=str(path), line=line if line and line > 0 else None, column=column if column and column > 0 else None)
	message = str(err).strip().splitlines()[0] if str(err).strip() else "syntax error"
	return Diagnostic(message=message, code="SYNTAX", phase="parser", span=span)


def check_file(path: Path, config: ValidatorConfig) -> List[Diagnostic]:
	"""Parse and validate one file; parse failures become `parser` diagnostics."""
	try:
		source = path.read_text()
	except OSError as err:
		return [Diagnostic(message=f"cannot read file: {err.strerror or err}", phase="parser", span=Span(file=str(path)))]
	try:
		program = parse_source(source, file=str(path))
	except UnexpectedInput as err:
		return [_parse_error_diagnostic(err, path)]
	except FrontendError as err:
		return [Diagnostic(message=str(err), code="FRONTEND", phase="parser", span=err.span)]
	errors = program.validator(config).check(program.unit)
	logger.info("%s: %d finding(s)", path, len(errors))
	return to_diagnostics(errors)


def _build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="throwflow",
		description="Checked-exception flow validator",
		formatter_class=argparse.RawDescriptionHelpFormatter,
		epilog="plugin-style options (-P):\n" + OPTIONS_HELP,
	)
	parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v INFO, -vv DEBUG)")
	sub = parser.add_subparsers(dest="command")
	check = sub.add_parser("check", help="Validate exception flow in source files")
	check.add_argument("source", type=Path, nargs="+", help="Path(s) to source file(s)")
	check.add_argument(
		"--checked",
		type=_checked_arg,
		default=os.environ.get(ENV_CHECKED, CheckedConfig.STANDARD.value),
		help=f"Unchecked classification: standard, strict or fatal (default: ${ENV_CHECKED} or standard)",
	)
	check.add_argument(
		"-P",
		dest="plugin_options",
		action="append",
		default=[],
		metavar="OPTION",
		help="Plugin-style option, e.g. checked:strict (repeatable; the last checked: wins over --checked)",
	)
	check.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics as JSON (phase/code/message/severity/file/line/column)",
	)
	return parser


def _emit(diagnostics: List[Diagnostic], as_json: bool) -> int:
	exit_code = 1 if any(d.severity == "error" for d in diagnostics) else 0
	if as_json:
		print(json.dumps({"exit_code": exit_code, "diagnostics": [d.to_json() for d in diagnostics]}))
	else:
		for diag in diagnostics:
			print(diag.render(), file=sys.stderr)
			for note in diag.notes:
				print(f"  note: {note}", file=sys.stderr)
	return exit_code


def main(argv: Optional[List[str]] = None) -> int:
	parser = _build_parser()
	args = parser.parse_args(argv)
	_configure_logging(args.verbose)

	if args.command != "check":
		parser.print_help(sys.stderr)
		return 2

	problems = validate_options(args.plugin_options)
	if problems:
		return _emit([Diagnostic(message=p, code="OPTION", phase="options") for p in problems], args.json)

	checked = parse_checked_option(args.plugin_options) or args.checked
	config = ValidatorConfig(checked=checked)
	logger.debug("checked exception config: %s", config.checked.value)

	diagnostics: List[Diagnostic] = []
	for path in args.source:
		diagnostics.extend(check_file(path, config))
	return _emit(diagnostics, args.json)


if __name__ == "__main__":
	sys.exit(main())
