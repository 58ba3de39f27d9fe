# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-19
"""
borrowck CLI: run a registered checker pass over Python source files.

  borrowck src/app.py src/util.py
  borrowck --json --no-untracked src/app.py

Each file is parsed and checked independently. Human-readable diagnostics go
to stderr as `file:line:col: severity: message`; with --json a single
`{"exit_code": ..., "diagnostics": [...]}` object is printed to stdout.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Tuple

# Importing the pass module registers it.
from borrowck.checker.borrow_checker_pass import DEFAULT_OWNER_TYPES, PASS_NAME, BorrowCheckOptions
from borrowck.checker.parser import parse_file
from borrowck.checker.pass_registry import REGISTRY
from borrowck.core.diagnostics import Diagnostic

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="borrowck", description="Static borrow checking for borrowck ownership handles")
	p.add_argument("source", type=Path, nargs="+", help="Path(s) to Python source file(s)")
	p.add_argument(
		"--pass",
		dest="pass_name",
		default=PASS_NAME,
		help=f"Checker pass to run (default: {PASS_NAME})",
	)
	p.add_argument(
		"--pass-arg",
		dest="pass_args",
		action="append",
		default=[],
		help="Argument forwarded to the pass (repeatable)",
	)
	p.add_argument(
		"--owner-type",
		dest="owner_types",
		action="append",
		help=f"Owner class name to track (repeatable; default: {', '.join(DEFAULT_OWNER_TYPES)})",
	)
	p.add_argument(
		"--no-untracked",
		dest="report_untracked",
		action="store_false",
		help="Do not warn about borrows through names that are not tracked owners",
	)
	p.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics as JSON (phase/code/message/severity/file/line/column)",
	)
	p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
	return p


def main(argv: list[str] | None = None) -> int:
	"""
	Parse and check every source file, then report.

	Exit code is 1 when any error-severity diagnostic (parser or pass) was
	produced, 0 otherwise; warnings alone do not fail the run.
	"""
	parser = _build_parser()
	args = parser.parse_args(argv)
	if args.verbose:
		logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

	if args.pass_name not in REGISTRY:
		parser.error(f"unknown pass '{args.pass_name}' (available: {', '.join(REGISTRY.names())})")

	options = BorrowCheckOptions(
		owner_types=tuple(args.owner_types) if args.owner_types else DEFAULT_OWNER_TYPES,
		report_untracked=args.report_untracked,
	)
	checker = REGISTRY.create(args.pass_name, options=options, args=args.pass_args)
	logger.debug("%s is running", args.pass_name)

	results: List[Tuple[Path, Diagnostic]] = []
	for source_path in args.source:
		unit, diags = parse_file(source_path)
		if unit is not None:
			diags = diags + checker.run(unit)
		results.extend((source_path, d) for d in diags)

	exit_code = 1 if any(d.is_error for _, d in results) else 0
	if args.json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [d.to_json(path) for path, d in results],
		}
		print(json.dumps(payload))
	else:
		for path, d in results:
			print(d.format_human(path), file=sys.stderr)
	return exit_code


__all__ = ["main"]
