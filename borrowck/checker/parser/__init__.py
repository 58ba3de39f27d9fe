# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-19
"""
Python source front end for the checker.

Parses source with the standard `ast` module and wraps the tree in a
`SourceUnit` (parent lookup + declaration identity). Parse failures are
returned as parser-phase diagnostics instead of being raised, so callers can
report them alongside later pass output.
"""

from __future__ import annotations

import ast
from pathlib import Path
from typing import List, Optional, Tuple

from borrowck.checker.parser.source_unit import SourceUnit
from borrowck.core.diagnostics import Diagnostic
from borrowck.core.span import Span


def parse_source(text: str, file: str = "<string>") -> Tuple[Optional[SourceUnit], List[Diagnostic]]:
	"""Parse `text` into a SourceUnit; on a syntax error return (None, [diagnostic])."""
	try:
		tree = ast.parse(text, filename=file)
	except SyntaxError as err:
		span = Span(file=file, line=err.lineno, column=err.offset, raw=err)
		return None, [Diagnostic(message=f"syntax error: {err.msg}", code="E_PARSE", phase="parser", span=span)]
	except ValueError as err:
		# Older interpreters reject NUL bytes with ValueError instead of SyntaxError.
		return None, [Diagnostic(message=f"syntax error: {err}", code="E_PARSE", phase="parser", span=Span(file=file))]
	return SourceUnit(file=file, text=text, tree=tree), []


def parse_file(path: Path) -> Tuple[Optional[SourceUnit], List[Diagnostic]]:
	"""Read and parse a UTF-8 source file."""
	try:
		text = path.read_text(encoding="utf-8")
	except (OSError, UnicodeDecodeError) as err:
		span = Span(file=str(path))
		return None, [Diagnostic(message=f"cannot read source: {err}", code="E_READ", phase="parser", span=span)]
	return parse_source(text, str(path))


__all__ = ["SourceUnit", "parse_source", "parse_file"]
