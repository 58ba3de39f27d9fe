# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import ast

from borrowck.core.diagnostics import SEVERITY_ERROR, SEVERITY_WARNING, Diagnostic, DiagnosticSink
from borrowck.core.span import Span


def test_sink_formats_template_args() -> None:
	sink = DiagnosticSink(phase="borrowcheck")
	diag = sink.report(SEVERITY_ERROR, "cannot borrow '{0}' ({1})", Span(file="a.py", line=3, column=5), "data", 2, code="E_X")
	assert diag.message == "cannot borrow 'data' (2)"
	assert diag.phase == "borrowcheck"
	assert diag.code == "E_X"
	assert list(sink) == [diag]
	assert sink.has_errors()


def test_sink_warnings_are_not_errors() -> None:
	sink = DiagnosticSink()
	sink.report(SEVERITY_WARNING, "hmm", Span())
	assert len(sink) == 1
	assert not sink.has_errors()
	sink.clear()
	assert len(sink) == 0


def test_missing_span_is_normalized() -> None:
	diag = Diagnostic(message="x", span=None)  # type: ignore[arg-type]
	assert isinstance(diag.span, Span)


def test_format_human_and_json() -> None:
	diag = Diagnostic(message="boom", code="E_Y", phase="borrowcheck", span=Span(file="m.py", line=7, column=1))
	assert diag.format_human() == "m.py:7:1: error: boom"
	payload = diag.to_json()
	assert payload == {
		"phase": "borrowcheck",
		"code": "E_Y",
		"message": "boom",
		"severity": "error",
		"file": "m.py",
		"line": 7,
		"column": 1,
		"notes": [],
	}


def test_format_human_falls_back_to_source_and_unknown_location() -> None:
	diag = Diagnostic(message="boom", severity="warning")
	assert diag.format_human("x.py") == "x.py:?:?: warning: boom"
	assert diag.to_json("x.py")["file"] == "x.py"


def test_span_from_node_uses_one_based_columns() -> None:
	tree = ast.parse("x = 1\n  \nyy = f(x)\n")
	call = tree.body[1].value
	span = Span.from_node(call, "s.py")
	assert (span.file, span.line, span.column) == ("s.py", 3, 6)
	assert Span.from_node(tree, "s.py").line is None
