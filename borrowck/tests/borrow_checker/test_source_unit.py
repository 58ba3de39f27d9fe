# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import ast

from borrowck.checker.borrow_checker import VarKind
from borrowck.checker.parser import parse_file, parse_source


def _names(unit, ident: str):
	return [n for n in ast.walk(unit.tree) if isinstance(n, ast.Name) and n.id == ident and isinstance(n.ctx, ast.Store)]


def test_parent_lookup() -> None:
	unit, diags = parse_source("x = Unique(1)\n", "p.py")
	assert diags == []
	assign = unit.tree.body[0]
	call = assign.value
	assert unit.parent_of(call) is assign
	assert unit.parent_of(assign) is unit.tree
	assert unit.parent_of(unit.tree) is None


def test_with_item_is_a_parent() -> None:
	unit, _ = parse_source("with Unique(1) as o:\n\tpass\n")
	item = unit.tree.body[0].items[0]
	assert isinstance(unit.parent_of(item.context_expr), ast.withitem)


def test_same_name_in_different_blocks_gets_distinct_keys() -> None:
	src = """
data = Unique(1)
if True:
	data = Unique(2)
"""
	unit, _ = parse_source(src, "k.py")
	outer, inner = _names(unit, "data")
	k_outer = unit.decl_key(outer, kind=VarKind.GLOBAL)
	k_inner = unit.decl_key(inner)
	assert k_outer != k_inner
	assert (k_outer.line, k_outer.column) == (2, 1)
	assert (k_inner.line, k_inner.column) == (4, 2)
	assert k_inner.name == "data"
	assert k_outer.kind is VarKind.GLOBAL
	# Stable for the same node.
	assert unit.decl_key(outer) == k_outer


def test_span_of_node() -> None:
	unit, _ = parse_source("a = 1\nb = f(a)\n", "s.py")
	span = unit.span(unit.tree.body[1].value)
	assert (span.file, span.location()) == ("s.py", "2:5")


def test_parse_file_reads_utf8(tmp_path) -> None:
	path = tmp_path / "ok.py"
	path.write_text("name = 'żółw'\n", encoding="utf-8")
	unit, diags = parse_file(path)
	assert diags == []
	assert unit.file == str(path)


def test_unreadable_file_is_a_parser_diagnostic(tmp_path) -> None:
	unit, diags = parse_file(tmp_path / "missing.py")
	assert unit is None
	(diag,) = diags
	assert diag.code == "E_READ"
	assert diag.phase == "parser"
	assert diag.message.startswith("cannot read source: ")
