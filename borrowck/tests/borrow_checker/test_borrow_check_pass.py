#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-19
"""
Borrow-check pass: conflict detection, owner recognition, tracking and reset.
"""

from __future__ import annotations

from borrowck.checker.borrow_checker_pass import (
	NOT_TRACKED_CODE,
	TOO_DEEP_CODE,
	BorrowCheckOptions,
	BorrowCheckPass,
	BorrowOp,
)
from borrowck.core.borrow_rules import LoanKind


def _check(src: str, **opts):
	return BorrowCheckPass(BorrowCheckOptions(**opts)).check_source(src, "t.py")


def _codes(src: str, **opts):
	return [d.code for d in _check(src, **opts)]


def test_exclusive_after_shared_is_reported_at_the_call() -> None:
	src = """
x = Unique(1)
a = x.borrow()
b = x.borrow_mut()
"""
	diags = _check(src)
	assert len(diags) == 1
	diag = diags[0]
	assert diag.code == "E_BORROW_EXCLUSIVE_OF_SHARED"
	assert diag.message == "cannot take exclusive borrow of 'x' while it is borrowed (1 shared borrow(s) active)"
	assert (diag.span.file, diag.span.line, diag.span.column) == ("t.py", 4, 5)
	assert diag.format_human() == f"t.py:4:5: error: {diag.message}"


def test_many_shared_borrows_are_fine() -> None:
	src = """
x = Unique(1)
a = x.borrow()
b = x.borrow()
c = x.borrow()
"""
	assert _check(src) == []


def test_every_violation_is_reported() -> None:
	src = """
x = Unique(1)
m = x.borrow_mut()
a = x.borrow()
b = x.borrow()
c = x.borrow_mut()
"""
	assert _codes(src) == [
		"E_BORROW_SHARED_OF_EXCLUSIVE",
		"E_BORROW_SHARED_OF_EXCLUSIVE",
		"E_BORROW_EXCLUSIVE_OF_EXCLUSIVE",
	]


def test_refused_borrow_does_not_change_state() -> None:
	src = """
x = Unique(1)
a = x.borrow()
m = x.borrow_mut()
m2 = x.borrow_mut()
"""
	diags = _check(src)
	assert [d.code for d in diags] == ["E_BORROW_EXCLUSIVE_OF_SHARED"] * 2
	assert all("(1 shared borrow(s) active)" in d.message for d in diags)


def test_shared_count_in_message() -> None:
	src = """
x = Unique(1)
a = x.borrow()
b = x.borrow()
m = x.borrow_mut()
"""
	(diag,) = _check(src)
	assert diag.message.endswith("(2 shared borrow(s) active)")


def test_function_parameter_is_not_tracked() -> None:
	src = """
def f(x):
	return x.borrow()
"""
	(diag,) = _check(src)
	assert diag.code == NOT_TRACKED_CODE
	assert diag.severity == "warning"
	assert not diag.is_error
	assert diag.message == "variable 'x' is not being tracked"
	assert _check(src, report_untracked=False) == []


def test_parameter_hides_tracked_global() -> None:
	src = """
x = Unique(1)
m = x.borrow_mut()
def f(x):
	return x.borrow()
s = x.borrow()
"""
	assert _codes(src) == [NOT_TRACKED_CODE, "E_BORROW_SHARED_OF_EXCLUSIVE"]


def test_rebinding_to_non_owner_drops_tracking() -> None:
	src = """
x = Unique(1)
x = 5
x.borrow()
y = Unique(2)
y += 1
y.borrow_mut()
"""
	assert _codes(src) == [NOT_TRACKED_CODE, NOT_TRACKED_CODE]


def test_rebinding_to_new_owner_starts_fresh() -> None:
	src = """
x = Unique(1)
m = x.borrow_mut()
x = Unique(2)
s = x.borrow()
"""
	assert _check(src) == []


def test_deleted_name_is_not_tracked() -> None:
	src = """
x = Unique(1)
del x
x.borrow()
"""
	assert _codes(src) == [NOT_TRACKED_CODE]


def test_parallel_assignment_tracks_each_owner() -> None:
	src = """
a, b = Unique(1), Unique(2)
ma = a.borrow_mut()
mb = b.borrow_mut()
sa = a.borrow()
sb = b.borrow()
"""
	diags = _check(src)
	assert [d.code for d in diags] == ["E_BORROW_SHARED_OF_EXCLUSIVE"] * 2
	assert ["'a'" in diags[0].message, "'b'" in diags[1].message] == [True, True]


def test_starred_or_chained_targets_are_not_tracked() -> None:
	src = """
a, *rest = Unique(1), Unique(2)
a.borrow()
p = q = Unique(3)
p.borrow()
"""
	assert _codes(src) == [NOT_TRACKED_CODE, NOT_TRACKED_CODE]


def test_walrus_annotated_and_with_item_declarations() -> None:
	src = """
(w := Unique(1))
mw = w.borrow_mut()
sw = w.borrow()
o: Unique[int] = Unique(2)
mo = o.borrow_mut()
so = o.borrow()
with Unique(3) as v:
	mv = v.borrow_mut()
	sv = v.borrow()
"""
	diags = _check(src)
	assert [d.code for d in diags] == ["E_BORROW_SHARED_OF_EXCLUSIVE"] * 3
	assert [d.span.line for d in diags] == [4, 7, 10]


def test_owner_spellings_are_recognized() -> None:
	src = """
import borrowck.runtime as rt
from borrowck.runtime import Unique as U
a = U(1)
b = rt.Unique(2)
c = Unique[int](3)
ma = a.borrow_mut()
mb = b.borrow_mut()
mc = c.borrow_mut()
sa = a.borrow()
sb = b.borrow()
sc = c.borrow()
"""
	assert _codes(src) == ["E_BORROW_SHARED_OF_EXCLUSIVE"] * 3


def test_custom_owner_types() -> None:
	src = """
b = Box(1)
m = b.borrow_mut()
s = b.borrow()
u = Unique(2)
u.borrow()
"""
	assert _codes(src, owner_types=("Box",)) == ["E_BORROW_SHARED_OF_EXCLUSIVE", NOT_TRACKED_CODE]


def test_temporaries_and_non_name_receivers_are_ignored() -> None:
	src = """
Unique(1).borrow()
consume(Unique(2))
holder.item.borrow()
"""
	assert _check(src) == []


def test_borrow_inside_call_arguments_is_seen() -> None:
	src = """
x = Unique(1)
m = x.borrow_mut()
print(len([x.borrow()]))
"""
	assert _codes(src) == ["E_BORROW_SHARED_OF_EXCLUSIVE"]


def test_lambda_and_comprehension_targets_are_not_tracked() -> None:
	src = """
f = lambda x: x.borrow()
views = [o.borrow() for o in owners]
"""
	assert _codes(src) == [NOT_TRACKED_CODE, NOT_TRACKED_CODE]


def test_comprehension_body_sees_enclosing_owner() -> None:
	src = """
o = Unique(1)
m = o.borrow_mut()
views = [o.borrow() for _ in range(3)]
"""
	assert _codes(src) == ["E_BORROW_SHARED_OF_EXCLUSIVE"]


def test_pass_instance_resets_between_runs() -> None:
	src = """
x = Unique(1)
a = x.borrow()
b = x.borrow_mut()
"""
	checker = BorrowCheckPass()
	first = checker.check_source(src, "a.py")
	second = checker.check_source(src, "a.py")
	assert [d.code for d in first] == [d.code for d in second] == ["E_BORROW_EXCLUSIVE_OF_SHARED"]
	assert checker.check_source("y = Unique(1)\ny.borrow()\n", "b.py") == []
	assert checker.diagnostics == []


def test_parse_failure_becomes_parser_diagnostic() -> None:
	(diag,) = BorrowCheckPass().check_source("x = (\n", "bad.py")
	assert diag.code == "E_PARSE"
	assert diag.phase == "parser"
	assert diag.is_error
	assert diag.span.file == "bad.py"
	assert diag.span.line == 1
	assert diag.message.startswith("syntax error: ")


def test_pass_args_are_accepted() -> None:
	checker = BorrowCheckPass()
	assert checker.parse_args(["-anything", "goes"])
	assert checker.args == ["-anything", "goes"]


def test_borrow_ops_map_to_loan_kinds() -> None:
	assert BorrowOp("borrow").loan_kind is LoanKind.SHARED
	assert BorrowOp("borrow_mut").loan_kind is LoanKind.EXCLUSIVE


def test_long_expression_chain_is_checked() -> None:
	src = "x = Unique(1)\nm = x.borrow_mut()\ny = x.borrow().n + " + " + ".join(["1"] * 1500) + "\n"
	diags = _check(src)
	assert [(d.code, d.span.line) for d in diags] == [("E_BORROW_SHARED_OF_EXCLUSIVE", 3)]


def test_runaway_nesting_becomes_a_diagnostic(monkeypatch) -> None:
	def _boom(self, ctx, node):
		raise RecursionError

	monkeypatch.setattr(BorrowCheckPass, "_visit_special", _boom)
	(diag,) = _check("x = 1\n")
	assert diag.code == TOO_DEEP_CODE
	assert diag.is_error
	assert diag.span.file == "t.py"


def test_conflict_note_names_the_declaration() -> None:
	src = """
g = Unique(1)
def f():
	loc = Unique(2)
	a = loc.borrow()
	b = loc.borrow_mut()
m = g.borrow_mut()
s = g.borrow()
"""
	diags = _check(src)
	assert [d.notes for d in diags] == [
		["'loc' is declared at t.py:4:2 (local)"],
		["'g' is declared at t.py:2:1 (module-level)"],
	]


def test_for_target_subexpressions_are_visited() -> None:
	src = """
x = Unique(1)
m = x.borrow_mut()
for slots[x.borrow()] in items:
	pass
"""
	assert _codes(src) == ["E_BORROW_SHARED_OF_EXCLUSIVE"]
