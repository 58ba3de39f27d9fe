#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-19
"""
Borrow-check pass: predict runtime ownership violations from Python source.

Scope:
- Tracks variables initialized from an owner construction (`x = Unique(...)`),
  keyed by declaration position.
- Applies the shared/exclusive rules to `x.borrow()` / `x.borrow_mut()` calls
  against the innermost scope's state.
- Every statement suite is a scope horizon; a whole `with` statement is one
  horizon, so `with x.borrow() as v:` ends the borrow with the block. Leaving
  a horizon restores the full table snapshot taken on entry (no merge).
- No control flow: branches and loops run once, straight-line. No aliasing,
  no borrows escaping through containers or return values, no cross-function
  tracking.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

from borrowck.checker.borrow_checker import BorrowStateTable, VarKey, VarKind
from borrowck.checker.parser import parse_source
from borrowck.checker.parser.source_unit import SourceUnit
from borrowck.checker.pass_registry import REGISTRY
from borrowck.core.borrow_rules import BorrowConflict, LoanKind
from borrowck.core.diagnostics import SEVERITY_ERROR, SEVERITY_WARNING, Diagnostic, DiagnosticSink

logger = logging.getLogger(__name__)

PASS_NAME = "borrow-check"
PHASE = "borrowcheck"

DEFAULT_OWNER_TYPES: Tuple[str, ...] = ("Unique",)


class BorrowOp(Enum):
	"""Borrow-producing owner methods recognized by the pass."""

	SHARED = "borrow"
	EXCLUSIVE = "borrow_mut"

	@property
	def loan_kind(self) -> LoanKind:
		return LoanKind.SHARED if self is BorrowOp.SHARED else LoanKind.EXCLUSIVE


_BORROW_OPS: Dict[str, BorrowOp] = {op.value: op for op in BorrowOp}

# `try ... except*` (3.11+) shares the Try layout.
_TRY_NODES: Tuple[type, ...] = (ast.Try,) + ((ast.TryStar,) if hasattr(ast, "TryStar") else ())

NOT_TRACKED_CODE = "W_BORROW_NOT_TRACKED"
NOT_TRACKED_TEMPLATE = "variable '{0}' is not being tracked"

TOO_DEEP_CODE = "E_BORROW_TOO_DEEP"
TOO_DEEP_TEMPLATE = "source is nested too deeply to borrow-check"

_CONFLICT_DIAGS: Dict[BorrowConflict, Tuple[str, str]] = {
	BorrowConflict.SHARED_OF_EXCLUSIVE: (
		"E_BORROW_SHARED_OF_EXCLUSIVE",
		"cannot take shared borrow of '{0}' while it is exclusively borrowed",
	),
	BorrowConflict.EXCLUSIVE_OF_SHARED: (
		"E_BORROW_EXCLUSIVE_OF_SHARED",
		"cannot take exclusive borrow of '{0}' while it is borrowed ({1} shared borrow(s) active)",
	),
	BorrowConflict.EXCLUSIVE_OF_EXCLUSIVE: (
		"E_BORROW_EXCLUSIVE_OF_EXCLUSIVE",
		"cannot take exclusive borrow of '{0}' while it is already exclusively borrowed",
	),
}

_KIND_LABELS: Dict[VarKind, str] = {
	VarKind.GLOBAL: "module-level",
	VarKind.LOCAL: "local",
}
_DECLARED_NOTE = "'{0}' is declared at {1} ({2})"


@dataclass
class BorrowCheckOptions:
	"""
	Pass configuration.

	- owner_types: class names whose construction starts tracking a variable.
	  `from m import Unique as U` aliases are picked up per unit.
	- report_untracked: emit W_BORROW_NOT_TRACKED for borrows through names
	  that are not bound to a tracked owner.
	"""

	owner_types: Tuple[str, ...] = DEFAULT_OWNER_TYPES
	report_untracked: bool = True


@dataclass
class BorrowContext:
	"""
	Working state of one pass over one unit.

	Created fresh per run, cleared explicitly before the walk, dropped after.
	The binding environment (name -> VarKey) is snapshotted together with the
	borrow-state table so a name resolves to the innermost visible declaration.
	"""

	unit: SourceUnit
	sink: DiagnosticSink
	owner_names: FrozenSet[str] = frozenset()
	table: BorrowStateTable = field(default_factory=BorrowStateTable)
	bindings: Dict[str, VarKey] = field(default_factory=dict)
	binding_snapshots: List[Dict[str, VarKey]] = field(default_factory=list)
	declared: Set[ast.Name] = field(default_factory=set)
	frame_depth: int = 0

	def enter_scope(self) -> None:
		self.table.enter_scope()
		self.binding_snapshots.append(dict(self.bindings))

	def exit_scope(self) -> None:
		self.table.exit_scope()
		if self.binding_snapshots:
			self.bindings = self.binding_snapshots.pop()

	def unbind(self, names: Iterable[str]) -> None:
		for name in names:
			self.bindings.pop(name, None)

	def clear(self) -> None:
		self.sink.clear()
		self.table.clear()
		self.bindings.clear()
		self.binding_snapshots.clear()
		self.declared.clear()
		self.frame_depth = 0


def _param_names(args: ast.arguments) -> List[str]:
	names = [a.arg for a in args.posonlyargs + args.args + args.kwonlyargs]
	if args.vararg is not None:
		names.append(args.vararg.arg)
	if args.kwarg is not None:
		names.append(args.kwarg.arg)
	return names


def _pattern_names(pattern: ast.AST) -> List[str]:
	names: List[str] = []
	for node in ast.walk(pattern):
		if isinstance(node, (ast.MatchAs, ast.MatchStar)) and node.name:
			names.append(node.name)
		elif isinstance(node, ast.MatchMapping) and node.rest:
			names.append(node.rest)
	return names


def _direct_declaration(parent: Optional[ast.AST], child: ast.AST) -> Optional[ast.Name]:
	"""The name declared by `parent` when `child` is its initializer."""
	if isinstance(parent, ast.Assign):
		if parent.value is child and len(parent.targets) == 1 and isinstance(parent.targets[0], ast.Name):
			return parent.targets[0]
		return None
	if isinstance(parent, ast.AnnAssign):
		if parent.value is child and isinstance(parent.target, ast.Name):
			return parent.target
		return None
	if isinstance(parent, ast.NamedExpr):
		return parent.target if parent.value is child else None
	if isinstance(parent, ast.withitem):
		if parent.context_expr is child and isinstance(parent.optional_vars, ast.Name):
			return parent.optional_vars
	return None


@REGISTRY.register(PASS_NAME, "Rust-like borrow checking analysis")
@dataclass
class BorrowCheckPass:
	"""
	Static borrow checker over a parsed Python unit.

	Diagnostics from the last `run` are kept in `diagnostics`; all other
	working state lives in a per-run `BorrowContext`.
	"""

	options: Optional[BorrowCheckOptions] = None
	args: List[str] = field(default_factory=list)
	diagnostics: List[Diagnostic] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.options is None:
			self.options = BorrowCheckOptions()
		self._owner_types: FrozenSet[str] = frozenset(self.options.owner_types)

	def parse_args(self, args: Sequence[str]) -> bool:
		# No pass arguments are defined; accept and keep them for logging.
		self.args = list(args)
		return True

	# --- entry points ---------------------------------------------------

	def run(self, unit: SourceUnit) -> List[Diagnostic]:
		"""Check one unit and return its diagnostics (all findings, never stops early)."""
		ctx = BorrowContext(
			unit=unit,
			sink=DiagnosticSink(phase=PHASE),
			owner_names=self._owner_names_for(unit),
		)
		ctx.clear()
		logger.debug("running %s on %s (args=%r)", PASS_NAME, unit.file, self.args)
		try:
			for stmt in unit.tree.body:
				self._visit(ctx, stmt)
		except RecursionError:
			# Deeply nested scopes (lambdas, comprehensions, blocks) still recurse.
			logger.warning("%s: nesting too deep, borrow check aborted", unit.file)
			ctx.sink.report(SEVERITY_ERROR, TOO_DEEP_TEMPLATE, ctx.unit.span(None), code=TOO_DEEP_CODE)
		self.diagnostics = list(ctx.sink.diagnostics)
		logger.debug("%s: %d diagnostic(s), %d tracked variable(s) at top level", unit.file, len(self.diagnostics), len(ctx.table))
		return self.diagnostics

	def check_source(self, text: str, file: str = "<string>") -> List[Diagnostic]:
		"""Parse and check `text`; parse failures come back as parser diagnostics."""
		unit, parse_diags = parse_source(text, file)
		if unit is None:
			self.diagnostics = list(parse_diags)
			return self.diagnostics
		return self.run(unit)

	# --- recognition ----------------------------------------------------

	def _owner_names_for(self, unit: SourceUnit) -> FrozenSet[str]:
		"""Owner type names visible in `unit`, including `import ... as` aliases."""
		names = set(self._owner_types)
		for node in ast.walk(unit.tree):
			if isinstance(node, ast.ImportFrom):
				for alias in node.names:
					if alias.name in self._owner_types and alias.asname:
						names.add(alias.asname)
		return frozenset(names)

	def _is_owner_construction(self, ctx: BorrowContext, call: ast.Call) -> bool:
		func = call.func
		if isinstance(func, ast.Subscript):
			# Unique[int](...)
			func = func.value
		if isinstance(func, ast.Name):
			return func.id in ctx.owner_names
		if isinstance(func, ast.Attribute):
			return func.attr in self._owner_types
		return False

	def _declared_variable(self, ctx: BorrowContext, call: ast.Call) -> Optional[ast.Name]:
		"""
		Find the variable a construction initializes.

		Two levels only: the direct parent is the declaration, or the direct
		parent is a tuple/list display whose parent is a parallel assignment
		(`a, b = Unique(1), Unique(2)`).
		"""
		parent = ctx.unit.parent_of(call)
		declared = _direct_declaration(parent, call)
		if declared is not None:
			return declared
		if not isinstance(parent, (ast.Tuple, ast.List)):
			return None
		grand = ctx.unit.parent_of(parent)
		if not isinstance(grand, ast.Assign) or grand.value is not parent or len(grand.targets) != 1:
			return None
		target = grand.targets[0]
		if not isinstance(target, (ast.Tuple, ast.List)) or len(target.elts) != len(parent.elts):
			return None
		if any(isinstance(elt, ast.Starred) for elt in target.elts):
			return None
		for idx, elt in enumerate(parent.elts):
			if elt is call:
				name = target.elts[idx]
				return name if isinstance(name, ast.Name) else None
		return None

	# --- events ---------------------------------------------------------

	def _on_construct(self, ctx: BorrowContext, call: ast.Call) -> None:
		name = self._declared_variable(ctx, call)
		if name is None:
			# Temporaries and unbound constructions are not tracked.
			return
		kind = VarKind.GLOBAL if ctx.frame_depth == 0 else VarKind.LOCAL
		key = ctx.unit.decl_key(name, kind=kind)
		ctx.table.track(key)
		ctx.bindings[name.id] = key
		ctx.declared.add(name)

	def _on_borrow(self, ctx: BorrowContext, call: ast.Call, receiver: ast.Name, op: BorrowOp) -> None:
		span = ctx.unit.span(call)
		key = ctx.bindings.get(receiver.id)
		state = ctx.table.lookup(key) if key is not None else None
		if key is None or state is None:
			if self.options.report_untracked:
				ctx.sink.report(SEVERITY_WARNING, NOT_TRACKED_TEMPLATE, span, receiver.id, code=NOT_TRACKED_CODE)
			return
		shared_before = state.shared_count
		conflict = ctx.table.record_borrow(key, op.loan_kind)
		if conflict is None:
			return
		code, template = _CONFLICT_DIAGS[conflict]
		ctx.sink.report(
			SEVERITY_ERROR,
			template,
			span,
			receiver.id,
			shared_before,
			code=code,
			notes=[_DECLARED_NOTE.format(key.name, key, _KIND_LABELS[key.kind])],
		)

	def _on_call(self, ctx: BorrowContext, call: ast.Call) -> None:
		if self._is_owner_construction(ctx, call):
			self._on_construct(ctx, call)
		func = call.func
		if isinstance(func, ast.Attribute) and isinstance(func.value, ast.Name):
			op = _BORROW_OPS.get(func.attr)
			if op is not None:
				self._on_borrow(ctx, call, func.value, op)

	# --- traversal ------------------------------------------------------

	def _visit_children(self, ctx: BorrowContext, node: ast.AST) -> None:
		for child in ast.iter_child_nodes(node):
			self._visit(ctx, child)

	def _walk(self, ctx: BorrowContext, root: ast.AST) -> None:
		"""
		Pre-order walk of `root` and its plain sub-nodes on an explicit stack.

		Expression chains (`a + b + ... + z`) nest as deep as they are long;
		only scoped or binding nodes go back through `_visit`.
		"""
		stack: List[ast.AST] = [root]
		while stack:
			node = stack.pop()
			if node is not root and self._visit_special(ctx, node):
				continue
			if isinstance(node, ast.Call):
				self._on_call(ctx, node)
			stack.extend(reversed(list(ast.iter_child_nodes(node))))

	def _visit_all(self, ctx: BorrowContext, nodes: Iterable[Optional[ast.AST]]) -> None:
		for node in nodes:
			if node is not None:
				self._visit(ctx, node)

	def _visit_block(self, ctx: BorrowContext, stmts: Sequence[ast.stmt], *, unbind: Iterable[str] = ()) -> None:
		"""Visit a statement suite as its own scope horizon."""
		ctx.enter_scope()
		try:
			ctx.unbind(unbind)
			for stmt in stmts:
				self._visit(ctx, stmt)
		finally:
			ctx.exit_scope()

	def _visit_arguments(self, ctx: BorrowContext, args: ast.arguments) -> None:
		# Defaults and annotations are evaluated where the function is defined.
		self._visit_all(ctx, args.defaults)
		self._visit_all(ctx, args.kw_defaults)
		for arg in args.posonlyargs + args.args + args.kwonlyargs + [args.vararg, args.kwarg]:
			if arg is not None and arg.annotation is not None:
				self._visit(ctx, arg.annotation)

	def _bind_targets(self, ctx: BorrowContext, targets: Iterable[ast.AST]) -> None:
		"""Process assignment targets after the value: rebinding drops tracking."""
		for target in targets:
			if isinstance(target, ast.Name):
				if target not in ctx.declared:
					ctx.unbind([target.id])
			elif isinstance(target, (ast.Tuple, ast.List)):
				self._bind_targets(ctx, target.elts)
			elif isinstance(target, ast.Starred):
				self._bind_targets(ctx, [target.value])
			else:
				# Subscript/attribute targets may contain calls.
				self._visit_children(ctx, target)

	def _visit(self, ctx: BorrowContext, node: ast.AST) -> None:
		if not self._visit_special(ctx, node):
			self._walk(ctx, node)

	def _visit_special(self, ctx: BorrowContext, node: ast.AST) -> bool:
		"""Handle scoped and binding nodes; False for everything `_walk` covers."""
		if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
			self._visit_all(ctx, node.decorator_list)
			self._visit_arguments(ctx, node.args)
			self._visit_all(ctx, [node.returns])
			ctx.unbind([node.name])
			ctx.frame_depth += 1
			try:
				self._visit_block(ctx, node.body, unbind=_param_names(node.args))
			finally:
				ctx.frame_depth -= 1
			return True
		if isinstance(node, ast.Lambda):
			self._visit_arguments(ctx, node.args)
			ctx.enter_scope()
			ctx.frame_depth += 1
			try:
				ctx.unbind(_param_names(node.args))
				self._visit(ctx, node.body)
			finally:
				ctx.frame_depth -= 1
				ctx.exit_scope()
			return True
		if isinstance(node, ast.ClassDef):
			self._visit_all(ctx, node.decorator_list)
			self._visit_all(ctx, node.bases)
			self._visit_all(ctx, node.keywords)
			ctx.unbind([node.name])
			ctx.frame_depth += 1
			try:
				self._visit_block(ctx, node.body)
			finally:
				ctx.frame_depth -= 1
			return True
		if isinstance(node, (ast.If, ast.While)):
			self._visit(ctx, node.test)
			self._visit_block(ctx, node.body)
			if node.orelse:
				self._visit_block(ctx, node.orelse)
			return True
		if isinstance(node, (ast.For, ast.AsyncFor)):
			self._visit(ctx, node.iter)
			self._bind_targets(ctx, [node.target])
			self._visit_block(ctx, node.body)
			if node.orelse:
				self._visit_block(ctx, node.orelse)
			return True
		if isinstance(node, (ast.With, ast.AsyncWith)):
			ctx.enter_scope()
			try:
				for item in node.items:
					self._visit(ctx, item.context_expr)
					if item.optional_vars is not None:
						self._bind_targets(ctx, [item.optional_vars])
				for stmt in node.body:
					self._visit(ctx, stmt)
			finally:
				ctx.exit_scope()
			return True
		if isinstance(node, _TRY_NODES):
			self._visit_block(ctx, node.body)
			for handler in node.handlers:
				self._visit_all(ctx, [handler.type])
				self._visit_block(ctx, handler.body, unbind=[handler.name] if handler.name else ())
			if node.orelse:
				self._visit_block(ctx, node.orelse)
			if node.finalbody:
				self._visit_block(ctx, node.finalbody)
			return True
		if isinstance(node, ast.Match):
			self._visit(ctx, node.subject)
			for case in node.cases:
				ctx.enter_scope()
				try:
					ctx.unbind(_pattern_names(case.pattern))
					self._visit_all(ctx, [case.guard])
					for stmt in case.body:
						self._visit(ctx, stmt)
				finally:
					ctx.exit_scope()
			return True
		if isinstance(node, (ast.ListComp, ast.SetComp, ast.GeneratorExp, ast.DictComp)):
			ctx.enter_scope()
			try:
				for gen in node.generators:
					self._visit(ctx, gen.iter)
					self._bind_targets(ctx, [gen.target])
					self._visit_all(ctx, gen.ifs)
				if isinstance(node, ast.DictComp):
					self._visit_all(ctx, [node.key, node.value])
				else:
					self._visit(ctx, node.elt)
			finally:
				ctx.exit_scope()
			return True
		if isinstance(node, ast.Assign):
			self._visit(ctx, node.value)
			self._bind_targets(ctx, node.targets)
			return True
		if isinstance(node, ast.AnnAssign):
			self._visit(ctx, node.annotation)
			if node.value is not None:
				self._visit(ctx, node.value)
				self._bind_targets(ctx, [node.target])
			return True
		if isinstance(node, ast.AugAssign):
			self._visit(ctx, node.value)
			if isinstance(node.target, ast.Name):
				ctx.unbind([node.target.id])
			else:
				self._visit_children(ctx, node.target)
			return True
		if isinstance(node, ast.NamedExpr):
			self._visit(ctx, node.value)
			self._bind_targets(ctx, [node.target])
			return True
		if isinstance(node, ast.Delete):
			for target in node.targets:
				if isinstance(target, ast.Name):
					ctx.unbind([target.id])
				else:
					self._visit_children(ctx, target)
			return True
		if isinstance(node, (ast.Import, ast.ImportFrom)):
			ctx.unbind((alias.asname or alias.name).split(".")[0] for alias in node.names)
			return True
		return False


__all__ = [
	"BorrowCheckPass",
	"BorrowCheckOptions",
	"BorrowContext",
	"BorrowOp",
	"DEFAULT_OWNER_TYPES",
	"NOT_TRACKED_CODE",
	"TOO_DEEP_CODE",
	"PASS_NAME",
]
