# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parsed source unit: the `ast` tree plus parent lookup and declaration identity.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from typing import Dict, Optional

from borrowck.checker.borrow_checker import VarKey, VarKind
from borrowck.core.span import Span


def _build_parent_map(tree: ast.AST) -> Dict[ast.AST, ast.AST]:
	parents: Dict[ast.AST, ast.AST] = {}
	for node in ast.walk(tree):
		for child in ast.iter_child_nodes(node):
			parents[child] = node
	return parents


@dataclass
class SourceUnit:
	"""One analyzed file ("translation unit")."""

	file: str
	text: str
	tree: ast.Module
	_parents: Dict[ast.AST, ast.AST] = field(default_factory=dict, repr=False)

	def __post_init__(self) -> None:
		if not self._parents:
			self._parents = _build_parent_map(self.tree)

	def parent_of(self, node: ast.AST) -> Optional[ast.AST]:
		"""Syntactic parent of `node` (None for the module itself)."""
		return self._parents.get(node)

	def decl_key(self, name: ast.Name | ast.arg, *, kind: VarKind = VarKind.LOCAL) -> VarKey:
		"""Stable identity for a declaring name: its source position in this unit."""
		ident = name.id if isinstance(name, ast.Name) else name.arg
		return VarKey(
			file=self.file,
			line=name.lineno,
			column=name.col_offset + 1,
			name=ident,
			kind=kind,
		)

	def span(self, node: Optional[ast.AST]) -> Span:
		return Span.from_node(node, self.file)


__all__ = ["SourceUnit"]
