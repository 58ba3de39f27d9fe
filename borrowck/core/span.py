# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics.

A Span carries best-effort file/line/column info. Lines are 1-based (as in
`ast`); columns are 1-based as printed in `file:line:col` diagnostics, so a
node at `col_offset=0` becomes column 1.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw parser node)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_node(cls, node: Optional[ast.AST], file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from an `ast` node.

		Nodes without position info (e.g. `ast.Module`) produce a span that only
		carries the file.
		"""
		if node is None:
			return cls(file=file)
		line = getattr(node, "lineno", None)
		col = getattr(node, "col_offset", None)
		end_line = getattr(node, "end_lineno", None)
		end_col = getattr(node, "end_col_offset", None)
		return cls(
			file=file,
			line=line,
			column=col + 1 if col is not None else None,
			end_line=end_line,
			end_column=end_col + 1 if end_col is not None else None,
			raw=node,
		)

	def location(self) -> str:
		"""Render `line:col`, using `?` for unknown parts."""
		line = self.line if self.line is not None else "?"
		col = self.column if self.column is not None else "?"
		return f"{line}:{col}"


__all__ = ["Span"]
