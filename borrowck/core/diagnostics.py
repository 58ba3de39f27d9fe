# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for checker/driver passes.

Passes never format user-facing text themselves: they hand a message template
plus substitution args to a `DiagnosticSink`, which renders `{0}`-style
placeholders and stores a `Diagnostic`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional

from .span import Span

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITY_NOTE = "note"


@dataclass
class Diagnostic:
	"""Represents a checker diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Phase label: "parser" for front-end failures, "borrowcheck" for the pass.
	phase: str | None = None
	severity: str = SEVERITY_ERROR
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		# Normalize missing spans to the sentinel Span() so downstream tooling
		# can rely on a structured object instead of None.
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	@property
	def is_error(self) -> bool:
		return self.severity == SEVERITY_ERROR

	def format_human(self, source: Optional[Path | str] = None) -> str:
		"""Render as `file:line:col: severity: message`."""
		file = self.span.file or (str(source) if source is not None else "<unknown>")
		return f"{file}:{self.span.location()}: {self.severity}: {self.message}"

	def to_json(self, source: Optional[Path | str] = None) -> dict:
		"""Render a Diagnostic to a structured JSON-friendly dict."""
		file = self.span.file
		if file is None and source is not None:
			file = str(source)
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


@dataclass
class DiagnosticSink:
	"""
	Collects diagnostics reported by a pass.

	`report` takes the raw pieces (severity, message template, location,
	substitution args); the template uses positional `{0}`, `{1}` placeholders.
	"""

	phase: str | None = None
	diagnostics: List[Diagnostic] = field(default_factory=list)

	def report(
		self,
		severity: str,
		template: str,
		span: Span,
		*args: object,
		code: str | None = None,
		phase: str | None = None,
		notes: Optional[List[str]] = None,
	) -> Diagnostic:
		diag = Diagnostic(
			message=template.format(*args),
			code=code,
			phase=phase or self.phase,
			severity=severity,
			span=span,
			notes=list(notes or []),
		)
		self.diagnostics.append(diag)
		return diag

	def clear(self) -> None:
		self.diagnostics.clear()

	def has_errors(self) -> bool:
		return any(d.is_error for d in self.diagnostics)

	def __iter__(self) -> Iterator[Diagnostic]:
		return iter(self.diagnostics)

	def __len__(self) -> int:
		return len(self.diagnostics)


__all__ = [
	"Diagnostic",
	"DiagnosticSink",
	"SEVERITY_ERROR",
	"SEVERITY_WARNING",
	"SEVERITY_NOTE",
]
