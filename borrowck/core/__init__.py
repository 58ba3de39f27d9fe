"""
borrowck.core: shared primitives used by the runtime model and the checker.

Modules:
  - borrow_rules: shared/exclusive borrow policy (BorrowState, LoanKind)
  - diagnostics: Diagnostic record + DiagnosticSink
  - span: source spans
"""

__all__ = [
	"borrow_rules",
	"diagnostics",
	"span",
]
