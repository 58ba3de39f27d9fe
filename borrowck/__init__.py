# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-19
"""
borrowck: Rust-style borrow discipline for Python.

Packages:
  runtime: ownership handles (Unique/Borrowed/BorrowedMut) checked at run time
  checker: static borrow-check pass over Python source (`python -m borrowck.checker`)
  core:    shared borrow rules, spans and diagnostics
"""

from borrowck.runtime import Borrowed, BorrowedMut, BorrowError, BorrowErrorCode, OwnerState, Unique

__all__ = [
	"Unique",
	"Borrowed",
	"BorrowedMut",
	"BorrowError",
	"BorrowErrorCode",
	"OwnerState",
]
