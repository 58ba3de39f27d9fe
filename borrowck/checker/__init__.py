# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-19
"""
Static borrow checker (`borrowck.checker`).

The pass lives in `borrow_checker_pass`; the CLI entrypoint is
`borrowck.checker.cli:main`.
"""

__all__ = []
