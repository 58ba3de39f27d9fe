# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-19
"""
Runtime ownership handles.

  from borrowck.runtime import Unique

  with Unique([1, 2, 3]) as data:
      with data.borrow() as view:
          ...
"""

from borrowck.core.borrow_rules import OwnerState
from borrowck.runtime.errors import BorrowError, BorrowErrorCode
from borrowck.runtime.ownership import Borrowed, BorrowedMut, Unique

__all__ = [
	"Unique",
	"Borrowed",
	"BorrowedMut",
	"BorrowError",
	"BorrowErrorCode",
	"OwnerState",
]
