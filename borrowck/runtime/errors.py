# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-19
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from borrowck.core.borrow_rules import BorrowConflict


class BorrowErrorCode(Enum):
	"""Stable reason codes for runtime ownership violations."""

	DESTROY_WITH_ACTIVE_BORROWS = "DestroyWithActiveBorrows"
	MOVE_WITH_ACTIVE_BORROWS = "MoveWithActiveBorrows"
	MOVE_INTO_WITH_ACTIVE_BORROWS = "MoveIntoWithActiveBorrows"
	MOVE_FROM_WITH_ACTIVE_BORROWS = "MoveFromWithActiveBorrows"
	SHARED_BORROW_OF_EXCLUSIVELY_BORROWED = "SharedBorrowOfExclusivelyBorrowed"
	EXCLUSIVE_BORROW_OF_SHARED_BORROWED = "ExclusiveBorrowOfSharedBorrowed"
	EXCLUSIVE_BORROW_OF_EXCLUSIVELY_BORROWED = "ExclusiveBorrowOfExclusivelyBorrowed"
	ACCESS_WHILE_BORROWED = "AccessWhileBorrowed"
	ACCESS_WHILE_EXCLUSIVELY_BORROWED = "AccessWhileExclusivelyBorrowed"
	RELEASE_NON_EXISTENT_SHARED_BORROW = "ReleaseNonExistentSharedBorrow"
	RELEASE_NON_EXISTENT_EXCLUSIVE_BORROW = "ReleaseNonExistentExclusiveBorrow"
	USE_OF_EMPTY_OWNER = "UseOfEmptyOwner"


_CONFLICT_CODES = {
	BorrowConflict.SHARED_OF_EXCLUSIVE: BorrowErrorCode.SHARED_BORROW_OF_EXCLUSIVELY_BORROWED,
	BorrowConflict.EXCLUSIVE_OF_SHARED: BorrowErrorCode.EXCLUSIVE_BORROW_OF_SHARED_BORROWED,
	BorrowConflict.EXCLUSIVE_OF_EXCLUSIVE: BorrowErrorCode.EXCLUSIVE_BORROW_OF_EXCLUSIVELY_BORROWED,
}

_CONFLICT_MESSAGES = {
	BorrowConflict.SHARED_OF_EXCLUSIVE: "cannot take shared borrow: already exclusively borrowed",
	BorrowConflict.EXCLUSIVE_OF_SHARED: "cannot take exclusive borrow: already borrowed (shared)",
	BorrowConflict.EXCLUSIVE_OF_EXCLUSIVE: "cannot take exclusive borrow: already exclusively borrowed",
}


@dataclass(eq=False)
class BorrowError(RuntimeError):
	"""
	A runtime ownership/borrow violation.

	Raised at the exact call that broke the rules; the owner's counters are
	never modified by a failing operation.
	"""

	code: BorrowErrorCode
	message: str

	def __post_init__(self) -> None:
		super().__init__(self.message)

	def __str__(self) -> str:
		return self.format_human()

	@classmethod
	def from_conflict(cls, conflict: BorrowConflict) -> "BorrowError":
		return cls(_CONFLICT_CODES[conflict], _CONFLICT_MESSAGES[conflict])

	@property
	def is_conflict(self) -> bool:
		"""True for the three acquisition conflicts (shared/exclusive clashes)."""
		return self.code in _CONFLICT_CODES.values()

	def to_dict(self) -> dict[str, Any]:
		return {"reason_code": self.code.value, "message": self.message}

	def format_human(self) -> str:
		return f"[{self.code.value}] {self.message}"


__all__ = ["BorrowError", "BorrowErrorCode"]
