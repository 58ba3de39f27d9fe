#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-19
"""
Shared-vs-exclusive borrow policy.

Single source of truth for the exclusivity rules used by both the runtime
ownership handles (`borrowck.runtime`) and the static pass
(`borrowck.checker`). Per owner the state machine is:

  FREE --shared--> SHARED(1) --shared--> SHARED(n+1)
  SHARED(n) --release--> SHARED(n-1) | FREE
  FREE --exclusive--> EXCLUSIVE --release--> FREE

Any other acquisition is a conflict and leaves the state untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class LoanKind(Enum):
	"""Kinds of borrows."""

	SHARED = auto()
	EXCLUSIVE = auto()


class OwnerState(Enum):
	"""Coarse state-machine state of a borrow record."""

	FREE = auto()
	SHARED = auto()
	EXCLUSIVE = auto()


class BorrowConflict(Enum):
	"""Why an acquisition was refused."""

	SHARED_OF_EXCLUSIVE = auto()     # shared borrow while exclusively borrowed
	EXCLUSIVE_OF_SHARED = auto()     # exclusive borrow while shared borrows are live
	EXCLUSIVE_OF_EXCLUSIVE = auto()  # second exclusive borrow


@dataclass
class BorrowState:
	"""Per-owner borrow counters: exclusive flag + shared count."""

	exclusively_borrowed: bool = False
	shared_count: int = 0

	@property
	def owner_state(self) -> OwnerState:
		if self.exclusively_borrowed:
			return OwnerState.EXCLUSIVE
		if self.shared_count > 0:
			return OwnerState.SHARED
		return OwnerState.FREE

	@property
	def is_free(self) -> bool:
		return not self.exclusively_borrowed and self.shared_count == 0

	def copy(self) -> "BorrowState":
		return BorrowState(self.exclusively_borrowed, self.shared_count)


def check_acquire(state: BorrowState, kind: LoanKind) -> Optional[BorrowConflict]:
	"""Return the conflict that acquiring `kind` would cause, or None if allowed."""
	if kind is LoanKind.SHARED:
		if state.exclusively_borrowed:
			return BorrowConflict.SHARED_OF_EXCLUSIVE
		return None
	if state.exclusively_borrowed:
		return BorrowConflict.EXCLUSIVE_OF_EXCLUSIVE
	if state.shared_count > 0:
		return BorrowConflict.EXCLUSIVE_OF_SHARED
	return None


def acquire(state: BorrowState, kind: LoanKind) -> Optional[BorrowConflict]:
	"""
	Apply an acquisition to `state`.

	On conflict the conflict is returned and `state` is not touched.
	"""
	conflict = check_acquire(state, kind)
	if conflict is not None:
		return conflict
	if kind is LoanKind.SHARED:
		state.shared_count += 1
	else:
		state.exclusively_borrowed = True
	return None


def release(state: BorrowState, kind: LoanKind) -> bool:
	"""Release one borrow of `kind`; False (no mutation) when none is held."""
	if kind is LoanKind.SHARED:
		if state.shared_count <= 0:
			return False
		state.shared_count -= 1
		return True
	if not state.exclusively_borrowed:
		return False
	state.exclusively_borrowed = False
	return True


__all__ = [
	"LoanKind",
	"OwnerState",
	"BorrowConflict",
	"BorrowState",
	"check_acquire",
	"acquire",
	"release",
]
