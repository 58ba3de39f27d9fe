#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-19
"""
Runtime ownership model: a single owner plus counted borrow guards.

  * `Unique` exclusively owns one resource and keeps the borrow counters.
  * `Borrowed` is a shared (read-only) view; any number may coexist.
  * `BorrowedMut` is an exclusive (read-write) view; at most one, and never
    alongside a shared view.

Every violation raises `BorrowError` at the offending call and leaves the
owner's counters exactly as they were. Lifetimes are explicit: owners are
dropped with `drop()` (or by leaving a `with` block), borrows end with
`release()`, a `with` block, or when the last reference to the handle goes
away.

Counters are not synchronized; handles must not be shared across threads.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from borrowck.core.borrow_rules import BorrowState, LoanKind, OwnerState, acquire, release
from borrowck.runtime.errors import BorrowError, BorrowErrorCode

T = TypeVar("T")


class _Empty:
	"""Marker for an owner that holds no resource (moved-from or dropped)."""

	def __repr__(self) -> str:
		return "<empty>"


_EMPTY = _Empty()


class Unique(Generic[T]):
	"""
	Sole owner of a resource.

	Not copyable; ownership moves with `move()` / `move_from()`. Dropping or
	moving is only legal while no borrow is active.
	"""

	def __init__(self, value: T) -> None:
		self._value: object = value
		self._state = BorrowState()

	# --- lifetime -------------------------------------------------------

	def drop(self) -> None:
		"""Release the resource. No-op on an owner that holds none."""
		if self._value is _EMPTY:
			return
		if not self._state.is_free:
			raise BorrowError(
				BorrowErrorCode.DESTROY_WITH_ACTIVE_BORROWS,
				"cannot destroy Unique while it is borrowed",
			)
		self._value = _EMPTY

	def __enter__(self) -> "Unique[T]":
		return self

	def __exit__(self, exc_type, exc, tb) -> None:
		# An exception from the block wins; a still-borrowed owner keeps its resource.
		if exc_type is not None and not self._state.is_free:
			return
		self.drop()

	def move(self) -> "Unique[T]":
		"""Transfer ownership into a new `Unique`; `self` is left empty."""
		if not self._state.is_free:
			raise BorrowError(
				BorrowErrorCode.MOVE_WITH_ACTIVE_BORROWS,
				"cannot move Unique while it is borrowed",
			)
		moved: Unique[T] = Unique.__new__(Unique)
		moved._value = self._value
		moved._state = BorrowState()
		self._value = _EMPTY
		return moved

	@classmethod
	def take(cls, src: "Unique[T]") -> "Unique[T]":
		"""Alternate spelling of `src.move()`."""
		return src.move()

	def move_from(self, src: "Unique[T]") -> None:
		"""
		Move-assign: drop the current resource and adopt `src`'s.

		Both sides must be free of borrows; `src` is left empty.
		"""
		if not isinstance(src, Unique):
			raise TypeError(f"can only move from a Unique, not {type(src).__name__}")
		if src is self:
			return
		if not self._state.is_free:
			raise BorrowError(
				BorrowErrorCode.MOVE_INTO_WITH_ACTIVE_BORROWS,
				"cannot move into Unique while it is borrowed",
			)
		if not src._state.is_free:
			raise BorrowError(
				BorrowErrorCode.MOVE_FROM_WITH_ACTIVE_BORROWS,
				"cannot move from Unique while it is borrowed",
			)
		self._value = src._value
		src._value = _EMPTY

	def __copy__(self):
		raise TypeError("Unique is not copyable; use move()")

	def __deepcopy__(self, memo):
		raise TypeError("Unique is not copyable; use move()")

	# --- borrow tracking ------------------------------------------------

	def _require_resource(self) -> None:
		if self._value is _EMPTY:
			raise BorrowError(
				BorrowErrorCode.USE_OF_EMPTY_OWNER,
				"Unique holds no resource (moved-from or dropped)",
			)

	def acquire_shared(self) -> None:
		self._require_resource()
		conflict = acquire(self._state, LoanKind.SHARED)
		if conflict is not None:
			raise BorrowError.from_conflict(conflict)

	def release_shared(self) -> None:
		if not release(self._state, LoanKind.SHARED):
			raise BorrowError(
				BorrowErrorCode.RELEASE_NON_EXISTENT_SHARED_BORROW,
				"attempting to release non-existent shared borrow",
			)

	def acquire_exclusive(self) -> None:
		self._require_resource()
		conflict = acquire(self._state, LoanKind.EXCLUSIVE)
		if conflict is not None:
			raise BorrowError.from_conflict(conflict)

	def release_exclusive(self) -> None:
		if not release(self._state, LoanKind.EXCLUSIVE):
			raise BorrowError(
				BorrowErrorCode.RELEASE_NON_EXISTENT_EXCLUSIVE_BORROW,
				"attempting to release non-existent exclusive borrow",
			)

	def borrow(self) -> "Borrowed[T]":
		return Borrowed(self)

	def borrow_mut(self) -> "BorrowedMut[T]":
		return BorrowedMut(self)

	# --- direct access --------------------------------------------------

	def get(self) -> T:
		"""Direct access; refused while any borrow is active."""
		self._require_resource()
		if not self._state.is_free:
			raise BorrowError(
				BorrowErrorCode.ACCESS_WHILE_BORROWED,
				"cannot access Unique directly while borrowed",
			)
		return self._value  # type: ignore[return-value]

	def set(self, value: T) -> None:
		self._require_resource()
		if not self._state.is_free:
			raise BorrowError(
				BorrowErrorCode.ACCESS_WHILE_BORROWED,
				"cannot access Unique directly while borrowed",
			)
		self._value = value

	def peek(self) -> T:
		"""Read-only access; shared borrows do not block it."""
		self._require_resource()
		if self._state.exclusively_borrowed:
			raise BorrowError(
				BorrowErrorCode.ACCESS_WHILE_EXCLUSIVELY_BORROWED,
				"cannot access Unique directly while exclusively borrowed",
			)
		return self._value  # type: ignore[return-value]

	# --- introspection --------------------------------------------------

	@property
	def shared_count(self) -> int:
		return self._state.shared_count

	@property
	def exclusively_borrowed(self) -> bool:
		return self._state.exclusively_borrowed

	@property
	def state(self) -> OwnerState:
		return self._state.owner_state

	@property
	def is_borrowed(self) -> bool:
		return not self._state.is_free

	def __bool__(self) -> bool:
		return self._value is not _EMPTY

	def __repr__(self) -> str:
		return (
			f"Unique({self._value!r}, shared={self._state.shared_count}, "
			f"exclusive={self._state.exclusively_borrowed})"
		)


class Borrowed(Generic[T]):
	"""Shared borrow of a `Unique`. Copy with `clone()` (or `copy.copy`)."""

	def __init__(self, owner: Unique[T]) -> None:
		self._owner: Optional[Unique[T]] = None
		owner.acquire_shared()
		self._owner = owner

	@property
	def owner(self) -> Optional[Unique[T]]:
		return self._owner

	def _live_owner(self) -> Unique[T]:
		if self._owner is None:
			raise ValueError("borrow has been released")
		return self._owner

	def get(self) -> T:
		return self._live_owner()._value  # type: ignore[return-value]

	def clone(self) -> "Borrowed[T]":
		return Borrowed(self._live_owner())

	def __copy__(self) -> "Borrowed[T]":
		return self.clone()

	def rebind(self, other: Unique[T]) -> None:
		"""
		Point this borrow at `other`.

		The new slot is acquired before the old one is released, so a conflict
		on `other` leaves both owners untouched.
		"""
		other.acquire_shared()
		old, self._owner = self._owner, other
		if old is not None:
			old.release_shared()

	def release(self) -> None:
		"""End the borrow. Releasing twice is a no-op."""
		if self._owner is None:
			return
		self._owner.release_shared()
		self._owner = None

	def __enter__(self) -> "Borrowed[T]":
		return self

	def __exit__(self, exc_type, exc, tb) -> None:
		self.release()

	def __del__(self) -> None:
		if getattr(self, "_owner", None) is not None:
			self.release()

	def __bool__(self) -> bool:
		return self._owner is not None

	def __repr__(self) -> str:
		state = "released" if self._owner is None else repr(self._owner._value)
		return f"Borrowed({state})"


class BorrowedMut(Generic[T]):
	"""
	Exclusive borrow of a `Unique`.

	Not copyable; the borrow slot moves with `transfer()` / `transfer_from()`
	and the source handle is neutralized so the slot is released once.
	"""

	def __init__(self, owner: Unique[T]) -> None:
		self._owner: Optional[Unique[T]] = None
		owner.acquire_exclusive()
		self._owner = owner

	@property
	def owner(self) -> Optional[Unique[T]]:
		return self._owner

	def _live_owner(self) -> Unique[T]:
		if self._owner is None:
			raise ValueError("borrow has been released or transferred")
		return self._owner

	def get(self) -> T:
		return self._live_owner()._value  # type: ignore[return-value]

	def set(self, value: T) -> None:
		self._live_owner()._value = value

	def transfer(self) -> "BorrowedMut[T]":
		"""Move the borrow slot into a new handle; `self` becomes empty."""
		moved: BorrowedMut[T] = BorrowedMut.__new__(BorrowedMut)
		moved._owner, self._owner = self._owner, None
		return moved

	def transfer_from(self, src: "BorrowedMut[T]") -> None:
		"""Release the slot held by `self` (if any) and adopt `src`'s."""
		if src is self:
			return
		if self._owner is not None:
			self._owner.release_exclusive()
		self._owner, src._owner = src._owner, None

	def __copy__(self):
		raise TypeError("BorrowedMut is not copyable; use transfer()")

	def __deepcopy__(self, memo):
		raise TypeError("BorrowedMut is not copyable; use transfer()")

	def release(self) -> None:
		if self._owner is None:
			return
		self._owner.release_exclusive()
		self._owner = None

	def __enter__(self) -> "BorrowedMut[T]":
		return self

	def __exit__(self, exc_type, exc, tb) -> None:
		self.release()

	def __del__(self) -> None:
		if getattr(self, "_owner", None) is not None:
			self.release()

	def __bool__(self) -> bool:
		return self._owner is not None

	def __repr__(self) -> str:
		state = "released" if self._owner is None else repr(self._owner._value)
		return f"BorrowedMut({state})"


__all__ = ["Unique", "Borrowed", "BorrowedMut"]
