#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-19
"""
Borrow-checker scaffolding: variable identity and the borrow-state table.

This models the "who" (which declaration a reference denotes) and the "what"
(its current borrow counters) so the pass can apply the shared borrow rules.
It intentionally avoids AST policy and just answers:
  * Which tracked variable is this (`VarKey`)?
  * What is its borrow state in the current scope?
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional

from borrowck.core.borrow_rules import BorrowConflict, BorrowState, LoanKind, acquire


class VarKind(Enum):
	GLOBAL = auto()
	LOCAL = auto()


@dataclass(frozen=True)
class VarKey:
	"""
	Identity of a tracked variable: the position of its declaring name.

	Two declarations never share a position, so same-named variables in
	different scopes get distinct keys. `name`/`kind` are informational and do
	not take part in equality.
	"""

	file: str
	line: int
	column: int
	name: str = field(default="", compare=False)
	kind: VarKind = field(default=VarKind.LOCAL, compare=False)

	def __str__(self) -> str:
		return f"{self.file}:{self.line}:{self.column}"


@dataclass
class BorrowStateTable:
	"""
	Borrow state per tracked variable plus a stack of full-table snapshots.

	`enter_scope` pushes a deep copy of the whole table; `exit_scope` replaces
	the table with it. State never merges across a scope exit: changes made
	inside a block vanish, entries that pre-existed come back exactly as they
	were on entry.
	"""

	states: Dict[VarKey, BorrowState] = field(default_factory=dict)
	snapshots: List[Dict[VarKey, BorrowState]] = field(default_factory=list)

	def _copy_states(self) -> Dict[VarKey, BorrowState]:
		return {key: st.copy() for key, st in self.states.items()}

	def enter_scope(self) -> None:
		self.snapshots.append(self._copy_states())

	def exit_scope(self) -> None:
		# Unbalanced exits are ignored rather than emptying the table.
		if self.snapshots:
			self.states = self.snapshots.pop()

	@property
	def depth(self) -> int:
		return len(self.snapshots)

	def track(self, key: VarKey) -> BorrowState:
		"""Start tracking `key` with a fresh (unborrowed) state, replacing any previous one."""
		st = BorrowState()
		self.states[key] = st
		return st

	def lookup(self, key: VarKey) -> Optional[BorrowState]:
		"""Return the state for `key`, or None when it is not tracked (never auto-creates)."""
		return self.states.get(key)

	def record_borrow(self, key: VarKey, kind: LoanKind) -> Optional[BorrowConflict]:
		"""
		Apply a borrow of `kind` to a tracked variable.

		Returns the conflict when the borrow is refused (state unchanged).
		Callers must check `lookup` first; untracked keys raise KeyError.
		"""
		return acquire(self.states[key], kind)

	def clear(self) -> None:
		self.states.clear()
		self.snapshots.clear()

	def __contains__(self, key: object) -> bool:
		return key in self.states

	def __iter__(self) -> Iterator[VarKey]:
		return iter(self.states)

	def __len__(self) -> int:
		return len(self.states)


__all__ = ["VarKind", "VarKey", "BorrowStateTable"]
