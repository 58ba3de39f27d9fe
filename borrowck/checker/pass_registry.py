# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-19
"""
Named checker passes.

A pass registers under a stable name so drivers can select it with
`--pass NAME`. Passes are created per driver invocation and run once per
parsed source unit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from borrowck.checker.parser.source_unit import SourceUnit
from borrowck.core.diagnostics import Diagnostic

logger = logging.getLogger(__name__)


class CheckerPass(Protocol):
	def parse_args(self, args: Sequence[str]) -> bool: ...

	def run(self, unit: SourceUnit) -> List[Diagnostic]: ...


@dataclass(frozen=True)
class PassInfo:
	name: str
	description: str
	factory: Callable[[Optional[Any]], CheckerPass]


class UnknownPassError(KeyError):
	pass


class PassRegistry:
	"""Name -> pass factory mapping."""

	def __init__(self) -> None:
		self._passes: Dict[str, PassInfo] = {}

	def register(self, name: str, description: str) -> Callable[[Callable[..., CheckerPass]], Callable[..., CheckerPass]]:
		"""Class/factory decorator registering a pass under `name`."""

		def deco(factory: Callable[..., CheckerPass]) -> Callable[..., CheckerPass]:
			if name in self._passes:
				raise ValueError(f"pass '{name}' is already registered")
			self._passes[name] = PassInfo(name=name, description=description, factory=factory)
			logger.debug("registered checker pass %r (%s)", name, description)
			return factory

		return deco

	def create(self, name: str, options: Optional[Any] = None, args: Sequence[str] = ()) -> CheckerPass:
		info = self._passes.get(name)
		if info is None:
			raise UnknownPassError(name)
		checker = info.factory(options)
		if not checker.parse_args(list(args)):
			raise ValueError(f"pass '{name}' rejected its arguments: {list(args)!r}")
		return checker

	def info(self, name: str) -> PassInfo:
		try:
			return self._passes[name]
		except KeyError:
			raise UnknownPassError(name) from None

	def names(self) -> List[str]:
		return sorted(self._passes)

	def __contains__(self, name: object) -> bool:
		return name in self._passes


REGISTRY = PassRegistry()

__all__ = ["CheckerPass", "PassInfo", "PassRegistry", "UnknownPassError", "REGISTRY"]
