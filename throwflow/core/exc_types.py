# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Exception types and a concrete subtype relation over them.

ExceptionTypes are opaque, immutable handles identified by name. The engine
only ever asks one question about them (is A a subtype-or-equal of B?) and asks
it through the `TypeRelation` protocol; `ExceptionHierarchy` is the stock
provider used by the front-end and the tests. Hosts with their own type system
plug in their own relation instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple, Union


@dataclass(frozen=True)
class ExceptionType:
	"""Nominal throwable type (opaque handle; compared by name)."""

	name: str

	def __str__(self) -> str:
		return self.name


class UnknownExceptionTypeError(KeyError):
	"""Lookup of an exception type name that was never registered."""


@dataclass(frozen=True)
class UncheckedRoots:
	"""
	The well-known roots the classification strategies test against.

	runtime: the conventional "unchecked at runtime" root
	error:   the conventional "irrecoverable error" root
	fatal:   VM-fatal roots (out-of-resource, link/load failure, assertion)
	"""

	throwable: ExceptionType
	runtime: ExceptionType
	error: ExceptionType
	fatal: Tuple[ExceptionType, ...]


THROWABLE = "Throwable"
EXCEPTION = "Exception"
RUNTIME_EXCEPTION = "RuntimeException"
ERROR = "Error"
VIRTUAL_MACHINE_ERROR = "VirtualMachineError"
LINKAGE_ERROR = "LinkageError"
ASSERTION_ERROR = "AssertionError"

# (name, parent) in registration order; parents always precede children.
BUILTIN_EXCEPTIONS: Tuple[Tuple[str, Optional[str]], ...] = (
	(THROWABLE, None),
	(EXCEPTION, THROWABLE),
	(RUNTIME_EXCEPTION, EXCEPTION),
	(ERROR, THROWABLE),
	(VIRTUAL_MACHINE_ERROR, ERROR),
	("OutOfMemoryError", VIRTUAL_MACHINE_ERROR),
	("StackOverflowError", VIRTUAL_MACHINE_ERROR),
	("InternalError", VIRTUAL_MACHINE_ERROR),
	(LINKAGE_ERROR, ERROR),
	("NoClassDefFoundError", LINKAGE_ERROR),
	(ASSERTION_ERROR, ERROR),
	("IOException", EXCEPTION),
	("FileNotFoundException", "IOException"),
	("UnknownHostException", "IOException"),
	("InterruptedException", EXCEPTION),
	("IllegalArgumentException", RUNTIME_EXCEPTION),
	("IllegalStateException", RUNTIME_EXCEPTION),
	("NullPointerException", RUNTIME_EXCEPTION),
	("ArithmeticException", RUNTIME_EXCEPTION),
)


class ExceptionHierarchy:
	"""
	Single-inheritance table of exception types.

	Each registered type has at most one parent; the root (`Throwable`) has
	none. `is_subtype` walks the parent chain, so it is reflexive and
	transitive. Types that were never registered are only equal to themselves.
	"""

	def __init__(self) -> None:
		self._types: Dict[str, ExceptionType] = {}
		self._parents: Dict[str, Optional[str]] = {}

	@classmethod
	def with_builtins(cls) -> "ExceptionHierarchy":
		"""Return a hierarchy seeded with the conventional throwable roots."""
		hierarchy = cls()
		for name, parent in BUILTIN_EXCEPTIONS:
			hierarchy.register(name, parent)
		return hierarchy

	def register(self, name: str, parent: Union[str, ExceptionType, None] = EXCEPTION) -> ExceptionType:
		"""
		Register `name` as a subtype of `parent` and return its handle.

		Raises ValueError for duplicate names or an unregistered parent.
		"""
		if name in self._types:
			raise ValueError(f"exception type '{name}' is already registered")
		parent_name = parent.name if isinstance(parent, ExceptionType) else parent
		if parent_name is not None and parent_name not in self._types:
			raise ValueError(f"unknown parent exception type '{parent_name}' for '{name}'")
		tpe = ExceptionType(name)
		self._types[name] = tpe
		self._parents[name] = parent_name
		return tpe

	def get(self, name: str) -> ExceptionType:
		try:
			return self._types[name]
		except KeyError:
			raise UnknownExceptionTypeError(name) from None

	def lookup(self, name: str) -> Optional[ExceptionType]:
		return self._types.get(name)

	def __contains__(self, item: object) -> bool:
		if isinstance(item, ExceptionType):
			return self._types.get(item.name) == item
		return item in self._types

	def __iter__(self) -> Iterator[ExceptionType]:
		return iter(self._types.values())

	def parent_of(self, tpe: ExceptionType) -> Optional[ExceptionType]:
		parent = self._parents.get(tpe.name)
		return self._types[parent] if parent is not None else None

	def ancestors(self, tpe: ExceptionType) -> List[ExceptionType]:
		"""Return `tpe` followed by its parents, nearest first."""
		chain = [tpe]
		current = self.parent_of(tpe)
		while current is not None:
			chain.append(current)
			current = self.parent_of(current)
		return chain

	def is_subtype(self, sub: ExceptionType, sup: ExceptionType) -> bool:
		"""True if `sub` is `sup` or (transitively) derives from it."""
		if sub == sup:
			return True
		name = self._parents.get(sub.name)
		while name is not None:
			if name == sup.name:
				return True
			name = self._parents.get(name)
		return False

	def unchecked_roots(self) -> UncheckedRoots:
		"""Roots used by the classification strategies; requires the builtins."""
		return UncheckedRoots(
			throwable=self.get(THROWABLE),
			runtime=self.get(RUNTIME_EXCEPTION),
			error=self.get(ERROR),
			fatal=(self.get(VIRTUAL_MACHINE_ERROR), self.get(ASSERTION_ERROR), self.get(LINKAGE_ERROR)),
		)


__all__ = [
	"ExceptionType",
	"ExceptionHierarchy",
	"UncheckedRoots",
	"UnknownExceptionTypeError",
	"BUILTIN_EXCEPTIONS",
]
