# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Host capabilities the engine consumes but never implements.

TypeRelation answers subtype queries between exception types; OverrideLookup
answers "which symbols does this callable override/implement". Both are
injected so the traversal stays independent of any particular host symbol
table. OverrideTable is the stock dict-backed lookup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, Mapping, Protocol, Sequence, Tuple

from .exc_types import ExceptionType

if TYPE_CHECKING:
	from throwflow.tree.nodes import Symbol


class TypeRelation(Protocol):
	"""Subtype predicate over the host's exception types."""

	def is_subtype(self, sub: ExceptionType, sup: ExceptionType) -> bool:
		"""Return True if `sub` is a subtype of, or equal to, `sup`."""
		...


class OverrideLookup(Protocol):
	"""Override/implements relation between callable symbols."""

	def overridden(self, symbol: "Symbol") -> Sequence["Symbol"]:
		"""
		Return every symbol `symbol` overrides or implements (transitively),
		nearest first. Symbols that override nothing return an empty sequence.
		"""
		...


class OverrideTable:
	"""Dict-backed OverrideLookup populated by the host adapter."""

	def __init__(self, table: Mapping["Symbol", Iterable["Symbol"]] | None = None) -> None:
		self._table: Dict["Symbol", Tuple["Symbol", ...]] = {}
		for sym, parents in (table or {}).items():
			self._table[sym] = tuple(parents)

	def add(self, symbol: "Symbol", parent: "Symbol") -> None:
		existing = self._table.get(symbol, ())
		if parent not in existing:
			self._table[symbol] = existing + (parent,)

	def overridden(self, symbol: "Symbol") -> Sequence["Symbol"]:
		return self._table.get(symbol, ())

	def __len__(self) -> int:
		return len(self._table)


class _NoOverrides:
	def overridden(self, symbol: "Symbol") -> Sequence["Symbol"]:
		return ()


NO_OVERRIDES: OverrideLookup = _NoOverrides()


__all__ = ["TypeRelation", "OverrideLookup", "OverrideTable", "NO_OVERRIDES"]
