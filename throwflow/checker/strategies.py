# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Unchecked-exception classification strategies.

A strategy is a pure predicate: given an exception type it answers whether the
type never needs to be declared or caught. Unchecked candidates are dropped as
soon as they are registered, so they can never become findings. The three
stock strategies are nested: everything Fatal treats as unchecked, Strict does
too, and everything Strict treats as unchecked, Standard does too.
"""

from __future__ import annotations

from throwflow.core.exc_types import ExceptionType, UncheckedRoots
from throwflow.core.types_protocol import TypeRelation


class CheckedExceptionStrategy:
	"""Base strategy; subclasses implement `is_unchecked`."""

	name = "abstract"

	def __init__(self, relation: TypeRelation, roots: UncheckedRoots) -> None:
		self._relation = relation
		self._roots = roots

	def is_unchecked(self, tpe: ExceptionType) -> bool:
		raise NotImplementedError

	def __call__(self, tpe: ExceptionType) -> bool:
		return self.is_unchecked(tpe)

	def _derives_from(self, tpe: ExceptionType, *roots: ExceptionType) -> bool:
		return any(self._relation.is_subtype(tpe, root) for root in roots)

	def __repr__(self) -> str:
		return f"{type(self).__name__}()"


class StandardStrategy(CheckedExceptionStrategy):
	"""Subtypes of the runtime-exception root and of the error root are unchecked."""

	name = "standard"

	def is_unchecked(self, tpe: ExceptionType) -> bool:
		return self._derives_from(tpe, self._roots.runtime, self._roots.error)


class StrictStrategy(CheckedExceptionStrategy):
	"""Only subtypes of the error root are unchecked."""

	name = "strict"

	def is_unchecked(self, tpe: ExceptionType) -> bool:
		return self._derives_from(tpe, self._roots.error)


class FatalStrategy(CheckedExceptionStrategy):
	"""
	Only VM-fatal conditions are unchecked: out-of-resource, link/load failure
	and assertion failure. The error root itself is checked.
	"""

	name = "fatal"

	def is_unchecked(self, tpe: ExceptionType) -> bool:
		return self._derives_from(tpe, *self._roots.fatal)


__all__ = ["CheckedExceptionStrategy", "StandardStrategy", "StrictStrategy", "FatalStrategy"]
