# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Override compatibility: an override may narrow, never widen, what it declares.

Every type the overriding operation declares must be a subtype of at least
one type declared by some operation it overrides. The rule applies to
unchecked types too: declaring one still widens the contract. Failing types
are reported but stay declared, so one bad override does not cascade into
unhandled-exception findings at its call sites.
"""

from __future__ import annotations

from typing import List, Sequence

from throwflow.core.exc_types import ExceptionType
from throwflow.core.span import Span
from throwflow.core.types_protocol import TypeRelation
from throwflow.errors import CannotOverride


def widened_types(
	declared: Sequence[ExceptionType],
	parent_declared: Sequence[ExceptionType],
	relation: TypeRelation,
) -> List[ExceptionType]:
	"""Declared types not covered by any parent-declared type, in declaration order."""
	return [
		tpe for tpe in declared
		if not any(relation.is_subtype(tpe, parent) for parent in parent_declared)
	]


def check_override(
	span: Span,
	method_name: str,
	declared: Sequence[ExceptionType],
	parent_declared: Sequence[ExceptionType],
	has_parents: bool,
	relation: TypeRelation,
) -> List[CannotOverride]:
	"""
	Return one CannotOverride per widened type. An operation that overrides
	nothing (`has_parents` false) can never widen anything.
	"""
	if not has_parents:
		return []
	return [
		CannotOverride(span=span, method_name=method_name, throwable_type=tpe)
		for tpe in widened_types(declared, parent_declared, relation)
	]


__all__ = ["check_override", "widened_types"]
