# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Catch clause decidability.

Only a clause with no guard and a direct type-test pattern can be proven to
catch its type from the tree alone. Guarded clauses and extractor patterns
depend on runtime values and are treated as catching nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from throwflow.core.exc_types import ExceptionType
from throwflow.tree.nodes import CatchClause, TypePattern


def is_statically_decidable(clause: CatchClause) -> bool:
	return clause.guard is None and isinstance(clause.pattern, TypePattern)


@dataclass(frozen=True)
class CatchPartition:
	decidable: Tuple[CatchClause, ...] = ()
	undecidable: Tuple[CatchClause, ...] = ()

	@property
	def caught_types(self) -> Tuple[ExceptionType, ...]:
		"""Types caught by the decidable clauses, first occurrence order."""
		seen: List[ExceptionType] = []
		for clause in self.decidable:
			tpe = clause.pattern.tpe  # type: ignore[attr-defined]
			if tpe not in seen:
				seen.append(tpe)
		return tuple(seen)


def partition_catches(catches: Sequence[CatchClause]) -> CatchPartition:
	decidable: List[CatchClause] = []
	undecidable: List[CatchClause] = []
	for clause in catches:
		if is_statically_decidable(clause):
			decidable.append(clause)
		else:
			undecidable.append(clause)
	return CatchPartition(decidable=tuple(decidable), undecidable=tuple(undecidable))


__all__ = ["CatchPartition", "is_statically_decidable", "partition_catches"]
