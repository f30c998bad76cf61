# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Only unguarded direct type tests are statically decidable catch clauses."""

from __future__ import annotations

from throwflow.checker.catch_clauses import is_statically_decidable, partition_catches
from throwflow.core.exc_types import ExceptionHierarchy
from throwflow.tree.nodes import Block, CatchClause, ExtractorPattern, Literal, TypePattern

H = ExceptionHierarchy.with_builtins()
IO_ERR = H.register("IOErr")
EXC = H.get("Exception")


def _clause(pattern, guard=None):
	return CatchClause(pattern=pattern, guard=guard, body=Block())


def test_decidability():
	assert is_statically_decidable(_clause(TypePattern(IO_ERR, "e")))
	assert not is_statically_decidable(_clause(TypePattern(IO_ERR, "e"), guard=Literal(True)))
	assert not is_statically_decidable(_clause(ExtractorPattern("NonFatal", [TypePattern(EXC, "e")])))


def test_partition_keeps_order_and_dedupes_caught_types():
	clauses = [
		_clause(TypePattern(IO_ERR, "a")),
		_clause(ExtractorPattern("NonFatal")),
		_clause(TypePattern(EXC, "b"), guard=Literal(True)),
		_clause(TypePattern(EXC, "c")),
		_clause(TypePattern(IO_ERR, None)),
	]
	partition = partition_catches(clauses)
	assert [c.pattern.binder for c in partition.decidable] == ["a", "c", None]
	assert len(partition.undecidable) == 2
	assert partition.caught_types == (IO_ERR, EXC)


def test_partition_of_nothing():
	partition = partition_catches([])
	assert partition.caught_types == ()
