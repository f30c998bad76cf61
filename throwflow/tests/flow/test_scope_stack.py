# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Propagation scope stack, exercised frame by frame."""

from __future__ import annotations

import pytest

from throwflow.checker.strategies import StandardStrategy
from throwflow.core.exc_types import ExceptionHierarchy
from throwflow.core.span import Span
from throwflow.errors import UnhandledThrowable
from throwflow.flow.scope import CandidateThrow, PropagationScopeStack

H = ExceptionHierarchy.with_builtins()
IO_ERR = H.register("IOErr")
FILE_ERR = H.register("FileErr", IO_ERR)
OTHER_ERR = H.register("OtherErr")


def _stack() -> PropagationScopeStack:
	return PropagationScopeStack(StandardStrategy(H, H.unchecked_roots()), H)


def _c(tpe, line=1) -> CandidateThrow:
	return CandidateThrow(span=Span(line=line), tpe=tpe)


def test_unchecked_candidates_are_dropped_on_registration():
	stack = _stack()
	stack.enter()
	kept = stack.add_candidates([_c(IO_ERR), _c(H.get("IllegalStateException")), _c(H.get("Error"))])
	assert kept == 1
	assert stack.top() == (_c(IO_ERR),)


def test_filter_removes_subtypes_from_top_frame_only():
	stack = _stack()
	stack.enter()
	stack.add_candidates([_c(FILE_ERR, 1)])
	stack.enter()
	stack.add_candidates([_c(FILE_ERR, 2), _c(OTHER_ERR, 3), _c(IO_ERR, 4)])
	removed = stack.filter_at([IO_ERR])
	assert removed == 2
	assert stack.top() == (_c(OTHER_ERR, 3),)
	assert stack.frame(0) == (_c(FILE_ERR, 1),)


def test_filter_is_removal_not_decrement():
	"""A candidate matching several handled types is removed exactly once."""
	stack = _stack()
	stack.enter()
	stack.add_candidates([_c(FILE_ERR)])
	assert stack.filter_at([FILE_ERR, IO_ERR, H.get("Exception")]) == 1
	assert stack.top() == ()
	assert stack.filter_at([IO_ERR]) == 0


def test_leave_reports_leftovers_in_frame_order_and_does_not_propagate():
	stack = _stack()
	stack.enter()
	stack.enter()
	stack.add_candidates([_c(OTHER_ERR, 1), _c(FILE_ERR, 2), _c(OTHER_ERR, 3)])
	errors = stack.leave([IO_ERR])
	assert errors == [
		UnhandledThrowable(span=Span(line=1), throwable_type=OTHER_ERR),
		UnhandledThrowable(span=Span(line=3), throwable_type=OTHER_ERR),
	]
	assert stack.depth == 1
	assert stack.top() == ()


def test_leave_declaring_supertype_clears_frame():
	stack = _stack()
	stack.enter()
	stack.add_candidates([_c(FILE_ERR), _c(OTHER_ERR)])
	assert stack.leave([H.get("Exception")]) == []
	assert stack.depth == 0


def test_operations_without_frame_fail():
	stack = _stack()
	with pytest.raises(RuntimeError):
		stack.add_candidates([_c(IO_ERR)])
	with pytest.raises(RuntimeError):
		stack.filter_at([IO_ERR])
