# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Propagation scope stack.

Each propagation point (function, constructor, class body, top-level unit)
owns one frame: the ordered list of candidate throws observed inside it that
have not yet been proven handled. Catch points filter the top frame; leaving
a propagation point filters by its declared types and turns whatever is left
into UnhandledThrowable findings. Leftovers are reported at the innermost
propagation point only and are never re-added to the parent frame.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence, Tuple

from throwflow.core.exc_types import ExceptionType
from throwflow.core.span import Span
from throwflow.core.types_protocol import TypeRelation
from throwflow.errors import UnhandledThrowable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateThrow:
	"""A throwable observed at `span` that is not yet known to be handled."""

	span: Span
	tpe: ExceptionType


class PropagationScopeStack:
	"""
	Stack of frames indexed by depth; mutated only through enter/add/filter/leave.

	`is_unchecked` is the run's classification strategy; unchecked candidates
	are dropped on registration and never reach a frame.
	"""

	def __init__(self, is_unchecked: Callable[[ExceptionType], bool], relation: TypeRelation) -> None:
		self._is_unchecked = is_unchecked
		self._relation = relation
		self._frames: List[List[CandidateThrow]] = []

	@property
	def depth(self) -> int:
		return len(self._frames)

	def frame(self, depth: int) -> Tuple[CandidateThrow, ...]:
		"""Snapshot of the frame at `depth` (0 = outermost)."""
		return tuple(self._frames[depth])

	def top(self) -> Tuple[CandidateThrow, ...]:
		return tuple(self._top())

	def _top(self) -> List[CandidateThrow]:
		if not self._frames:
			raise RuntimeError("no active propagation frame")
		return self._frames[-1]

	def _matches(self, tpe: ExceptionType, handled: Sequence[ExceptionType]) -> bool:
		return any(self._relation.is_subtype(tpe, h) for h in handled)

	def enter(self) -> None:
		self._frames.append([])

	def add_candidates(self, candidates: Iterable[CandidateThrow]) -> int:
		"""Append the checked candidates to the top frame; returns how many were kept."""
		frame = self._top()
		kept = [c for c in candidates if not self._is_unchecked(c.tpe)]
		frame.extend(kept)
		return len(kept)

	def filter_at(self, types: Sequence[ExceptionType]) -> int:
		"""
		Catch point: drop every top-frame candidate that is a subtype-or-equal of
		any of `types`. Returns the number of candidates removed.
		"""
		frame = self._top()
		if not types:
			return 0
		remaining = [c for c in frame if not self._matches(c.tpe, types)]
		removed = len(frame) - len(remaining)
		frame[:] = remaining
		return removed

	def leave(self, declared: Sequence[ExceptionType]) -> List[UnhandledThrowable]:
		"""
		Propagation point exit: filter by `declared`, pop the frame and return
		the leftovers as UnhandledThrowable findings in frame order.
		"""
		self.filter_at(declared)
		frame = self._frames.pop()
		logger.debug("leave frame depth=%d declared=%d unhandled=%d", len(self._frames), len(declared), len(frame))
		return [UnhandledThrowable(span=c.span, throwable_type=c.tpe) for c in frame]


__all__ = ["CandidateThrow", "PropagationScopeStack"]
