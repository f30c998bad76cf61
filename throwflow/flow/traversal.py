# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Exception-flow traversal.

Single pass, depth-first, children before parents. The node shapes that
matter are:

  Unit / ClassDef / FuncDef   propagation points: push a frame, traverse,
                              pop it filtering by the declared throws
  Try                         catch point: filter the body's candidates by the
                              statically decidable clauses, then traverse
                              patterns, guards, bodies and the finalizer
  Raise                       one candidate of the raised value's static type
  Call / New                  one candidate per type declared by the target
                              and by everything the target overrides

Everything else is plain structural recursion. Findings are recorded in
source order, outer-to-inner, left-to-right; nothing is reordered.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from throwflow.checker.catch_clauses import partition_catches
from throwflow.checker.declared import DeclaredThrows, DeclaredThrowsExtractor, is_suppressed
from throwflow.checker.overrides import check_override
from throwflow.core.exc_types import ExceptionType
from throwflow.core.types_protocol import NO_OVERRIDES, OverrideLookup, TypeRelation
from throwflow.errors import InvalidDeclaration, ValidationError
from throwflow.flow.scope import CandidateThrow, PropagationScopeStack
from throwflow.tree.nodes import Call, ClassDef, FuncDef, New, Raise, TNode, Try, Unit

logger = logging.getLogger(__name__)


class ThrowFlowTraversal:
	"""
	Mutable state of one analysis run: the scope stack and the ordered findings.

	Instances are not shared between runs that may execute concurrently; each
	`run` starts from a fresh stack and an empty findings list.
	"""

	def __init__(
		self,
		is_unchecked: Callable[[ExceptionType], bool],
		relation: TypeRelation,
		overrides: OverrideLookup = NO_OVERRIDES,
	) -> None:
		self._is_unchecked = is_unchecked
		self._relation = relation
		self._overrides = overrides
		self._extractor = DeclaredThrowsExtractor()
		self._scopes = PropagationScopeStack(is_unchecked, relation)
		self._errors: List[ValidationError] = []

	def run(self, tree: TNode) -> List[ValidationError]:
		"""
		Traverse `tree` and return every finding in encounter order.

		The root is itself a propagation point that declares nothing: whatever
		can be thrown at the top of the tree is reported as unhandled.
		"""
		self._scopes = PropagationScopeStack(self._is_unchecked, self._relation)
		self._errors = []
		self._extractor.clear()
		self._scopes.enter()
		self.traverse(tree)
		self._errors.extend(self._scopes.leave(()))
		return list(self._errors)

	def traverse(self, node: Optional[TNode]) -> None:
		if node is None:
			return
		if isinstance(node, FuncDef):
			self._visit_def(node)
		elif isinstance(node, ClassDef):
			self._visit_class(node)
		elif isinstance(node, Unit):
			self._visit_unit(node)
		elif isinstance(node, Try):
			self._visit_try(node)
		elif isinstance(node, Raise):
			self._visit_raise(node)
		elif isinstance(node, (Call, New)):
			self._visit_call(node)
		elif isinstance(node, TNode):
			self._traverse_children(node)
		else:
			raise TypeError(f"expected a tree node, got {type(node).__name__}")

	def _traverse_children(self, node: TNode) -> None:
		for child in node.children():
			self.traverse(child)

	def _record(self, declared: DeclaredThrows | InvalidDeclaration) -> DeclaredThrows:
		# An unparseable declaration counts as declaring nothing.
		if isinstance(declared, InvalidDeclaration):
			self._errors.append(declared)
			return ()
		return declared

	# Propagation points

	def _visit_unit(self, node: Unit) -> None:
		self._scopes.enter()
		self._traverse_children(node)
		self._errors.extend(self._scopes.leave(()))

	def _visit_class(self, node: ClassDef) -> None:
		if is_suppressed(node.symbol):
			logger.debug("skipping suppressed class %s", node.symbol)
			return
		self._scopes.enter()
		# Primary constructor markers are read before the body so a malformed
		# class declaration is reported ahead of anything inside it.
		declared = self._record(self._extractor.extract([node.ctor], node.span, node.symbol.name))
		if is_suppressed(node.ctor):
			logger.debug("skipping body of %s (suppressed constructor)", node.symbol)
		else:
			self._traverse_children(node)
		self._errors.extend(self._scopes.leave(declared))

	def _visit_def(self, node: FuncDef) -> None:
		symbol = node.symbol
		if is_suppressed(symbol):
			logger.debug("skipping suppressed definition %s", symbol)
			return
		self._scopes.enter()
		self._traverse_children(node)
		declared = self._declared_for_definition(node)
		self._errors.extend(self._scopes.leave(declared))

	def _declared_for_definition(self, node: FuncDef) -> DeclaredThrows:
		symbol = node.symbol
		own = self._extractor.extract([symbol], node.span, symbol.name)
		if isinstance(own, InvalidDeclaration):
			self._errors.append(own)
			return ()
		parents = tuple(self._overrides.overridden(symbol))
		inherited = self._extractor.extract(parents, node.span, symbol.name)
		if isinstance(inherited, InvalidDeclaration):
			self._errors.append(inherited)
			return ()
		self._errors.extend(
			check_override(node.span, symbol.name, own, inherited, bool(parents), self._relation)
		)
		# Widened types stay declared; see throwflow.checker.overrides.
		return own + inherited

	# Catch points

	def _visit_try(self, node: Try) -> None:
		self.traverse(node.body)
		partition = partition_catches(node.catches)
		removed = self._scopes.filter_at(partition.caught_types)
		logger.debug(
			"catch point: %d decidable, %d undecidable clause(s), %d candidate(s) removed",
			len(partition.decidable),
			len(partition.undecidable),
			removed,
		)
		# Anything raised in patterns, guards, handlers or the finalizer is
		# outside the protected block.
		for clause in node.catches:
			self.traverse(clause.pattern)
			self.traverse(clause.guard)
			self.traverse(clause.body)
		self.traverse(node.finalizer)

	# Throw sites

	def _visit_raise(self, node: Raise) -> None:
		self._traverse_children(node)
		tpe = node.raised_type
		if tpe is None:
			raise TypeError(f"raise at {node.span.render()} has no static exception type")
		self._scopes.add_candidates([CandidateThrow(span=node.span, tpe=tpe)])

	def _visit_call(self, node: Call | New) -> None:
		self._traverse_children(node)
		symbol = node.symbol
		own = self._extractor.extract([symbol], node.span, symbol.qualname)
		if isinstance(own, InvalidDeclaration):
			self._errors.append(own)
			return
		inherited = self._extractor.extract(tuple(self._overrides.overridden(symbol)), node.span, symbol.qualname)
		if isinstance(inherited, InvalidDeclaration):
			self._errors.append(inherited)
			return
		self._scopes.add_candidates(CandidateThrow(span=node.span, tpe=t) for t in own + inherited)

	@property
	def errors(self) -> Sequence[ValidationError]:
		return tuple(self._errors)


__all__ = ["ThrowFlowTraversal"]
