# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Validation entry points.

`ThrowableValidator` binds the host capabilities (subtype relation, unchecked
roots, override lookup) to a run configuration. Each `check` builds a fresh
traversal, so one validator may be reused across independent trees.

Two adapter styles are supported:

* data: `verify()` returns a ValidationResult (errors + unhandled set);
* diagnostics: `exception_checked()` converts findings into Diagnostics and
  either appends them to a caller-provided list or raises.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from throwflow.checker.config import ValidatorConfig
from throwflow.core.diagnostics import Diagnostic
from throwflow.core.exc_types import ExceptionHierarchy, UncheckedRoots
from throwflow.core.types_protocol import NO_OVERRIDES, OverrideLookup, TypeRelation
from throwflow.errors import ValidationError, ValidationResult, to_diagnostics
from throwflow.flow.traversal import ThrowFlowTraversal
from throwflow.tree.nodes import TNode

logger = logging.getLogger(__name__)


class ExceptionCheckError(RuntimeError):
	"""Raised by `exception_checked` when no diagnostics sink was supplied."""

	def __init__(self, diagnostics: List[Diagnostic]) -> None:
		self.diagnostics = diagnostics
		lines = "\n".join(d.render() for d in diagnostics)
		super().__init__(f"{len(diagnostics)} exception check error(s):\n{lines}")


class ThrowableValidator:
	"""Finds all unhandled throwables (and declaration problems) in a tree."""

	def __init__(
		self,
		relation: TypeRelation,
		roots: UncheckedRoots,
		config: Optional[ValidatorConfig] = None,
		overrides: OverrideLookup = NO_OVERRIDES,
	) -> None:
		self.config = config or ValidatorConfig()
		self._relation = relation
		self._overrides = overrides
		self._strategy = self.config.strategy(relation, roots)

	@classmethod
	def for_hierarchy(
		cls,
		hierarchy: ExceptionHierarchy,
		config: Optional[ValidatorConfig] = None,
		overrides: OverrideLookup = NO_OVERRIDES,
	) -> "ThrowableValidator":
		return cls(hierarchy, hierarchy.unchecked_roots(), config=config, overrides=overrides)

	@property
	def strategy(self):
		return self._strategy

	def check(self, tree: TNode) -> List[ValidationError]:
		"""
		Traverse `tree` and return all findings in encounter order.

		The top-level node is a propagation point: anything that may be thrown at
		the top of the tree is unhandled. All throwable types are reported, not
		only subtypes of the exception root, subject to the strategy.
		"""
		traversal = ThrowFlowTraversal(self._strategy, self._relation, self._overrides)
		errors = traversal.run(tree)
		logger.info("exception check (%s): %d finding(s)", self.config.checked.value, len(errors))
		return errors

	def verify(self, tree: TNode) -> ValidationResult:
		return ValidationResult.from_errors(self.check(tree))


def check(
	tree: TNode,
	hierarchy: ExceptionHierarchy,
	config: Optional[ValidatorConfig] = None,
	overrides: OverrideLookup = NO_OVERRIDES,
) -> List[ValidationError]:
	return ThrowableValidator.for_hierarchy(hierarchy, config, overrides).check(tree)


def verify(
	tree: TNode,
	hierarchy: ExceptionHierarchy,
	config: Optional[ValidatorConfig] = None,
	overrides: OverrideLookup = NO_OVERRIDES,
) -> ValidationResult:
	"""Validate `tree` and return the findings as data."""
	return ThrowableValidator.for_hierarchy(hierarchy, config, overrides).verify(tree)


def exception_checked(
	tree: TNode,
	hierarchy: ExceptionHierarchy,
	config: Optional[ValidatorConfig] = None,
	overrides: OverrideLookup = NO_OVERRIDES,
	diagnostics: Optional[List[Diagnostic]] = None,
) -> TNode:
	"""
	Validate `tree` and return it unchanged.

	Findings become Diagnostics: appended to `diagnostics` when provided,
	otherwise raised together as ExceptionCheckError.
	"""
	found = to_diagnostics(check(tree, hierarchy, config, overrides))
	if found:
		if diagnostics is None:
			raise ExceptionCheckError(found)
		diagnostics.extend(found)
	return tree


__all__ = ["ExceptionCheckError", "ThrowableValidator", "check", "verify", "exception_checked"]
