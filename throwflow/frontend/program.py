# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Source-level entry points: text in, typed tree / findings out."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from throwflow.checker.config import ValidatorConfig
from throwflow.core.exc_types import ExceptionHierarchy
from throwflow.core.types_protocol import OverrideTable
from throwflow.errors import ValidationError, ValidationResult
from throwflow.frontend.lower import lower_program
from throwflow.frontend.parser import parse_tree
from throwflow.tree.nodes import Symbol, Unit
from throwflow.validator import ThrowableValidator


@dataclass
class HostProgram:
	"""A lowered source file together with the capabilities the validator needs."""

	unit: Unit
	hierarchy: ExceptionHierarchy
	overrides: OverrideTable
	symbols: Dict[str, Symbol]

	def validator(self, config: Optional[ValidatorConfig] = None) -> ThrowableValidator:
		return ThrowableValidator.for_hierarchy(self.hierarchy, config=config, overrides=self.overrides)


def parse_source(
	source: str,
	file: Optional[str] = None,
	hierarchy: Optional[ExceptionHierarchy] = None,
) -> HostProgram:
	"""
	Parse and lower `source`.

	Raises lark's UnexpectedInput for syntax errors and FrontendError for
	source that cannot be typed. Exception types declared in the source are
	registered into `hierarchy` (a fresh builtin hierarchy by default).
	"""
	tree = parse_tree(source)
	lowered = lower_program(tree, file=file, hierarchy=hierarchy)
	return HostProgram(
		unit=lowered.unit,
		hierarchy=lowered.hierarchy,
		overrides=lowered.overrides,
		symbols=lowered.symbols,
	)


def check_source(
	source: str,
	config: Optional[ValidatorConfig] = None,
	file: Optional[str] = None,
) -> List[ValidationError]:
	program = parse_source(source, file=file)
	return program.validator(config).check(program.unit)


def verify_source(
	source: str,
	config: Optional[ValidatorConfig] = None,
	file: Optional[str] = None,
) -> ValidationResult:
	return ValidationResult.from_errors(check_source(source, config=config, file=file))


__all__ = ["HostProgram", "parse_source", "check_source", "verify_source"]
