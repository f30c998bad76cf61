# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Validation findings.

Three immutable shapes, appended to a single ordered list during traversal:

  UnhandledThrowable   a type reaches a propagation point undeclared and uncaught
  CannotOverride       an override declares a type its overridden operations do not
  InvalidDeclaration   a throws marker could not be parsed into one exception type

Findings are data. Adapters either inspect them directly (`ValidationResult`)
or convert them to Diagnostics with `to_diagnostics`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Tuple, Union

from throwflow.core.diagnostics import Diagnostic
from throwflow.core.exc_types import ExceptionType
from throwflow.core.span import Span

PHASE = "exceptions"

THROWS_FORMS_NOTE = "accepted forms: @throws[T] or @throws(classOf[T]) naming one exception type"


@dataclass(frozen=True)
class UnhandledThrowable:
	"""`throwable_type` may be raised at `span` and is neither caught nor declared."""

	span: Span
	throwable_type: ExceptionType

	code = "UNHANDLED_THROWABLE"

	@property
	def message(self) -> str:
		return (
			f"unreported exception {self.throwable_type.name}; "
			"must be caught or declared to be thrown"
		)


@dataclass(frozen=True)
class CannotOverride:
	"""The overriding operation `method_name` declares a type none of its parents declare."""

	span: Span
	method_name: str
	throwable_type: ExceptionType

	code = "CANNOT_OVERRIDE"

	@property
	def message(self) -> str:
		return f"overridden method {self.method_name} does not throw {self.throwable_type.name}"


@dataclass(frozen=True)
class InvalidDeclaration:
	span: Span
	message: str

	code = "INVALID_THROWS"


ValidationError = Union[UnhandledThrowable, CannotOverride, InvalidDeclaration]


def unhandled_types(errors: Iterable[ValidationError]) -> FrozenSet[ExceptionType]:
	"""Deduplicated set of types carried by the UnhandledThrowable findings."""
	return frozenset(e.throwable_type for e in errors if isinstance(e, UnhandledThrowable))


@dataclass(frozen=True)
class ValidationResult:
	"""
	Result of one run.

	errors: all findings, in the order they were encountered
	unhandled: the distinct unhandled exception types
	"""

	errors: Tuple[ValidationError, ...] = ()
	unhandled: FrozenSet[ExceptionType] = field(default_factory=frozenset)

	@classmethod
	def from_errors(cls, errors: Iterable[ValidationError]) -> "ValidationResult":
		errs = tuple(errors)
		return cls(errors=errs, unhandled=unhandled_types(errs))

	@property
	def ok(self) -> bool:
		return not self.errors

	def unhandled_names(self) -> FrozenSet[str]:
		return frozenset(t.name for t in self.unhandled)

	def of_kind(self, kind: type) -> List[ValidationError]:
		return [e for e in self.errors if isinstance(e, kind)]


def to_diagnostic(error: ValidationError) -> Diagnostic:
	return Diagnostic(
		message=error.message,
		code=error.code,
		phase=PHASE,
		severity="error",
		span=error.span,
		notes=[THROWS_FORMS_NOTE] if isinstance(error, InvalidDeclaration) else [],
	)


def to_diagnostics(errors: Iterable[ValidationError]) -> List[Diagnostic]:
	"""One Diagnostic per finding, order preserved."""
	return [to_diagnostic(e) for e in errors]


__all__ = [
	"UnhandledThrowable",
	"CannotOverride",
	"InvalidDeclaration",
	"ValidationError",
	"ValidationResult",
	"unhandled_types",
	"to_diagnostic",
	"to_diagnostics",
]
