# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Shared primitives: spans, diagnostics, exception types and host capabilities."""

from throwflow.core.diagnostics import Diagnostic
from throwflow.core.exc_types import (
	ExceptionHierarchy,
	ExceptionType,
	UncheckedRoots,
	UnknownExceptionTypeError,
)
from throwflow.core.span import Span
from throwflow.core.types_protocol import NO_OVERRIDES, OverrideLookup, OverrideTable, TypeRelation

__all__ = [
	"Diagnostic",
	"ExceptionHierarchy",
	"ExceptionType",
	"NO_OVERRIDES",
	"OverrideLookup",
	"OverrideTable",
	"Span",
	"TypeRelation",
	"UncheckedRoots",
	"UnknownExceptionTypeError",
]
