# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
throwflow: checked-exception flow validation over a typed tree.

The engine walks a typed tree once, collecting the exceptions each raise and
call site may produce, removing the ones caught by statically decidable catch
clauses, and reporting whatever reaches a propagation point (function, class,
compilation unit) without being declared there.

Typical use::

	from throwflow import ValidatorConfig, verify
	result = verify(tree, hierarchy, ValidatorConfig())

or, starting from source text::

	from throwflow.frontend import verify_source
	result = verify_source(text)
"""

from throwflow.checker.config import CheckedConfig, ValidatorConfig
from throwflow.core.exc_types import ExceptionHierarchy, ExceptionType
from throwflow.errors import (
	CannotOverride,
	InvalidDeclaration,
	UnhandledThrowable,
	ValidationError,
	ValidationResult,
)
from throwflow.validator import ExceptionCheckError, ThrowableValidator, check, exception_checked, verify

__all__ = [
	"CannotOverride",
	"CheckedConfig",
	"ExceptionCheckError",
	"ExceptionHierarchy",
	"ExceptionType",
	"InvalidDeclaration",
	"ThrowableValidator",
	"UnhandledThrowable",
	"ValidationError",
	"ValidationResult",
	"ValidatorConfig",
	"check",
	"exception_checked",
	"verify",
]
