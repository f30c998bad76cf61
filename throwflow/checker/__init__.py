# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Policy components consulted by the flow engine:

* classification strategies and run configuration,
* declared-throws extraction from raw markers,
* catch clause decidability,
* override compatibility.
"""

from throwflow.checker.catch_clauses import CatchPartition, is_statically_decidable, partition_catches
from throwflow.checker.config import (
	CheckedConfig,
	ValidatorConfig,
	make_strategy,
	parse_checked_option,
	validate_options,
)
from throwflow.checker.declared import (
	SUPPRESS_MARKER,
	THROWS_MARKER,
	DeclaredThrowsExtractor,
	is_suppressed,
)
from throwflow.checker.overrides import check_override, widened_types
from throwflow.checker.strategies import (
	CheckedExceptionStrategy,
	FatalStrategy,
	StandardStrategy,
	StrictStrategy,
)

__all__ = [
	"CatchPartition",
	"CheckedConfig",
	"CheckedExceptionStrategy",
	"DeclaredThrowsExtractor",
	"FatalStrategy",
	"SUPPRESS_MARKER",
	"StandardStrategy",
	"StrictStrategy",
	"THROWS_MARKER",
	"ValidatorConfig",
	"check_override",
	"is_statically_decidable",
	"is_suppressed",
	"make_strategy",
	"parse_checked_option",
	"partition_catches",
	"validate_options",
	"widened_types",
]
