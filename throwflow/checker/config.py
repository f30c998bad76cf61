# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Run configuration: which classification strategy a validation run uses.

The strategy is selected once, before traversal starts. Hosts that pass
plugin-style option strings (`checked:strict`) go through
`parse_checked_option`; the last `checked:` option wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Type

from throwflow.core.exc_types import UncheckedRoots
from throwflow.core.types_protocol import TypeRelation
from throwflow.checker.strategies import (
	CheckedExceptionStrategy,
	FatalStrategy,
	StandardStrategy,
	StrictStrategy,
)

CHECKED_OPTION = "checked:"


class CheckedConfig(Enum):
	"""Checked exception configurations."""

	STANDARD = "standard"
	STRICT = "strict"
	FATAL = "fatal"

	@classmethod
	def from_name(cls, name: str) -> "CheckedConfig":
		try:
			return cls(name.strip().lower())
		except ValueError:
			known = ", ".join(c.value for c in cls)
			raise ValueError(f"unknown checked exception config '{name}' (expected one of: {known})") from None


_STRATEGIES: Dict[CheckedConfig, Type[CheckedExceptionStrategy]] = {
	CheckedConfig.STANDARD: StandardStrategy,
	CheckedConfig.STRICT: StrictStrategy,
	CheckedConfig.FATAL: FatalStrategy,
}

OPTIONS_HELP = (
	"  checked:standard   runtime-exception and error subtypes are unchecked (default)\n"
	"  checked:strict     only error subtypes are unchecked\n"
	"  checked:fatal      only VM-fatal errors (out-of-memory, linkage, assertion) are unchecked"
)


def make_strategy(
	checked: CheckedConfig,
	relation: TypeRelation,
	roots: UncheckedRoots,
) -> CheckedExceptionStrategy:
	return _STRATEGIES[checked](relation, roots)


def _strip_prefix(options: Sequence[str], prefix: str) -> List[str]:
	return [opt[len(prefix):] for opt in options if opt.startswith(prefix)]


def parse_checked_option(options: Sequence[str], prefix: str = "") -> Optional[CheckedConfig]:
	"""
	Return the config named by the last `checked:<name>` option, or None when
	there is none or the value is not recognised (callers then use STANDARD).
	"""
	values = [o[len(CHECKED_OPTION):] for o in _strip_prefix(options, prefix) if o.startswith(CHECKED_OPTION)]
	if not values:
		return None
	try:
		return CheckedConfig.from_name(values[-1])
	except ValueError:
		return None


def validate_options(options: Sequence[str], prefix: str = "") -> List[str]:
	"""Return one error message per unknown option or unknown checked value."""
	problems: List[str] = []
	for opt in _strip_prefix(options, prefix):
		if opt.startswith(CHECKED_OPTION):
			value = opt[len(CHECKED_OPTION):]
			if value.strip().lower() not in {c.value for c in CheckedConfig}:
				problems.append(f"Unknown checked exception value: {value}")
		else:
			problems.append(f"Unknown option: {opt}")
	return problems


@dataclass(frozen=True)
class ValidatorConfig:
	checked: CheckedConfig = CheckedConfig.STANDARD

	@classmethod
	def from_options(cls, options: Sequence[str], prefix: str = "") -> "ValidatorConfig":
		return cls(checked=parse_checked_option(options, prefix) or CheckedConfig.STANDARD)

	def strategy(self, relation: TypeRelation, roots: UncheckedRoots) -> CheckedExceptionStrategy:
		return make_strategy(self.checked, relation, roots)


__all__ = [
	"CHECKED_OPTION",
	"CheckedConfig",
	"OPTIONS_HELP",
	"ValidatorConfig",
	"make_strategy",
	"parse_checked_option",
	"validate_options",
]
