# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the validator, front-end and driver.

Validation errors are data; adapters that want compiler-style output convert
them into Diagnostics (see `throwflow.errors.to_diagnostics`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Phase label: "exceptions" for validation findings, "parser" for front-end
	# failures. JSON output and tests key off it.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Span() denotes unknown.
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def render(self) -> str:
		"""Human-readable `loc: severity: message` line."""
		return f"{self.span.render()}: {self.severity}: {self.message}"

	def to_json(self) -> Dict[str, Any]:
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


__all__ = ["Diagnostic"]
