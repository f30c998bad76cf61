# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source position used by findings and diagnostics.

Hosts attach whatever location object they have via `raw`; file/line/column
are filled in best-effort so findings can be rendered without the host.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw host loc)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	def render(self) -> str:
		"""Return `file:line:col` (or the parts that are known)."""
		parts = []
		if self.file:
			parts.append(self.file)
		if self.line is not None:
			col = self.column if self.column is not None else 0
			parts.append(f"{self.line}:{col}")
		return ":".join(parts) if parts else "<unknown location>"


__all__ = ["Span"]
