# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declared-throws extraction: the only place raw throws markers are interpreted.

Two encodings are accepted for a throws marker, each naming exactly one type:

  @throws[T]  /  @throws[T]("cause")     direct type argument
  @throws(classOf[T])                    single class-literal argument

A single class-literal argument is checked first and wins over any type
argument.

Anything else (no type, several type arguments, an unresolved type name) is
a parse failure. Extraction short-circuits on the first malformed marker and
discards what was parsed so far: a node is never reported safe on a partial
parse.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from throwflow.core.exc_types import ExceptionType
from throwflow.core.span import Span
from throwflow.errors import InvalidDeclaration
from throwflow.tree.nodes import ClassLiteral, Marker, Symbol

THROWS_MARKER = "throws"
SUPPRESS_MARKER = "unchecked"

DeclaredThrows = Tuple[ExceptionType, ...]


def is_suppressed(symbol: Optional[Symbol]) -> bool:
	"""True if `symbol` carries the suppress-checking marker."""
	if symbol is None:
		return False
	return any(m.name == SUPPRESS_MARKER for m in symbol.markers)


def throws_markers(markers: Iterable[Marker]) -> List[Marker]:
	return [m for m in markers if m.name == THROWS_MARKER]


def parse_throws_marker(marker: Marker) -> Optional[ExceptionType]:
	"""Return the single type named by `marker`, or None if its shape is unsupported."""
	if len(marker.args) == 1 and isinstance(marker.args[0], ClassLiteral):
		tpe = marker.args[0].tpe
		return tpe if isinstance(tpe, ExceptionType) else None
	if len(marker.type_args) == 1:
		tpe = marker.type_args[0]
		return tpe if isinstance(tpe, ExceptionType) else None
	return None


@dataclass(frozen=True)
class _Parsed:
	types: DeclaredThrows = ()
	bad_marker: Optional[Marker] = None


def _parse_all(markers: Sequence[Marker]) -> _Parsed:
	accum: List[ExceptionType] = []
	for marker in throws_markers(markers):
		tpe = parse_throws_marker(marker)
		if tpe is None:
			return _Parsed(bad_marker=marker)
		accum.append(tpe)
	return _Parsed(types=tuple(accum))


class DeclaredThrowsExtractor:
	"""
	Extracts declared throws for symbols, caching the parse per symbol set.

	The cached value is the parse itself; InvalidDeclaration findings are built
	per use so each owner (definition or call site) reports at its own span.
	"""

	def __init__(self) -> None:
		self._cache: Dict[Tuple[Symbol, ...], _Parsed] = {}

	def extract(
		self,
		symbols: Sequence[Symbol],
		span: Span,
		owner: str,
	) -> Union[DeclaredThrows, InvalidDeclaration]:
		"""
		Extract the flattened declared throws of `symbols` (markers in order).

		Returns the declared types, or an InvalidDeclaration positioned at
		`span` naming the first malformed marker and `owner`.
		"""
		key = tuple(symbols)
		parsed = self._cache.get(key)
		if parsed is None:
			markers = [m for sym in symbols for m in sym.markers]
			parsed = _parse_all(markers)
			self._cache[key] = parsed
		if parsed.bad_marker is not None:
			return InvalidDeclaration(
				span=span,
				message=f"Unsupported @{THROWS_MARKER} marker '{parsed.bad_marker}' on `{owner}`",
			)
		return parsed.types

	def clear(self) -> None:
		self._cache.clear()


__all__ = [
	"THROWS_MARKER",
	"SUPPRESS_MARKER",
	"DeclaredThrows",
	"DeclaredThrowsExtractor",
	"is_suppressed",
	"parse_throws_marker",
	"throws_markers",
]
