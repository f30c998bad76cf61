# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Typed tree consumed by the exception-flow engine.

The set of node shapes is closed: propagation points (Unit, ClassDef,
FuncDef), the try construct (Try/CatchClause and its patterns), explicit
raises, call/instantiation sites, and plain structural nodes. Every node
exposes `children()` in source order; the traversal relies on that order for
deterministic left-to-right reporting.

Symbols carry the raw declaration markers exactly as the host encoded them.
Only `throwflow.checker.declared` interprets markers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, List, Optional, Tuple, Union

from throwflow.core.exc_types import ExceptionType
from throwflow.core.span import Span


# Declaration markers

@dataclass(frozen=True)
class ClassLiteral:
	"""Class-literal marker argument: `classOf[T]`."""

	tpe: Union[ExceptionType, str]

	def __str__(self) -> str:
		return f"classOf[{self.tpe}]"


@dataclass(frozen=True)
class ConstArg:
	"""Any other constant marker argument (string cause, number, bare name)."""

	value: Any

	def __str__(self) -> str:
		if isinstance(self.value, str):
			return f'"{self.value}"'
		return str(self.value)


MarkerArg = Union[ClassLiteral, ConstArg]


@dataclass(frozen=True)
class Marker:
	"""
	A raw declaration marker attached to a symbol, e.g. `@throws[IOErr]("why")`.

	type_args hold resolved ExceptionTypes when the host could resolve them and
	the raw name (str) otherwise.
	"""

	name: str
	type_args: Tuple[Union[ExceptionType, str], ...] = ()
	args: Tuple[MarkerArg, ...] = ()
	span: Span = field(default_factory=Span, compare=False)

	def __str__(self) -> str:
		out = f"@{self.name}"
		if self.type_args:
			out += "[" + ", ".join(str(t) for t in self.type_args) + "]"
		if self.args:
			out += "(" + ", ".join(str(a) for a in self.args) + ")"
		return out


class SymbolKind(Enum):
	FUNCTION = auto()
	METHOD = auto()
	CONSTRUCTOR = auto()
	CLASS = auto()


@dataclass(frozen=True)
class Symbol:
	"""Host symbol for a callable, constructor or class (identity = qualname)."""

	qualname: str
	kind: SymbolKind = SymbolKind.FUNCTION
	markers: Tuple[Marker, ...] = ()

	@property
	def name(self) -> str:
		return self.qualname.rsplit(".", 1)[-1]

	def __str__(self) -> str:
		return self.qualname


# Base node kinds

class TNode:
	"""Base class for all typed-tree nodes."""

	def children(self) -> List["TNode"]:
		return []


def _present(*nodes: Optional[TNode]) -> List[TNode]:
	return [n for n in nodes if n is not None]


# Propagation points

@dataclass
class Unit(TNode):
	"""Top-level compilation unit; declares nothing."""

	body: List[TNode]
	span: Span = field(default_factory=Span)

	def children(self) -> List[TNode]:
		return list(self.body)


@dataclass
class ClassDef(TNode):
	"""
	Class definition. `body` holds the primary constructor's code (field
	initializers, statements) and member definitions; `ctor` is the primary
	constructor symbol whose markers apply to that code.
	"""

	symbol: Symbol
	ctor: Symbol
	body: List[TNode]
	span: Span = field(default_factory=Span)

	def children(self) -> List[TNode]:
		return list(self.body)


@dataclass
class FuncDef(TNode):
	"""Function, method or auxiliary constructor definition."""

	symbol: Symbol
	body: List[TNode]
	params: List[str] = field(default_factory=list)
	span: Span = field(default_factory=Span)

	@property
	def is_constructor(self) -> bool:
		return self.symbol.kind is SymbolKind.CONSTRUCTOR

	def children(self) -> List[TNode]:
		return list(self.body)


# Try construct

class Pattern(TNode):
	"""Base class for catch patterns."""


@dataclass
class TypePattern(Pattern):
	"""Direct type test: `catch (e: T)`. Statically decidable."""

	tpe: ExceptionType
	binder: Optional[str] = None
	span: Span = field(default_factory=Span)


@dataclass
class ExtractorPattern(Pattern):
	"""
	Value-dependent extractor pattern: `catch (NonFatal(e))`.

	Its match cannot be decided from the tree. `call` is the extractor
	invocation when the host resolved one; it is traversed like any call.
	"""

	name: str
	args: List[Pattern] = field(default_factory=list)
	call: Optional[TNode] = None
	span: Span = field(default_factory=Span)

	def children(self) -> List[TNode]:
		return _present(self.call) + list(self.args)


@dataclass
class CatchClause(TNode):
	pattern: Pattern
	guard: Optional[TNode]
	body: TNode
	span: Span = field(default_factory=Span)

	@property
	def is_guarded(self) -> bool:
		return self.guard is not None

	def children(self) -> List[TNode]:
		return _present(self.pattern, self.guard, self.body)


@dataclass
class Try(TNode):
	body: TNode
	catches: List[CatchClause] = field(default_factory=list)
	finalizer: Optional[TNode] = None
	span: Span = field(default_factory=Span)

	def children(self) -> List[TNode]:
		return [self.body, *self.catches] + _present(self.finalizer)


# Raise and call sites

@dataclass
class Raise(TNode):
	"""
	Explicit raise. The candidate type is `tpe`, the static type of the raise
	expression; when unset it falls back to the raised value's own `tpe`.
	"""

	value: TNode
	tpe: Optional[ExceptionType] = None
	span: Span = field(default_factory=Span)

	@property
	def raised_type(self) -> Optional[ExceptionType]:
		if self.tpe is not None:
			return self.tpe
		return getattr(self.value, "tpe", None)

	def children(self) -> List[TNode]:
		return [self.value]


@dataclass
class Call(TNode):
	"""Call of a host-resolved callable: `receiver.symbol(args...)`."""

	symbol: Symbol
	args: List[TNode] = field(default_factory=list)
	receiver: Optional[TNode] = None
	tpe: Optional[ExceptionType] = None
	span: Span = field(default_factory=Span)

	def children(self) -> List[TNode]:
		return _present(self.receiver) + list(self.args)


@dataclass
class New(TNode):
	"""Instantiation; `symbol` is the invoked constructor."""

	symbol: Symbol
	args: List[TNode] = field(default_factory=list)
	tpe: Optional[ExceptionType] = None
	span: Span = field(default_factory=Span)

	def children(self) -> List[TNode]:
		return list(self.args)


# Plain structural nodes

@dataclass
class Block(TNode):
	stmts: List[TNode] = field(default_factory=list)
	span: Span = field(default_factory=Span)

	def children(self) -> List[TNode]:
		return list(self.stmts)


@dataclass
class If(TNode):
	cond: TNode
	then_block: TNode
	else_block: Optional[TNode] = None
	span: Span = field(default_factory=Span)

	def children(self) -> List[TNode]:
		return _present(self.cond, self.then_block, self.else_block)


@dataclass
class While(TNode):
	cond: TNode
	body: TNode
	span: Span = field(default_factory=Span)

	def children(self) -> List[TNode]:
		return [self.cond, self.body]


@dataclass
class Let(TNode):
	name: str
	value: TNode
	span: Span = field(default_factory=Span)

	def children(self) -> List[TNode]:
		return [self.value]


@dataclass
class Assign(TNode):
	name: str
	value: TNode
	span: Span = field(default_factory=Span)

	def children(self) -> List[TNode]:
		return [self.value]


@dataclass
class Return(TNode):
	value: Optional[TNode] = None
	span: Span = field(default_factory=Span)

	def children(self) -> List[TNode]:
		return _present(self.value)


@dataclass
class Ref(TNode):
	"""Reference to a local, parameter or catch binder."""

	name: str
	tpe: Optional[ExceptionType] = None
	span: Span = field(default_factory=Span)


@dataclass
class Literal(TNode):
	value: Any
	span: Span = field(default_factory=Span)


@dataclass
class Binary(TNode):
	op: str
	left: TNode
	right: TNode
	span: Span = field(default_factory=Span)

	def children(self) -> List[TNode]:
		return [self.left, self.right]


@dataclass
class Opaque(TNode):
	"""Any other host construct; only its children matter to the engine."""

	kind: str
	parts: List[TNode] = field(default_factory=list)
	span: Span = field(default_factory=Span)

	def children(self) -> List[TNode]:
		return list(self.parts)


__all__ = [
	"ClassLiteral",
	"ConstArg",
	"MarkerArg",
	"Marker",
	"SymbolKind",
	"Symbol",
	"TNode",
	"Unit",
	"ClassDef",
	"FuncDef",
	"Pattern",
	"TypePattern",
	"ExtractorPattern",
	"CatchClause",
	"Try",
	"Raise",
	"Call",
	"New",
	"Block",
	"If",
	"While",
	"Let",
	"Assign",
	"Return",
	"Ref",
	"Literal",
	"Binary",
	"Opaque",
]
