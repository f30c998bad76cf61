# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lower lark parse trees into the typed tree consumed by the flow engine.

Two passes over the parse tree:

1. declarations: exception types (registered into the hierarchy in dependency
   order, so a type may extend one declared later in the file), classes with
   their members, and top-level functions. Overrides are computed from the
   class graph once every class is known.
2. bodies: statements and expressions are lowered with a lexical environment
   mapping local names to their static exception type or class, which is what
   call resolution and raise typing need.

Anything the engine would not be able to interpret (unknown callee, raise of
an untyped value, unknown class in `new`) is a FrontendError carrying the
source span.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from lark import Token, Tree

from throwflow.core.exc_types import THROWABLE, ExceptionHierarchy, ExceptionType
from throwflow.core.span import Span
from throwflow.core.types_protocol import OverrideTable
from throwflow.frontend.parser import node_name, span_of, subtree, subtrees, tokens
from throwflow.tree.nodes import (
	Assign,
	Binary,
	Block,
	Call,
	CatchClause,
	ClassDef,
	ClassLiteral,
	ConstArg,
	ExtractorPattern,
	FuncDef,
	If,
	Let,
	Literal,
	Marker,
	New,
	Pattern,
	Raise,
	Ref,
	Return,
	Symbol,
	SymbolKind,
	TNode,
	Try,
	TypePattern,
	Unit,
	While,
)

logger = logging.getLogger(__name__)

CTOR_NAME = "<init>"


class FrontendError(ValueError):
	"""Source that parses but cannot be turned into a typed tree."""

	def __init__(self, message: str, span: Optional[Span] = None) -> None:
		self.span = span or Span()
		super().__init__(message)


@dataclass
class FunctionInfo:
	symbol: Symbol
	result: Optional[str] = None
	params: List[str] = field(default_factory=list)


@dataclass
class ClassInfo:
	"""Declaration-level view of a class used for resolution and overrides."""

	name: str
	symbol: Symbol
	ctor: Symbol
	ctor_params: List[str]
	parents: List[str]
	tree: Tree
	methods: Dict[str, FunctionInfo] = field(default_factory=dict)
	aux_ctors: List[FunctionInfo] = field(default_factory=list)
	# Parse tree node -> symbol, for members lowered in pass 2.
	member_symbols: Dict[int, Symbol] = field(default_factory=dict)


StaticType = Union[ExceptionType, ClassInfo, None]


@dataclass
class LoweredProgram:
	unit: Unit
	hierarchy: ExceptionHierarchy
	overrides: OverrideTable
	symbols: Dict[str, Symbol]


class _Env:
	"""Lexical scopes: local name -> static type."""

	def __init__(self) -> None:
		self._scopes: List[Dict[str, StaticType]] = [{}]

	def push(self) -> None:
		self._scopes.append({})

	def pop(self) -> None:
		self._scopes.pop()

	def bind(self, name: str, tpe: StaticType) -> None:
		self._scopes[-1][name] = tpe

	def lookup(self, name: str) -> tuple[bool, StaticType]:
		for scope in reversed(self._scopes):
			if name in scope:
				return True, scope[name]
		return False, None


def _decode_string(tok: Token) -> str:
	return tok.value[1:-1].replace('\\"', '"').replace("\\\\", "\\")


class Lowering:
	"""Pass state for one source file."""

	def __init__(self, file: Optional[str] = None, hierarchy: Optional[ExceptionHierarchy] = None) -> None:
		self.file = file
		self.hierarchy = hierarchy if hierarchy is not None else ExceptionHierarchy.with_builtins()
		self.overrides = OverrideTable()
		self.functions: Dict[str, FunctionInfo] = {}
		self.classes: Dict[str, ClassInfo] = {}
		self.symbols: Dict[str, Symbol] = {}
		self._env = _Env()
		self._class_stack: List[ClassInfo] = []
		self._ctor_symbols: Dict[Symbol, ClassInfo] = {}

	def _span(self, node: Tree | Token | None) -> Span:
		return span_of(node, self.file)

	def _error(self, message: str, node: Tree | Token | None) -> FrontendError:
		return FrontendError(message, self._span(node))

	def _add_symbol(self, symbol: Symbol, node: Tree | Token) -> None:
		if symbol.qualname in self.symbols:
			raise self._error(f"duplicate definition of '{symbol.qualname}'", node)
		self.symbols[symbol.qualname] = symbol

	# ---- entry ----------------------------------------------------------------

	def lower(self, tree: Tree) -> LoweredProgram:
		items = list(tree.children)
		self._declare_exceptions([i for i in items if isinstance(i, Tree) and node_name(i) == "exception_decl"])
		for item in items:
			if not isinstance(item, Tree):
				continue
			kind = node_name(item)
			if kind == "func_def":
				info = self._declare_function(item, owner=None)
				self.functions[info.symbol.name] = info
			elif kind == "class_def":
				self._declare_class(item, outer=None)
		self._compute_overrides()
		body: List[TNode] = []
		for item in items:
			if isinstance(item, Tree) and node_name(item) == "exception_decl":
				continue
			body.append(self._lower_item(item))
		unit = Unit(body=body, span=self._span(tree))
		logger.debug(
			"lowered %s: %d function(s), %d class(es), %d override link(s)",
			self.file or "<source>",
			len(self.functions),
			len(self.classes),
			len(self.overrides),
		)
		return LoweredProgram(unit=unit, hierarchy=self.hierarchy, overrides=self.overrides, symbols=self.symbols)

	# ---- pass 1: declarations -------------------------------------------------

	def _declare_exceptions(self, decls: List[Tree]) -> None:
		pending: List[tuple[Tree, str, str]] = []
		for decl in decls:
			names = tokens(decl)
			parent = names[1].value if len(names) > 1 else "Exception"
			pending.append((decl, names[0].value, parent))
		# Register in dependency order so parents may be declared later.
		while pending:
			remaining = []
			for decl, name, parent in pending:
				if parent in self.hierarchy:
					try:
						self.hierarchy.register(name, parent)
					except ValueError as err:
						raise self._error(str(err), decl) from None
				else:
					remaining.append((decl, name, parent))
			if len(remaining) == len(pending):
				decl, name, parent = remaining[0]
				raise self._error(f"unknown parent exception type '{parent}' for '{name}'", decl)
			pending = remaining

	def _markers(self, node: Optional[Tree]) -> tuple[Marker, ...]:
		if node is None:
			return ()
		return tuple(self._marker(m) for m in subtrees(node, "marker"))

	def _marker(self, node: Tree) -> Marker:
		name = tokens(node)[0].value
		type_args: tuple = ()
		args: tuple = ()
		targs = subtree(node, "type_args")
		if targs is not None:
			type_args = tuple(self._marker_type(tok.value) for tok in tokens(targs))
		margs = subtree(node, "marker_args")
		if margs is not None:
			args = tuple(self._marker_arg(a) for a in margs.children if isinstance(a, Tree))
		return Marker(name=name, type_args=type_args, args=args, span=self._span(node))

	def _marker_type(self, name: str) -> Union[ExceptionType, str]:
		# Unknown names stay raw; the extractor reports them.
		return self.hierarchy.lookup(name) or name

	def _marker_arg(self, node: Tree) -> Union[ClassLiteral, ConstArg]:
		kind = node_name(node)
		tok = node.children[0]
		if kind == "class_literal":
			return ClassLiteral(self._marker_type(tok.value))
		if kind == "string_arg":
			return ConstArg(_decode_string(tok))
		if kind == "number_arg":
			return ConstArg(int(tok.value))
		return ConstArg(tok.value)

	def _params(self, node: Optional[Tree]) -> List[tuple[str, str]]:
		if node is None:
			return []
		out = []
		for param in subtrees(node, "param"):
			name, tpe = tokens(param)
			out.append((name.value, tpe.value))
		return out

	def _declare_function(self, node: Tree, owner: Optional[ClassInfo]) -> FunctionInfo:
		names = tokens(node)
		name = names[0].value
		result = names[1].value if len(names) > 1 else None
		if owner is None:
			symbol = Symbol(name, SymbolKind.FUNCTION, self._markers(subtree(node, "markers")))
		else:
			symbol = Symbol(f"{owner.symbol.qualname}.{name}", SymbolKind.METHOD, self._markers(subtree(node, "markers")))
		self._add_symbol(symbol, node)
		params = [p for p, _ in self._params(subtree(node, "params_decl"))]
		return FunctionInfo(symbol=symbol, result=result, params=params)

	def _declare_class(self, node: Tree, outer: Optional[ClassInfo]) -> ClassInfo:
		name = tokens(node)[0].value
		if name in self.classes or name in self.functions:
			raise self._error(f"duplicate definition of '{name}'", node)
		qualname = f"{outer.symbol.qualname}.{name}" if outer is not None else name
		symbol = Symbol(qualname, SymbolKind.CLASS, self._markers(subtree(node, "markers")))
		ctor = Symbol(f"{qualname}.{CTOR_NAME}", SymbolKind.CONSTRUCTOR, self._markers(subtree(node, "ctor_markers")))
		self._add_symbol(symbol, node)
		self._add_symbol(ctor, node)
		extends = subtree(node, "extends_clause")
		parents = [t.value for t in tokens(extends)] if extends is not None else []
		info = ClassInfo(
			name=name,
			symbol=symbol,
			ctor=ctor,
			ctor_params=[p for p, _ in self._params(subtree(node, "params_decl"))],
			parents=parents,
			tree=node,
		)
		self.classes[name] = info
		self._ctor_symbols[ctor] = info
		body = subtree(node, "class_body")
		for member in body.children if body is not None else []:
			if not isinstance(member, Tree):
				continue
			kind = node_name(member)
			if kind == "func_def":
				method = self._declare_function(member, owner=info)
				if method.symbol.name in info.methods:
					raise self._error(f"duplicate method '{method.symbol.qualname}'", member)
				info.methods[method.symbol.name] = method
				info.member_symbols[id(member)] = method.symbol
			elif kind == "ctor_def":
				index = len(info.aux_ctors) + 1
				aux = Symbol(
					f"{qualname}.{CTOR_NAME}#{index}",
					SymbolKind.CONSTRUCTOR,
					self._markers(subtree(member, "markers")),
				)
				self._add_symbol(aux, member)
				params = [p for p, _ in self._params(subtree(member, "params_decl"))]
				info.aux_ctors.append(FunctionInfo(symbol=aux, params=params))
				info.member_symbols[id(member)] = aux
				self._ctor_symbols[aux] = info
			elif kind == "class_def":
				self._declare_class(member, outer=info)
		return info

	def _ancestors(self, info: ClassInfo) -> List[ClassInfo]:
		"""Transitive ancestors of `info`, nearest first, each once."""
		out: List[ClassInfo] = []
		seen = {info.name}
		queue = deque([info])
		while queue:
			current = queue.popleft()
			for parent_name in current.parents:
				parent = self.classes.get(parent_name)
				if parent is None:
					raise self._error(f"unknown class '{parent_name}' in extends clause of '{current.name}'", current.tree)
				if parent.name in seen:
					continue
				seen.add(parent.name)
				out.append(parent)
				queue.append(parent)
		return out

	def _compute_overrides(self) -> None:
		for info in self.classes.values():
			ancestors = self._ancestors(info)
			for name, method in info.methods.items():
				for ancestor in ancestors:
					parent = ancestor.methods.get(name)
					if parent is not None:
						self.overrides.add(method.symbol, parent.symbol)

	# ---- resolution -------------------------------------------------------------

	def _find_method(self, info: ClassInfo, name: str) -> Optional[FunctionInfo]:
		if name in info.methods:
			return info.methods[name]
		for ancestor in self._ancestors(info):
			if name in ancestor.methods:
				return ancestor.methods[name]
		return None

	def _static_type(self, type_name: Optional[str]) -> StaticType:
		if type_name is None:
			return None
		tpe = self.hierarchy.lookup(type_name)
		if tpe is not None:
			return tpe
		return self.classes.get(type_name)

	def _static_type_of(self, node: TNode) -> StaticType:
		if isinstance(node, (Call, New)):
			if node.tpe is not None:
				return node.tpe
			if isinstance(node, New):
				return self._ctor_symbols.get(node.symbol)
			info = self._function_info(node.symbol)
			return self._static_type(info.result) if info is not None else None
		if isinstance(node, Ref):
			if node.tpe is not None:
				return node.tpe
			if node.name == "this" and self._class_stack:
				return self._class_stack[-1]
			bound, tpe = self._env.lookup(node.name)
			if bound:
				return tpe
			return self.classes.get(node.name)
		return None

	def _function_info(self, symbol: Symbol) -> Optional[FunctionInfo]:
		if symbol.kind is SymbolKind.FUNCTION:
			return self.functions.get(symbol.qualname)
		for info in self.classes.values():
			for method in info.methods.values():
				if method.symbol == symbol:
					return method
		return None

	def _result_type(self, info: FunctionInfo) -> Optional[ExceptionType]:
		tpe = self._static_type(info.result)
		return tpe if isinstance(tpe, ExceptionType) else None

	def _instantiate(self, name: str, args: List[TNode], node: Tree) -> New:
		span = self._span(node)
		tpe = self.hierarchy.lookup(name)
		if tpe is not None:
			return New(Symbol(f"{name}.{CTOR_NAME}", SymbolKind.CONSTRUCTOR), args, tpe=tpe, span=span)
		info = self.classes.get(name)
		if info is None:
			raise self._error(f"unknown class '{name}'", node)
		return New(self._select_ctor(info, len(args)), args, span=span)

	def _select_ctor(self, info: ClassInfo, nargs: int) -> Symbol:
		"""Primary constructor unless only an auxiliary one matches the argument count."""
		if nargs != len(info.ctor_params):
			for aux in info.aux_ctors:
				if len(aux.params) == nargs:
					return aux.symbol
		return info.ctor

	# ---- pass 2: bodies ---------------------------------------------------------

	def _lower_item(self, node: Tree | Token) -> TNode:
		kind = node_name(node)
		if kind == "func_def":
			return self._lower_function(node, self.functions[tokens(node)[0].value])
		if kind == "class_def":
			return self._lower_class(node)
		return self._lower_stmt(node)

	def _lower_function(self, node: Tree, info: FunctionInfo) -> FuncDef:
		self._env.push()
		try:
			for pname, ptype in self._params(subtree(node, "params_decl")):
				self._env.bind(pname, self._static_type(ptype))
			body = self._lower_block_stmts(subtree(node, "block"))
		finally:
			self._env.pop()
		return FuncDef(symbol=info.symbol, body=body, params=list(info.params), span=self._span(node))

	def _lower_class(self, node: Tree) -> ClassDef:
		info = self.classes[tokens(node)[0].value]
		self._class_stack.append(info)
		self._env.push()
		try:
			for pname, ptype in self._params(subtree(node, "params_decl")):
				self._env.bind(pname, self._static_type(ptype))
			body: List[TNode] = []
			class_body = subtree(node, "class_body")
			for member in class_body.children if class_body is not None else []:
				kind = node_name(member)
				if kind == "func_def":
					method = info.methods[info.member_symbols[id(member)].name]
					body.append(self._lower_function(member, method))
				elif kind == "ctor_def":
					symbol = info.member_symbols[id(member)]
					aux = next(a for a in info.aux_ctors if a.symbol == symbol)
					body.append(self._lower_function(member, aux))
				elif kind == "class_def":
					body.append(self._lower_class(member))
				else:
					body.append(self._lower_stmt(member))
		finally:
			self._env.pop()
			self._class_stack.pop()
		return ClassDef(symbol=info.symbol, ctor=info.ctor, body=body, span=self._span(node))

	def _lower_block_stmts(self, node: Optional[Tree]) -> List[TNode]:
		if node is None:
			return []
		return [self._lower_stmt(s) for s in node.children]

	def _lower_block(self, node: Tree) -> Block:
		self._env.push()
		try:
			stmts = self._lower_block_stmts(node)
		finally:
			self._env.pop()
		return Block(stmts=stmts, span=self._span(node))

	def _lower_stmt(self, node: Tree | Token) -> TNode:
		kind = node_name(node)
		if kind == "block":
			return self._lower_block(node)
		if kind == "let_stmt":
			return self._lower_let(node)
		if kind == "assign_stmt":
			name = tokens(node)[0]
			return Assign(name.value, self._lower_expr(node.children[-1]), span=self._span(node))
		if kind == "raise_stmt":
			return self._lower_raise(node)
		if kind == "return_stmt":
			return Return(self._lower_expr(node.children[0]), span=self._span(node))
		if kind == "if_stmt":
			cond, then_node, *rest = node.children
			else_node = None
			if rest:
				else_node = self._lower_stmt(rest[0])
			return If(self._lower_expr(cond), self._lower_block(then_node), else_node, span=self._span(node))
		if kind == "while_stmt":
			cond, body = node.children
			return While(self._lower_expr(cond), self._lower_block(body), span=self._span(node))
		if kind == "try_stmt":
			return self._lower_try(node)
		if kind == "expr_stmt":
			return self._lower_expr(node.children[0])
		raise self._error(f"unsupported statement '{kind}'", node)

	def _lower_let(self, node: Tree) -> Let:
		names = tokens(node)
		value = self._lower_expr(node.children[-1])
		if len(names) > 1:
			tpe = self._static_type(names[1].value)
		else:
			tpe = self._static_type_of(value)
		self._env.bind(names[0].value, tpe)
		return Let(names[0].value, value, span=self._span(node))

	def _lower_raise(self, node: Tree) -> Raise:
		value = self._lower_expr(node.children[0])
		tpe = self._static_type_of(value)
		if not isinstance(tpe, ExceptionType):
			raise self._error("raised value has no static exception type", node)
		return Raise(value, tpe=tpe, span=self._span(node))

	def _lower_try(self, node: Tree) -> Try:
		body = self._lower_block(node.children[0])
		catches = [self._lower_catch(c) for c in subtrees(node, "catch_clause")]
		finalizer = None
		fin = subtree(node, "finally_clause")
		if fin is not None:
			finalizer = self._lower_block(fin.children[0])
		return Try(body, catches, finalizer, span=self._span(node))

	def _lower_catch(self, node: Tree) -> CatchClause:
		pattern_node, *rest = node.children
		self._env.push()
		try:
			pattern = self._lower_pattern(pattern_node)
			guard = None
			guard_node = subtree(node, "guard")
			if guard_node is not None:
				guard = self._lower_expr(guard_node.children[0])
			body = self._lower_block(rest[-1])
		finally:
			self._env.pop()
		return CatchClause(pattern, guard, body, span=self._span(node))

	def _lower_pattern(self, node: Tree) -> Pattern:
		kind = node_name(node)
		span = self._span(node)
		if kind == "type_pattern":
			binder, type_name = tokens(node)
			tpe = self.hierarchy.lookup(type_name.value)
			if tpe is None:
				raise self._error(f"unknown exception type '{type_name.value}' in catch pattern", node)
			return TypePattern(tpe, self._bind_catch(binder.value, tpe), span=span)
		if kind == "bind_pattern":
			tpe = self.hierarchy.get(THROWABLE)
			return TypePattern(tpe, self._bind_catch(tokens(node)[0].value, tpe), span=span)
		if kind == "extractor_pattern":
			name = tokens(node)[0].value
			call = None
			if name in self.functions:
				call = Call(self.functions[name].symbol, span=span)
			args = [self._lower_pattern(p) for p in node.children if isinstance(p, Tree)]
			return ExtractorPattern(name, args, call, span=span)
		raise self._error(f"unsupported pattern '{kind}'", node)

	def _bind_catch(self, binder: str, tpe: ExceptionType) -> Optional[str]:
		if binder == "_":
			return None
		self._env.bind(binder, tpe)
		return binder

	def _lower_args(self, node: Tree) -> List[TNode]:
		args = subtree(node, "args")
		if args is None:
			return []
		return [self._lower_expr(a) for a in args.children]

	def _lower_expr(self, node: Tree | Token) -> TNode:
		kind = node_name(node)
		span = self._span(node)
		if kind == "binary":
			left, op, right = node.children
			return Binary(op.value, self._lower_expr(left), self._lower_expr(right), span=span)
		if kind == "ref":
			name = node.children[0].value
			_, tpe = self._env.lookup(name)
			return Ref(name, tpe=tpe if isinstance(tpe, ExceptionType) else None, span=span)
		if kind == "this_ref":
			return Ref("this", span=span)
		if kind == "string":
			return Literal(_decode_string(node.children[0]), span=span)
		if kind == "number":
			return Literal(int(node.children[0].value), span=span)
		if kind == "true_lit":
			return Literal(True, span=span)
		if kind == "false_lit":
			return Literal(False, span=span)
		if kind == "call":
			return self._lower_call(node)
		if kind == "new_expr":
			return self._instantiate(tokens(node)[0].value, self._lower_args(node), node)
		if kind == "method_call":
			return self._lower_method_call(node)
		if kind == "this_call":
			if not self._class_stack:
				raise self._error("'this(...)' outside of a class", node)
			args = self._lower_args(node)
			return Call(self._select_ctor(self._class_stack[-1], len(args)), args, span=span)
		raise self._error(f"unsupported expression '{kind}'", node)

	def _lower_call(self, node: Tree) -> TNode:
		name = tokens(node)[0].value
		args = self._lower_args(node)
		span = self._span(node)
		for info in reversed(self._class_stack):
			method = self._find_method(info, name)
			if method is not None:
				return Call(method.symbol, args, receiver=Ref("this", span=span), tpe=self._result_type(method), span=span)
		if name in self.functions:
			func = self.functions[name]
			return Call(func.symbol, args, tpe=self._result_type(func), span=span)
		if name in self.classes or name in self.hierarchy:
			return self._instantiate(name, args, node)
		raise self._error(f"cannot resolve call to '{name}'", node)

	def _lower_method_call(self, node: Tree) -> Call:
		receiver_node = node.children[0]
		name = tokens(node)[0].value
		receiver = self._lower_expr(receiver_node)
		owner = self._static_type_of(receiver)
		if not isinstance(owner, ClassInfo):
			raise self._error(f"cannot resolve method '{name}': receiver has no known class", node)
		method = self._find_method(owner, name)
		if method is None:
			raise self._error(f"class '{owner.name}' has no method '{name}'", node)
		return Call(
			method.symbol,
			self._lower_args(node),
			receiver=receiver,
			tpe=self._result_type(method),
			span=self._span(node),
		)


def lower_program(tree: Tree, file: Optional[str] = None, hierarchy: Optional[ExceptionHierarchy] = None) -> LoweredProgram:
	return Lowering(file=file, hierarchy=hierarchy).lower(tree)


__all__ = ["FrontendError", "ClassInfo", "FunctionInfo", "LoweredProgram", "Lowering", "lower_program"]
