# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lark front end for the host source language (grammar in grammar.lark).

Only produces lark parse trees; `throwflow.frontend.lower` turns them into the
typed tree the engine consumes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from lark import Lark, Token, Tree

from throwflow.core.span import Span

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)


def parse_tree(source: str) -> Tree:
	"""Parse `source`; lark's UnexpectedInput propagates on syntax errors."""
	return _PARSER.parse(source)


def node_name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


def span_of(node: Tree | Token | None, file: Optional[str] = None) -> Span:
	"""Best-effort Span for a parse tree node or token."""
	if node is None:
		return Span(file=file)
	if isinstance(node, Token):
		return Span(
			file=file,
			line=node.line,
			column=node.column,
			end_line=node.end_line,
			end_column=node.end_column,
		)
	meta = node.meta
	if getattr(meta, "empty", True):
		return Span(file=file)
	return Span(
		file=file,
		line=meta.line,
		column=meta.column,
		end_line=meta.end_line,
		end_column=meta.end_column,
	)


def subtrees(node: Tree, *names: str) -> list[Tree]:
	"""Direct child trees of `node` whose rule name is in `names`."""
	return [c for c in node.children if isinstance(c, Tree) and node_name(c) in names]


def subtree(node: Tree, name: str) -> Optional[Tree]:
	found = subtrees(node, name)
	return found[0] if found else None


def tokens(node: Tree, type_: str = "NAME") -> list[Token]:
	"""Direct child tokens of `node` of the given terminal type."""
	return [c for c in node.children if isinstance(c, Token) and c.type == type_]


__all__ = ["parse_tree", "node_name", "span_of", "subtrees", "subtree", "tokens"]
